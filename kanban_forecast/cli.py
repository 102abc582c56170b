from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Optional

import typer

from kanban_forecast.adapters.csv.input_samples_csv import load_input_samples
from kanban_forecast.common.logging_config import configure_logging
from kanban_forecast.common.progress_ui import progress_ui
from kanban_forecast.forecasting.config import EXAMPLE_CONFIG_TOML, ForecastConfig
from kanban_forecast.forecasting.domain.errors import ForecastingError
from kanban_forecast.forecasting.priors.throughput import (
    corrected_sample_standard_deviation,
    mean_throughput,
)
from kanban_forecast.forecasting.services.forecasting_service import ForecastingService, ForecastSummary


app = typer.Typer(add_completion=False, help="Forecast time till completion of a prioritized backlog.")


def _fail(message: str) -> typer.Exit:
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(code=1)


def _format_percentiles(by_percentile: Mapping[int, float]) -> str:
    return "  ".join(f"p{p}={days:.2f}" for p, days in by_percentile.items())


def _print_summary(summary: ForecastSummary, roadmap_label: str) -> None:
    typer.echo(f"Simulations: {summary.number_of_simulations}")
    typer.echo(f"Indeterminate: {100.0 * summary.share_indeterminate:.1f}%")
    typer.echo(f"{roadmap_label}: {_format_percentiles(summary.roadmap_days_by_percentile)}")
    for identifier, by_percentile in summary.project_days_by_percentile.items():
        typer.echo(f"- {identifier}: {_format_percentiles(by_percentile)}")


@app.command()
def forecast(
    config: str = typer.Option("forecast_config.toml", help="Path to forecast_config.toml"),
    samples: Optional[str] = typer.Option(None, help="Override input_samples_path"),
    output: Optional[str] = typer.Option(None, help="Override output_path"),
    seed: Optional[int] = typer.Option(None, help="Override rng_seed"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    log_dir: Optional[str] = typer.Option(None, help="Also write logs to <log-dir>/run.log"),
) -> None:
    """Run a Monte Carlo forecast for the configured roadmap."""
    configure_logging(logging.DEBUG if verbose else logging.INFO, log_dir=log_dir)

    config_path = Path(config).expanduser()
    try:
        cfg = ForecastConfig.load(config_path)
    except FileNotFoundError:
        raise _fail(f"Config file not found: {config_path}")
    except ValueError as exc:
        raise _fail(f"Invalid configuration in {config_path}:\n{exc}")

    overrides: dict[str, object] = {}
    if samples is not None:
        overrides["input_samples_path"] = samples
    if output is not None:
        overrides["output_path"] = output
    if seed is not None:
        overrides["rng_seed"] = seed
    if overrides:
        cfg = cfg.model_copy(update=overrides)

    service = ForecastingService(config=cfg)
    try:
        input_samples = service.load_input_samples()
        with progress_ui() as ui:
            tracker = ui.simulation_tracker(cfg.number_of_simulations)
            outcome = service.run(input_samples, on_simulation_completed=tracker)
    except (ForecastingError, ValueError) as exc:
        raise _fail(str(exc))

    _print_summary(outcome.summary, cfg.roadmap.label)
    if cfg.output_path:
        typer.echo(f"Wrote estimations to {cfg.resolved_output_path()}")


@app.command()
def stats(
    samples: str = typer.Argument(..., help="';'-delimited input samples file"),
) -> None:
    """Print the mean and standard deviation of the historical throughput."""
    try:
        input_samples = load_input_samples(Path(samples).expanduser())
    except ForecastingError as exc:
        raise _fail(str(exc))

    mean = mean_throughput(input_samples)
    std = corrected_sample_standard_deviation(input_samples)
    typer.echo(f"Samples: {len(input_samples)}")
    typer.echo(f"Mean throughput: {mean if mean is not None else 'n/a'}")
    typer.echo(f"Corrected sample standard deviation: {std if std is not None else 'n/a'}")


@app.command()
def init_config(
    path: str = typer.Argument(
        "forecast_config.toml",
        help="Where to write the forecast configuration TOML",
    ),
) -> None:
    """Write an example forecast_config.toml."""
    out = Path(path).expanduser()
    if out.exists():
        raise typer.BadParameter(f"Refusing to overwrite existing file: {out}")

    out.write_text(EXAMPLE_CONFIG_TOML, encoding="utf-8")
    typer.echo(f"Wrote {out} (edit it, then run: kanban-forecast forecast --config {out})")


if __name__ == "__main__":
    app()
