from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest
from typer.testing import CliRunner

from kanban_forecast.cli import app


runner = CliRunner()


@pytest.fixture(autouse=True)
def _reset_root_logging() -> Iterator[None]:
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()


def _write_inputs(tmp_path: Path) -> tuple[Path, Path]:
    samples = tmp_path / "throughput.csv"
    samples.write_text("Date;NumberOfCompletedWorkItems\n2024-01-01;2\n2024-01-02;3\n", encoding="utf-8")
    config = tmp_path / "forecast_config.toml"
    config.write_text(
        "\n".join(
            [
                "number_of_simulations = 20",
                "maximum_number_of_iterations = 50",
                f'input_samples_path = "{samples.as_posix()}"',
                "",
                "[[roadmap.projects]]",
                'name = "A"',
                "number_of_work_items_to_be_completed = 6",
                "priority_weight = 1",
                "",
                "[[roadmap.projects]]",
                'name = "B"',
                "number_of_work_items_to_be_completed = 4",
            ]
        ),
        encoding="utf-8",
    )
    return config, samples


def test_init_config_writes_example_and_refuses_to_overwrite(tmp_path: Path) -> None:
    target = tmp_path / "forecast_config.toml"

    first = runner.invoke(app, ["init-config", str(target)])
    second = runner.invoke(app, ["init-config", str(target)])

    assert first.exit_code == 0
    assert "Checkout redesign" in target.read_text(encoding="utf-8")
    assert second.exit_code != 0


def test_forecast_prints_summary_and_exports(tmp_path: Path) -> None:
    config, _ = _write_inputs(tmp_path)
    output = tmp_path / "out" / "estimations.csv"

    result = runner.invoke(
        app,
        ["forecast", "--config", str(config), "--output", str(output), "--seed", "3"],
    )

    assert result.exit_code == 0, result.output
    assert "Simulations: 20" in result.output
    assert "Indeterminate: 0.0%" in result.output
    assert "- A: p50=" in result.output
    assert output.exists()
    assert len(output.read_text(encoding="utf-8").splitlines()) == 21


def test_forecast_fails_without_config_file(tmp_path: Path) -> None:
    result = runner.invoke(app, ["forecast", "--config", str(tmp_path / "nope.toml")])

    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_forecast_fails_on_missing_samples(tmp_path: Path) -> None:
    config, _ = _write_inputs(tmp_path)

    result = runner.invoke(app, ["forecast", "--config", str(config), "--samples", str(tmp_path / "missing.csv")])

    assert result.exit_code == 1
    assert "Failed to read the file" in result.output


def test_forecast_rejects_invalid_configuration(tmp_path: Path) -> None:
    config = tmp_path / "forecast_config.toml"
    config.write_text("number_of_simulations = 0\n", encoding="utf-8")

    result = runner.invoke(app, ["forecast", "--config", str(config)])

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_stats_prints_throughput_statistics(tmp_path: Path) -> None:
    _, samples = _write_inputs(tmp_path)

    result = runner.invoke(app, ["stats", str(samples)])

    assert result.exit_code == 0
    assert "Samples: 2" in result.output
    assert "Mean throughput: 2.5 / day" in result.output


def test_forecast_writes_run_log(tmp_path: Path) -> None:
    config, _ = _write_inputs(tmp_path)
    log_dir = tmp_path / "logs"

    result = runner.invoke(app, ["forecast", "--config", str(config), "--log-dir", str(log_dir)])

    assert result.exit_code == 0, result.output
    assert "Starting 20 simulation(s)" in (log_dir / "run.log").read_text(encoding="utf-8")


def test_forecast_reports_malformed_config(tmp_path: Path) -> None:
    config = tmp_path / "forecast_config.toml"
    config.write_text("[roadmap\n", encoding="utf-8")

    result = runner.invoke(app, ["forecast", "--config", str(config)])

    assert result.exit_code == 1
    assert "is not valid TOML" in result.output
