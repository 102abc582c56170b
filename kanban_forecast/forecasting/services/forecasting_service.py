from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Sequence

import numpy as np

from kanban_forecast.adapters.csv.estimations_csv import export_estimations
from kanban_forecast.adapters.csv.input_samples_csv import load_input_samples
from kanban_forecast.common.seeding import NumpyRandomIndexSource
from kanban_forecast.forecasting.config import ForecastConfig
from kanban_forecast.forecasting.domain.estimations import TimeTillCompletionEstimationsCollection
from kanban_forecast.forecasting.domain.models import InputSample, RandomIndexSource, WorkEstimate
from kanban_forecast.forecasting.simulator.monte_carlo import (
    MonteCarloTimeTillCompletionEstimator,
    SimulationCallback,
)

logger = logging.getLogger(__name__)

SUMMARY_PERCENTILES: tuple[int, ...] = (50, 85, 95)


@dataclass(frozen=True)
class ForecastSummary:
    number_of_simulations: int
    share_indeterminate: float
    roadmap_days_by_percentile: Mapping[int, float]
    project_days_by_percentile: Mapping[str, Mapping[int, float]]


@dataclass(frozen=True)
class ForecastOutcome:
    estimations: TimeTillCompletionEstimationsCollection
    summary: ForecastSummary


def _percentiles(estimates: Sequence[WorkEstimate]) -> dict[int, float]:
    days = np.array([e.estimated_number_of_working_days_required for e in estimates], dtype=float)
    values = np.percentile(days, SUMMARY_PERCENTILES)
    return {p: float(v) for p, v in zip(SUMMARY_PERCENTILES, values)}


def summarize(estimations: TimeTillCompletionEstimationsCollection) -> ForecastSummary:
    """Percentiles of the simulated completion times.

    Indeterminate trials are included with their capped day count, so the
    percentiles are lower bounds whenever `share_indeterminate` > 0.
    """
    if len(estimations) == 0:
        raise ValueError("estimations: Cannot summarize an empty collection.")

    roadmap_estimates = estimations.roadmap_estimations
    indeterminate = np.array([e.is_indeterminate for e in roadmap_estimates], dtype=bool)
    per_project = {
        identifier: _percentiles(estimations[i])
        for i, identifier in enumerate(estimations.project_identifiers)
    }
    return ForecastSummary(
        number_of_simulations=len(estimations),
        share_indeterminate=float(np.mean(indeterminate)),
        roadmap_days_by_percentile=_percentiles(roadmap_estimates),
        project_days_by_percentile=per_project,
    )


@dataclass
class ForecastingService:
    """Forecast use case: historical samples + roadmap configuration -> estimations."""

    config: ForecastConfig
    random_source: RandomIndexSource | None = None

    _random_source: RandomIndexSource = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.random_source is None:
            self._random_source = NumpyRandomIndexSource.from_seed(self.config.rng_seed)
        else:
            self._random_source = self.random_source

    def load_input_samples(self) -> list[InputSample]:
        path = self.config.resolved_input_samples_path()
        if path is None:
            raise ValueError("input_samples_path must be configured to load input samples.")
        return load_input_samples(path)

    def run(
        self,
        input_samples: Sequence[InputSample],
        on_simulation_completed: SimulationCallback | None = None,
    ) -> ForecastOutcome:
        estimator = MonteCarloTimeTillCompletionEstimator(
            number_of_simulations=self.config.number_of_simulations,
            maximum_number_of_iterations=self.config.maximum_number_of_iterations,
            input_samples=input_samples,
            random_source=self._random_source,
        )
        estimations = estimator.estimate(self.config.roadmap, on_simulation_completed)
        summary = summarize(estimations)
        if summary.share_indeterminate > 0.0:
            logger.warning(
                "%.1f%% of simulations hit the iteration cap of %d; estimates are lower bounds",
                100.0 * summary.share_indeterminate,
                self.config.maximum_number_of_iterations,
            )

        output_path = self.config.resolved_output_path()
        if output_path is not None:
            export_estimations(
                estimations,
                output_path,
                include_project_columns=self.config.include_project_columns,
            )
        return ForecastOutcome(estimations=estimations, summary=summary)
