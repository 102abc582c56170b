from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Protocol, Sequence

from kanban_forecast.forecasting.domain.errors import InvalidStateError
from kanban_forecast.forecasting.domain.estimations import TimeTillCompletionEstimationsCollection
from kanban_forecast.forecasting.domain.models import InputSample, RandomIndexSource
from kanban_forecast.forecasting.domain.roadmap import Roadmap
from kanban_forecast.forecasting.simulator.time_till_completion import TimeTillCompletionEstimator

logger = logging.getLogger(__name__)

SimulationCallback = Callable[[int, int], None]


class RoadmapConfigurationSource(Protocol):
    """Anything that can build a fresh, independent roadmap on demand."""

    @property
    def projects(self) -> Sequence[object]:
        ...

    def to_roadmap(self) -> Roadmap:
        ...


@dataclass
class MonteCarloTimeTillCompletionEstimator:
    """Runs independent trials of the single-trial estimator and collects their rows."""

    number_of_simulations: int
    maximum_number_of_iterations: int
    input_samples: Sequence[InputSample]
    random_source: RandomIndexSource

    def __post_init__(self) -> None:
        if self.number_of_simulations < 1:
            raise ValueError("number_of_simulations: Number of simulations should be at least 1.")
        if self.maximum_number_of_iterations < 1:
            raise ValueError(
                "maximum_number_of_iterations: Maximum number of iterations should be at least 1."
            )
        if self.input_samples is None:
            raise TypeError("input_samples must not be None")
        if self.random_source is None:
            raise TypeError("random_source must not be None")

    def estimate(
        self,
        roadmap_configuration: RoadmapConfigurationSource,
        on_simulation_completed: SimulationCallback | None = None,
    ) -> TimeTillCompletionEstimationsCollection:
        """Run all trials and return one result row per trial.

        Every trial works on its own roadmap built from the configuration, so
        no project state is shared between trials. `on_simulation_completed`
        is called with (completed, total) after each trial.
        """
        if len(self.input_samples) == 0:
            raise InvalidStateError("At least 1 datapoint of input samples is required for estimation.")

        trial_estimator = TimeTillCompletionEstimator(
            input_samples=self.input_samples,
            random_source=self.random_source,
            maximum_number_of_iterations=self.maximum_number_of_iterations,
        )
        results = TimeTillCompletionEstimationsCollection(
            self.number_of_simulations,
            len(roadmap_configuration.projects),
        )

        logger.info(
            "Starting %d simulation(s) with %d input sample(s), iteration cap %d",
            self.number_of_simulations,
            len(self.input_samples),
            self.maximum_number_of_iterations,
        )
        for i in range(self.number_of_simulations):
            roadmap = roadmap_configuration.to_roadmap()
            roadmap_estimate, *project_estimates = trial_estimator.estimate(roadmap)
            results.add_estimations_for_simulation(roadmap_estimate, project_estimates)
            logger.debug("Simulation %d: %s", i, roadmap_estimate)
            if on_simulation_completed is not None:
                on_simulation_completed(i + 1, self.number_of_simulations)

        logger.info("Finished %d simulation(s)", len(results))
        return results
