from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

from kanban_forecast.forecasting.domain.errors import InvalidStateError
from kanban_forecast.forecasting.domain.models import InputSample, RandomIndexSource, WorkEstimate
from kanban_forecast.forecasting.domain.roadmap import Roadmap
from kanban_forecast.forecasting.priors.throughput import EmpiricalThroughputSampler

logger = logging.getLogger(__name__)


@dataclass
class TimeTillCompletionEstimator:
    """Runs one trial: depletes a roadmap day by day with resampled throughput.

    Each simulated day draws a historical throughput sample, spends the whole
    work items it affords on the currently eligible priority tier (a random
    project per work item) and carries the fractional remainder over to the
    next day. The loop stops when the roadmap is done or after
    `maximum_number_of_iterations` days; in the latter case the estimates are
    indeterminate.
    """

    input_samples: Sequence[InputSample]
    random_source: RandomIndexSource
    maximum_number_of_iterations: int

    def __post_init__(self) -> None:
        if self.input_samples is None:
            raise TypeError("input_samples must not be None")
        if self.random_source is None:
            raise TypeError("random_source must not be None")
        if self.maximum_number_of_iterations < 1:
            raise ValueError(
                "maximum_number_of_iterations: Maximum number of iterations should be at least 1."
            )
        self._sampler = EmpiricalThroughputSampler(self.input_samples, self.random_source)

    def estimate(self, roadmap: Roadmap) -> list[WorkEstimate]:
        """Estimate the working days to finish `roadmap`, consuming it.

        Returns the roadmap estimate first, then one estimate per project in
        the roadmap's project ordering.
        """
        if roadmap is None:
            raise TypeError("roadmap must not be None")
        if not roadmap.has_work_to_be_completed:
            raise ValueError("roadmap: Roadmap should have work to be completed.")
        if len(self.input_samples) == 0:
            raise InvalidStateError("At least 1 datapoint of input samples is required for estimation.")

        projects = roadmap.projects
        days_per_project = [0.0] * len(projects)
        days_for_roadmap = 0.0
        leftover = 0.0
        iteration = 0

        while True:
            throughput = self._sampler.sample_daily_throughput().number_of_work_items_per_day + leftover
            remaining = roadmap.total_of_work_remaining
            day_consumed = 1.0 if throughput <= remaining else remaining / throughput

            had_work = [p.has_work_to_be_completed for p in projects]
            worked: set[int] = set()

            # An infinite day finishes everything that is left.
            items_today = remaining if math.isinf(throughput) else math.floor(throughput)
            for _ in range(items_today):
                eligible = roadmap.eligible_project_indices()
                if not eligible:
                    break
                idx = eligible[self.random_source.random_index(len(eligible))]
                projects[idx].complete_work_item()
                worked.add(idx)

            for i in range(len(projects)):
                if i in worked:
                    days_per_project[i] += day_consumed
                elif had_work[i]:
                    days_per_project[i] += 1.0

            leftover = 0.0 if math.isinf(throughput) else throughput - items_today
            days_for_roadmap += day_consumed
            iteration += 1

            if not roadmap.has_work_to_be_completed or iteration >= self.maximum_number_of_iterations:
                break

        if roadmap.has_work_to_be_completed:
            logger.debug(
                "Trial hit the iteration cap (%d) with %d work item(s) remaining",
                self.maximum_number_of_iterations,
                roadmap.total_of_work_remaining,
            )

        estimates = [WorkEstimate.for_roadmap(roadmap, days_for_roadmap)]
        estimates.extend(WorkEstimate.for_project(p, d) for p, d in zip(projects, days_per_project))
        return estimates
