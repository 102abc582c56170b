from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from kanban_forecast.forecasting.domain.models import InputSample, RandomIndexSource, ThroughputPerDay

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmpiricalThroughputSampler:
    """Empirical bootstrap over historical daily throughput (draws with replacement)."""

    samples: Sequence[InputSample]
    random_source: RandomIndexSource

    def sample_daily_throughput(self) -> ThroughputPerDay:
        idx = self.random_source.random_index(len(self.samples))
        return self.samples[idx].throughput


def input_samples_from_values(values: Sequence[float]) -> list[InputSample]:
    return [InputSample(throughput=ThroughputPerDay(v)) for v in values]


def mean_throughput(samples: Sequence[InputSample]) -> ThroughputPerDay | None:
    if not samples:
        return None
    total = ThroughputPerDay(0.0)
    for s in samples:
        total += s.throughput
    return total / len(samples)


def corrected_sample_standard_deviation(samples: Sequence[InputSample]) -> float | None:
    """Bessel-corrected standard deviation of the sampled throughput."""
    if not samples:
        return None
    if len(samples) == 1:
        return 0.0
    values = np.array([s.throughput.number_of_work_items_per_day for s in samples], dtype=float)
    if not np.all(np.isfinite(values)):
        logger.debug("Infinite throughput sample present; standard deviation is undefined")
        return math.inf
    return float(np.std(values, ddof=1))
