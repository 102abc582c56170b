from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from kanban_forecast.forecasting.domain.errors import IndeterminateThroughputError

if TYPE_CHECKING:
    from kanban_forecast.forecasting.domain.roadmap import Project, Roadmap


@dataclass(frozen=True)
class ThroughputPerDay:
    """Number of work items finished per working day.

    Any value in [0.0, inf] is accepted; NaN and negative values are not.
    """

    number_of_work_items_per_day: float

    def __post_init__(self) -> None:
        value = float(self.number_of_work_items_per_day)
        if math.isnan(value) or value < 0.0:
            raise ValueError(
                f"number_of_work_items_per_day must be in range [0.0, inf], got {value!r}."
            )
        object.__setattr__(self, "number_of_work_items_per_day", value)

    def __add__(self, other: ThroughputPerDay) -> ThroughputPerDay:
        if not isinstance(other, ThroughputPerDay):
            return NotImplemented
        return ThroughputPerDay(self.number_of_work_items_per_day + other.number_of_work_items_per_day)

    def __truediv__(self, denominator: float) -> ThroughputPerDay:
        denominator = float(denominator)
        if math.isinf(self.number_of_work_items_per_day) and denominator == math.inf:
            raise IndeterminateThroughputError(
                "Cannot divide an infinite throughput by infinite, as the result is indeterminate."
            )
        return ThroughputPerDay(self.number_of_work_items_per_day / denominator)

    def __str__(self) -> str:
        return f"{self.number_of_work_items_per_day} / day"


@dataclass(frozen=True)
class InputSample:
    """One historical throughput observation."""

    throughput: ThroughputPerDay


@dataclass(frozen=True)
class WorkEstimate:
    """Estimated number of working days to finish the work of one entity."""

    identifier: str
    estimated_number_of_working_days_required: float
    is_indeterminate: bool = False

    def __post_init__(self) -> None:
        days = float(self.estimated_number_of_working_days_required)
        if math.isnan(days) or days < 0.0:
            raise ValueError(
                "estimated_number_of_working_days_required: "
                "Estimate of working days should be greater or equal to 0."
            )
        object.__setattr__(self, "estimated_number_of_working_days_required", days)

    @classmethod
    def for_project(cls, project: Project, days: float) -> WorkEstimate:
        if project is None:
            raise TypeError("project must not be None")
        return cls(project.name, days, project.has_work_to_be_completed)

    @classmethod
    def for_roadmap(cls, roadmap: Roadmap, days: float) -> WorkEstimate:
        if roadmap is None:
            raise TypeError("roadmap must not be None")
        return cls(roadmap.label, days, roadmap.has_work_to_be_completed)

    def __str__(self) -> str:
        suffix = " [Indeterminate]" if self.is_indeterminate else ""
        return f"{self.estimated_number_of_working_days_required} working day(s){suffix}"


class RandomIndexSource(Protocol):
    def random_index(self, count: int) -> int:
        """Return a uniformly random integer in [0, count)."""
        ...
