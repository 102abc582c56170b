from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import Iterable, Sequence

from kanban_forecast.forecasting.domain.errors import InvalidStateError

DEFAULT_PROJECT_NAME = "Project"
DEFAULT_ROADMAP_LABEL = "Roadmap"


class Project:
    """A named, weighted unit of backlog work.

    The higher the priority weight, the more priority the project gets in
    being worked on. Instances are mutable and belong to a single trial.
    """

    __slots__ = ("_name", "_priority_weight", "_number_of_work_items_remaining")

    def __init__(
        self,
        number_of_work_items_remaining: int,
        priority_weight: int = 0,
        name: str = DEFAULT_PROJECT_NAME,
    ) -> None:
        if not isinstance(name, str):
            raise TypeError("name: Project name should be a string.")
        if isinstance(number_of_work_items_remaining, bool) or not isinstance(
            number_of_work_items_remaining, numbers.Integral
        ):
            raise TypeError(
                "number_of_work_items_remaining: Number of remaining work items should be an integer."
            )
        if isinstance(priority_weight, bool) or not isinstance(priority_weight, numbers.Integral):
            raise TypeError("priority_weight: Priority weight should be an integer.")
        if number_of_work_items_remaining < 0:
            raise ValueError(
                "number_of_work_items_remaining: Number of remaining work items cannot be negative."
            )
        self._name = name
        self._priority_weight = int(priority_weight)
        self._number_of_work_items_remaining = int(number_of_work_items_remaining)

    @property
    def name(self) -> str:
        return self._name

    @property
    def priority_weight(self) -> int:
        return self._priority_weight

    @property
    def number_of_work_items_remaining(self) -> int:
        return self._number_of_work_items_remaining

    @property
    def has_work_to_be_completed(self) -> bool:
        return self._number_of_work_items_remaining > 0

    def complete_work_item(self) -> None:
        if not self.has_work_to_be_completed:
            raise InvalidStateError(f"Project '{self._name}' has no more work to be completed.")
        self._number_of_work_items_remaining -= 1

    def __repr__(self) -> str:
        return (
            f"Project(name={self._name!r}, priority_weight={self._priority_weight}, "
            f"remaining={self._number_of_work_items_remaining})"
        )


@dataclass(frozen=True)
class PriorityTier:
    """Projects of a roadmap sharing one priority weight.

    `project_indices` point into the owning roadmap's fixed project ordering.
    """

    priority_weight: int
    project_indices: tuple[int, ...]

    def indices_with_work(self, projects: Sequence[Project]) -> list[int]:
        return [i for i in self.project_indices if projects[i].has_work_to_be_completed]


class Roadmap:
    """The prioritized set of projects simulated in one trial.

    Projects are ordered by descending priority weight; projects sharing a
    weight keep the order in which they were given. That ordering is fixed
    for the lifetime of the roadmap and is the column order of the
    per-project results.
    """

    def __init__(self, projects: Iterable[Project], label: str = DEFAULT_ROADMAP_LABEL) -> None:
        if projects is None:
            raise TypeError("projects must not be None")
        given = list(projects)
        _validate_projects(given)

        weights = sorted({p.priority_weight for p in given}, reverse=True)
        ordered: list[Project] = []
        tiers: list[PriorityTier] = []
        for weight in weights:
            members = [p for p in given if p.priority_weight == weight]
            start = len(ordered)
            ordered.extend(members)
            tiers.append(PriorityTier(weight, tuple(range(start, len(ordered)))))

        self._label = label
        self._projects: tuple[Project, ...] = tuple(ordered)
        self._tiers: tuple[PriorityTier, ...] = tuple(tiers)

    @property
    def label(self) -> str:
        return self._label

    @property
    def projects(self) -> tuple[Project, ...]:
        return self._projects

    @property
    def tiers(self) -> tuple[PriorityTier, ...]:
        return self._tiers

    @property
    def has_work_to_be_completed(self) -> bool:
        return any(p.has_work_to_be_completed for p in self._projects)

    @property
    def total_of_work_remaining(self) -> int:
        return sum(p.number_of_work_items_remaining for p in self._projects)

    def eligible_project_indices(self) -> list[int]:
        """Indices of the projects with work in the highest tier that still has work.

        Lower tiers are not visible while a higher tier has unfinished work.
        """
        for tier in self._tiers:
            indices = tier.indices_with_work(self._projects)
            if indices:
                return indices
        return []

    def eligible_projects(self) -> list[Project]:
        return [self._projects[i] for i in self.eligible_project_indices()]

    def __repr__(self) -> str:
        return f"Roadmap(label={self._label!r}, projects={list(self._projects)!r})"


def _validate_projects(projects: Sequence[Project]) -> None:
    names: set[str] = set()
    for p in projects:
        if p is None:
            raise ValueError("projects: Sequence of projects for roadmap cannot contain None elements.")
        if not p.has_work_to_be_completed:
            raise ValueError(
                "projects: Roadmap should contain only projects that have work to be completed."
            )
        if p.name in names:
            raise ValueError(
                "projects: Sequence of projects for roadmap cannot contain multiple projects with the same name."
            )
        names.add(p.name)
    if not names:
        raise ValueError("projects: Roadmap should contain at least one project.")
