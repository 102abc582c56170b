from __future__ import annotations

from typing import Sequence

from kanban_forecast.forecasting.domain.errors import InvalidStateError
from kanban_forecast.forecasting.domain.models import WorkEstimate


class TimeTillCompletionEstimationsCollection:
    """Fixed-capacity table of Monte Carlo results.

    One row per simulation: the roadmap estimate followed by the project
    estimates. Project column `i` carries the same identifier in every row.
    """

    def __init__(self, number_of_simulations: int, number_of_projects_in_roadmap: int) -> None:
        if number_of_simulations < 1:
            raise ValueError("number_of_simulations: Number of simulations should be at least 1.")
        if number_of_projects_in_roadmap < 1:
            raise ValueError(
                "number_of_projects_in_roadmap: Number of projects in roadmap should be at least 1."
            )
        self._number_of_simulations = int(number_of_simulations)
        self._number_of_projects_in_roadmap = int(number_of_projects_in_roadmap)
        self._roadmap_estimations: list[WorkEstimate] = []
        self._project_estimations: list[list[WorkEstimate]] = [
            [] for _ in range(self._number_of_projects_in_roadmap)
        ]

    @property
    def number_of_simulations(self) -> int:
        return self._number_of_simulations

    @property
    def number_of_projects_in_roadmap(self) -> int:
        return self._number_of_projects_in_roadmap

    @property
    def is_full(self) -> bool:
        return len(self._roadmap_estimations) >= self._number_of_simulations

    @property
    def roadmap_estimations(self) -> tuple[WorkEstimate, ...]:
        return tuple(self._roadmap_estimations)

    @property
    def project_identifiers(self) -> tuple[str, ...]:
        """Identifier of each project column; empty until the first row is added."""
        if not self._roadmap_estimations:
            return ()
        return tuple(column[0].identifier for column in self._project_estimations)

    def __len__(self) -> int:
        return len(self._roadmap_estimations)

    def __getitem__(self, project_index: int) -> tuple[WorkEstimate, ...]:
        self._check_project_index(project_index)
        return tuple(self._project_estimations[project_index])

    def add_estimations_for_simulation(
        self,
        roadmap_estimate: WorkEstimate,
        project_estimates: Sequence[WorkEstimate],
    ) -> None:
        if roadmap_estimate is None:
            raise TypeError("roadmap_estimate must not be None")
        if project_estimates is None:
            raise TypeError("project_estimates must not be None")
        if any(e is None for e in project_estimates):
            raise TypeError("project_estimates must not contain None")
        if self.is_full:
            raise InvalidStateError("Adding these estimations would exceed the expected number of simulations.")
        if len(project_estimates) != self._number_of_projects_in_roadmap:
            raise ValueError(
                f"project_estimates: Expected {self._number_of_projects_in_roadmap} project estimate(s), "
                f"but got provided {len(project_estimates)}."
            )
        if self._roadmap_estimations:
            for column, estimate in zip(self._project_estimations, project_estimates):
                if estimate.identifier != column[0].identifier:
                    raise ValueError(
                        "project_estimates: A project estimate's identifier mismatches the expected "
                        f"project's identifier ('{estimate.identifier}' != '{column[0].identifier}')."
                    )

        self._roadmap_estimations.append(roadmap_estimate)
        for column, estimate in zip(self._project_estimations, project_estimates):
            column.append(estimate)

    def get_estimations_for_simulation(
        self,
        simulation_index: int,
    ) -> tuple[WorkEstimate, tuple[WorkEstimate, ...]]:
        self._check_simulation_index(simulation_index)
        return (
            self._roadmap_estimations[simulation_index],
            tuple(column[simulation_index] for column in self._project_estimations),
        )

    def get_roadmap_estimation_for_simulation(self, simulation_index: int) -> WorkEstimate:
        self._check_simulation_index(simulation_index)
        return self._roadmap_estimations[simulation_index]

    def get_project_estimation_for_simulation(self, project_index: int, simulation_index: int) -> WorkEstimate:
        self._check_project_index(project_index)
        self._check_simulation_index(simulation_index)
        return self._project_estimations[project_index][simulation_index]

    def _check_project_index(self, project_index: int) -> None:
        upper = self._number_of_projects_in_roadmap - 1
        if not 0 <= project_index <= upper:
            raise IndexError(f"Project index must be in range [0, {upper}].")

    def _check_simulation_index(self, simulation_index: int) -> None:
        upper = len(self._roadmap_estimations) - 1
        if not 0 <= simulation_index <= upper:
            if upper < 0:
                raise IndexError("Simulation index out of range: no simulations have been added.")
            raise IndexError(f"Simulation index must be in range [0, {upper}].")
