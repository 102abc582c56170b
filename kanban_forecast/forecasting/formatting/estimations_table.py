from __future__ import annotations

from dataclasses import dataclass

from kanban_forecast.forecasting.domain.estimations import TimeTillCompletionEstimationsCollection
from kanban_forecast.forecasting.domain.models import WorkEstimate


def days_column_header(identifier: str) -> str:
    return f"Number of days till completion of '{identifier}' in simulation"


def indeterminate_column_header(identifier: str) -> str:
    return f"Is '{identifier}' estimation indeterminate"


@dataclass(frozen=True)
class EstimationsTable:
    """Estimations flattened into a header and one row per simulation."""

    headers: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]


def _cells(estimate: WorkEstimate) -> tuple[str, str]:
    return repr(estimate.estimated_number_of_working_days_required), str(estimate.is_indeterminate)


def estimations_to_table(
    estimations: TimeTillCompletionEstimationsCollection,
    include_project_columns: bool = True,
) -> EstimationsTable:
    if estimations is None:
        raise TypeError("estimations must not be None")
    if len(estimations) == 0:
        raise ValueError("estimations: Work estimations should have at least 1 simulation.")

    identifiers = [estimations.get_roadmap_estimation_for_simulation(0).identifier]
    if include_project_columns:
        identifiers.extend(estimations.project_identifiers)

    headers: list[str] = []
    for identifier in identifiers:
        headers.append(days_column_header(identifier))
        headers.append(indeterminate_column_header(identifier))

    rows: list[tuple[str, ...]] = []
    for i in range(len(estimations)):
        roadmap_estimate, project_estimates = estimations.get_estimations_for_simulation(i)
        row = list(_cells(roadmap_estimate))
        if include_project_columns:
            for estimate in project_estimates:
                row.extend(_cells(estimate))
        rows.append(tuple(row))

    return EstimationsTable(headers=tuple(headers), rows=tuple(rows))
