from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import TextIO

from kanban_forecast.forecasting.domain.estimations import TimeTillCompletionEstimationsCollection
from kanban_forecast.forecasting.formatting.estimations_table import estimations_to_table

logger = logging.getLogger(__name__)

CSV_DELIMITER = ";"


def write_estimations(
    estimations: TimeTillCompletionEstimationsCollection,
    target: TextIO,
    include_project_columns: bool = True,
) -> None:
    """Write estimations as ';'-delimited text. `target` is not closed."""
    table = estimations_to_table(estimations, include_project_columns=include_project_columns)
    writer = csv.writer(target, delimiter=CSV_DELIMITER, lineterminator="\n")
    writer.writerow(table.headers)
    writer.writerows(table.rows)


def export_estimations(
    estimations: TimeTillCompletionEstimationsCollection,
    path: Path,
    include_project_columns: bool = True,
) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as f:
        write_estimations(estimations, f, include_project_columns=include_project_columns)
    logger.info("Wrote %d simulation(s) to %s", len(estimations), path)
