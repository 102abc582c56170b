from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import TextIO

from kanban_forecast.forecasting.domain.errors import InputSamplesReadError
from kanban_forecast.forecasting.domain.models import InputSample, ThroughputPerDay

logger = logging.getLogger(__name__)

CSV_DELIMITER = ";"
THROUGHPUT_COLUMN = "NumberOfCompletedWorkItems"


def read_input_samples(source: TextIO) -> list[InputSample]:
    """Read input samples from ';'-delimited text.

    The header must contain a `NumberOfCompletedWorkItems` column; other
    columns are ignored. Values are parsed culture invariant ('.' decimal).
    """
    if source is None:
        raise TypeError("source must not be None")

    reader = csv.DictReader(source, delimiter=CSV_DELIMITER)
    fieldnames = [f.strip() for f in (reader.fieldnames or [])]
    if THROUGHPUT_COLUMN not in fieldnames:
        raise InputSamplesReadError(
            f"Invalid header. It must contain a column with the name '{THROUGHPUT_COLUMN}' "
            f"and use '{CSV_DELIMITER}' as delimiter."
        )
    reader.fieldnames = fieldnames

    samples: list[InputSample] = []
    for line_number, row in enumerate(reader, start=2):
        raw = (row.get(THROUGHPUT_COLUMN) or "").strip()
        try:
            value = float(raw)
        except ValueError as exc:
            raise InputSamplesReadError(
                f"Failed to parse a value in the '{THROUGHPUT_COLUMN}' column on line {line_number}. "
                "All elements must be a number."
            ) from exc
        try:
            samples.append(InputSample(throughput=ThroughputPerDay(value)))
        except ValueError as exc:
            raise InputSamplesReadError(f"Invalid data was provided on line {line_number}. Details: {exc}") from exc

    return samples


def load_input_samples(path: Path) -> list[InputSample]:
    try:
        with path.open("r", encoding="utf-8-sig", newline="") as f:
            samples = read_input_samples(f)
    except OSError as exc:
        raise InputSamplesReadError(f"Failed to read the file '{path}': {exc}") from exc
    logger.info("Read %d input sample(s) from %s", len(samples), path)
    return samples
