from __future__ import annotations

import logging

import pandas as pd

from h5inspector.errors import EmptyFileError, FileReadError
from h5inspector.uploads import check_extension
from h5inspector.types import Dataset


LOGGER = logging.getLogger(__name__)
DATASET_SUFFIX = ".txt"
DELIMITER = ";"


def _split_fields(line: str) -> list[str]:
    return [cell.strip() for cell in line.split(DELIMITER)]


def parse_dataset(text: str, name: str = "") -> Dataset:
    """Parse semicolon-separated text: first non-blank line is the header row."""
    lines = [line for line in text.split("\n") if line.strip() != ""]
    if not lines:
        raise EmptyFileError("The selected file is empty.")
    headers = _split_fields(lines[0])
    rows = [_split_fields(line) for line in lines[1:]]
    return Dataset(name=name, headers=headers, rows=rows)


def read_dataset(filename: str, data: bytes) -> Dataset:
    check_extension(filename, DATASET_SUFFIX, "dataset")
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise FileReadError("Could not read the selected file.") from exc
    dataset = parse_dataset(text, name=filename)
    if dataset.is_ragged:
        LOGGER.warning("Dataset %s has rows that do not match its %d headers", filename, len(dataset.headers))
    LOGGER.info("Parsed dataset %s: %d columns, %d rows", filename, len(dataset.headers), dataset.row_count)
    return dataset


def _display_columns(headers: list[str], width: int) -> list[str]:
    cols: list[str] = []
    seen: set[str] = set()
    for i in range(width):
        base = headers[i] if i < len(headers) and headers[i] else f"column_{i + 1}"
        label = base
        n = 2
        while label in seen:
            label = f"{base} ({n})"
            n += 1
        seen.add(label)
        cols.append(label)
    return cols


def to_frame(dataset: Dataset, limit: int | None = 5) -> pd.DataFrame:
    """First `limit` rows as a table; ragged rows are padded with empty cells."""
    rows = dataset.rows if limit is None else dataset.rows[:limit]
    width = max([len(dataset.headers)] + [len(r) for r in rows])
    padded = [list(r) + [""] * (width - len(r)) for r in rows]
    return pd.DataFrame(padded, columns=_display_columns(dataset.headers, width))
