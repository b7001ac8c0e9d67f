# src/blockflow/core/transforms/statistics.py
"""Per-column summary statistics."""

from __future__ import annotations

import statistics
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from blockflow.contracts.dataset import Dataset, cell_key, infer_column_type, is_missing
from blockflow.contracts.enums import ColumnType
from blockflow.core.transforms.values import ProgressCallback, coerce_number


@dataclass(frozen=True, slots=True)
class ColumnStatistics:
    column: str
    count: int
    null_count: int
    unique_count: int
    data_type: ColumnType
    min: float | None = None
    max: float | None = None
    mean: float | None = None
    median: float | None = None

    def as_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "count": self.count,
            "nullCount": self.null_count,
            "uniqueCount": self.unique_count,
            "dataType": str(self.data_type),
        }
        if self.data_type == ColumnType.NUMBER:
            payload.update(min=self.min, max=self.max, mean=self.mean, median=self.median)
        return payload


def column_statistics(column: str, values: Sequence[Any]) -> ColumnStatistics:
    present = [value for value in values if not is_missing(value)]
    data_type = infer_column_type(values)
    result = ColumnStatistics(
        column=column,
        count=len(values),
        null_count=len(values) - len(present),
        unique_count=len({cell_key(value) for value in present}),
        data_type=data_type,
    )
    if data_type != ColumnType.NUMBER:
        return result
    numbers = [n for n in (coerce_number(value) for value in present) if n is not None]
    if not numbers:
        return result
    return ColumnStatistics(
        column=column,
        count=result.count,
        null_count=result.null_count,
        unique_count=result.unique_count,
        data_type=data_type,
        min=min(numbers),
        max=max(numbers),
        mean=statistics.fmean(numbers),
        median=statistics.median(numbers),
    )


def calculate_statistics(
    dataset: Dataset,
    columns: Sequence[str] | None = None,
    *,
    progress: ProgressCallback | None = None,
) -> dict[str, ColumnStatistics]:
    """Statistics for ``columns`` (default: every column), keyed by column name.

    Raises:
        MissingColumnError: If a requested column is absent.
    """
    selected = list(dataset.columns) if columns is None else list(columns)
    result: dict[str, ColumnStatistics] = {}
    for position, column in enumerate(selected, start=1):
        result[column] = column_statistics(column, dataset.column_values(column))
        if progress is not None:
            progress(position / len(selected) * 100, f"Analyzed column {column}")
    return result
