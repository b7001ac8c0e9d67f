# src/blockflow/core/transforms/sorting.py
"""Stable multi-key sort with null handling.

Nulls are the smallest value: first when ascending, last when descending.
Numbers compare numerically, temporal values by instant, everything else
by case-insensitive locale-aware text.
"""

from __future__ import annotations

from collections.abc import Mapping
from functools import cmp_to_key
from typing import Any

from blockflow.contracts.config_base import OperationConfig, OperationConfigError
from blockflow.contracts.dataset import Dataset, Row
from blockflow.contracts.enums import SortDirection
from blockflow.core.transforms.values import (
    ProgressCallback,
    compare_text,
    instant,
    is_number,
    is_temporal,
    to_text,
)


class SortKey(OperationConfig):
    column: str = ""
    direction: SortDirection = SortDirection.ASC


class SortConfig(OperationConfig):
    sort_configs: tuple[SortKey, ...]

    @classmethod
    def from_node_config(cls, config: Mapping[str, Any]) -> SortConfig:
        """Parse either config shape, dropping keys without a column.

        Raises:
            OperationConfigError: If no usable sort key remains.
        """
        raw = config.get("sortConfigs", config.get("sort_configs"))
        if raw is not None:
            keys = [SortKey.from_dict(entry) for entry in raw if isinstance(entry, Mapping)]
            keys = [key for key in keys if key.column]
            if not keys:
                raise OperationConfigError("No valid sort configurations provided")
            return cls(sort_configs=tuple(keys))
        if not config.get("column"):
            raise OperationConfigError("No sort column specified")
        return cls(sort_configs=(SortKey.from_dict(config),))


def compare_values(left: Any, right: Any) -> int:
    """Three-way ascending comparison of two cells."""
    if left is None and right is None:
        return 0
    if left is None:
        return -1
    if right is None:
        return 1
    if is_number(left) and is_number(right):
        return (left > right) - (left < right)
    if is_temporal(left) and is_temporal(right):
        a, b = instant(left), instant(right)
        return (a > b) - (a < b)
    return compare_text(to_text(left), to_text(right))


def sort_dataset(
    dataset: Dataset,
    config: SortConfig,
    *,
    progress: ProgressCallback | None = None,
) -> Dataset:
    """Rows ordered by the composite key; ties keep their input order.

    Raises:
        MissingColumnError: If a sort column is absent from the dataset.
    """
    keys = [(dataset.column_index(key.column), key.direction == SortDirection.DESC) for key in config.sort_configs]

    def compare_rows(a: Row, b: Row) -> int:
        for index, descending in keys:
            result = compare_values(Dataset.cell(a, index), Dataset.cell(b, index))
            if result:
                return -result if descending else result
        return 0

    if progress is not None:
        progress(0.0, f"Sorting {len(dataset.rows)} rows")
    # sorted() is stable, which keeps equal rows in input order.
    ordered = sorted(dataset.rows, key=cmp_to_key(compare_rows))
    if progress is not None:
        progress(100.0, f"Sorted {len(ordered)} rows")
    return dataset.with_data(rows=ordered)
