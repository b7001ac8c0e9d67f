# src/blockflow/core/transforms/grouping.py
"""Group rows by key columns and aggregate each group.

Output columns are the group columns followed by one column per
aggregation, named by its alias or ``function(column)``. Groups are
emitted once each, in first-seen order.
"""

from __future__ import annotations

import statistics
from collections.abc import Sequence
from functools import cmp_to_key
from typing import Any

from pydantic import AliasChoices, Field, model_validator

from blockflow.contracts.config_base import OperationConfig
from blockflow.contracts.dataset import Dataset, Row, cell_key, is_missing
from blockflow.contracts.enums import AggregateFunction
from blockflow.contracts.errors import MissingColumnError
from blockflow.core.transforms.sorting import compare_values
from blockflow.core.transforms.values import ProgressCallback, coerce_number


class Aggregation(OperationConfig):
    function: AggregateFunction
    column: str | None = None
    alias: str | None = None

    @model_validator(mode="after")
    def _column_required(self) -> Aggregation:
        if self.function != AggregateFunction.COUNT and not self.column:
            raise ValueError(f"Aggregation '{self.function}' requires a column")
        return self

    @property
    def output_name(self) -> str:
        if self.alias:
            return self.alias
        return f"{self.function}({self.column or '*'})"


class GroupConfig(OperationConfig):
    columns: tuple[str, ...] = Field(
        min_length=1,
        validation_alias=AliasChoices("columns", "groupColumns", "group_columns"),
    )
    aggregations: tuple[Aggregation, ...] = Field(min_length=1)


def aggregate_values(function: AggregateFunction, values: Sequence[Any]) -> Any:
    """Aggregate one group's column values.

    Everything except COUNT ignores null cells and yields None when the
    group has no non-null value. COUNT counts rows.
    """
    if function == AggregateFunction.COUNT:
        return len(values)

    present = [value for value in values if not is_missing(value)]
    if not present:
        return None
    if function == AggregateFunction.FIRST:
        return present[0]
    if function == AggregateFunction.LAST:
        return present[-1]

    numbers = [n for n in (coerce_number(value) for value in present) if n is not None]
    match function:
        case AggregateFunction.SUM:
            return sum(numbers) if numbers else None
        case AggregateFunction.AVG:
            return statistics.fmean(numbers) if numbers else None
        case AggregateFunction.MIN:
            return min(numbers) if numbers else min(present, key=cmp_to_key(compare_values))
        case AggregateFunction.MAX:
            return max(numbers) if numbers else max(present, key=cmp_to_key(compare_values))
    raise ValueError(f"Unsupported aggregate function: {function}")


def group_dataset(
    dataset: Dataset,
    config: GroupConfig,
    *,
    progress: ProgressCallback | None = None,
) -> Dataset:
    """One output row per distinct group key.

    Raises:
        MissingColumnError: If a group column or a non-count aggregation
            column is absent from the dataset.
    """
    group_indices: list[int] = []
    for column in config.columns:
        if not dataset.has_column(column):
            raise MissingColumnError(column, role="Group column")
        group_indices.append(dataset.column_index(column))

    value_indices: list[int | None] = []
    for aggregation in config.aggregations:
        if aggregation.function == AggregateFunction.COUNT:
            value_indices.append(None)
            continue
        assert aggregation.column is not None  # enforced by Aggregation validator
        if not dataset.has_column(aggregation.column):
            raise MissingColumnError(aggregation.column, role="Aggregation column")
        value_indices.append(dataset.column_index(aggregation.column))

    groups: dict[tuple[Any, ...], tuple[tuple[Any, ...], list[Row]]] = {}
    for row in dataset.rows:
        values = tuple(Dataset.cell(row, index) for index in group_indices)
        key = tuple(cell_key(value) for value in values)
        if key not in groups:
            groups[key] = (values, [])
        groups[key][1].append(row)

    if progress is not None:
        progress(50.0, f"Aggregating {len(groups)} groups")

    output_rows: list[Row] = []
    for values, members in groups.values():
        aggregated = [
            aggregate_values(
                aggregation.function,
                [Dataset.cell(row, index) for row in members] if index is not None else members,
            )
            for aggregation, index in zip(config.aggregations, value_indices, strict=True)
        ]
        output_rows.append((*values, *aggregated))

    columns = [*config.columns, *(aggregation.output_name for aggregation in config.aggregations)]
    return dataset.with_data(columns=columns, rows=output_rows)
