# src/blockflow/core/transforms/filtering.py
"""Row filtering by one or more column conditions.

Two config shapes are accepted:
- legacy single condition: ``{column, operator, value}``
- ``{conditions: [...], logicalOperator: "and" | "or"}``

A condition on a column the dataset lacks passes every row. An empty
``conditions`` list passes every row.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from blockflow.contracts.config_base import OperationConfig, OperationConfigError
from blockflow.contracts.dataset import Dataset, Row, is_missing
from blockflow.contracts.enums import FilterOperator, LogicalOperator
from blockflow.core.transforms.values import ProgressCallback, to_number, to_text

DEFAULT_PROGRESS_INTERVAL = 1000

# Operators that do not take a comparison value.
NULLARY_OPERATORS = frozenset({FilterOperator.IS_NULL, FilterOperator.IS_NOT_NULL})


class FilterCondition(OperationConfig):
    column: str
    operator: FilterOperator
    value: Any = None
    type: str | None = None


class FilterConfig(OperationConfig):
    conditions: tuple[FilterCondition, ...] = ()
    logical_operator: LogicalOperator = LogicalOperator.AND

    @classmethod
    def from_node_config(cls, config: Mapping[str, Any]) -> FilterConfig:
        """Parse either config shape into the multi-condition form."""
        if "conditions" in config:
            return cls.from_dict(config)
        if not config.get("column") or not config.get("operator"):
            raise OperationConfigError("Filter requires a column and an operator")
        condition = FilterCondition.from_dict(
            {"column": config["column"], "operator": config["operator"], "value": config.get("value")}
        )
        return cls(conditions=(condition,))


def parse_value_list(value: Any) -> list[str]:
    """Values for in/not_in: a list as-is, or a comma-separated string split and trimmed."""
    if isinstance(value, (list, tuple)):
        return [to_text(item) for item in value]
    return [item.strip() for item in to_text(value).split(",")]


def _numeric(cell: Any, value: Any, compare: Callable[[float, float], bool]) -> bool:
    left = to_number(cell)
    right = to_number(value)
    if left is None or right is None:
        return False
    return compare(left, right)


def evaluate_operator(operator: FilterOperator, cell: Any, value: Any) -> bool:
    """Apply one operator to a cell value."""
    match operator:
        case FilterOperator.EQUALS:
            return bool(cell == value)
        case FilterOperator.NOT_EQUALS:
            return bool(cell != value)
        case FilterOperator.CONTAINS:
            return to_text(value).casefold() in to_text(cell).casefold()
        case FilterOperator.NOT_CONTAINS:
            return to_text(value).casefold() not in to_text(cell).casefold()
        case FilterOperator.STARTS_WITH:
            return to_text(cell).casefold().startswith(to_text(value).casefold())
        case FilterOperator.ENDS_WITH:
            return to_text(cell).casefold().endswith(to_text(value).casefold())
        case FilterOperator.GREATER_THAN:
            return _numeric(cell, value, lambda a, b: a > b)
        case FilterOperator.LESS_THAN:
            return _numeric(cell, value, lambda a, b: a < b)
        case FilterOperator.GREATER_EQUAL | FilterOperator.GREATER_THAN_OR_EQUAL:
            return _numeric(cell, value, lambda a, b: a >= b)
        case FilterOperator.LESS_EQUAL | FilterOperator.LESS_THAN_OR_EQUAL:
            return _numeric(cell, value, lambda a, b: a <= b)
        case FilterOperator.IN:
            return to_text(cell) in parse_value_list(value)
        case FilterOperator.NOT_IN:
            return to_text(cell) not in parse_value_list(value)
        case FilterOperator.IS_NULL:
            return is_missing(cell)
        case FilterOperator.IS_NOT_NULL:
            return not is_missing(cell)


def build_predicate(dataset: Dataset, config: FilterConfig) -> Callable[[Row], bool]:
    """Compile the config against the dataset's column positions."""
    bound: list[tuple[int, FilterCondition]] = []
    for condition in config.conditions:
        if not dataset.has_column(condition.column):
            # Absent column: the condition is vacuously true.
            continue
        bound.append((dataset.column_index(condition.column), condition))

    if not config.conditions:
        return lambda row: True

    def check(row: Row, index: int, condition: FilterCondition) -> bool:
        return evaluate_operator(condition.operator, Dataset.cell(row, index), condition.value)

    if config.logical_operator == LogicalOperator.OR:
        if len(bound) < len(config.conditions):
            return lambda row: True
        return lambda row: any(check(row, index, condition) for index, condition in bound)
    return lambda row: all(check(row, index, condition) for index, condition in bound)


def filter_dataset(
    dataset: Dataset,
    config: FilterConfig,
    *,
    progress: ProgressCallback | None = None,
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
) -> Dataset:
    """Rows satisfying the config, in their original relative order."""
    predicate = build_predicate(dataset, config)
    total = len(dataset.rows)
    kept: list[Row] = []
    for position, row in enumerate(dataset.rows, start=1):
        if predicate(row):
            kept.append(row)
        if progress is not None and position % progress_interval == 0:
            progress(position / total * 100, f"Filtered {position}/{total} rows")
    return dataset.with_data(rows=kept)
