# src/blockflow/core/transforms/__init__.py
"""Pure transform algorithms over Dataset: filter, sort, group, statistics."""

from blockflow.core.transforms.filtering import FilterCondition, FilterConfig, evaluate_operator, filter_dataset
from blockflow.core.transforms.grouping import Aggregation, GroupConfig, aggregate_values, group_dataset
from blockflow.core.transforms.sorting import SortConfig, SortKey, compare_values, sort_dataset
from blockflow.core.transforms.statistics import ColumnStatistics, calculate_statistics

__all__ = [
    "Aggregation",
    "ColumnStatistics",
    "FilterCondition",
    "FilterConfig",
    "GroupConfig",
    "SortConfig",
    "SortKey",
    "aggregate_values",
    "calculate_statistics",
    "compare_values",
    "evaluate_operator",
    "filter_dataset",
    "group_dataset",
    "sort_dataset",
]
