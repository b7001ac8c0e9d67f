# tests/unit/core/transforms/test_grouping.py
"""Tests for group-by and aggregation."""

from __future__ import annotations

import pytest

from blockflow.contracts import AggregateFunction, Dataset, MissingColumnError, OperationConfigError
from blockflow.core.transforms import GroupConfig, aggregate_values, group_dataset


def _config(columns: list[str], *aggregations: dict[str, str]) -> GroupConfig:
    return GroupConfig.from_dict({"columns": columns, "aggregations": list(aggregations)})


class TestGroupConfig:
    def test_group_columns_alias_accepted(self) -> None:
        config = GroupConfig.from_dict({"groupColumns": ["city"], "aggregations": [{"function": "count"}]})

        assert config.columns == ("city",)

    def test_non_count_aggregation_needs_a_column(self) -> None:
        with pytest.raises(OperationConfigError, match="requires a column"):
            _config(["city"], {"function": "sum"})

    def test_empty_aggregations_rejected(self) -> None:
        with pytest.raises(OperationConfigError):
            GroupConfig.from_dict({"columns": ["city"], "aggregations": []})

    def test_output_names(self) -> None:
        config = _config(["city"], {"function": "count"}, {"function": "avg", "column": "age", "alias": "mean_age"})

        assert [agg.output_name for agg in config.aggregations] == ["count(*)", "mean_age"]


class TestGroupDataset:
    def test_sum_per_group(self) -> None:
        dataset = Dataset.create(["age", "salary"], [(25, 5000), (30, 7000), (25, 6000)])

        result = group_dataset(dataset, _config(["age"], {"function": "sum", "column": "salary"}))

        assert result.columns == ("age", "sum(salary)")
        assert result.rows == ((25, 11000), (30, 7000))

    def test_groups_in_first_seen_order(self, people: Dataset) -> None:
        result = group_dataset(people, _config(["city"], {"function": "count"}))

        assert result.column_values("city") == ["New York", "San Francisco", "Chicago", "Boston", "Seattle"]
        assert result.column_values("count(*)") == [1, 1, 1, 2, 1]

    def test_count_counts_rows_including_nulls(self, people: Dataset) -> None:
        result = group_dataset(people, _config(["city"], {"function": "count", "column": "age"}))

        assert dict(zip(result.column_values("city"), result.column_values("count(age)"), strict=True))["Boston"] == 2

    def test_avg_ignores_nulls(self, people: Dataset) -> None:
        result = group_dataset(people, _config(["city"], {"function": "avg", "column": "salary"}))

        assert result.rows[3] == ("Boston", 6500.0)

    def test_null_key_forms_its_own_group(self, people: Dataset) -> None:
        result = group_dataset(people, _config(["age"], {"function": "first", "column": "name"}))

        assert (None, "Frank") in result.rows

    def test_multi_column_key(self) -> None:
        dataset = Dataset.create(["a", "b", "v"], [(1, "x", 1), (1, "y", 2), (1, "x", 3)])

        result = group_dataset(dataset, _config(["a", "b"], {"function": "max", "column": "v"}))

        assert result.rows == ((1, "x", 3), (1, "y", 2))

    def test_missing_group_column(self, people: Dataset) -> None:
        with pytest.raises(MissingColumnError, match="Group column 'dept' not found in dataset"):
            group_dataset(people, _config(["dept"], {"function": "count"}))

    def test_missing_aggregation_column(self, people: Dataset) -> None:
        with pytest.raises(MissingColumnError, match="Aggregation column 'bonus' not found in dataset"):
            group_dataset(people, _config(["city"], {"function": "sum", "column": "bonus"}))


class TestAggregateValues:
    def test_all_null_group_yields_none(self) -> None:
        assert aggregate_values(AggregateFunction.SUM, [None, ""]) is None
        assert aggregate_values(AggregateFunction.FIRST, [None]) is None

    def test_first_and_last_skip_nulls(self) -> None:
        values = [None, "a", "b", ""]

        assert aggregate_values(AggregateFunction.FIRST, values) == "a"
        assert aggregate_values(AggregateFunction.LAST, values) == "b"

    def test_numeric_strings_are_summed(self) -> None:
        assert aggregate_values(AggregateFunction.SUM, ["1", 2, "3.5"]) == 6.5

    def test_min_max_of_text(self) -> None:
        assert aggregate_values(AggregateFunction.MIN, ["pear", "Apple", "fig"]) == "Apple"
        assert aggregate_values(AggregateFunction.MAX, ["pear", "Apple", "fig"]) == "pear"
