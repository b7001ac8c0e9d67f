# tests/unit/plugins/transforms/test_filter_executor.py
"""Tests for FilterExecutor validation and execution."""

from __future__ import annotations

import pytest

from blockflow.contracts import Dataset, OffloadOperation
from blockflow.plugins.transforms import FilterExecutor


@pytest.fixture
def executor() -> FilterExecutor:
    return FilterExecutor()


class TestValidate:
    def test_valid_legacy_config(self, executor: FilterExecutor, make_context, people: Dataset) -> None:
        result = executor.validate(make_context({"column": "age", "operator": "greater_than", "value": 30}, people))

        assert result.valid
        assert result.warnings == ()

    def test_missing_input(self, executor: FilterExecutor, make_context) -> None:
        result = executor.validate(make_context({"column": "age", "operator": "is_null"}))

        assert result.codes() == ["REQUIRED_INPUT"]

    def test_empty_conditions(self, executor: FilterExecutor, make_context, people: Dataset) -> None:
        result = executor.validate(make_context({"conditions": []}, people))

        assert result.codes() == ["REQUIRED_FIELD"]
        assert result.errors[0].field == "conditions"

    def test_per_condition_fields(self, executor: FilterExecutor, make_context, people: Dataset) -> None:
        result = executor.validate(
            make_context(
                {
                    "conditions": [
                        {"column": "age", "operator": "is_null"},
                        {"operator": "equals", "value": 1},
                        {"column": "age", "operator": "approximately", "value": 1},
                        {"column": "age", "operator": "less_than"},
                    ]
                },
                people,
            )
        )

        assert [(issue.field, issue.code) for issue in result.errors] == [
            ("conditions[1].column", "REQUIRED_FIELD"),
            ("conditions[2].operator", "INVALID_VALUE"),
            ("conditions[3].value", "REQUIRED_FIELD"),
        ]

    def test_bad_logical_operator(self, executor: FilterExecutor, make_context, people: Dataset) -> None:
        config = {"conditions": [{"column": "age", "operator": "is_null"}], "logicalOperator": "xor"}

        result = executor.validate(make_context(config, people))

        assert [(issue.field, issue.code) for issue in result.errors] == [("logicalOperator", "INVALID_VALUE")]

    def test_absent_column_is_only_a_warning(self, executor: FilterExecutor, make_context, people: Dataset) -> None:
        result = executor.validate(make_context({"column": "height", "operator": "is_null"}, people))

        assert result.valid
        assert "height" in result.warnings[0].message


class TestExecute:
    @pytest.mark.asyncio
    async def test_filters_rows(self, executor: FilterExecutor, make_context, people: Dataset) -> None:
        result = await executor.execute(make_context({"column": "age", "operator": "greater_than", "value": 30}, people))

        assert result.success
        assert result.output.column_values("age") == [35, 32]

    @pytest.mark.asyncio
    async def test_unparseable_config_is_a_failure(self, executor: FilterExecutor, make_context, people: Dataset) -> None:
        result = await executor.execute(make_context({"column": "age", "operator": "approximately"}, people))

        assert not result.success
        assert result.error is not None
        assert "Invalid configuration" in result.error.message

    def test_offload_operation(self, executor: FilterExecutor) -> None:
        assert executor.offload_operation is OffloadOperation.FILTER
