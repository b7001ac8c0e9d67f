# src/blockflow/plugins/transforms/group.py
"""Group executor: aggregate rows sharing the same key columns."""

from __future__ import annotations

from collections.abc import Mapping

from blockflow.contracts.dataset import Dataset
from blockflow.contracts.enums import AggregateFunction, OffloadOperation
from blockflow.contracts.results import ExecutionContext, ExecutionResult, ValidationIssue, ValidationResult
from blockflow.core.transforms.grouping import GroupConfig, group_dataset
from blockflow.plugins.base import NodeExecutor

_FUNCTIONS = frozenset(function.value for function in AggregateFunction)


def _output_name(function: str, aggregation: Mapping[str, object]) -> str:
    alias = aggregation.get("alias")
    if isinstance(alias, str) and alias:
        return alias
    return f"{function}({aggregation.get('column') or '*'})"


class GroupExecutor(NodeExecutor):
    node_type = "group"
    description = "Group rows and compute aggregates"
    offload_operation = OffloadOperation.GROUP

    def validate(self, context: ExecutionContext) -> ValidationResult:
        config = context.config
        errors = self.input_issues(context)

        columns = config.get("columns", config.get("groupColumns"))
        if not isinstance(columns, list) or not columns:
            errors.append(ValidationIssue("columns", "At least one group column is required", "REQUIRED_FIELD"))
            columns = []

        aggregations = config.get("aggregations")
        if not isinstance(aggregations, list) or not aggregations:
            errors.append(ValidationIssue("aggregations", "At least one aggregation is required", "REQUIRED_FIELD"))
            aggregations = []

        referenced = list(columns)
        outputs = [column for column in columns if isinstance(column, str)]
        for index, aggregation in enumerate(aggregations):
            prefix = f"aggregations[{index}]"
            if not isinstance(aggregation, Mapping):
                errors.append(ValidationIssue(prefix, "Aggregation must be an object", "INVALID_VALUE"))
                continue
            function = aggregation.get("function")
            if not function:
                errors.append(ValidationIssue(f"{prefix}.function", "Aggregation function is required", "REQUIRED_FIELD"))
            elif not isinstance(function, str) or function not in _FUNCTIONS:
                errors.append(
                    ValidationIssue(f"{prefix}.function", f"Unsupported aggregation function: {function}", "INVALID_VALUE")
                )
            if function != AggregateFunction.COUNT.value:
                if not aggregation.get("column"):
                    errors.append(ValidationIssue(f"{prefix}.column", "Aggregation column is required", "REQUIRED_FIELD"))
                else:
                    referenced.append(aggregation["column"])
            if isinstance(function, str) and function in _FUNCTIONS:
                outputs.append(_output_name(function, aggregation))

        seen: set[str] = set()
        for name in outputs:
            if name in seen:
                errors.append(ValidationIssue("aggregations", f"Output column '{name}' is produced twice", "DUPLICATE_COLUMN"))
            seen.add(name)

        dataset = self.find_input_dataset(context)
        if dataset is not None:
            for column in referenced:
                if isinstance(column, str) and not dataset.has_column(column):
                    errors.append(ValidationIssue("columns", f"Column '{column}' not found in dataset", "COLUMN_NOT_FOUND"))
        return ValidationResult.of(errors)

    async def execute(self, context: ExecutionContext) -> ExecutionResult:
        return await self.safe_execute(context, lambda: self._run(context))

    def _run(self, context: ExecutionContext) -> Dataset:
        dataset = self.require_input_dataset(context)
        return group_dataset(dataset, GroupConfig.from_dict(context.config))
