# src/blockflow/plugins/transforms/sort.py
"""Sort executor: stable multi-key ordering."""

from __future__ import annotations

from collections.abc import Mapping

from blockflow.contracts.dataset import Dataset
from blockflow.contracts.enums import OffloadOperation, SortDirection
from blockflow.contracts.results import ExecutionContext, ExecutionResult, ValidationIssue, ValidationResult, ValidationWarning
from blockflow.core.transforms.sorting import SortConfig, sort_dataset
from blockflow.plugins.base import NodeExecutor

_DIRECTIONS = frozenset(direction.value for direction in SortDirection)


def _is_direction(value: object) -> bool:
    return isinstance(value, str) and value in _DIRECTIONS


class SortExecutor(NodeExecutor):
    node_type = "sort"
    description = "Order rows by one or more columns"
    offload_operation = OffloadOperation.SORT

    def validate(self, context: ExecutionContext) -> ValidationResult:
        config = context.config
        errors = self.input_issues(context)
        warnings: list[ValidationWarning] = []
        usable: list[str] = []

        if "sortConfigs" in config:
            entries = config["sortConfigs"]
            if not isinstance(entries, list):
                entries = []
            for index, entry in enumerate(entries):
                if not isinstance(entry, Mapping) or not isinstance(entry.get("column"), str) or not entry["column"]:
                    warnings.append(ValidationWarning(f"sortConfigs[{index}].column", "Sort entry without a column is ignored"))
                    continue
                if not _is_direction(entry.get("direction", SortDirection.ASC.value)):
                    errors.append(
                        ValidationIssue(f"sortConfigs[{index}].direction", "Direction must be 'asc' or 'desc'", "INVALID_VALUE")
                    )
                usable.append(entry["column"])
            if not usable:
                errors.append(ValidationIssue("sortConfigs", "No valid sort configurations provided", "REQUIRED_FIELD"))
        else:
            column = config.get("column")
            if not column:
                errors.append(ValidationIssue("column", "Sort column is required", "REQUIRED_FIELD"))
            elif not isinstance(column, str):
                errors.append(ValidationIssue("column", "Sort column must be a string", "INVALID_TYPE"))
            else:
                usable.append(column)
            if not _is_direction(config.get("direction", SortDirection.ASC.value)):
                errors.append(ValidationIssue("direction", "Direction must be 'asc' or 'desc'", "INVALID_VALUE"))

        dataset = self.find_input_dataset(context)
        if dataset is not None:
            for column in usable:
                if not dataset.has_column(column):
                    errors.append(ValidationIssue("column", f"Column '{column}' not found in dataset", "COLUMN_NOT_FOUND"))
        return ValidationResult.of(errors, warnings)

    async def execute(self, context: ExecutionContext) -> ExecutionResult:
        return await self.safe_execute(context, lambda: self._run(context))

    def _run(self, context: ExecutionContext) -> Dataset:
        dataset = self.require_input_dataset(context)
        return sort_dataset(dataset, SortConfig.from_node_config(context.config))
