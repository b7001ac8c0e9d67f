# src/blockflow/plugins/transforms/filter.py
"""Filter executor: keep rows matching one or more column conditions."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from blockflow.contracts.dataset import Dataset, is_missing
from blockflow.contracts.enums import FilterOperator, LogicalOperator, OffloadOperation
from blockflow.contracts.results import ExecutionContext, ExecutionResult, ValidationIssue, ValidationResult, ValidationWarning
from blockflow.core.transforms.filtering import NULLARY_OPERATORS, FilterConfig, filter_dataset
from blockflow.plugins.base import NodeExecutor

_OPERATORS = frozenset(operator.value for operator in FilterOperator)
_LOGICAL_OPERATORS = frozenset(operator.value for operator in LogicalOperator)


def _condition_issues(condition: Mapping[str, Any], prefix: str) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    if not condition.get("column"):
        issues.append(ValidationIssue(f"{prefix}column", "Filter column is required", "REQUIRED_FIELD"))

    operator = condition.get("operator")
    if not operator:
        issues.append(ValidationIssue(f"{prefix}operator", "Filter operator is required", "REQUIRED_FIELD"))
        return issues
    if not isinstance(operator, str) or operator not in _OPERATORS:
        issues.append(ValidationIssue(f"{prefix}operator", f"Unsupported filter operator: {operator}", "INVALID_VALUE"))
        return issues

    if FilterOperator(operator) not in NULLARY_OPERATORS and is_missing(condition.get("value")):
        issues.append(ValidationIssue(f"{prefix}value", "Filter value is required", "REQUIRED_FIELD"))
    return issues


class FilterExecutor(NodeExecutor):
    node_type = "filter"
    description = "Keep rows matching column conditions"
    offload_operation = OffloadOperation.FILTER

    def validate(self, context: ExecutionContext) -> ValidationResult:
        config = context.config
        errors = self.input_issues(context)
        warnings: list[ValidationWarning] = []

        if "conditions" in config:
            conditions = config["conditions"]
            if not isinstance(conditions, list) or not conditions:
                errors.append(ValidationIssue("conditions", "At least one filter condition is required", "REQUIRED_FIELD"))
                conditions = []
            for index, condition in enumerate(conditions):
                if not isinstance(condition, Mapping):
                    errors.append(ValidationIssue(f"conditions[{index}]", "Condition must be an object", "INVALID_VALUE"))
                    continue
                errors.extend(_condition_issues(condition, f"conditions[{index}]."))
            logical = config.get("logicalOperator", LogicalOperator.AND.value)
            if not isinstance(logical, str) or logical not in _LOGICAL_OPERATORS:
                errors.append(ValidationIssue("logicalOperator", "Logical operator must be 'and' or 'or'", "INVALID_VALUE"))
            columns = [c.get("column") for c in conditions if isinstance(c, Mapping)]
        else:
            errors.extend(_condition_issues(config, ""))
            columns = [config.get("column")]

        dataset = self.find_input_dataset(context)
        if dataset is not None:
            for column in columns:
                if column and not dataset.has_column(column):
                    warnings.append(
                        ValidationWarning("column", f"Column '{column}' not found in dataset; condition always passes")
                    )
        return ValidationResult.of(errors, warnings)

    async def execute(self, context: ExecutionContext) -> ExecutionResult:
        return await self.safe_execute(context, lambda: self._run(context))

    def _run(self, context: ExecutionContext) -> Dataset:
        dataset = self.require_input_dataset(context)
        return filter_dataset(dataset, FilterConfig.from_node_config(context.config))
