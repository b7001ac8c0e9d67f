# src/blockflow/plugins/sources/example_data.py
"""Example data executor: small built-in datasets for trying pipelines out."""

from __future__ import annotations

from typing import Any

from blockflow.contracts.dataset import Dataset
from blockflow.contracts.errors import DatasetParseError
from blockflow.contracts.results import ExecutionContext, ExecutionResult, ValidationIssue, ValidationResult
from blockflow.plugins.base import NodeExecutor

EXAMPLE_DATASETS: dict[str, tuple[list[str], list[list[Any]]]] = {
    "sample": (
        ["id", "name", "age", "city"],
        [
            [1, "Alice", 25, "New York"],
            [2, "Bob", 30, "San Francisco"],
            [3, "Charlie", 35, "Chicago"],
            [4, "Diana", 28, "Boston"],
            [5, "Eve", 32, "Seattle"],
        ],
    ),
    "sales": (
        ["date", "product", "quantity", "revenue"],
        [
            ["2024-01-01", "Widget A", 10, 100],
            ["2024-01-02", "Widget B", 15, 225],
            ["2024-01-03", "Widget A", 8, 80],
            ["2024-01-04", "Widget C", 20, 400],
            ["2024-01-05", "Widget B", 12, 180],
            ["2024-01-06", "Widget A", 25, 250],
            ["2024-01-07", "Widget C", 18, 360],
        ],
    ),
    "employees": (
        ["id", "name", "department", "salary"],
        [
            [1, "Zhang San", "Engineering", 8000],
            [2, "Li Si", "Marketing", 7500],
            [3, "Wang Wu", "HR", 6500],
            [4, "Zhao Liu", "Engineering", 9000],
            [5, "Sun Qi", "Finance", 7000],
            [6, "Zhou Ba", "Marketing", 8500],
        ],
    ),
    "products": (
        ["id", "name", "category", "price", "stock"],
        [
            [1, "Laptop", "Electronics", 5999, 50],
            [2, "Wireless Mouse", "Electronics", 99, 200],
            [3, "Office Chair", "Office", 299, 30],
            [4, "Mechanical Keyboard", "Electronics", 399, 80],
            [5, "Monitor", "Electronics", 1299, 25],
            [6, "Filing Cabinet", "Office", 599, 15],
        ],
    ),
}


def load_example_dataset(name: str) -> Dataset:
    if name not in EXAMPLE_DATASETS:
        raise DatasetParseError(f"Unknown example dataset: '{name}'")
    columns, rows = EXAMPLE_DATASETS[name]
    return Dataset.create(columns, rows, source={"type": "example", "dataset": name})


class ExampleDataExecutor(NodeExecutor):
    node_type = "example-data"
    description = "Built-in sample datasets"

    def validate(self, context: ExecutionContext) -> ValidationResult:
        name = context.config.get("dataset")
        if not name:
            return ValidationResult.of([ValidationIssue("dataset", "Dataset selection is required", "REQUIRED_FIELD")])
        if not isinstance(name, str) or name not in EXAMPLE_DATASETS:
            return ValidationResult.of(
                [
                    ValidationIssue(
                        "dataset",
                        f"Unknown dataset '{name}'; choose one of {', '.join(EXAMPLE_DATASETS)}",
                        "INVALID_VALUE",
                    )
                ]
            )
        return ValidationResult.of()

    async def execute(self, context: ExecutionContext) -> ExecutionResult:
        return await self.safe_execute(context, lambda: load_example_dataset(context.config.get("dataset") or "sample"))
