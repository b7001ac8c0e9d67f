# tests/conftest.py
"""Shared test configuration.

Provides:
- Hypothesis profiles (ci / nightly / debug, chosen by HYPOTHESIS_PROFILE)
- Dataset fixtures used across transform, executor, and runner tests
- Factories for pipeline nodes and connections
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator
from typing import Any

import pytest
import structlog
from hypothesis import Phase, Verbosity, settings
from structlog.stdlib import ProcessorFormatter

from blockflow.contracts import Connection, Dataset, ExecutionContext, NodeInstance
from blockflow.plugins.registry import ExecutorRegistry, create_default_registry

# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Undo configure_logging() calls made by CLI and logging tests."""
    root = logging.getLogger()
    level = root.level
    yield
    structlog.reset_defaults()
    for handler in root.handlers[:]:
        if isinstance(handler.formatter, ProcessorFormatter):
            root.removeHandler(handler)
    root.setLevel(level)


# =============================================================================
# Datasets
# =============================================================================


@pytest.fixture
def people() -> Dataset:
    """Six people; the last has no recorded age."""
    return Dataset.create(
        ["id", "name", "age", "city", "salary"],
        [
            [1, "Alice", 25, "New York", 5000],
            [2, "Bob", 30, "San Francisco", 6000],
            [3, "Charlie", 35, "Chicago", 7000],
            [4, "Diana", 28, "Boston", 6500],
            [5, "Eve", 32, "Seattle", 8000],
            [6, "Frank", None, "Boston", None],
        ],
    )


@pytest.fixture
def make_context() -> Callable[..., ExecutionContext]:
    """Build an ExecutionContext: make_context(config, dataset=None, node_id="node")."""

    def _make(config: dict[str, Any] | None = None, dataset: Dataset | None = None, node_id: str = "node") -> ExecutionContext:
        inputs = {"input": dataset} if dataset is not None else {}
        return ExecutionContext.create(node_id, inputs=inputs, config=config or {})

    return _make


# =============================================================================
# Pipeline factories
# =============================================================================


@pytest.fixture
def make_nodes() -> Callable[..., list[NodeInstance]]:
    """make_nodes("a", "b") -> NodeInstances of type "test"."""

    def _make(*node_ids: str, node_type: str = "test") -> list[NodeInstance]:
        return [NodeInstance(id=node_id, type=node_type) for node_id in node_ids]

    return _make


@pytest.fixture
def make_connections() -> Callable[..., list[Connection]]:
    """make_connections(("a", "b"), ("b", "c")) -> one connection per pair."""

    def _make(*edges: tuple[str, str]) -> list[Connection]:
        return [Connection(id=f"{source}->{target}", source=source, target=target) for source, target in edges]

    return _make


@pytest.fixture
def registry() -> ExecutorRegistry:
    return create_default_registry()
