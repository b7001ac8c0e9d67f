# src/blockflow/core/dag/models.py
"""Types and exceptions for execution graph operations.

Leaf module: no intra-package imports beyond contracts.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass


class GraphValidationError(ValueError):
    """Raised when a node/connection set cannot form an execution plan."""

    pass


class GraphCycleError(GraphValidationError):
    """Raised by build_graph when the dependency relation contains a cycle.

    Each entry of ``cycles`` is a closed path ``(a, b, ..., a)``.
    """

    def __init__(self, cycles: Sequence[tuple[str, ...]]) -> None:
        self.cycles: tuple[tuple[str, ...], ...] = tuple(cycles)
        rendered = "; ".join(" -> ".join(cycle) for cycle in self.cycles)
        super().__init__(f"Circular dependencies detected in the graph: {rendered}")


@dataclass(frozen=True, slots=True)
class ExecutionGraphNode:
    """Derived scheduling view of one pipeline node.

    ``level`` is the longest path from any dependency-free node.
    """

    id: str
    dependencies: frozenset[str]
    dependents: frozenset[str]
    level: int
