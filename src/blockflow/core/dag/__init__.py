# src/blockflow/core/dag/__init__.py
"""Execution graph construction and incremental scheduling queries."""

from blockflow.core.dag.builder import build_graph
from blockflow.core.dag.graph import ExecutionGraph
from blockflow.core.dag.models import ExecutionGraphNode, GraphCycleError, GraphValidationError

__all__ = [
    "ExecutionGraph",
    "ExecutionGraphNode",
    "GraphCycleError",
    "GraphValidationError",
    "build_graph",
]
