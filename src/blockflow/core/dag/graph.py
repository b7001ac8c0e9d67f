# src/blockflow/core/dag/graph.py
"""Immutable execution plan and its scheduling queries.

The graph never tracks progress. Callers own the set of completed node
ids and pass it into every query, so the queries are pure functions of
(graph, completed).
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from dataclasses import dataclass

import networkx as nx

from blockflow.core.dag.models import ExecutionGraphNode


@dataclass(frozen=True, slots=True)
class ExecutionGraph:
    nodes: Mapping[str, ExecutionGraphNode]
    execution_order: tuple[str, ...]

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def get_node(self, node_id: str) -> ExecutionGraphNode:
        return self.nodes[node_id]

    def get_parallel_executable_nodes(self, level: int) -> list[str]:
        """Node ids at exactly ``level``, safe to run together once lower levels finished."""
        return sorted(node_id for node_id, node in self.nodes.items() if node.level == level)

    def can_execute_node(self, node_id: str, completed: Collection[str]) -> bool:
        """True iff every dependency of ``node_id`` is in ``completed``.

        Unknown node ids are never executable.
        """
        node = self.nodes.get(node_id)
        if node is None:
            return False
        return all(dependency in completed for dependency in node.dependencies)

    def get_newly_executable_nodes(self, just_completed: str, completed: Collection[str]) -> list[str]:
        """Dependents of ``just_completed`` that became runnable.

        ``completed`` must already include ``just_completed``. Dependents
        that are themselves already completed are not returned again.
        """
        node = self.nodes.get(just_completed)
        if node is None:
            return []
        return sorted(
            dependent
            for dependent in node.dependents
            if dependent not in completed and self.can_execute_node(dependent, completed)
        )

    def get_dependency_levels(self) -> list[int]:
        return sorted({node.level for node in self.nodes.values()})

    def get_roots(self) -> list[str]:
        return self.get_parallel_executable_nodes(0)

    def get_nx_graph(self) -> nx.DiGraph[str]:
        """Frozen NetworkX view of the dependency relation (dependency -> dependent)."""
        graph: nx.DiGraph[str] = nx.DiGraph()
        graph.add_nodes_from(self.execution_order)
        for node in self.nodes.values():
            graph.add_edges_from((node.id, dependent) for dependent in node.dependents)
        return nx.freeze(graph)  # type: ignore[no-any-return]
