# src/blockflow/core/dag/builder.py
"""Build an ExecutionGraph from a pipeline's nodes and connections."""

from __future__ import annotations

from collections.abc import Iterable
from types import MappingProxyType

import networkx as nx
import structlog

from blockflow.contracts.pipeline import Connection, NodeInstance, ensure_unique
from blockflow.core.dag.graph import ExecutionGraph
from blockflow.core.dag.models import ExecutionGraphNode, GraphCycleError

logger = structlog.get_logger(__name__)


def _find_cycles(graph: nx.DiGraph[str]) -> list[tuple[str, ...]]:
    """One closed path per strongly connected component that contains a cycle.

    Components are visited by smallest node id so the report is deterministic.
    """
    if nx.is_directed_acyclic_graph(graph):
        return []

    cycles: list[tuple[str, ...]] = []
    for component in sorted(nx.strongly_connected_components(graph), key=min):
        root = min(component)
        if len(component) == 1 and not graph.has_edge(root, root):
            continue
        edges = nx.find_cycle(graph.subgraph(component), source=root)
        cycles.append((*(source for source, _target in edges), edges[-1][1]))
    return cycles


def _assign_levels(graph: nx.DiGraph[str]) -> dict[str, int]:
    # Topological relaxation: every predecessor is leveled before its successors.
    levels: dict[str, int] = {}
    for node_id in nx.topological_sort(graph):
        levels[node_id] = max((levels[dep] + 1 for dep in graph.predecessors(node_id)), default=0)
    return levels


def build_graph(nodes: Iterable[NodeInstance], connections: Iterable[Connection]) -> ExecutionGraph:
    """Derive the dependency graph, levels and execution order.

    Connections whose source or target is not among ``nodes`` are ignored.
    Several connections between the same pair of nodes collapse into one
    dependency.

    Raises:
        DuplicateConnectionError: If a node id or a connection endpoint
            tuple appears twice.
        GraphCycleError: If the dependency relation contains a cycle. No
            partial graph is produced.
    """
    nodes = list(nodes)
    connections = list(connections)
    ensure_unique(nodes, connections)

    graph: nx.DiGraph[str] = nx.DiGraph()
    graph.add_nodes_from(node.id for node in nodes)

    for connection in connections:
        if connection.source not in graph or connection.target not in graph:
            logger.warning(
                "Ignoring connection to unknown node",
                connection_id=connection.id,
                source=connection.source,
                target=connection.target,
            )
            continue
        graph.add_edge(connection.source, connection.target)

    cycles = _find_cycles(graph)
    if cycles:
        raise GraphCycleError(cycles)

    levels = _assign_levels(graph)
    graph_nodes = {
        node_id: ExecutionGraphNode(
            id=node_id,
            dependencies=frozenset(graph.predecessors(node_id)),
            dependents=frozenset(graph.successors(node_id)),
            level=levels[node_id],
        )
        for node_id in graph.nodes
    }
    execution_order = tuple(sorted(graph.nodes, key=lambda node_id: (levels[node_id], node_id)))

    logger.debug(
        "Execution graph built",
        node_count=len(graph_nodes),
        level_count=len(set(levels.values())),
    )
    return ExecutionGraph(nodes=MappingProxyType(graph_nodes), execution_order=execution_order)
