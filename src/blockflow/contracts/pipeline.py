# src/blockflow/contracts/pipeline.py
"""User-owned pipeline definition: nodes, connections, and their invariants.

NodeInstance is deliberately mutable: the runner writes ``status`` and
``last_error`` while a run progresses. Connections are frozen.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from blockflow.contracts.enums import NodeStatus
from blockflow.contracts.errors import DuplicateConnectionError


class Position(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    x: float = 0.0
    y: float = 0.0


class NodeInstance(BaseModel):
    """One configured step in a pipeline."""

    model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)

    id: str = Field(min_length=1)
    type: str = Field(min_length=1, description="Executor registry key")
    position: Position = Field(default_factory=Position)
    config: dict[str, Any] = Field(default_factory=dict)
    status: NodeStatus = NodeStatus.IDLE
    last_error: str | None = None


class Connection(BaseModel):
    """Directed edge from an output port of one node to an input port of another."""

    model_config = ConfigDict(extra="forbid", frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str = Field(min_length=1)
    source: str
    source_handle: str = "output"
    target: str
    target_handle: str = "input"

    @property
    def endpoint_key(self) -> tuple[str, str, str, str]:
        return (self.source, self.source_handle, self.target, self.target_handle)


def ensure_unique(nodes: Sequence[NodeInstance], connections: Sequence[Connection]) -> None:
    """Reject repeated node ids and repeated connection endpoint tuples.

    Raises:
        DuplicateConnectionError: On the first duplicate found.
    """
    seen_nodes: set[str] = set()
    for node in nodes:
        if node.id in seen_nodes:
            raise DuplicateConnectionError(f"Duplicate node id '{node.id}'")
        seen_nodes.add(node.id)

    seen_endpoints: dict[tuple[str, str, str, str], str] = {}
    for connection in connections:
        key = connection.endpoint_key
        if key in seen_endpoints:
            raise DuplicateConnectionError(
                f"Connection '{connection.id}' duplicates '{seen_endpoints[key]}': "
                f"{connection.source}.{connection.source_handle} -> {connection.target}.{connection.target_handle}"
            )
        seen_endpoints[key] = connection.id


class PipelineDefinition(BaseModel):
    model_config = ConfigDict(extra="forbid")

    nodes: list[NodeInstance] = Field(default_factory=list)
    connections: list[Connection] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_unique(self) -> PipelineDefinition:
        ensure_unique(self.nodes, self.connections)
        return self

    def node(self, node_id: str) -> NodeInstance:
        for node in self.nodes:
            if node.id == node_id:
                return node
        raise KeyError(node_id)

    def add_connection(self, connection: Connection) -> None:
        """Append a connection, rejecting a duplicate endpoint tuple."""
        ensure_unique(self.nodes, [*self.connections, connection])
        self.connections.append(connection)
