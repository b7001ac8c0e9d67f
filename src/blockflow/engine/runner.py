# src/blockflow/engine/runner.py
"""Event-driven pipeline runner.

Builds the execution graph once, starts every root node, and as each node
finishes schedules exactly the dependents that became runnable. A graph
cycle aborts the run before any node executes. A failed node's dependents
are never scheduled; they are reported as skipped. There are no retries.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

import structlog

from blockflow.contracts.enums import ErrorType, NodeStatus
from blockflow.contracts.pipeline import Connection, NodeInstance
from blockflow.contracts.results import ExecutionContext, ExecutionResult
from blockflow.core.dag import ExecutionGraph, build_graph
from blockflow.core.logging import run_context
from blockflow.engine.offload.client import OffloadClient
from blockflow.plugins.base import NodeExecutor
from blockflow.plugins.registry import ExecutorRegistry

logger = structlog.get_logger(__name__)

type StatusCallback = Callable[[str, NodeStatus, str | None], None]


@dataclass
class RunSummary:
    graph: ExecutionGraph
    run_id: str = ""
    results: dict[str, ExecutionResult] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.skipped and all(result.success for result in self.results.values())

    @property
    def failed(self) -> list[str]:
        return [node_id for node_id, result in self.results.items() if not result.success]

    def output(self, node_id: str) -> Any:
        return self.results[node_id].output


class PipelineRunner:
    """Runs a pipeline's nodes with bounded concurrency.

    Filter, sort, and group nodes go through ``offload`` when one is given;
    everything else runs on the event loop.
    """

    def __init__(
        self,
        registry: ExecutorRegistry,
        *,
        max_concurrency: int = 4,
        node_timeout_ms: int = 30_000,
        offload: OffloadClient | None = None,
        on_status_change: StatusCallback | None = None,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got {max_concurrency}")
        self._registry = registry
        self._max_concurrency = max_concurrency
        self._node_timeout_ms = node_timeout_ms
        self._offload = offload
        self._on_status_change = on_status_change

    def _set_status(self, node: NodeInstance, status: NodeStatus, error: str | None = None) -> None:
        node.status = status
        node.last_error = error
        if self._on_status_change is not None:
            self._on_status_change(node.id, status, error)

    async def run(self, nodes: Sequence[NodeInstance], connections: Sequence[Connection]) -> RunSummary:
        """Execute the pipeline.

        Raises:
            DuplicateConnectionError: If node ids or connections repeat.
            GraphCycleError: If the connections form a cycle.
        """
        run_id = uuid.uuid4().hex[:12]
        with run_context(run_id):
            graph = build_graph(nodes, connections)
            summary = RunSummary(graph=graph, run_id=run_id)
            await self._run_graph(graph, nodes, connections, summary)
        return summary

    async def _run_graph(
        self,
        graph: ExecutionGraph,
        nodes: Sequence[NodeInstance],
        connections: Sequence[Connection],
        summary: RunSummary,
    ) -> None:
        by_id = {node.id: node for node in nodes}
        for node in nodes:
            self._set_status(node, NodeStatus.IDLE)

        inbound: dict[str, list[Connection]] = {}
        for connection in connections:
            if connection.source in by_id and connection.target in by_id:
                inbound.setdefault(connection.target, []).append(connection)

        logger.info("Pipeline run started", node_count=len(nodes), level_count=len(graph.get_dependency_levels()))
        outputs: dict[str, Any] = {}
        completed: set[str] = set()
        scheduled: set[str] = set()
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async with asyncio.TaskGroup() as group:

            def schedule(node_id: str) -> None:
                if node_id not in scheduled:
                    scheduled.add(node_id)
                    group.create_task(run_node(node_id))

            async def run_node(node_id: str) -> None:
                inputs = self._collect_inputs(inbound.get(node_id, []), outputs)
                async with semaphore:
                    result = await self._execute_node(by_id[node_id], inputs)
                summary.results[node_id] = result
                if not result.success:
                    return
                outputs[node_id] = result.output
                completed.add(node_id)
                for ready in graph.get_newly_executable_nodes(node_id, completed):
                    schedule(ready)

            for root in graph.get_roots():
                schedule(root)

        summary.skipped = [node_id for node_id in graph.execution_order if node_id not in summary.results]
        logger.info(
            "Pipeline run finished",
            node_count=len(nodes),
            failed=len(summary.failed),
            skipped=len(summary.skipped),
        )

    @staticmethod
    def _collect_inputs(connections: Sequence[Connection], outputs: dict[str, Any]) -> dict[str, Any]:
        inputs: dict[str, Any] = {}
        for connection in connections:
            if connection.target_handle in inputs:
                logger.warning(
                    "Multiple connections into one input port; last one wins",
                    node_id=connection.target,
                    port=connection.target_handle,
                )
            inputs[connection.target_handle] = outputs[connection.source]
        return inputs

    async def _execute_node(self, node: NodeInstance, inputs: dict[str, Any]) -> ExecutionResult:
        executor = self._registry.get(node.type)
        if executor is None:
            result = ExecutionResult.failure(
                node.id,
                f"No executor registered for node type '{node.type}'",
                error_type=ErrorType.CONFIGURATION_ERROR,
            )
            self._set_status(node, NodeStatus.ERROR, result.error.message if result.error else None)
            return result

        context = ExecutionContext.create(node.id, inputs=inputs, config=node.config)
        try:
            validation = executor.validate(context)
        except Exception as e:
            logger.warning("Node validation raised", node_id=node.id, node_type=node.type, error=str(e))
            result = ExecutionResult.failure(
                node.id,
                f"Validation failed: {e}",
                error_type=ErrorType.VALIDATION_ERROR,
                details={"exception": type(e).__name__},
            )
            self._set_status(node, NodeStatus.ERROR, result.error.message if result.error else None)
            return result
        if not validation.valid:
            result = ExecutionResult.failure(
                node.id,
                validation.summary(),
                error_type=ErrorType.VALIDATION_ERROR,
                details={"codes": validation.codes()},
            )
            self._set_status(node, NodeStatus.ERROR, validation.summary())
            return result

        self._set_status(node, NodeStatus.PROCESSING)
        logger.debug("Node started", node_id=node.id, node_type=node.type)
        try:
            async with asyncio.timeout(self._node_timeout_ms / 1000):
                result = await self._invoke(executor, context)
        except TimeoutError:
            result = ExecutionResult.failure(
                node.id,
                f"Node execution timed out after {self._node_timeout_ms}ms",
                execution_time_ms=float(self._node_timeout_ms),
            )

        if result.success:
            self._set_status(node, NodeStatus.SUCCESS)
        else:
            message = result.error.message if result.error else "Unknown error"
            self._set_status(node, NodeStatus.ERROR, message)
        logger.debug(
            "Node finished",
            node_id=node.id,
            success=result.success,
            execution_time_ms=round(result.execution_time_ms, 3),
        )
        return result

    async def _invoke(self, executor: NodeExecutor, context: ExecutionContext) -> ExecutionResult:
        operation = executor.offload_operation
        offload = self._offload
        if offload is None or operation is None:
            return await executor.execute(context)

        async def offloaded() -> Any:
            dataset = executor.require_input_dataset(context)
            return await offload.run(operation, {"dataset": dataset, "config": dict(context.config)})

        return await executor.safe_execute(context, offloaded)
