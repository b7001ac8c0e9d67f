# src/blockflow/plugins/registry.py
"""Executor registry and pluggy-based executor discovery.

ExecutorRegistry is a plain type -> instance mapping with no execution
logic. ExecutorPluginManager collects executor classes from pluggy hooks
and fills a registry with one instance per node type.
"""

from __future__ import annotations

from typing import Any

import pluggy
import structlog

from blockflow.plugins.base import NodeExecutor
from blockflow.plugins.hookspecs import PROJECT_NAME, BlockflowExecutorSpec

logger = structlog.get_logger(__name__)


class ExecutorRegistry:
    """Maps a node type string to its executor. The last register() wins."""

    def __init__(self) -> None:
        self._executors: dict[str, NodeExecutor] = {}

    def register(self, node_type: str, executor: NodeExecutor) -> None:
        if node_type in self._executors:
            logger.debug("Replacing registered executor", node_type=node_type)
        self._executors[node_type] = executor

    def unregister(self, node_type: str) -> None:
        self._executors.pop(node_type, None)

    def get(self, node_type: str) -> NodeExecutor | None:
        return self._executors.get(node_type)

    def has(self, node_type: str) -> bool:
        return node_type in self._executors

    def get_registered_types(self) -> list[str]:
        return list(self._executors)

    def clear(self) -> None:
        self._executors.clear()

    def __contains__(self, node_type: object) -> bool:
        return node_type in self._executors

    def __len__(self) -> int:
        return len(self._executors)


class ExecutorPluginManager:
    """Discovers executor classes through the ``blockflow_get_executors`` hook.

    Usage:
        manager = ExecutorPluginManager()
        manager.register_builtin_plugins()
        registry = manager.build_registry()
    """

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(BlockflowExecutorSpec)
        self._executors: dict[str, type[NodeExecutor]] = {}

    def register_builtin_plugins(self) -> None:
        from blockflow.plugins.builtin import BuiltinExecutors

        self.register(BuiltinExecutors())

    def load_entrypoints(self) -> int:
        """Register plugins published under the ``blockflow`` entry point group."""
        count = self._pm.load_setuptools_entrypoints(PROJECT_NAME)
        self._refresh_cache()
        return count

    def register(self, plugin: Any) -> None:
        self._pm.register(plugin)
        self._refresh_cache()

    def _refresh_cache(self) -> None:
        """Rebuild the type -> class cache.

        Raises:
            ValueError: If two plugins contribute the same node type.
        """
        collected: dict[str, type[NodeExecutor]] = {}
        for executor_classes in self._pm.hook.blockflow_get_executors():
            for cls in executor_classes:
                node_type = cls.node_type
                if node_type in collected:
                    raise ValueError(
                        f"Duplicate executor node type: '{node_type}'. Already registered by {collected[node_type].__name__}"
                    )
                collected[node_type] = cls
        self._executors = collected

    def get_executor_classes(self) -> list[type[NodeExecutor]]:
        return list(self._executors.values())

    def build_registry(self, registry: ExecutorRegistry | None = None) -> ExecutorRegistry:
        target = registry if registry is not None else ExecutorRegistry()
        for node_type in sorted(self._executors):
            target.register(node_type, self._executors[node_type]())
        return target


def create_default_registry(*, load_entrypoints: bool = False) -> ExecutorRegistry:
    """Registry holding every built-in executor (and installed plugins if asked)."""
    manager = ExecutorPluginManager()
    manager.register_builtin_plugins()
    if load_entrypoints:
        manager.load_entrypoints()
    return manager.build_registry()
