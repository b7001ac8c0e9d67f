"""Node executors and their registry."""

from blockflow.plugins.base import NodeExecutor
from blockflow.plugins.registry import ExecutorPluginManager, ExecutorRegistry, create_default_registry

__all__ = ["ExecutorPluginManager", "ExecutorRegistry", "NodeExecutor", "create_default_registry"]
