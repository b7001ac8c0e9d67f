# tests/unit/plugins/test_executor_registry.py
"""Tests for the executor registry and pluggy discovery."""

from __future__ import annotations

import pytest

from blockflow.contracts import ExecutionContext, ExecutionResult, ValidationResult
from blockflow.plugins import ExecutorPluginManager, ExecutorRegistry
from blockflow.plugins.base import NodeExecutor
from blockflow.plugins.hookspecs import hookimpl
from blockflow.plugins.transforms import FilterExecutor, SortExecutor

BUILTIN_TYPES = {"example-data", "paste-input", "file-input", "http-request", "filter", "sort", "group"}


class NoopExecutor(NodeExecutor):
    node_type = "noop"
    description = "Does nothing"

    def validate(self, context: ExecutionContext) -> ValidationResult:
        return ValidationResult.of()

    async def execute(self, context: ExecutionContext) -> ExecutionResult:
        return await self.safe_execute(context, lambda: None)


class NoopPlugin:
    @hookimpl
    def blockflow_get_executors(self) -> list[type[NodeExecutor]]:
        return [NoopExecutor]


class ShadowFilterPlugin:
    @hookimpl
    def blockflow_get_executors(self) -> list[type[NodeExecutor]]:
        class OtherFilter(NoopExecutor):
            node_type = "filter"

        return [OtherFilter]


class TestExecutorRegistry:
    def test_register_and_lookup(self) -> None:
        registry = ExecutorRegistry()
        executor = FilterExecutor()

        registry.register("filter", executor)

        assert registry.get("filter") is executor
        assert registry.has("filter")
        assert "filter" in registry
        assert len(registry) == 1

    def test_unknown_type_is_none(self) -> None:
        assert ExecutorRegistry().get("nope") is None

    def test_last_registration_wins(self) -> None:
        registry = ExecutorRegistry()
        second = SortExecutor()

        registry.register("x", FilterExecutor())
        registry.register("x", second)

        assert registry.get("x") is second
        assert registry.get_registered_types() == ["x"]

    def test_unregister_and_clear(self) -> None:
        registry = ExecutorRegistry()
        registry.register("a", FilterExecutor())
        registry.register("b", SortExecutor())

        registry.unregister("a")
        registry.unregister("never-registered")
        assert registry.get_registered_types() == ["b"]

        registry.clear()
        assert len(registry) == 0


class TestPluginDiscovery:
    def test_default_registry_has_every_builtin(self, registry: ExecutorRegistry) -> None:
        assert set(registry.get_registered_types()) == BUILTIN_TYPES

    def test_registered_executor_matches_its_type(self, registry: ExecutorRegistry) -> None:
        for node_type in registry.get_registered_types():
            executor = registry.get(node_type)
            assert executor is not None
            assert executor.node_type == node_type

    def test_third_party_plugin_is_added(self) -> None:
        manager = ExecutorPluginManager()
        manager.register_builtin_plugins()
        manager.register(NoopPlugin())

        registry = manager.build_registry()

        assert isinstance(registry.get("noop"), NoopExecutor)
        assert NoopExecutor in manager.get_executor_classes()
        assert len(manager.get_executor_classes()) == len(BUILTIN_TYPES) + 1

    def test_duplicate_node_type_is_rejected(self) -> None:
        manager = ExecutorPluginManager()
        manager.register_builtin_plugins()

        with pytest.raises(ValueError, match="Duplicate executor node type: 'filter'"):
            manager.register(ShadowFilterPlugin())

    def test_build_into_existing_registry(self) -> None:
        registry = ExecutorRegistry()
        manager = ExecutorPluginManager()
        manager.register(NoopPlugin())

        result = manager.build_registry(registry)

        assert result is registry
        assert registry.get_registered_types() == ["noop"]
