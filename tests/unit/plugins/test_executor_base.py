# tests/unit/plugins/test_executor_base.py
"""Tests for NodeExecutor: safe execution and input helpers."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from blockflow.contracts import Dataset, ErrorType, ExecutionContext, ExecutionResult, TransportError, ValidationResult
from blockflow.plugins.base import NO_INPUT_MESSAGE, NodeExecutor


class EchoExecutor(NodeExecutor):
    node_type = "echo"

    def __init__(self, operation: Any = None) -> None:
        self._operation = operation

    def validate(self, context: ExecutionContext) -> ValidationResult:
        return ValidationResult.of(self.input_issues(context))

    async def execute(self, context: ExecutionContext) -> ExecutionResult:
        return await self.safe_execute(context, self._operation or (lambda: self.require_input_dataset(context)))


class TestSafeExecute:
    @pytest.mark.asyncio
    async def test_success_wraps_output(self, make_context, people: Dataset) -> None:
        context = make_context(dataset=people, node_id="n1")

        result = await EchoExecutor().execute(context)

        assert result.success
        assert result.output is people
        assert result.execution_time_ms >= 0
        assert result.metadata == {"executionId": context.metadata.execution_id}

    @pytest.mark.asyncio
    async def test_awaitable_operations_are_awaited(self, make_context) -> None:
        async def produce() -> str:
            await asyncio.sleep(0)
            return "done"

        result = await EchoExecutor(produce).execute(make_context())

        assert result.output == "done"

    @pytest.mark.asyncio
    async def test_raised_fault_becomes_failure(self, make_context) -> None:
        def explode() -> None:
            raise RuntimeError("kaboom")

        result = await EchoExecutor(explode).execute(make_context(node_id="n7"))

        assert not result.success
        assert result.error is not None
        assert result.error.message == "kaboom"
        assert result.error.node_id == "n7"
        assert result.error.type is ErrorType.EXECUTION_ERROR
        assert result.error.details == {"exception": "RuntimeError"}

    @pytest.mark.asyncio
    async def test_transport_failures_record_their_cause(self, make_context) -> None:
        def fail() -> None:
            raise TransportError.timed_out(5000)

        result = await EchoExecutor(fail).execute(make_context())

        assert result.error is not None
        assert result.error.details == {"exception": "TransportError", "cause": "timeout"}

    @pytest.mark.asyncio
    async def test_missing_input(self, make_context) -> None:
        result = await EchoExecutor().execute(make_context())

        assert result.error is not None
        assert result.error.message == NO_INPUT_MESSAGE


class TestInputHelpers:
    def test_first_dataset_among_inputs_is_used(self, people: Dataset) -> None:
        context = ExecutionContext.create("n", inputs={"meta": {"x": 1}, "input": people})

        assert NodeExecutor.find_input_dataset(context) is people

    def test_input_issue_reported(self, make_context) -> None:
        result = EchoExecutor().validate(make_context())

        assert not result.valid
        assert result.codes() == ["REQUIRED_INPUT"]
        assert result.errors[0].field == "input"
