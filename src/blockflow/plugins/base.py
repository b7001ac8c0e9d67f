# src/blockflow/plugins/base.py
"""Base class for node executors.

Every executor implements ``validate`` (pure, synchronous) and ``execute``
(async, never raises). Subclasses route their core logic through
``safe_execute``, which times the call and converts any raised fault into
a failed ExecutionResult carrying the node id.

Example:
    class UppercaseExecutor(NodeExecutor):
        node_type = "uppercase"

        def validate(self, context):
            return ValidationResult.of(self.input_issues(context))

        async def execute(self, context):
            return await self.safe_execute(context, lambda: self._run(context))
"""

from __future__ import annotations

import inspect
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any, ClassVar

import structlog

from blockflow.contracts.dataset import Dataset
from blockflow.contracts.enums import ErrorType, OffloadOperation
from blockflow.contracts.errors import TransportError
from blockflow.contracts.results import ExecutionContext, ExecutionResult, ValidationIssue, ValidationResult

logger = structlog.get_logger(__name__)

NO_INPUT_MESSAGE = "No input dataset provided"


class MissingInputError(ValueError):
    """Raised inside an executor when no input dataset is available."""

    pass


class NodeExecutor(ABC):
    """Polymorphic unit implementing validation and execution for one node type."""

    node_type: ClassVar[str]
    description: ClassVar[str] = ""
    # Set on transforms the offload worker can run.
    offload_operation: ClassVar[OffloadOperation | None] = None

    @abstractmethod
    def validate(self, context: ExecutionContext) -> ValidationResult:
        """Inspect inputs and config; no side effects."""
        ...

    @abstractmethod
    async def execute(self, context: ExecutionContext) -> ExecutionResult:
        """Run the node. Must return, never raise."""
        ...

    async def safe_execute(
        self,
        context: ExecutionContext,
        operation: Callable[[], Any | Awaitable[Any]],
    ) -> ExecutionResult:
        start = time.perf_counter()
        try:
            output = operation()
            if inspect.isawaitable(output):
                output = await output
        except Exception as e:
            elapsed_ms = (time.perf_counter() - start) * 1000
            details: dict[str, Any] = {"exception": type(e).__name__}
            if isinstance(e, TransportError):
                details["cause"] = str(e.cause)
            logger.warning(
                "Node execution failed",
                node_id=context.node_id,
                node_type=self.node_type,
                error=str(e),
            )
            return ExecutionResult.failure(
                context.node_id,
                str(e) or type(e).__name__,
                error_type=ErrorType.EXECUTION_ERROR,
                execution_time_ms=elapsed_ms,
                details=details,
            )
        elapsed_ms = (time.perf_counter() - start) * 1000
        return ExecutionResult.ok(
            output,
            execution_time_ms=elapsed_ms,
            metadata={"executionId": context.metadata.execution_id},
        )

    @staticmethod
    def find_input_dataset(context: ExecutionContext) -> Dataset | None:
        """The first Dataset among the inputs, in port order."""
        for value in context.inputs.values():
            if isinstance(value, Dataset):
                return value
        return None

    def require_input_dataset(self, context: ExecutionContext) -> Dataset:
        dataset = self.find_input_dataset(context)
        if dataset is None:
            raise MissingInputError(NO_INPUT_MESSAGE)
        return dataset

    def input_issues(self, context: ExecutionContext) -> list[ValidationIssue]:
        if self.find_input_dataset(context) is None:
            return [ValidationIssue(field="input", message=NO_INPUT_MESSAGE, code="REQUIRED_INPUT")]
        return []

    def __repr__(self) -> str:
        return f"{type(self).__name__}(node_type={self.node_type!r})"
