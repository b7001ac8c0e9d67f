"""Execution context and outcomes.

These types answer: "What did a node see, and what did it produce?"

IMPORTANT:
- ExecutionResult is exactly one of output/error: success results carry no
  error, failure results carry no output. Use the factories.
- ValidationResult.valid is derived from errors; warnings never invalidate.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any

from blockflow.contracts.enums import ErrorType


@dataclass(frozen=True, slots=True)
class ExecutionMetadata:
    execution_id: str
    start_time: datetime

    @classmethod
    def new(cls) -> ExecutionMetadata:
        return cls(execution_id=f"exec_{uuid.uuid4().hex}", start_time=datetime.now(UTC))


@dataclass(frozen=True, slots=True)
class ExecutionContext:
    """Everything one node execution may read. Ephemeral, one per execution."""

    node_id: str
    inputs: Mapping[str, Any]
    config: Mapping[str, Any]
    metadata: ExecutionMetadata = field(default_factory=ExecutionMetadata.new)

    @classmethod
    def create(
        cls,
        node_id: str,
        *,
        inputs: Mapping[str, Any] | None = None,
        config: Mapping[str, Any] | None = None,
    ) -> ExecutionContext:
        return cls(
            node_id=node_id,
            inputs=MappingProxyType(dict(inputs or {})),
            config=MappingProxyType(dict(config or {})),
        )


@dataclass(frozen=True, slots=True)
class ExecutionErrorInfo:
    type: ErrorType
    message: str
    node_id: str
    details: Mapping[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    """Outcome of one node execution. Never raised, always returned."""

    success: bool
    execution_time_ms: float
    output: Any = None
    error: ExecutionErrorInfo | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.success and self.error is not None:
            raise ValueError("Successful ExecutionResult must not carry an error")
        if not self.success and self.error is None:
            raise ValueError("Failed ExecutionResult must carry an error; use ExecutionResult.failure()")
        if not self.success and self.output is not None:
            raise ValueError("Failed ExecutionResult must not carry output")

    @classmethod
    def ok(
        cls,
        output: Any,
        *,
        execution_time_ms: float,
        metadata: Mapping[str, Any] | None = None,
    ) -> ExecutionResult:
        return cls(success=True, output=output, execution_time_ms=execution_time_ms, metadata=metadata or {})

    @classmethod
    def failure(
        cls,
        node_id: str,
        message: str,
        *,
        error_type: ErrorType = ErrorType.EXECUTION_ERROR,
        execution_time_ms: float = 0.0,
        details: Mapping[str, Any] | None = None,
    ) -> ExecutionResult:
        return cls(
            success=False,
            execution_time_ms=execution_time_ms,
            error=ExecutionErrorInfo(type=error_type, message=message, node_id=node_id, details=details),
        )


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """A single configuration problem; ``code`` is a stable machine token."""

    field: str
    message: str
    code: str


@dataclass(frozen=True, slots=True)
class ValidationWarning:
    field: str
    message: str
    code: str | None = None


@dataclass(frozen=True, slots=True)
class ValidationResult:
    errors: tuple[ValidationIssue, ...] = ()
    warnings: tuple[ValidationWarning, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.errors

    @classmethod
    def of(
        cls,
        errors: Sequence[ValidationIssue] = (),
        warnings: Sequence[ValidationWarning] = (),
    ) -> ValidationResult:
        return cls(errors=tuple(errors), warnings=tuple(warnings))

    def codes(self) -> list[str]:
        return [issue.code for issue in self.errors]

    def summary(self) -> str:
        return "; ".join(f"{issue.field}: {issue.message}" for issue in self.errors)
