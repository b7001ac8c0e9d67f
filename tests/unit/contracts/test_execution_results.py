# tests/unit/contracts/test_execution_results.py
"""Tests for ExecutionResult and ValidationResult invariants."""

from __future__ import annotations

import pytest

from blockflow.contracts import (
    ErrorType,
    ExecutionContext,
    ExecutionResult,
    ValidationIssue,
    ValidationResult,
    ValidationWarning,
)


class TestExecutionResult:
    def test_ok_carries_output_and_no_error(self) -> None:
        result = ExecutionResult.ok("data", execution_time_ms=1.5)

        assert result.success
        assert result.output == "data"
        assert result.error is None

    def test_failure_carries_error_and_no_output(self) -> None:
        result = ExecutionResult.failure("n1", "boom", error_type=ErrorType.NETWORK_ERROR)

        assert not result.success
        assert result.output is None
        assert result.error is not None
        assert result.error.type is ErrorType.NETWORK_ERROR
        assert result.error.node_id == "n1"

    def test_failure_without_error_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="must carry an error"):
            ExecutionResult(success=False, execution_time_ms=0.0)

    def test_failure_with_output_is_rejected(self) -> None:
        result = ExecutionResult.failure("n1", "boom")

        with pytest.raises(ValueError, match="must not carry output"):
            ExecutionResult(success=False, execution_time_ms=0.0, output=1, error=result.error)


class TestExecutionContext:
    def test_each_context_gets_a_fresh_execution_id(self) -> None:
        first = ExecutionContext.create("n1")
        second = ExecutionContext.create("n1")

        assert first.metadata.execution_id.startswith("exec_")
        assert first.metadata.execution_id != second.metadata.execution_id

    def test_inputs_are_read_only(self) -> None:
        context = ExecutionContext.create("n1", inputs={"input": 1})

        with pytest.raises(TypeError):
            context.inputs["input"] = 2  # type: ignore[index]


class TestValidationResult:
    def test_valid_iff_no_errors(self) -> None:
        assert ValidationResult.of().valid
        assert ValidationResult.of(warnings=[ValidationWarning("f", "careful")]).valid
        assert not ValidationResult.of([ValidationIssue("f", "bad", "INVALID_VALUE")]).valid

    def test_summary_and_codes(self) -> None:
        result = ValidationResult.of(
            [
                ValidationIssue("url", "URL is required", "REQUIRED_FIELD"),
                ValidationIssue("method", "Unsupported method", "INVALID_METHOD"),
            ]
        )

        assert result.codes() == ["REQUIRED_FIELD", "INVALID_METHOD"]
        assert result.summary() == "url: URL is required; method: Unsupported method"
