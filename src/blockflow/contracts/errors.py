"""Exception types that cross subsystem boundaries.

Executors never let these escape ``execute()``: the safe-execution wrapper
in ``blockflow.plugins.base`` converts them into failed ExecutionResults.
Graph errors are the exception and abort a run before any node executes.
"""

from __future__ import annotations

from blockflow.contracts.enums import TransportFailure


class DuplicateConnectionError(ValueError):
    """Raised when a pipeline repeats a node id or a connection tuple."""

    pass


class DatasetParseError(ValueError):
    """Raised when text or a decoded payload cannot be turned into a Dataset."""

    pass


class TransportError(Exception):
    """HTTP ingestion failure with a cause-specific message prefix.

    Callers branch on ``cause`` rather than parsing the message.
    """

    def __init__(
        self,
        message: str,
        *,
        cause: TransportFailure,
        status_code: int | None = None,
        reason: str | None = None,
    ) -> None:
        super().__init__(message)
        self.cause = cause
        self.status_code = status_code
        self.reason = reason

    @classmethod
    def from_status(cls, status_code: int, reason: str) -> TransportError:
        return cls(
            f"HTTP {status_code}: {reason}",
            cause=TransportFailure.STATUS,
            status_code=status_code,
            reason=reason,
        )

    @classmethod
    def timed_out(cls, timeout_ms: int) -> TransportError:
        return cls(f"Request timed out after {timeout_ms}ms", cause=TransportFailure.TIMEOUT)

    @classmethod
    def network(cls, detail: str) -> TransportError:
        return cls(f"Request failed: {detail}", cause=TransportFailure.NETWORK)


class OffloadError(Exception):
    """Terminal error response received for an offloaded operation."""

    def __init__(self, message: str, *, request_id: str) -> None:
        super().__init__(message)
        self.request_id = request_id


class MissingColumnError(LookupError):
    """Raised when an operation references a column the dataset lacks."""

    def __init__(self, column: str, *, role: str = "Column") -> None:
        super().__init__(f"{role} '{column}' not found in dataset")
        self.column = column
