"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE with no outbound dependencies to core,
engine or plugins.
"""

from blockflow.contracts.config_base import OperationConfig, OperationConfigError
from blockflow.contracts.dataset import Dataset, DatasetMetadata, cell_key, infer_column_type, is_missing
from blockflow.contracts.enums import (
    AggregateFunction,
    ColumnType,
    ErrorType,
    FilterOperator,
    LogicalOperator,
    NodeStatus,
    OffloadOperation,
    OffloadResponseType,
    SortDirection,
    TransportFailure,
)
from blockflow.contracts.errors import (
    DatasetParseError,
    DuplicateConnectionError,
    MissingColumnError,
    OffloadError,
    TransportError,
)
from blockflow.contracts.pipeline import Connection, NodeInstance, PipelineDefinition, Position, ensure_unique
from blockflow.contracts.results import (
    ExecutionContext,
    ExecutionErrorInfo,
    ExecutionMetadata,
    ExecutionResult,
    ValidationIssue,
    ValidationResult,
    ValidationWarning,
)

__all__ = [
    "AggregateFunction",
    "ColumnType",
    "Connection",
    "Dataset",
    "DatasetMetadata",
    "DatasetParseError",
    "DuplicateConnectionError",
    "ErrorType",
    "ExecutionContext",
    "ExecutionErrorInfo",
    "ExecutionMetadata",
    "ExecutionResult",
    "FilterOperator",
    "LogicalOperator",
    "MissingColumnError",
    "NodeInstance",
    "NodeStatus",
    "OffloadError",
    "OffloadOperation",
    "OffloadResponseType",
    "OperationConfig",
    "OperationConfigError",
    "PipelineDefinition",
    "Position",
    "SortDirection",
    "TransportError",
    "TransportFailure",
    "ValidationIssue",
    "ValidationResult",
    "ValidationWarning",
    "cell_key",
    "ensure_unique",
    "infer_column_type",
    "is_missing",
]
