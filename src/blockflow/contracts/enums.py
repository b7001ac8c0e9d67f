"""Status codes, error kinds and operator names shared across subsystems."""

from enum import StrEnum


class NodeStatus(StrEnum):
    """Lifecycle status of a pipeline node within one run."""

    IDLE = "idle"
    PROCESSING = "processing"
    SUCCESS = "success"
    ERROR = "error"


class ErrorType(StrEnum):
    """Category of an execution failure reported in ExecutionResult.error."""

    VALIDATION_ERROR = "validation_error"
    EXECUTION_ERROR = "execution_error"
    DATA_ERROR = "data_error"
    NETWORK_ERROR = "network_error"
    FILE_ERROR = "file_error"
    CONFIGURATION_ERROR = "configuration_error"
    DEPENDENCY_ERROR = "dependency_error"


class ColumnType(StrEnum):
    """Per-column type tag recorded in dataset metadata."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    NULL = "null"


class FilterOperator(StrEnum):
    """Comparison operators understood by the filter transform.

    GREATER_THAN_OR_EQUAL and LESS_THAN_OR_EQUAL are long-form aliases
    of GREATER_EQUAL and LESS_EQUAL.
    """

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_EQUAL = "greater_equal"
    LESS_EQUAL = "less_equal"
    GREATER_THAN_OR_EQUAL = "greater_than_or_equal"
    LESS_THAN_OR_EQUAL = "less_than_or_equal"
    IN = "in"
    NOT_IN = "not_in"
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"


class LogicalOperator(StrEnum):
    AND = "and"
    OR = "or"


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"


class AggregateFunction(StrEnum):
    COUNT = "count"
    SUM = "sum"
    AVG = "avg"
    MIN = "min"
    MAX = "max"
    FIRST = "first"
    LAST = "last"


class OffloadOperation(StrEnum):
    """Request types accepted by the offload worker."""

    FILTER = "filter"
    SORT = "sort"
    GROUP = "group"
    TRANSFORM = "transform"
    AGGREGATE = "aggregate"


class OffloadResponseType(StrEnum):
    SUCCESS = "success"
    ERROR = "error"
    PROGRESS = "progress"


class TransportFailure(StrEnum):
    """Cause of an HTTP ingestion failure.

    Values:
        STATUS: Server answered with a non-2xx status
        TIMEOUT: No response within the configured bound
        NETWORK: Connection-level failure (DNS, refused, reset)
    """

    STATUS = "status"
    TIMEOUT = "timeout"
    NETWORK = "network"
