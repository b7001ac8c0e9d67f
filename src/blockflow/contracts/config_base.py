# src/blockflow/contracts/config_base.py
"""Base class for typed operation configurations.

Node configs arrive as free-form camelCase maps edited by an external UI.
Subclasses get:
- camelCase aliases with snake_case accepted too
- a ``from_dict`` factory raising OperationConfigError with a clear message

Example usage:
    class SortKey(OperationConfig):
        column: str
        direction: SortDirection = SortDirection.ASC

    key = SortKey.from_dict({"column": "age", "direction": "desc"})
"""

from collections.abc import Mapping
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel


class OperationConfigError(Exception):
    """Raised when an operation configuration cannot be parsed."""

    pass


class OperationConfig(BaseModel):
    # Unknown keys are ignored: UI configs carry presentation-only fields.
    model_config = ConfigDict(extra="ignore", frozen=True, alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> Self:
        """Create config from a mapping.

        Raises:
            OperationConfigError: If configuration is invalid.
        """
        if not isinstance(config, Mapping):
            raise OperationConfigError(
                f"Invalid configuration for {cls.__name__}: config must be a mapping, got {type(config).__name__}."
            )
        try:
            return cls.model_validate(dict(config))
        except ValidationError as e:
            raise OperationConfigError(f"Invalid configuration for {cls.__name__}: {e}") from e
