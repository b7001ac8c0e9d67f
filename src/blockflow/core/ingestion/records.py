# src/blockflow/core/ingestion/records.py
"""JSON values to Dataset.

Shared by JSON text ingestion and HTTP response inference. The envelope
rule: an object with exactly one array-valued top-level property stands
for that array. Objects with zero or several array properties are not
unwrapped.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

from blockflow.contracts.dataset import Dataset
from blockflow.contracts.errors import DatasetParseError


def _reject_nonfinite_constant(value: str) -> None:
    """Reject NaN/Infinity, which RFC 8259 does not allow."""
    raise ValueError(f"Non-standard JSON constant '{value}' is not allowed")


def loads_strict(text: str) -> Any:
    """json.loads that rejects non-finite constants.

    Raises:
        DatasetParseError: If the text is not valid JSON.
    """
    try:
        return json.loads(text, parse_constant=_reject_nonfinite_constant)
    except ValueError as e:
        raise DatasetParseError(f"Invalid JSON: {e}") from e


def extract_array(value: Mapping[str, Any]) -> list[Any] | None:
    """The single array-valued property of an envelope object, else None."""
    arrays = [item for item in value.values() if isinstance(item, list)]
    return arrays[0] if len(arrays) == 1 else None


def normalize_cell(value: Any) -> Any:
    """Nested objects and arrays are stored as their JSON text."""
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return value


def dataset_from_array(items: Sequence[Any], *, source: Mapping[str, Any] | None = None) -> Dataset:
    """Array of objects -> union of keys; anything else -> one ``value`` column."""
    if not items:
        return Dataset.create([], [], source=source)
    if all(isinstance(item, dict) for item in items):
        columns: dict[str, None] = {}
        for item in items:
            for key in item:
                columns.setdefault(str(key), None)
        names = list(columns)
        rows = [tuple(normalize_cell(item.get(name)) for name in names) for item in items]
        return Dataset.create(names, rows, source=source)
    return Dataset.create(["value"], [(normalize_cell(item),) for item in items], source=source)


def dataset_from_json_records(
    value: Any,
    *,
    data_key: str | None = None,
    source: Mapping[str, Any] | None = None,
) -> Dataset:
    """Strict record ingestion: the value must be (or envelope) a non-empty array.

    Raises:
        DatasetParseError: If no array can be found or it is empty.
    """
    if data_key is not None:
        if not isinstance(value, dict) or data_key not in value:
            raise DatasetParseError(f"JSON data has no property '{data_key}'")
        value = value[data_key]
    if isinstance(value, dict):
        extracted = extract_array(value)
        if extracted is None:
            raise DatasetParseError("JSON data must be an array or an object with exactly one array property")
        value = extracted
    if not isinstance(value, list):
        raise DatasetParseError("JSON data must be an array")
    if not value:
        raise DatasetParseError("JSON array cannot be empty")
    return dataset_from_array(value, source=source)


def parse_json_records(
    text: str,
    *,
    data_key: str | None = None,
    source: Mapping[str, Any] | None = None,
) -> Dataset:
    if not text or not text.strip():
        raise DatasetParseError("No data provided")
    return dataset_from_json_records(loads_strict(text), data_key=data_key, source=source)


def dataset_from_json_value(value: Any, *, source: Mapping[str, Any] | None = None) -> Dataset:
    """Lenient shape inference used for API responses.

    - array -> dataset_from_array
    - envelope object -> its array
    - other object -> ``key``/``value`` rows, one per top-level property
    - null -> empty dataset
    - scalar -> one ``response`` cell
    """
    if isinstance(value, list):
        return dataset_from_array(value, source=source)
    if isinstance(value, dict):
        extracted = extract_array(value)
        if extracted is not None:
            return dataset_from_array(extracted, source=source)
        return Dataset.create(
            ["key", "value"],
            [(str(key), normalize_cell(item)) for key, item in value.items()],
            source=source,
        )
    if value is None:
        return Dataset.create([], [], source=source)
    return Dataset.create(["response"], [(value,)], source=source)
