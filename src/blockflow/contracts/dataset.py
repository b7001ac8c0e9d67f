# src/blockflow/contracts/dataset.py
"""Dataset: the immutable tabular value exchanged between pipeline nodes.

Rows are tuples of cells aligned positionally to ``columns``. Rows may be
ragged (shorter or longer than ``columns``); use ``cell()`` to index them.
Metadata counts are derived from the data on every construction through
``Dataset.create()`` / ``Dataset.with_data()`` and a mismatched count is
rejected in ``__post_init__``.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from types import MappingProxyType
from typing import Any

from blockflow.contracts.enums import ColumnType
from blockflow.contracts.errors import MissingColumnError

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}([T ]\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?)?$")

type Row = tuple[Any, ...]


def is_missing(value: Any) -> bool:
    """True for cells that count as null (None or the empty string)."""
    return value is None or value == ""


def cell_key(value: Any) -> Any:
    """Hashable value-equality key for a cell.

    Booleans are tagged so ``True`` and ``1`` stay distinct; JSON containers
    are keyed by their canonical serialization.
    """
    if isinstance(value, bool):
        return ("bool", value)
    if isinstance(value, (dict, list)):
        return ("json", json.dumps(value, sort_keys=True, default=str))
    try:
        hash(value)
    except TypeError:
        return ("repr", repr(value))
    return value


def infer_column_type(values: Iterable[Any]) -> ColumnType:
    """Type tag of the first non-missing value, or NULL if there is none."""
    for value in values:
        if is_missing(value):
            continue
        if isinstance(value, bool):
            return ColumnType.BOOLEAN
        if isinstance(value, (int, float)):
            return ColumnType.NUMBER
        if isinstance(value, (datetime, date)):
            return ColumnType.DATE
        if isinstance(value, str) and _ISO_DATE.match(value):
            return ColumnType.DATE
        return ColumnType.STRING
    return ColumnType.NULL


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class DatasetMetadata:
    row_count: int
    column_count: int
    types: Mapping[str, ColumnType]
    nullable: Mapping[str, bool]
    unique: Mapping[str, bool]
    created: datetime
    modified: datetime
    source: Mapping[str, Any] | None = None

    @classmethod
    def compute(
        cls,
        columns: Sequence[str],
        rows: Sequence[Row],
        *,
        created: datetime | None = None,
        source: Mapping[str, Any] | None = None,
    ) -> DatasetMetadata:
        types: dict[str, ColumnType] = {}
        nullable: dict[str, bool] = {}
        unique: dict[str, bool] = {}
        for index, column in enumerate(columns):
            values = [row[index] if index < len(row) else None for row in rows]
            types[column] = infer_column_type(values)
            nullable[column] = any(is_missing(v) for v in values)
            unique[column] = len({cell_key(v) for v in values}) == len(values)
        now = _now()
        return cls(
            row_count=len(rows),
            column_count=len(columns),
            types=MappingProxyType(types),
            nullable=MappingProxyType(nullable),
            unique=MappingProxyType(unique),
            created=created or now,
            modified=now,
            source=MappingProxyType(dict(source)) if source is not None else None,
        )


@dataclass(frozen=True, slots=True)
class Dataset:
    columns: tuple[str, ...]
    rows: tuple[Row, ...]
    metadata: DatasetMetadata = field(compare=False)

    def __post_init__(self) -> None:
        if len(set(self.columns)) != len(self.columns):
            raise ValueError(f"Dataset columns must be unique, got {list(self.columns)}")
        if self.metadata.row_count != len(self.rows) or self.metadata.column_count != len(self.columns):
            raise ValueError(
                f"Dataset metadata is stale: metadata says {self.metadata.row_count}x{self.metadata.column_count}, "
                f"data is {len(self.rows)}x{len(self.columns)}"
            )

    @classmethod
    def create(
        cls,
        columns: Sequence[str],
        rows: Iterable[Sequence[Any]],
        *,
        source: Mapping[str, Any] | None = None,
        created: datetime | None = None,
    ) -> Dataset:
        column_tuple = tuple(columns)
        row_tuple = tuple(tuple(row) for row in rows)
        metadata = DatasetMetadata.compute(column_tuple, row_tuple, created=created, source=source)
        return cls(columns=column_tuple, rows=row_tuple, metadata=metadata)

    @classmethod
    def from_records(
        cls,
        records: Sequence[Mapping[str, Any]],
        *,
        source: Mapping[str, Any] | None = None,
    ) -> Dataset:
        """Build from dict rows; columns are the ordered union of keys."""
        columns: dict[str, None] = {}
        for record in records:
            for key in record:
                columns.setdefault(str(key), None)
        names = list(columns)
        rows = [tuple(record.get(name) for name in names) for record in records]
        return cls.create(names, rows, source=source)

    def with_data(
        self,
        columns: Sequence[str] | None = None,
        rows: Iterable[Sequence[Any]] | None = None,
    ) -> Dataset:
        """New dataset derived from this one, keeping its source and creation time."""
        return Dataset.create(
            self.columns if columns is None else columns,
            self.rows if rows is None else rows,
            source=self.metadata.source,
            created=self.metadata.created,
        )

    def column_index(self, column: str) -> int:
        """Position of ``column``; raises MissingColumnError if absent."""
        try:
            return self.columns.index(column)
        except ValueError:
            raise MissingColumnError(column) from None

    def has_column(self, column: str) -> bool:
        return column in self.columns

    @staticmethod
    def cell(row: Row, index: int) -> Any:
        return row[index] if index < len(row) else None

    def column_values(self, column: str) -> list[Any]:
        index = self.column_index(column)
        return [self.cell(row, index) for row in self.rows]

    def to_records(self) -> list[dict[str, Any]]:
        return [{name: self.cell(row, i) for i, name in enumerate(self.columns)} for row in self.rows]

    @property
    def row_count(self) -> int:
        return self.metadata.row_count

    @property
    def column_count(self) -> int:
        return self.metadata.column_count
