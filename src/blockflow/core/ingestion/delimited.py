# src/blockflow/core/ingestion/delimited.py
"""CSV/TSV text parsing into a Dataset.

Uses csv.reader on an in-memory stream opened with newline='' so quoted
fields may contain the delimiter, embedded newlines, and doubled quotes.
Ragged rows are kept as-is.
"""

from __future__ import annotations

import csv
import io
import re
from collections.abc import Mapping, Sequence
from typing import Any

from blockflow.contracts.dataset import Dataset
from blockflow.contracts.errors import DatasetParseError

_INTEGER = re.compile(r"^[+-]?\d+$")
_FLOAT = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$")


def infer_scalar(text: str) -> Any:
    """Typed value for a cell when dynamic typing is on."""
    stripped = text.strip()
    if stripped == "":
        return None
    lowered = stripped.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if _INTEGER.match(stripped):
        return int(stripped)
    if _FLOAT.match(stripped):
        return float(stripped)
    return text


def dedupe_columns(names: Sequence[str]) -> list[str]:
    """Make header names unique by suffixing repeats: a, a_2, a_3."""
    seen: dict[str, int] = {}
    result: list[str] = []
    for name in names:
        candidate = name
        while candidate in seen:
            seen[name] += 1
            candidate = f"{name}_{seen[name]}"
        seen.setdefault(name, 1)
        seen.setdefault(candidate, 1)
        result.append(candidate)
    return result


def parse_delimited(
    text: str,
    *,
    delimiter: str = ",",
    has_header: bool = True,
    dynamic_typing: bool = False,
    max_rows: int | None = None,
    source: Mapping[str, Any] | None = None,
) -> Dataset:
    """Parse delimited text.

    With ``has_header`` the first row names the columns (blank names become
    ``Unnamed``); otherwise columns are ``Column 1..N`` for the widest row.
    Blank lines are skipped.

    Raises:
        DatasetParseError: On empty input or malformed quoting.
    """
    if not text or not text.strip():
        raise DatasetParseError("No data provided")

    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)
    try:
        rows = [row for row in reader if any(cell.strip() for cell in row)]
    except csv.Error as e:
        raise DatasetParseError(f"Malformed delimited data at line {reader.line_num}: {e}") from e
    if not rows:
        raise DatasetParseError("No data provided")

    if has_header:
        columns = [cell.strip() or "Unnamed" for cell in rows[0]]
        body = rows[1:]
    else:
        width = max(len(row) for row in rows)
        columns = [f"Column {i}" for i in range(1, width + 1)]
        body = rows

    if max_rows is not None:
        body = body[:max_rows]
    if dynamic_typing:
        body = [[infer_scalar(cell) for cell in row] for row in body]

    return Dataset.create(dedupe_columns(columns), body, source=source)
