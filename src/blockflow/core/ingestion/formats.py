# src/blockflow/core/ingestion/formats.py
"""Dispatch text to the right parser by declared format."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from blockflow.contracts.dataset import Dataset
from blockflow.core.ingestion.delimited import parse_delimited
from blockflow.core.ingestion.records import parse_json_records


class TextFormat(StrEnum):
    """Values:
    TABLE: Tab-separated, as copied from a spreadsheet
    CSV: Comma-separated
    TSV: Tab-separated
    JSON: Array of records, or an envelope object holding one
    """

    TABLE = "table"
    CSV = "csv"
    TSV = "tsv"
    JSON = "json"


DELIMITERS: dict[TextFormat, str] = {
    TextFormat.TABLE: "\t",
    TextFormat.CSV: ",",
    TextFormat.TSV: "\t",
}


def parse_text(
    text: str,
    text_format: TextFormat,
    *,
    has_header: bool = True,
    dynamic_typing: bool = False,
    delimiter: str | None = None,
    max_rows: int | None = None,
    source: Mapping[str, Any] | None = None,
) -> Dataset:
    """Parse ``text`` as ``text_format``; ``has_header`` is ignored for JSON.

    Raises:
        DatasetParseError: If the text is empty or malformed.
    """
    if text_format == TextFormat.JSON:
        dataset = parse_json_records(text, source=source)
        if max_rows is not None and dataset.row_count > max_rows:
            dataset = dataset.with_data(rows=dataset.rows[:max_rows])
        return dataset
    return parse_delimited(
        text,
        delimiter=delimiter or DELIMITERS[text_format],
        has_header=has_header,
        dynamic_typing=dynamic_typing,
        max_rows=max_rows,
        source=source,
    )
