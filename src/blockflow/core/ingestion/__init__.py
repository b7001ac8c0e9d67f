# src/blockflow/core/ingestion/__init__.py
"""Turn external text and HTTP responses into Datasets."""

from blockflow.core.ingestion.delimited import dedupe_columns, infer_scalar, parse_delimited
from blockflow.core.ingestion.formats import TextFormat, parse_text
from blockflow.core.ingestion.http import (
    HttpRequestConfig,
    HttpTransport,
    dataset_from_response,
    fetch_dataset,
    httpx_transport,
)
from blockflow.core.ingestion.records import (
    dataset_from_array,
    dataset_from_json_records,
    dataset_from_json_value,
    extract_array,
    loads_strict,
    parse_json_records,
)

__all__ = [
    "HttpRequestConfig",
    "HttpTransport",
    "TextFormat",
    "dataset_from_array",
    "dataset_from_json_records",
    "dataset_from_json_value",
    "dataset_from_response",
    "dedupe_columns",
    "extract_array",
    "fetch_dataset",
    "httpx_transport",
    "infer_scalar",
    "loads_strict",
    "parse_delimited",
    "parse_json_records",
    "parse_text",
]
