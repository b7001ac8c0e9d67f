# src/blockflow/plugins/sources/http_request.py
"""HTTP request executor: fetch a URL and infer a dataset from the response."""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import urlparse

from blockflow.contracts.dataset import Dataset
from blockflow.contracts.results import ExecutionContext, ExecutionResult, ValidationIssue, ValidationResult
from blockflow.core.ingestion.http import (
    DEFAULT_TIMEOUT_MS,
    MAX_TIMEOUT_MS,
    MIN_TIMEOUT_MS,
    SUPPORTED_METHODS,
    HttpRequestConfig,
    HttpTransport,
    fetch_dataset,
)
from blockflow.plugins.base import NodeExecutor


def _is_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _declares_json(headers: Any) -> bool:
    if not isinstance(headers, dict):
        return True
    for name, value in headers.items():
        if str(name).lower() == "content-type":
            return "json" in str(value).lower()
    return True


class HttpRequestExecutor(NodeExecutor):
    """Config options: url (required), method, headers, body, timeout (ms)."""

    node_type = "http-request"
    description = "Dataset from an HTTP API response"

    def __init__(self, transport: HttpTransport | None = None, *, default_timeout_ms: int = DEFAULT_TIMEOUT_MS) -> None:
        self._transport = transport
        self._default_timeout_ms = default_timeout_ms

    def validate(self, context: ExecutionContext) -> ValidationResult:
        config = context.config
        errors: list[ValidationIssue] = []

        url = config.get("url")
        if not url:
            errors.append(ValidationIssue("url", "URL is required", "REQUIRED_FIELD"))
        elif not isinstance(url, str) or not _is_http_url(url):
            errors.append(ValidationIssue("url", "URL must be a valid http or https address", "INVALID_URL"))

        method = config.get("method", "GET")
        if not isinstance(method, str) or method.upper() not in SUPPORTED_METHODS:
            errors.append(
                ValidationIssue("method", f"Method must be one of {', '.join(SUPPORTED_METHODS)}", "INVALID_METHOD")
            )

        headers = config.get("headers")
        if headers is not None and not isinstance(headers, dict):
            errors.append(ValidationIssue("headers", "Headers must be an object", "INVALID_HEADERS"))

        body = config.get("body")
        if body is not None and body != "":
            if not isinstance(body, str):
                errors.append(ValidationIssue("body", "Body must be a string", "INVALID_BODY"))
            elif _declares_json(headers):
                try:
                    json.loads(body)
                except ValueError:
                    errors.append(ValidationIssue("body", "Body is not valid JSON", "INVALID_JSON"))

        timeout = config.get("timeout")
        if timeout is not None and (
            not isinstance(timeout, int) or isinstance(timeout, bool) or not MIN_TIMEOUT_MS <= timeout <= MAX_TIMEOUT_MS
        ):
            errors.append(
                ValidationIssue(
                    "timeout",
                    f"Timeout must be between {MIN_TIMEOUT_MS} and {MAX_TIMEOUT_MS} milliseconds",
                    "INVALID_TIMEOUT",
                )
            )
        return ValidationResult.of(errors)

    async def execute(self, context: ExecutionContext) -> ExecutionResult:
        return await self.safe_execute(context, lambda: self._run(context))

    async def _run(self, context: ExecutionContext) -> Dataset:
        raw = dict(context.config)
        raw.setdefault("timeout", self._default_timeout_ms)
        if raw.get("body") == "":
            raw.pop("body")
        request = HttpRequestConfig.from_dict(raw)
        return await fetch_dataset(request, transport=self._transport)
