# src/blockflow/core/ingestion/http.py
"""HTTP ingestion: issue a request through an injected transport and infer a Dataset.

The transport is any async callable taking the request descriptor and
returning an ``httpx.Response``. The default uses ``httpx.AsyncClient``.

Failures surface as TransportError with a cause-specific prefix:
- ``HTTP {status}: {reason}`` for non-2xx responses
- ``Request timed out after {ms}ms``
- ``Request failed: ...`` for connection-level errors
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import httpx
import structlog
from pydantic import Field, field_validator

from blockflow.contracts.config_base import OperationConfig
from blockflow.contracts.dataset import Dataset
from blockflow.contracts.errors import DatasetParseError, TransportError
from blockflow.core.ingestion.delimited import parse_delimited
from blockflow.core.ingestion.records import dataset_from_json_value, loads_strict

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_MS = 10_000
MIN_TIMEOUT_MS = 1_000
MAX_TIMEOUT_MS = 60_000
SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE")
BODY_METHODS = frozenset({"POST", "PUT"})
DEFAULT_CONTENT_TYPE = "application/json"


class HttpRequestConfig(OperationConfig):
    """Request descriptor; ``timeout`` is in milliseconds."""

    url: str
    method: str = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    body: str | None = None
    timeout: int = Field(default=DEFAULT_TIMEOUT_MS, ge=MIN_TIMEOUT_MS, le=MAX_TIMEOUT_MS)

    @field_validator("method")
    @classmethod
    def _known_method(cls, value: str) -> str:
        method = value.upper()
        if method not in SUPPORTED_METHODS:
            raise ValueError(f"Unsupported HTTP method: {value}")
        return method

    def outgoing_headers(self) -> dict[str, str]:
        if any(name.lower() == "content-type" for name in self.headers):
            return dict(self.headers)
        return {"Content-Type": DEFAULT_CONTENT_TYPE, **self.headers}

    def outgoing_body(self) -> str | None:
        return self.body if self.method in BODY_METHODS else None


type HttpTransport = Callable[[HttpRequestConfig], Awaitable[httpx.Response]]


async def httpx_transport(request: HttpRequestConfig) -> httpx.Response:
    async with httpx.AsyncClient(follow_redirects=True) as client:
        return await client.request(
            request.method,
            request.url,
            headers=request.outgoing_headers(),
            content=request.outgoing_body(),
            timeout=request.timeout / 1000,
        )


def media_type(response: httpx.Response) -> str:
    return response.headers.get("content-type", "").split(";")[0].strip().lower()


def dataset_from_response(response: httpx.Response, *, source: Mapping[str, Any] | None = None) -> Dataset:
    """Route the body by content type and infer its tabular shape."""
    kind = media_type(response)
    text = response.text

    if kind == "application/json" or kind.endswith("+json"):
        return dataset_from_json_value(loads_strict(text) if text.strip() else None, source=source)
    if kind in ("text/csv", "text/tab-separated-values"):
        if not text.strip():
            return Dataset.create([], [], source=source)
        delimiter = "\t" if kind == "text/tab-separated-values" else ","
        return parse_delimited(text, delimiter=delimiter, source=source)
    if kind.startswith("text/"):
        return Dataset.create(["response"], [(text,)], source=source)

    # Unlabelled or binary-ish types: JSON if it parses, else a text cell.
    try:
        return dataset_from_json_value(loads_strict(text), source=source)
    except DatasetParseError:
        return Dataset.create(["response"], [(text,)], source=source)


async def fetch_dataset(request: HttpRequestConfig, *, transport: HttpTransport | None = None) -> Dataset:
    """Issue ``request`` and convert the response body into a Dataset.

    Raises:
        TransportError: On timeout, network failure, or a non-2xx status.
        DatasetParseError: If a JSON or CSV body is malformed.
    """
    send = transport or httpx_transport
    start = time.perf_counter()
    try:
        async with asyncio.timeout(request.timeout / 1000):
            response = await send(request)
    except (TimeoutError, httpx.TimeoutException) as e:
        logger.warning("HTTP request timed out", url=request.url, timeout_ms=request.timeout)
        raise TransportError.timed_out(request.timeout) from e
    except (httpx.HTTPError, OSError) as e:
        logger.warning("HTTP request failed", url=request.url, error=str(e))
        raise TransportError.network(str(e) or type(e).__name__) from e

    elapsed_ms = (time.perf_counter() - start) * 1000
    if not response.is_success:
        raise TransportError.from_status(response.status_code, response.reason_phrase)

    logger.debug("HTTP request completed", url=request.url, status=response.status_code, elapsed_ms=elapsed_ms)
    source = {
        "type": "http",
        "url": request.url,
        "method": request.method,
        "status": response.status_code,
        "executionTime": elapsed_ms,
        "responseSize": len(response.content),
    }
    return dataset_from_response(response, source=source)
