# tests/unit/plugins/sources/test_http_request_executor.py
"""Tests for HttpRequestExecutor with a stub transport."""

from __future__ import annotations

import httpx
import pytest

from blockflow.core.ingestion import HttpRequestConfig
from blockflow.plugins.sources import HttpRequestExecutor

URL = "https://api.example.com/users"


class RecordingTransport:
    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        self.requests: list[HttpRequestConfig] = []

    async def __call__(self, request: HttpRequestConfig) -> httpx.Response:
        self.requests.append(request)
        return self.response


class TestValidate:
    def test_minimal_config_is_valid(self, make_context) -> None:
        assert HttpRequestExecutor().validate(make_context({"url": URL})).valid

    @pytest.mark.parametrize(
        ("config", "codes"),
        [
            ({}, ["REQUIRED_FIELD"]),
            ({"url": "ftp://example.com/x"}, ["INVALID_URL"]),
            ({"url": "not a url"}, ["INVALID_URL"]),
            ({"url": URL, "method": "PATCH"}, ["INVALID_METHOD"]),
            ({"url": URL, "headers": ["Accept: x"]}, ["INVALID_HEADERS"]),
            ({"url": URL, "method": "POST", "body": 42}, ["INVALID_BODY"]),
            ({"url": URL, "method": "POST", "body": "{oops"}, ["INVALID_JSON"]),
            ({"url": URL, "timeout": 500}, ["INVALID_TIMEOUT"]),
            ({"url": URL, "timeout": 120_000}, ["INVALID_TIMEOUT"]),
        ],
    )
    def test_invalid_configs(self, make_context, config: dict, codes: list[str]) -> None:
        assert HttpRequestExecutor().validate(make_context(config)).codes() == codes

    def test_non_json_body_allowed_with_other_content_type(self, make_context) -> None:
        config = {"url": URL, "method": "POST", "body": "a=1", "headers": {"Content-Type": "application/x-www-form-urlencoded"}}

        assert HttpRequestExecutor().validate(make_context(config)).valid

    def test_lowercase_method_accepted(self, make_context) -> None:
        assert HttpRequestExecutor().validate(make_context({"url": URL, "method": "delete"})).valid


class TestExecute:
    @pytest.mark.asyncio
    async def test_json_response_becomes_dataset(self, make_context) -> None:
        transport = RecordingTransport(httpx.Response(200, json=[{"id": 1, "name": "a"}, {"id": 2, "name": "b"}]))

        result = await HttpRequestExecutor(transport).execute(make_context({"url": URL}))

        assert result.success
        assert result.output.columns == ("id", "name")
        assert result.output.rows == ((1, "a"), (2, "b"))

    @pytest.mark.asyncio
    async def test_default_timeout_applied(self, make_context) -> None:
        transport = RecordingTransport(httpx.Response(200, json=[]))

        await HttpRequestExecutor(transport, default_timeout_ms=2500).execute(make_context({"url": URL, "body": ""}))

        assert transport.requests[0].timeout == 2500
        assert transport.requests[0].body is None

    @pytest.mark.asyncio
    async def test_status_failure_is_reported(self, make_context) -> None:
        transport = RecordingTransport(httpx.Response(404))

        result = await HttpRequestExecutor(transport).execute(make_context({"url": URL}))

        assert not result.success
        assert result.error is not None
        assert result.error.message == "HTTP 404: Not Found"
        assert result.error.details == {"exception": "TransportError", "cause": "status"}
