# src/blockflow/engine/offload/messages.py
"""Offload message algebra.

A request is ``{id, type, payload}``. Responses are ``{id, type, payload}``
with type success, error, or progress, correlated to the request by ``id``.
For one id, progress messages always precede the single terminal message.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from blockflow.contracts.enums import OffloadOperation, OffloadResponseType


def new_request_id() -> str:
    return f"req_{uuid.uuid4().hex}"


@dataclass(frozen=True, slots=True)
class OffloadRequest:
    """Work for the offload worker.

    ``type`` is kept as a plain string so that unknown operation names reach
    the worker and come back as an error response.
    """

    type: str
    payload: Mapping[str, Any]
    id: str = field(default_factory=new_request_id)

    @classmethod
    def create(cls, operation: OffloadOperation | str, payload: Mapping[str, Any]) -> OffloadRequest:
        return cls(type=str(operation), payload=payload)


@dataclass(frozen=True, slots=True)
class OffloadResponse:
    id: str
    type: OffloadResponseType
    payload: Any

    @property
    def is_terminal(self) -> bool:
        return self.type != OffloadResponseType.PROGRESS

    @classmethod
    def success(cls, request_id: str, result: Any) -> OffloadResponse:
        return cls(id=request_id, type=OffloadResponseType.SUCCESS, payload=result)

    @classmethod
    def error(cls, request_id: str, message: str) -> OffloadResponse:
        return cls(id=request_id, type=OffloadResponseType.ERROR, payload={"message": message})

    @classmethod
    def progress(cls, request_id: str, percent: float, message: str) -> OffloadResponse:
        return cls(
            id=request_id,
            type=OffloadResponseType.PROGRESS,
            payload={"progress": round(percent, 2), "message": message},
        )
