# src/blockflow/engine/offload/client.py
"""Issuing side of the offload protocol.

Each request gets an id and a pending future. Worker messages are handed
back to the event loop thread and routed by id: progress goes to the
request's callback, the first terminal message resolves its future.
Messages for ids that are unknown or abandoned are ignored, which makes a
late or repeated result for an abandoned request harmless.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

import structlog

from blockflow.contracts.enums import OffloadOperation, OffloadResponseType
from blockflow.contracts.errors import OffloadError
from blockflow.engine.offload.messages import OffloadRequest, OffloadResponse
from blockflow.engine.offload.worker import OffloadWorker

logger = structlog.get_logger(__name__)

type ProgressHandler = Callable[[float, str], None]


@dataclass(slots=True)
class _Pending:
    future: asyncio.Future[Any]
    on_progress: ProgressHandler | None


class OffloadClient:
    """Awaitable facade over an OffloadWorker.

    Usage:
        with OffloadWorker() as worker:
            client = OffloadClient(worker)
            sorted_ds = await client.run("sort", {"dataset": ds, "config": {"column": "age"}})
    """

    def __init__(self, worker: OffloadWorker) -> None:
        self._worker = worker
        self._pending: dict[str, _Pending] = {}
        self._loop: asyncio.AbstractEventLoop | None = None
        worker.set_listener(self._on_message)

    @property
    def in_flight(self) -> int:
        return len(self._pending)

    def submit(
        self,
        operation: OffloadOperation | str,
        payload: Mapping[str, Any],
        *,
        on_progress: ProgressHandler | None = None,
    ) -> tuple[str, asyncio.Future[Any]]:
        """Post a request and return its id and result future without waiting."""
        loop = asyncio.get_running_loop()
        self._loop = loop
        request = OffloadRequest.create(operation, payload)
        future: asyncio.Future[Any] = loop.create_future()
        self._pending[request.id] = _Pending(future=future, on_progress=on_progress)
        logger.debug("Offload request posted", request_id=request.id, operation=request.type)
        self._worker.post_message(request)
        return request.id, future

    async def run(
        self,
        operation: OffloadOperation | str,
        payload: Mapping[str, Any],
        *,
        on_progress: ProgressHandler | None = None,
    ) -> Any:
        """Submit and await the terminal response.

        Raises:
            OffloadError: If the worker answered with an error message.
        """
        request_id, future = self.submit(operation, payload, on_progress=on_progress)
        try:
            return await future
        except asyncio.CancelledError:
            self.abandon(request_id)
            raise

    def abandon(self, request_id: str) -> None:
        """Stop listening for ``request_id``; the worker is not interrupted."""
        pending = self._pending.pop(request_id, None)
        if pending is not None and not pending.future.done():
            pending.future.cancel()

    def _on_message(self, response: OffloadResponse) -> None:
        # Called on a worker thread.
        loop = self._loop
        if loop is None or loop.is_closed():
            logger.debug("Offload response after event loop closed", request_id=response.id)
            return
        loop.call_soon_threadsafe(self._dispatch, response)

    def _dispatch(self, response: OffloadResponse) -> None:
        pending = self._pending.get(response.id)
        if pending is None:
            logger.debug("Ignoring offload response for unknown request", request_id=response.id, kind=str(response.type))
            return

        if response.type == OffloadResponseType.PROGRESS:
            if pending.on_progress is not None:
                pending.on_progress(response.payload["progress"], response.payload["message"])
            return

        del self._pending[response.id]
        if pending.future.done():
            return
        if response.type == OffloadResponseType.SUCCESS:
            pending.future.set_result(response.payload)
        else:
            pending.future.set_exception(OffloadError(response.payload["message"], request_id=response.id))
