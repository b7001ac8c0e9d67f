"""Offload protocol: run heavy transforms on a worker via message passing."""

from blockflow.engine.offload.client import OffloadClient
from blockflow.engine.offload.messages import OffloadRequest, OffloadResponse
from blockflow.engine.offload.worker import OffloadWorker, run_operation

__all__ = ["OffloadClient", "OffloadRequest", "OffloadResponse", "OffloadWorker", "run_operation"]
