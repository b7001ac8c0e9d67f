# src/blockflow/engine/offload/worker.py
"""Offload worker: runs transform requests away from the caller's event loop.

``run_operation`` is the message handler. It is a plain function of
(request, emit) so the same contract works on a thread pool (OffloadWorker),
in a subprocess, or inline in tests.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from threading import Lock
from typing import Any

import structlog

from blockflow.contracts.dataset import Dataset
from blockflow.contracts.enums import OffloadOperation
from blockflow.core.transforms.filtering import DEFAULT_PROGRESS_INTERVAL, FilterConfig, filter_dataset
from blockflow.core.transforms.grouping import GroupConfig, group_dataset
from blockflow.core.transforms.sorting import SortConfig, sort_dataset
from blockflow.core.transforms.statistics import calculate_statistics
from blockflow.core.transforms.values import ProgressCallback
from blockflow.engine.offload.messages import OffloadRequest, OffloadResponse

logger = structlog.get_logger(__name__)

type Emit = Callable[[OffloadResponse], None]

_OPERATIONS = frozenset(operation.value for operation in OffloadOperation)
# Operations allowed as steps of a TRANSFORM request; each yields a Dataset.
_STEP_OPERATIONS = frozenset({OffloadOperation.FILTER, OffloadOperation.SORT, OffloadOperation.GROUP})


def _payload_dataset(payload: Mapping[str, Any]) -> Dataset:
    dataset = payload.get("dataset")
    if not isinstance(dataset, Dataset):
        raise ValueError("No input dataset provided")
    return dataset


def _step_config(step: Mapping[str, Any]) -> Mapping[str, Any]:
    """Node-style config for a step: either ``config`` or bare ``conditions``."""
    if "config" in step:
        config = step["config"]
        if not isinstance(config, Mapping):
            raise ValueError("Operation config must be an object")
        return config
    if "conditions" in step:
        return {"conditions": step["conditions"], "logicalOperator": step.get("logicalOperator", "and")}
    return {}


def _apply_step(
    operation: OffloadOperation,
    dataset: Dataset,
    config: Mapping[str, Any],
    report: ProgressCallback,
    progress_interval: int,
) -> Dataset:
    match operation:
        case OffloadOperation.FILTER:
            return filter_dataset(
                dataset,
                FilterConfig.from_node_config(config),
                progress=report,
                progress_interval=progress_interval,
            )
        case OffloadOperation.SORT:
            return sort_dataset(dataset, SortConfig.from_node_config(config), progress=report)
        case OffloadOperation.GROUP:
            return group_dataset(dataset, GroupConfig.from_dict(config), progress=report)
    raise ValueError(f"Operation '{operation}' cannot be used as a transform step")


def _apply_transform(
    dataset: Dataset,
    steps: Sequence[Any],
    report: ProgressCallback,
    progress_interval: int,
) -> Dataset:
    total = len(steps)
    for index, step in enumerate(steps):
        if not isinstance(step, Mapping) or step.get("type") not in _STEP_OPERATIONS:
            kind = step.get("type") if isinstance(step, Mapping) else step
            raise ValueError(f"Unknown operation type: {kind}")

        # Scale each step's 0-100 into its slice of the overall run.
        def scaled(percent: float, message: str, index: int = index) -> None:
            report((index * 100 + percent) / total, message)

        dataset = _apply_step(OffloadOperation(step["type"]), dataset, _step_config(step), scaled, progress_interval)
    return dataset


def _dispatch(request: OffloadRequest, report: ProgressCallback, progress_interval: int) -> Any:
    if request.type not in _OPERATIONS:
        raise ValueError(f"Unknown operation type: {request.type}")
    operation = OffloadOperation(request.type)
    payload = request.payload
    dataset = _payload_dataset(payload)

    if operation == OffloadOperation.TRANSFORM:
        steps = payload.get("operations")
        if not isinstance(steps, list):
            raise ValueError("Transform requires a list of operations")
        return _apply_transform(dataset, steps, report, progress_interval)
    if operation == OffloadOperation.AGGREGATE:
        columns = _step_config(payload).get("columns")
        statistics = calculate_statistics(dataset, columns, progress=report)
        return {column: stats.as_payload() for column, stats in statistics.items()}
    return _apply_step(operation, dataset, _step_config(payload), report, progress_interval)


def run_operation(
    request: OffloadRequest,
    emit: Emit,
    *,
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
) -> None:
    """Handle one request, emitting zero or more progress messages then exactly one terminal message."""

    def report(percent: float, message: str) -> None:
        emit(OffloadResponse.progress(request.id, percent, message))

    try:
        result = _dispatch(request, report, progress_interval)
    except Exception as e:
        logger.debug("Offload operation failed", request_id=request.id, operation=request.type, error=str(e))
        emit(OffloadResponse.error(request.id, str(e) or type(e).__name__))
        return
    emit(OffloadResponse.success(request.id, result))


class OffloadWorker:
    """Runs offload requests on a thread pool and posts responses to one listener.

    Requests share nothing with the caller except immutable Datasets; config
    maps are parsed into frozen models on the worker side.
    """

    def __init__(self, *, max_workers: int = 1, progress_interval: int = DEFAULT_PROGRESS_INTERVAL) -> None:
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="blockflow-offload")
        self._progress_interval = progress_interval
        self._listener: Emit | None = None
        self._lock = Lock()
        self._shutdown = False

    def set_listener(self, listener: Emit | None) -> None:
        with self._lock:
            self._listener = listener

    def post_message(self, request: OffloadRequest) -> None:
        """Queue ``request``; returns immediately."""
        if self._shutdown:
            raise RuntimeError("OffloadWorker has been shut down")
        future = self._pool.submit(run_operation, request, self._emit, progress_interval=self._progress_interval)
        future.add_done_callback(self._log_crash)

    def _emit(self, response: OffloadResponse) -> None:
        with self._lock:
            listener = self._listener
        if listener is None:
            logger.debug("Offload response dropped, no listener", request_id=response.id)
            return
        listener(response)

    @staticmethod
    def _log_crash(future: Future[None]) -> None:
        error = future.exception()
        if error is not None:
            logger.error("Offload listener raised", error=str(error), exc_info=error)

    def shutdown(self, wait: bool = True) -> None:
        self._shutdown = True
        self._pool.shutdown(wait=wait)

    def __enter__(self) -> OffloadWorker:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()
