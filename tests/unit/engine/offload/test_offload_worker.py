# tests/unit/engine/offload/test_offload_worker.py
"""Tests for the offload message handler and thread-pool worker."""

from __future__ import annotations

import threading
from typing import Any

import pytest

from blockflow.contracts import Dataset, OffloadResponseType
from blockflow.engine.offload import OffloadRequest, OffloadResponse, OffloadWorker, run_operation


def _run(operation: str, payload: dict[str, Any], *, progress_interval: int = 1000) -> list[OffloadResponse]:
    messages: list[OffloadResponse] = []
    run_operation(OffloadRequest.create(operation, payload), messages.append, progress_interval=progress_interval)
    return messages


class TestMessages:
    def test_request_ids_are_unique_and_prefixed(self) -> None:
        first = OffloadRequest.create("sort", {})
        second = OffloadRequest.create("sort", {})

        assert first.id.startswith("req_")
        assert first.id != second.id

    def test_progress_is_not_terminal(self) -> None:
        assert not OffloadResponse.progress("r", 10, "x").is_terminal
        assert OffloadResponse.success("r", None).is_terminal
        assert OffloadResponse.error("r", "bad").payload == {"message": "bad"}


class TestRunOperation:
    def test_filter_emits_progress_then_success(self) -> None:
        dataset = Dataset.create(["n"], [(i,) for i in range(4)])

        messages = _run(
            "filter",
            {"dataset": dataset, "config": {"column": "n", "operator": "greater_than", "value": 1}},
            progress_interval=2,
        )

        assert [m.type for m in messages] == [
            OffloadResponseType.PROGRESS,
            OffloadResponseType.PROGRESS,
            OffloadResponseType.SUCCESS,
        ]
        assert [m.payload["progress"] for m in messages[:2]] == [50.0, 100.0]
        assert messages[-1].payload.column_values("n") == [2, 3]
        assert len({m.id for m in messages}) == 1

    def test_filter_accepts_bare_conditions(self, people: Dataset) -> None:
        messages = _run(
            "filter",
            {"dataset": people, "conditions": [{"column": "city", "operator": "equals", "value": "Boston"}]},
        )

        assert messages[-1].payload.column_values("name") == ["Diana", "Frank"]

    def test_sort_reports_start_and_end(self, people: Dataset) -> None:
        messages = _run("sort", {"dataset": people, "config": {"column": "age"}})

        assert [m.payload["progress"] for m in messages if not m.is_terminal] == [0.0, 100.0]
        assert messages[-1].payload.column_values("age")[0] is None

    def test_group(self, people: Dataset) -> None:
        messages = _run(
            "group",
            {"dataset": people, "config": {"columns": ["city"], "aggregations": [{"function": "count"}]}},
        )

        assert messages[-1].type is OffloadResponseType.SUCCESS
        assert messages[-1].payload.row_count == 5

    def test_transform_chains_steps_and_scales_progress(self, people: Dataset) -> None:
        messages = _run(
            "transform",
            {
                "dataset": people,
                "operations": [
                    {"type": "filter", "conditions": [{"column": "age", "operator": "is_not_null"}]},
                    {"type": "sort", "config": {"column": "age", "direction": "desc"}},
                ],
            },
        )

        progress = [m.payload["progress"] for m in messages if not m.is_terminal]
        assert progress == sorted(progress)
        assert progress[-1] == 100.0
        assert 50.0 in progress
        assert messages[-1].payload.column_values("age") == [35, 32, 30, 28, 25]

    def test_aggregate_returns_column_statistics(self, people: Dataset) -> None:
        messages = _run("aggregate", {"dataset": people, "config": {"columns": ["salary", "city"]}})

        result = messages[-1].payload
        assert set(result) == {"salary", "city"}
        assert result["salary"]["nullCount"] == 1
        assert result["salary"]["max"] == 8000
        assert "min" not in result["city"]

    def test_unknown_operation(self, people: Dataset) -> None:
        messages = _run("pivot", {"dataset": people})

        assert len(messages) == 1
        assert messages[0].type is OffloadResponseType.ERROR
        assert messages[0].payload == {"message": "Unknown operation type: pivot"}

    def test_unknown_transform_step(self, people: Dataset) -> None:
        messages = _run("transform", {"dataset": people, "operations": [{"type": "aggregate"}]})

        assert messages[-1].payload == {"message": "Unknown operation type: aggregate"}

    def test_algorithm_error_becomes_error_message(self, people: Dataset) -> None:
        messages = _run("sort", {"dataset": people, "config": {"column": "height"}})

        assert messages[-1].type is OffloadResponseType.ERROR
        assert messages[-1].payload["message"] == "Column 'height' not found in dataset"

    def test_missing_dataset(self) -> None:
        messages = _run("sort", {"config": {"column": "age"}})

        assert messages[-1].payload == {"message": "No input dataset provided"}


class TestOffloadWorker:
    def test_responses_reach_the_listener(self, people: Dataset) -> None:
        received: list[OffloadResponse] = []
        done = threading.Event()

        def listener(response: OffloadResponse) -> None:
            received.append(response)
            if response.is_terminal:
                done.set()

        with OffloadWorker() as worker:
            worker.set_listener(listener)
            request = OffloadRequest.create("sort", {"dataset": people, "config": {"column": "age"}})
            worker.post_message(request)
            assert done.wait(timeout=5)

        assert received[-1].id == request.id
        assert received[-1].type is OffloadResponseType.SUCCESS

    def test_post_after_shutdown_is_rejected(self) -> None:
        worker = OffloadWorker()
        worker.shutdown()

        with pytest.raises(RuntimeError, match="shut down"):
            worker.post_message(OffloadRequest.create("sort", {}))
