"""Execution engine: the pipeline runner and the offload protocol."""

from blockflow.engine.runner import PipelineRunner, RunSummary

__all__ = ["PipelineRunner", "RunSummary"]
