# src/blockflow/cli.py
"""Blockflow command line interface."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Literal

import typer
from pydantic import ValidationError

from blockflow import __version__
from blockflow.contracts.dataset import Dataset
from blockflow.core.config import BlockflowSettings, load_settings
from blockflow.core.dag import GraphValidationError, build_graph
from blockflow.engine.offload import OffloadClient, OffloadWorker
from blockflow.engine.runner import PipelineRunner, RunSummary
from blockflow.plugins.registry import ExecutorRegistry, create_default_registry
from blockflow.plugins.sources.http_request import HttpRequestExecutor

app = typer.Typer(
    name="blockflow",
    help="Blockflow: dependency-ordered tabular data pipelines.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"blockflow version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from a .env file.

    Raises:
        typer.Exit: If an explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(f"Error: .env file not found: {env_file}", fg=typer.colors.RED, err=True)
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)
    return load_dotenv(override=False)


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(False, "--no-dotenv", help="Skip loading .env file."),
    env_file: Path | None = typer.Option(None, "--env-file", help="Path to .env file (skips automatic search)."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Output structured JSON logs."),
) -> None:
    """Blockflow: dependency-ordered tabular data pipelines."""
    from blockflow.core.logging import configure_logging

    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "INFO")
    ctx.obj = {"logging_overridden": verbose or json_logs}

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho("Warning: --env-file ignored because --no-dotenv is set.", fg=typer.colors.YELLOW, err=True)


def _load(ctx: typer.Context, settings: str) -> BlockflowSettings:
    settings_path = Path(settings).expanduser()
    try:
        config = load_settings(settings_path)
    except FileNotFoundError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.secho(f"Configuration errors in {settings_path}:", fg=typer.colors.RED, err=True)
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"])
            typer.secho(f"  - {location}: {error['msg']}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from None

    if not (ctx.obj or {}).get("logging_overridden"):
        from blockflow.core.logging import configure_logging

        configure_logging(json_output=config.logging.json_output, level=config.logging.level)
    return config


def _build_registry(config: BlockflowSettings) -> ExecutorRegistry:
    registry = create_default_registry(load_entrypoints=True)
    registry.register(
        HttpRequestExecutor.node_type,
        HttpRequestExecutor(default_timeout_ms=config.http.default_timeout_ms),
    )
    return registry


def _describe_output(output: Any) -> str:
    if isinstance(output, Dataset):
        return f"{output.row_count} rows x {output.column_count} columns"
    return type(output).__name__


def _summary_payload(summary: RunSummary) -> dict[str, Any]:
    nodes: dict[str, Any] = {}
    for node_id in summary.graph.execution_order:
        result = summary.results.get(node_id)
        if result is None:
            nodes[node_id] = {"status": "skipped"}
        elif result.success:
            entry: dict[str, Any] = {"status": "success", "executionTime": result.execution_time_ms}
            if isinstance(result.output, Dataset):
                entry["columns"] = list(result.output.columns)
                entry["rowCount"] = result.output.row_count
            nodes[node_id] = entry
        else:
            assert result.error is not None
            nodes[node_id] = {
                "status": "error",
                "errorType": str(result.error.type),
                "message": result.error.message,
            }
    return {"succeeded": summary.succeeded, "nodes": nodes}


@app.command()
def plan(
    ctx: typer.Context,
    settings: str = typer.Option(..., "--settings", "-s", help="Path to pipeline YAML file."),
) -> None:
    """Show execution levels and order without running anything."""
    config = _load(ctx, settings)
    try:
        graph = build_graph(config.pipeline.nodes, config.pipeline.connections)
    except GraphValidationError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from None

    for level in graph.get_dependency_levels():
        typer.echo(f"Level {level}: {', '.join(graph.get_parallel_executable_nodes(level))}")
    typer.echo(f"Execution order: {' -> '.join(graph.execution_order)}")


@app.command()
def run(
    ctx: typer.Context,
    settings: str = typer.Option(..., "--settings", "-s", help="Path to pipeline YAML file."),
    output_format: Literal["console", "json"] = typer.Option(
        "console",
        "--format",
        "-f",
        help="Output format: 'console' (human-readable) or 'json' (structured JSON).",
    ),
    offload: bool | None = typer.Option(
        None,
        "--offload/--no-offload",
        help="Run filter/sort/group on the offload worker (default: from settings).",
    ),
) -> None:
    """Execute a pipeline and report each node's outcome."""
    config = _load(ctx, settings)
    registry = _build_registry(config)
    use_offload = config.offload.enabled if offload is None else offload

    async def execute() -> RunSummary:
        runner_kwargs: dict[str, Any] = {
            "max_concurrency": config.runner.max_concurrency,
            "node_timeout_ms": config.runner.node_timeout_ms,
        }
        if not use_offload:
            return await PipelineRunner(registry, **runner_kwargs).run(
                config.pipeline.nodes, config.pipeline.connections
            )
        with OffloadWorker(
            max_workers=config.offload.max_workers,
            progress_interval=config.offload.progress_interval,
        ) as worker:
            runner = PipelineRunner(registry, offload=OffloadClient(worker), **runner_kwargs)
            return await runner.run(config.pipeline.nodes, config.pipeline.connections)

    try:
        summary = asyncio.run(execute())
    except GraphValidationError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from None

    if output_format == "json":
        typer.echo(json.dumps(_summary_payload(summary), indent=2))
    else:
        for node_id in summary.graph.execution_order:
            result = summary.results.get(node_id)
            if result is None:
                typer.secho(f"  - {node_id}: skipped", fg=typer.colors.YELLOW)
            elif result.success:
                typer.secho(f"  ✓ {node_id}: {_describe_output(result.output)}", fg=typer.colors.GREEN)
            else:
                message = result.error.message if result.error else "unknown error"
                typer.secho(f"  ✗ {node_id}: {message}", fg=typer.colors.RED)

    if not summary.succeeded:
        raise typer.Exit(1)


@app.command()
def executors() -> None:
    """List registered node types."""
    registry = create_default_registry(load_entrypoints=True)
    for node_type in sorted(registry.get_registered_types()):
        executor = registry.get(node_type)
        description = executor.description if executor is not None else ""
        typer.echo(f"{node_type:<16} {description}")


if __name__ == "__main__":
    app()
