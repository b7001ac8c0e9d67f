# src/blockflow/core/logging.py
"""Structured logging for blockflow.

structlog events and plain stdlib records share one processor chain and one
stderr handler, so library warnings render the same way as the runner's own
events. stdout is left to command output (``blockflow run --format json``).

Run-scoped fields travel through contextvars: everything logged inside
``run_context(run_id)`` carries that ``run_id``, including records emitted
from node tasks spawned during the run.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, TextIO

import structlog
from structlog.stdlib import ProcessorFormatter

# DEBUG chatter from the HTTP client stack and the event loop.
QUIET_LOGGERS: tuple[str, ...] = ("httpx", "httpcore", "asyncio")


class _BlockflowHandler(logging.StreamHandler):  # type: ignore[type-arg]
    """Marker type so reconfiguration replaces only our own handler."""


def _strip_formatter_keys(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    event_dict.pop("_record", None)
    event_dict.pop("_from_structlog", None)
    return event_dict


def _pre_chain() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]


def _render_chain(json_output: bool, stream: TextIO) -> list[Any]:
    if json_output:
        return [
            _strip_formatter_keys,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True),
        ]
    return [
        _strip_formatter_keys,
        structlog.dev.ConsoleRenderer(colors=stream.isatty()),
    ]


def configure_logging(
    *,
    json_output: bool = False,
    level: str = "INFO",
    stream: TextIO | None = None,
) -> None:
    """Route structlog and stdlib logging through one formatter.

    Calling this again (the CLI does so once settings are loaded) swaps the
    previous blockflow handler; handlers installed by others are kept.

    Args:
        json_output: One JSON object per line instead of console rendering.
        level: DEBUG, INFO, WARNING or ERROR.
        stream: Destination; defaults to the current ``sys.stderr``.
    """
    log_level = logging.getLevelNamesMapping()[level.upper()]
    target = stream if stream is not None else sys.stderr
    pre_chain = _pre_chain()

    structlog.configure(
        processors=[*pre_chain, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    handler = _BlockflowHandler(target)
    handler.setFormatter(ProcessorFormatter(processors=_render_chain(json_output, target), foreign_pre_chain=pre_chain))

    root = logging.getLogger()
    for existing in [h for h in root.handlers if isinstance(h, _BlockflowHandler)]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(log_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


@contextmanager
def run_context(run_id: str, **fields: Any) -> Iterator[None]:
    """Bind ``run_id`` (and any extra fields) to every event logged inside."""
    with structlog.contextvars.bound_contextvars(run_id=run_id, **fields):
        yield
