"""structlog configuration with OpenTelemetry trace correlation.

Log records emitted inside an active span carry ``trace_id`` and
``span_id`` so lookups can be correlated with their traces.

Example:
    >>> from rbacscope.telemetry.logging import configure_logging
    >>> configure_logging(log_level="DEBUG", json_output=True)
"""

from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog
from opentelemetry import trace

EventDict = MutableMapping[str, Any]


def add_trace_context(_logger: Any, _method_name: str, event_dict: EventDict) -> EventDict:
    """Add the trace and span ids of the current span when it has valid ones."""
    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        event_dict.update(
            trace_id=trace.format_trace_id(span_context.trace_id),
            span_id=trace.format_span_id(span_context.span_id),
        )
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = False,
) -> None:
    """Configure structlog and the stdlib root handler.

    Logs go to stderr so that command output on stdout stays parseable.

    Args:
        log_level: Minimum level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_output: Render JSON lines when True, console format otherwise.

    Raises:
        ValueError: If the log level name is unknown.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        msg = f"Unknown log level: {log_level!r}"
        raise ValueError(msg)

    renderer: Any = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            add_trace_context,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        # Resolve stderr per logger so redirected streams are honoured
        logger_factory=_stderr_logger_factory,
        cache_logger_on_first_use=False,
    )

    # No-op when the root logger already has handlers
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("rbacscope").setLevel(level)


def _stderr_logger_factory(*args: Any) -> structlog.PrintLogger:  # noqa: ARG001
    return structlog.PrintLogger(file=sys.stderr)


__all__ = [
    "add_trace_context",
    "configure_logging",
]
