"""Logging and tracing support for rbacscope."""

from __future__ import annotations

from rbacscope.telemetry.logging import add_trace_context, configure_logging
from rbacscope.telemetry.tracing import get_tracer, lookup_span, reset_tracer, set_tracer

__all__ = [
    "add_trace_context",
    "configure_logging",
    "get_tracer",
    "lookup_span",
    "reset_tracer",
    "set_tracer",
]
