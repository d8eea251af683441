"""OpenTelemetry tracing helpers for principal lookups.

Provides a thread-safe tracer cache and a ``lookup_span`` context manager
wrapping lookups and cluster listing calls in spans.

Security:
    - Spans carry the principal kind and object counts, never the
      principal or requester names.
    - Exception messages are sanitized before being recorded.

Example:
    >>> from rbacscope.telemetry.tracing import get_tracer, lookup_span
    >>> tracer = get_tracer()
    >>> with lookup_span(tracer, "user_details", principal_kind="User") as span:
    ...     span.set_attribute("rbacscope.resource_count", 3)
"""

from __future__ import annotations

import re
import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

if TYPE_CHECKING:
    from collections.abc import Iterator

    from opentelemetry.trace import Tracer

TRACER_NAME = "rbacscope"

ATTR_OPERATION = "rbacscope.operation"
ATTR_PRINCIPAL_KIND = "rbacscope.principal_kind"
ATTR_RESOURCE_COUNT = "rbacscope.resource_count"

_tracers: dict[str, Tracer] = {}
_lock = threading.Lock()

_CREDENTIAL_PATTERN = re.compile(
    r"(password|token|api_key|authorization|client-key-data)\s*[=:]\s*(bearer\s+)?\S+",
    re.IGNORECASE,
)
_URL_USERINFO_PATTERN = re.compile(r"://[^@/\s]+@")


def sanitize_error_message(msg: str, max_length: int = 500) -> str:
    """Redact credential-like fragments from a message and truncate it.

    Args:
        msg: Raw exception message.
        max_length: Maximum length of the result.

    Returns:
        Sanitized message.

    Example:
        >>> sanitize_error_message("401: token=abc123")
        '401: token=<REDACTED>'
    """
    sanitized = _URL_USERINFO_PATTERN.sub("://<REDACTED>@", msg)
    sanitized = _CREDENTIAL_PATTERN.sub(
        lambda m: re.split(r"\s*[=:]", m.group(0), maxsplit=1)[0] + "=<REDACTED>",
        sanitized,
    )
    return sanitized[:max_length]


def _create_tracer(name: str) -> Tracer:
    try:
        return trace.get_tracer(name)
    except Exception:
        return trace.NoOpTracer()


def get_tracer(name: str = TRACER_NAME) -> Tracer:
    """Return the tracer cached under ``name``, creating it on first use.

    A name whose tracer cannot be created from the global provider is
    cached with a ``NoOpTracer``.
    """
    if name in _tracers:
        return _tracers[name]
    with _lock:
        if name not in _tracers:
            _tracers[name] = _create_tracer(name)
        return _tracers[name]


def set_tracer(name: str, tracer: Tracer | None) -> None:
    """Replace the cached tracer for ``name``; None drops it."""
    with _lock:
        if tracer is None:
            _tracers.pop(name, None)
        else:
            _tracers[name] = tracer


def reset_tracer() -> None:
    """Drop every cached tracer."""
    with _lock:
        _tracers.clear()


@contextmanager
def lookup_span(
    tracer: Tracer,
    operation: str,
    *,
    principal_kind: str | None = None,
    resource_count: int | None = None,
    extra_attributes: dict[str, Any] | None = None,
) -> Iterator[trace.Span]:
    """Run a block inside a ``rbacscope.<operation>`` span.

    The span status is set to OK when the block completes and to ERROR
    when it raises; the exception is re-raised.

    Args:
        tracer: Tracer to start the span with.
        operation: Operation name ("user_details", "list_role_bindings", ...).
        principal_kind: Kind of the principal being looked up.
        resource_count: Number of objects involved.
        extra_attributes: Additional span attributes.

    Yields:
        The active span.
    """
    attributes: dict[str, Any] = {ATTR_OPERATION: operation}
    if principal_kind is not None:
        attributes[ATTR_PRINCIPAL_KIND] = principal_kind
    if resource_count is not None:
        attributes[ATTR_RESOURCE_COUNT] = resource_count
    if extra_attributes:
        attributes.update(extra_attributes)

    with tracer.start_as_current_span(f"rbacscope.{operation}", attributes=attributes) as span:
        try:
            yield span
            span.set_status(Status(StatusCode.OK))
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, type(e).__name__))
            span.set_attribute("exception.type", type(e).__name__)
            span.set_attribute("exception.message", sanitize_error_message(str(e)))
            raise


__all__ = [
    "ATTR_OPERATION",
    "ATTR_PRINCIPAL_KIND",
    "ATTR_RESOURCE_COUNT",
    "TRACER_NAME",
    "get_tracer",
    "lookup_span",
    "reset_tracer",
    "sanitize_error_message",
    "set_tracer",
]
