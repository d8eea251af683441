"""CLI output helpers and exit codes.

Errors and progress messages go to stderr; lookup results go to stdout so
they can be piped (``rbacscope lookup user-roles alice -o json | jq``).
"""

from __future__ import annotations

import os
import sys
from enum import IntEnum
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from typing import NoReturn


class ExitCode(IntEnum):
    """Exit codes for rbacscope commands."""

    SUCCESS = 0
    """Command completed successfully."""

    GENERAL_ERROR = 1
    """Unexpected failure."""

    USAGE_ERROR = 2
    """Invalid usage, including a missing principal name."""

    FILE_NOT_FOUND = 3
    """Snapshot, policy or kubeconfig file cannot be opened."""

    PERMISSION_ERROR = 4
    """Requester lacks the permission for the lookup."""

    VALIDATION_ERROR = 5
    """Invalid configuration, policy or snapshot file."""

    NETWORK_ERROR = 8
    """Listing RBAC objects from the cluster failed."""


def error(message: str, **context: str | int | bool | None) -> None:
    """Print an error message to stderr.

    Args:
        message: Error message to display.
        **context: Optional context key-value pairs, None values dropped.

    Example:
        error("Failed to list role bindings", status=403)
        # Output: Error: Failed to list role bindings (status=403)
    """
    context_str = ", ".join(f"{k}={v}" for k, v in context.items() if v is not None)
    full_message = f"Error: {message} ({context_str})" if context_str else f"Error: {message}"
    click.echo(full_message, err=True)


def error_exit(
    message: str,
    exit_code: ExitCode = ExitCode.GENERAL_ERROR,
    **context: str | int | bool | None,
) -> NoReturn:
    """Print an error message to stderr and exit.

    Raises:
        SystemExit: Always, with ``exit_code``.
    """
    error(message, **context)
    sys.exit(exit_code)


def warning(message: str) -> None:
    """Print a warning message to stderr."""
    click.echo(f"Warning: {message}", err=True)


def info(message: str) -> None:
    """Print a progress message to stderr."""
    click.echo(message, err=True)


def default_requester() -> str:
    """Name of the local operator, used when --as-user is not given."""
    return os.environ.get("USER") or os.environ.get("USERNAME") or "unknown"


__all__ = [
    "ExitCode",
    "default_requester",
    "error",
    "error_exit",
    "info",
    "warning",
]
