"""Command-line interface for rbacscope.

Command Groups:
    rbacscope lookup: Principal lookups (user-details, serviceaccount-details,
        user-roles)

Exit Codes:
    0: Success
    1: General error
    2: Usage error (missing principal name, invalid arguments)
    3: File not found (snapshot, policy or kubeconfig)
    4: Permission error
    5: Validation error (configuration, policy or snapshot file)
    8: Network error (listing RBAC objects failed)
"""

from __future__ import annotations

from rbacscope.cli.main import cli, main
from rbacscope.cli.utils import ExitCode, error, error_exit, info, warning

__all__ = [
    "ExitCode",
    "cli",
    "error",
    "error_exit",
    "info",
    "main",
    "warning",
]
