"""Principal lookup commands.

    rbacscope lookup user-details NAME
    rbacscope lookup serviceaccount-details NAME
    rbacscope lookup user-roles NAME

RBAC objects are listed from the cluster on every run, or read from an
exported file with ``--snapshot``.

Example:
    $ rbacscope lookup user-details alice --admin -o json
    $ rbacscope lookup user-roles alice --as-user auditor --policy policy.yaml
    $ rbacscope lookup serviceaccount-details build-bot --snapshot rbac.yaml --admin
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import click
import structlog

from rbacscope.access.policy import (
    AccessPolicy,
    PermissionChecker,
    RequestContext,
    load_access_policy,
)
from rbacscope.cli.utils import ExitCode, default_requester, error_exit, info
from rbacscope.cluster.fetcher import ClusterFetcher, load_rbac_api
from rbacscope.cluster.snapshot_file import load_snapshot_file
from rbacscope.config import RBACScopeConfig, load_config
from rbacscope.errors import (
    ConfigurationError,
    FileAccessError,
    InvalidRequestError,
    PermissionDeniedError,
    RBACScopeError,
    SnapshotLoadError,
    UpstreamListingError,
)
from rbacscope.schemas.details import ResolvedDetails
from rbacscope.service import LookupService, SnapshotSource, StaticSnapshotSource

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

# Exit code per error category, most specific first
_EXIT_CODES: tuple[tuple[type[RBACScopeError], ExitCode], ...] = (
    (InvalidRequestError, ExitCode.USAGE_ERROR),
    (FileAccessError, ExitCode.FILE_NOT_FOUND),
    (PermissionDeniedError, ExitCode.PERMISSION_ERROR),
    (UpstreamListingError, ExitCode.NETWORK_ERROR),
    (SnapshotLoadError, ExitCode.VALIDATION_ERROR),
    (ConfigurationError, ExitCode.VALIDATION_ERROR),
)


def _lookup_options(func: F) -> F:
    """Options shared by every lookup command."""
    options = [
        click.argument("name", default=""),
        click.option(
            "--output",
            "-o",
            type=click.Choice(["text", "json"], case_sensitive=False),
            default="text",
            show_default=True,
            help="Output format.",
        ),
        click.option(
            "--kubeconfig",
            type=click.Path(exists=True, dir_okay=False, resolve_path=True, path_type=Path),
            default=None,
            help="Path to kubeconfig file.",
            metavar="PATH",
        ),
        click.option(
            "--context",
            "kube_context",
            type=str,
            default=None,
            help="kubeconfig context to use.",
        ),
        click.option(
            "--snapshot",
            type=click.Path(exists=True, dir_okay=False, resolve_path=True, path_type=Path),
            default=None,
            help="Read RBAC objects from an exported YAML/JSON file instead of the cluster.",
            metavar="PATH",
        ),
        click.option(
            "--as-user",
            "requester",
            type=str,
            default=None,
            help="Requesting user checked against the access policy (default: $USER).",
        ),
        click.option(
            "--admin",
            is_flag=True,
            default=False,
            help="Run the lookup as an admin, bypassing permission checks.",
        ),
        click.option(
            "--policy",
            type=click.Path(exists=True, dir_okay=False, resolve_path=True, path_type=Path),
            default=None,
            help="YAML access policy granting lookup permissions.",
            metavar="PATH",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_service(
    config: RBACScopeConfig,
    snapshot: Path | None,
) -> LookupService:
    policy = (
        load_access_policy(config.policy_file) if config.policy_file is not None else AccessPolicy()
    )

    source: SnapshotSource
    if snapshot is not None:
        info(f"Reading RBAC snapshot: {snapshot}")
        source = StaticSnapshotSource(load_snapshot_file(snapshot))
    else:
        logger.debug(
            "cli.cluster_source",
            kubeconfig=str(config.kubeconfig) if config.kubeconfig else None,
            context=config.context,
        )
        source = ClusterFetcher(
            load_rbac_api(config.kubeconfig, config.context),
            request_timeout=config.request_timeout,
        )
    return LookupService(source, PermissionChecker(policy))


def _run_lookup(
    method: str,
    name: str,
    *,
    kubeconfig: Path | None,
    kube_context: str | None,
    snapshot: Path | None,
    requester: str | None,
    admin: bool,
    policy: Path | None,
) -> Any:
    ctx = click.get_current_context(silent=True)
    base: RBACScopeConfig | None = (ctx.find_object(dict) or {}).get("config") if ctx else None
    try:
        config = (base or load_config()).merged(
            kubeconfig=kubeconfig,
            context=kube_context,
            policy_file=policy,
        )
        service = _build_service(config, snapshot)
        context = RequestContext(username=requester or default_requester(), is_admin=admin)
        return getattr(service, method)(context, name)
    except RBACScopeError as e:
        for error_type, exit_code in _EXIT_CODES:
            if isinstance(e, error_type):
                error_exit(e.message, exit_code=exit_code, **_error_context(e))
        error_exit(e.message, exit_code=ExitCode.GENERAL_ERROR)


def _error_context(e: RBACScopeError) -> dict[str, str | int | bool | None]:
    return {k: v for k, v in e.details.items() if isinstance(v, (str, int, bool))}


def _output_details(details: ResolvedDetails, output_format: str) -> None:
    if output_format == "json":
        click.echo(json.dumps(details.to_response(), indent=2))
        return

    click.echo(f"{details.principal.kind.value}: {details.principal_name}")

    click.echo(f"\nRoleBindings ({len(details.role_bindings)}):")
    for rb in details.role_bindings:
        click.echo(f"  {rb.namespace}/{rb.name} -> {rb.role_ref.kind}/{rb.role_ref.name}")

    click.echo(f"\nClusterRoleBindings ({len(details.cluster_role_bindings)}):")
    for crb in details.cluster_role_bindings:
        click.echo(f"  {crb.name} -> {crb.role_ref.kind}/{crb.role_ref.name}")

    click.echo(f"\nClusterRoles ({len(details.cluster_roles)}):")
    for role in details.cluster_roles:
        click.echo(f"  {role.name} ({len(role.rules)} rules)")


@click.group(name="lookup", help="Resolve the bindings and roles granted to a principal.")
def lookup() -> None:
    """Lookup command group."""


@lookup.command(name="user-details", help="Show bindings and ClusterRoles of a user.")
@_lookup_options
def user_details_command(name: str, output: str, **options: Any) -> None:
    """Show the RoleBindings, ClusterRoleBindings and ClusterRoles of a user."""
    details = _run_lookup("user_details", name, **options)
    _output_details(details, output.lower())


@lookup.command(
    name="serviceaccount-details",
    help="Show bindings and ClusterRoles of a service account.",
)
@_lookup_options
def serviceaccount_details_command(name: str, output: str, **options: Any) -> None:
    """Show the bindings and ClusterRoles of a service account.

    Requires the view_serviceaccount_details permission unless --admin.
    """
    details = _run_lookup("service_account_details", name, **options)
    _output_details(details, output.lower())


@lookup.command(name="user-roles", help="List the role names bound to a user.")
@_lookup_options
def user_roles_command(name: str, output: str, **options: Any) -> None:
    """List roleRef names from the user's RoleBindings and ClusterRoleBindings.

    Requires the view_user_roles permission unless --admin.
    """
    roles = _run_lookup("user_roles", name, **options)
    if output.lower() == "json":
        click.echo(json.dumps(roles))
        return
    for role in roles:
        click.echo(role)


__all__ = [
    "lookup",
    "serviceaccount_details_command",
    "user_details_command",
    "user_roles_command",
]
