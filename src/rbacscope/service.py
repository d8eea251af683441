"""Lookup service: the request-level flow around the resolver.

Each lookup runs the same steps:

1. permission check for the requester (skipped for user details);
2. validation of the principal name;
3. listing of the RBAC collections from the snapshot source;
4. resolution;
5. one audit event, whatever the outcome.

Example:
    >>> from rbacscope.service import LookupService
    >>> service = LookupService(ClusterFetcher(rbac_api), PermissionChecker(policy))
    >>> details = service.user_details(RequestContext(username="admin", is_admin=True), "alice")
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, TypeVar

import structlog
from opentelemetry import trace

from rbacscope.access.policy import (
    VIEW_SERVICEACCOUNT_DETAILS,
    VIEW_USER_ROLES,
    PermissionChecker,
    RequestContext,
)
from rbacscope.audit import LookupAuditEvent, LookupResult, log_lookup_event
from rbacscope.errors import InvalidRequestError, PermissionDeniedError, UpstreamListingError
from rbacscope.resolver.snapshot import RBACSnapshot
from rbacscope.schemas.details import ResolvedDetails
from rbacscope.schemas.principal import Principal
from rbacscope.telemetry.tracing import get_tracer, lookup_span

logger = structlog.get_logger(__name__)

ResultT = TypeVar("ResultT")


class SnapshotSource(Protocol):
    """Anything that can produce a fresh RBAC snapshot."""

    def fetch_snapshot(self, include_cluster_roles: bool = True) -> RBACSnapshot: ...


class StaticSnapshotSource:
    """Serves one pre-loaded snapshot, e.g. read from a file."""

    def __init__(self, snapshot: RBACSnapshot) -> None:
        self.snapshot = snapshot

    def fetch_snapshot(self, include_cluster_roles: bool = True) -> RBACSnapshot:
        if include_cluster_roles:
            return self.snapshot
        return RBACSnapshot(self.snapshot.role_bindings, self.snapshot.cluster_role_bindings)


def _current_trace_id() -> str | None:
    ctx = trace.get_current_span().get_span_context()
    if not ctx.is_valid:
        return None
    return format(ctx.trace_id, "032x")


class LookupService:
    """Runs principal lookups for a requester.

    Args:
        source: Snapshot source, listed fresh on every lookup.
        checker: Permission collaborator consulted before listing.
    """

    def __init__(self, source: SnapshotSource, checker: PermissionChecker | None = None) -> None:
        self._source = source
        self._checker = checker or PermissionChecker()

    def user_details(self, context: RequestContext, user_name: str) -> ResolvedDetails:
        """Bindings and ClusterRoles of a user.

        Raises:
            InvalidRequestError: If ``user_name`` is empty.
            UpstreamListingError: If listing fails.
        """
        return self._run(
            operation="user_details",
            context=context,
            principal=Principal.user(user_name),
            permission=None,
            missing_name_message="User name is required",
            resolve=lambda principal: self._source.fetch_snapshot().details_for(principal),
            counts=_detail_counts,
        )

    def service_account_details(
        self, context: RequestContext, service_account_name: str
    ) -> ResolvedDetails:
        """Bindings and ClusterRoles of a service account.

        Raises:
            PermissionDeniedError: If the requester may not view service
                account details.
            InvalidRequestError: If ``service_account_name`` is empty.
            UpstreamListingError: If listing fails.
        """
        return self._run(
            operation="service_account_details",
            context=context,
            principal=Principal.service_account(service_account_name),
            permission=(VIEW_SERVICEACCOUNT_DETAILS, "view service account details"),
            missing_name_message="Service account name is required",
            resolve=lambda principal: self._source.fetch_snapshot().details_for(principal),
            counts=_detail_counts,
        )

    def user_roles(self, context: RequestContext, user_name: str) -> list[str]:
        """Flat list of role names bound to a user.

        ClusterRoles are not listed for this lookup.

        Raises:
            PermissionDeniedError: If the requester may not view user roles.
            InvalidRequestError: If ``user_name`` is empty.
            UpstreamListingError: If listing fails.
        """
        return self._run(
            operation="user_roles",
            context=context,
            principal=Principal.user(user_name),
            permission=(VIEW_USER_ROLES, "view user roles"),
            missing_name_message="User name is required",
            resolve=lambda principal: self._source.fetch_snapshot(
                include_cluster_roles=False
            ).role_names_for(principal),
            counts=lambda names: {"role_names": len(names)},
        )

    def _run(
        self,
        *,
        operation: str,
        context: RequestContext,
        principal: Principal,
        permission: tuple[str, str] | None,
        missing_name_message: str,
        resolve: Callable[[Principal], ResultT],
        counts: Callable[[ResultT], dict[str, int]],
    ) -> ResultT:
        kind = principal.kind.value
        with lookup_span(get_tracer(), operation, principal_kind=kind):
            try:
                if permission is not None:
                    self._checker.require(context, *permission)
                if not principal.name:
                    raise InvalidRequestError(missing_name_message, parameter="name")
                result = resolve(principal)
            except PermissionDeniedError as e:
                self._audit_failure(operation, context, principal, LookupResult.DENIED, e)
                raise
            except InvalidRequestError as e:
                self._audit_failure(operation, context, principal, LookupResult.INVALID_REQUEST, e)
                raise
            except UpstreamListingError as e:
                self._audit_failure(operation, context, principal, LookupResult.UPSTREAM_ERROR, e)
                raise

            result_counts = counts(result)
            logger.info(
                "service.lookup_completed",
                operation=operation,
                principal_kind=kind,
                **result_counts,
            )
            log_lookup_event(
                LookupAuditEvent.create_success(
                    operation=operation,
                    requester=context.username,
                    principal_kind=kind,
                    principal_name=principal.name,
                    trace_id=_current_trace_id(),
                    **result_counts,
                )
            )
            return result

    def _audit_failure(
        self,
        operation: str,
        context: RequestContext,
        principal: Principal,
        result: LookupResult,
        error: Exception,
    ) -> None:
        log_lookup_event(
            LookupAuditEvent.create_failure(
                operation=operation,
                requester=context.username,
                principal_kind=principal.kind.value,
                principal_name=principal.name,
                result=result,
                error=str(error),
                trace_id=_current_trace_id(),
            )
        )


def _detail_counts(details: ResolvedDetails) -> dict[str, int]:
    return {
        "role_bindings": len(details.role_bindings),
        "cluster_role_bindings": len(details.cluster_role_bindings),
        "cluster_roles": len(details.cluster_roles),
    }


__all__ = [
    "LookupService",
    "SnapshotSource",
    "StaticSnapshotSource",
]
