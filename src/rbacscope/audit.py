"""Audit events for principal lookups.

Every lookup run through ``LookupService`` produces one
``LookupAuditEvent``, whatever its outcome, logged to the
``"rbacscope.audit"`` logger so access to RBAC details can be reviewed.

Example:
    >>> from rbacscope.audit import LookupAuditEvent, log_lookup_event
    >>> event = LookupAuditEvent.create_success(
    ...     operation="user_details",
    ...     requester="admin",
    ...     principal_kind="User",
    ...     principal_name="alice",
    ...     role_bindings=1,
    ...     cluster_role_bindings=1,
    ...     cluster_roles=1,
    ... )
    >>> log_lookup_event(event)
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger("rbacscope.audit")


class LookupResult(str, Enum):
    """Outcome of a lookup."""

    SUCCESS = "success"
    """Lookup completed and a result was returned."""

    DENIED = "denied"
    """Requester lacked the required permission."""

    INVALID_REQUEST = "invalid_request"
    """Principal name was missing."""

    UPSTREAM_ERROR = "upstream_error"
    """Listing RBAC objects from the cluster failed."""


class LookupAuditEvent(BaseModel):
    """Audit record of a single lookup.

    Attributes:
        timestamp: When the lookup finished.
        operation: Lookup operation ("user_details", "service_account_details",
            "user_roles").
        requester: User who requested the lookup.
        principal_kind: Kind of the principal looked up.
        principal_name: Name of the principal looked up.
        result: Outcome.
        role_bindings: Number of matched RoleBindings.
        cluster_role_bindings: Number of matched ClusterRoleBindings.
        cluster_roles: Number of resolved ClusterRoles.
        role_names: Number of role names returned by a roles lookup.
        error: Error message when the lookup failed.
        trace_id: OpenTelemetry trace id for correlation.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    timestamp: datetime = Field(..., description="When the lookup finished")
    operation: str = Field(..., description="Lookup operation name")
    requester: str = Field(..., description="Requesting user")
    principal_kind: str = Field(..., description="Kind of the looked-up principal")
    principal_name: str = Field(default="", description="Name of the looked-up principal")
    result: LookupResult = Field(..., description="Outcome of the lookup")
    role_bindings: int = Field(default=0, ge=0)
    cluster_role_bindings: int = Field(default=0, ge=0)
    cluster_roles: int = Field(default=0, ge=0)
    role_names: int = Field(default=0, ge=0)
    error: str | None = Field(default=None, description="Failure message")
    trace_id: str | None = Field(default=None, description="OpenTelemetry trace id")

    def to_log_dict(self) -> dict[str, Any]:
        """Convert to a dictionary for structured logging.

        Zero counts, empty errors and missing trace ids are left out.
        """
        result: dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "operation": self.operation,
            "requester": self.requester,
            "principal_kind": self.principal_kind,
            "principal_name": self.principal_name,
            "result": self.result.value,
        }
        for key in ("role_bindings", "cluster_role_bindings", "cluster_roles", "role_names"):
            count = getattr(self, key)
            if count:
                result[key] = count
        if self.error:
            result["error"] = self.error
        if self.trace_id:
            result["trace_id"] = self.trace_id
        return result

    @classmethod
    def create_success(
        cls,
        *,
        operation: str,
        requester: str,
        principal_kind: str,
        principal_name: str,
        role_bindings: int = 0,
        cluster_role_bindings: int = 0,
        cluster_roles: int = 0,
        role_names: int = 0,
        trace_id: str | None = None,
    ) -> LookupAuditEvent:
        """Create an event for a completed lookup."""
        return cls(
            timestamp=datetime.now(timezone.utc),
            operation=operation,
            requester=requester,
            principal_kind=principal_kind,
            principal_name=principal_name,
            result=LookupResult.SUCCESS,
            role_bindings=role_bindings,
            cluster_role_bindings=cluster_role_bindings,
            cluster_roles=cluster_roles,
            role_names=role_names,
            trace_id=trace_id,
        )

    @classmethod
    def create_failure(
        cls,
        *,
        operation: str,
        requester: str,
        principal_kind: str,
        principal_name: str,
        result: LookupResult,
        error: str,
        trace_id: str | None = None,
    ) -> LookupAuditEvent:
        """Create an event for a lookup that did not complete.

        Raises:
            ValueError: If ``result`` is SUCCESS.
        """
        if result is LookupResult.SUCCESS:
            msg = "create_failure requires a failure result"
            raise ValueError(msg)
        return cls(
            timestamp=datetime.now(timezone.utc),
            operation=operation,
            requester=requester,
            principal_kind=principal_kind,
            principal_name=principal_name,
            result=result,
            error=error,
            trace_id=trace_id,
        )


def log_lookup_event(event: LookupAuditEvent) -> None:
    """Log a lookup audit event.

    Level depends on the result:
    - SUCCESS: INFO
    - DENIED / INVALID_REQUEST: WARNING
    - UPSTREAM_ERROR: ERROR

    Args:
        event: The audit event to log.
    """
    log_data = event.to_log_dict()

    if event.result is LookupResult.SUCCESS:
        level = logging.INFO
    elif event.result is LookupResult.UPSTREAM_ERROR:
        level = logging.ERROR
    else:
        level = logging.WARNING

    logger.log(
        level,
        "RBAC lookup %s %s",
        event.operation,
        event.result.value,
        extra={"audit_event": log_data},
    )


__all__ = ["LookupAuditEvent", "LookupResult", "log_lookup_event"]
