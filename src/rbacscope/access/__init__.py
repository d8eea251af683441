"""Requester permission checks run before a lookup."""

from __future__ import annotations

from rbacscope.access.policy import (
    VIEW_SERVICEACCOUNT_DETAILS,
    VIEW_USER_ROLES,
    AccessPolicy,
    PermissionChecker,
    RequestContext,
    load_access_policy,
)

__all__ = [
    "VIEW_SERVICEACCOUNT_DETAILS",
    "VIEW_USER_ROLES",
    "AccessPolicy",
    "PermissionChecker",
    "RequestContext",
    "load_access_policy",
]
