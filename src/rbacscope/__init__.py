"""rbacscope - Kubernetes RBAC lookups for users and service accounts.

Given the RoleBindings, ClusterRoleBindings and ClusterRoles of a cluster,
rbacscope finds the bindings that name a principal and the ClusterRoles
those bindings grant.

Example:
    >>> from rbacscope import RBACSnapshot, Principal
    >>> snapshot = RBACSnapshot(role_bindings, cluster_role_bindings, cluster_roles)
    >>> details = snapshot.details_for(Principal.user("alice"))
    >>> details.to_response()["userName"]
    'alice'

    >>> from rbacscope import extract_user_roles
    >>> extract_user_roles("alice", role_bindings, cluster_role_bindings)
    ['edit', 'cluster-admin']
"""

from __future__ import annotations

__version__ = "0.1.0"

from rbacscope import schemas as schemas  # noqa: PLC0414
from rbacscope import telemetry as telemetry  # noqa: PLC0414
from rbacscope.access.policy import (
    VIEW_SERVICEACCOUNT_DETAILS,
    VIEW_USER_ROLES,
    AccessPolicy,
    PermissionChecker,
    RequestContext,
)
from rbacscope.errors import (
    ConfigurationError,
    FileAccessError,
    InvalidRequestError,
    PermissionDeniedError,
    RBACScopeError,
    SnapshotLoadError,
    UpstreamListingError,
)
from rbacscope.resolver import (
    extract_service_account_details,
    extract_user_details,
    extract_user_roles,
)
from rbacscope.resolver.snapshot import RBACSnapshot
from rbacscope.schemas.details import ResolvedDetails
from rbacscope.schemas.principal import Principal, PrincipalKind
from rbacscope.service import LookupService, StaticSnapshotSource

__all__ = [
    "VIEW_SERVICEACCOUNT_DETAILS",
    "VIEW_USER_ROLES",
    "AccessPolicy",
    "ConfigurationError",
    "FileAccessError",
    "InvalidRequestError",
    "LookupService",
    "PermissionChecker",
    "PermissionDeniedError",
    "Principal",
    "PrincipalKind",
    "RBACScopeError",
    "RBACSnapshot",
    "RequestContext",
    "ResolvedDetails",
    "SnapshotLoadError",
    "StaticSnapshotSource",
    "UpstreamListingError",
    "__version__",
    "extract_service_account_details",
    "extract_user_details",
    "extract_user_roles",
    "schemas",
    "telemetry",
]
