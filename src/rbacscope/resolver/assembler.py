"""Assemble lookup results from collected bindings and resolved roles.

Two presentations over the same matched data:

- ``assemble_details``: full binding and ClusterRole objects for one
  principal, for callers that inspect the resolved graph (audits).
- ``assemble_role_names``: only the roleRef names of the matched
  RoleBindings followed by those of the matched ClusterRoleBindings. Role
  and ClusterRole references are merged into one flat list without being
  told apart.

The ``extract_*`` functions are kind-specific entry points over the same
generic resolver.

Example:
    >>> details = extract_user_details("alice", rbs, crbs, roles)
    >>> details.to_response()["userName"]
    'alice'
"""

from __future__ import annotations

from collections.abc import Sequence

from rbacscope.resolver.collector import collect_bindings
from rbacscope.resolver.roles import resolve_cluster_roles
from rbacscope.schemas.details import ResolvedDetails
from rbacscope.schemas.principal import Principal
from rbacscope.schemas.rbac import ClusterRole, ClusterRoleBinding, RoleBinding


def assemble_details(
    principal: Principal,
    role_bindings: Sequence[RoleBinding],
    cluster_role_bindings: Sequence[ClusterRoleBinding],
    cluster_roles: Sequence[ClusterRole],
) -> ResolvedDetails:
    """Resolve the bindings and ClusterRoles granting access to a principal.

    Args:
        principal: Principal to look up.
        role_bindings: All RoleBindings across namespaces.
        cluster_role_bindings: All ClusterRoleBindings.
        cluster_roles: All ClusterRoles.

    Returns:
        ResolvedDetails echoing the principal; sequences are empty (never
        missing) when nothing matches.
    """
    collected = collect_bindings(principal, role_bindings, cluster_role_bindings)
    return ResolvedDetails(
        principal=principal,
        role_bindings=collected.role_bindings,
        cluster_role_bindings=collected.cluster_role_bindings,
        cluster_roles=resolve_cluster_roles(collected.cluster_role_bindings, cluster_roles),
    )


def assemble_role_names(
    principal: Principal,
    role_bindings: Sequence[RoleBinding],
    cluster_role_bindings: Sequence[ClusterRoleBinding],
) -> list[str]:
    """List the role reference names granted to a principal.

    Args:
        principal: Principal to look up.
        role_bindings: All RoleBindings across namespaces.
        cluster_role_bindings: All ClusterRoleBindings.

    Returns:
        roleRef names of matched RoleBindings, then of matched
        ClusterRoleBindings, one per matching subject entry.
    """
    collected = collect_bindings(principal, role_bindings, cluster_role_bindings)
    return [rb.role_ref.name for rb in collected.role_bindings] + [
        crb.role_ref.name for crb in collected.cluster_role_bindings
    ]


def extract_user_details(
    user_name: str,
    role_bindings: Sequence[RoleBinding],
    cluster_role_bindings: Sequence[ClusterRoleBinding],
    cluster_roles: Sequence[ClusterRole],
) -> ResolvedDetails:
    """Details view for a User principal."""
    return assemble_details(
        Principal.user(user_name), role_bindings, cluster_role_bindings, cluster_roles
    )


def extract_service_account_details(
    service_account_name: str,
    role_bindings: Sequence[RoleBinding],
    cluster_role_bindings: Sequence[ClusterRoleBinding],
    cluster_roles: Sequence[ClusterRole],
) -> ResolvedDetails:
    """Details view for a ServiceAccount principal."""
    return assemble_details(
        Principal.service_account(service_account_name),
        role_bindings,
        cluster_role_bindings,
        cluster_roles,
    )


def extract_user_roles(
    user_name: str,
    role_bindings: Sequence[RoleBinding],
    cluster_role_bindings: Sequence[ClusterRoleBinding],
) -> list[str]:
    """Flat role name list for a User principal."""
    return assemble_role_names(Principal.user(user_name), role_bindings, cluster_role_bindings)


__all__ = [
    "assemble_details",
    "assemble_role_names",
    "extract_service_account_details",
    "extract_user_details",
    "extract_user_roles",
]
