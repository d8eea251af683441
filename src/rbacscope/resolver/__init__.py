"""Principal-to-binding resolution.

Joins the RoleBinding, ClusterRoleBinding and ClusterRole collections by
subject identity and role reference. Everything in this package is pure:
no I/O, no shared mutable state.

Example:
    >>> from rbacscope.resolver import extract_user_details
    >>> details = extract_user_details("alice", rbs, crbs, roles)
"""

from __future__ import annotations

from rbacscope.resolver.assembler import (
    assemble_details,
    assemble_role_names,
    extract_service_account_details,
    extract_user_details,
    extract_user_roles,
)
from rbacscope.resolver.collector import (
    BindingIndex,
    CollectedBindings,
    collect_bindings,
    select_bindings,
)
from rbacscope.resolver.matcher import matches, matches_principal
from rbacscope.resolver.roles import RoleIndex, resolve_cluster_roles
from rbacscope.resolver.snapshot import RBACSnapshot

__all__ = [
    "BindingIndex",
    "CollectedBindings",
    "RBACSnapshot",
    "RoleIndex",
    "assemble_details",
    "assemble_role_names",
    "collect_bindings",
    "extract_service_account_details",
    "extract_user_details",
    "extract_user_roles",
    "matches",
    "matches_principal",
    "resolve_cluster_roles",
    "select_bindings",
]
