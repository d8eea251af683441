"""Indexed, read-only snapshot of a cluster's RBAC collections.

An ``RBACSnapshot`` holds the three listed collections plus indexes built
once at construction. Indexed lookups give the same results as the plain
functions in ``rbacscope.resolver.assembler`` (same order, same
duplicates) and the snapshot can be shared between threads looking up
different principals.

Example:
    >>> snapshot = RBACSnapshot(role_bindings=rbs, cluster_role_bindings=crbs,
    ...                         cluster_roles=roles)
    >>> snapshot.role_names_for(Principal.user("alice"))
    ['edit', 'cluster-admin']
"""

from __future__ import annotations

from collections.abc import Sequence

from rbacscope.resolver.collector import BindingIndex
from rbacscope.resolver.roles import RoleIndex
from rbacscope.schemas.details import ResolvedDetails
from rbacscope.schemas.principal import Principal
from rbacscope.schemas.rbac import ClusterRole, ClusterRoleBinding, RoleBinding


class RBACSnapshot:
    """RoleBindings, ClusterRoleBindings and ClusterRoles listed together.

    Attributes:
        role_bindings: RoleBindings across all namespaces.
        cluster_role_bindings: ClusterRoleBindings.
        cluster_roles: ClusterRoles; may be empty when only role names are
            needed.
    """

    def __init__(
        self,
        role_bindings: Sequence[RoleBinding] = (),
        cluster_role_bindings: Sequence[ClusterRoleBinding] = (),
        cluster_roles: Sequence[ClusterRole] = (),
    ) -> None:
        self.role_bindings: tuple[RoleBinding, ...] = tuple(role_bindings)
        self.cluster_role_bindings: tuple[ClusterRoleBinding, ...] = tuple(
            cluster_role_bindings
        )
        self.cluster_roles: tuple[ClusterRole, ...] = tuple(cluster_roles)

        self._role_binding_index = BindingIndex(self.role_bindings)
        self._cluster_role_binding_index = BindingIndex(self.cluster_role_bindings)
        self._role_index = RoleIndex(self.cluster_roles)

    def __repr__(self) -> str:
        return (
            f"RBACSnapshot(role_bindings={len(self.role_bindings)}, "
            f"cluster_role_bindings={len(self.cluster_role_bindings)}, "
            f"cluster_roles={len(self.cluster_roles)})"
        )

    def details_for(self, principal: Principal) -> ResolvedDetails:
        """Resolve bindings and ClusterRoles for a principal.

        Args:
            principal: Principal to look up.

        Returns:
            ResolvedDetails for the principal.
        """
        cluster_role_bindings = self._cluster_role_binding_index.lookup(principal)
        return ResolvedDetails(
            principal=principal,
            role_bindings=self._role_binding_index.lookup(principal),
            cluster_role_bindings=cluster_role_bindings,
            cluster_roles=self._role_index.resolve(cluster_role_bindings),
        )

    def role_names_for(self, principal: Principal) -> list[str]:
        """List roleRef names from the principal's bindings.

        Args:
            principal: Principal to look up.

        Returns:
            RoleBinding roleRef names followed by ClusterRoleBinding ones.
        """
        return [rb.role_ref.name for rb in self._role_binding_index.lookup(principal)] + [
            crb.role_ref.name for crb in self._cluster_role_binding_index.lookup(principal)
        ]


__all__ = ["RBACSnapshot"]
