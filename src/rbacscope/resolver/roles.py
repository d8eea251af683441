"""ClusterRole resolution for matched ClusterRoleBindings.

Bindings and roles are listed independently and may be fetched at slightly
different points in time, so a roleRef naming a ClusterRole that does not
exist is expected and is skipped without error or warning.

Only ClusterRoleBindings are resolved. RoleBinding role references are
never turned into role objects, whatever their kind.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence

from rbacscope.schemas.rbac import ClusterRole, ClusterRoleBinding


def resolve_cluster_roles(
    cluster_role_bindings: Sequence[ClusterRoleBinding],
    cluster_roles: Sequence[ClusterRole],
) -> list[ClusterRole]:
    """Resolve each binding's roleRef against the ClusterRole collection.

    For every binding, in order, each ClusterRole whose name equals the
    binding's ``role_ref.name`` is appended. Two bindings referencing the
    same role yield that role twice.

    Args:
        cluster_role_bindings: ClusterRoleBindings already selected for a
            principal.
        cluster_roles: All ClusterRoles, in listing order.

    Returns:
        Resolved ClusterRoles, one per matching binding.
    """
    resolved: list[ClusterRole] = []
    for binding in cluster_role_bindings:
        for role in cluster_roles:
            if role.name == binding.role_ref.name:
                resolved.append(role)
    return resolved


class RoleIndex:
    """ClusterRoles indexed by name.

    Produces the same output as ``resolve_cluster_roles`` in
    O(bindings + roles) instead of O(bindings * roles).
    """

    def __init__(self, cluster_roles: Sequence[ClusterRole]) -> None:
        by_name: defaultdict[str, list[ClusterRole]] = defaultdict(list)
        for role in cluster_roles:
            by_name[role.name].append(role)
        self._by_name: dict[str, tuple[ClusterRole, ...]] = {
            name: tuple(roles) for name, roles in by_name.items()
        }

    def __len__(self) -> int:
        return sum(len(roles) for roles in self._by_name.values())

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def resolve(self, cluster_role_bindings: Sequence[ClusterRoleBinding]) -> list[ClusterRole]:
        """Resolve bindings through the index.

        Args:
            cluster_role_bindings: ClusterRoleBindings selected for a principal.

        Returns:
            Resolved ClusterRoles, one per matching binding; dangling
            references are skipped.
        """
        resolved: list[ClusterRole] = []
        for binding in cluster_role_bindings:
            resolved.extend(self._by_name.get(binding.role_ref.name, ()))
        return resolved


__all__ = ["RoleIndex", "resolve_cluster_roles"]
