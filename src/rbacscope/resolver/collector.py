"""Binding collection for a principal.

Selects, from the namespaced and cluster-scoped binding collections, the
bindings whose subject list names a principal. Selection follows
nested-loop join semantics:

- input order is preserved;
- a binding with k matching subject entries is emitted k times.

Duplicates are intentional: they mirror what the subject lists actually
say and must not be collapsed into set semantics.

Example:
    >>> from rbacscope.resolver.collector import collect_bindings
    >>> collected = collect_bindings(Principal.user("alice"), rbs, crbs)
    >>> [rb.name for rb in collected.role_bindings]
    ['alice-edit']
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from rbacscope.resolver.matcher import matches_principal
from rbacscope.schemas.principal import Principal
from rbacscope.schemas.rbac import ClusterRoleBinding, RoleBinding

BindingT = TypeVar("BindingT", RoleBinding, ClusterRoleBinding)


@dataclass(frozen=True)
class CollectedBindings:
    """Bindings selected for one principal.

    Attributes:
        role_bindings: Matched RoleBindings, duplicates preserved.
        cluster_role_bindings: Matched ClusterRoleBindings, duplicates preserved.
    """

    role_bindings: list[RoleBinding] = field(default_factory=list)
    cluster_role_bindings: list[ClusterRoleBinding] = field(default_factory=list)


def select_bindings(principal: Principal, bindings: Sequence[BindingT]) -> list[BindingT]:
    """Return the bindings with a subject entry matching the principal.

    Args:
        principal: Principal to look up.
        bindings: RoleBindings or ClusterRoleBindings in source order.

    Returns:
        Matching bindings in source order, one entry per matching subject.
    """
    if not principal.name:
        return []

    selected: list[BindingT] = []
    for binding in bindings:
        for subject in binding.subjects:
            if matches_principal(subject, principal):
                selected.append(binding)
    return selected


def collect_bindings(
    principal: Principal,
    role_bindings: Sequence[RoleBinding],
    cluster_role_bindings: Sequence[ClusterRoleBinding],
) -> CollectedBindings:
    """Collect the RoleBindings and ClusterRoleBindings granting to a principal.

    RoleBindings are not filtered by namespace; callers pass bindings
    listed across all namespaces.

    Args:
        principal: Principal to look up.
        role_bindings: All RoleBindings, in listing order.
        cluster_role_bindings: All ClusterRoleBindings, in listing order.

    Returns:
        CollectedBindings holding both ordered selections.
    """
    return CollectedBindings(
        role_bindings=select_bindings(principal, role_bindings),
        cluster_role_bindings=select_bindings(principal, cluster_role_bindings),
    )


class BindingIndex(Generic[BindingT]):
    """Precomputed subject-to-binding mapping over one binding collection.

    Built once per snapshot and never mutated afterwards, so a single index
    can serve concurrent lookups for different principals. Lookups return
    exactly what ``select_bindings`` returns, including order and
    duplicates.

    Example:
        >>> index = BindingIndex(cluster_role_bindings)
        >>> index.lookup(Principal.user("alice"))
        [ClusterRoleBinding(name='alice-admin', ...)]
    """

    def __init__(self, bindings: Sequence[BindingT]) -> None:
        """Index the bindings by (subject kind, subject name).

        Args:
            bindings: Bindings in source order.
        """
        self._bindings: tuple[BindingT, ...] = tuple(bindings)
        positions: defaultdict[tuple[str, str], list[int]] = defaultdict(list)
        for position, binding in enumerate(self._bindings):
            for subject in binding.subjects:
                if subject.name is None:
                    continue
                positions[(subject.kind, subject.name)].append(position)
        self._positions: dict[tuple[str, str], tuple[int, ...]] = {
            key: tuple(value) for key, value in positions.items()
        }

    def __len__(self) -> int:
        return len(self._bindings)

    def lookup(self, principal: Principal) -> list[BindingT]:
        """Return the bindings granting to the principal.

        Args:
            principal: Principal to look up.

        Returns:
            Matching bindings in source order, one entry per matching subject.
        """
        if not principal.name:
            return []
        key = (principal.kind.value, principal.name)
        return [self._bindings[position] for position in self._positions.get(key, ())]


__all__ = [
    "BindingIndex",
    "CollectedBindings",
    "collect_bindings",
    "select_bindings",
]
