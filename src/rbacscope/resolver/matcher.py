"""Subject matching for principal lookups."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rbacscope.schemas.principal import PrincipalKind

if TYPE_CHECKING:
    from rbacscope.schemas.principal import Principal
    from rbacscope.schemas.rbac import Subject


def matches(subject: Subject, kind: PrincipalKind | str, name: str) -> bool:
    """Return True if a binding subject refers to the given principal.

    Kind and name are compared exactly, case-sensitively, with no
    normalization. A ServiceAccount subject named "X" never matches the
    User "X". The subject namespace is not considered.

    Args:
        subject: Entry from a binding's subject list.
        kind: Subject kind of the principal.
        name: Principal name.

    Returns:
        True when both kind and name are equal.
    """
    want_kind = kind.value if isinstance(kind, PrincipalKind) else kind
    return subject.kind == want_kind and subject.name == name


def matches_principal(subject: Subject, principal: Principal) -> bool:
    """Shorthand for ``matches(subject, principal.kind, principal.name)``."""
    return matches(subject, principal.kind, principal.name)


__all__ = ["matches", "matches_principal"]
