"""Principal identity models.

A principal is the identity being queried: a User or a ServiceAccount.
Matching against binding subjects is done on kind and name only.

Example:
    >>> from rbacscope.schemas.principal import Principal, PrincipalKind
    >>> principal = Principal.user("alice")
    >>> principal.kind
    <PrincipalKind.USER: 'User'>
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PrincipalKind(str, Enum):
    """Subject kinds that can be looked up.

    Values are the exact ``kind`` strings used in binding subjects.
    """

    USER = "User"
    """A user authenticated by the cluster."""

    SERVICE_ACCOUNT = "ServiceAccount"
    """A namespaced service account."""


class Principal(BaseModel):
    """A principal whose bindings are being resolved.

    Attributes:
        kind: Subject kind the principal is matched against.
        name: Principal name, compared case-sensitively and verbatim.

    Example:
        >>> Principal(kind=PrincipalKind.SERVICE_ACCOUNT, name="build-bot")
        Principal(kind=<PrincipalKind.SERVICE_ACCOUNT: 'ServiceAccount'>, name='build-bot')
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: PrincipalKind = Field(
        ...,
        description="Subject kind of the principal",
    )
    name: str = Field(
        ...,
        description="Principal name, echoed back verbatim in results",
    )

    @classmethod
    def user(cls, name: str) -> Principal:
        """Build a User principal."""
        return cls(kind=PrincipalKind.USER, name=name)

    @classmethod
    def service_account(cls, name: str) -> Principal:
        """Build a ServiceAccount principal."""
        return cls(kind=PrincipalKind.SERVICE_ACCOUNT, name=name)


__all__ = ["Principal", "PrincipalKind"]
