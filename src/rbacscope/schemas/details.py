"""Result models for principal lookups.

``ResolvedDetails`` is the audit-style answer: the bindings that grant
access to one principal and the ClusterRoles those bindings resolve to.
``to_response()`` encodes it in the JSON shape served to callers, keyed by
``userName`` or ``serviceAccountName`` depending on the principal kind.

Example:
    >>> from rbacscope.schemas.details import ResolvedDetails
    >>> from rbacscope.schemas.principal import Principal
    >>> details = ResolvedDetails(principal=Principal.user("alice"))
    >>> details.to_response()
    {'userName': 'alice', 'roleBindings': [], 'clusterRoleBindings': [], 'clusterRoles': []}
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from rbacscope.schemas.principal import Principal, PrincipalKind
from rbacscope.schemas.rbac import ClusterRole, ClusterRoleBinding, RoleBinding

# Response key carrying the echoed principal name, per principal kind
_NAME_KEYS: dict[PrincipalKind, str] = {
    PrincipalKind.USER: "userName",
    PrincipalKind.SERVICE_ACCOUNT: "serviceAccountName",
}


class ResolvedDetails(BaseModel):
    """Bindings and roles resolved for a single principal.

    The three sequences keep source iteration order and are not
    de-duplicated: a binding listing the principal twice appears twice, and
    a ClusterRole appears once per ClusterRoleBinding that references it.

    Attributes:
        principal: The principal that was looked up.
        role_bindings: Matched RoleBindings.
        cluster_role_bindings: Matched ClusterRoleBindings.
        cluster_roles: ClusterRoles referenced by the matched
            ClusterRoleBindings.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    principal: Principal = Field(..., description="Principal that was looked up")
    role_bindings: list[RoleBinding] = Field(
        default_factory=list,
        description="Matched RoleBindings in source order",
    )
    cluster_role_bindings: list[ClusterRoleBinding] = Field(
        default_factory=list,
        description="Matched ClusterRoleBindings in source order",
    )
    cluster_roles: list[ClusterRole] = Field(
        default_factory=list,
        description="Resolved ClusterRoles, one per matching ClusterRoleBinding",
    )

    @property
    def principal_name(self) -> str:
        """Name of the principal, exactly as supplied."""
        return self.principal.name

    def is_empty(self) -> bool:
        """Return True when nothing matched the principal."""
        return not (self.role_bindings or self.cluster_role_bindings)

    def to_response(self) -> dict[str, Any]:
        """Encode as the lookup response body.

        Returns:
            Dictionary with the principal name under a kind-specific key and
            the three sequences as manifest dictionaries. Empty sequences are
            encoded as empty lists.
        """
        return {
            _NAME_KEYS[self.principal.kind]: self.principal.name,
            "roleBindings": [rb.to_k8s_manifest() for rb in self.role_bindings],
            "clusterRoleBindings": [
                crb.to_k8s_manifest() for crb in self.cluster_role_bindings
            ],
            "clusterRoles": [cr.to_k8s_manifest() for cr in self.cluster_roles],
        }


__all__ = ["ResolvedDetails"]
