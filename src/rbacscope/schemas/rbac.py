"""Read-only models of Kubernetes RBAC objects.

This module defines the Pydantic models for the RBAC objects the resolver
joins: RoleBinding, ClusterRoleBinding and ClusterRole, plus their nested
Subject, RoleRef and PolicyRule entries.

Each resource model can be built from a kubernetes python client object
(``from_k8s``) or from a manifest dictionary as printed by
``kubectl get -o yaml`` (``from_manifest``), and converted back into a
manifest dictionary with ``to_k8s_manifest()``.

Example:
    >>> from rbacscope.schemas.rbac import ClusterRoleBinding
    >>> binding = ClusterRoleBinding.from_manifest({
    ...     "metadata": {"name": "admins"},
    ...     "subjects": [{"kind": "User", "name": "alice"}],
    ...     "roleRef": {"kind": "ClusterRole", "name": "cluster-admin"},
    ... })
    >>> binding.role_ref.name
    'cluster-admin'
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

RBAC_API_GROUP = "rbac.authorization.k8s.io"
RBAC_API_VERSION = f"{RBAC_API_GROUP}/v1"


def _metadata(data: dict[str, Any]) -> dict[str, Any]:
    return data.get("metadata") or {}


# =============================================================================
# Nested entries
# =============================================================================


class Subject(BaseModel):
    """An entry in a binding's subject list.

    ``kind`` is kept as a free string: subjects with kinds the resolver does
    not know about (``Group``, typos) are valid input and never match.
    A missing ``name`` is tolerated for the same reason.

    Attributes:
        kind: Subject kind ("User", "ServiceAccount", "Group", ...).
        name: Subject name.
        namespace: Namespace, set for ServiceAccount subjects.
        api_group: API group of the subject kind.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: str = Field(..., description="Subject kind")
    name: str | None = Field(default=None, description="Subject name")
    namespace: str | None = Field(
        default=None,
        description="Namespace of a ServiceAccount subject",
    )
    api_group: str | None = Field(default=None, description="Subject API group")

    @classmethod
    def from_k8s(cls, obj: Any) -> Subject:
        """Build from a kubernetes client subject object."""
        return cls(
            kind=obj.kind or "",
            name=obj.name,
            namespace=getattr(obj, "namespace", None),
            api_group=getattr(obj, "api_group", None),
        )

    @classmethod
    def from_manifest(cls, data: dict[str, Any]) -> Subject:
        """Build from a manifest ``subjects[]`` entry.

        A null ``kind`` becomes the empty string and a scalar ``name`` (an
        unquoted YAML number) is kept as text, so such entries never fail
        validation.
        """
        name = data.get("name")
        return cls(
            kind=data.get("kind") or "",
            name=str(name) if name is not None else None,
            namespace=data.get("namespace"),
            api_group=data.get("apiGroup"),
        )

    def to_k8s_manifest(self) -> dict[str, Any]:
        """Convert to a manifest ``subjects[]`` entry, omitting unset fields."""
        result: dict[str, Any] = {"kind": self.kind}
        if self.name is not None:
            result["name"] = self.name
        if self.api_group is not None:
            result["apiGroup"] = self.api_group
        if self.namespace is not None:
            result["namespace"] = self.namespace
        return result


class RoleRef(BaseModel):
    """Pointer from a binding to the role it grants.

    Attributes:
        api_group: API group of the referenced role.
        kind: "Role" or "ClusterRole".
        name: Name of the referenced role.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    api_group: str = Field(default=RBAC_API_GROUP, description="Role API group")
    kind: str = Field(default="ClusterRole", description="Referenced role kind")
    name: str = Field(..., description="Referenced role name")

    @classmethod
    def from_k8s(cls, obj: Any) -> RoleRef:
        """Build from a kubernetes client role reference object."""
        return cls(
            api_group=obj.api_group or RBAC_API_GROUP,
            kind=obj.kind,
            name=obj.name,
        )

    @classmethod
    def from_manifest(cls, data: dict[str, Any]) -> RoleRef:
        """Build from a manifest ``roleRef`` mapping."""
        return cls(
            api_group=data.get("apiGroup") or RBAC_API_GROUP,
            kind=data.get("kind", "ClusterRole"),
            name=data.get("name", ""),
        )

    def to_k8s_manifest(self) -> dict[str, Any]:
        """Convert to a manifest ``roleRef`` mapping."""
        return {"apiGroup": self.api_group, "kind": self.kind, "name": self.name}


class PolicyRule(BaseModel):
    """A single rule of a ClusterRole.

    Rules are carried through for display only; the resolver never
    evaluates verbs or resources.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    api_groups: list[str] = Field(default_factory=list)
    resources: list[str] = Field(default_factory=list)
    verbs: list[str] = Field(default_factory=list)
    resource_names: list[str] = Field(default_factory=list)
    non_resource_urls: list[str] = Field(default_factory=list)

    @classmethod
    def from_k8s(cls, obj: Any) -> PolicyRule:
        """Build from a kubernetes client policy rule object."""
        return cls(
            api_groups=obj.api_groups or [],
            resources=obj.resources or [],
            verbs=obj.verbs or [],
            resource_names=obj.resource_names or [],
            non_resource_urls=getattr(obj, "non_resource_ur_ls", None) or [],
        )

    @classmethod
    def from_manifest(cls, data: dict[str, Any]) -> PolicyRule:
        """Build from a manifest ``rules[]`` entry."""
        return cls(
            api_groups=data.get("apiGroups") or [],
            resources=data.get("resources") or [],
            verbs=data.get("verbs") or [],
            resource_names=data.get("resourceNames") or [],
            non_resource_urls=data.get("nonResourceURLs") or [],
        )

    def to_k8s_manifest(self) -> dict[str, Any]:
        """Convert to a manifest ``rules[]`` entry, omitting empty lists."""
        result: dict[str, Any] = {"verbs": self.verbs}
        if self.api_groups:
            result["apiGroups"] = self.api_groups
        if self.resources:
            result["resources"] = self.resources
        if self.resource_names:
            result["resourceNames"] = self.resource_names
        if self.non_resource_urls:
            result["nonResourceURLs"] = self.non_resource_urls
        return result


# =============================================================================
# Resources
# =============================================================================


class RoleBinding(BaseModel):
    """Namespace-scoped grant linking subjects to a role reference.

    ``role_ref`` may point at a Role or a ClusterRole; only ClusterRole
    references are ever resolved to role objects.

    Attributes:
        name: Binding name.
        namespace: Namespace the binding lives in.
        subjects: Ordered subject entries.
        role_ref: Referenced role.
        labels: Kubernetes labels.
        annotations: Kubernetes annotations.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., description="RoleBinding name")
    namespace: str | None = Field(default=None, description="RoleBinding namespace")
    subjects: list[Subject] = Field(default_factory=list, description="Bound subjects")
    role_ref: RoleRef = Field(..., description="Referenced role")
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_k8s(cls, obj: Any) -> RoleBinding:
        """Build from a kubernetes ``V1RoleBinding``."""
        return cls(
            name=obj.metadata.name,
            namespace=obj.metadata.namespace,
            subjects=[Subject.from_k8s(s) for s in (obj.subjects or [])],
            role_ref=RoleRef.from_k8s(obj.role_ref),
            labels=obj.metadata.labels or {},
            annotations=obj.metadata.annotations or {},
        )

    @classmethod
    def from_manifest(cls, data: dict[str, Any]) -> RoleBinding:
        """Build from a RoleBinding manifest dictionary."""
        metadata = _metadata(data)
        return cls(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace"),
            subjects=[Subject.from_manifest(s) for s in (data.get("subjects") or [])],
            role_ref=RoleRef.from_manifest(data.get("roleRef") or {}),
            labels=metadata.get("labels") or {},
            annotations=metadata.get("annotations") or {},
        )

    def to_k8s_manifest(self) -> dict[str, Any]:
        """Convert to a RoleBinding manifest dictionary, omitting an unset namespace."""
        metadata: dict[str, Any] = {"name": self.name}
        if self.namespace is not None:
            metadata["namespace"] = self.namespace
        metadata["labels"] = self.labels
        metadata["annotations"] = self.annotations
        return {
            "apiVersion": RBAC_API_VERSION,
            "kind": "RoleBinding",
            "metadata": metadata,
            "subjects": [s.to_k8s_manifest() for s in self.subjects],
            "roleRef": self.role_ref.to_k8s_manifest(),
        }


class ClusterRoleBinding(BaseModel):
    """Cluster-scoped grant linking subjects to a ClusterRole.

    Attributes:
        name: Binding name.
        subjects: Ordered subject entries.
        role_ref: Referenced role.
        labels: Kubernetes labels.
        annotations: Kubernetes annotations.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., description="ClusterRoleBinding name")
    subjects: list[Subject] = Field(default_factory=list, description="Bound subjects")
    role_ref: RoleRef = Field(..., description="Referenced role")
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_k8s(cls, obj: Any) -> ClusterRoleBinding:
        """Build from a kubernetes ``V1ClusterRoleBinding``."""
        return cls(
            name=obj.metadata.name,
            subjects=[Subject.from_k8s(s) for s in (obj.subjects or [])],
            role_ref=RoleRef.from_k8s(obj.role_ref),
            labels=obj.metadata.labels or {},
            annotations=obj.metadata.annotations or {},
        )

    @classmethod
    def from_manifest(cls, data: dict[str, Any]) -> ClusterRoleBinding:
        """Build from a ClusterRoleBinding manifest dictionary."""
        metadata = _metadata(data)
        return cls(
            name=metadata.get("name", ""),
            subjects=[Subject.from_manifest(s) for s in (data.get("subjects") or [])],
            role_ref=RoleRef.from_manifest(data.get("roleRef") or {}),
            labels=metadata.get("labels") or {},
            annotations=metadata.get("annotations") or {},
        )

    def to_k8s_manifest(self) -> dict[str, Any]:
        """Convert to a ClusterRoleBinding manifest dictionary."""
        return {
            "apiVersion": RBAC_API_VERSION,
            "kind": "ClusterRoleBinding",
            "metadata": {
                "name": self.name,
                "labels": self.labels,
                "annotations": self.annotations,
            },
            "subjects": [s.to_k8s_manifest() for s in self.subjects],
            "roleRef": self.role_ref.to_k8s_manifest(),
        }


class ClusterRole(BaseModel):
    """Cluster-scoped role definition, identified by name.

    Attributes:
        name: ClusterRole name.
        rules: Policy rules, carried for display.
        labels: Kubernetes labels.
        annotations: Kubernetes annotations.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., description="ClusterRole name")
    rules: list[PolicyRule] = Field(default_factory=list, description="Policy rules")
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_k8s(cls, obj: Any) -> ClusterRole:
        """Build from a kubernetes ``V1ClusterRole``."""
        return cls(
            name=obj.metadata.name,
            rules=[PolicyRule.from_k8s(r) for r in (obj.rules or [])],
            labels=obj.metadata.labels or {},
            annotations=obj.metadata.annotations or {},
        )

    @classmethod
    def from_manifest(cls, data: dict[str, Any]) -> ClusterRole:
        """Build from a ClusterRole manifest dictionary."""
        metadata = _metadata(data)
        return cls(
            name=metadata.get("name", ""),
            rules=[PolicyRule.from_manifest(r) for r in (data.get("rules") or [])],
            labels=metadata.get("labels") or {},
            annotations=metadata.get("annotations") or {},
        )

    def to_k8s_manifest(self) -> dict[str, Any]:
        """Convert to a ClusterRole manifest dictionary."""
        return {
            "apiVersion": RBAC_API_VERSION,
            "kind": "ClusterRole",
            "metadata": {
                "name": self.name,
                "labels": self.labels,
                "annotations": self.annotations,
            },
            "rules": [r.to_k8s_manifest() for r in self.rules],
        }


__all__ = [
    "RBAC_API_GROUP",
    "RBAC_API_VERSION",
    "ClusterRole",
    "ClusterRoleBinding",
    "PolicyRule",
    "RoleBinding",
    "RoleRef",
    "Subject",
]
