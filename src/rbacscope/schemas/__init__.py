"""Pydantic models for principals, RBAC objects and lookup results."""

from __future__ import annotations

from rbacscope.schemas.details import ResolvedDetails
from rbacscope.schemas.principal import Principal, PrincipalKind
from rbacscope.schemas.rbac import (
    ClusterRole,
    ClusterRoleBinding,
    PolicyRule,
    RoleBinding,
    RoleRef,
    Subject,
)

__all__ = [
    "ClusterRole",
    "ClusterRoleBinding",
    "PolicyRule",
    "Principal",
    "PrincipalKind",
    "ResolvedDetails",
    "RoleBinding",
    "RoleRef",
    "Subject",
]
