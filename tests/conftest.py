"""Shared fixtures for rbacscope tests.

Provides factory fixtures for RBAC objects and the reference cluster used
by resolver, service and CLI tests:

    RoleBindings:         alice-edit (User alice -> Role edit, ns team-a)
                          bob-view   (User bob   -> ClusterRole view, ns team-b)
    ClusterRoleBindings:  alice-admin (User alice -> ClusterRole cluster-admin)
    ClusterRoles:         cluster-admin, viewer
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator, Sequence
from pathlib import Path
from typing import Any

import pytest
import structlog
from click.testing import CliRunner

from rbacscope.resolver.snapshot import RBACSnapshot
from rbacscope.schemas.rbac import (
    ClusterRole,
    ClusterRoleBinding,
    PolicyRule,
    RoleBinding,
    RoleRef,
    Subject,
)
from rbacscope.telemetry.tracing import reset_tracer

SubjectSpec = tuple[str, str | None]


def _subjects(subjects: Sequence[SubjectSpec]) -> list[Subject]:
    return [
        Subject(
            kind=kind,
            name=name,
            namespace="ci" if kind == "ServiceAccount" else None,
        )
        for kind, name in subjects
    ]


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Generator[None, None, None]:
    """Clear cached tracers and structlog configuration around every test."""
    reset_tracer()
    yield
    reset_tracer()
    structlog.reset_defaults()
    logging.getLogger("rbacscope").setLevel(logging.NOTSET)


@pytest.fixture
def make_role_binding() -> Callable[..., RoleBinding]:
    """Factory fixture for RoleBindings.

    Example:
        >>> rb = make_role_binding("rb1", [("User", "alice")], "edit")
    """

    def _make(
        name: str,
        subjects: Sequence[SubjectSpec],
        role_name: str,
        *,
        namespace: str = "default",
        role_kind: str = "Role",
    ) -> RoleBinding:
        return RoleBinding(
            name=name,
            namespace=namespace,
            subjects=_subjects(subjects),
            role_ref=RoleRef(kind=role_kind, name=role_name),
        )

    return _make


@pytest.fixture
def make_cluster_role_binding() -> Callable[..., ClusterRoleBinding]:
    """Factory fixture for ClusterRoleBindings."""

    def _make(
        name: str,
        subjects: Sequence[SubjectSpec],
        role_name: str,
    ) -> ClusterRoleBinding:
        return ClusterRoleBinding(
            name=name,
            subjects=_subjects(subjects),
            role_ref=RoleRef(kind="ClusterRole", name=role_name),
        )

    return _make


@pytest.fixture
def make_cluster_role() -> Callable[..., ClusterRole]:
    """Factory fixture for ClusterRoles with a single rule."""

    def _make(name: str, verbs: Sequence[str] = ("get", "list")) -> ClusterRole:
        return ClusterRole(
            name=name,
            rules=[PolicyRule(api_groups=[""], resources=["pods"], verbs=list(verbs))],
        )

    return _make


@pytest.fixture
def role_bindings(make_role_binding: Callable[..., RoleBinding]) -> list[RoleBinding]:
    """RoleBindings of the reference cluster."""
    return [
        make_role_binding("alice-edit", [("User", "alice")], "edit", namespace="team-a"),
        make_role_binding(
            "bob-view",
            [("User", "bob")],
            "view",
            namespace="team-b",
            role_kind="ClusterRole",
        ),
    ]


@pytest.fixture
def cluster_role_bindings(
    make_cluster_role_binding: Callable[..., ClusterRoleBinding],
) -> list[ClusterRoleBinding]:
    """ClusterRoleBindings of the reference cluster."""
    return [make_cluster_role_binding("alice-admin", [("User", "alice")], "cluster-admin")]


@pytest.fixture
def cluster_roles(make_cluster_role: Callable[..., ClusterRole]) -> list[ClusterRole]:
    """ClusterRoles of the reference cluster."""
    return [make_cluster_role("cluster-admin", ["*"]), make_cluster_role("viewer")]


@pytest.fixture
def snapshot(
    role_bindings: list[RoleBinding],
    cluster_role_bindings: list[ClusterRoleBinding],
    cluster_roles: list[ClusterRole],
) -> RBACSnapshot:
    """Indexed snapshot of the reference cluster."""
    return RBACSnapshot(role_bindings, cluster_role_bindings, cluster_roles)


@pytest.fixture
def snapshot_manifests(
    role_bindings: list[RoleBinding],
    cluster_role_bindings: list[ClusterRoleBinding],
    cluster_roles: list[ClusterRole],
) -> dict[str, Any]:
    """The reference cluster as a ``kind: List`` manifest."""
    items = [
        *(rb.to_k8s_manifest() for rb in role_bindings),
        *(crb.to_k8s_manifest() for crb in cluster_role_bindings),
        *(cr.to_k8s_manifest() for cr in cluster_roles),
    ]
    return {"apiVersion": "v1", "kind": "List", "items": items}


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner.

    Returns:
        CliRunner instance for testing Click commands.
    """
    return CliRunner()


@pytest.fixture
def temp_dir(tmp_path: Path) -> Generator[Path, None, None]:
    """Provide a temporary directory for test files.

    Args:
        tmp_path: pytest built-in fixture for temporary paths.

    Yields:
        Path to temporary directory.
    """
    yield tmp_path
