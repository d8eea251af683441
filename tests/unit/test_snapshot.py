"""Unit tests for the indexed RBAC snapshot."""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

import pytest

from rbacscope.resolver.assembler import assemble_details, assemble_role_names
from rbacscope.resolver.snapshot import RBACSnapshot
from rbacscope.schemas.principal import Principal
from rbacscope.schemas.rbac import ClusterRole, ClusterRoleBinding, RoleBinding


class TestRBACSnapshot:
    """Tests for RBACSnapshot."""

    def test_details_for_reference_cluster(self, snapshot: RBACSnapshot) -> None:
        """alice resolves through the indexes like the plain functions."""
        details = snapshot.details_for(Principal.user("alice"))
        assert [rb.name for rb in details.role_bindings] == ["alice-edit"]
        assert [crb.name for crb in details.cluster_role_bindings] == ["alice-admin"]
        assert [role.name for role in details.cluster_roles] == ["cluster-admin"]

    def test_role_names_for_reference_cluster(self, snapshot: RBACSnapshot) -> None:
        """Role names list RoleBinding refs before ClusterRoleBinding refs."""
        assert snapshot.role_names_for(Principal.user("alice")) == ["edit", "cluster-admin"]

    @pytest.mark.parametrize(
        "principal",
        [
            Principal.user("alice"),
            Principal.user("bob"),
            Principal.user(""),
            Principal.service_account("alice"),
            Principal.service_account("build-bot"),
        ],
    )
    def test_indexed_equals_plain(
        self,
        principal: Principal,
        make_role_binding: Callable[..., RoleBinding],
        make_cluster_role_binding: Callable[..., ClusterRoleBinding],
        make_cluster_role: Callable[..., ClusterRole],
    ) -> None:
        """Indexed and nested-loop resolution agree, duplicates included."""
        rbs = [
            make_role_binding("r1", [("User", "alice"), ("ServiceAccount", "alice")], "edit"),
            make_role_binding("r2", [("User", "bob"), ("User", "alice"), ("User", "alice")], "x"),
        ]
        crbs = [
            make_cluster_role_binding("c1", [("ServiceAccount", "build-bot")], "viewer"),
            make_cluster_role_binding("c2", [("User", "alice")], "gone"),
            make_cluster_role_binding("c3", [("User", "alice"), ("User", "bob")], "viewer"),
        ]
        roles = [make_cluster_role("viewer"), make_cluster_role("admin")]
        snapshot = RBACSnapshot(rbs, crbs, roles)

        assert snapshot.details_for(principal) == assemble_details(principal, rbs, crbs, roles)
        assert snapshot.role_names_for(principal) == assemble_role_names(principal, rbs, crbs)

    def test_empty_snapshot(self) -> None:
        """A snapshot with nothing in it resolves to nothing."""
        snapshot = RBACSnapshot()
        assert snapshot.details_for(Principal.user("alice")).is_empty()
        assert snapshot.role_names_for(Principal.user("alice")) == []

    def test_collections_are_tuples(self, role_bindings: list[RoleBinding]) -> None:
        """Mutating the input list does not change the snapshot."""
        snapshot = RBACSnapshot(role_bindings)
        role_bindings.clear()
        assert len(snapshot.role_bindings) == 2

    def test_repr_shows_counts(self, snapshot: RBACSnapshot) -> None:
        """repr summarizes collection sizes."""
        assert repr(snapshot) == (
            "RBACSnapshot(role_bindings=2, cluster_role_bindings=1, cluster_roles=2)"
        )

    def test_concurrent_lookups(self, snapshot: RBACSnapshot) -> None:
        """Lookups for different principals can share one snapshot."""
        names = ["alice", "bob", "carol"] * 20
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(
                pool.map(lambda n: snapshot.role_names_for(Principal.user(n)), names)
            )
        expected = {"alice": ["edit", "cluster-admin"], "bob": ["view"], "carol": []}
        assert results == [expected[n] for n in names]
