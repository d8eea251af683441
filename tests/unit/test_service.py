"""Unit tests for the lookup service."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock

import pytest

from rbacscope.access.policy import (
    VIEW_SERVICEACCOUNT_DETAILS,
    VIEW_USER_ROLES,
    AccessPolicy,
    PermissionChecker,
    RequestContext,
)
from rbacscope.errors import InvalidRequestError, PermissionDeniedError, UpstreamListingError
from rbacscope.resolver.snapshot import RBACSnapshot
from rbacscope.service import LookupService, StaticSnapshotSource

ADMIN = RequestContext(username="root", is_admin=True)
AUDITOR = RequestContext(username="auditor")
NOBODY = RequestContext(username="mallory")


@pytest.fixture
def service(snapshot: RBACSnapshot) -> LookupService:
    """Service over the reference cluster; auditor may view user roles only."""
    checker = PermissionChecker(AccessPolicy(grants={"auditor": [VIEW_USER_ROLES]}))
    return LookupService(StaticSnapshotSource(snapshot), checker)


def _audit_records(caplog: pytest.LogCaptureFixture) -> list[logging.LogRecord]:
    return [r for r in caplog.records if r.name == "rbacscope.audit"]


class TestUserDetails:
    """Tests for LookupService.user_details()."""

    def test_resolves_user(self, service: LookupService) -> None:
        """alice's bindings and ClusterRoles are returned."""
        details = service.user_details(ADMIN, "alice")
        assert details.to_response()["userName"] == "alice"
        assert [role.name for role in details.cluster_roles] == ["cluster-admin"]

    def test_no_permission_needed(self, service: LookupService) -> None:
        """Any requester may look up user details."""
        assert service.user_details(NOBODY, "alice").principal_name == "alice"

    def test_empty_name(self, service: LookupService) -> None:
        """An empty user name is rejected."""
        with pytest.raises(InvalidRequestError, match="User name is required"):
            service.user_details(ADMIN, "")


class TestServiceAccountDetails:
    """Tests for LookupService.service_account_details()."""

    def test_admin_allowed(self, service: LookupService) -> None:
        """Admins may view service account details."""
        details = service.service_account_details(ADMIN, "build-bot")
        assert details.is_empty()
        assert details.to_response()["serviceAccountName"] == "build-bot"

    def test_granted_user_allowed(self, snapshot: RBACSnapshot) -> None:
        """Non-admins need view_serviceaccount_details."""
        checker = PermissionChecker(
            AccessPolicy(grants={"auditor": [VIEW_SERVICEACCOUNT_DETAILS]})
        )
        service = LookupService(StaticSnapshotSource(snapshot), checker)
        assert service.service_account_details(AUDITOR, "build-bot").is_empty()

    def test_denied(self, service: LookupService) -> None:
        """Requesters without the permission are denied."""
        with pytest.raises(
            PermissionDeniedError,
            match="You do not have permission to view service account details",
        ):
            service.service_account_details(AUDITOR, "build-bot")

    def test_unknown_admin_status(self, service: LookupService) -> None:
        """Undetermined admin status denies the lookup."""
        with pytest.raises(PermissionDeniedError, match="Unable to determine admin status"):
            service.service_account_details(
                RequestContext(username="root", is_admin=None), "build-bot"
            )

    def test_permission_checked_before_name(self, service: LookupService) -> None:
        """Denial wins over a missing name."""
        with pytest.raises(PermissionDeniedError):
            service.service_account_details(NOBODY, "")

    def test_empty_name(self, service: LookupService) -> None:
        """An empty service account name is rejected."""
        with pytest.raises(InvalidRequestError, match="Service account name is required"):
            service.service_account_details(ADMIN, "")


class TestUserRoles:
    """Tests for LookupService.user_roles()."""

    def test_role_names(self, service: LookupService) -> None:
        """RoleBinding roleRefs come before ClusterRoleBinding roleRefs."""
        assert service.user_roles(AUDITOR, "alice") == ["edit", "cluster-admin"]

    def test_denied(self, service: LookupService) -> None:
        """Requesters without view_user_roles are denied."""
        with pytest.raises(
            PermissionDeniedError, match="You do not have permission to view user roles"
        ):
            service.user_roles(NOBODY, "alice")

    def test_cluster_roles_not_listed(self) -> None:
        """Role names never need the ClusterRole collection."""
        source = MagicMock()
        source.fetch_snapshot.return_value = RBACSnapshot()
        LookupService(source).user_roles(ADMIN, "alice")
        source.fetch_snapshot.assert_called_once_with(include_cluster_roles=False)


class TestSourceFailures:
    """Tests for listing failures."""

    def test_listing_error_propagates(self) -> None:
        """Listing errors reach the caller unchanged."""
        source = MagicMock()
        source.fetch_snapshot.side_effect = UpstreamListingError(
            "Failed to list role bindings", resource="rolebindings", status=403
        )
        with pytest.raises(UpstreamListingError, match="Failed to list role bindings"):
            LookupService(source).user_details(ADMIN, "alice")

    def test_nothing_listed_when_denied(self) -> None:
        """Permission checks run before any listing."""
        source = MagicMock()
        with pytest.raises(PermissionDeniedError):
            LookupService(source).user_roles(NOBODY, "alice")
        source.fetch_snapshot.assert_not_called()


class TestAuditing:
    """Tests for audit events emitted by lookups."""

    def test_success_event(
        self, service: LookupService, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Successful lookups log one INFO audit event with counts."""
        with caplog.at_level(logging.INFO, logger="rbacscope.audit"):
            service.user_details(ADMIN, "alice")

        records = _audit_records(caplog)
        assert len(records) == 1
        event = records[0].audit_event  # type: ignore[attr-defined]
        assert event["result"] == "success"
        assert event["requester"] == "root"
        assert event["operation"] == "user_details"
        assert event["role_bindings"] == 1
        assert event["cluster_role_bindings"] == 1
        assert event["cluster_roles"] == 1

    def test_denied_event(self, service: LookupService, caplog: pytest.LogCaptureFixture) -> None:
        """Denied lookups log a WARNING audit event."""
        with caplog.at_level(logging.INFO, logger="rbacscope.audit"):
            with pytest.raises(PermissionDeniedError):
                service.user_roles(NOBODY, "alice")

        records = _audit_records(caplog)
        assert len(records) == 1
        assert records[0].levelno == logging.WARNING
        assert records[0].audit_event["result"] == "denied"  # type: ignore[attr-defined]

    def test_invalid_request_event(
        self, service: LookupService, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Missing names are audited as invalid requests."""
        with caplog.at_level(logging.INFO, logger="rbacscope.audit"):
            with pytest.raises(InvalidRequestError):
                service.user_details(ADMIN, "")

        event = _audit_records(caplog)[0].audit_event  # type: ignore[attr-defined]
        assert event["result"] == "invalid_request"
        assert event["principal_name"] == ""

    def test_upstream_error_event(self, caplog: pytest.LogCaptureFixture) -> None:
        """Listing failures log an ERROR audit event."""
        source = MagicMock()
        source.fetch_snapshot.side_effect = UpstreamListingError(
            "Failed to list cluster roles", resource="clusterroles"
        )
        with caplog.at_level(logging.INFO, logger="rbacscope.audit"):
            with pytest.raises(UpstreamListingError):
                LookupService(source).service_account_details(ADMIN, "build-bot")

        records = _audit_records(caplog)
        assert records[0].levelno == logging.ERROR
        assert records[0].audit_event["result"] == "upstream_error"  # type: ignore[attr-defined]


class TestStaticSnapshotSource:
    """Tests for StaticSnapshotSource."""

    def test_returns_snapshot(self, snapshot: RBACSnapshot) -> None:
        """The loaded snapshot is served as is."""
        assert StaticSnapshotSource(snapshot).fetch_snapshot() is snapshot

    def test_without_cluster_roles(self, snapshot: RBACSnapshot) -> None:
        """ClusterRoles can be left out."""
        trimmed = StaticSnapshotSource(snapshot).fetch_snapshot(include_cluster_roles=False)
        assert trimmed.cluster_roles == ()
        assert trimmed.role_bindings == snapshot.role_bindings
