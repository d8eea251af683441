"""Unit tests for lookup audit events."""

from __future__ import annotations

import logging

import pytest

from rbacscope.audit import LookupAuditEvent, LookupResult, log_lookup_event


def _success(**overrides: int) -> LookupAuditEvent:
    return LookupAuditEvent.create_success(
        operation="user_details",
        requester="admin",
        principal_kind="User",
        principal_name="alice",
        **overrides,
    )


class TestLookupAuditEvent:
    """Tests for LookupAuditEvent."""

    def test_create_success(self) -> None:
        """Success events carry counts and a UTC timestamp."""
        event = _success(role_bindings=1, cluster_role_bindings=1, cluster_roles=1)
        assert event.result is LookupResult.SUCCESS
        assert event.error is None
        assert event.timestamp.tzinfo is not None

    def test_create_failure(self) -> None:
        """Failure events carry the error message."""
        event = LookupAuditEvent.create_failure(
            operation="user_roles",
            requester="bob",
            principal_kind="User",
            principal_name="alice",
            result=LookupResult.DENIED,
            error="You do not have permission to view user roles",
        )
        assert event.result is LookupResult.DENIED
        assert event.role_names == 0

    def test_create_failure_rejects_success(self) -> None:
        """A failure event cannot be created with a SUCCESS result."""
        with pytest.raises(ValueError, match="failure result"):
            LookupAuditEvent.create_failure(
                operation="user_roles",
                requester="bob",
                principal_kind="User",
                principal_name="alice",
                result=LookupResult.SUCCESS,
                error="",
            )

    def test_to_log_dict_omits_empty_values(self) -> None:
        """Zero counts, errors and trace ids are left out."""
        log_dict = _success(role_bindings=2).to_log_dict()
        assert log_dict["result"] == "success"
        assert log_dict["role_bindings"] == 2
        assert "cluster_roles" not in log_dict
        assert "error" not in log_dict
        assert "trace_id" not in log_dict

    def test_to_log_dict_includes_trace_id(self) -> None:
        """A trace id is kept for correlation."""
        event = LookupAuditEvent.create_success(
            operation="user_details",
            requester="admin",
            principal_kind="User",
            principal_name="alice",
            trace_id="a" * 32,
        )
        assert event.to_log_dict()["trace_id"] == "a" * 32

    def test_counts_cannot_be_negative(self) -> None:
        """Counts are validated."""
        with pytest.raises(ValueError):
            _success(role_bindings=-1)


class TestLogLookupEvent:
    """Tests for log_lookup_event()."""

    @pytest.mark.parametrize(
        ("result", "level"),
        [
            (LookupResult.DENIED, logging.WARNING),
            (LookupResult.INVALID_REQUEST, logging.WARNING),
            (LookupResult.UPSTREAM_ERROR, logging.ERROR),
        ],
    )
    def test_failure_levels(
        self, caplog: pytest.LogCaptureFixture, result: LookupResult, level: int
    ) -> None:
        """Failures log at WARNING, upstream errors at ERROR."""
        event = LookupAuditEvent.create_failure(
            operation="user_details",
            requester="bob",
            principal_kind="User",
            principal_name="alice",
            result=result,
            error="boom",
        )
        with caplog.at_level(logging.INFO, logger="rbacscope.audit"):
            log_lookup_event(event)

        assert len(caplog.records) == 1
        assert caplog.records[0].levelno == level

    def test_success_logged_with_audit_event(self, caplog: pytest.LogCaptureFixture) -> None:
        """Success logs at INFO with the event dict attached."""
        with caplog.at_level(logging.INFO, logger="rbacscope.audit"):
            log_lookup_event(_success(cluster_roles=1))

        record = caplog.records[0]
        assert record.levelno == logging.INFO
        assert record.name == "rbacscope.audit"
        assert record.getMessage() == "RBAC lookup user_details success"
        assert record.audit_event["principal_name"] == "alice"  # type: ignore[attr-defined]
        assert record.audit_event["cluster_roles"] == 1  # type: ignore[attr-defined]
