"""Permission checks for requesters of RBAC lookups.

Who may look up whose bindings is decided here, before any listing call
is made. The requester's identity and admin status arrive as an explicit
``RequestContext``; nothing is read from ambient request state.

Policy file format (YAML):

    admins:
      - platform-admin
    grants:
      auditor:
        - view_user_roles
        - view_serviceaccount_details

Example:
    >>> from rbacscope.access.policy import AccessPolicy, PermissionChecker, RequestContext
    >>> checker = PermissionChecker(AccessPolicy(grants={"auditor": ["view_user_roles"]}))
    >>> checker.has_permission("auditor", VIEW_USER_ROLES)
    True
"""

from __future__ import annotations

from pathlib import Path

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from rbacscope.errors import ConfigurationError, FileAccessError, PermissionDeniedError

logger = structlog.get_logger(__name__)

VIEW_USER_ROLES = "view_user_roles"
VIEW_SERVICEACCOUNT_DETAILS = "view_serviceaccount_details"


class RequestContext(BaseModel):
    """Identity of whoever asked for a lookup.

    Attributes:
        username: Requesting user.
        is_admin: Admin status established by the caller's authentication
            layer. None means it could not be determined.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    username: str = Field(..., description="Requesting user")
    is_admin: bool | None = Field(
        default=False,
        description="Admin status, None when undetermined",
    )


class AccessPolicy(BaseModel):
    """Static permission grants.

    Attributes:
        admins: Users allowed every lookup.
        grants: Permission names granted per user.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    admins: list[str] = Field(default_factory=list, description="Admin users")
    grants: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Permission names per user",
    )


def load_access_policy(path: Path) -> AccessPolicy:
    """Load an access policy from a YAML file.

    An empty file yields an empty policy (only admins from the request
    context are allowed).

    Args:
        path: Policy file path.

    Returns:
        Parsed policy.

    Raises:
        FileAccessError: If the file cannot be opened.
        ConfigurationError: If the file is invalid.
    """
    try:
        with path.open() as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise FileAccessError("Cannot read access policy", path=str(path), reason=e.strerror) from e
    except yaml.YAMLError as e:
        raise ConfigurationError("Access policy is not valid YAML", {"path": str(path)}) from e

    if data is None:
        return AccessPolicy()
    if not isinstance(data, dict):
        raise ConfigurationError("Access policy must be a mapping", {"path": str(path)})

    try:
        return AccessPolicy(**data)
    except ValidationError as e:
        raise ConfigurationError("Invalid access policy", {"path": str(path)}) from e


class PermissionChecker:
    """Answers whether a requester holds a named permission.

    Args:
        policy: Grants to check against.
    """

    def __init__(self, policy: AccessPolicy | None = None) -> None:
        self.policy = policy or AccessPolicy()

    def has_permission(self, username: str, permission: str) -> bool:
        """Return True if the user is a policy admin or was granted the permission."""
        if username in self.policy.admins:
            return True
        return permission in self.policy.grants.get(username, [])

    def require(self, context: RequestContext, permission: str, action: str) -> None:
        """Ensure the requester may perform an action.

        Args:
            context: Requester identity and admin status.
            permission: Permission required for non-admins.
            action: Human-readable action used in the denial message.

        Raises:
            PermissionDeniedError: If admin status is undetermined, or the
                requester is not an admin and lacks the permission.
        """
        if context.is_admin is None:
            logger.warning("access.admin_status_unknown", username=context.username)
            raise PermissionDeniedError(
                "Unable to determine admin status", username=context.username
            )

        if context.is_admin or self.has_permission(context.username, permission):
            logger.debug(
                "access.granted",
                username=context.username,
                permission=permission,
            )
            return

        logger.warning(
            "access.denied",
            username=context.username,
            permission=permission,
        )
        raise PermissionDeniedError(
            f"You do not have permission to {action}",
            username=context.username,
            permission=permission,
        )


__all__ = [
    "VIEW_SERVICEACCOUNT_DETAILS",
    "VIEW_USER_ROLES",
    "AccessPolicy",
    "PermissionChecker",
    "RequestContext",
    "load_access_policy",
]
