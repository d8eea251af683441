"""Exception types for rbacscope.

The resolver itself never raises; these errors belong to the layer around
it (request validation, permission checks, cluster listing, snapshot
files, configuration).

Exception Hierarchy:
    RBACScopeError (base)
    ├── InvalidRequestError - Missing or empty principal name
    ├── PermissionDeniedError - Requester may not run the lookup
    ├── UpstreamListingError - Listing RBAC objects from the cluster failed
    ├── FileAccessError - Snapshot, policy or kubeconfig file cannot be opened
    ├── SnapshotLoadError - Offline snapshot file cannot be parsed
    └── ConfigurationError - Invalid settings or access policy

Example:
    >>> from rbacscope.errors import RBACScopeError, UpstreamListingError
    >>> try:
    ...     service.user_details(context, "alice")
    ... except UpstreamListingError as e:
    ...     print(f"Listing {e.resource} failed")
    ... except RBACScopeError as e:
    ...     print(f"Lookup failed: {e}")
"""

from __future__ import annotations

from typing import Any


class RBACScopeError(Exception):
    """Base exception for all rbacscope errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional error context.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize RBACScopeError.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class InvalidRequestError(RBACScopeError):
    """A lookup request is missing a required parameter.

    Attributes:
        parameter: Name of the offending parameter.
    """

    def __init__(self, message: str, parameter: str) -> None:
        super().__init__(message, {"parameter": parameter})
        self.parameter = parameter


class PermissionDeniedError(RBACScopeError):
    """The requester is not allowed to perform a lookup.

    Attributes:
        username: Requesting user.
        permission: Permission that was required, if any.
    """

    def __init__(self, message: str, username: str, permission: str | None = None) -> None:
        details: dict[str, Any] = {"username": username}
        if permission is not None:
            details["permission"] = permission
        super().__init__(message, details)
        self.username = username
        self.permission = permission


class UpstreamListingError(RBACScopeError):
    """Listing an RBAC collection from the cluster API failed.

    Raised before the resolver runs; the resolver never sees partial input.

    Attributes:
        resource: Collection being listed ("rolebindings", ...).
        status: HTTP status returned by the API server, when known.
        reason: Reason reported by the API client, when known.
    """

    def __init__(
        self,
        message: str,
        resource: str,
        status: int | None = None,
        reason: str | None = None,
    ) -> None:
        details: dict[str, Any] = {"resource": resource}
        if status is not None:
            details["status"] = status
        if reason:
            details["reason"] = reason
        super().__init__(message, details)
        self.resource = resource
        self.status = status
        self.reason = reason


class FileAccessError(RBACScopeError):
    """A file named by the configuration or the command line cannot be opened.

    Attributes:
        path: Path of the file.
        reason: Operating system error text, e.g. "No such file or directory".
    """

    def __init__(self, message: str, path: str, reason: str | None = None) -> None:
        details: dict[str, Any] = {"path": path}
        if reason:
            details["reason"] = reason
        super().__init__(message, details)
        self.path = path
        self.reason = reason


class SnapshotLoadError(RBACScopeError):
    """An offline RBAC snapshot file could not be parsed.

    Attributes:
        path: Path of the snapshot file.
    """

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message, {"path": path})
        self.path = path


class ConfigurationError(RBACScopeError):
    """Settings or the access policy are invalid."""


__all__ = [
    "ConfigurationError",
    "FileAccessError",
    "InvalidRequestError",
    "PermissionDeniedError",
    "RBACScopeError",
    "SnapshotLoadError",
    "UpstreamListingError",
]
