"""Listing RBAC objects from a live cluster.

``ClusterFetcher`` lists RoleBindings across all namespaces,
ClusterRoleBindings and ClusterRoles through the kubernetes python client
and converts them into rbacscope models. Any listing failure is raised as
``UpstreamListingError`` before the resolver runs; the resolver never sees
a partial snapshot.

Example:
    >>> from rbacscope.cluster.fetcher import ClusterFetcher, load_rbac_api
    >>> fetcher = ClusterFetcher(load_rbac_api(kubeconfig=None), request_timeout=30)
    >>> snapshot = fetcher.fetch_snapshot()
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import structlog
import urllib3
from kubernetes import client
from kubernetes import config as k8s_config
from kubernetes.client.rest import ApiException

from rbacscope.config import DEFAULT_REQUEST_TIMEOUT
from rbacscope.errors import ConfigurationError, FileAccessError, UpstreamListingError
from rbacscope.resolver.snapshot import RBACSnapshot
from rbacscope.schemas.rbac import ClusterRole, ClusterRoleBinding, RoleBinding
from rbacscope.telemetry.tracing import ATTR_RESOURCE_COUNT, get_tracer, lookup_span

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", RoleBinding, ClusterRoleBinding, ClusterRole)


def load_rbac_api(kubeconfig: Path | None = None, context: str | None = None) -> Any:
    """Load cluster credentials and return an RBAC API client.

    With neither a kubeconfig nor a context, in-cluster configuration is
    tried first and the default kubeconfig is used as a fallback.

    Args:
        kubeconfig: Path to a kubeconfig file.
        context: kubeconfig context name.

    Returns:
        ``RbacAuthorizationV1Api`` instance.

    Raises:
        FileAccessError: If ``kubeconfig`` names a file that does not exist.
        ConfigurationError: If no usable cluster configuration is found.
    """
    if kubeconfig is not None and not kubeconfig.is_file():
        raise FileAccessError(
            "Cannot read kubeconfig", path=str(kubeconfig), reason="No such file or directory"
        )
    try:
        if kubeconfig is not None or context is not None:
            k8s_config.load_kube_config(
                config_file=str(kubeconfig) if kubeconfig is not None else None,
                context=context,
            )
        else:
            try:
                k8s_config.load_incluster_config()
            except k8s_config.ConfigException:
                k8s_config.load_kube_config()
    except (k8s_config.ConfigException, OSError) as e:
        raise ConfigurationError(
            f"Unable to load Kubernetes configuration: {e}",
            {"kubeconfig": str(kubeconfig) if kubeconfig else "default"},
        ) from e
    return client.RbacAuthorizationV1Api()


class ClusterFetcher:
    """Lists the RBAC collections a lookup needs.

    Args:
        rbac_api: ``RbacAuthorizationV1Api`` (or a compatible fake).
        request_timeout: Timeout in seconds applied to each listing call.
        page_size: When set, list in pages of this many objects.
    """

    def __init__(
        self,
        rbac_api: Any,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        page_size: int | None = None,
    ) -> None:
        self._api = rbac_api
        self._request_timeout = request_timeout
        self._page_size = page_size

    def list_role_bindings(self) -> list[RoleBinding]:
        """List RoleBindings across all namespaces."""
        return self._list(
            "list_role_bindings",
            "rolebindings",
            "Failed to list role bindings",
            self._api.list_role_binding_for_all_namespaces,
            RoleBinding.from_k8s,
        )

    def list_cluster_role_bindings(self) -> list[ClusterRoleBinding]:
        """List ClusterRoleBindings."""
        return self._list(
            "list_cluster_role_bindings",
            "clusterrolebindings",
            "Failed to list cluster role bindings",
            self._api.list_cluster_role_binding,
            ClusterRoleBinding.from_k8s,
        )

    def list_cluster_roles(self) -> list[ClusterRole]:
        """List ClusterRoles."""
        return self._list(
            "list_cluster_roles",
            "clusterroles",
            "Failed to list cluster roles",
            self._api.list_cluster_role,
            ClusterRole.from_k8s,
        )

    def fetch_snapshot(self, include_cluster_roles: bool = True) -> RBACSnapshot:
        """List every collection and wrap them in a snapshot.

        Collections are listed in order (RoleBindings, ClusterRoleBindings,
        ClusterRoles); the first failure aborts the fetch.

        Args:
            include_cluster_roles: Skip listing ClusterRoles when False, for
                lookups that only need role names.

        Returns:
            Snapshot of the listed collections.

        Raises:
            UpstreamListingError: If any listing call fails.
        """
        role_bindings = self.list_role_bindings()
        cluster_role_bindings = self.list_cluster_role_bindings()
        cluster_roles = self.list_cluster_roles() if include_cluster_roles else []
        snapshot = RBACSnapshot(role_bindings, cluster_role_bindings, cluster_roles)
        logger.debug(
            "cluster.snapshot_fetched",
            role_bindings=len(snapshot.role_bindings),
            cluster_role_bindings=len(snapshot.cluster_role_bindings),
            cluster_roles=len(snapshot.cluster_roles),
        )
        return snapshot

    def _list(
        self,
        operation: str,
        resource: str,
        failure_message: str,
        list_fn: Callable[..., Any],
        convert: Callable[[Any], ModelT],
    ) -> list[ModelT]:
        with lookup_span(
            get_tracer(), operation, extra_attributes={"rbacscope.resource": resource}
        ) as span:
            try:
                items = self._list_items(list_fn)
            except ApiException as e:
                logger.error(
                    "cluster.list_failed",
                    resource=resource,
                    status=e.status,
                    reason=e.reason,
                )
                raise UpstreamListingError(
                    failure_message, resource=resource, status=e.status, reason=e.reason
                ) from e
            except (urllib3.exceptions.HTTPError, OSError) as e:
                logger.error("cluster.list_failed", resource=resource, error=type(e).__name__)
                raise UpstreamListingError(
                    failure_message, resource=resource, reason=type(e).__name__
                ) from e

            models = [convert(item) for item in items]
            span.set_attribute(ATTR_RESOURCE_COUNT, len(models))
            return models

    def _list_items(self, list_fn: Callable[..., Any]) -> list[Any]:
        if self._page_size is None:
            return list(list_fn(_request_timeout=self._request_timeout).items or [])

        items: list[Any] = []
        token: str | None = None
        while True:
            kwargs: dict[str, Any] = {
                "limit": self._page_size,
                "_request_timeout": self._request_timeout,
            }
            if token:
                kwargs["_continue"] = token
            response = list_fn(**kwargs)
            items.extend(response.items or [])
            token = getattr(response.metadata, "_continue", None) if response.metadata else None
            if not token:
                return items


__all__ = ["ClusterFetcher", "load_rbac_api"]
