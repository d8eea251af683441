"""Offline snapshots read from YAML or JSON files.

Accepts the output of, for example::

    kubectl get rolebindings,clusterrolebindings,clusterroles -A -o yaml

i.e. a ``List`` document, typed lists (``RoleBindingList``, ...), single
objects, or a multi-document YAML stream mixing them. Objects of other
kinds are ignored. JSON is read through the same YAML loader.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

import structlog
import yaml

from rbacscope.errors import FileAccessError, SnapshotLoadError
from rbacscope.resolver.snapshot import RBACSnapshot
from rbacscope.schemas.rbac import ClusterRole, ClusterRoleBinding, RoleBinding

logger = structlog.get_logger(__name__)


def _iter_objects(documents: Iterable[Any], path: Path) -> Iterator[dict[str, Any]]:
    for document in documents:
        if document is None:
            continue
        if not isinstance(document, dict):
            raise SnapshotLoadError("Snapshot document is not a mapping", path=str(path))
        kind = document.get("kind", "")
        if kind == "List" or kind.endswith("List"):
            for item in document.get("items") or []:
                if isinstance(item, dict):
                    if "kind" not in item and kind != "List":
                        item = {**item, "kind": kind[: -len("List")]}
                    yield item
        else:
            yield document


def snapshot_from_objects(objects: Iterable[dict[str, Any]]) -> RBACSnapshot:
    """Sort manifest dictionaries by kind into a snapshot.

    Args:
        objects: Manifest dictionaries in source order.

    Returns:
        Snapshot preserving the source order within each kind.
    """
    role_bindings: list[RoleBinding] = []
    cluster_role_bindings: list[ClusterRoleBinding] = []
    cluster_roles: list[ClusterRole] = []
    skipped = 0

    for obj in objects:
        kind = obj.get("kind")
        if kind == "RoleBinding":
            role_bindings.append(RoleBinding.from_manifest(obj))
        elif kind == "ClusterRoleBinding":
            cluster_role_bindings.append(ClusterRoleBinding.from_manifest(obj))
        elif kind == "ClusterRole":
            cluster_roles.append(ClusterRole.from_manifest(obj))
        else:
            skipped += 1

    if skipped:
        logger.debug("snapshot_file.skipped_objects", count=skipped)
    return RBACSnapshot(role_bindings, cluster_role_bindings, cluster_roles)


def load_snapshot_file(path: Path) -> RBACSnapshot:
    """Read an RBAC snapshot from a YAML or JSON file.

    Args:
        path: Snapshot file.

    Returns:
        Snapshot of the RoleBindings, ClusterRoleBindings and ClusterRoles
        found in the file.

    Raises:
        FileAccessError: If the file cannot be opened.
        SnapshotLoadError: If the file cannot be parsed.
    """
    try:
        with path.open() as f:
            documents = list(yaml.safe_load_all(f))
    except OSError as e:
        raise FileAccessError("Cannot read snapshot", path=str(path), reason=e.strerror) from e
    except yaml.YAMLError as e:
        raise SnapshotLoadError("Snapshot is not valid YAML or JSON", path=str(path)) from e

    try:
        snapshot = snapshot_from_objects(_iter_objects(documents, path))
    except (ValueError, TypeError, AttributeError) as e:
        raise SnapshotLoadError(f"Invalid RBAC object in snapshot: {e}", path=str(path)) from e

    logger.info(
        "snapshot_file.loaded",
        path=str(path),
        role_bindings=len(snapshot.role_bindings),
        cluster_role_bindings=len(snapshot.cluster_role_bindings),
        cluster_roles=len(snapshot.cluster_roles),
    )
    return snapshot


__all__ = ["load_snapshot_file", "snapshot_from_objects"]
