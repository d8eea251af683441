"""Sources of RBAC snapshots: a live cluster or an exported file."""

from __future__ import annotations

from rbacscope.cluster.fetcher import ClusterFetcher, load_rbac_api
from rbacscope.cluster.snapshot_file import load_snapshot_file, snapshot_from_objects

__all__ = [
    "ClusterFetcher",
    "load_rbac_api",
    "load_snapshot_file",
    "snapshot_from_objects",
]
