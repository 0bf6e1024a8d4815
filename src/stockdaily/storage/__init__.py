"""
存储模块
"""

from stockdaily.storage.base import ArtifactStore
from stockdaily.storage.json_store import JSONFileStore
from stockdaily.storage.snapshot_store import HISTORY_ARTIFACT, LATEST_ARTIFACT, SnapshotPersister

__all__ = [
    "ArtifactStore",
    "JSONFileStore",
    "SnapshotPersister",
    "LATEST_ARTIFACT",
    "HISTORY_ARTIFACT",
]
