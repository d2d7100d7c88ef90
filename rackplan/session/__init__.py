"""
session/ - Planning session state and its persisted snapshot.
"""

from .store import (
    SnapshotError,
    SessionSnapshot,
    BlobStore,
    MemoryBlobStore,
    JsonFileBlobStore,
    default_layer_visibility,
)
from .session import PlanningSession

__all__ = [
    "SnapshotError",
    "SessionSnapshot",
    "BlobStore",
    "MemoryBlobStore",
    "JsonFileBlobStore",
    "default_layer_visibility",
    "PlanningSession",
]
