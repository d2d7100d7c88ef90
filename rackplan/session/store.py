"""
session/store.py - Persisted session snapshot

The persisted form of a planning session is one opaque JSON blob stored
under a single key. Blob stores only move strings around; encoding,
decoding and version migration live in ``SessionSnapshot``.

Migration is all-or-nothing: a blob written by an older snapshot version
keeps its UI preferences but loses its sites, which forces regeneration.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
import json
import logging

from rackplan.core.constants import SNAPSHOT_VERSION, STORE_NAME
from rackplan.core.enums import ColorMode, FourDStatus
from rackplan.core.models import Site

__all__ = [
    "SnapshotError",
    "SessionSnapshot",
    "BlobStore",
    "MemoryBlobStore",
    "JsonFileBlobStore",
    "default_layer_visibility",
]

logger = logging.getLogger(__name__)


class SnapshotError(Exception):
    """Raised when a persisted blob cannot be decoded."""


def default_layer_visibility() -> Dict[FourDStatus, bool]:
    return {status: True for status in FourDStatus}


# =============================================================================
# SNAPSHOT
# =============================================================================

@dataclass
class SessionSnapshot:
    """Persisted part of a planning session."""

    version: int = SNAPSHOT_VERSION
    sites: List[Site] = field(default_factory=list)
    layer_visibility: Dict[FourDStatus, bool] = field(default_factory=default_layer_visibility)
    color_mode: ColorMode = ColorMode.FOUR_D_STATUS
    building_visible: bool = True

    # Set when decoding discarded stale sites
    migrated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "sites": [s.to_dict() for s in self.sites],
            "layerVisibility": {k.value: v for k, v in self.layer_visibility.items()},
            "colorMode": self.color_mode.value,
            "buildingVisible": self.building_visible,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: Dict[str, Any], current_version: int = SNAPSHOT_VERSION) -> "SessionSnapshot":
        """
        Decode a stored snapshot, applying the version rule.

        Raises:
            SnapshotError: if the data is not a snapshot
        """
        if not isinstance(data, dict):
            raise SnapshotError(f"Snapshot must be an object, got {type(data).__name__}")

        try:
            version = int(data.get("version", 0))

            layers = default_layer_visibility()
            for key, value in (data.get("layerVisibility") or {}).items():
                layers[FourDStatus(key)] = bool(value)

            snapshot = cls(
                version=current_version,
                layer_visibility=layers,
                color_mode=ColorMode(data.get("colorMode", ColorMode.FOUR_D_STATUS.value)),
                building_visible=bool(data.get("buildingVisible", True)),
            )

            if version < current_version:
                logger.info(
                    f"Discarding sites from snapshot version {version} "
                    f"(current {current_version})"
                )
                snapshot.migrated = True
            else:
                if version > current_version:
                    logger.warning(
                        f"Snapshot version {version} is newer than {current_version}; loading as-is"
                    )
                snapshot.sites = [Site.from_dict(s) for s in data.get("sites", [])]

        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise SnapshotError(f"Malformed snapshot: {e}") from e

        return snapshot

    @classmethod
    def from_json(cls, blob: str, current_version: int = SNAPSHOT_VERSION) -> "SessionSnapshot":
        try:
            data = json.loads(blob)
        except json.JSONDecodeError as e:
            raise SnapshotError(f"Snapshot is not valid JSON: {e}") from e
        return cls.from_dict(data, current_version)


# =============================================================================
# BLOB STORES
# =============================================================================

class BlobStore:
    """Key -> string storage."""

    def get(self, key: str = STORE_NAME) -> Optional[str]:
        raise NotImplementedError

    def put(self, blob: str, key: str = STORE_NAME) -> None:
        raise NotImplementedError

    def delete(self, key: str = STORE_NAME) -> None:
        raise NotImplementedError

    def load_snapshot(self, key: str = STORE_NAME) -> Optional[SessionSnapshot]:
        blob = self.get(key)
        if blob is None:
            return None
        return SessionSnapshot.from_json(blob)

    def save_snapshot(self, snapshot: SessionSnapshot, key: str = STORE_NAME) -> None:
        self.put(snapshot.to_json(), key)


class MemoryBlobStore(BlobStore):
    """In-process store."""

    def __init__(self):
        self._blobs: Dict[str, str] = {}

    def get(self, key: str = STORE_NAME) -> Optional[str]:
        return self._blobs.get(key)

    def put(self, blob: str, key: str = STORE_NAME) -> None:
        self._blobs[key] = blob

    def delete(self, key: str = STORE_NAME) -> None:
        self._blobs.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._blobs


class JsonFileBlobStore(BlobStore):
    """One ``<key>.json`` file per key under a directory."""

    def __init__(self, directory: str):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str = STORE_NAME) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def put(self, blob: str, key: str = STORE_NAME) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(blob, encoding="utf-8")
        tmp.replace(path)
        logger.debug(f"Wrote snapshot {path}")

    def delete(self, key: str = STORE_NAME) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()
