"""Filesystem-backed content-addressed store.

Storage layout: {base_path}/{key[0:2]}/{key}
Objects are immutable once stored; writing the same key twice is a no-op.
Useful as an offline mirror or for dry runs without credentials.
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

from assetoffload.core.hasher import md5_hex
from assetoffload.remote import RemoteStoreError

logger = logging.getLogger(__name__)


class ArtifactIntegrityError(RuntimeError):
    """Raised when a stored object's hash does not match its key."""


class LocalDirectoryStore:
    """MD5-keyed, immutable object store in a local directory.

    Parameters
    ----------
    base_path:
        Root directory for object storage.
    """

    def __init__(self, base_path: Path | str) -> None:
        self._base = Path(base_path)
        self._base.mkdir(parents=True, exist_ok=True)

    def _object_path(self, key: str) -> Path:
        """Layout: {base}/{key[0:2]}/{key}"""
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise RemoteStoreError(f"Invalid object key: {key!r}")
        return self._base / key[:2] / key

    # ------------------------------------------------------------------
    # RemoteStore protocol
    # ------------------------------------------------------------------

    def exists(self, key: str) -> bool:
        return self._object_path(key).exists()

    def upload(self, key: str, data: bytes) -> None:
        """Write the object unless it is already stored.

        An existing object must still match its key, otherwise
        ``ArtifactIntegrityError`` is raised and nothing is overwritten.
        """
        path = self._object_path(key)
        if path.exists():
            if not self.verify(key):
                raise ArtifactIntegrityError(
                    f"Existing object at {key} failed integrity check"
                )
            return
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise RemoteStoreError(f"Could not write {key}: {exc}") from exc
        logger.debug("LocalDirectoryStore: wrote %s (%d bytes)", key, len(data))

    # ------------------------------------------------------------------
    # Retrieve and verify
    # ------------------------------------------------------------------

    def retrieve(self, key: str) -> bytes:
        path = self._object_path(key)
        if not path.exists():
            raise FileNotFoundError(f"Object not found: {key}")
        return path.read_bytes()

    def verify(self, key: str) -> bool:
        """Re-hash stored data and compare against the key's digest."""
        path = self._object_path(key)
        if not path.exists():
            return False
        return md5_hex(path.read_bytes()) == PurePosixPath(key).stem
