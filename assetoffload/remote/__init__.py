"""Remote store protocol and backends.

Every backend implements the ``RemoteStore`` protocol: an ``exists(key)``
check and an ``upload(key, data)`` call. Backends raise
``RemoteStoreError`` for non-success responses; the upload coordinator
decides how each failure degrades.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


class RemoteStoreError(RuntimeError):
    """Raised when the remote store rejects or cannot complete a request."""


@runtime_checkable
class RemoteStore(Protocol):
    """Protocol that every object-storage backend must implement."""

    def exists(self, key: str) -> bool:
        """Return ``True`` if an object is stored under ``key``.

        Raises ``RemoteStoreError`` when the answer cannot be determined.
        """
        ...

    def upload(self, key: str, data: bytes) -> None:
        """Store ``data`` under ``key``.

        Raises ``RemoteStoreError`` if the store did not accept the object.
        """
        ...


__all__ = ["RemoteStore", "RemoteStoreError"]
