"""In-memory remote store that records every call."""

from __future__ import annotations

from threading import Lock

from assetoffload.remote import RemoteStoreError


class InMemoryStore:
    """Dict-backed store for tests and dry runs.

    Parameters
    ----------
    objects:
        Objects considered already present remotely.
    fail_exists:
        Keys whose existence check raises ``RemoteStoreError``.
    fail_uploads:
        Keys whose upload raises ``RemoteStoreError``.
    """

    def __init__(
        self,
        objects: dict[str, bytes] | None = None,
        *,
        fail_exists: set[str] | None = None,
        fail_uploads: set[str] | None = None,
    ) -> None:
        self.objects: dict[str, bytes] = dict(objects or {})
        self.fail_exists = set(fail_exists or ())
        self.fail_uploads = set(fail_uploads or ())
        self.exists_calls: list[str] = []
        self.upload_calls: list[str] = []
        self._lock = Lock()

    def exists(self, key: str) -> bool:
        with self._lock:
            self.exists_calls.append(key)
            if key in self.fail_exists:
                raise RemoteStoreError(f"stat failed for {key}")
            return key in self.objects

    def upload(self, key: str, data: bytes) -> None:
        with self._lock:
            self.upload_calls.append(key)
            if key in self.fail_uploads:
                raise RemoteStoreError(f"upload rejected for {key}")
            self.objects[key] = bytes(data)
