"""Qiniu Kodo object storage backend.

Existence checks go through ``BucketManager.stat``; uploads use a per-key
upload token (policy scope ``bucket:key``) and the form uploader
``put_data``. The SDK reports failures through its ``ResponseInfo`` rather
than raising, so every non-success response becomes ``RemoteStoreError``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from qiniu import Auth, BucketManager, put_data

from assetoffload.remote import RemoteStoreError

if TYPE_CHECKING:
    from assetoffload.config import OffloadSettings

logger = logging.getLogger(__name__)

# Kodo answers a stat on a missing key with this status code.
STATUS_NO_SUCH_KEY = 612


def _describe(info: Any) -> str:
    if info is None:
        return "no response"
    error = getattr(info, "error", None) or getattr(info, "exception", None)
    return f"status={getattr(info, 'status_code', '?')} error={error}"


class QiniuStore:
    """Remote store backed by a Qiniu bucket.

    Parameters
    ----------
    access_key, secret_key:
        Qiniu account credentials.
    bucket:
        Target bucket name.
    token_ttl:
        Seconds an issued upload token stays valid.
    """

    def __init__(
        self,
        access_key: str,
        secret_key: str,
        bucket: str,
        *,
        token_ttl: int = 3600,
    ) -> None:
        if not bucket:
            raise ValueError("QiniuStore requires a bucket name")
        self._auth = Auth(access_key, secret_key)
        self._bucket_manager = BucketManager(self._auth)
        self.bucket = bucket
        self.token_ttl = token_ttl

    @classmethod
    def from_settings(cls, settings: OffloadSettings) -> QiniuStore:
        return cls(
            settings.access_key,
            settings.secret_key.get_secret_value(),
            settings.bucket,
            token_ttl=settings.upload_token_ttl,
        )

    def exists(self, key: str) -> bool:
        _, info = self._bucket_manager.stat(self.bucket, key)
        status = getattr(info, "status_code", None)
        if status == 200:
            return True
        if status == STATUS_NO_SUCH_KEY:
            return False
        raise RemoteStoreError(f"stat {self.bucket}:{key} failed: {_describe(info)}")

    def issue_upload_token(self, key: str) -> str:
        """Issue an upload token scoped to ``bucket:key``."""
        return self._auth.upload_token(self.bucket, key, self.token_ttl)

    def upload(self, key: str, data: bytes) -> None:
        token = self.issue_upload_token(key)
        _, info = put_data(token, key, data)
        if getattr(info, "status_code", None) != 200:
            raise RemoteStoreError(
                f"upload {self.bucket}:{key} failed: {_describe(info)}"
            )
        logger.debug("QiniuStore: stored %s:%s (%d bytes)", self.bucket, key, len(data))
