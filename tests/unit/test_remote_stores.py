"""Tests for remote store backends."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from assetoffload.core.hasher import compute_identity
from assetoffload.remote import RemoteStore, RemoteStoreError
from assetoffload.remote import qiniu_store
from assetoffload.remote.local_store import ArtifactIntegrityError, LocalDirectoryStore
from assetoffload.remote.memory import InMemoryStore


class TestProtocol:
    def test_backends_satisfy_protocol(self, tmp_path: Path):
        assert isinstance(InMemoryStore(), RemoteStore)
        assert isinstance(LocalDirectoryStore(tmp_path), RemoteStore)


class TestInMemoryStore:
    def test_records_calls(self):
        store = InMemoryStore()
        assert store.exists("k.png") is False
        store.upload("k.png", b"data")
        assert store.exists("k.png") is True
        assert store.exists_calls == ["k.png", "k.png"]
        assert store.upload_calls == ["k.png"]

    def test_fault_injection(self):
        store = InMemoryStore(fail_exists={"a"}, fail_uploads={"b"})
        with pytest.raises(RemoteStoreError):
            store.exists("a")
        with pytest.raises(RemoteStoreError):
            store.upload("b", b"")
        assert "b" not in store.objects


class TestLocalDirectoryStore:
    def test_upload_and_retrieve(self, tmp_path: Path):
        store = LocalDirectoryStore(tmp_path / "objects")
        key = compute_identity(b"pixels", ".png")
        assert store.exists(key) is False
        store.upload(key, b"pixels")
        assert store.exists(key) is True
        assert store.retrieve(key) == b"pixels"
        assert (tmp_path / "objects" / key[:2] / key).is_file()

    def test_idempotent_upload(self, tmp_path: Path):
        store = LocalDirectoryStore(tmp_path)
        key = compute_identity(b"pixels", ".png")
        store.upload(key, b"pixels")
        store.upload(key, b"pixels")
        assert store.verify(key) is True

    def test_tampered_object_detected(self, tmp_path: Path):
        store = LocalDirectoryStore(tmp_path)
        key = compute_identity(b"pixels", ".png")
        store.upload(key, b"pixels")
        (tmp_path / key[:2] / key).write_bytes(b"tampered")
        assert store.verify(key) is False
        with pytest.raises(ArtifactIntegrityError):
            store.upload(key, b"pixels")

    def test_retrieve_missing(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            LocalDirectoryStore(tmp_path).retrieve("00.png")

    def test_rejects_path_like_keys(self, tmp_path: Path):
        store = LocalDirectoryStore(tmp_path)
        with pytest.raises(RemoteStoreError):
            store.exists("../escape.png")


# ---------------------------------------------------------------------------
# Qiniu backend, with the SDK replaced by fakes
# ---------------------------------------------------------------------------


class _FakeAuth:
    def __init__(self, access_key: str, secret_key: str) -> None:
        self.keys = (access_key, secret_key)
        self.tokens: list[tuple[str, str, int]] = []

    def upload_token(self, bucket: str, key: str, expires: int) -> str:
        self.tokens.append((bucket, key, expires))
        return f"token:{bucket}:{key}"


class _FakeBucketManager:
    status = 200

    def __init__(self, auth: _FakeAuth) -> None:
        self.auth = auth

    def stat(self, bucket: str, key: str):
        return None, SimpleNamespace(status_code=self.status, error="boom", exception=None)


@pytest.fixture
def fake_qiniu(monkeypatch: pytest.MonkeyPatch) -> dict:
    sent: dict = {"status": 200, "calls": []}

    def _put_data(token: str, key: str, data: bytes):
        sent["calls"].append((token, key, data))
        return {"key": key}, SimpleNamespace(status_code=sent["status"], error="denied")

    monkeypatch.setattr(qiniu_store, "Auth", _FakeAuth)
    monkeypatch.setattr(qiniu_store, "BucketManager", _FakeBucketManager)
    monkeypatch.setattr(qiniu_store, "put_data", _put_data)
    return sent


class TestQiniuStore:
    def test_requires_bucket(self, fake_qiniu):
        with pytest.raises(ValueError):
            qiniu_store.QiniuStore("ak", "sk", "")

    def test_exists_status_mapping(self, fake_qiniu, monkeypatch):
        store = qiniu_store.QiniuStore("ak", "sk", "bucket")
        assert store.exists("k.png") is True
        monkeypatch.setattr(_FakeBucketManager, "status", qiniu_store.STATUS_NO_SUCH_KEY)
        assert store.exists("k.png") is False
        monkeypatch.setattr(_FakeBucketManager, "status", 401)
        with pytest.raises(RemoteStoreError):
            store.exists("k.png")

    def test_upload_uses_scoped_token(self, fake_qiniu):
        store = qiniu_store.QiniuStore("ak", "sk", "bucket", token_ttl=60)
        store.upload("k.png", b"data")
        assert fake_qiniu["calls"] == [("token:bucket:k.png", "k.png", b"data")]

    def test_upload_failure_raises(self, fake_qiniu):
        fake_qiniu["status"] = 403
        store = qiniu_store.QiniuStore("ak", "sk", "bucket")
        with pytest.raises(RemoteStoreError, match="denied"):
            store.upload("k.png", b"data")

    def test_from_settings(self, fake_qiniu, settings):
        settings = settings.model_copy(
            update={"access_key": "ak", "bucket": "assets", "upload_token_ttl": 120}
        )
        store = qiniu_store.QiniuStore.from_settings(settings)
        assert store.bucket == "assets"
        assert store.token_ttl == 120
        assert store.issue_upload_token("k.png") == "token:assets:k.png"
