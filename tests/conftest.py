"""Shared test fixtures for assetoffload."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from assetoffload.config import OffloadSettings
from assetoffload.core.coordinator import UploadCoordinator
from assetoffload.core.rewriter import AssetPathRewriter
from assetoffload.models.artifacts import ArtifactKind, BuildArtifact
from assetoffload.plugin import AssetOffloadPlugin
from assetoffload.remote.memory import InMemoryStore

CDN = "https://cdn.example"

LOGO_BYTES = b"\x89PNG\r\n\x1a\nlogo-bytes"


@pytest.fixture
def settings(tmp_path: Path) -> OffloadSettings:
    """Settings isolated from any .env file."""
    return OffloadSettings(
        _env_file=None,
        bucket="test-bucket",
        cdn_base_url=CDN + "/",
        out_dir=tmp_path / "dist",
    )


@pytest.fixture
def store() -> InMemoryStore:
    """Provide an empty recording remote store."""
    return InMemoryStore()


@pytest.fixture
def coordinator(settings: OffloadSettings, store: InMemoryStore) -> UploadCoordinator:
    return UploadCoordinator.from_settings(settings, store)


@pytest.fixture
def rewriter() -> AssetPathRewriter:
    return AssetPathRewriter()


@pytest.fixture
def plugin(settings: OffloadSettings, store: InMemoryStore) -> AssetOffloadPlugin:
    return AssetOffloadPlugin(settings, store=store)


# ---------------------------------------------------------------------------
# Artifact factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_asset() -> Callable[..., BuildArtifact]:
    """Factory fixture: build a binary asset artifact."""

    def _factory(name: str = "assets/logo.png", data: bytes = LOGO_BYTES) -> BuildArtifact:
        return BuildArtifact(name=name, kind=ArtifactKind.BINARY_ASSET, payload=data)

    return _factory


@pytest.fixture
def make_chunk() -> Callable[..., BuildArtifact]:
    """Factory fixture: build a code chunk artifact."""

    def _factory(name: str = "assets/index.js", code: str = "") -> BuildArtifact:
        return BuildArtifact(name=name, kind=ArtifactKind.CODE, payload=code)

    return _factory
