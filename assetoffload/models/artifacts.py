"""Build output artifact models.

Unlike stored records, artifacts are owned by the host build pipeline and
are mutated in place: the rewriter replaces ``payload`` and the pruner drops
whole entries from the bundle.
"""

from __future__ import annotations

from collections.abc import MutableMapping
from enum import Enum
from pathlib import PurePosixPath

from pydantic import BaseModel, ConfigDict


class ArtifactKind(str, Enum):
    """What a bundle entry holds."""

    CODE = "code"  # JS-like chunk
    TEXT_ASSET = "text_asset"  # CSS, SVG text, etc.
    BINARY_ASSET = "binary_asset"


class BuildArtifact(BaseModel):
    """A named unit of build output.

    ``name`` is the path relative to the output directory, e.g.
    ``assets/logo-Cx7F.png``.
    """

    model_config = ConfigDict(validate_assignment=True)

    name: str
    kind: ArtifactKind
    payload: str | bytes

    @classmethod
    def from_output(
        cls, name: str, payload: str | bytes, *, is_chunk: bool = False
    ) -> BuildArtifact:
        """Classify a raw host output entry."""
        if is_chunk:
            kind = ArtifactKind.CODE
        elif isinstance(payload, str):
            kind = ArtifactKind.TEXT_ASSET
        else:
            kind = ArtifactKind.BINARY_ASSET
        return cls(name=name, kind=kind, payload=payload)

    @property
    def extension(self) -> str:
        """Lower-cased file suffix including the dot, or ``""``."""
        return PurePosixPath(self.name).suffix.lower()

    @property
    def is_textual(self) -> bool:
        return self.kind in (ArtifactKind.CODE, ArtifactKind.TEXT_ASSET)

    @property
    def data(self) -> bytes:
        """Payload as bytes; text payloads are UTF-8 encoded."""
        if isinstance(self.payload, str):
            return self.payload.encode("utf-8")
        return bytes(self.payload)


# The host's artifact set, keyed by artifact name.
Bundle = MutableMapping[str, BuildArtifact]
