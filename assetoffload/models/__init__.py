"""Asset offload data models: Pydantic v2."""

from assetoffload.models.artifacts import ArtifactKind, BuildArtifact, Bundle
from assetoffload.models.uploads import UploadOutcome, UploadRecord, UploadReport

__all__ = [
    # artifacts
    "ArtifactKind",
    "BuildArtifact",
    "Bundle",
    # uploads
    "UploadOutcome",
    "UploadRecord",
    "UploadReport",
]
