"""Per-run upload outcome records."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class UploadOutcome(str, Enum):
    """How an asset reached (or failed to reach) the remote store."""

    UPLOADED = "uploaded"
    ALREADY_PRESENT = "already_present"  # remote existence check hit
    DEDUPLICATED = "deduplicated"  # same remote key handled earlier this run
    FAILED = "failed"


class UploadRecord(BaseModel):
    """Immutable record of one qualifying asset's upload decision."""

    model_config = ConfigDict(frozen=True)

    artifact_name: str
    remote_key: str
    cdn_url: str
    outcome: UploadOutcome
    error: str = ""

    @property
    def is_mapped(self) -> bool:
        """Whether references to this asset may be rewritten."""
        return self.outcome != UploadOutcome.FAILED


class UploadReport(BaseModel):
    """All upload records of one run, in artifact order."""

    model_config = ConfigDict(frozen=True)

    records: list[UploadRecord] = []

    @property
    def uploaded(self) -> list[UploadRecord]:
        return [r for r in self.records if r.outcome == UploadOutcome.UPLOADED]

    @property
    def failed(self) -> list[UploadRecord]:
        return [r for r in self.records if r.outcome == UploadOutcome.FAILED]

    @property
    def mapped(self) -> list[UploadRecord]:
        return [r for r in self.records if r.is_mapped]
