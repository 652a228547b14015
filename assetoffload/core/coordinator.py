"""UploadCoordinator: content-addressed, once-only asset uploads.

For every qualifying binary asset the coordinator derives the remote key,
makes sure the object is present remotely (existence check, then upload)
and records ``artifact name -> CDN URL``. A mapping entry exists only for
assets whose key was confirmed present or uploaded successfully; assets
whose upload failed stay unmapped so their references are left alone and
they are never pruned.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from threading import Lock
from typing import TYPE_CHECKING

from assetoffload.core.hasher import cdn_url_for, compute_identity, normalize_extension
from assetoffload.core.key_lanes import KeyLanes
from assetoffload.models.artifacts import ArtifactKind, BuildArtifact
from assetoffload.models.uploads import UploadOutcome, UploadRecord, UploadReport

if TYPE_CHECKING:
    from assetoffload.config import OffloadSettings
    from assetoffload.remote import RemoteStore

logger = logging.getLogger(__name__)


class OffloadState:
    """Single-writer state of one offload run.

    Holds the Uploaded-Artifact Map (name -> CDN URL), the Dedup Set of
    confirmed remote keys and the keys whose upload failed. Written by the
    ``UploadCoordinator`` only; read-only for rewriting and patching.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._uploaded: dict[str, str] = {}
        self._remote_keys: set[str] = set()
        self._failed_keys: dict[str, str] = {}
        self._records: list[UploadRecord] = []

    # ------------------------------------------------------------------
    # Remote keys
    # ------------------------------------------------------------------

    def is_confirmed(self, remote_key: str) -> bool:
        with self._lock:
            return remote_key in self._remote_keys

    def confirm(self, remote_key: str) -> None:
        with self._lock:
            self._remote_keys.add(remote_key)

    def failure_for(self, remote_key: str) -> str | None:
        """Return the recorded error if ``remote_key`` failed this run."""
        with self._lock:
            return self._failed_keys.get(remote_key)

    def mark_failed(self, remote_key: str, error: str) -> None:
        with self._lock:
            self._failed_keys[remote_key] = error

    # ------------------------------------------------------------------
    # Records and mapping
    # ------------------------------------------------------------------

    def record(self, record: UploadRecord) -> None:
        """Append a record; mapped outcomes also enter the Uploaded-Artifact Map."""
        with self._lock:
            if record.is_mapped and record.remote_key not in self._remote_keys:
                raise RuntimeError(
                    f"Refusing to map {record.artifact_name}: "
                    f"remote key {record.remote_key} was never confirmed"
                )
            self._records.append(record)
            if record.is_mapped:
                self._uploaded[record.artifact_name] = record.cdn_url

    @property
    def uploaded(self) -> dict[str, str]:
        """A copy of the Uploaded-Artifact Map."""
        with self._lock:
            return dict(self._uploaded)

    @property
    def remote_keys(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._remote_keys)

    @property
    def records(self) -> list[UploadRecord]:
        with self._lock:
            return list(self._records)


class UploadCoordinator:
    """Uploads qualifying assets once per remote key and builds the URL map.

    Parameters
    ----------
    store:
        Remote store backend implementing ``exists`` and ``upload``.
    cdn_base_url:
        Public base URL the remote keys are served under.
    extensions:
        The Qualifying Extension Set.
    state:
        Run state to write into; a fresh one is created when omitted.
    max_workers:
        Upper bound on concurrent existence-check/upload sequences.
    """

    def __init__(
        self,
        store: RemoteStore,
        *,
        cdn_base_url: str,
        extensions: Iterable[str],
        state: OffloadState | None = None,
        max_workers: int = 4,
    ) -> None:
        self._store = store
        self._cdn_base_url = cdn_base_url.rstrip("/")
        self._extensions = tuple(
            ext for ext in (normalize_extension(e) for e in extensions) if ext
        )
        self.state = state if state is not None else OffloadState()
        self._max_workers = max(1, max_workers)
        self._lanes = KeyLanes()

    @classmethod
    def from_settings(
        cls,
        settings: OffloadSettings,
        store: RemoteStore,
        *,
        state: OffloadState | None = None,
    ) -> UploadCoordinator:
        return cls(
            store,
            cdn_base_url=settings.cdn_base_url,
            extensions=settings.qualifying_extensions,
            state=state,
            max_workers=settings.max_concurrent_uploads,
        )

    def qualifies(self, artifact: BuildArtifact) -> bool:
        """Binary assets with a qualifying extension are offloaded."""
        return (
            artifact.kind == ArtifactKind.BINARY_ASSET
            and artifact.extension in self._extensions
        )

    @property
    def report(self) -> UploadReport:
        return UploadReport(records=self.state.records)

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    def process(
        self, artifacts: Iterable[BuildArtifact] | Mapping[str, BuildArtifact]
    ) -> dict[str, str]:
        """Upload every qualifying asset and return the Uploaded-Artifact Map.

        Distinct remote keys are handled concurrently; artifacts sharing a
        key reuse the first artifact's outcome without further remote calls.
        Records are written in artifact order once all keys are settled.
        """
        if isinstance(artifacts, Mapping):
            artifacts = artifacts.values()

        jobs: list[tuple[str, str]] = []
        payloads: dict[str, tuple[str, bytes]] = {}
        for artifact in artifacts:
            if not self.qualifies(artifact):
                continue
            data = artifact.data
            remote_key = compute_identity(data, artifact.extension)
            jobs.append((artifact.name, remote_key))
            payloads.setdefault(remote_key, (artifact.name, data))

        if not jobs:
            return self.state.uploaded

        workers = min(self._max_workers, len(payloads))
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="assetoffload-upload"
        ) as pool:
            futures = {
                key: pool.submit(self._ensure_remote, name, key, data)
                for key, (name, data) in payloads.items()
            }
            settled = {key: future.result() for key, future in futures.items()}

        first_owner = {key: name for key, (name, _) in payloads.items()}
        for name, remote_key in jobs:
            outcome, error = settled[remote_key]
            if name != first_owner[remote_key] and outcome != UploadOutcome.FAILED:
                outcome = UploadOutcome.DEDUPLICATED
                logger.debug("%s shares remote key %s", name, remote_key)
            self.state.record(
                UploadRecord(
                    artifact_name=name,
                    remote_key=remote_key,
                    cdn_url=cdn_url_for(self._cdn_base_url, remote_key),
                    outcome=outcome,
                    error=error,
                )
            )

        return self.state.uploaded

    def _ensure_remote(
        self, name: str, remote_key: str, data: bytes
    ) -> tuple[UploadOutcome, str]:
        """Check-then-upload for one remote key, inside that key's lane."""
        with self._lanes.lane(remote_key):
            if self.state.is_confirmed(remote_key):
                return UploadOutcome.DEDUPLICATED, ""
            previous_error = self.state.failure_for(remote_key)
            if previous_error is not None:
                return UploadOutcome.FAILED, previous_error

            try:
                present = self._store.exists(remote_key)
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "Existence check for %s failed: %s; attempting upload",
                    remote_key,
                    exc,
                )
                present = False

            if present:
                logger.info("Remote already has %s, skipping upload", remote_key)
                self.state.confirm(remote_key)
                return UploadOutcome.ALREADY_PRESENT, ""

            logger.info("Uploading %s -> %s", name, remote_key)
            try:
                self._store.upload(remote_key, data)
            except Exception as exc:  # noqa: BLE001
                logger.error("Upload failed for %s (%s): %s", name, remote_key, exc)
                self.state.mark_failed(remote_key, str(exc))
                return UploadOutcome.FAILED, str(exc)

            self.state.confirm(remote_key)
            return UploadOutcome.UPLOADED, ""
