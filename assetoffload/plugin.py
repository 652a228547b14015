"""AssetOffloadPlugin: host build-pipeline adapter.

Wires the UploadCoordinator, AssetPathRewriter, pruner and entry-document
patcher to the two lifecycle points a bundler exposes:

- ``generate_bundle(bundle)``: after the artifact set is produced, before it
  is written. Uploads qualifying assets, rewrites references in code and
  text artifacts, then prunes offloaded assets.
- ``write_bundle(out_dir)``: after the artifacts are persisted. Rewrites the
  entry HTML document on disk.

Neither hook raises for upload or patching failures; affected references
keep pointing at the local asset.
"""

from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING

from assetoffload.config import OffloadSettings
from assetoffload.core.coordinator import OffloadState, UploadCoordinator
from assetoffload.core.entry_patcher import patch_entry_document, patch_html_documents
from assetoffload.core.pruner import prune
from assetoffload.core.rewriter import AssetPathRewriter, rewrite_artifacts
from assetoffload.models.uploads import UploadReport

if TYPE_CHECKING:
    from collections.abc import Mapping

    from assetoffload.models.artifacts import Bundle
    from assetoffload.remote import RemoteStore

logger = logging.getLogger(__name__)


class AssetOffloadPlugin:
    """Offloads bundle images to a CDN-backed object store.

    Parameters
    ----------
    settings:
        Offload settings. Read from the environment if not provided.
    store:
        Remote store backend. A ``QiniuStore`` built from ``settings`` is
        used when omitted.
    """

    name = "asset-offload"
    enforce = "post"

    def __init__(
        self,
        settings: OffloadSettings | None = None,
        store: RemoteStore | None = None,
    ) -> None:
        self.settings = settings or OffloadSettings()
        logging.getLogger("assetoffload").setLevel(self.settings.log_level.upper())

        if store is None:
            from assetoffload.remote.qiniu_store import QiniuStore

            store = QiniuStore.from_settings(self.settings)
        self.store = store

        self.state = OffloadState()
        self.coordinator = UploadCoordinator.from_settings(
            self.settings, self.store, state=self.state
        )
        self.rewriter = AssetPathRewriter(self.settings.qualifying_extensions)
        self.out_dir: Path = self.settings.out_dir

    @property
    def mapping(self) -> Mapping[str, str]:
        """Read-only view of the Uploaded-Artifact Map built so far."""
        return MappingProxyType(self.state.uploaded)

    # ------------------------------------------------------------------
    # Lifecycle hooks
    # ------------------------------------------------------------------

    def configure(self, out_dir: Path | str | None = None) -> None:
        """Record the host's resolved output directory."""
        if out_dir:
            self.out_dir = Path(out_dir)

    def generate_bundle(self, bundle: Bundle) -> UploadReport:
        """Upload, rewrite and prune the in-memory artifact set."""
        mapping = self.coordinator.process(bundle.values())
        rewritten = rewrite_artifacts(bundle.values(), self.rewriter, mapping)
        removed = prune(bundle, mapping)

        report = self.coordinator.report
        logger.info(
            "Offloaded %d asset(s): %d uploaded, %d failed, %d artifact(s) rewritten",
            len(removed),
            len(report.uploaded),
            len(report.failed),
            rewritten,
        )
        return report

    def write_bundle(self, out_dir: Path | str | None = None) -> list[Path]:
        """Rewrite persisted HTML under the output directory.

        Returns the HTML files that were changed.
        """
        out = Path(out_dir) if out_dir else self.out_dir
        mapping = self.state.uploaded
        if self.settings.patch_all_html:
            return patch_html_documents(out, self.rewriter, mapping)
        if patch_entry_document(out, self.rewriter, mapping, self.settings.entry_document):
            return [out / self.settings.entry_document]
        return []
