"""Post-persist patching of HTML documents on disk.

The host finalizes its entry document after the in-memory rewrite stage, so
``index.html`` is re-read from the output directory and rewritten with the
same mapping. A missing document or an I/O failure is reported and leaves
the file as it was; neither aborts the build.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from assetoffload.core.rewriter import AssetPathRewriter

logger = logging.getLogger(__name__)


def _patch_file(
    path: Path, rewriter: AssetPathRewriter, mapping: Mapping[str, str]
) -> bool:
    try:
        html = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Could not read %s: %s", path, exc)
        return False

    patched, count = rewriter.rewrite_counted(html, mapping)
    if patched == html:
        return False

    try:
        path.write_text(patched, encoding="utf-8")
    except OSError as exc:
        logger.error("Could not write %s: %s", path, exc)
        return False

    logger.info("Rewrote %d asset reference(s) in %s to CDN URLs", count, path)
    return True


def patch_entry_document(
    out_dir: Path | str,
    rewriter: AssetPathRewriter,
    mapping: Mapping[str, str],
    entry_name: str = "index.html",
) -> bool:
    """Rewrite asset references in ``<out_dir>/<entry_name>``.

    Returns ``True`` only if the file was changed and written back.
    """
    path = Path(out_dir) / entry_name
    if not path.is_file():
        logger.warning("Entry document %s not found, skipping HTML rewrite", path)
        return False
    return _patch_file(path, rewriter, mapping)


def patch_html_documents(
    out_dir: Path | str,
    rewriter: AssetPathRewriter,
    mapping: Mapping[str, str],
) -> list[Path]:
    """Rewrite every ``*.html`` directly under ``out_dir`` (multi-page builds).

    Returns the paths that were changed.
    """
    out = Path(out_dir)
    if not out.is_dir():
        logger.warning("Output directory %s not found, skipping HTML rewrite", out)
        return []
    return [
        path
        for path in sorted(out.glob("*.html"))
        if path.is_file() and _patch_file(path, rewriter, mapping)
    ]
