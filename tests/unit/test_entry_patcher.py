"""Tests for post-persist HTML patching."""

from __future__ import annotations

import logging
from pathlib import Path

from assetoffload.core.entry_patcher import patch_entry_document, patch_html_documents

URL = "https://cdn.example/K.png"
MAPPING = {"assets/a.png": URL}


class TestPatchEntryDocument:
    def test_rewrites_and_writes_back(self, tmp_path: Path, rewriter):
        index = tmp_path / "index.html"
        index.write_text('<img src="/assets/a.png">', encoding="utf-8")
        assert patch_entry_document(tmp_path, rewriter, MAPPING) is True
        assert index.read_text(encoding="utf-8") == f'<img src="{URL}">'

    def test_unchanged_file_not_written(self, tmp_path: Path, rewriter):
        index = tmp_path / "index.html"
        index.write_text("<p>hi</p>", encoding="utf-8")
        before = index.stat().st_mtime_ns
        assert patch_entry_document(tmp_path, rewriter, MAPPING) is False
        assert index.stat().st_mtime_ns == before

    def test_missing_document_is_noop(self, tmp_path: Path, rewriter, caplog):
        with caplog.at_level(logging.WARNING, logger="assetoffload"):
            assert patch_entry_document(tmp_path, rewriter, MAPPING) is False
        assert "not found" in caplog.text

    def test_undecodable_document_reported(self, tmp_path: Path, rewriter, caplog):
        index = tmp_path / "index.html"
        index.write_bytes(b"\xff\xfe\xfa/assets/a.png")
        with caplog.at_level(logging.ERROR, logger="assetoffload"):
            assert patch_entry_document(tmp_path, rewriter, MAPPING) is False
        assert index.read_bytes() == b"\xff\xfe\xfa/assets/a.png"
        assert "Could not read" in caplog.text

    def test_write_failure_reported(self, tmp_path: Path, rewriter, caplog, monkeypatch):
        index = tmp_path / "index.html"
        index.write_text('<img src="/assets/a.png">', encoding="utf-8")

        def _refuse(self, *args, **kwargs):
            raise PermissionError("read-only")

        monkeypatch.setattr(Path, "write_text", _refuse)
        with caplog.at_level(logging.ERROR, logger="assetoffload"):
            assert patch_entry_document(tmp_path, rewriter, MAPPING) is False
        assert "Could not write" in caplog.text

    def test_custom_entry_name(self, tmp_path: Path, rewriter):
        page = tmp_path / "app.html"
        page.write_text("/assets/a.png", encoding="utf-8")
        assert patch_entry_document(tmp_path, rewriter, MAPPING, "app.html") is True


class TestPatchHtmlDocuments:
    def test_patches_every_top_level_page(self, tmp_path: Path, rewriter):
        (tmp_path / "index.html").write_text("/assets/a.png", encoding="utf-8")
        (tmp_path / "about.html").write_text("./assets/a.png", encoding="utf-8")
        (tmp_path / "plain.html").write_text("nothing", encoding="utf-8")
        changed = patch_html_documents(tmp_path, rewriter, MAPPING)
        assert [p.name for p in changed] == ["about.html", "index.html"]
        assert (tmp_path / "about.html").read_text(encoding="utf-8") == URL

    def test_missing_directory(self, tmp_path: Path, rewriter):
        assert patch_html_documents(tmp_path / "nope", rewriter, MAPPING) == []
