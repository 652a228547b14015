"""Asset reference rewriting for code, styles and HTML.

Grammar of a recognized reference (literal form)::

    prefix    := "" | "./" | "../" | "/"
    reference := prefix "assets/" safe+ "." extension

where ``safe`` is ``[A-Za-z0-9_.-/]``, ``safe+`` is matched non-greedily up
to the first qualifying extension, and ``extension`` is one of the
Qualifying Extension Set (case-insensitive).

The escaped form is the same grammar as it appears inside an escaped string
literal: every ``/`` is written ``\\/`` and the extension separator may be
written ``\\.``. Only ``./`` and ``/`` prefixes are stripped to obtain the
artifact name, so ``../assets/...`` references are recognized but only
rewritten if that exact name is mapped.

Matches whose artifact name is not in the mapping are returned untouched.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping

from assetoffload.config import DEFAULT_EXTENSIONS
from assetoffload.core.hasher import normalize_extension
from assetoffload.models.artifacts import BuildArtifact

logger = logging.getLogger(__name__)

_LEADING_PREFIX = re.compile(r"^(?:\./|/)")


def _extension_alternation(extensions: Iterable[str]) -> str:
    names = [normalize_extension(ext).lstrip(".") for ext in extensions]
    names = [n for n in names if n]
    if not names:
        raise ValueError("At least one qualifying extension is required")
    return "|".join(re.escape(n) for n in names)


def build_literal_pattern(extensions: Iterable[str]) -> re.Pattern[str]:
    """Compile the matcher for plain ``assets/<name>.<ext>`` references."""
    exts = _extension_alternation(extensions)
    return re.compile(
        rf"(?:\.\./|\./|/)?assets/[A-Za-z0-9_\-./]+?\.(?i:{exts})"
    )


def build_escaped_pattern(extensions: Iterable[str]) -> re.Pattern[str]:
    """Compile the matcher for ``\\/assets\\/<name>.<ext>`` references."""
    exts = _extension_alternation(extensions)
    return re.compile(
        rf"(?:\.\.\\/|\.\\/|\\/)?assets\\/[A-Za-z0-9_\-.\\/]+?\\?\.(?i:{exts})"
    )


def canonical_name(reference: str) -> str:
    """Strip one leading ``./`` or ``/`` from a literal reference."""
    return _LEADING_PREFIX.sub("", reference, count=1)


def unescape_reference(reference: str) -> str:
    return reference.replace("\\/", "/").replace("\\.", ".")


def escape_url(url: str) -> str:
    return url.replace("/", "\\/")


class AssetPathRewriter:
    """Substitutes mapped asset references with their CDN URLs.

    Parameters
    ----------
    extensions:
        The Qualifying Extension Set; only references ending in one of
        these are considered.
    """

    def __init__(self, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> None:
        self.extensions = tuple(extensions)
        self._literal = build_literal_pattern(self.extensions)
        self._escaped = build_escaped_pattern(self.extensions)

    def rewrite_counted(
        self, text: str, mapping: Mapping[str, str]
    ) -> tuple[str, int]:
        """Rewrite ``text`` and return it with the number of substitutions."""
        if not text or not mapping:
            return text, 0

        replaced = 0

        def _literal(match: re.Match[str]) -> str:
            nonlocal replaced
            url = mapping.get(canonical_name(match.group(0)))
            if url is None:
                return match.group(0)
            replaced += 1
            return url

        def _escaped(match: re.Match[str]) -> str:
            nonlocal replaced
            url = mapping.get(canonical_name(unescape_reference(match.group(0))))
            if url is None:
                return match.group(0)
            replaced += 1
            return escape_url(url)

        # Literal references first, then the escaped form.
        text = self._literal.sub(_literal, text)
        text = self._escaped.sub(_escaped, text)
        return text, replaced

    def rewrite(self, text: str, mapping: Mapping[str, str]) -> str:
        """Return ``text`` with every mapped asset reference substituted."""
        return self.rewrite_counted(text, mapping)[0]


def rewrite(
    text: str,
    mapping: Mapping[str, str],
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
) -> str:
    """One-shot convenience wrapper around ``AssetPathRewriter.rewrite``."""
    return AssetPathRewriter(extensions).rewrite(text, mapping)


def rewrite_artifacts(
    artifacts: Iterable[BuildArtifact],
    rewriter: AssetPathRewriter,
    mapping: Mapping[str, str],
) -> int:
    """Rewrite the payload of every code and text artifact in place.

    Binary payloads are never touched. Returns the number of artifacts
    whose payload changed.
    """
    changed = 0
    for artifact in artifacts:
        if not artifact.is_textual or not isinstance(artifact.payload, str):
            continue
        new_payload, count = rewriter.rewrite_counted(artifact.payload, mapping)
        if count and new_payload != artifact.payload:
            artifact.payload = new_payload
            changed += 1
            logger.debug("Rewrote %d reference(s) in %s", count, artifact.name)
    return changed
