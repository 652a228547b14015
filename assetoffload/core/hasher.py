"""Remote identity helpers for content addressing.

A remote key is ``md5(bytes).hexdigest() + extension``: identical content
always maps to the same object regardless of the asset's original name, so
uploads deduplicate across files and across builds.
"""

from __future__ import annotations

import hashlib
from pathlib import PurePosixPath


def md5_hex(data: bytes) -> str:
    """Return the MD5 hex digest of raw bytes."""
    return hashlib.md5(data).hexdigest()


def normalize_extension(extension: str) -> str:
    """Lower-case an extension and make sure it carries a leading dot.

    ``"PNG"``, ``".png"`` and ``" .Png "`` all become ``".png"``. Blank input
    yields ``""``.
    """
    ext = extension.strip().lower()
    if not ext:
        return ""
    return ext if ext.startswith(".") else f".{ext}"


def extension_of(name: str) -> str:
    """Return the normalized extension of an artifact name."""
    return normalize_extension(PurePosixPath(name).suffix)


def compute_identity(data: bytes, extension: str) -> str:
    """Derive the content-addressed remote key for an asset."""
    return f"{md5_hex(data)}{normalize_extension(extension)}"


def cdn_url_for(cdn_base_url: str, remote_key: str) -> str:
    """Join the CDN base and a remote key, ignoring trailing slashes."""
    return f"{cdn_base_url.rstrip('/')}/{remote_key}"
