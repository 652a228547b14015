"""assetoffload: content-addressed CDN offload for bundler output.

Uploads qualifying build assets to an object store under a content hash,
rewrites every reference to them in code, styles and HTML to CDN URLs, and
drops the uploaded assets from the output.
"""

__version__ = "0.1.0"

from assetoffload.config import OffloadSettings
from assetoffload.core.hasher import compute_identity
from assetoffload.core.pruner import prune
from assetoffload.core.rewriter import AssetPathRewriter, rewrite
from assetoffload.plugin import AssetOffloadPlugin

__all__ = [
    "AssetOffloadPlugin",
    "AssetPathRewriter",
    "OffloadSettings",
    "compute_identity",
    "prune",
    "rewrite",
    "__version__",
]
