"""Drop offloaded assets from the artifact set so they are never written."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from assetoffload.models.artifacts import Bundle

logger = logging.getLogger(__name__)


def prune(artifacts: Bundle, mapping: Mapping[str, str]) -> list[str]:
    """Remove every artifact whose name has a confirmed mapping entry.

    Must run after references in the retained artifacts were rewritten.
    Artifacts without a mapping entry are always kept. Returns the removed
    names in mapping order.
    """
    removed: list[str] = []
    for name in mapping:
        if name in artifacts:
            del artifacts[name]
            removed.append(name)
    if removed:
        logger.debug("Pruned %d offloaded asset(s) from the bundle", len(removed))
    return removed
