"""Per-key execution lanes.

Work against the same remote key runs one at a time; work against distinct
keys runs in parallel.
"""

from __future__ import annotations

from collections.abc import Callable
from threading import Lock
from typing import TypeVar

T = TypeVar("T")


class KeyLanes:
    """Registry of one exclusive lock per key."""

    def __init__(self) -> None:
        self._registry_lock = Lock()
        self._lanes: dict[str, Lock] = {}

    def lane(self, key: str) -> Lock:
        """Return the lock for ``key``, creating it on first use."""
        with self._registry_lock:
            lane = self._lanes.get(key)
            if lane is None:
                lane = Lock()
                self._lanes[key] = lane
            return lane

    def run(self, key: str, fn: Callable[[], T]) -> T:
        """Execute ``fn`` while holding the lane lock for ``key``."""
        with self.lane(key):
            return fn()

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._lanes)
