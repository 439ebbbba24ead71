# site_snapshot/crawler/visited.py
"""
Set of path keys already scheduled during one crawl.
"""
from __future__ import annotations

import threading
from typing import Set


class VisitedSet:
    """Thread-safe set of visited keys with an atomic check-and-mark.

    Keys are escaped URL paths, so URLs differing only by scheme or query
    share a key.
    """

    def __init__(self) -> None:
        self._keys: Set[str] = set()
        self._lock = threading.Lock()

    def check_and_mark(self, key: str) -> bool:
        """Mark *key* as visited; return True if it already was."""
        with self._lock:
            if key in self._keys:
                return True
            self._keys.add(key)
            return False

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._keys

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)
