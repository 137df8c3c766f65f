# site_indexer/crawler/frontier.py
"""Per-site dedup frontier: the set of canonical URLs claimed in one crawl."""

from __future__ import annotations

import threading
from typing import Set

from site_indexer.crawler.urls import normalize


class Frontier:
    """Concurrency-safe set of claimed URLs.

    :meth:`claim` is the only admission gate into the traversal. It is safe to
    call from worker threads as well as from coroutines on one event loop.
    No eviction: the frontier lives exactly as long as one site's crawl.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._claimed: Set[str] = set()

    def claim(self, url: str) -> bool:
        """Insert the canonical form of *url*; True iff this call inserted it."""
        key = normalize(url)
        with self._lock:
            if key in self._claimed:
                return False
            self._claimed.add(key)
            return True

    def __contains__(self, url: object) -> bool:
        if not isinstance(url, str):
            return False
        key = normalize(url)
        with self._lock:
            return key in self._claimed

    def __len__(self) -> int:
        with self._lock:
            return len(self._claimed)

    def snapshot(self) -> Set[str]:
        """Copy of the claimed keys, for reporting and tests."""
        with self._lock:
            return set(self._claimed)


__all__ = ["Frontier"]
