# site_indexer/storage/memory.py
"""In-process stores, used by tests and for dry runs without a database."""
from __future__ import annotations

import itertools
import threading
from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Optional

from site_indexer.models import Page, Site


class MemorySiteStore:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._rows: Dict[int, Site] = {}

    def find_by_url(self, url: str) -> Optional[Site]:
        with self._lock:
            for site in self._rows.values():
                if site.url == url:
                    return replace(site)
        return None

    def find_by_id(self, site_id: int) -> Optional[Site]:
        with self._lock:
            site = self._rows.get(site_id)
            return replace(site) if site else None

    def save(self, site: Site) -> Site:
        with self._lock:
            if site.id is None:
                for other in self._rows.values():
                    if other.url == site.url:
                        raise ValueError(f"Site already exists: {site.url}")
                site.id = next(self._ids)
            self._rows[site.id] = replace(site)
        return site

    def delete_by_id(self, site_id: int) -> None:
        with self._lock:
            self._rows.pop(site_id, None)

    def touch_status_time(self, site_id: int) -> None:
        with self._lock:
            site = self._rows.get(site_id)
            if site is not None:
                site.status_time = datetime.now()

    def list_all(self) -> List[Site]:
        with self._lock:
            return [replace(s) for s in self._rows.values()]


class MemoryPageStore:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._rows: Dict[int, Page] = {}

    def exists_by_path(self, site_id: int, path: str) -> bool:
        with self._lock:
            return any(p.site_id == site_id and p.path == path for p in self._rows.values())

    def save(self, page: Page) -> Page:
        with self._lock:
            if page.id is None:
                page.id = next(self._ids)
            self._rows[page.id] = replace(page)
        return page

    def delete_all_by_site_id(self, site_id: int) -> int:
        with self._lock:
            doomed = [pid for pid, p in self._rows.items() if p.site_id == site_id]
            for pid in doomed:
                del self._rows[pid]
        return len(doomed)

    def list_by_site(self, site_id: int) -> List[Page]:
        with self._lock:
            return [replace(p) for p in self._rows.values() if p.site_id == site_id]


__all__ = ["MemorySiteStore", "MemoryPageStore"]
