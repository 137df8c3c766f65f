# site_indexer/storage/base.py
"""Store interfaces consumed by the crawler and the orchestrator."""
from __future__ import annotations

from typing import List, Optional, Protocol

from site_indexer.models import Page, Site


class SiteStore(Protocol):
    def find_by_url(self, url: str) -> Optional[Site]: ...

    def find_by_id(self, site_id: int) -> Optional[Site]: ...

    def save(self, site: Site) -> Site:
        """Insert when ``site.id`` is None, update otherwise; returns the stored site."""
        ...

    def delete_by_id(self, site_id: int) -> None: ...

    def touch_status_time(self, site_id: int) -> None:
        """Refresh ``status_time`` only."""
        ...

    def list_all(self) -> List[Site]: ...


class PageStore(Protocol):
    def exists_by_path(self, site_id: int, path: str) -> bool: ...

    def save(self, page: Page) -> Page: ...

    def delete_all_by_site_id(self, site_id: int) -> int:
        """Delete every page of a site at once; returns the number removed."""
        ...

    def list_by_site(self, site_id: int) -> List[Page]: ...


__all__ = ["SiteStore", "PageStore"]
