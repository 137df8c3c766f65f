# site_indexer/models.py
"""
Persistent records of the indexer: sites under crawl and their pages.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class SiteStatus(str, Enum):
    """Lifecycle of one site within an indexing run."""

    INDEXING = "INDEXING"
    INDEXED = "INDEXED"
    FAILED = "FAILED"


@dataclass(slots=True)
class Site:
    """One configured web property; ``id`` is assigned by the site store."""

    url: str
    name: str
    status: SiteStatus
    status_time: datetime
    last_error: Optional[str] = None
    id: Optional[int] = None


@dataclass(slots=True)
class Page:
    """One fetched resource or synthetic entry, unique per (site_id, path)."""

    site_id: int
    path: str
    code: int
    content: str
    id: Optional[int] = None
