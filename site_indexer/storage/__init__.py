"""site_indexer.storage: хранилища сайтов и страниц (SQLite и в памяти)."""

from .base import PageStore, SiteStore
from .memory import MemoryPageStore, MemorySiteStore
from .sqlite import Database, SqlitePageStore, SqliteSiteStore, open_stores

__all__ = [
    "SiteStore",
    "PageStore",
    "MemorySiteStore",
    "MemoryPageStore",
    "Database",
    "SqliteSiteStore",
    "SqlitePageStore",
    "open_stores",
]
