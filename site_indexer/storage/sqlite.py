"""SQLite-backed site and page stores.

One :class:`Database` holds a single connection shared by both stores. The
crawler calls the stores from worker threads (``asyncio.to_thread``), so the
connection is opened with ``check_same_thread=False`` and every statement runs
under one lock.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
import logging
from pathlib import Path
import sqlite3
import threading
from typing import Iterator

from site_indexer.models import Page, Site, SiteStatus


logger = logging.getLogger("SiteIndexer")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS site (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    status      TEXT NOT NULL CHECK (status IN ('INDEXING', 'INDEXED', 'FAILED')),
    status_time TEXT NOT NULL,
    last_error  TEXT,
    url         TEXT NOT NULL UNIQUE,
    name        TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS page (
    id      INTEGER PRIMARY KEY AUTOINCREMENT,
    site_id INTEGER NOT NULL REFERENCES site(id),
    path    TEXT NOT NULL,
    code    INTEGER NOT NULL,
    content TEXT NOT NULL,
    UNIQUE (site_id, path)
);
CREATE INDEX IF NOT EXISTS idx_page_path ON page(path);
"""


class Database:
    """Shared SQLite connection with the indexer schema applied."""

    def __init__(self, path: str | Path) -> None:
        self.path = str(path)
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(self.path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON")
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run statements atomically; commits on success, rolls back on error."""
        with self._lock:
            try:
                yield self._conn
                self._conn.commit()
            except sqlite3.Error:
                self._conn.rollback()
                raise

    def close(self) -> None:
        with self._lock:
            self._conn.close()


def _row_to_site(row: sqlite3.Row) -> Site:
    return Site(
        id=row["id"],
        url=row["url"],
        name=row["name"],
        status=SiteStatus(row["status"]),
        status_time=datetime.fromisoformat(row["status_time"]),
        last_error=row["last_error"],
    )


def _row_to_page(row: sqlite3.Row) -> Page:
    return Page(
        id=row["id"],
        site_id=row["site_id"],
        path=row["path"],
        code=row["code"],
        content=row["content"],
    )


class SqliteSiteStore:
    def __init__(self, db: Database) -> None:
        self.db = db

    def find_by_url(self, url: str) -> Site | None:
        with self.db.transaction() as conn:
            row = conn.execute("SELECT * FROM site WHERE url = ?", (url,)).fetchone()
        return _row_to_site(row) if row else None

    def find_by_id(self, site_id: int) -> Site | None:
        with self.db.transaction() as conn:
            row = conn.execute("SELECT * FROM site WHERE id = ?", (site_id,)).fetchone()
        return _row_to_site(row) if row else None

    def save(self, site: Site) -> Site:
        values = (
            site.status.value,
            site.status_time.isoformat(),
            site.last_error,
            site.url,
            site.name,
        )
        with self.db.transaction() as conn:
            if site.id is None:
                cur = conn.execute(
                    "INSERT INTO site (status, status_time, last_error, url, name) VALUES (?, ?, ?, ?, ?)",
                    values,
                )
                site.id = cur.lastrowid
            else:
                conn.execute(
                    "UPDATE site SET status = ?, status_time = ?, last_error = ?, url = ?, name = ? WHERE id = ?",
                    (*values, site.id),
                )
        return site

    def delete_by_id(self, site_id: int) -> None:
        with self.db.transaction() as conn:
            conn.execute("DELETE FROM site WHERE id = ?", (site_id,))

    def touch_status_time(self, site_id: int) -> None:
        with self.db.transaction() as conn:
            conn.execute(
                "UPDATE site SET status_time = ? WHERE id = ?",
                (datetime.now().isoformat(), site_id),
            )

    def list_all(self) -> list[Site]:
        with self.db.transaction() as conn:
            rows = conn.execute("SELECT * FROM site ORDER BY id").fetchall()
        return [_row_to_site(r) for r in rows]


class SqlitePageStore:
    def __init__(self, db: Database) -> None:
        self.db = db

    def exists_by_path(self, site_id: int, path: str) -> bool:
        with self.db.transaction() as conn:
            row = conn.execute(
                "SELECT 1 FROM page WHERE site_id = ? AND path = ? LIMIT 1", (site_id, path)
            ).fetchone()
        return row is not None

    def save(self, page: Page) -> Page:
        with self.db.transaction() as conn:
            cur = conn.execute(
                "INSERT INTO page (site_id, path, code, content) VALUES (?, ?, ?, ?)",
                (page.site_id, page.path, page.code, page.content),
            )
            page.id = cur.lastrowid
        return page

    def delete_all_by_site_id(self, site_id: int) -> int:
        with self.db.transaction() as conn:
            cur = conn.execute("DELETE FROM page WHERE site_id = ?", (site_id,))
        logger.debug("Deleted %d pages of site %d", cur.rowcount, site_id)
        return cur.rowcount

    def list_by_site(self, site_id: int) -> list[Page]:
        with self.db.transaction() as conn:
            rows = conn.execute("SELECT * FROM page WHERE site_id = ? ORDER BY id", (site_id,)).fetchall()
        return [_row_to_page(r) for r in rows]


def open_stores(path: str | Path) -> tuple[SqliteSiteStore, SqlitePageStore]:
    """Open (creating if needed) the database at *path* and return both stores."""
    db = Database(path)
    logger.debug("Opened SQLite database %s", db.path)
    return SqliteSiteStore(db), SqlitePageStore(db)


__all__ = ["Database", "SqliteSiteStore", "SqlitePageStore", "open_stores"]
