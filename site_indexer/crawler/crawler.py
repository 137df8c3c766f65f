# File: site_indexer/crawler/crawler.py
"""
Site crawler: depth-bounded fork/join traversal of one site.

Every URL task goes ``CLAIMED -> FETCHING -> {PERSISTED, SKIPPED, ERRORED}``.
A task that parses a document spawns one child task per newly discovered link
and completes only when all of its children have completed. In-flight fetches
are bounded by ``concurrency``; the frontier itself is unbounded and is capped
only by ``max_depth`` and the site scope.
"""
from __future__ import annotations

import asyncio
import os
from pathlib import Path, PurePosixPath
from typing import FrozenSet, Iterable, Optional
from urllib.parse import unquote, urlsplit

from site_indexer.config import MAX_DEPTH
from site_indexer.crawler.fetcher import Fetcher
from site_indexer.crawler.frontier import Frontier
from site_indexer.crawler.models import CrawlStats, FetchError, FetchErrorKind, FetchResponse
from site_indexer.crawler.observer import CrawlObserver, LoggingObserver
from site_indexer.crawler.urls import (
    LinkKind,
    classify,
    is_in_scope,
    normalize,
    phone_number,
    relative_path,
)
from site_indexer.models import Page, Site
from site_indexer.parser.html_parser import parse_html
from site_indexer.storage.base import PageStore, SiteStore

__all__ = ("SiteCrawler", "DOCUMENT_TYPES")

#: binary documents recorded as synthetic pages (besides ``image/*``)
DOCUMENT_TYPES: FrozenSet[str] = frozenset(
    {
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    }
)


def _write_file(target: Path, data: bytes) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)


def _unexpected(exc: Exception, url: str) -> FetchError:
    """Wrap a non-fetch failure of one URL so it is recorded as an error page."""
    return FetchError(FetchErrorKind.OTHER, str(exc) or type(exc).__name__, url=url)


class SiteCrawler:
    """Crawls one :class:`Site` and stores its pages; one instance per crawl."""

    def __init__(
        self,
        site: Site,
        fetcher: Fetcher,
        site_store: SiteStore,
        page_store: PageStore,
        *,
        max_depth: int = MAX_DEPTH,
        concurrency: Optional[int] = None,
        observer: Optional[CrawlObserver] = None,
        download_dir: Optional[Path] = None,
    ) -> None:
        if site.id is None:
            raise ValueError("Site must be saved before crawling")
        self.site = site
        self.fetcher = fetcher
        self.site_store = site_store
        self.page_store = page_store
        self.max_depth = max_depth
        self.concurrency = concurrency or os.cpu_count() or 1
        self.observer = observer or LoggingObserver()
        self.download_dir = download_dir
        self.frontier = Frontier()
        self.stats = CrawlStats()
        self._slots = asyncio.Semaphore(self.concurrency)
        self._persist_lock = asyncio.Lock()

    async def crawl(self) -> CrawlStats:
        """Traverse the site from its root URL and return the crawl counters."""
        await self._visit(self.site.url, 0)
        return self.stats

    # ------------------------------------------------------------------ #
    # traversal                                                          #
    # ------------------------------------------------------------------ #

    async def _visit(self, url: str, depth: int) -> None:
        if depth > self.max_depth:
            return
        if url in self.frontier or not is_in_scope(url, self.site.url):
            return
        if not self._claim(url, depth):
            return

        try:
            async with self._slots:
                response = await self.fetcher.fetch(url)
            await self._heartbeat()
            response.raise_for_status()
        except FetchError as exc:
            await self._record_failure(url, exc)
            return
        except Exception as exc:
            await self._record_failure(url, _unexpected(exc, url))
            return

        final_url = response.final_url
        if normalize(final_url) != normalize(url):
            if not is_in_scope(final_url, self.site.url):
                self._skip(url, f"redirected out of scope to {final_url}")
                return
            if not self._claim(final_url, depth):
                self._skip(url, f"redirect target {final_url} already claimed")
                return

        try:
            await self._dispatch(url, response, depth)
        except Exception as exc:
            await self._record_failure(url, _unexpected(exc, response.final_url))

    async def _dispatch(self, url: str, response: FetchResponse, depth: int) -> None:
        media = response.media_type
        path = relative_path(response.final_url, self.site.url)

        if media.startswith("text/"):
            parsed = await asyncio.to_thread(parse_html, response.text, response.final_url)
            await self._persist(url, path, response.status_code, parsed.html)
            await self._follow(parsed.links, depth)
        elif media.startswith("image/") or media in DOCUMENT_TYPES:
            content = await self._describe_file(response)
            await self._persist(url, path, response.status_code, content)
        else:
            self._skip(url, f"unsupported content type {media or '(missing)'}")

    async def _follow(self, links: Iterable[str], depth: int) -> None:
        """Store phone links and fork one child task per unclaimed link, then join."""
        async with asyncio.TaskGroup() as group:
            for link in links:
                kind = classify(link)
                if kind is LinkKind.TEL_LINK:
                    await self._save_phone(link)
                elif kind is LinkKind.HTTP_LINK and link not in self.frontier:
                    group.create_task(self._visit(link, depth + 1))

    # ------------------------------------------------------------------ #
    # outcomes                                                           #
    # ------------------------------------------------------------------ #

    def _claim(self, url: str, depth: int) -> bool:
        if not self.frontier.claim(url):
            return False
        self.stats.claimed += 1
        self.observer.claimed(url, depth)
        return True

    def _skip(self, url: str, reason: str) -> None:
        self.stats.skipped += 1
        self.observer.skipped(url, reason)

    async def _record_failure(self, url: str, exc: FetchError) -> None:
        if exc.is_not_found:
            self._skip(url, "not found")
            return
        self.stats.errors += 1
        self.observer.errored(url, exc.reason)
        path = relative_path(exc.url or url, self.site.url)
        await self._persist(url, path, exc.code, f"Error fetching page: {exc.reason}")

    async def _save_phone(self, link: str) -> None:
        number = phone_number(link)
        if not number or not self._claim(link, 0):
            return
        await self._persist(link, f"tel:{number}", 200, f"Phone number: {number}")

    async def _persist(self, url: str, path: str, code: int, content: str) -> bool:
        """Check-then-insert under the site's persist lock; False if the path exists."""
        site_id = self.site.id
        async with self._persist_lock:
            if await asyncio.to_thread(self.page_store.exists_by_path, site_id, path):
                self._skip(url, f"page {path} already stored")
                return False
            page = Page(site_id=site_id, path=path, code=code, content=content)
            await asyncio.to_thread(self.page_store.save, page)
        self.stats.persisted += 1
        self.observer.persisted(url, path, code)
        return True

    async def _describe_file(self, response: FetchResponse) -> str:
        description = (
            f"File {response.final_url} ({response.media_type}, {len(response.body)} bytes)"
        )
        if self.download_dir is None:
            return description
        target = self._download_target(response.final_url)
        try:
            await asyncio.to_thread(_write_file, target, response.body)
        except OSError as exc:
            self.observer.errored(response.final_url, f"cannot save file {target}: {exc}")
            return description
        return f"{description} saved to {target}"

    def _download_target(self, url: str) -> Path:
        parts = urlsplit(url)
        segments = [
            s for s in PurePosixPath(unquote(parts.path)).parts if s not in ("/", ".", "..")
        ]
        if not segments:
            segments = ["index"]
        host = parts.hostname or "site"
        return Path(self.download_dir, host, *segments)

    async def _heartbeat(self) -> None:
        # status_time refresh is best-effort and never aborts the crawl
        try:
            await asyncio.to_thread(self.site_store.touch_status_time, self.site.id)
        except Exception as exc:
            self.observer.heartbeat_failed(self.site.url, exc)
