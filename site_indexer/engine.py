# File: site_indexer/engine.py
"""site_indexer.engine: оркестратор сессии индексации всех сайтов из конфигурации."""

from __future__ import annotations

import asyncio
import threading
import uuid
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from site_indexer.config import IndexerConfig, SiteConfig
from site_indexer.crawler.crawler import SiteCrawler
from site_indexer.crawler.fetcher import Fetcher
from site_indexer.crawler.models import CrawlStats
from site_indexer.crawler.observer import CrawlObserver, LoggingObserver
from site_indexer.logger import SessionLogger, logger
from site_indexer.models import Site, SiteStatus
from site_indexer.storage.base import PageStore, SiteStore

__all__ = ["IndexingService", "unique_sites"]


def unique_sites(sites: Sequence[SiteConfig]) -> List[SiteConfig]:
    """Удаляет дубликаты сайтов по URL; остаётся первое вхождение."""
    by_url: Dict[str, SiteConfig] = {}
    for site in sites:
        by_url.setdefault(site.url, site)
    unique = list(by_url.values())
    removed = len(sites) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate sites", removed)
    return unique


def _error_message(exc: BaseException) -> str:
    """Текст ошибки для поля last_error; группы исключений разворачиваются до первой."""
    while isinstance(exc, BaseExceptionGroup) and exc.exceptions:
        exc = exc.exceptions[0]
    return str(exc) or type(exc).__name__


class IndexingService:
    """Единственная на процесс сессия индексации: флаг запуска, обход сайтов, статусы."""

    def __init__(
        self,
        config: IndexerConfig,
        site_store: SiteStore,
        page_store: PageStore,
        fetcher_factory: Callable[[IndexerConfig], Fetcher] = Fetcher.from_config,
        observer_factory: Callable[[], CrawlObserver] = LoggingObserver,
    ) -> None:
        self.config = config
        self.site_store = site_store
        self.page_store = page_store
        self.fetcher_factory = fetcher_factory
        self.observer_factory = observer_factory
        self._flag_lock = threading.Lock()
        self._indexing = False
        self._task: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------ #
    # run gate                                                           #
    # ------------------------------------------------------------------ #

    def is_indexing(self) -> bool:
        return self._indexing

    def start_indexing(self) -> bool:
        """Переводит флаг false → true; True только у вызова, выполнившего переход."""
        with self._flag_lock:
            if self._indexing:
                logger.warning("Indexing is already running")
                return False
            self._indexing = True
        logger.info("Indexing started, %d unique sites", len(unique_sites(self.config.sites)))
        return True

    def _finish_indexing(self) -> None:
        with self._flag_lock:
            self._indexing = False

    # ------------------------------------------------------------------ #
    # run                                                                #
    # ------------------------------------------------------------------ #

    def launch(self) -> asyncio.Task:
        """Запускает perform_indexing() в фоне на текущем цикле событий."""
        task = asyncio.get_running_loop().create_task(self.perform_indexing())
        task.add_done_callback(self._on_run_done)
        self._task = task
        return task

    @staticmethod
    def _on_run_done(task: asyncio.Task) -> None:
        if not task.cancelled() and task.exception() is not None:
            logger.debug("Background indexing run ended with %r", task.exception())

    async def perform_indexing(self) -> Dict[str, Optional[CrawlStats]]:
        """
        Полный прогон: все уникальные сайты обходятся параллельно.
        Возвращает {url: CrawlStats} (None для сайтов, завершившихся FAILED).
        Флаг индексации сбрасывается в любом случае.
        """
        log = SessionLogger(logger, uuid.uuid4())
        try:
            log.info("=== Indexing started ===")
            sites = unique_sites(self.config.sites)
            async with self.fetcher_factory(self.config) as fetcher:
                outcomes = await asyncio.gather(
                    *(self._process_site(site_config, fetcher) for site_config in sites),
                    return_exceptions=True,
                )
            results: Dict[str, Optional[CrawlStats]] = {}
            for site_config, outcome in zip(sites, outcomes):
                if isinstance(outcome, BaseException):
                    log.error("Site %s aborted: %s", site_config.url, _error_message(outcome))
                    outcome = None
                results[site_config.url] = outcome
            log.info("=== Indexing finished ===")
            return results
        except Exception as exc:
            log.error("Indexing failed: %s", exc, exc_info=True)
            raise
        finally:
            self._finish_indexing()
            log.info("=== Indexing session closed ===")

    async def _process_site(self, site_config: SiteConfig, fetcher: Fetcher) -> Optional[CrawlStats]:
        try:
            logger.info("Processing site %s", site_config.url)
            deleted = await asyncio.to_thread(self._purge, site_config.url)
            logger.info("Deleted %d stale pages of %s", deleted, site_config.url)
            site = await asyncio.to_thread(self._create_site, site_config)

            crawler = SiteCrawler(
                site,
                fetcher,
                self.site_store,
                self.page_store,
                max_depth=self.config.max_depth,
                concurrency=self.config.concurrency,
                observer=self.observer_factory(),
                download_dir=self.config.download_dir,
            )
            stats = await crawler.crawl()

            site.status = SiteStatus.INDEXED
            site.status_time = datetime.now()
            await asyncio.to_thread(self.site_store.save, site)
            logger.info(
                "Indexed %s: %d pages stored, %d URLs claimed, %d errors, %d skipped",
                site.url,
                stats.persisted,
                stats.claimed,
                stats.errors,
                stats.skipped,
            )
            return stats
        except Exception as exc:
            message = _error_message(exc)
            logger.error("Failed to index %s: %s", site_config.url, message, exc_info=True)
            await asyncio.to_thread(self._mark_failed, site_config.url, message)
            return None

    # ------------------------------------------------------------------ #
    # store steps                                                        #
    # ------------------------------------------------------------------ #

    def _purge(self, url: str) -> int:
        site = self.site_store.find_by_url(url)
        if site is None or site.id is None:
            logger.debug("No previous record for %s", url)
            return 0
        deleted = self.page_store.delete_all_by_site_id(site.id)
        self.site_store.delete_by_id(site.id)
        return deleted

    def _create_site(self, site_config: SiteConfig) -> Site:
        site = Site(
            url=site_config.url,
            name=site_config.name,
            status=SiteStatus.INDEXING,
            status_time=datetime.now(),
        )
        return self.site_store.save(site)

    def _mark_failed(self, url: str, message: str) -> None:
        site = self.site_store.find_by_url(url)
        if site is None:
            return
        site.status = SiteStatus.FAILED
        site.last_error = message
        site.status_time = datetime.now()
        self.site_store.save(site)
