# site_indexer/crawler/observer.py
"""
Observability hooks for the site crawler.

The traversal reports what happens to each URL through a :class:`CrawlObserver`
instead of logging inline. :class:`LoggingObserver` is the default and writes
every event to the project logger.
"""
from __future__ import annotations

import logging
from typing import Optional

from site_indexer.logger import get_logger


class CrawlObserver:
    """No-op base; subclasses override the hooks they care about."""

    def claimed(self, url: str, depth: int) -> None:
        pass

    def persisted(self, url: str, path: str, code: int) -> None:
        pass

    def skipped(self, url: str, reason: str) -> None:
        pass

    def errored(self, url: str, reason: str) -> None:
        pass

    def heartbeat_failed(self, site_url: str, exc: BaseException) -> None:
        pass


class LoggingObserver(CrawlObserver):
    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or get_logger("crawler")

    def claimed(self, url: str, depth: int) -> None:
        self.logger.debug("Claimed %s (depth %d)", url, depth)

    def persisted(self, url: str, path: str, code: int) -> None:
        self.logger.info("Saved page %s -> %s (code %d)", url, path, code)

    def skipped(self, url: str, reason: str) -> None:
        self.logger.debug("Skipped %s: %s", url, reason)

    def errored(self, url: str, reason: str) -> None:
        self.logger.error("Error processing %s: %s", url, reason)

    def heartbeat_failed(self, site_url: str, exc: BaseException) -> None:
        self.logger.error("Failed to refresh status_time for %s: %s", site_url, exc)


__all__ = ["CrawlObserver", "LoggingObserver"]
