"""site_indexer.crawler: обход одного сайта: нормализация URL, загрузка, дедупликация."""

from .crawler import DOCUMENT_TYPES, SiteCrawler
from .fetcher import Fetcher
from .frontier import Frontier
from .models import CrawlStats, FetchError, FetchErrorKind, FetchResponse
from .observer import CrawlObserver, LoggingObserver

__all__ = [
    "SiteCrawler",
    "DOCUMENT_TYPES",
    "Fetcher",
    "Frontier",
    "CrawlStats",
    "FetchError",
    "FetchErrorKind",
    "FetchResponse",
    "CrawlObserver",
    "LoggingObserver",
]
