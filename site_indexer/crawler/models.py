# site_indexer/crawler/models.py
"""
Data models for the site crawler: fetch results, fetch errors and crawl counters.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

NOT_FOUND_STATUSES = (404, 410)


class FetchErrorKind(str, Enum):
    TIMEOUT = "timeout"
    CONNECTION_FAILED = "connection_failed"
    HTTP_STATUS = "http_status"
    OTHER = "other"


class FetchError(Exception):
    """A retrieval that produced no usable response, with a structured kind."""

    def __init__(
        self,
        kind: FetchErrorKind,
        reason: str,
        *,
        url: str = "",
        status: Optional[int] = None,
    ) -> None:
        super().__init__(reason)
        self.kind = kind
        self.reason = reason
        self.url = url
        self.status = status

    @property
    def is_not_found(self) -> bool:
        return self.kind is FetchErrorKind.HTTP_STATUS and self.status in NOT_FOUND_STATUSES

    @property
    def code(self) -> int:
        """Status code recorded on the error page."""
        if self.kind is FetchErrorKind.HTTP_STATUS and self.status is not None:
            return self.status
        return 500


@dataclass(slots=True)
class FetchResponse:
    """Result of one GET after redirects: status, media type, final URL and body."""

    status_code: int
    content_type: Optional[str]
    final_url: str
    body: bytes
    charset: Optional[str] = None

    @property
    def media_type(self) -> str:
        """Content type without parameters, lower-cased; ``""`` when missing."""
        if not self.content_type:
            return ""
        return self.content_type.split(";", 1)[0].strip().lower()

    @property
    def text(self) -> str:
        try:
            return self.body.decode(self.charset or "utf-8", errors="replace")
        except LookupError:
            # unknown charset name in the header
            return self.body.decode("utf-8", errors="replace")

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise FetchError(
                FetchErrorKind.HTTP_STATUS,
                f"HTTP error fetching URL. Status={self.status_code}, URL={self.final_url}",
                url=self.final_url,
                status=self.status_code,
            )


@dataclass(slots=True)
class CrawlStats:
    """Counters of one site crawl.

    ``claimed`` counts every canonical URL admitted into the frontier
    (including skipped and errored ones); ``persisted`` counts stored pages.
    """

    claimed: int = 0
    persisted: int = 0
    errors: int = 0
    skipped: int = 0
