# site_indexer/crawler/fetcher.py
"""
Fetcher module: one HTTP(S) GET per call with a bounded timeout and redirects.

No crawl logic lives here. HTTP error statuses are returned as ordinary
responses; only transport failures raise :class:`FetchError`.
"""
from __future__ import annotations

import asyncio
from typing import Optional

from aiohttp import (
    ClientConnectionError,
    ClientConnectorError,
    ClientError,
    ClientSession,
    ClientTimeout,
    InvalidURL,
)
from site_indexer.config import FETCH_TIMEOUT
from site_indexer.crawler.models import FetchError, FetchErrorKind, FetchResponse


class Fetcher:
    """Owns one :class:`aiohttp.ClientSession`; use as ``async with Fetcher(...)``."""

    def __init__(
        self,
        timeout: float = FETCH_TIMEOUT,
        user_agent: str = "SiteIndexerBot/1.0",
        max_redirects: int = 10,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self.max_redirects = max_redirects
        self.session: Optional[ClientSession] = None

    @classmethod
    def from_config(cls, config) -> Fetcher:
        return cls(timeout=config.timeout, user_agent=config.user_agent)

    async def __aenter__(self) -> Fetcher:
        self.session = ClientSession(
            timeout=ClientTimeout(total=self.timeout),
            headers={"User-Agent": self.user_agent},
            raise_for_status=False,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def fetch(self, url: str) -> FetchResponse:
        """
        GET *url*, following redirects, accepting any content type.

        Raises :class:`FetchError` on timeout, connection failure, malformed
        response or unresolvable host.
        """
        if not self.session:
            raise RuntimeError("Session not initialized")
        try:
            async with self.session.get(
                url, allow_redirects=True, max_redirects=self.max_redirects
            ) as resp:
                body = await resp.read()
                return FetchResponse(
                    status_code=resp.status,
                    content_type=resp.headers.get("Content-Type"),
                    final_url=str(resp.url),
                    body=body,
                    charset=resp.charset,
                )
        except asyncio.TimeoutError as exc:
            raise FetchError(
                FetchErrorKind.TIMEOUT, f"Read timed out after {self.timeout:g} s", url=url
            ) from exc
        except ClientConnectorError as exc:
            raise FetchError(FetchErrorKind.CONNECTION_FAILED, str(exc), url=url) from exc
        except InvalidURL as exc:
            raise FetchError(FetchErrorKind.OTHER, f"Invalid URL: {exc}", url=url) from exc
        except ClientConnectionError as exc:
            raise FetchError(
                FetchErrorKind.CONNECTION_FAILED, str(exc) or type(exc).__name__, url=url
            ) from exc
        except ClientError as exc:
            raise FetchError(FetchErrorKind.OTHER, str(exc) or type(exc).__name__, url=url) from exc


__all__ = ["Fetcher"]
