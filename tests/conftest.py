# File: tests/conftest.py
from __future__ import annotations

from datetime import datetime
from typing import Awaitable, Callable, Dict, Union

import pytest
import pytest_asyncio
from aiohttp import web

from site_indexer.crawler.models import FetchResponse
from site_indexer.models import Site, SiteStatus
from site_indexer.storage.memory import MemoryPageStore, MemorySiteStore


@pytest.fixture()
def site_store() -> MemorySiteStore:
    return MemorySiteStore()


@pytest.fixture()
def page_store() -> MemoryPageStore:
    return MemoryPageStore()


@pytest.fixture()
def make_site(site_store) -> Callable[[str], Site]:
    """Save and return a fresh INDEXING site for *url*."""

    def _make(url: str, name: str = "Test site") -> Site:
        site = Site(url=url, name=name, status=SiteStatus.INDEXING, status_time=datetime.now())
        return site_store.save(site)

    return _make


@pytest_asyncio.fixture
async def serve(unused_tcp_port_factory) -> Callable[[web.Application], Awaitable[str]]:
    """
    Start aiohttp applications on free local ports; yields a starter that
    returns the base URL (without trailing slash). All runners are cleaned up.
    """
    runners = []

    async def _start(app: web.Application) -> str:
        port = unused_tcp_port_factory()
        runner = web.AppRunner(app)
        await runner.setup()
        site = web.TCPSite(runner, "127.0.0.1", port)
        await site.start()
        runners.append(runner)
        return f"http://127.0.0.1:{port}"

    yield _start

    for runner in runners:
        await runner.cleanup()


def html(body: str) -> web.Response:
    return web.Response(text=f"<html><body>{body}</body></html>", content_type="text/html")


class FakeFetcher:
    """In-memory stand-in for :class:`Fetcher` serving canned responses by URL."""

    def __init__(self, routes: Dict[str, Union[FetchResponse, Exception]]) -> None:
        self.routes = routes
        self.calls: list[str] = []

    async def __aenter__(self) -> "FakeFetcher":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def fetch(self, url: str) -> FetchResponse:
        self.calls.append(url)
        outcome = self.routes.get(url)
        if outcome is None:
            return FetchResponse(404, "text/html", url, b"")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def page(url: str, body: str, content_type: str = "text/html; charset=utf-8") -> FetchResponse:
    return FetchResponse(200, content_type, url, body.encode("utf-8"), charset="utf-8")
