# File: tests/test_web.py
import asyncio

import pytest
from aiohttp.test_utils import TestClient, TestServer

from conftest import FakeFetcher, page
from site_indexer.config import IndexerConfig, SiteConfig
from site_indexer.engine import IndexingService
from site_indexer.models import SiteStatus
from site_indexer.web import create_app

ROOT = "http://site.test"


@pytest.fixture()
def service(site_store, page_store) -> IndexingService:
    config = IndexerConfig(sites=[SiteConfig(name="Site", url=ROOT)], concurrency=2)
    fetcher = FakeFetcher({ROOT: page(f"{ROOT}/", "<h1>Hello</h1>")})
    return IndexingService(config, site_store, page_store, fetcher_factory=lambda cfg: fetcher)


@pytest.mark.asyncio()
async def test_start_indexing_endpoint(service, site_store):
    async with TestClient(TestServer(create_app(service))) as client:
        resp = await client.get("/api/startIndexing")
        assert resp.status == 200
        assert await resp.json() == {"result": True}
        await asyncio.wait_for(service._task, timeout=5)

    assert site_store.find_by_url(ROOT).status is SiteStatus.INDEXED
    assert not service.is_indexing()


@pytest.mark.asyncio()
async def test_start_indexing_rejected_while_running(service):
    service.start_indexing()
    async with TestClient(TestServer(create_app(service))) as client:
        resp = await client.get("/api/startIndexing")
        assert resp.status == 400
        body = await resp.json()
    assert body["result"] is False
    assert "already running" in body["error"]


@pytest.mark.asyncio()
async def test_indexing_status_endpoint(service):
    async with TestClient(TestServer(create_app(service))) as client:
        resp = await client.get("/api/indexing")
        assert await resp.json() == {"indexing": False}
        service.start_indexing()
        resp = await client.get("/api/indexing")
        assert await resp.json() == {"indexing": True}
