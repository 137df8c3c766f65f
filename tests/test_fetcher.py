# File: tests/test_fetcher.py
from __future__ import annotations

import asyncio

import pytest
from aiohttp import web

from conftest import html
from site_indexer.crawler.fetcher import Fetcher
from site_indexer.crawler.models import FetchError, FetchErrorKind, FetchResponse


# --------------------------------------------------------------------------- #
#                                  Models                                     #
# --------------------------------------------------------------------------- #


def test_media_type_strips_parameters():
    resp = FetchResponse(200, "Text/HTML; charset=windows-1251", "http://x/", b"")
    assert resp.media_type == "text/html"
    assert FetchResponse(200, None, "http://x/", b"").media_type == ""


def test_text_falls_back_on_unknown_charset():
    resp = FetchResponse(200, "text/html", "http://x/", "привет".encode(), charset="no-such-codec")
    assert resp.text == "привет"


@pytest.mark.parametrize("status,not_found,code", [(404, True, 404), (410, True, 410), (503, False, 503)])
def test_raise_for_status(status, not_found, code):
    resp = FetchResponse(status, "text/html", "http://x/page", b"")
    with pytest.raises(FetchError) as info:
        resp.raise_for_status()
    err = info.value
    assert err.kind is FetchErrorKind.HTTP_STATUS
    assert err.is_not_found is not_found
    assert err.code == code
    assert err.url == "http://x/page"


def test_raise_for_status_passes_success():
    FetchResponse(200, "text/html", "http://x/", b"").raise_for_status()


def test_transport_errors_are_recorded_as_500():
    err = FetchError(FetchErrorKind.TIMEOUT, "Read timed out")
    assert err.code == 500
    assert not err.is_not_found


# --------------------------------------------------------------------------- #
#                               Live fetches                                  #
# --------------------------------------------------------------------------- #


@pytest.fixture()
def app() -> web.Application:
    app = web.Application()

    async def root(_):
        return html("<h1>Root</h1>")

    async def moved(_):
        raise web.HTTPFound("/target")

    async def target(_):
        return html("<h1>Target</h1>")

    async def broken(_):
        return web.Response(status=503, text="unavailable")

    async def slow(_):
        await asyncio.sleep(1.5)
        return html("late")

    app.router.add_get("/", root)
    app.router.add_get("/moved", moved)
    app.router.add_get("/target", target)
    app.router.add_get("/broken", broken)
    app.router.add_get("/slow", slow)
    return app


@pytest.mark.asyncio()
async def test_fetch_text_page(serve, app):
    base = await serve(app)
    async with Fetcher(timeout=2.0) as fetcher:
        resp = await fetcher.fetch(base)
    assert resp.status_code == 200
    assert resp.media_type == "text/html"
    assert "<h1>Root</h1>" in resp.text


@pytest.mark.asyncio()
async def test_fetch_follows_redirects(serve, app):
    base = await serve(app)
    async with Fetcher(timeout=2.0) as fetcher:
        resp = await fetcher.fetch(f"{base}/moved")
    assert resp.status_code == 200
    assert resp.final_url == f"{base}/target"


@pytest.mark.asyncio()
async def test_http_errors_are_responses(serve, app):
    base = await serve(app)
    async with Fetcher(timeout=2.0) as fetcher:
        missing = await fetcher.fetch(f"{base}/missing")
        broken = await fetcher.fetch(f"{base}/broken")
    assert missing.status_code == 404
    assert broken.status_code == 503


@pytest.mark.asyncio()
async def test_timeout_raises_fetch_error(serve, app):
    base = await serve(app)
    async with Fetcher(timeout=0.3) as fetcher:
        with pytest.raises(FetchError) as info:
            await fetcher.fetch(f"{base}/slow")
    assert info.value.kind is FetchErrorKind.TIMEOUT
    assert info.value.code == 500


@pytest.mark.asyncio()
async def test_connection_refused_raises_fetch_error(unused_tcp_port):
    async with Fetcher(timeout=2.0) as fetcher:
        with pytest.raises(FetchError) as info:
            await fetcher.fetch(f"http://127.0.0.1:{unused_tcp_port}/")
    assert info.value.kind is FetchErrorKind.CONNECTION_FAILED
    assert info.value.reason


@pytest.mark.asyncio()
async def test_fetch_requires_session():
    with pytest.raises(RuntimeError):
        await Fetcher().fetch("http://127.0.0.1/")
