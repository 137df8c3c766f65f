# File: site_indexer/web.py
"""site_indexer.web: тонкий HTTP-интерфейс (aiohttp) для запуска индексации."""

from __future__ import annotations

from aiohttp import web

from site_indexer.engine import IndexingService
from site_indexer.logger import get_logger

logger = get_logger("web")

SERVICE_KEY = web.AppKey("indexing_service", IndexingService)


async def start_indexing(request: web.Request) -> web.Response:
    """GET /api/startIndexing: запускает индексацию в фоне."""
    service = request.app[SERVICE_KEY]
    if service.is_indexing():
        return web.json_response({"result": False, "error": "Indexing is already running"}, status=400)
    if not service.start_indexing():
        return web.json_response({"result": False, "error": "Failed to start indexing"}, status=400)
    service.launch()
    logger.info("Indexing triggered via HTTP from %s", request.remote)
    return web.json_response({"result": True})


async def indexing_status(request: web.Request) -> web.Response:
    """GET /api/indexing: идёт ли сейчас индексация."""
    service = request.app[SERVICE_KEY]
    return web.json_response({"indexing": service.is_indexing()})


def create_app(service: IndexingService) -> web.Application:
    app = web.Application()
    app[SERVICE_KEY] = service
    app.router.add_get("/api/startIndexing", start_indexing)
    app.router.add_get("/api/indexing", indexing_status)
    return app


__all__ = ["create_app", "SERVICE_KEY"]
