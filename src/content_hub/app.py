"""ASGI application.

Routes:
    /health               liveness plus index and cache state
    /metrics              Prometheus exposition
    /api/search           ranked full-text search
    /api/search/recent    newest index entries
    /api/related          related items for a document URL
    /api/sections         one named section (or all sections and the TOC)
    /api/content          filtered, paged listing with facet counts

Usage:
    uvicorn --factory content_hub.app:create_app
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
import logging

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from content_hub.config import Settings
from content_hub.content.listing import DEFAULT_PAGE_SIZE, paginate
from content_hub.content.sections import extract_headings, pick_section
from content_hub.observability.metrics import get_metrics, get_metrics_content_type, init_metrics
from content_hub.observability.tracing import TraceContextMiddleware
from content_hub.service_layer.search_service import SearchService
from content_hub.services.cache_service import ContentStore
from content_hub.services.related_service import RelatedScorer, RelatedService


logger = logging.getLogger(__name__)


class BadRequest(ValueError):
    """Invalid query parameter; rendered as a 400 response."""


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"success": False, "message": message}, status_code=status_code)


def _int_param(request: Request, name: str) -> int | None:
    raw_value = request.query_params.get(name)
    if raw_value is None or raw_value.strip() == "":
        return None
    try:
        return int(raw_value)
    except ValueError as exc:
        raise BadRequest(f"Invalid {name}") from exc


def _required_param(request: Request, name: str) -> str:
    value = (request.query_params.get(name) or "").strip()
    if not value:
        raise BadRequest(f"Missing {name}")
    return value


def _list_param(request: Request, name: str) -> list[str]:
    raw_value = request.query_params.get(name) or ""
    return [part.strip() for part in raw_value.split(",") if part.strip()]


async def health_endpoint(request: Request) -> JSONResponse:
    search_service: SearchService = request.app.state.search_service
    store: ContentStore = request.app.state.store
    index = await search_service.get_index()
    return JSONResponse(
        {
            "status": "healthy" if len(index) else "degraded",
            "index_documents": len(index),
            "content_root": str(store.root),
            "caches": store.cache_metrics(),
        }
    )


async def metrics_endpoint(_: Request) -> Response:
    return Response(content=get_metrics(), media_type=get_metrics_content_type())


async def search_endpoint(request: Request) -> JSONResponse:
    try:
        limit = _int_param(request, "limit")
    except BadRequest as exc:
        return _error(str(exc), 400)
    query = request.query_params.get("q", "")
    types = _list_param(request, "types") or None
    response = await request.app.state.search_service.search(query, types=types, limit=limit)
    return JSONResponse(response.to_payload())


async def recent_endpoint(request: Request) -> JSONResponse:
    try:
        limit = _int_param(request, "limit")
    except BadRequest as exc:
        return _error(str(exc), 400)
    types = _list_param(request, "types") or None
    response = await request.app.state.search_service.recent(types=types, limit=limit)
    return JSONResponse(response.to_payload())


async def related_endpoint(request: Request) -> JSONResponse:
    try:
        url = _required_param(request, "url")
        limit = _int_param(request, "limit")
    except BadRequest as exc:
        return _error(str(exc), 400)
    if limit is not None and limit < 1:
        return _error("Invalid limit", 400)

    related_service: RelatedService = request.app.state.related_service
    items = await asyncio.to_thread(related_service.related_for_url, url, limit)
    if items is None:
        return _error("Document not found", 404)
    return JSONResponse({"url": url, "count": len(items), "items": [item.to_payload() for item in items]})


async def sections_endpoint(request: Request) -> JSONResponse:
    try:
        url = _required_param(request, "url")
    except BadRequest as exc:
        return _error(str(exc), 400)
    keys = _list_param(request, "keys")
    store: ContentStore = request.app.state.store

    def lookup():
        document = store.get(url)
        if document is None:
            return None, {}
        return document, store.sections_for(document)

    document, sections = await asyncio.to_thread(lookup)
    if document is None:
        return _error("Document not found", 404)

    if keys:
        section = pick_section(sections, keys)
        if section is None:
            return _error("Section not found", 404)
        return JSONResponse(
            {"url": document.url, "key": section.key, "title": section.title, "markdown": section.markdown}
        )

    return JSONResponse(
        {
            "url": document.url,
            "sections": [{"key": s.key, "title": s.title} for s in sections.values()],
            "toc": [{"level": h.level, "text": h.text, "anchor": h.anchor} for h in extract_headings(document.body)],
        }
    )


async def content_endpoint(request: Request) -> JSONResponse:
    params = request.query_params
    store: ContentStore = request.app.state.store
    try:
        page = _int_param(request, "page")
        page_size = _int_param(request, "page_size")
        if page_size is None:
            page_size = _int_param(request, "pageSize")
        page = 1 if page is None else page
        page_size = DEFAULT_PAGE_SIZE if page_size is None else page_size
        if page < 1 or page_size < 1:
            raise BadRequest("Invalid page or page_size")
        subtree = params.get("subtree") or None

        def listing():
            documents = store.documents(
                subtree,
                doc_type=params.get("type") or None,
                country=params.get("country") or None,
                program=params.get("program") or None,
                tag=params.get("tag") or None,
                query=params.get("q") or None,
            )
            return paginate(documents, page, page_size), store.facets(subtree)

        listing_page, facets = await asyncio.to_thread(listing)
    except BadRequest as exc:
        return _error(str(exc), 400)
    except ValueError as exc:
        return _error(str(exc), 404)

    items = [
        {
            "id": document.id,
            "url": document.url,
            "type": document.doc_type,
            "title": document.title,
            "date": document.created,
            "updated": document.updated,
        }
        for document in listing_page.items
    ]
    return JSONResponse(
        {
            "count": len(items),
            "total": listing_page.total,
            "page": listing_page.page,
            "pageSize": listing_page.page_size,
            "items": items,
            "facets": facets.model_dump(),
        }
    )


def create_app(
    settings: Settings | None = None,
    store: ContentStore | None = None,
    search_service: SearchService | None = None,
) -> Starlette:
    """Build the Starlette application.

    Args:
        settings: Runtime configuration; read from the environment when omitted
        store: Content store; built from ``settings`` when omitted
        search_service: Search service; built from ``settings`` when omitted

    Returns:
        Configured Starlette application
    """
    settings = settings or Settings()
    store = store or ContentStore.from_settings(settings)
    search_service = search_service or SearchService.from_settings(settings)
    related_service = RelatedService(store, RelatedScorer(), default_limit=settings.related_limit)

    init_metrics(service_name="content-hub")

    @asynccontextmanager
    async def lifespan(_: Starlette):
        await search_service.warm_index()
        logger.info("content-hub ready (content_root=%s, index=%s)", store.root, search_service.index_path)
        yield

    routes = [
        Route("/health", endpoint=health_endpoint, methods=["GET"]),
        Route("/metrics", endpoint=metrics_endpoint, methods=["GET"]),
        Route("/api/search", endpoint=search_endpoint, methods=["GET"]),
        Route("/api/search/recent", endpoint=recent_endpoint, methods=["GET"]),
        Route("/api/related", endpoint=related_endpoint, methods=["GET"]),
        Route("/api/sections", endpoint=sections_endpoint, methods=["GET"]),
        Route("/api/content", endpoint=content_endpoint, methods=["GET"]),
    ]
    app = Starlette(routes=routes, lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.search_service = search_service
    app.state.related_service = related_service
    app.add_middleware(TraceContextMiddleware)
    return app
