"""Entry point for the FastAPI-powered Stremio addon."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any
from urllib.parse import parse_qs, unquote

import httpx
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .models import parse_meta_id
from .services.addon import AddonService

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

SUPPORTED_TYPES = {"movie"}

app: FastAPI


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            timeout=httpx.Timeout(settings.request_timeout, connect=10.0),
        )
    )
    service = AddonService.from_http_client(settings, http_client)
    fastapi_app.state.addon_service = service
    if not await service.start():
        logger.error("Failed to discover catalogs; the manifest will be empty")

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Bhojpuri movies from bhojpuriraas.net for Stremio",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def get_addon_service(app: FastAPI) -> AddonService:
    service = getattr(app.state, "addon_service", None)
    if not isinstance(service, AddonService):
        raise RuntimeError("Addon service not initialised")
    return service


def _parse_extra(raw_extra: str) -> dict[str, str]:
    """Parse Stremio's ``key=value&key=value`` extra path segment."""

    if not raw_extra:
        return {}
    parsed = parse_qs(unquote(raw_extra), keep_blank_values=True)
    return {key: values[-1] for key, values in parsed.items() if values}


def _require_type(content_type: str) -> None:
    if content_type not in SUPPORTED_TYPES:
        raise HTTPException(status_code=400, detail="Unsupported content type")


def register_routes(fastapi_app: FastAPI) -> None:
    async def _catalog_endpoint(
        content_type: str, catalog_id: str, extra: dict[str, str]
    ) -> dict[str, Any]:
        _require_type(content_type)
        service = get_addon_service(fastapi_app)
        logger.info("Request for catalog: %s %s %s", content_type, catalog_id, extra)
        records = await service.list_items(catalog_id, extra.get("search"))
        return {"metas": [record.to_meta() for record in records]}

    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/manifest.json")
    async def manifest() -> dict[str, Any]:
        return get_addon_service(fastapi_app).manifest()

    @fastapi_app.get("/catalog/{content_type}/{catalog_id}.json")
    async def catalog(content_type: str, catalog_id: str) -> dict[str, Any]:
        return await _catalog_endpoint(content_type, catalog_id, {})

    @fastapi_app.get("/catalog/{content_type}/{catalog_id}/{extra}.json")
    async def catalog_with_extra(
        content_type: str, catalog_id: str, extra: str
    ) -> dict[str, Any]:
        return await _catalog_endpoint(content_type, catalog_id, _parse_extra(extra))

    @fastapi_app.get("/meta/{content_type}/{meta_id}.json")
    async def meta(content_type: str, meta_id: str) -> dict[str, Any]:
        _require_type(content_type)
        logger.info("Request for meta: %s %s", content_type, meta_id)
        item_id = parse_meta_id(meta_id)
        if item_id is None:
            return {"meta": None}
        record = await get_addon_service(fastapi_app).get_item_meta(item_id)
        return {"meta": record.to_meta() if record else None}

    @fastapi_app.get("/stream/{content_type}/{meta_id}.json")
    async def stream(content_type: str, meta_id: str) -> dict[str, Any]:
        _require_type(content_type)
        logger.info("Request for stream: %s %s", content_type, meta_id)
        item_id = parse_meta_id(meta_id)
        if item_id is None:
            return {"streams": []}
        service = get_addon_service(fastapi_app)
        candidates = await service.get_streams(item_id)
        record = service.cache.get_record(item_id)
        title = record.title if record else None
        return {
            "streams": [
                candidate.to_stream(meta_id, title) for candidate in candidates
            ]
        }


app = create_app()


def main() -> None:
    """Serve the add-on with uvicorn on the configured host and port."""

    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
        reload=settings.environment == "development",
    )


if __name__ == "__main__":  # pragma: no cover - manual execution
    main()
