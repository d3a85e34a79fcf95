from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import Optional
import time
import uuid

import httpx

from cinenova.settings import Settings, settings as default_settings
from cinenova.logger import REQUEST_ID, logger, setup_logging
from cinenova.constants import no_cache_headers
from cinenova.services.catalog import CatalogService, build_catalog_service
from cinenova.services.transfer import TransferService

from cinenova.routers import api, dashboard, pages, transfer


def create_app(
    settings: Optional[Settings] = None,
    catalog: Optional[CatalogService] = None,
    transfer_service: Optional[TransferService] = None,
) -> FastAPI:
    settings = settings or default_settings
    setup_logging(settings.log_level, settings.json_logs)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info('Started with %s metadata provider', app.state.catalog.provider.name)
        yield
        logger.info('Shutdown')
        # Closes the provider's shared httpx client
        await app.state.catalog.aclose()

    app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)
    app.state.settings = settings
    if catalog is None:
        http_client = httpx.AsyncClient(follow_redirects=True, timeout=settings.request_timeout)
        catalog = build_catalog_service(settings, client=http_client)
    app.state.catalog = catalog
    app.state.transfer = transfer_service or TransferService(timeout=max(settings.request_timeout, 30.0))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def access_log(request: Request, call_next):
        token = REQUEST_ID.set(request.headers.get("x-request-id") or uuid.uuid4().hex[:12])
        start = time.perf_counter()
        try:
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.info('%s %s %s %.1fms', request.method, request.url.path, response.status_code, elapsed_ms)
            response.headers['X-Request-ID'] = REQUEST_ID.get()
            return response
        finally:
            REQUEST_ID.reset(token)

    # Include Routers
    app.include_router(pages.router)
    app.include_router(api.router)
    app.include_router(transfer.router)
    app.include_router(dashboard.router)

    # Health check
    @app.get('/healthz')
    async def healthz():
        return JSONResponse(content={"status": "ok"}, headers=no_cache_headers)

    # Lightweight wake endpoint
    @app.get('/wake')
    async def wake():
        return JSONResponse(content={"status": "awake"}, headers=no_cache_headers)

    return app


app = create_app()
