from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from cinenova.constants import no_cache_headers
from cinenova.dependencies import get_catalog
from cinenova.services.catalog import CatalogService

router = APIRouter(prefix='/cache')


def _authorized(request: Request, password: str) -> bool:
    admin_password = request.app.state.settings.admin_password
    return bool(admin_password) and password == admin_password


@router.get('/stats')
async def cache_stats(request: Request, password: str = Query(...), catalog: CatalogService = Depends(get_catalog)):
    if not _authorized(request, password):
        return JSONResponse(status_code=401, content={"Error": "Access denied"}, headers=no_cache_headers)
    return JSONResponse(content=catalog.cache_stats(), headers=no_cache_headers)


@router.get('/clear')
async def clear_cache(request: Request, password: str = Query(...), catalog: CatalogService = Depends(get_catalog)):
    if not _authorized(request, password):
        return JSONResponse(status_code=401, content={"Error": "Access denied"}, headers=no_cache_headers)
    catalog.clear_cache()
    return JSONResponse(content={"status": "Cache cleared."}, headers=no_cache_headers)
