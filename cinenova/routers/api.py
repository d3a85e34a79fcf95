from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from cinenova.constants import no_cache_headers
from cinenova.dependencies import get_catalog
from cinenova.models import SearchPage
from cinenova.services.catalog import CatalogService
from cinenova.utils import parse_page

router = APIRouter(prefix='/api')


@router.get('/trending')
async def trending(catalog: CatalogService = Depends(get_catalog)):
    movies = await catalog.list_trending()
    return JSONResponse(content={"results": [m.to_dict() for m in movies]}, headers=no_cache_headers)


@router.get('/search')
async def search(q: Optional[str] = None, page: Optional[str] = None, catalog: CatalogService = Depends(get_catalog)):
    page_number = parse_page(page)
    if not q or not q.strip():
        result = SearchPage(page=page_number)
    else:
        result = await catalog.search_page(q, page_number)
    content = {
        "query": q or "",
        "page": result.page,
        "total": result.total_results,
        "total_pages": result.total_pages,
        "results": [m.to_dict() for m in result.results],
    }
    return JSONResponse(content=content, headers=no_cache_headers)


@router.get('/movie/{movie_id}')
async def movie(movie_id: str, catalog: CatalogService = Depends(get_catalog)):
    record = await catalog.get_details(movie_id)
    if record is None:
        return JSONResponse(status_code=404, content={"error": "Movie not found"}, headers=no_cache_headers)
    return JSONResponse(content=record.to_dict(), headers=no_cache_headers)


@router.get('/play/{movie_id}')
async def play(movie_id: str, catalog: CatalogService = Depends(get_catalog)):
    record = await catalog.get_details(movie_id)
    if record is None:
        return JSONResponse(content={"sources": [], "movie": {}, "canDownload": False}, headers=no_cache_headers)
    content = {
        "sources": catalog.video_sources(record.id),
        "movie": record.to_dict(),
        "canDownload": record.can_download,
    }
    return JSONResponse(content=content, headers=no_cache_headers)
