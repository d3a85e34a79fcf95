from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from cinenova.constants import no_cache_headers
from cinenova.dependencies import get_catalog
from cinenova.services.catalog import CatalogService, select_featured
from cinenova.templating import templates
from cinenova.utils import parse_page

router = APIRouter()


@router.get('/', response_class=HTMLResponse)
async def home(request: Request, catalog: CatalogService = Depends(get_catalog)):
    movies = await catalog.list_trending()
    featured, others = select_featured(movies)
    context = {
        "featured": featured,
        "movies": others,
        "available_count": catalog.available_count,
    }
    return templates.TemplateResponse(request, "index.html", context, headers=no_cache_headers)


@router.get('/search', response_class=HTMLResponse)
async def search_page(
    request: Request,
    q: Optional[str] = None,
    page: Optional[str] = None,
    catalog: CatalogService = Depends(get_catalog),
):
    if not q or not q.strip():
        return RedirectResponse('/', status_code=302)
    page_number = parse_page(page)
    result = await catalog.search_page(q, page_number)
    context = {
        "query": q,
        "page": result.page,
        "total": result.total_results,
        "has_next": result.has_next,
        "movies": result.results,
        "downloadable": sum(1 for m in result.results if m.can_download),
        "show_unavailable": True,
    }
    return templates.TemplateResponse(request, "search.html", context, headers=no_cache_headers)


@router.get('/movie/{movie_id}', response_class=HTMLResponse)
async def movie_page(request: Request, movie_id: str, catalog: CatalogService = Depends(get_catalog)):
    movie = await catalog.get_details(movie_id)
    if movie is None:
        return templates.TemplateResponse(
            request,
            "error.html",
            {"heading": "Movie not found", "message": f"No movie with id {movie_id}."},
            status_code=404,
            headers=no_cache_headers,
        )
    context = {"movie": movie, "sources": catalog.video_sources(movie.id)}
    return templates.TemplateResponse(request, "movie.html", context, headers=no_cache_headers)
