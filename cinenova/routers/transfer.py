from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import RedirectResponse, StreamingResponse

from cinenova.dependencies import get_catalog, get_transfer
from cinenova.errors import ProxyTransferFailure
from cinenova.logger import logger
from cinenova.services.catalog import CatalogService
from cinenova.services.transfer import STREAM_HEADERS, TransferService, is_remote
from cinenova.templating import templates

router = APIRouter()


@router.get('/api/stream/{slug}')
async def stream(slug: str, transfer: TransferService = Depends(get_transfer)):
    return Response(content=transfer.stream_payload(slug), media_type='video/mp4', headers=STREAM_HEADERS)


@router.get('/api/download/{slug}')
async def simulated_download(slug: str, transfer: TransferService = Depends(get_transfer)):
    filename, content = transfer.download_payload(slug)
    headers = {
        'Content-Disposition': f'attachment; filename="{filename}"',
        'Cache-Control': 'no-cache',
    }
    return Response(content=content, media_type='video/mp4', headers=headers)


def _download_failed(request: Request, message: str, status_code: int):
    return templates.TemplateResponse(
        request,
        "error.html",
        {"heading": "Download Failed", "message": message},
        status_code=status_code,
    )


@router.get('/download/{movie_id}', response_model=None)
async def download(
    request: Request,
    movie_id: str,
    catalog: CatalogService = Depends(get_catalog),
    transfer: TransferService = Depends(get_transfer),
):
    """Send the file behind a title's download reference.

    Remote references are proxy-streamed, local ones redirect to the
    simulated download endpoint.
    """
    descriptor = catalog.table.lookup(movie_id)
    if descriptor is None:
        return _download_failed(request, "Movie not available for download", 404)
    if not is_remote(descriptor.download_url):
        return RedirectResponse(descriptor.download_url, status_code=302)

    try:
        proxied = await transfer.open_download(descriptor)
    except ProxyTransferFailure as exc:
        logger.warning("Download of %s failed: %s", movie_id, exc)
        return _download_failed(request, str(exc), 502)

    headers = {'Content-Disposition': f'attachment; filename="{proxied.filename}"'}
    if proxied.content_length:
        headers['Content-Length'] = proxied.content_length
    return StreamingResponse(proxied.iter_bytes(), media_type='video/mp4', headers=headers)
