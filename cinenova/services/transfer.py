from __future__ import annotations

import logging
from typing import AsyncIterator, Optional, Tuple

import httpx

from cinenova.errors import ProxyTransferFailure
from cinenova.models import AvailabilityDescriptor
from cinenova.utils import display_name

log = logging.getLogger("cinenova.transfer")

STREAM_HEADERS = {
    'Content-Disposition': 'inline',
    'Cache-Control': 'no-cache',
    'Accept-Ranges': 'bytes',
}


def is_remote(url: str) -> bool:
    return bool(url) and url.lower().startswith(("http://", "https://"))


class ProxiedDownload:
    """An upstream response that has been opened but not read yet."""

    def __init__(self, client: httpx.AsyncClient, response: httpx.Response, filename: str) -> None:
        self._client = client
        self._response = response
        self.filename = filename
        self.bytes_sent = 0

    @property
    def content_length(self) -> Optional[str]:
        return self._response.headers.get("content-length")

    @property
    def media_type(self) -> str:
        return self._response.headers.get("content-type") or "video/mp4"

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._response.aiter_bytes():
                self.bytes_sent += len(chunk)
                yield chunk
        except httpx.HTTPError as exc:
            # Headers are already sent, the client sees a truncated file
            log.warning("Download of %s interrupted after %d bytes: %s", self.filename, self.bytes_sent, exc)
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        await self._response.aclose()
        await self._client.aclose()


class TransferService:
    """Play and download payloads for titles in the availability table.

    Local references get a simulated payload; remote references are proxied
    byte-for-byte from the external source. Nothing here is cached or retried.
    """

    def __init__(self, timeout: float = 30.0, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.timeout = timeout
        self._transport = transport

    def stream_payload(self, slug: str) -> bytes:
        message = (
            f"🎬 Streaming {display_name(slug)} - Full Movie\n\n"
            "This is a simulated video stream.\n"
            "In production, actual movie files would stream here.\n\n"
            "Enjoy your movie! 🍿"
        )
        return message.encode("utf-8")

    def download_payload(self, slug: str) -> Tuple[str, bytes]:
        filename = f"{slug}-full-movie-1080p.mp4"
        content = (
            f"This is a simulated download of {display_name(slug)} movie file.\n\n"
            f"File: {filename}\n"
            "Quality: 1080p HD\n"
            "Size: 1.8GB\n"
            "Format: MP4\n\n"
            "Download complete! ✅"
        )
        return filename, content.encode("utf-8")

    async def open_download(self, descriptor: AvailabilityDescriptor) -> ProxiedDownload:
        url = descriptor.download_url
        if not is_remote(url):
            raise ProxyTransferFailure(f"{descriptor.title} has no remote download source")
        client = httpx.AsyncClient(follow_redirects=True, timeout=self.timeout, transport=self._transport)
        try:
            response = await client.send(client.build_request("GET", url), stream=True)
        except httpx.HTTPError as exc:
            await client.aclose()
            raise ProxyTransferFailure(f"Download failed: {str(exc) or exc.__class__.__name__}") from exc
        if response.status_code >= 400:
            await response.aclose()
            await client.aclose()
            raise ProxyTransferFailure(f"Download failed: source returned HTTP {response.status_code}")
        log.info("Proxying download of %s from %s", descriptor.id, url)
        return ProxiedDownload(client, response, descriptor.download_filename)
