from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from cinenova.errors import NotFound, UpstreamUnavailable
from cinenova.models import MetadataRecord

log = logging.getLogger("cinenova.providers")


class MetadataProvider:
    """Single-attempt HTTP client for a remote movie-metadata API.

    Subclasses implement the three lookups and the two pure parsers that turn
    the provider's native payloads into MetadataRecord values. Every transport
    problem, non-2xx status, malformed body or provider failure flag surfaces
    as UpstreamUnavailable; an explicit "no such title" surfaces as NotFound.
    """

    name = "provider"

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self._client = client

    async def trending(self) -> Dict[str, Any]:
        raise NotImplementedError

    async def search(self, query: str, page: int = 1) -> Dict[str, Any]:
        raise NotImplementedError

    async def fetch_by_id(self, id: str) -> Dict[str, Any]:
        raise NotImplementedError

    def parse_listing(self, payload: Dict[str, Any]) -> List[MetadataRecord]:
        raise NotImplementedError

    def parse_detail(self, payload: Dict[str, Any]) -> MetadataRecord:
        raise NotImplementedError

    def parse_totals(self, payload: Dict[str, Any]) -> Tuple[Optional[int], Optional[int]]:
        """Total result and page counts of a search payload, None where unknown."""
        return None, None

    async def _get_json(self, url: str, params: Dict[str, Any], not_found_key: Optional[str] = None) -> Dict[str, Any]:
        try:
            if self._client is not None:
                response = await self._client.get(url, params=params, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(follow_redirects=True, timeout=self.timeout) as client:
                    response = await client.get(url, params=params)
        except httpx.TimeoutException as exc:
            raise UpstreamUnavailable(self.name, "request timed out") from exc
        except httpx.HTTPError as exc:
            raise UpstreamUnavailable(self.name, str(exc) or exc.__class__.__name__) from exc

        if response.status_code == 404 and not_found_key is not None:
            raise NotFound(self.name, not_found_key)
        if response.status_code >= 400:
            raise UpstreamUnavailable(self.name, f"HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamUnavailable(self.name, "response is not valid JSON") from exc
        if not isinstance(payload, dict):
            raise UpstreamUnavailable(self.name, "response is not a JSON object")
        return payload

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
