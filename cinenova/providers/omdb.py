from __future__ import annotations

import math
import random
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx

from cinenova.errors import NotFound, UpstreamUnavailable
from cinenova.models import MetadataRecord
from cinenova.providers.base import MetadataProvider
from cinenova.utils import format_year, parse_count, parse_rating

DEFAULT_TRENDING_QUERIES = ('avengers', 'batman', 'superman', 'spiderman', 'iron man')

# OMDb search pages hold at most ten titles
OMDB_PAGE_SIZE = 10


def _is_movie_not_found(payload: Dict[str, Any]) -> bool:
    return payload.get("Response") == "False" and payload.get("Error") == "Movie not found!"


def _value(raw: Any) -> str:
    # OMDb uses the literal "N/A" for missing fields
    if raw is None or raw == "N/A":
        return ""
    return str(raw)


class OMDbProvider(MetadataProvider):
    """OMDb client. OMDb has no trending endpoint, so trending is a proxy
    search for one of a fixed list of popular titles."""

    name = "omdb"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://www.omdbapi.com/",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
        trending_queries: Sequence[str] = DEFAULT_TRENDING_QUERIES,
        rng: Optional[random.Random] = None,
    ) -> None:
        super().__init__(api_key, base_url, timeout, client)
        self.trending_queries = tuple(trending_queries) or DEFAULT_TRENDING_QUERIES
        self._rng = rng or random.Random()

    async def trending(self) -> Dict[str, Any]:
        return await self.search(self._rng.choice(self.trending_queries))

    async def search(self, query: str, page: int = 1) -> Dict[str, Any]:
        params = {"apikey": self.api_key, "s": query, "page": page, "type": "movie"}
        payload = await self._get_json(self.base_url, params)
        self._check(payload, query)
        return payload

    async def fetch_by_id(self, id: str) -> Dict[str, Any]:
        payload = await self._get_json(self.base_url, {"apikey": self.api_key, "i": id, "plot": "full"})
        self._check(payload, id)
        return payload

    def _check(self, payload: Dict[str, Any], key: str) -> None:
        if _is_movie_not_found(payload):
            raise NotFound(self.name, key)
        if payload.get("Response") != "True":
            raise UpstreamUnavailable(self.name, _value(payload.get("Error")) or "Response flag is not True")

    def _record(self, item: Dict[str, Any]) -> MetadataRecord:
        return MetadataRecord(
            id=str(item["imdbID"]),
            title=_value(item.get("Title")),
            year=format_year(item.get("Year")),
            rating=parse_rating(item.get("imdbRating")),
            overview=_value(item.get("Plot")),
            poster=_value(item.get("Poster")) or None,
            genre=_value(item.get("Genre")),
            runtime=_value(item.get("Runtime")),
            media_type=_value(item.get("Type")) or "movie",
        )

    def parse_listing(self, payload: Dict[str, Any]) -> List[MetadataRecord]:
        results = payload.get("Search")
        if not isinstance(results, list):
            raise UpstreamUnavailable(self.name, "listing has no Search list")
        return [self._record(item) for item in results if isinstance(item, dict) and item.get("imdbID")]

    def parse_detail(self, payload: Dict[str, Any]) -> MetadataRecord:
        if not payload.get("imdbID"):
            raise UpstreamUnavailable(self.name, "detail payload has no imdbID")
        return self._record(payload)

    def parse_totals(self, payload: Dict[str, Any]) -> Tuple[Optional[int], Optional[int]]:
        total = parse_count(payload.get("totalResults"))
        if total is None:
            return None, None
        return total, math.ceil(total / OMDB_PAGE_SIZE)
