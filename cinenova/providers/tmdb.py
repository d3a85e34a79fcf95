from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import httpx

from cinenova.errors import UpstreamUnavailable
from cinenova.models import MetadataRecord
from cinenova.providers.base import MetadataProvider
from cinenova.utils import format_year, parse_count, parse_rating


def _format_runtime(minutes: Any) -> str:
    try:
        minutes = int(minutes)
    except (TypeError, ValueError):
        return ""
    if minutes <= 0:
        return ""
    hours, rest = divmod(minutes, 60)
    return f"{hours}h {rest}m" if hours else f"{rest}m"


class TMDBProvider(MetadataProvider):
    name = "tmdb"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.themoviedb.org/3",
        image_base: str = "https://image.tmdb.org/t/p/w500",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(api_key, base_url.rstrip("/"), timeout, client)
        self.image_base = image_base.rstrip("/")

    async def trending(self) -> Dict[str, Any]:
        return await self._get_json(f"{self.base_url}/trending/movie/week", {"api_key": self.api_key})

    async def search(self, query: str, page: int = 1) -> Dict[str, Any]:
        params = {"api_key": self.api_key, "query": query, "page": page, "include_adult": "false"}
        return await self._get_json(f"{self.base_url}/search/movie", params)

    async def fetch_by_id(self, id: str) -> Dict[str, Any]:
        return await self._get_json(f"{self.base_url}/movie/{id}", {"api_key": self.api_key}, not_found_key=id)

    def _image(self, path: Optional[str]) -> Optional[str]:
        if not path:
            return None
        return f"{self.image_base}/{path.lstrip('/')}"

    def _record(self, item: Dict[str, Any]) -> MetadataRecord:
        genres = item.get("genres") or []
        return MetadataRecord(
            id=str(item["id"]),
            title=item.get("title") or item.get("name") or "",
            year=format_year(item.get("release_date") or item.get("first_air_date")),
            rating=parse_rating(item.get("vote_average")),
            overview=item.get("overview") or "",
            poster=self._image(item.get("poster_path")),
            backdrop=self._image(item.get("backdrop_path")),
            genre=", ".join(g.get("name", "") for g in genres if isinstance(g, dict) and g.get("name")),
            runtime=_format_runtime(item.get("runtime")),
            media_type=item.get("media_type") or "movie",
        )

    def _check_failure_flag(self, payload: Dict[str, Any]) -> None:
        # TMDB error bodies carry success=false and a status_message
        if payload.get("success") is False:
            raise UpstreamUnavailable(self.name, payload.get("status_message") or "request failed")

    def parse_listing(self, payload: Dict[str, Any]) -> List[MetadataRecord]:
        self._check_failure_flag(payload)
        results = payload.get("results")
        if not isinstance(results, list):
            raise UpstreamUnavailable(self.name, "listing has no results list")
        return [self._record(item) for item in results if isinstance(item, dict) and item.get("id") is not None]

    def parse_detail(self, payload: Dict[str, Any]) -> MetadataRecord:
        self._check_failure_flag(payload)
        if payload.get("id") is None:
            raise UpstreamUnavailable(self.name, "detail payload has no id")
        return self._record(payload)

    def parse_totals(self, payload: Dict[str, Any]) -> Tuple[Optional[int], Optional[int]]:
        return parse_count(payload.get("total_results")), parse_count(payload.get("total_pages"))
