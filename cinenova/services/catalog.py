"""Aggregation and caching layer between the routers and the metadata provider.

Every listing or detail lookup goes through the same steps: resolve the
request fingerprint in the TTL cache, call the provider on a miss, join each
record with the availability table, and commit the enriched result to the
cache only once the whole fetch succeeded. Provider failures never escape:
trending degrades to the table's fallback sample, search to an empty tuple,
details to None.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import httpx

from cinenova.availability import AvailabilityTable
from cinenova.cache import SingleFlight, TTLCache
from cinenova.constants import OP_DETAILS, OP_SEARCH, OP_TRENDING
from cinenova.errors import NotFound, UpstreamUnavailable
from cinenova.models import EnrichedRecord, MetadataRecord, SearchPage
from cinenova.providers import MetadataProvider, build_provider
from cinenova.utils import fingerprint, normalize_query

log = logging.getLogger("cinenova.catalog")


def enrich(record: MetadataRecord, table: AvailabilityTable) -> EnrichedRecord:
    descriptor = table.lookup(record.id)
    return EnrichedRecord(
        metadata=record,
        can_play=bool(descriptor and descriptor.stream_url),
        # Any descriptor makes a title downloadable, even without a download reference
        can_download=descriptor is not None,
        availability=descriptor,
    )


def select_featured(records: Sequence[EnrichedRecord]) -> Tuple[Optional[EnrichedRecord], List[EnrichedRecord]]:
    """Pick the hero title: the first playable record, else the first record.

    Returns the featured record (None for an empty sequence) and every other
    record in original order.
    """
    if not records:
        return None, []
    featured = next((r for r in records if r.can_play), records[0])
    others = [r for r in records if r.id != featured.id]
    return featured, others


class CatalogService:
    def __init__(
        self,
        provider: MetadataProvider,
        table: AvailabilityTable,
        cache: Optional[TTLCache] = None,
        trending_ttl: float = 600,
        search_ttl: float = 600,
        details_ttl: float = 3600,
        single_flight: bool = False,
    ) -> None:
        self.provider = provider
        self.table = table
        self.cache = cache if cache is not None else TTLCache(default_ttl=search_ttl)
        self.trending_ttl = trending_ttl
        self.search_ttl = search_ttl
        self.details_ttl = details_ttl
        self._flight = SingleFlight() if single_flight else None

    def enrich(self, record: MetadataRecord) -> EnrichedRecord:
        return enrich(record, self.table)

    def enrich_all(self, records: Iterable[MetadataRecord]) -> Tuple[EnrichedRecord, ...]:
        return tuple(enrich(record, self.table) for record in records)

    def fallback(self) -> Tuple[EnrichedRecord, ...]:
        return self.enrich_all(self.table.fallback_records())

    async def _cached(self, key: str, ttl: float, producer: Callable[[], Awaitable[Any]]) -> Any:
        cached = self.cache.get(key)
        if cached is not None:
            log.debug("Cache hit %s", key)
            return cached
        if self._flight is not None:
            return await self._flight.do(key, lambda: self._fill(key, ttl, producer))
        return await self._fill(key, ttl, producer)

    async def _fill(self, key: str, ttl: float, producer: Callable[[], Awaitable[Any]]) -> Any:
        value = await producer()
        self.cache.set(key, value, ttl)
        return value

    async def list_trending(self) -> Tuple[EnrichedRecord, ...]:
        async def _fetch():
            payload = await self.provider.trending()
            return self.enrich_all(self.provider.parse_listing(payload))

        try:
            return await self._cached(fingerprint(OP_TRENDING), self.trending_ttl, _fetch)
        except (UpstreamUnavailable, NotFound) as exc:
            fallback = self.fallback()
            log.warning("Trending lookup failed (%s), serving %d fallback titles", exc, len(fallback))
            return fallback

    async def search_page(self, query: str, page: int = 1) -> SearchPage:
        """Search results for one page along with the provider's totals.

        Providers that report no totals get the page size as the result count
        and no further pages.
        """
        normalized = normalize_query(query)

        async def _fetch():
            payload = await self.provider.search(normalized, page)
            records = self.provider.parse_listing(payload)
            total_results, total_pages = self.provider.parse_totals(payload)
            return SearchPage(
                results=self.enrich_all(records),
                page=page,
                total_results=len(records) if total_results is None else total_results,
                total_pages=page if total_pages is None else total_pages,
            )

        try:
            return await self._cached(fingerprint(OP_SEARCH, normalized, page), self.search_ttl, _fetch)
        except NotFound:
            log.info("No %s results for %r page %d", self.provider.name, normalized, page)
            return SearchPage(page=page)
        except UpstreamUnavailable as exc:
            log.warning("Search for %r page %d failed: %s", normalized, page, exc)
            return SearchPage(page=page)

    async def search(self, query: str, page: int = 1) -> Tuple[EnrichedRecord, ...]:
        return (await self.search_page(query, page)).results

    async def get_details(self, id: str) -> Optional[EnrichedRecord]:
        movie_id = (id or "").strip()

        async def _fetch():
            payload = await self.provider.fetch_by_id(movie_id)
            return self.enrich(self.provider.parse_detail(payload))

        try:
            return await self._cached(fingerprint(OP_DETAILS, movie_id), self.details_ttl, _fetch)
        except NotFound:
            log.info("Title %r not found on %s", movie_id, self.provider.name)
            return None
        except UpstreamUnavailable as exc:
            log.warning("Details for %r failed: %s", movie_id, exc)
            return None

    def video_sources(self, id: str) -> List[Dict[str, str]]:
        descriptor = self.table.lookup(id)
        if descriptor is None or not descriptor.stream_url:
            return []
        return [{
            "quality": descriptor.quality,
            "url": descriptor.stream_url,
            "type": descriptor.media_type,
            "title": descriptor.title,
        }]

    @property
    def available_count(self) -> int:
        return len(self.table)

    def cache_stats(self) -> Dict[str, Any]:
        stats = self.cache.stats()
        stats["provider"] = self.provider.name
        stats["available_titles"] = len(self.table)
        stats["inflight"] = len(self._flight) if self._flight is not None else 0
        return stats

    def clear_cache(self) -> None:
        self.cache.clear()

    async def aclose(self) -> None:
        await self.provider.aclose()


def build_catalog_service(
    settings,
    client: Optional[httpx.AsyncClient] = None,
    clock: Callable[[], float] = time.monotonic,
) -> CatalogService:
    provider = build_provider(settings, client=client)
    if settings.catalog_file:
        table = AvailabilityTable.from_file(settings.catalog_file)
    else:
        table = AvailabilityTable.for_provider(settings.metadata_provider)
    cache = TTLCache(default_ttl=settings.search_ttl, max_size=settings.cache_max_size, clock=clock)
    log.info("Catalog service using %s with %d available titles", provider.name, len(table))
    return CatalogService(
        provider,
        table,
        cache=cache,
        trending_ttl=settings.trending_ttl,
        search_ttl=settings.search_ttl,
        details_ttl=settings.details_ttl,
        single_flight=settings.cache_single_flight,
    )
