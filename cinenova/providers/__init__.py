from typing import Optional

import httpx

from cinenova.constants import SUPPORTED_PROVIDERS
from cinenova.providers.base import MetadataProvider
from cinenova.providers.omdb import OMDbProvider
from cinenova.providers.tmdb import TMDBProvider


def build_provider(settings, client: Optional[httpx.AsyncClient] = None) -> MetadataProvider:
    if settings.metadata_provider not in SUPPORTED_PROVIDERS:
        raise ValueError(
            f"Unknown metadata provider: {settings.metadata_provider!r}, "
            f"expected one of {', '.join(SUPPORTED_PROVIDERS)}"
        )
    if settings.metadata_provider == "omdb":
        return OMDbProvider(
            settings.omdb_api_key,
            base_url=settings.omdb_base_url,
            timeout=settings.request_timeout,
            client=client,
            trending_queries=settings.trending_queries,
        )
    return TMDBProvider(
        settings.tmdb_api_key,
        base_url=settings.tmdb_base_url,
        image_base=settings.tmdb_image_base,
        timeout=settings.request_timeout,
        client=client,
    )


__all__ = ["MetadataProvider", "OMDbProvider", "TMDBProvider", "build_provider"]
