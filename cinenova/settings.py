from pydantic_settings import BaseSettings
from typing import Optional, List

class Settings(BaseSettings):
    """CineNova application settings.

    All settings can be overridden via environment variables or .env file.
    Environment variables should use uppercase names (e.g., METADATA_PROVIDER=omdb).

    Metadata providers:
        tmdb = The Movie Database (trending endpoint, numeric ids)
        omdb = Open Movie Database (trending is a proxy search, imdb ids)
    """
    app_name: str = "CineNova BJ Studio"
    version: str = "1.0.0"
    metadata_provider: str = "tmdb"

    tmdb_api_key: str = ""
    tmdb_base_url: str = "https://api.themoviedb.org/3"
    tmdb_image_base: str = "https://image.tmdb.org/t/p/w500"

    omdb_api_key: str = ""
    omdb_base_url: str = "https://www.omdbapi.com/"
    # OMDb has no trending endpoint, one of these is searched instead
    trending_queries: List[str] = ['avengers', 'batman', 'superman', 'spiderman', 'iron man']

    request_timeout: float = 10.0

    # Cache TTLs in seconds
    trending_ttl: int = 600
    search_ttl: int = 600
    details_ttl: int = 3600
    cache_max_size: Optional[int] = 1000
    cache_single_flight: bool = False

    # Overrides the packaged availability table for the selected provider
    catalog_file: Optional[str] = None

    admin_password: Optional[str] = None
    log_level: str = "INFO"
    json_logs: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
        frozen = True

settings = Settings()
