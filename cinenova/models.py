from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class MetadataRecord:
    """Provider attributes for a single title."""

    id: str
    title: str
    year: str = ""
    rating: Optional[float] = None
    overview: str = ""
    poster: Optional[str] = None
    backdrop: Optional[str] = None
    genre: str = ""
    runtime: str = ""
    media_type: str = "movie"


@dataclass(frozen=True)
class AvailabilityDescriptor:
    id: str
    title: str
    stream_url: str
    download_url: str
    media_type: str = "video/mp4"
    quality: str = ""
    size: str = ""
    duration: str = ""
    filename: str = ""

    @property
    def download_filename(self) -> str:
        if self.filename:
            return self.filename
        safe = "".join(ch if ch.isalnum() else "_" for ch in self.title).strip("_")
        return f"{safe or self.id}.mp4"


@dataclass(frozen=True)
class EnrichedRecord:
    metadata: MetadataRecord
    can_play: bool
    can_download: bool
    availability: Optional[AvailabilityDescriptor] = None

    @property
    def id(self) -> str:
        return self.metadata.id

    @property
    def title(self) -> str:
        return self.metadata.title

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self.metadata)
        payload["can_play"] = self.can_play
        payload["can_download"] = self.can_download
        payload["availability"] = asdict(self.availability) if self.availability else None
        return payload


@dataclass(frozen=True)
class SearchPage:
    """One page of enriched search results plus the provider's totals."""

    results: Tuple[EnrichedRecord, ...] = ()
    page: int = 1
    total_results: int = 0
    total_pages: int = 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages
