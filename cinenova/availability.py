"""Curated overlay of titles that can actually be played or downloaded.

The table is loaded once from a JSON data file and never mutated. Each
provider ships its own file under ``cinenova/data`` because the two providers
use different identifier schemes (TMDB numeric ids, OMDb imdb ids).
"""

from __future__ import annotations

import json
import logging
import os
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from cinenova.errors import CatalogDataError
from cinenova.models import AvailabilityDescriptor, MetadataRecord

log = logging.getLogger("cinenova.availability")

DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data")

_DESCRIPTOR_FIELDS = ("title", "stream_url", "download_url", "media_type", "quality", "size", "duration", "filename")
_RECORD_FIELDS = ("id", "title", "year", "rating", "overview", "poster", "backdrop", "genre", "runtime", "media_type")


def catalog_path(provider: str) -> str:
    return os.path.join(DATA_DIR, f"{provider}_catalog.json")


def _parse_descriptor(raw_id: str, raw: object) -> AvailabilityDescriptor:
    if not isinstance(raw, dict):
        raise CatalogDataError(f"entry {raw_id!r} must be an object")
    for required in ("title", "stream_url", "download_url"):
        if not str(raw.get(required) or "").strip():
            raise CatalogDataError(f"entry {raw_id!r} is missing {required!r}")
    values = {k: str(raw[k]) for k in _DESCRIPTOR_FIELDS if raw.get(k) is not None}
    return AvailabilityDescriptor(id=str(raw_id), **values)


def _parse_fallback(raw: object) -> MetadataRecord:
    if not isinstance(raw, dict) or not raw.get("id") or not raw.get("title"):
        raise CatalogDataError(f"fallback entry needs an id and a title: {raw!r}")
    values = {k: raw[k] for k in _RECORD_FIELDS if raw.get(k) is not None}
    values["id"] = str(values["id"])
    return MetadataRecord(**values)


class AvailabilityTable:
    """Read-only id -> AvailabilityDescriptor mapping with O(1) lookup."""

    def __init__(
        self,
        entries: Mapping[str, AvailabilityDescriptor],
        fallback: Tuple[MetadataRecord, ...] = (),
    ) -> None:
        self._entries: Mapping[str, AvailabilityDescriptor] = MappingProxyType(dict(entries))
        self._fallback = tuple(fallback)

    @classmethod
    def from_dict(cls, payload: object) -> "AvailabilityTable":
        if not isinstance(payload, dict) or not isinstance(payload.get("titles"), dict):
            raise CatalogDataError("catalog data must be an object with a 'titles' mapping")
        entries: Dict[str, AvailabilityDescriptor] = {}
        for raw_id, raw in payload["titles"].items():
            entries[str(raw_id)] = _parse_descriptor(raw_id, raw)
        fallback = payload.get("fallback") or []
        if not isinstance(fallback, list):
            raise CatalogDataError("'fallback' must be a list")
        return cls(entries, tuple(_parse_fallback(item) for item in fallback))

    @classmethod
    def from_file(cls, path: str) -> "AvailabilityTable":
        try:
            with open(path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except FileNotFoundError as exc:
            raise CatalogDataError(f"catalog file not found: {path}") from exc
        except json.JSONDecodeError as exc:
            raise CatalogDataError(f"catalog file is not valid JSON: {path}: {exc}") from exc
        table = cls.from_dict(payload)
        log.info("Loaded %d available titles from %s", len(table), path)
        return table

    @classmethod
    def for_provider(cls, provider: str) -> "AvailabilityTable":
        return cls.from_file(catalog_path(provider))

    def lookup(self, id: str) -> Optional[AvailabilityDescriptor]:
        return self._entries.get(str(id))

    @property
    def entries(self) -> Mapping[str, AvailabilityDescriptor]:
        return self._entries

    def fallback_records(self) -> Tuple[MetadataRecord, ...]:
        return self._fallback

    def ids(self) -> List[str]:
        return list(self._entries)

    def __contains__(self, id: object) -> bool:
        return str(id) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)
