import json
import re
from typing import Any, Optional


def normalize_query(raw_query: str) -> str:
    """Collapse whitespace and case-fold a search term for cache keys."""
    if not raw_query:
        return ""
    return " ".join(raw_query.split()).casefold()


def fingerprint(operation: str, *args: Any) -> str:
    """Deterministic cache key for an operation and its normalized arguments."""
    return json.dumps([operation, *args], separators=(",", ":"), ensure_ascii=False)


def parse_page(raw_page: Optional[str]) -> int:
    try:
        page = int(raw_page) if raw_page is not None else 1
    except (TypeError, ValueError):
        return 1
    return page if page >= 1 else 1


def display_name(slug: str) -> str:
    """Turn a stream slug like 'blackPanther' into 'BLACK PANTHER'."""
    if not slug:
        return ""
    return re.sub(r"([A-Z])", r" \1", slug).strip().upper()


def format_year(raw: Any) -> str:
    if raw is None:
        return ""
    match = re.search(r"(\d{4})", str(raw))
    return match.group(1) if match else ""


def parse_rating(raw: Any) -> Optional[float]:
    if raw is None or raw == "N/A":
        return None
    try:
        return round(float(raw), 1)
    except (TypeError, ValueError):
        return None


def parse_count(raw: Any) -> Optional[int]:
    """Provider result counts arrive as ints (TMDB) or strings (OMDb)."""
    try:
        count = int(raw)
    except (TypeError, ValueError):
        return None
    return count if count >= 0 else None
