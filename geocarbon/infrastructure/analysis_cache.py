"""
In-memory TTL cache for area analysis results.

Keys are derived from the polygon coordinates and analysis options so that
the same request within the TTL reuses the previous result.
"""
import hashlib
import json
import time
from typing import Dict, Optional, Tuple

from geocarbon.domain.models import AnalysisOptions, AreaAnalysisResult, PolygonGeometry

# Coordinates are normalised to ~1 cm precision before hashing
KEY_PRECISION = 7


def _round_coordinates(value):
    if isinstance(value, (list, tuple)):
        return [_round_coordinates(item) for item in value]
    return round(float(value), KEY_PRECISION)


def cache_key(polygon: PolygonGeometry, options: AnalysisOptions) -> str:
    payload = {
        "type": polygon.type,
        "coordinates": _round_coordinates(polygon.coordinates),
        "options": options.model_dump(),
    }
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


class AnalysisCache:
    """
    Process-local result cache.

    Entries are stored and handed out as deep copies, so callers may modify
    the results they receive.

    A TTL of 0 or less disables caching entirely.
    """

    def __init__(self, ttl_seconds: float, max_entries: int = 256):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._entries: Dict[str, Tuple[float, AreaAnalysisResult]] = {}

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0

    def get(self, key: str) -> Optional[AreaAnalysisResult]:
        if not self.enabled:
            return None
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, result = entry
        if time.monotonic() >= expires_at:
            del self._entries[key]
            return None
        return result.model_copy(deep=True)

    def set(self, key: str, result: AreaAnalysisResult) -> None:
        if not self.enabled:
            return
        if len(self._entries) >= self.max_entries:
            self._evict()
        self._entries[key] = (
            time.monotonic() + self.ttl_seconds, result.model_copy(deep=True)
        )

    def _evict(self) -> None:
        now = time.monotonic()
        for key in [k for k, (expires_at, _) in self._entries.items() if expires_at <= now]:
            del self._entries[key]
        # Still full: drop the entry closest to expiry
        if len(self._entries) >= self.max_entries:
            oldest = min(self._entries, key=lambda k: self._entries[k][0])
            del self._entries[oldest]
