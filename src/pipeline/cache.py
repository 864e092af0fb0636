"""In-process TTL cache for successful enrichment results, keyed by (endpoint, value)."""

import time
from collections.abc import Callable
from typing import Any

from cachetools import TTLCache

from common.config import Config
from common.logging import get_logger

logger = get_logger(__name__)

CacheKey = tuple[str, str]


class ResultCache:
    def __init__(self, ttl: int = 3600, max_size: int = 1024, timer: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self.max_size = max_size
        self._cache: TTLCache = TTLCache(maxsize=max_size, ttl=ttl, timer=timer)
        self.hits = 0
        self.misses = 0

    @classmethod
    def from_config(cls, settings: Config) -> "ResultCache":
        return cls(ttl=settings.cache_ttl, max_size=settings.cache_max_size)

    @staticmethod
    def key(endpoint: str, value: str) -> CacheKey:
        return endpoint, value.strip().lower()

    def get(self, endpoint: str, value: str) -> Any | None:
        result = self._cache.get(self.key(endpoint, value))
        if result is None:
            self.misses += 1
            return None
        self.hits += 1
        logger.debug(f"[Cache] Hit for {endpoint}:{value}")
        return result

    def set(self, endpoint: str, value: str, result: Any) -> None:
        self._cache[self.key(endpoint, value)] = result
        logger.debug(f"[Cache] Stored {endpoint}:{value}")

    def clear(self, pattern: str | None = None) -> int:
        """Drop every entry, or only those whose 'endpoint:value' contains `pattern`. Returns the count removed."""
        if not pattern:
            removed = len(self._cache)
            self._cache.clear()
        else:
            matching = [k for k in list(self._cache.keys()) if pattern.lower() in f"{k[0]}:{k[1]}"]
            for k in matching:
                self._cache.pop(k, None)
            removed = len(matching)
        logger.info(f"[Cache] Cleared {removed} entries" + (f" matching '{pattern}'" if pattern else ""))
        return removed

    def stats(self) -> dict[str, Any]:
        total = self.hits + self.misses
        return {
            "keys": len(self._cache),
            "hits": self.hits,
            "misses": self.misses,
            "hitRate": round(self.hits / total, 3) if total else 0.0,
            "ttl": self.ttl,
            "maxSize": self.max_size,
            "entries": [f"{endpoint}:{value}" for endpoint, value in list(self._cache.keys())],
        }
