"""Caching of parsed content definitions."""

import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional, Union

from xmlcontent_api.logging import get_content_logger

from .definition import ContentDefinition

logger = get_content_logger('cache')


class DefinitionCache:
    """Content definition cache with TTL, LRU eviction and file change detection."""

    def __init__(self, max_size: int = 100, ttl_seconds: int = 300):
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self._cache: Dict[str, Dict[str, Any]] = {}
        self._access_times: Dict[str, float] = {}
        self._lock = threading.RLock()
        self.hits = 0
        self.misses = 0

    def _evict_expired(self) -> None:
        """Remove expired entries from cache."""
        current_time = time.time()
        expired_keys = [
            key for key, access_time in self._access_times.items()
            if current_time - access_time > self.ttl_seconds
        ]
        for key in expired_keys:
            self._cache.pop(key, None)
            self._access_times.pop(key, None)

    def _evict_lru(self) -> None:
        """Remove least recently used entries if cache is full."""
        if self._access_times and len(self._cache) >= self.max_size:
            oldest_key = min(self._access_times.keys(), key=self._access_times.get)
            self._cache.pop(oldest_key, None)
            self._access_times.pop(oldest_key, None)

    def get(self, location: str, file_path: Union[str, Path]) -> Optional[ContentDefinition]:
        """Get a cached definition if the schema file is unchanged."""
        with self._lock:
            self._evict_expired()

            if location not in self._cache:
                self.misses += 1
                return None

            try:
                file_stat = Path(file_path).stat()
                cached_entry = self._cache[location]

                if (cached_entry['mtime'] != file_stat.st_mtime or
                        cached_entry['size'] != file_stat.st_size):
                    logger.debug(f"Schema {location} changed on disk, dropping cached definition")
                    self._cache.pop(location, None)
                    self._access_times.pop(location, None)
                    self.misses += 1
                    return None

                self._access_times[location] = time.time()
                self.hits += 1
                return cached_entry['definition']

            except OSError:
                self._cache.pop(location, None)
                self._access_times.pop(location, None)
                self.misses += 1
                return None

    def put(self, location: str, file_path: Union[str, Path], definition: ContentDefinition) -> None:
        """Cache a definition along with the stat of its schema file."""
        try:
            file_stat = Path(file_path).stat()
        except OSError:
            return

        with self._lock:
            self._evict_expired()
            if location not in self._cache:
                self._evict_lru()

            self._cache[location] = {
                'definition': definition,
                'mtime': file_stat.st_mtime,
                'size': file_stat.st_size,
            }
            self._access_times[location] = time.time()

    def invalidate(self, location: str) -> None:
        with self._lock:
            self._cache.pop(location, None)
            self._access_times.pop(location, None)

    def clear(self) -> None:
        """Clear all cached entries."""
        with self._lock:
            self._cache.clear()
            self._access_times.clear()
            self.hits = 0
            self.misses = 0

    def stats(self) -> Dict[str, Any]:
        return {
            'size': len(self._cache),
            'max_size': self.max_size,
            'ttl_seconds': self.ttl_seconds,
            'hits': self.hits,
            'misses': self.misses,
        }


_definition_cache: Optional[DefinitionCache] = None
_cache_lock = threading.Lock()


def get_definition_cache(max_size: int = 100, ttl_seconds: int = 300) -> DefinitionCache:
    """Get or create the process-wide definition cache."""
    global _definition_cache
    if _definition_cache is None:
        with _cache_lock:
            if _definition_cache is None:
                _definition_cache = DefinitionCache(max_size=max_size, ttl_seconds=ttl_seconds)
    return _definition_cache


def get_cache_stats() -> Dict[str, Any]:
    """Get statistics about cache usage."""
    cache = _definition_cache
    return {
        'definition_cache': cache.stats() if cache is not None else {'size': 0},
    }
