"""In-process response cache backed by cachetools."""

import logging
import threading
from collections.abc import Callable
from typing import Any

import cachetools

from supplejack.application.interfaces.response_cache import ResponseCache

logger = logging.getLogger(__name__)

_MISSING = object()


class TTLResponseCache(ResponseCache):
    """Keeps one ``cachetools.TTLCache`` per lifetime.

    Call sites use a fixed TTL each (an hour for searches, a day for sets,
    stories and facet lookups), so entries are bucketed by TTL instead of
    tracking an expiry per key.
    """

    def __init__(self, max_entries: int = 1000, timer: Callable[[], float] | None = None):
        self._max_entries = max_entries
        self._timer = timer
        self._caches: dict[int, cachetools.TTLCache] = {}
        self._lock = threading.RLock()
        self._populating: dict[tuple[int, str], threading.Lock] = {}

    def _cache_for(self, ttl: int) -> cachetools.TTLCache:
        cache = self._caches.get(ttl)
        if cache is None:
            if self._timer is not None:
                cache = cachetools.TTLCache(maxsize=self._max_entries, ttl=ttl, timer=self._timer)
            else:
                cache = cachetools.TTLCache(maxsize=self._max_entries, ttl=ttl)
            self._caches[ttl] = cache
        return cache

    def fetch(self, key: str, ttl: int, populate: Callable[[], Any]) -> Any:
        """Return the cached value, populating it outside the shared lock.

        Concurrent misses on the same key wait on a per-key lock so the
        request runs once; reads of other keys are never blocked by it.
        """
        with self._lock:
            cache = self._cache_for(ttl)
            value = cache.get(key, _MISSING)
            if value is not _MISSING:
                logger.debug("Response cache hit: %s", key)
                return value
            key_lock = self._populating.setdefault((ttl, key), threading.Lock())

        with key_lock:
            with self._lock:
                value = cache.get(key, _MISSING)
            if value is not _MISSING:
                return value

            try:
                value = populate()
                with self._lock:
                    cache[key] = value
            finally:
                with self._lock:
                    self._populating.pop((ttl, key), None)
            return value

    def delete(self, key: str) -> None:
        with self._lock:
            for cache in self._caches.values():
                cache.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            for cache in self._caches.values():
                cache.clear()
