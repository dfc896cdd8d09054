from __future__ import annotations

from threading import Lock

from animeshelf.application.ports.catalog_pool_port import CatalogPoolPort
from animeshelf.domain.entities.anime import CatalogItem
from animeshelf.infrastructure.cache.expiring_cache import ExpiringCache


POOL_CACHE_KEY = "catalog:pool:v1"


class CachedCatalogPool(CatalogPoolPort):
    def __init__(self, *, upstream: CatalogPoolPort, cache: ExpiringCache, ttl_seconds: float = 600):
        self._upstream = upstream
        self._cache = cache
        self._ttl_seconds = ttl_seconds
        self._fetch_lock = Lock()

    def fetch_pool(self) -> list[CatalogItem]:
        cached = self._cache.get(POOL_CACHE_KEY)
        if cached is not None:
            return list(cached)

        # One upstream fetch at a time; waiters reuse its result.
        with self._fetch_lock:
            cached = self._cache.get(POOL_CACHE_KEY)
            if cached is not None:
                return list(cached)
            pool = self._upstream.fetch_pool()
            self._cache.set(POOL_CACHE_KEY, tuple(pool), self._ttl_seconds)
            return list(pool)
