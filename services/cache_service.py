"""
Read-through cache with prefix invalidation.

Per key: Empty -> Populated (read computes and stores with a fixed TTL)
-> Invalidated (a write to the key's family removes every key under the
family prefix) -> Empty. Writers always invalidate synchronously before
returning, so staleness is bounded by the TTL only when an invalidation
is lost.

The cache is never required for correctness: backend failures are logged
and behave like a miss (reads) or a no-op (writes, invalidations).
"""

import json
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Tuple

import redis
from fastapi import Request

from core.logging_config import get_logger
from core.settings import Settings, settings

logger = get_logger(__name__)


class CacheKeys:
    """Key families. Every key of a family starts with the family prefix."""

    PAGE_TEMPLATES = "page-templates:"
    PAGE_TEMPLATE = "page-template:"

    @staticmethod
    def page_templates_all() -> str:
        return f"{CacheKeys.PAGE_TEMPLATES}all"

    @staticmethod
    def page_template(slug: str) -> str:
        return f"{CacheKeys.PAGE_TEMPLATE}{slug}"

    @staticmethod
    def page_prefix(slug: str) -> str:
        # Trailing colon keeps "page:foo:" from matching "page:foo-bar:..."
        return f"page:{slug}:"

    @staticmethod
    def page_html(slug: str) -> str:
        return f"{CacheKeys.page_prefix(slug)}html"

    @staticmethod
    def page_document(slug: str) -> str:
        return f"{CacheKeys.page_prefix(slug)}document"

    @staticmethod
    def owner_pages_prefix(owner_id: str) -> str:
        return f"pages:{owner_id}:"

    @staticmethod
    def owner_pages(owner_id: str) -> str:
        return f"{CacheKeys.owner_pages_prefix(owner_id)}list"


class CacheService(ABC):

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Cached value or None on a miss."""

    @abstractmethod
    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    @abstractmethod
    def invalidate_pattern(self, prefix: str) -> int:
        """Remove every key starting with `prefix`; returns how many were removed."""

    def get_or_set(self, key: str, ttl_seconds: int, compute: Callable[[], Any]) -> Any:
        """Read-through: serve the cached value or compute, store and return it.

        A `None` result is returned uncached so missing records are never
        remembered as missing.
        """
        cached = self.get(key)
        if cached is not None:
            return cached

        value = compute()
        if value is not None:
            self.set(key, value, ttl_seconds)
        return value

    def close(self) -> None:
        pass


class RedisCacheService(CacheService):
    SCAN_BATCH_SIZE = 500

    def __init__(self, client: redis.Redis):
        self.client = client

    @classmethod
    def from_url(cls, url: str, socket_timeout: float) -> "RedisCacheService":
        client = redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        return cls(client)

    def get(self, key: str) -> Optional[Any]:
        try:
            raw = self.client.get(key)
        except redis.RedisError as e:
            logger.warning_ctx("Cache get failed, treating as miss", key=key, error=str(e))
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning_ctx("Discarding undecodable cache entry", key=key)
            return None

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        try:
            self.client.setex(key, ttl_seconds, json.dumps(value, default=str))
        except redis.RedisError as e:
            logger.warning_ctx("Cache set failed", key=key, error=str(e))

    def delete(self, key: str) -> None:
        try:
            self.client.delete(key)
        except redis.RedisError as e:
            logger.warning_ctx("Cache delete failed", key=key, error=str(e))

    def invalidate_pattern(self, prefix: str) -> int:
        removed = 0
        batch = []
        try:
            for key in self.client.scan_iter(match=f"{_escape_glob(prefix)}*", count=self.SCAN_BATCH_SIZE):
                batch.append(key)
                if len(batch) >= self.SCAN_BATCH_SIZE:
                    removed += self.client.delete(*batch)
                    batch = []
            if batch:
                removed += self.client.delete(*batch)
        except redis.RedisError as e:
            logger.warning_ctx("Cache invalidation failed", prefix=prefix, error=str(e))
            return removed
        logger.debug_ctx("Cache invalidated", prefix=prefix, removed=removed)
        return removed

    def close(self) -> None:
        try:
            self.client.close()
        except redis.RedisError as e:
            logger.warning_ctx("Closing cache connection failed", error=str(e))


class InMemoryCacheService(CacheService):
    """Process-local cache used when no Redis is configured, and in tests.

    Values are stored serialized so callers never share mutable state with
    the cache, mirroring what a network cache does.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            raw, expires_at = entry
            if self.clock() >= expires_at:
                del self._entries[key]
                return None
        return json.loads(raw)

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        raw = json.dumps(value, default=str)
        with self._lock:
            self._entries[key] = (raw, self.clock() + ttl_seconds)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def invalidate_pattern(self, prefix: str) -> int:
        with self._lock:
            keys = [key for key in self._entries if key.startswith(prefix)]
            for key in keys:
                del self._entries[key]
        logger.debug_ctx("Cache invalidated", prefix=prefix, removed=len(keys))
        return len(keys)

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._entries)


def _escape_glob(prefix: str) -> str:
    """Escape Redis MATCH metacharacters so the prefix is matched literally."""
    for char in ("\\", "*", "?", "[", "]"):
        prefix = prefix.replace(char, f"\\{char}")
    return prefix


def build_cache_service(config: Settings = settings) -> CacheService:
    if config.REDIS_URL:
        logger.info("Using Redis cache")
        return RedisCacheService.from_url(config.REDIS_URL, config.REDIS_SOCKET_TIMEOUT)
    logger.info("REDIS_URL not set, using in-memory cache")
    return InMemoryCacheService()


def get_cache_service(request: Request) -> CacheService:
    """FastAPI dependency: the cache created in the app lifespan"""
    return request.app.state.cache
