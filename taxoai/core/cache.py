"""
Transient key-value cache with Redis and in-memory backends

Holds the short-lived usage snapshot and the batch job id-maps.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional
from urllib.parse import urlparse

import orjson
from aiocache import Cache
from aiocache.serializers import BaseSerializer
from tenacity import retry, stop_after_attempt, wait_exponential

from taxoai.core.config import settings
from taxoai.core.logging import log


class OrjsonSerializer(BaseSerializer):
    """Fast JSON serializer using orjson"""

    def dumps(self, value: Any) -> bytes:
        return orjson.dumps(value)

    def loads(self, value: Optional[bytes]) -> Any:
        if value is None:
            return None
        return orjson.loads(value)


class CacheBackend(ABC):
    """Abstract cache backend"""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        pass

    @abstractmethod
    async def clear(self) -> bool:
        pass


class RedisCache(CacheBackend):
    """Redis cache backend"""

    def __init__(self, redis_url: str):
        parsed = urlparse(redis_url)
        self.cache = Cache(
            Cache.REDIS,
            endpoint=parsed.hostname or "localhost",
            port=parsed.port or 6379,
            db=int(parsed.path.lstrip("/") or 0),
            password=parsed.password,
            serializer=OrjsonSerializer(),
            timeout=1,
        )

    @retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=0.2, min=0.2, max=1), reraise=True)
    async def _get(self, key: str) -> Optional[Any]:
        return await self.cache.get(key)

    async def get(self, key: str) -> Optional[Any]:
        try:
            return await self._get(key)
        except Exception as e:
            log.warning("Redis get failed", key=key, error=str(e))
            return None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        try:
            return await self.cache.set(key, value, ttl=ttl)
        except Exception as e:
            log.warning("Redis set failed", key=key, error=str(e))
            return False

    async def delete(self, key: str) -> bool:
        try:
            return bool(await self.cache.delete(key))
        except Exception as e:
            log.warning("Redis delete failed", key=key, error=str(e))
            return False

    async def clear(self) -> bool:
        try:
            return await self.cache.clear()
        except Exception as e:
            log.warning("Redis clear failed", error=str(e))
            return False


class InMemoryCache(CacheBackend):
    """In-memory cache using aiocache"""

    def __init__(self):
        self.cache = Cache(Cache.MEMORY, serializer=OrjsonSerializer())

    async def get(self, key: str) -> Optional[Any]:
        return await self.cache.get(key)

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        return await self.cache.set(key, value, ttl=ttl)

    async def delete(self, key: str) -> bool:
        return bool(await self.cache.delete(key))

    async def clear(self) -> bool:
        return await self.cache.clear()


# Global cache instance
_cache: Optional[CacheBackend] = None


def get_cache() -> CacheBackend:
    """Get cache backend instance"""
    global _cache

    if _cache is None:
        if settings.redis_url:
            try:
                _cache = RedisCache(settings.redis_url)
                log.info("Using Redis cache backend")
            except Exception as e:
                log.warning(f"Failed to initialize Redis cache: {e}, falling back to in-memory")
                _cache = InMemoryCache()
        else:
            _cache = InMemoryCache()
            log.info("Using in-memory cache backend")

    return _cache


def cache_key(*args, **kwargs) -> str:
    """
    Generate cache key from arguments

    Examples:
        cache_key("usage") -> "taxoai:usage"
        cache_key("job_map", "abc") -> "taxoai:job_map:abc"
    """
    parts = ["taxoai"]
    parts.extend(str(arg) for arg in args)
    parts.extend(f"{k}={v}" for k, v in sorted(kwargs.items()))
    return ":".join(parts)
