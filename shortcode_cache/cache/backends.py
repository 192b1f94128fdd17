"""
Storage backends
Redis for shared deployments, in-process cachetools as fallback
"""
import asyncio
import logging
import math
import re
import time
from abc import ABC, abstractmethod
from typing import Callable, NamedTuple, Optional

import redis.asyncio as redis
from cachetools import TLRUCache

from ..config import Settings, get_settings
from ..models import CacheError

logger = logging.getLogger(__name__)

# Special characters of Redis MATCH patterns
_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def _escape_glob(text: str) -> str:
    return _GLOB_SPECIAL.sub(r"\\\1", text)


class CacheBackend(ABC):
    """Key-value storage the shortcode cache reads from and writes to"""

    @abstractmethod
    async def get(self, key: str, namespace: str) -> Optional[str]:
        """Stored value, or None if missing or expired"""
        pass

    @abstractmethod
    async def set(self, key: str, value: str, namespace: str, duration: int = 0) -> bool:
        """Store a value; duration 0 means no expiration"""
        pass

    @abstractmethod
    async def delete(self, key: str, namespace: str) -> bool:
        pass

    @abstractmethod
    async def clear(self, namespace: str, prefix: Optional[str] = None) -> int:
        """Remove every key of the namespace, optionally only those starting with prefix"""
        pass

    async def close(self):
        """Release resources"""
        pass


class RedisCache(CacheBackend):
    """Redis backend"""

    def __init__(self, redis_url: str, key_prefix: str = "wpsc"):
        self.redis_url = redis_url
        self.key_prefix = key_prefix
        self._client: Optional[redis.Redis] = None
        self._lock = asyncio.Lock()

    async def _get_client(self) -> redis.Redis:
        if self._client is None:
            async with self._lock:
                if self._client is None:
                    self._client = redis.from_url(
                        self.redis_url,
                        encoding="utf-8",
                        decode_responses=True
                    )
        return self._client

    def _make_key(self, key: str, namespace: str) -> str:
        return f"{self.key_prefix}:{namespace}:{key}"

    async def get(self, key: str, namespace: str) -> Optional[str]:
        try:
            client = await self._get_client()
            return await client.get(self._make_key(key, namespace))
        except Exception as e:
            logger.error(f"Redis get error: {e}")
            raise CacheError(f"Cache read failed: {e}", operation="get")

    async def set(self, key: str, value: str, namespace: str, duration: int = 0) -> bool:
        try:
            client = await self._get_client()
            full_key = self._make_key(key, namespace)

            if duration > 0:
                await client.setex(full_key, duration, value)
            else:
                await client.set(full_key, value)

            return True

        except Exception as e:
            logger.error(f"Redis set error: {e}")
            raise CacheError(f"Cache write failed: {e}", operation="set")

    async def delete(self, key: str, namespace: str) -> bool:
        try:
            client = await self._get_client()
            result = await client.delete(self._make_key(key, namespace))
            return result > 0
        except Exception as e:
            logger.error(f"Redis delete error: {e}")
            raise CacheError(f"Cache delete failed: {e}", operation="delete")

    async def clear(self, namespace: str, prefix: Optional[str] = None) -> int:
        try:
            client = await self._get_client()
            search_pattern = _escape_glob(self._make_key(prefix or "", namespace)) + "*"

            count = 0
            async for key in client.scan_iter(match=search_pattern):
                await client.delete(key)
                count += 1

            return count

        except Exception as e:
            logger.error(f"Redis clear error: {e}")
            raise CacheError(f"Cache clear failed: {e}", operation="clear")

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None


class _Entry(NamedTuple):
    value: str
    duration: int


def _entry_expiry(key, entry: _Entry, now: float) -> float:
    if entry.duration <= 0:
        return math.inf
    return now + entry.duration


class LocalCache(CacheBackend):
    """In-process backend with per-entry expiration"""

    def __init__(self, max_size: int = 1000, timer: Callable[[], float] = time.monotonic):
        self.cache = TLRUCache(maxsize=max_size, ttu=_entry_expiry, timer=timer)

    async def get(self, key: str, namespace: str) -> Optional[str]:
        entry = self.cache.get((namespace, key))
        if entry is None:
            return None
        return entry.value

    async def set(self, key: str, value: str, namespace: str, duration: int = 0) -> bool:
        self.cache[(namespace, key)] = _Entry(value, duration)
        return True

    async def delete(self, key: str, namespace: str) -> bool:
        return self.cache.pop((namespace, key), None) is not None

    async def clear(self, namespace: str, prefix: Optional[str] = None) -> int:
        keys_to_delete = [
            k for k in list(self.cache.keys())
            if k[0] == namespace and k[1].startswith(prefix or '')
        ]
        for k in keys_to_delete:
            self.cache.pop(k, None)
        return len(keys_to_delete)

    def __len__(self) -> int:
        return len(self.cache)


def create_backend(settings: Optional[Settings] = None) -> CacheBackend:
    """Redis when a URL is configured, local memory otherwise"""
    settings = settings or get_settings()

    if settings.redis_url:
        try:
            return RedisCache(settings.redis_url, key_prefix=settings.key_prefix)
        except Exception as e:
            logger.warning(f"Redis cache creation failed: {e}, falling back to local cache")

    return LocalCache(max_size=settings.local_max_size)
