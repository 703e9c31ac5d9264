"""
Cache manager for mood statistics and catalog responses.
Uses Redis when configured and falls back to an in-process TTL cache.
"""

import json
import logging
from typing import Any, Optional, Dict, Callable, Awaitable
from datetime import datetime, timedelta
import redis.asyncio as redis

logger = logging.getLogger(__name__)

class CacheManager:
    """Async cache with Redis backend and in-memory fallback."""

    def __init__(self, redis_url: Optional[str] = None, namespace: str = "moodradio", max_memory_items: int = 1000):
        """
        Initialize cache manager.

        Args:
            redis_url: Redis connection URL (optional)
            namespace: Prefix applied to every key
            max_memory_items: Size bound of the in-memory fallback
        """
        self.redis_url = redis_url
        self.namespace = namespace
        self.redis: Optional[redis.Redis] = None
        self.memory_cache: Dict[str, tuple] = {}  # key -> (value, expires_at)
        self.max_memory_items = max_memory_items

    async def connect(self):
        """Connect to Redis if URL is provided."""
        if not self.redis_url:
            return
        try:
            self.redis = redis.from_url(self.redis_url)
            await self.redis.ping()
            logger.info("Connected to Redis cache")
        except Exception as e:
            logger.warning(f"Failed to connect to Redis: {e}, using memory cache")
            self.redis = None

    async def close(self):
        """Close Redis connection."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None

    def key(self, prefix: str, *parts) -> str:
        """Build a namespaced cache key."""
        return ":".join([self.namespace, prefix] + [str(part) for part in parts])

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache."""
        if self.redis:
            try:
                raw = await self.redis.get(key)
                if raw:
                    return json.loads(raw)
            except Exception as e:
                logger.warning(f"Redis get error for {key}: {e}")

        entry = self.memory_cache.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if datetime.now() >= expires_at:
            del self.memory_cache[key]
            return None
        return value

    async def set(self, key: str, value: Any, ttl: int = 3600):
        """Set value in cache with TTL in seconds."""
        if self.redis:
            try:
                await self.redis.setex(key, ttl, json.dumps(value, default=str))
                return
            except Exception as e:
                logger.warning(f"Redis set error for {key}: {e}")

        self.memory_cache[key] = (value, datetime.now() + timedelta(seconds=ttl))
        if len(self.memory_cache) > self.max_memory_items:
            self._evict_memory_cache()

    async def get_or_set(self, key: str, factory: Callable[[], Awaitable[Any]], ttl: int = 3600) -> Any:
        """Return the cached value, computing and storing it on a miss."""
        cached = await self.get(key)
        if cached is not None:
            return cached
        value = await factory()
        await self.set(key, value, ttl)
        return value

    async def delete(self, key: str):
        """Delete value from cache."""
        if self.redis:
            try:
                await self.redis.delete(key)
            except Exception as e:
                logger.warning(f"Redis delete error for {key}: {e}")
        self.memory_cache.pop(key, None)

    def _evict_memory_cache(self):
        """Drop expired entries, then the oldest ones until under the bound."""
        now = datetime.now()
        for key in [k for k, (_, expires_at) in self.memory_cache.items() if now >= expires_at]:
            del self.memory_cache[key]

        overflow = len(self.memory_cache) - self.max_memory_items
        if overflow > 0:
            for key in list(self.memory_cache)[:overflow]:
                del self.memory_cache[key]
