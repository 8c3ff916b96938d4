# app/services/cache_service.py
import hashlib
import json
import logging
import time
from typing import Optional, Any, Dict, Tuple
import redis.asyncio as redis
from app.config.settings import settings

logger = logging.getLogger(__name__)

class CacheService:
    """
    Redis cache with an in-process memory fallback.

    Redis handles concurrent access itself; the memory tier is only touched
    from the event loop, between awaits, so concurrent requests never observe
    a half-written entry.
    """

    def __init__(self, redis_url: Optional[str] = None, max_memory_size: Optional[int] = None):
        self.redis_url = settings.REDIS_URL if redis_url is None else redis_url
        self.redis_client: Optional[redis.Redis] = None
        self.redis_enabled = bool(self.redis_url)
        # key -> (expires_at on the monotonic clock, value), oldest first
        self.memory_cache: Dict[str, Tuple[float, Any]] = {}
        self.max_memory_cache_size = max_memory_size or settings.MEMORY_CACHE_SIZE
        self.hits = 0
        self.misses = 0

    @staticmethod
    def build_search_key(query: str, strategy: str, scope: str = "") -> str:
        """
        Stable key for a (query, strategy) pair, identical across processes.

        ``scope`` carries whatever else changes which sources answer or how
        they answer, such as the user's region.
        """
        normalized = " ".join(query.lower().split())
        digest = hashlib.sha256(f"{normalized}|{strategy}|{scope}".encode("utf-8")).hexdigest()
        return digest[:32]

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0

    async def _get_redis_client(self) -> Optional[redis.Redis]:
        if not self.redis_enabled:
            return None
        if self.redis_client is not None:
            return self.redis_client

        if not self.redis_url.startswith(("redis://", "rediss://")):
            logger.warning("⚠️ Invalid Redis URL, using memory cache only")
            self.redis_enabled = False
            return None

        try:
            client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_timeout=5,
                socket_connect_timeout=5
            )
            await client.ping()
        except Exception as e:
            logger.warning(f"⚠️ Redis connection failed: {e}. Using memory cache only.")
            self.redis_enabled = False
            return None

        logger.info("✅ Redis connection established")
        self.redis_client = client
        return client

    def _build_key(self, key: str, namespace: Optional[str]) -> str:
        return f"{namespace}:{key}" if namespace else key

    async def get(self, key: str, namespace: Optional[str] = None) -> Optional[Any]:
        """Look a value up and count the hit or miss"""
        value = await self._lookup(self._build_key(key, namespace))
        if value is None:
            self.misses += 1
        else:
            self.hits += 1
        return value

    async def _lookup(self, full_key: str) -> Optional[Any]:
        redis_client = await self._get_redis_client()
        if redis_client:
            try:
                raw = await redis_client.get(full_key)
                if raw:
                    return json.loads(raw)
            except Exception as e:
                logger.warning(f"Redis get error: {e}")

        entry = self.memory_cache.get(full_key)
        if entry is None:
            return None
        expires_at, value = entry
        if time.monotonic() >= expires_at:
            del self.memory_cache[full_key]
            return None
        return value

    async def set(self, key: str, value: Any, ttl: Optional[int] = None, namespace: Optional[str] = None) -> bool:
        full_key = self._build_key(key, namespace)
        ttl = ttl or settings.CACHE_TTL_SEARCH_RESULTS

        redis_client = await self._get_redis_client()
        if redis_client:
            try:
                await redis_client.setex(full_key, ttl, json.dumps(value, default=str))
            except Exception as e:
                logger.warning(f"Redis set error: {e}")

        self._remember(full_key, value, ttl)
        return True

    def _remember(self, full_key: str, value: Any, ttl: int):
        if full_key not in self.memory_cache and len(self.memory_cache) >= self.max_memory_cache_size:
            self.memory_cache.pop(next(iter(self.memory_cache)))
        self.memory_cache[full_key] = (time.monotonic() + ttl, value)

    async def delete(self, key: str, namespace: Optional[str] = None) -> bool:
        full_key = self._build_key(key, namespace)
        redis_client = await self._get_redis_client()
        if redis_client:
            try:
                await redis_client.delete(full_key)
            except Exception as e:
                logger.warning(f"Redis delete error: {e}")

        self.memory_cache.pop(full_key, None)
        return True

    async def health_check(self) -> str:
        test_key = "health_check"
        try:
            await self.set(test_key, "test", 5)
            value = await self._lookup(test_key)
            await self.delete(test_key)
        except Exception as e:
            logger.error(f"Cache health check failed: {e}")
            return "unhealthy"
        return "healthy" if value == "test" else "unhealthy"

    async def close(self):
        if self.redis_client:
            try:
                await self.redis_client.aclose()
            except Exception as e:
                logger.warning(f"Redis close error: {e}")
            self.redis_client = None
        self.memory_cache.clear()
