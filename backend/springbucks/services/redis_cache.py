"""Redis cache adapter (redis.asyncio)."""

import logging

import redis.asyncio as redis
from redis.exceptions import RedisError

from springbucks.errors import CacheUnavailableError
from springbucks.services.cache import KEY_SEPARATOR

logger = logging.getLogger(__name__)


class RedisCache:
    """Cache backend on a shared Redis instance; expiry is enforced by Redis."""

    def __init__(self, redis_url: str, socket_timeout: float = 1.0, client=None):
        self.redis_url = redis_url
        self._socket_timeout = socket_timeout
        self._redis: redis.Redis | None = client

    @property
    def client(self) -> redis.Redis:
        if self._redis is None:
            self._redis = redis.from_url(
                self.redis_url,
                socket_connect_timeout=self._socket_timeout,
                socket_timeout=self._socket_timeout,
                health_check_interval=30,
            )
        return self._redis

    async def connect(self) -> None:
        """Open the connection pool and verify the server answers."""
        try:
            await self.client.ping()
        except RedisError as e:
            raise CacheUnavailableError("connect", e)
        logger.info(f"Connected to Redis at {self.redis_url}")

    async def get(self, key: str) -> bytes | None:
        try:
            return await self.client.get(key)
        except RedisError as e:
            raise CacheUnavailableError("get", e)

    async def set(self, key: str, value: bytes, ttl_ms: int) -> None:
        try:
            await self.client.set(key, value, px=ttl_ms)
        except RedisError as e:
            raise CacheUnavailableError("set", e)

    async def evict(self, key: str) -> None:
        try:
            await self.client.delete(key)
        except RedisError as e:
            raise CacheUnavailableError("evict", e)

    async def evict_namespace(self, namespace: str) -> None:
        pattern = f"{namespace}{KEY_SEPARATOR}*"
        try:
            batch = []
            async for key in self.client.scan_iter(match=pattern, count=100):
                batch.append(key)
                if len(batch) >= 100:
                    await self.client.delete(*batch)
                    batch.clear()
            if batch:
                await self.client.delete(*batch)
        except RedisError as e:
            raise CacheUnavailableError("evict_namespace", e)

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
            logger.info("Redis connection closed")
