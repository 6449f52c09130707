"""Read-through cache-aside engine.

Every read checks the cache first and falls back to a loader on miss,
writing the loaded value back with a fixed TTL. Invalidation removes entries
without touching the store.

Per key:  ABSENT -> (load) -> PRESENT(ttl) -> (expiry | invalidate) -> ABSENT

Concurrency notes:
    * Concurrent misses for one key share a single in-flight load when
      single-flight is enabled. Across processes each miss still loads on its
      own (thundering herd on expiry is possible there).
    * An invalidate that lands while a load is in flight wins: the load's
      value is either never written or evicted again right after the write.
    * No lock is held across a cache or store call; the in-flight table is
      only touched between awaits on the event loop.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, TypeVar

from springbucks.errors import CacheUnavailableError, SerializationError, StoreError
from springbucks.services.cache import CacheBackend, make_key
from springbucks.services.codec import RecordCodec

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Load:
    """A store load in flight for one cache key."""

    def __init__(self, key: str):
        self.key = key
        self.invalidated = False
        self.future: asyncio.Future = asyncio.get_running_loop().create_future()
        # Nobody may be waiting on a failed load; mark its exception retrieved.
        self.future.add_done_callback(lambda f: f.cancelled() or f.exception())


class CacheAside:
    """Cache-aside reads over one cache namespace."""

    def __init__(
        self,
        cache: CacheBackend,
        namespace: str,
        ttl_ms: int,
        *,
        op_timeout_ms: int = 500,
        store_timeout_ms: int = 5000,
        strict: bool = False,
        cache_null_values: bool = False,
        single_flight: bool = True,
    ):
        if ttl_ms <= 0:
            raise ValueError("ttl_ms must be positive")
        self.cache = cache
        self.namespace = namespace
        self.ttl_ms = ttl_ms
        self.strict = strict
        self.cache_null_values = cache_null_values
        self.single_flight = single_flight
        self._op_timeout = op_timeout_ms / 1000
        self._store_timeout = store_timeout_ms / 1000
        self._loads: dict[str, list[_Load]] = {}

    def key(self, *args: Any) -> str:
        return make_key(self.namespace, *args)

    async def read(
        self,
        key: str,
        loader: Callable[[], Awaitable[T]],
        codec: RecordCodec[T],
    ) -> T:
        """Return the cached value for ``key``, loading it on a miss."""
        cached = await self._cache_call("get", self.cache.get(key))
        if cached is not None:
            try:
                value = codec.decode(cached)
            except SerializationError as e:
                logger.warning(f"Evicting unreadable cache entry {key}: {e}")
                await self._cache_call("evict", self.cache.evict(key))
            else:
                logger.debug(f"Cache hit {key}")
                return value

        logger.debug(f"Cache miss {key}")
        while self.single_flight:
            load = self._joinable(key)
            if load is None:
                break
            logger.debug(f"Joining in-flight load for {key}")
            try:
                return await asyncio.shield(load.future)
            except asyncio.CancelledError:
                if not load.future.cancelled():
                    raise
                # The leader was cancelled, not us: join the next load or lead one.
                logger.info(f"In-flight load for {key} was cancelled, retrying")
        return await self._lead(key, loader, codec)

    def _joinable(self, key: str) -> _Load | None:
        for load in self._loads.get(key, ()):
            if not load.invalidated and not load.future.cancelled():
                return load
        return None

    async def _lead(
        self,
        key: str,
        loader: Callable[[], Awaitable[T]],
        codec: RecordCodec[T],
    ) -> T:
        load = _Load(key)
        self._loads.setdefault(key, []).append(load)
        try:
            value = await self._load(load, loader, codec)
        except Exception as e:
            load.future.set_exception(e)
            raise
        else:
            load.future.set_result(value)
            return value
        finally:
            if not load.future.done():
                load.future.cancel()
            pending = self._loads.get(key, [])
            if load in pending:
                pending.remove(load)
            if not pending:
                self._loads.pop(key, None)

    async def invalidate(self, key: str | None = None) -> None:
        """Evict one key, or the whole namespace when ``key`` is None.

        Evicting an absent key is a no-op.
        """
        if key is None:
            for loads in self._loads.values():
                for load in loads:
                    load.invalidated = True
            logger.info(f"Invalidating cache namespace {self.namespace}")
            await self._cache_call(
                "evict_namespace", self.cache.evict_namespace(self.namespace)
            )
        else:
            for load in self._loads.get(key, ()):
                load.invalidated = True
            logger.info(f"Invalidating cache key {key}")
            await self._cache_call("evict", self.cache.evict(key))

    def _cacheable(self, value: Any) -> bool:
        if self.cache_null_values:
            return True
        if value is None:
            return False
        if isinstance(value, (list, tuple, dict, set)) and not value:
            return False
        return True

    async def _load(
        self,
        load: _Load,
        loader: Callable[[], Awaitable[T]],
        codec: RecordCodec[T],
    ) -> T:
        try:
            value = await asyncio.wait_for(loader(), self._store_timeout)
        except asyncio.TimeoutError:
            raise StoreError(
                f"store load for {load.key} timed out after {self._store_timeout}s"
            ) from None
        logger.info(f"Loaded {load.key} from store")

        if not self._cacheable(value):
            logger.debug(f"Not caching empty result for {load.key}")
            return value
        if load.invalidated:
            logger.info(f"Skipping cache write for {load.key}: invalidated during load")
            return value

        data = codec.encode(value)
        await self._cache_call("set", self.cache.set(load.key, data, self.ttl_ms))
        if load.invalidated:
            # The eviction raced ahead of our write; undo it.
            await self._cache_call("evict", self.cache.evict(load.key))
        return value

    async def _cache_call(self, operation: str, call: Awaitable[Any]) -> Any:
        """Run a cache operation under the timeout.

        Failures become CacheUnavailableError; outside strict mode they are
        logged and the operation reports no result.
        """
        try:
            return await asyncio.wait_for(call, self._op_timeout)
        except asyncio.TimeoutError as e:
            error = CacheUnavailableError(operation, e)
        except CacheUnavailableError as e:
            error = e
        if self.strict:
            raise error
        logger.warning(f"Cache {operation} failed in namespace {self.namespace}, using store: {error}")
        return None
