"""Cache interface, key derivation and the in-memory TTL cache."""

import json
import threading
import time
from typing import Any, Callable, Protocol

EMPTY_KEY = "SimpleKey[]"
KEY_SEPARATOR = "::"


def make_key(namespace: str, *args: Any) -> str:
    """Derive ``{namespace}::{fingerprint}`` from call arguments.

    Structurally equal arguments always produce the same key; a call with no
    arguments maps to the fixed ``SimpleKey[]`` fingerprint.
    """
    if not args:
        return f"{namespace}{KEY_SEPARATOR}{EMPTY_KEY}"
    fingerprint = json.dumps(
        list(args), sort_keys=True, separators=(",", ":"), default=str
    )
    return f"{namespace}{KEY_SEPARATOR}{fingerprint}"


class CacheBackend(Protocol):
    """Volatile key -> bytes store with per-entry TTL.

    Implementations raise CacheUnavailableError when the substrate cannot be
    reached. Evicting an absent key is a no-op.
    """

    async def get(self, key: str) -> bytes | None: ...

    async def set(self, key: str, value: bytes, ttl_ms: int) -> None: ...

    async def evict(self, key: str) -> None: ...

    async def evict_namespace(self, namespace: str) -> None: ...

    async def close(self) -> None: ...


class MemoryCache:
    """Thread-safe in-memory cache with millisecond TTL support."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._store: dict[str, tuple[bytes, float]] = {}
        self._clock = clock
        self._lock = threading.Lock()

    async def get(self, key: str) -> bytes | None:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._store[key]
                return None
            return value

    async def set(self, key: str, value: bytes, ttl_ms: int) -> None:
        expires_at = self._clock() + ttl_ms / 1000
        with self._lock:
            self._store[key] = (value, expires_at)

    async def evict(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    async def evict_namespace(self, namespace: str) -> None:
        prefix = f"{namespace}{KEY_SEPARATOR}"
        with self._lock:
            for key in [k for k in self._store if k.startswith(prefix)]:
                del self._store[key]

    async def close(self) -> None:
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)


def build_cache(redis_url: str | None) -> CacheBackend:
    """Pick the cache adapter for the configured substrate."""
    if redis_url:
        from springbucks.services.redis_cache import RedisCache

        return RedisCache(redis_url)
    return MemoryCache()
