import time
from collections.abc import Callable
from threading import Lock
from typing import Any

from fastapi_restkit.timeutils import ttl_to_seconds
from fastapi_restkit.types import TTL
from fastapi_restkit.types import CacheItem

from .base import BaseCache


class MemoryCache(BaseCache):
    """In-memory cache backend implementation."""

    def __init__(
        self,
        default_ttl: TTL = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.cache: dict[str, CacheItem] = {}
        self.lock = Lock()
        self.default_ttl = ttl_to_seconds(default_ttl)
        self.clock = clock

    def get(self, key: str, default: Any = None) -> Any:
        self.validate_key(key)
        with self.lock:
            cached_item = self.cache.get(key)
            if cached_item is None:
                return default
            if cached_item.expiry is not None and cached_item.expiry < self.clock():
                del self.cache[key]
                return default
            return cached_item.value

    def set(self, key: str, value: Any, ttl: TTL = None) -> bool:
        self.validate_key(key)
        seconds = ttl_to_seconds(ttl)
        if seconds is None:
            seconds = self.default_ttl
        with self.lock:
            expiry = self.clock() + seconds if seconds is not None else None
            self.cache[key] = CacheItem(value=value, expiry=expiry)
        return True

    def delete(self, key: str) -> bool:
        self.validate_key(key)
        with self.lock:
            return self.cache.pop(key, None) is not None

    def clear(self) -> bool:
        with self.lock:
            self.cache.clear()
        return True

    def has(self, key: str) -> bool:
        self.validate_key(key)
        with self.lock:
            return key in self.cache

    def cleanup(self) -> int:
        """Remove every expired entry and return how many were removed."""
        with self.lock:
            now = self.clock()
            expired_keys = [
                k
                for k, v in self.cache.items()
                if v.expiry is not None and v.expiry < now
            ]
            for key in expired_keys:
                self.cache.pop(key, None)
        return len(expired_keys)
