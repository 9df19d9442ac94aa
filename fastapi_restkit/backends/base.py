from abc import ABC
from abc import abstractmethod
from collections.abc import Iterable
from collections.abc import Mapping
from typing import Any

from fastapi_restkit.exceptions import InvalidCacheKeyError
from fastapi_restkit.types import RESERVED_KEY_CHARACTERS
from fastapi_restkit.types import TTL


class BaseCache(ABC):
    """Base class for all synchronous key-value caches.

    Storage failures are reported through boolean results, never raised.
    """

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Retrieve a cached value, or ``default`` if absent or expired."""

    @abstractmethod
    def set(self, key: str, value: Any, ttl: TTL = None) -> bool:
        """Store a value, optionally with a per-entry TTL."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove a value from the cache."""

    @abstractmethod
    def clear(self) -> bool:
        """Clear all cached values."""

    @abstractmethod
    def has(self, key: str) -> bool:
        """Check whether an entry exists for the key."""

    def get_multiple(self, keys: Iterable[str], default: Any = None) -> dict[str, Any]:
        return {key: self.get(key, default) for key in keys}

    def set_multiple(self, values: Mapping[str, Any], ttl: TTL = None) -> bool:
        success = True
        for key, value in values.items():
            success = success and self.set(key, value, ttl)
        return success

    def delete_multiple(self, keys: Iterable[str]) -> bool:
        success = True
        for key in keys:
            success = success and self.delete(key)
        return success

    @staticmethod
    def validate_key(key: str) -> None:
        if not isinstance(key, str) or not key:
            msg = f"Cache key must be a non-empty string, got {key!r}"
            raise InvalidCacheKeyError(msg)

        reserved = RESERVED_KEY_CHARACTERS.intersection(key)
        if reserved:
            msg = f"Cache key {key!r} contains reserved characters: {''.join(sorted(reserved))!r}"
            raise InvalidCacheKeyError(msg)
