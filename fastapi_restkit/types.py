"""Type definitions and type aliases for FastAPI-RestKit."""

from collections.abc import Awaitable
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING
from typing import Any
from typing import Union

if TYPE_CHECKING:
    from starlette.responses import Response

    from fastapi_restkit.request import EndpointRequest

# Suffix of every file written by the file cache
CACHE_FILE_SUFFIX = ".cache"

# Characters PSR-16 style caches reserve and refuse inside keys
RESERVED_KEY_CHARACTERS = frozenset("{}()/\\@:\x00")

# Separator used when joining parameter values into a fingerprint
FINGERPRINT_SEPARATOR = "."

TTL = Union[int, timedelta, None]

CallNext = Callable[["EndpointRequest"], Awaitable["Response"]]
Middleware = Callable[["EndpointRequest", CallNext], Any]
Handler = Callable[["EndpointRequest"], Any]
PermissionCallback = Callable[["EndpointRequest"], Any]


@dataclass
class CacheItem:
    """Cache item with optional expiry time.

    Args:
        value: The cached value
        expiry: Epoch timestamp when this cache item expires (None = never expires)
    """

    value: Any
    expiry: float | None = None
