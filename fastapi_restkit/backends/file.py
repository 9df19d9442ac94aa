"""File-backed cache backend, one file per key."""

import json
import pickle
import time
from collections.abc import Callable
from logging import getLogger
from os import PathLike
from pathlib import Path
from typing import Any
from typing import Optional
from typing import Union

from fastapi_restkit.serializers import DECODE_ERRORS
from fastapi_restkit.timeutils import ttl_to_seconds
from fastapi_restkit.types import CACHE_FILE_SUFFIX
from fastapi_restkit.types import TTL

from .base import BaseCache

logger = getLogger(__name__)

_KIND_BYTES = "bytes"
_KIND_STR = "str"
_KIND_PICKLE = "pickle"


class FileCache(BaseCache):
    """File cache backend implementation.

    Each key maps to ``<directory>/<key>.cache``. The first line of the file is a
    JSON header holding the absolute expiry time and the payload kind; the rest
    of the file is the payload itself.

    Args:
        directory: Directory holding the cache files, created if missing
        default_ttl: TTL applied when ``set`` gets none (None = never expires)
        clock: Callable returning the current epoch time
    """

    def __init__(
        self,
        directory: Union[str, PathLike[str]],
        default_ttl: TTL = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.directory = Path(directory)
        self.default_ttl = ttl_to_seconds(default_ttl)
        self.clock = clock
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        self.validate_key(key)
        return self.directory / f"{key}{CACHE_FILE_SUFFIX}"

    def get(self, key: str, default: Any = None) -> Any:
        path = self._path(key)
        if not path.exists():
            return default

        try:
            raw = path.read_bytes()
            header, _, payload = raw.partition(b"\n")
            meta = json.loads(header)
            expires_at = meta.get("expires_at")
            kind = meta.get("kind", _KIND_BYTES)
            if expires_at is not None and not isinstance(expires_at, (int, float)):
                msg = f"expires_at must be a number, got {expires_at!r}"
                raise ValueError(msg)
        except (OSError, ValueError, AttributeError) as e:
            logger.warning("Unreadable cache file <%s>: %s", path, e)
            return default

        if expires_at is not None and expires_at < self.clock():
            logger.debug("Cache entry <%s> expired, removing", key)
            path.unlink(missing_ok=True)
            return default

        try:
            return _decode(kind, payload)
        except DECODE_ERRORS as e:
            logger.warning("Undecodable cache payload <%s>: %s", path, e)
            return default

    def set(self, key: str, value: Any, ttl: TTL = None) -> bool:
        path = self._path(key)
        seconds = ttl_to_seconds(ttl)
        if seconds is None:
            seconds = self.default_ttl
        expires_at = self.clock() + seconds if seconds is not None else None

        if isinstance(value, bytes):
            kind, payload = _KIND_BYTES, value
        elif isinstance(value, str):
            kind, payload = _KIND_STR, value.encode("utf-8")
        else:
            kind, payload = _KIND_PICKLE, pickle.dumps(value)

        header = json.dumps({"expires_at": expires_at, "kind": kind}).encode()
        try:
            path.write_bytes(header + b"\n" + payload)
        except OSError as e:
            logger.warning("Failed to write cache file <%s>: %s", path, e)
            return False

        logger.debug("Cached <%s> (expires_at=%s)", key, expires_at)
        return True

    def delete(self, key: str) -> bool:
        path = self._path(key)
        try:
            path.unlink()
        except OSError as e:
            logger.debug("Failed to delete cache file <%s>: %s", path, e)
            return False
        return True

    def clear(self) -> bool:
        for path in self.directory.glob(f"*{CACHE_FILE_SUFFIX}"):
            try:
                path.unlink()
            except OSError as e:
                logger.warning("Failed to delete cache file <%s>: %s", path, e)
        return True

    def has(self, key: str) -> bool:
        # Existence only; an expired entry still counts until get() removes it
        return self._path(key).exists()

    def expires_at(self, key: str) -> Optional[float]:
        """Return the stored expiry timestamp of an entry, or None if it never expires.

        Raises:
            FileNotFoundError: If there is no entry for the key
        """
        with self._path(key).open("rb") as f:
            header = f.readline()
        return json.loads(header).get("expires_at")


def _decode(kind: str, payload: bytes) -> Any:
    if kind == _KIND_STR:
        return payload.decode("utf-8")
    if kind == _KIND_PICKLE:
        return pickle.loads(payload)  # noqa: S301
    return payload
