"""Cache backend implementations for FastAPI-RestKit."""

from .base import BaseCache
from .file import FileCache
from .memory import MemoryCache

__all__ = [
    "BaseCache",
    "FileCache",
    "MemoryCache",
]
