"""Endpoint middlewares for FastAPI-RestKit."""

from .config import CorsConfig
from .config import SanitizationConfig
from .cors import CorsMiddleware
from .factory import MiddlewareFactory
from .sanitization import SanitizationMiddleware

__all__ = [
    "CorsConfig",
    "CorsMiddleware",
    "MiddlewareFactory",
    "SanitizationConfig",
    "SanitizationMiddleware",
]
