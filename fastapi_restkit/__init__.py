"""FastAPI-RestKit: cached, middleware-driven REST endpoints for FastAPI."""

from .backends import BaseCache as BaseCache
from .backends import FileCache as FileCache
from .backends import MemoryCache as MemoryCache
from .endpoint import ArgSpec as ArgSpec
from .endpoint import RestEndpoint as RestEndpoint
from .facade import create_endpoint as create_endpoint
from .middleware import CorsMiddleware as CorsMiddleware
from .middleware import MiddlewareFactory as MiddlewareFactory
from .middleware import SanitizationMiddleware as SanitizationMiddleware
from .request import EndpointRequest as EndpointRequest
from .serializers import SerializationMode as SerializationMode

__all__ = [
    "ArgSpec",
    "BaseCache",
    "CorsMiddleware",
    "EndpointRequest",
    "FileCache",
    "MemoryCache",
    "MiddlewareFactory",
    "RestEndpoint",
    "SanitizationMiddleware",
    "SerializationMode",
    "create_endpoint",
]
