"""One-call creation and registration of REST endpoints."""

from collections.abc import Mapping
from collections.abc import Sequence
from datetime import datetime
from datetime import timedelta
from typing import Any
from typing import Optional
from typing import Union

from fastapi import APIRouter
from fastapi import FastAPI

from fastapi_restkit.backends.base import BaseCache
from fastapi_restkit.endpoint import ArgSpec
from fastapi_restkit.endpoint import RestEndpoint
from fastapi_restkit.serializers import SerializationMode
from fastapi_restkit.types import Handler
from fastapi_restkit.types import Middleware
from fastapi_restkit.types import PermissionCallback


def create_endpoint(
    router: Union[APIRouter, FastAPI],
    namespace: str,
    route: str,
    callback: Handler,
    permission_callback: Optional[PermissionCallback] = None,
    args: Optional[Mapping[str, Union[ArgSpec, Mapping[str, Any]]]] = None,
    methods: Sequence[str] = ("GET",),
    middlewares: Sequence[Middleware] = (),
    cache: Optional[BaseCache] = None,
    serialization: Union[SerializationMode, int] = SerializationMode.RAW,
    cache_expires: Union[int, timedelta, datetime] = 3600,
) -> RestEndpoint:
    """Create an endpoint and register it on ``router``.

    Without a permission callback every request is allowed. See
    ``RestEndpoint`` for the meaning of the remaining arguments.

    Returns:
        The registered endpoint
    """
    endpoint = RestEndpoint(
        namespace,
        route,
        callback,
        permission_callback=permission_callback,
        args=args,
        methods=methods,
        middlewares=middlewares,
        cache=cache,
        serialization=serialization,
        cache_expires=cache_expires,
    )
    endpoint.register(router)
    return endpoint
