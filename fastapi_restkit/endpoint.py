import hashlib
import inspect
import pickle
from collections.abc import Callable
from collections.abc import Mapping
from collections.abc import Sequence
from datetime import datetime
from datetime import timedelta
from logging import getLogger
from typing import Any
from typing import Optional
from typing import Union

from fastapi import APIRouter
from fastapi import FastAPI
from fastapi import HTTPException
from fastapi import Request
from fastapi import Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator
from starlette.status import HTTP_200_OK
from starlette.status import HTTP_400_BAD_REQUEST
from starlette.status import HTTP_403_FORBIDDEN

from fastapi_restkit.backends.base import BaseCache
from fastapi_restkit.exceptions import RestKitError
from fastapi_restkit.request import EndpointRequest
from fastapi_restkit.serializers import DECODE_ERRORS
from fastapi_restkit.serializers import SerializationMode
from fastapi_restkit.serializers import get_serializer
from fastapi_restkit.timeutils import expires_to_seconds
from fastapi_restkit.types import FINGERPRINT_SEPARATOR
from fastapi_restkit.types import CallNext
from fastapi_restkit.types import Handler
from fastapi_restkit.types import Middleware
from fastapi_restkit.types import PermissionCallback

logger = getLogger(__name__)


class ArgSpec(BaseModel):
    """Schema entry for one endpoint argument."""

    required: bool = Field(
        default=False,
        description="Whether requests missing this argument are rejected with 400",
    )
    default: Any = Field(
        default=None,
        description="Value used when the request does not supply the argument",
    )
    description: Optional[str] = Field(default=None, description="Argument description")


class EndpointConfig(BaseModel):
    """Endpoint configuration, immutable once built."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    namespace: str = Field(..., min_length=1, description="Route namespace, e.g. 'myplugin/v1'")
    route: str = Field(default="", description="Route below the namespace, e.g. '/items'")
    methods: tuple[str, ...] = Field(
        default=("GET",),
        min_length=1,
        description="HTTP methods the route accepts",
    )
    args: dict[str, ArgSpec] = Field(
        default_factory=dict,
        description="Argument schema: defaults and required parameters",
    )
    middlewares: tuple[Callable[..., Any], ...] = Field(
        default=(),
        description="Middlewares run in order, each taking (request, call_next)",
    )
    cache: Optional[BaseCache] = Field(
        default=None,
        description="Cache for structured responses (None = no response caching)",
    )
    serialization: SerializationMode = Field(
        default=SerializationMode.RAW,
        description="Encoding of cached responses",
    )
    cache_expires: int = Field(
        default=3600,
        description="Cache TTL in seconds; a datetime is converted to the seconds left until it",
    )

    @field_validator("methods", mode="before")
    @classmethod
    def _upper_methods(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = (value,)
        return tuple(str(method).upper() for method in value)

    @field_validator("cache_expires", mode="before")
    @classmethod
    def _expires_to_seconds(cls, value: Any) -> int:
        return expires_to_seconds(value)

    @property
    def path(self) -> str:
        route = self.route.strip("/")
        namespace = self.namespace.strip("/")
        return f"/{namespace}/{route}" if route else f"/{namespace}"


def fingerprint(params: Mapping[str, Any]) -> str:
    """Hash the parameter values, in order, into a cache key."""
    joined = FINGERPRINT_SEPARATOR.join(str(value) for value in params.values())
    return hashlib.md5(joined.encode()).hexdigest()  # noqa: S324


async def invoke(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Call a sync or async callable and return its result."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        return await result
    return result


def allow_all(request: EndpointRequest) -> bool:
    return True


class RestEndpoint:
    """A REST route backed by a handler, a middleware chain and an optional cache.

    Args:
        namespace: Route namespace, e.g. ``myplugin/v1``
        route: Route below the namespace
        callback: Handler receiving an ``EndpointRequest``; a dict or list result
            is cached and sent as JSON, a ``Response`` is sent as is
        permission_callback: Predicate run before the pipeline; False means 403
        args: Argument schema, name to ``ArgSpec`` (or a dict of its fields)
        methods: HTTP methods the route accepts
        middlewares: Callables ``(request, call_next) -> Response``, outermost first
        cache: Cache used for structured responses
        serialization: Encoding of cached responses
        cache_expires: Cache TTL in seconds, as a timedelta, or as a target datetime

    Raises:
        UnsupportedSerializationModeError: If the serialization mode is unavailable
        pydantic.ValidationError: If any other setting is invalid
    """

    def __init__(
        self,
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
    ) -> None:
        self.config = EndpointConfig(
            namespace=namespace,
            route=route,
            methods=methods,
            args=dict(args or {}),
            middlewares=tuple(middlewares),
            cache=cache,
            serialization=serialization,
            cache_expires=cache_expires,
        )
        self.callback = callback
        self.permission_callback = permission_callback or allow_all
        self.serializer = get_serializer(self.config.serialization)

    @property
    def path(self) -> str:
        return self.config.path

    def register(self, router: Union[APIRouter, FastAPI]) -> None:
        """Add the endpoint's route to a router or application."""
        router.add_api_route(
            self.path,
            self.endpoint,
            methods=list(self.config.methods),
            name=f"{self.config.namespace}:{self.config.route}",
        )
        logger.info(
            "Registered endpoint <%s> %s",
            self.path,
            ", ".join(self.config.methods),
        )

    async def endpoint(self, request: Request) -> Response:
        """Route handler: build the request, check arguments and permission, run the pipeline."""
        defaults = {
            name: spec.default
            for name, spec in self.config.args.items()
            if spec.default is not None
        }
        endpoint_request = await EndpointRequest.from_request(request, defaults)

        missing = [
            name
            for name, spec in self.config.args.items()
            if spec.required and name not in endpoint_request.params
        ]
        if missing:
            raise HTTPException(
                status_code=HTTP_400_BAD_REQUEST,
                detail=f"Missing parameter(s): {', '.join(missing)}",
            )

        if not await invoke(self.permission_callback, endpoint_request):
            raise HTTPException(
                status_code=HTTP_403_FORBIDDEN,
                detail="Sorry, you are not allowed to do that.",
            )

        return await self.handle(endpoint_request)

    async def handle(self, request: EndpointRequest) -> Response:
        """Run the cache lookup, the middleware chain and the handler for a request."""
        cache = self.config.cache
        key: Optional[str] = None
        cached_response: Optional[Response] = None

        if cache is not None:
            key = fingerprint(request.params)
            cached_response = self._cached_response(cache, key)

        async def core(req: EndpointRequest) -> Response:
            if cached_response is not None:
                return cached_response

            result = await invoke(self.callback, req)
            if isinstance(result, Response):
                return result

            if isinstance(result, (dict, list)):
                if cache is not None and key is not None:
                    self._store(cache, key, result)
                return self.get_response(result)

            return JSONResponse(content=jsonable_encoder(result))

        return await self._build_chain(core)(request)

    def _cached_response(self, cache: BaseCache, key: str) -> Optional[Response]:
        payload = cache.get(key)
        if not payload:
            logger.debug("Cache miss <%s> for <%s>", key, self.path)
            return None

        try:
            data = self.serializer.loads(payload)
        except DECODE_ERRORS as e:
            logger.warning("Discarding undecodable cache entry <%s>: %s", key, e)
            return None

        logger.debug("Cache hit <%s> for <%s>", key, self.path)
        return self.get_response(data)

    def _store(self, cache: BaseCache, key: str, data: Any) -> None:
        try:
            payload = self.serializer.dumps(data)
        except (ValueError, TypeError, pickle.PicklingError) as e:
            logger.warning("Response for <%s> is not serializable, not caching: %s", self.path, e)
            return

        if not cache.set(key, payload, self.config.cache_expires):
            logger.warning("Failed to cache response <%s> for <%s>", key, self.path)

    def _build_chain(self, core: CallNext) -> CallNext:
        call_next = core
        for middleware in reversed(self.config.middlewares):
            call_next = _link(middleware, call_next)
        return call_next

    def get_response(self, data: Any, status: int = HTTP_200_OK) -> Response:
        return JSONResponse(content=jsonable_encoder(data), status_code=status)


def _link(middleware: Middleware, call_next: CallNext) -> CallNext:
    async def dispatch(request: EndpointRequest) -> Response:
        response = await invoke(middleware, request, call_next)
        if not isinstance(response, Response):
            msg = f"Middleware {middleware!r} returned {type(response).__name__}, expected a Response"
            raise RestKitError(msg)
        return response

    return dispatch
