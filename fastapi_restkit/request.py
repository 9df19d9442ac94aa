"""Request value passed through the endpoint pipeline."""

import json
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import Optional
from urllib.parse import parse_qsl

from fastapi import HTTPException
from fastapi import Request
from starlette.datastructures import Headers
from starlette.status import HTTP_400_BAD_REQUEST


@dataclass
class EndpointRequest:
    """Method, headers and merged parameters of an incoming request.

    Middlewares may rewrite parameters with ``set_param``; the handler sees the
    rewritten values.
    """

    method: str = "GET"
    params: dict[str, Any] = field(default_factory=dict)
    headers: Headers = field(default_factory=Headers)
    request: Optional[Request] = None

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        if not isinstance(self.headers, Headers):
            self.headers = Headers(headers=dict(self.headers))

    def get_header(self, name: str) -> Optional[str]:
        return self.headers.get(name)

    def get_method(self) -> str:
        return self.method

    def get_params(self) -> dict[str, Any]:
        return dict(self.params)

    def get_param(self, name: str, default: Any = None) -> Any:
        return self.params.get(name, default)

    def set_param(self, name: str, value: Any) -> None:
        self.params[name] = value

    @classmethod
    async def from_request(
        cls,
        request: Request,
        defaults: Optional[Mapping[str, Any]] = None,
    ) -> "EndpointRequest":
        """Build an endpoint request from a Starlette request.

        Parameters are merged from declared defaults, the query string, the
        body and the path, later sources overriding earlier ones.
        """
        params: dict[str, Any] = dict(defaults or {})
        params.update(request.query_params)
        params.update(await _read_body(request))
        params.update(request.path_params)

        return cls(
            method=request.method,
            params=params,
            headers=request.headers,
            request=request,
        )


async def _read_body(request: Request) -> dict[str, Any]:
    body = await request.body()
    if not body:
        return {}

    content_type = request.headers.get("content-type", "").split(";")[0].strip()

    if content_type == "application/json" or content_type.endswith("+json"):
        try:
            data = json.loads(body)
        except ValueError as e:
            raise HTTPException(
                status_code=HTTP_400_BAD_REQUEST,
                detail="Invalid JSON body passed.",
            ) from e
        return data if isinstance(data, dict) else {}

    if content_type == "application/x-www-form-urlencoded":
        return dict(parse_qsl(body.decode("utf-8", errors="replace"), keep_blank_values=True))

    return {}
