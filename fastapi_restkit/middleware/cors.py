from collections.abc import Sequence

from fastapi import Response

from fastapi_restkit.request import EndpointRequest
from fastapi_restkit.types import CallNext

from .config import CorsConfig


class CorsMiddleware:
    """Add CORS headers to endpoint responses.

    The rest of the chain always runs first; headers are added to whatever
    response it produced. Preflight (OPTIONS) requests also get the allowed
    methods, headers and max age.
    """

    def __init__(
        self,
        allowed_origins: Sequence[str] = ("*",),
        allowed_methods: Sequence[str] = ("GET", "POST", "PUT", "DELETE", "OPTIONS"),
        allowed_headers: Sequence[str] = ("Content-Type", "Authorization"),
        max_age: int = 3600,
    ) -> None:
        self.config = CorsConfig(
            allowed_origins=list(allowed_origins),
            allowed_methods=list(allowed_methods),
            allowed_headers=list(allowed_headers),
            max_age=max_age,
        )

    async def __call__(self, request: EndpointRequest, call_next: CallNext) -> Response:
        response = await call_next(request)

        origin = request.get_header("origin")
        if origin and (
            self.config.allow_all_origins or origin in self.config.allowed_origins
        ):
            response.headers["Access-Control-Allow-Origin"] = origin

        if request.get_method() == "OPTIONS":
            response.headers["Access-Control-Allow-Methods"] = ", ".join(
                self.config.allowed_methods
            )
            response.headers["Access-Control-Allow-Headers"] = ", ".join(
                self.config.allowed_headers
            )
            response.headers["Access-Control-Max-Age"] = str(self.config.max_age)

        response.headers["Access-Control-Allow-Credentials"] = "true"

        return response
