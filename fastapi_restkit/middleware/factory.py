from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Mapping
from collections.abc import Sequence
from typing import Any
from typing import Optional
from typing import Union

from .cors import CorsMiddleware
from .sanitization import SanitizationMiddleware


class MiddlewareFactory:
    """Build configured middlewares for common API needs."""

    @staticmethod
    def cors(
        allowed_origins: Sequence[str] = ("*",),
        allowed_methods: Sequence[str] = ("GET", "POST", "PUT", "DELETE", "OPTIONS"),
        allowed_headers: Sequence[str] = ("Content-Type", "Authorization"),
        max_age: int = 3600,
    ) -> CorsMiddleware:
        """Create a CORS middleware.

        Args:
            allowed_origins: Allowed origins, ``("*",)`` allows any origin
            allowed_methods: Methods advertised on preflight requests
            allowed_headers: Headers advertised on preflight requests
            max_age: Seconds a browser may cache the preflight response
        """
        return CorsMiddleware(allowed_origins, allowed_methods, allowed_headers, max_age)

    @staticmethod
    def sanitization(
        rules: Optional[Mapping[str, Callable[[str], Any]]] = None,
        strip_tags: bool = True,
        encode_special_chars: bool = True,
        allowed_html_tags: Optional[Union[Mapping[str, Any], Iterable[str]]] = None,
        encoding: str = "utf-8",
    ) -> SanitizationMiddleware:
        """Create a request sanitization middleware.

        Args:
            rules: Custom rules keyed by dotted parameter path
            strip_tags: Whether to strip HTML tags from input
            encode_special_chars: Whether to encode special characters when tags are kept
            allowed_html_tags: Tags (and their attributes) kept when stripping
            encoding: Encoding string values must be representable in
        """
        return SanitizationMiddleware(
            rules, strip_tags, encode_special_chars, allowed_html_tags, encoding
        )
