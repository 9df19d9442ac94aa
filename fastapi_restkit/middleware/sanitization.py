import html
import re
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Mapping
from typing import Any
from typing import Optional
from typing import Union

import nh3
from fastapi import Response

from fastapi_restkit.request import EndpointRequest
from fastapi_restkit.types import CallNext

from .config import SanitizationConfig

# Tags whose content is dropped along with the tag itself
_CONTENT_TAGS = frozenset({"script", "style"})

_WHITESPACE_RUN = re.compile(r"[\r\n\t ]+")
# "&" not already starting a named or numeric character reference
_BARE_AMPERSAND = re.compile(r"&(?!(?:[A-Za-z][A-Za-z0-9]*|#[0-9]+|#[xX][0-9A-Fa-f]+);)")
_SPECIAL_CHARS = {"<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&apos;"}


def strip_all_tags(value: str) -> str:
    """Remove every HTML tag, drop script/style bodies and collapse whitespace.

    The result is plain text: characters outside tags, entity references
    included, come back exactly as they were given.
    """
    # Escaping "&" first keeps input entities from being decoded by the parser
    text = nh3.clean(
        value.replace("&", "&amp;"),
        tags=set(),
        clean_content_tags=set(_CONTENT_TAGS),
    )
    return _WHITESPACE_RUN.sub(" ", html.unescape(text)).strip()


def clean_html(value: str, allowed: Mapping[str, Iterable[str]]) -> str:
    """Keep only the allowed tags and, per tag, the allowed attributes.

    The result is HTML, so text keeps the escaping the cleaner applies to it.
    """
    tags = set(allowed)
    return nh3.clean(
        value,
        tags=tags,
        clean_content_tags=set(_CONTENT_TAGS - tags),
        attributes={tag: set(attrs) for tag, attrs in allowed.items() if attrs},
        link_rel=None,
    )


def encode_special_chars(value: str) -> str:
    """HTML-encode special characters, leaving existing entities alone."""
    value = _BARE_AMPERSAND.sub("&amp;", value)
    return "".join(_SPECIAL_CHARS.get(char, char) for char in value)


class SanitizationMiddleware:
    """Sanitize every string parameter of a request before the handler sees it.

    Nested dicts and lists are walked; custom rules are looked up by the dotted
    path of the value (``meta.title``, ``tags.0``). Non-string values are left
    untouched. A rule that raises aborts the request.
    """

    def __init__(
        self,
        rules: Optional[Mapping[str, Callable[[str], Any]]] = None,
        strip_tags: bool = True,
        encode_special_chars: bool = True,
        allowed_html_tags: Optional[Union[Mapping[str, Any], Iterable[str]]] = None,
        encoding: str = "utf-8",
    ) -> None:
        self.config = SanitizationConfig(
            rules=dict(rules or {}),
            strip_tags=strip_tags,
            encode_special_chars=encode_special_chars,
            allowed_html_tags=allowed_html_tags,
            encoding=encoding,
        )

    async def __call__(self, request: EndpointRequest, call_next: CallNext) -> Response:
        sanitized = self.sanitize_data(request.get_params())
        for key, value in sanitized.items():
            request.set_param(key, value)

        return await call_next(request)

    def sanitize_data(self, data: Any, path: str = "") -> Any:
        if isinstance(data, Mapping):
            return {
                key: self.sanitize_data(value, f"{path}.{key}" if path else str(key))
                for key, value in data.items()
            }

        if isinstance(data, list):
            return [
                self.sanitize_data(value, f"{path}.{index}" if path else str(index))
                for index, value in enumerate(data)
            ]

        if isinstance(data, str):
            return self.sanitize_value(data, path)

        return data

    def sanitize_value(self, value: str, path: str) -> Any:
        value = value.strip()

        try:
            value.encode(self.config.encoding)
        except UnicodeError:
            value = ""

        rule = self.config.rules.get(path)
        if rule is not None:
            value = rule(value)
            if not isinstance(value, str):
                return value

        if self.config.strip_tags:
            if self.config.allowed_html_tags:
                value = clean_html(value, self.config.allowed_html_tags)
            else:
                value = strip_all_tags(value)
        elif self.config.encode_special_chars:
            value = encode_special_chars(value)

        return value
