"""Middleware configuration settings."""

from collections.abc import Callable
from collections.abc import Mapping
from typing import Any
from typing import Optional

from pydantic import BaseModel
from pydantic import Field
from pydantic import field_validator


class CorsConfig(BaseModel):
    """CORS middleware configuration settings."""

    allowed_origins: list[str] = Field(
        default=["*"],
        description="Origins echoed back in Access-Control-Allow-Origin (['*'] = any origin)",
    )
    allowed_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        description="Methods advertised on preflight requests",
    )
    allowed_headers: list[str] = Field(
        default=["Content-Type", "Authorization"],
        description="Request headers advertised on preflight requests",
    )
    max_age: int = Field(
        default=3600,
        ge=0,
        description="Seconds a browser may cache the preflight response",
    )

    @property
    def allow_all_origins(self) -> bool:
        return self.allowed_origins == ["*"]


class SanitizationConfig(BaseModel):
    """Sanitization middleware configuration settings."""

    rules: dict[str, Callable[[str], Any]] = Field(
        default_factory=dict,
        description="Custom rules keyed by dotted parameter path, e.g. 'meta.title'",
    )
    strip_tags: bool = Field(
        default=True,
        description="Whether to strip HTML tags (or clean to allowed_html_tags)",
    )
    encode_special_chars: bool = Field(
        default=True,
        description="Whether to HTML-encode special characters when tags are not stripped",
    )
    allowed_html_tags: Optional[dict[str, set[str]]] = Field(
        default=None,
        description="Tags kept when stripping, mapped to their allowed attributes",
    )
    encoding: str = Field(
        default="utf-8",
        description="Encoding string values must be representable in",
    )

    @field_validator("allowed_html_tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: Any) -> Any:
        # Accept a list of tag names, {tag: [attributes]} or {tag: {attribute: True}}
        if value is None:
            return None
        if not isinstance(value, Mapping):
            return {tag: set() for tag in value}
        return {
            tag: {name for name, allowed in attrs.items() if allowed}
            if isinstance(attrs, Mapping)
            else set(attrs or ())
            for tag, attrs in value.items()
        }
