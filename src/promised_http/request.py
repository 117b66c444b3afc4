"""Immutable description of one HTTP request."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping
from urllib.parse import urljoin, urlparse


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @classmethod
    def parse(cls, method: "HttpMethod | str") -> "HttpMethod":
        if isinstance(method, HttpMethod):
            return method
        try:
            return cls(method.upper())
        except (AttributeError, ValueError):
            raise ValueError(f"Unsupported HTTP method: {method!r}") from None


@dataclass(frozen=True)
class RequestSpec:
    """Target, method, optional body and headers of a single request."""

    url: str
    method: HttpMethod = HttpMethod.GET
    body: Any | None = None
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", HttpMethod.parse(self.method))
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @classmethod
    def get(cls, url: str, *, headers: Mapping[str, str] | None = None) -> "RequestSpec":
        return cls(url, HttpMethod.GET, headers=headers or {})

    @classmethod
    def post(
        cls, url: str, body: Any | None = None, *, headers: Mapping[str, str] | None = None
    ) -> "RequestSpec":
        return cls(url, HttpMethod.POST, body, headers or {})

    @classmethod
    def put(
        cls, url: str, body: Any | None = None, *, headers: Mapping[str, str] | None = None
    ) -> "RequestSpec":
        return cls(url, HttpMethod.PUT, body, headers or {})

    @classmethod
    def delete(cls, url: str, *, headers: Mapping[str, str] | None = None) -> "RequestSpec":
        return cls(url, HttpMethod.DELETE, headers=headers or {})

    @property
    def has_body(self) -> bool:
        return self.body is not None

    def with_headers(self, extra: Mapping[str, str]) -> "RequestSpec":
        merged = dict(self.headers)
        merged.update(extra)
        return replace(self, headers=merged)

    def resolve(self, base_url: str | None) -> "RequestSpec":
        """Join a relative URL onto ``base_url``; absolute URLs are kept."""
        if not base_url or urlparse(self.url).scheme:
            return self
        joined = urljoin(base_url.rstrip("/") + "/", self.url.lstrip("/"))
        return replace(self, url=joined)


__all__ = ["HttpMethod", "RequestSpec"]
