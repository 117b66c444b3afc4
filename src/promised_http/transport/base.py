"""Common transport abstractions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Protocol, runtime_checkable

from ..request import HttpMethod


@dataclass(frozen=True)
class TransportRequest:
    method: HttpMethod
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes | None = None


@dataclass
class TransportResponse:
    status: int
    body: bytes | None
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def has_data(self) -> bool:
        return bool(self.body)


@runtime_checkable
class Transport(Protocol):
    async def send(self, request: TransportRequest) -> TransportResponse:
        """Deliver ``request``; raise ``TransportError`` when no response arrives."""
        ...

    async def close(self) -> None: ...


__all__ = ["Transport", "TransportRequest", "TransportResponse"]
