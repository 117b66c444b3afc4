"""HTTP transport built on top of httpx."""

from __future__ import annotations

from types import TracebackType

import httpx

from ..errors import TransportError
from ..logger import BoundLogger, create_logger
from .base import TransportRequest, TransportResponse


class HttpTransport:
    def __init__(
        self,
        *,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self._timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        self._owns_client = client is None
        self._logger = (logger or create_logger()).child("http")

    async def send(self, request: TransportRequest) -> TransportResponse:
        try:
            self._logger.debug(
                "HTTP %s %s bytes=%d",
                request.method.value,
                request.url,
                len(request.body or b""),
            )
            response = await self._client.request(
                request.method.value,
                request.url,
                content=request.body,
                headers=dict(request.headers),
            )
            body = response.content
            self._logger.debug(
                "HTTP <- %s status=%s bytes=%d",
                request.url,
                response.status_code,
                len(body),
            )
            return TransportResponse(
                status=response.status_code,
                body=body or None,
                headers={k.lower(): v for k, v in response.headers.items()},
            )
        except httpx.TimeoutException as exc:
            raise TransportError(f"HTTP request timeout after {self._timeout}s") from exc
        except httpx.RequestError as exc:
            raise TransportError(f"Cannot connect to {request.url}: {exc}") from exc
        except httpx.InvalidURL as exc:
            raise TransportError(f"Invalid URL {request.url!r}: {exc}") from exc

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()


__all__ = ["HttpTransport"]
