"""High-level client: base URL, default headers and one-call requests."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from types import TracebackType
from typing import Any, Mapping, TypeVar
from urllib.parse import urlparse, urlunparse

from .codec import Codec
from .deferred import Deferred
from .dispatch import Dispatcher
from .errors import RequestError
from .executor import OutcomeCallback, RequestExecutor
from .logger import LogLevel, create_logger
from .outcome import Outcome
from .request import HttpMethod, RequestSpec
from .transport import HttpTransport, Transport

S = TypeVar("S")
E = TypeVar("E")


@dataclass
class ClientOptions:
    base_url: str | None = None
    timeout: float = 60.0
    transport: Transport | None = None
    default_headers: Mapping[str, str] | None = None
    codec: Codec | None = None
    dispatcher: Dispatcher | None = None
    logger: object | None = None
    log_level: LogLevel = "info"


class ApiClient:
    """Primary entry point: issue requests and observe their outcomes."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout: float = 60.0,
        transport: Transport | None = None,
        default_headers: Mapping[str, str] | None = None,
        codec: Codec | None = None,
        dispatcher: Dispatcher | None = None,
        logger: object | None = None,
        log_level: LogLevel = "info",
    ) -> None:
        options = ClientOptions(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            default_headers=default_headers,
            codec=codec,
            dispatcher=dispatcher,
            logger=logger,
            log_level=log_level,
        )
        self.base_url = self._normalize_url(options.base_url) if options.base_url else None
        self._logger = create_logger(logger=options.logger, level=options.log_level)
        self._logger.info("Initializing ApiClient for %s", self.base_url or "absolute URLs")
        self._transport = options.transport or HttpTransport(
            timeout=options.timeout, logger=self._logger
        )
        self._default_headers = dict(options.default_headers or {})
        self._executor = RequestExecutor(
            self._transport,
            codec=options.codec,
            dispatcher=options.dispatcher,
            logger=self._logger,
        )

    @property
    def executor(self) -> RequestExecutor:
        return self._executor

    def build(
        self,
        url: str,
        *,
        method: HttpMethod | str = HttpMethod.GET,
        body: Any | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> RequestSpec:
        merged = dict(self._default_headers)
        merged.update(headers or {})
        return RequestSpec(url, method, body, merged).resolve(self.base_url)

    def request(
        self,
        url: str,
        success_shape: type[S],
        error_shape: type[E],
        *,
        method: HttpMethod | str = HttpMethod.GET,
        body: Any | None = None,
        headers: Mapping[str, str] | None = None,
        completion: OutcomeCallback[S, E] | None = None,
    ) -> "Deferred[S, E | RequestError] | asyncio.Task[None]":
        """Issue one request.

        With ``completion`` the outcome is passed to it and the background
        task is returned; otherwise a :class:`Deferred` is returned.
        """
        spec = self.build(url, method=method, body=body, headers=headers)
        if completion is not None:
            return self._executor.submit(spec, success_shape, error_shape, completion)
        return self._executor.deferred(spec, success_shape, error_shape)

    def get(
        self,
        url: str,
        success_shape: type[S],
        error_shape: type[E],
        *,
        headers: Mapping[str, str] | None = None,
    ) -> Deferred[S, E | RequestError]:
        spec = self.build(url, method=HttpMethod.GET, headers=headers)
        return self._executor.deferred(spec, success_shape, error_shape)

    def post(
        self,
        url: str,
        success_shape: type[S],
        error_shape: type[E],
        *,
        body: Any | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Deferred[S, E | RequestError]:
        spec = self.build(url, method=HttpMethod.POST, body=body, headers=headers)
        return self._executor.deferred(spec, success_shape, error_shape)

    def put(
        self,
        url: str,
        success_shape: type[S],
        error_shape: type[E],
        *,
        body: Any | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Deferred[S, E | RequestError]:
        spec = self.build(url, method=HttpMethod.PUT, body=body, headers=headers)
        return self._executor.deferred(spec, success_shape, error_shape)

    def delete(
        self,
        url: str,
        success_shape: type[S],
        error_shape: type[E],
        *,
        headers: Mapping[str, str] | None = None,
    ) -> Deferred[S, E | RequestError]:
        spec = self.build(url, method=HttpMethod.DELETE, headers=headers)
        return self._executor.deferred(spec, success_shape, error_shape)

    async def fetch(
        self,
        url: str,
        success_shape: type[S],
        error_shape: type[E],
        *,
        method: HttpMethod | str = HttpMethod.GET,
        body: Any | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Outcome[S, E]:
        spec = self.build(url, method=method, body=body, headers=headers)
        return await self._executor.execute(spec, success_shape, error_shape)

    async def close(self) -> None:
        await self._transport.close()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    def _normalize_url(self, base_url: str) -> str:
        parsed = urlparse(base_url)
        if not parsed.scheme:
            parsed = urlparse(f"http://{base_url}")
        elif parsed.scheme not in {"http", "https"}:
            # "localhost:8080" parses with the host as the scheme
            if parsed.netloc:
                raise ValueError(f"Unsupported scheme: {parsed.scheme}")
            parsed = urlparse(f"http://{base_url}")
        return urlunparse(parsed).rstrip("/")


__all__ = ["ApiClient", "ClientOptions"]
