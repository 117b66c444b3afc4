"""Single-request execution with success/error dual decoding."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, TypeVar

from .codec import Codec, JsonCodec
from .deferred import Deferred, Reject, Resolve
from .dispatch import Dispatcher, loop_dispatcher
from .errors import (
    CodecError,
    EncodingError,
    NoDataError,
    RequestError,
    TransportError,
    UnexpectedFormatError,
)
from .logger import BoundLogger, LogLevel, create_logger
from .outcome import Failure, Outcome, Success
from .request import RequestSpec
from .transport import Transport, TransportRequest

S = TypeVar("S")
E = TypeVar("E")

OutcomeCallback = Callable[[Outcome[S, E]], None]


class RequestExecutor:
    """Sends one request and reports exactly one :class:`Outcome` for it.

    The body is decoded as ``success_shape`` first and ``error_shape``
    second; the HTTP status code is never consulted. Infrastructure failures
    are reported as ``Failure`` values holding a :class:`RequestError`.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        codec: Codec | None = None,
        dispatcher: Dispatcher | None = None,
        logger: object | None = None,
        log_level: LogLevel = "info",
    ) -> None:
        self._transport = transport
        self._codec = codec or JsonCodec()
        self._dispatcher = dispatcher
        self._logger = create_logger(logger=logger, level=log_level).child("executor")
        self._in_flight: set[asyncio.Task[None]] = set()

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    async def execute(
        self,
        spec: RequestSpec,
        success_shape: type[S],
        error_shape: type[E],
    ) -> Outcome[S, E]:
        try:
            request = self._build_request(spec)
        except CodecError as exc:
            self._logger.debug("Cannot encode body for %s %s: %s", spec.method.value, spec.url, exc)
            return Failure(EncodingError(context=exc))

        self._logger.debug("-> %s %s", request.method.value, request.url)
        try:
            response = await self._transport.send(request)
        except TransportError as exc:
            self._logger.warn("%s %s failed: %s", request.method.value, request.url, exc)
            return Failure(exc)
        except Exception as exc:
            self._logger.error(
                "%s %s failed inside the transport", request.method.value, request.url, exc_info=True
            )
            return Failure(TransportError(f"{type(exc).__name__}: {exc}", context=exc))

        if not response.has_data:
            self._logger.debug("<- %s status=%s without body", request.url, response.status)
            return Failure(NoDataError(context=response.status))

        return self._decode(response.body or b"", success_shape, error_shape)

    def submit(
        self,
        spec: RequestSpec,
        success_shape: type[S],
        error_shape: type[E],
        callback: OutcomeCallback[S, E],
    ) -> "asyncio.Task[None]":
        """Run the request in the background and hand its outcome to ``callback``.

        Must be called with an event loop running. Delivery goes through the
        configured dispatcher, or the calling loop when none was given, so the
        callback never runs inside ``submit`` itself.
        """
        if not callable(callback):
            raise TypeError(f"callback must be callable, got {type(callback).__name__}")
        loop = asyncio.get_running_loop()
        dispatcher = self._dispatcher or loop_dispatcher(loop)
        task = loop.create_task(self._run(spec, success_shape, error_shape, callback, dispatcher))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    def deferred(
        self,
        spec: RequestSpec,
        success_shape: type[S],
        error_shape: type[E],
    ) -> Deferred[S, E | RequestError]:
        """Like :meth:`submit`, but settle a :class:`Deferred` with the outcome."""

        def start(resolve: Resolve[S], reject: Reject[E | RequestError]) -> None:
            def settle(outcome: Outcome[S, E]) -> None:
                if isinstance(outcome, Success):
                    resolve(outcome.value)
                else:
                    reject(outcome.error)

            def reject_if_crashed(task: "asyncio.Task[None]") -> None:
                # no-op once settle() has run
                if task.cancelled():
                    reject(TransportError("Request cancelled"))
                    return
                exc = task.exception()
                if exc is not None:
                    reject(TransportError(f"{type(exc).__name__}: {exc}", context=exc))

            task = self.submit(spec, success_shape, error_shape, settle)
            task.add_done_callback(reject_if_crashed)

        return Deferred(start)

    async def _run(
        self,
        spec: RequestSpec,
        success_shape: type[S],
        error_shape: type[E],
        callback: OutcomeCallback[S, E],
        dispatcher: Dispatcher,
    ) -> None:
        outcome = await self.execute(spec, success_shape, error_shape)
        dispatcher(lambda: self._deliver(spec, callback, outcome))

    def _deliver(
        self,
        spec: RequestSpec,
        callback: OutcomeCallback[S, E],
        outcome: Outcome[S, E],
    ) -> None:
        try:
            callback(outcome)
        except Exception:
            self._logger.error(
                "Outcome callback for %s %s raised", spec.method.value, spec.url, exc_info=True
            )
            raise

    def _build_request(self, spec: RequestSpec) -> TransportRequest:
        headers = dict(spec.headers)
        body: bytes | None = None
        if spec.has_body:
            body = self._codec.encode(spec.body)
            headers["Content-Type"] = self._codec.content_type
        return TransportRequest(method=spec.method, url=spec.url, headers=headers, body=body)

    def _decode(self, body: bytes, success_shape: type[S], error_shape: type[E]) -> Outcome[S, E]:
        matched, value = self._try_decode(body, success_shape)
        if matched:
            return Success(value)

        matched, value = self._try_decode(body, error_shape)
        if matched:
            self._logger.debug("Body decoded as %s", _shape_name(error_shape))
            return Failure(value)

        self._logger.debug(
            "Body matches neither %s nor %s", _shape_name(success_shape), _shape_name(error_shape)
        )
        return Failure(UnexpectedFormatError(context=body))

    def _try_decode(self, body: bytes, shape: type[Any]) -> tuple[bool, Any]:
        try:
            return True, self._codec.decode(body, shape)
        except CodecError as exc:
            self._logger.trace("Body rejected by %s: %s", _shape_name(shape), exc)
            return False, None


def _shape_name(shape: object) -> str:
    return getattr(shape, "__name__", None) or repr(shape)


__all__ = ["OutcomeCallback", "RequestExecutor"]
