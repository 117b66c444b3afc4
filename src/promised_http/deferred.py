"""Settle-once value with chainable, single-slot observers."""

from __future__ import annotations

import asyncio
import threading
from enum import Enum
from typing import Callable, Generic, TypeVar

from .outcome import Failure, Outcome, Success

V = TypeVar("V")
F = TypeVar("F")

Resolve = Callable[[V], None]
Reject = Callable[[F], None]


class DeferredState(Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class Deferred(Generic[V, F]):
    """An asynchronous outcome that settles exactly once.

    ``executor`` is called right away with ``resolve`` and ``reject``. The
    first of them to be called fixes the outcome; any later call is ignored.

    Each observer category keeps only its latest callback. Registering after
    settlement invokes the callback immediately with the stored outcome.
    On settlement the success (or failure) callback runs before the settled
    callback, on the thread that settled the value.
    """

    def __init__(self, executor: Callable[[Resolve[V], Reject[F]], None]) -> None:
        self._lock = threading.RLock()
        self._outcome: Outcome[V, F] | None = None
        self._on_success: Callable[[V], None] | None = None
        self._on_failure: Callable[[F], None] | None = None
        self._on_settled: Callable[[], None] | None = None
        self._waiters: list[Callable[[Outcome[V, F]], None]] = []
        executor(self._resolve, self._reject)

    @classmethod
    def resolved(cls, value: V) -> "Deferred[V, F]":
        return cls(lambda resolve, _reject: resolve(value))

    @classmethod
    def rejected(cls, error: F) -> "Deferred[V, F]":
        return cls(lambda _resolve, reject: reject(error))

    @classmethod
    def from_outcome(cls, outcome: Outcome[V, F]) -> "Deferred[V, F]":
        if isinstance(outcome, Success):
            return cls.resolved(outcome.value)
        return cls.rejected(outcome.error)

    @property
    def state(self) -> DeferredState:
        with self._lock:
            if self._outcome is None:
                return DeferredState.PENDING
            if isinstance(self._outcome, Success):
                return DeferredState.SUCCEEDED
            return DeferredState.FAILED

    @property
    def is_settled(self) -> bool:
        return self.state is not DeferredState.PENDING

    @property
    def outcome(self) -> Outcome[V, F] | None:
        with self._lock:
            return self._outcome

    def on_success(self, callback: Callable[[V], None]) -> "Deferred[V, F]":
        _require_callable(callback)
        with self._lock:
            self._on_success = callback
            outcome = self._outcome
        if isinstance(outcome, Success):
            callback(outcome.value)
        return self

    def on_failure(self, callback: Callable[[F], None]) -> "Deferred[V, F]":
        _require_callable(callback)
        with self._lock:
            self._on_failure = callback
            outcome = self._outcome
        if isinstance(outcome, Failure):
            callback(outcome.error)
        return self

    def on_settled(self, callback: Callable[[], None]) -> "Deferred[V, F]":
        _require_callable(callback)
        with self._lock:
            self._on_settled = callback
            outcome = self._outcome
        if outcome is not None:
            callback()
        return self

    def as_future(self, loop: asyncio.AbstractEventLoop | None = None) -> "asyncio.Future[Outcome[V, F]]":
        """Expose the outcome as a future on ``loop`` without touching the observer slots."""
        loop = loop or asyncio.get_running_loop()
        future: asyncio.Future[Outcome[V, F]] = loop.create_future()

        def complete(outcome: Outcome[V, F]) -> None:
            if not future.done():
                future.set_result(outcome)

        def waiter(outcome: Outcome[V, F]) -> None:
            loop.call_soon_threadsafe(complete, outcome)

        with self._lock:
            settled = self._outcome
            if settled is None:
                self._waiters.append(waiter)
        if settled is not None:
            future.set_result(settled)
        return future

    def _resolve(self, value: V) -> None:
        self._settle(Success(value))

    def _reject(self, error: F) -> None:
        self._settle(Failure(error))

    def _settle(self, outcome: Outcome[V, F]) -> None:
        with self._lock:
            if self._outcome is not None:
                return
            self._outcome = outcome
            on_success = self._on_success
            on_failure = self._on_failure
            on_settled = self._on_settled
            waiters, self._waiters = self._waiters, []

        # a raising observer must not starve the ones after it
        try:
            if isinstance(outcome, Success):
                if on_success is not None:
                    on_success(outcome.value)
            elif on_failure is not None:
                on_failure(outcome.error)
        finally:
            try:
                if on_settled is not None:
                    on_settled()
            finally:
                for waiter in waiters:
                    waiter(outcome)

    def __repr__(self) -> str:
        return f"<Deferred {self.state.value}>"


def _require_callable(callback: object) -> None:
    if not callable(callback):
        raise TypeError(f"callback must be callable, got {type(callback).__name__}")


__all__ = ["Deferred", "DeferredState"]
