"""Delivery contexts for request outcomes."""

from __future__ import annotations

import asyncio
from typing import Callable

Dispatcher = Callable[[Callable[[], None]], None]


def immediate_dispatcher(fn: Callable[[], None]) -> None:
    """Run ``fn`` inline, on whatever context completed the request."""
    fn()


def loop_dispatcher(loop: asyncio.AbstractEventLoop) -> Dispatcher:
    """Schedule delivery on ``loop``; safe to call from any thread."""

    def dispatch(fn: Callable[[], None]) -> None:
        loop.call_soon_threadsafe(fn)

    return dispatch


__all__ = ["Dispatcher", "immediate_dispatcher", "loop_dispatcher"]
