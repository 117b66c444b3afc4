"""Errors produced while shaping a request or its response."""

from __future__ import annotations

from typing import Any


class RequestError(Exception):
    """Base error for every infrastructure failure the executor reports."""

    def __init__(self, message: str, *, context: Any | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.message == other.message  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self), self.message))


class EncodingError(RequestError):
    """Raised when the request body cannot be serialized."""

    def __init__(self, message: str = "Encoding error", *, context: Any | None = None) -> None:
        super().__init__(message, context=context)


class TransportError(RequestError):
    """Raised when the request never produced a response."""


class NoDataError(RequestError):
    """Raised when the server answered without a body."""

    def __init__(self, message: str = "No data received", *, context: Any | None = None) -> None:
        super().__init__(message, context=context)


class UnexpectedFormatError(RequestError):
    """Raised when the body decodes as neither the success nor the error shape."""

    def __init__(
        self, message: str = "Unexpected response format", *, context: Any | None = None
    ) -> None:
        super().__init__(message, context=context)


class CodecError(RequestError):
    """Raised by a codec when a value cannot be encoded or decoded."""


class DomainError(Exception):
    """Carries a decoded error-shape value when a failure is unwrapped."""

    def __init__(self, value: Any) -> None:
        super().__init__(str(value))
        self.value = value


__all__ = [
    "CodecError",
    "DomainError",
    "EncodingError",
    "NoDataError",
    "RequestError",
    "TransportError",
    "UnexpectedFormatError",
]
