"""Tagged result of a single request."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar, Union

from .errors import DomainError, RequestError

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure(Generic[E]):
    """A failed request.

    ``error`` is either a value decoded from the caller's error shape or a
    :class:`RequestError` describing an infrastructure failure.
    """

    error: E | RequestError

    @property
    def ok(self) -> bool:
        return False

    @property
    def is_domain_error(self) -> bool:
        return not isinstance(self.error, RequestError)

    def unwrap(self) -> NoReturn:
        if isinstance(self.error, BaseException):
            raise self.error
        raise DomainError(self.error)


Outcome = Union[Success[T], Failure[E]]


__all__ = ["Failure", "Outcome", "Success"]
