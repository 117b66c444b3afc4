"""Body codecs used by the request executor."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Protocol, TypeVar, runtime_checkable

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from .errors import CodecError

T = TypeVar("T")

CONTENT_TYPE_JSON = "application/json"


@runtime_checkable
class Codec(Protocol):
    content_type: str

    def encode(self, value: Any) -> bytes: ...

    def decode(self, data: bytes, shape: type[T]) -> T: ...


@lru_cache(maxsize=256)
def _adapter(shape: Any) -> TypeAdapter[Any]:
    return TypeAdapter(shape)


class JsonCodec:
    """JSON codec validating decoded bodies against pydantic-compatible shapes.

    A shape can be a ``BaseModel`` subclass, a dataclass, a ``TypedDict`` or
    any other type ``pydantic.TypeAdapter`` accepts. Unknown keys in the body
    are ignored; missing or mistyped fields fail the decode. With ``strict``
    (the default) a JSON string is never coerced into a number or boolean.
    """

    content_type = CONTENT_TYPE_JSON

    def __init__(self, *, strict: bool = True) -> None:
        self.strict = strict

    def encode(self, value: Any) -> bytes:
        try:
            return _adapter(Any).dump_json(value)
        except (PydanticSerializationError, TypeError, ValueError) as exc:
            raise CodecError(f"Cannot encode {type(value).__name__}: {exc}") from exc

    def decode(self, data: bytes, shape: type[T]) -> T:
        try:
            adapter = _adapter(shape)
        except TypeError:
            # unhashable shape
            adapter = TypeAdapter(shape)
        try:
            return adapter.validate_json(data, strict=self.strict)
        except ValidationError as exc:
            raise CodecError(
                f"Body does not match {getattr(shape, '__name__', shape)!s}",
                context=exc.errors(include_url=False),
            ) from exc


__all__ = ["CONTENT_TYPE_JSON", "Codec", "JsonCodec"]
