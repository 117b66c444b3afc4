"""Public surface for promised-http."""

from .client import ApiClient, ClientOptions
from .codec import CONTENT_TYPE_JSON, Codec, JsonCodec
from .deferred import Deferred, DeferredState
from .dispatch import Dispatcher, immediate_dispatcher, loop_dispatcher
from .errors import (
    CodecError,
    DomainError,
    EncodingError,
    NoDataError,
    RequestError,
    TransportError,
    UnexpectedFormatError,
)
from .executor import RequestExecutor
from .outcome import Failure, Outcome, Success
from .request import HttpMethod, RequestSpec
from .transport import HttpTransport, Transport, TransportRequest, TransportResponse
from .version import __version__

__all__ = [
    "__version__",
    "ApiClient",
    "CONTENT_TYPE_JSON",
    "ClientOptions",
    "Codec",
    "CodecError",
    "Deferred",
    "DeferredState",
    "Dispatcher",
    "DomainError",
    "EncodingError",
    "Failure",
    "HttpMethod",
    "HttpTransport",
    "JsonCodec",
    "NoDataError",
    "Outcome",
    "RequestError",
    "RequestExecutor",
    "RequestSpec",
    "Success",
    "Transport",
    "TransportError",
    "TransportRequest",
    "TransportResponse",
    "UnexpectedFormatError",
    "immediate_dispatcher",
    "loop_dispatcher",
]
