"""Transport implementations exposed to users."""

from .base import Transport, TransportRequest, TransportResponse
from .http import HttpTransport

__all__ = [
    "HttpTransport",
    "Transport",
    "TransportRequest",
    "TransportResponse",
]
