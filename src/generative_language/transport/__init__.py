"""Transports that carry requests to the API."""

from .base import ApiKeyCredentials, Credentials, Transport
from .httpx_transport import HttpxTransport

__all__ = ["ApiKeyCredentials", "Credentials", "HttpxTransport", "Transport"]
