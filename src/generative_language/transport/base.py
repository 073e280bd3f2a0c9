"""Abstract transport and credential interfaces.

The transport owns the network: it posts JSON bodies and returns raw payloads. For streaming calls it yields one
decoded server-sent event payload per item, with the ``data:`` prefix already stripped.
"""

import abc
import logging
from typing import Any, AsyncIterator

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-goog-api-key"


class Credentials(abc.ABC):
    """Adds authentication to outgoing request headers."""

    @abc.abstractmethod
    def authorize(self, headers: dict[str, str]) -> dict[str, str]:
        """Return the headers with authentication added.

        Args:
            headers: The request headers.

        Returns:
            The authorized headers.
        """
        pass


class ApiKeyCredentials(Credentials):
    """Authenticates requests with an API key header."""

    def __init__(self, api_key: str) -> None:
        """Initialize credentials.

        Args:
            api_key: The API key.

        Raises:
            ValueError: If the key is empty.
        """
        if not api_key:
            raise ValueError("api_key must not be empty")
        self.api_key = api_key

    def authorize(self, headers: dict[str, str]) -> dict[str, str]:
        """Return the headers with the API key added."""
        return {**headers, API_KEY_HEADER: self.api_key}

    def __repr__(self) -> str:
        return "ApiKeyCredentials(api_key=<redacted>)"


class Transport(abc.ABC):
    """Sends requests to the API.

    Implementations raise ``TransportError`` for network failures and the error returned by
    ``decode_server_error`` for non-success HTTP responses.
    """

    @abc.abstractmethod
    async def send(self, url: str, body: dict[str, Any], headers: dict[str, str], timeout: float) -> bytes:
        """Post a request and return the response body.

        Args:
            url: The endpoint.
            body: The JSON request body.
            headers: The request headers, already authorized.
            timeout: Seconds to wait for the server.

        Returns:
            The raw response body.
        """
        pass

    @abc.abstractmethod
    def send_stream(
        self, url: str, body: dict[str, Any], headers: dict[str, str], timeout: float
    ) -> AsyncIterator[bytes]:
        """Post a streaming request and yield one event payload per item.

        Closing the returned iterator closes the underlying connection.

        Args:
            url: The endpoint.
            body: The JSON request body.
            headers: The request headers, already authorized.
            timeout: Seconds to wait for the server.

        Yields:
            Each event payload, without the ``data:`` prefix.
        """
        pass
