"""HTTP transport backed by httpx.

- Docs: https://www.python-httpx.org/async/
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import httpx
from typing_extensions import override

from ..models.response_decoder import decode_server_error
from ..types.exceptions import TransportError
from .base import Transport

logger = logging.getLogger(__name__)

SSE_DATA_PREFIX = "data:"


def parse_sse_line(line: str) -> Optional[bytes]:
    """Return the payload of a server-sent event data line, or None for any other line."""
    if not line.startswith(SSE_DATA_PREFIX):
        return None
    payload = line[len(SSE_DATA_PREFIX) :].strip()
    return payload.encode("utf-8") if payload else None


class HttpxTransport(Transport):
    """Transport that posts JSON with an ``httpx.AsyncClient``.

    Without an explicit client, every request opens and closes its own client. Nothing outlives the event loop that
    sent the request, so the transport can be shared by calls running on different loops.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None, **client_args: Any) -> None:
        """Initialize transport.

        Args:
            client: An existing client to use for every request. The caller owns it and must close it.
            **client_args: Arguments for the per-request ``httpx.AsyncClient`` when ``client`` is not given.
        """
        self.client = client
        self.client_args = client_args

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self.client is not None:
            yield self.client
            return

        async with httpx.AsyncClient(**self.client_args) as client:
            yield client

    @staticmethod
    def _headers(headers: dict[str, str]) -> dict[str, str]:
        return {"Content-Type": "application/json", **headers}

    @override
    async def send(self, url: str, body: dict[str, Any], headers: dict[str, str], timeout: float) -> bytes:
        logger.debug("url=<%s> | sending request", url)
        try:
            async with self._client() as client:
                response = await client.post(url, headers=self._headers(headers), json=body, timeout=timeout)
        except httpx.HTTPError as e:
            raise TransportError(f"request failed: {e}", e) from e

        if not response.is_success:
            raise decode_server_error(response.status_code, response.content)

        return response.content

    @override
    async def send_stream(
        self, url: str, body: dict[str, Any], headers: dict[str, str], timeout: float
    ) -> AsyncIterator[bytes]:
        logger.debug("url=<%s> | opening stream", url)
        try:
            async with self._client() as client:
                async with client.stream(
                    "POST", url, headers=self._headers(headers), json=body, timeout=timeout
                ) as response:
                    if not response.is_success:
                        raise decode_server_error(response.status_code, await response.aread())

                    async for line in response.aiter_lines():
                        payload = parse_sse_line(line)
                        if payload is not None:
                            yield payload
        except httpx.HTTPError as e:
            raise TransportError(f"stream failed: {e}", e) from e
