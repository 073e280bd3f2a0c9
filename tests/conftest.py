import json
import logging
from typing import Any, AsyncIterator, Union

import pytest

from generative_language.transport.base import Transport


def pytest_configure():
    logging.getLogger("generative_language").setLevel(logging.DEBUG)


class MockedTransport(Transport):
    """Transport that replays queued payloads and records every request."""

    def __init__(self) -> None:
        self.responses: list[Union[bytes, Exception]] = []
        self.streams: list[list[Union[bytes, Exception]]] = []
        self.requests: list[dict[str, Any]] = []
        self.closed_streams = 0

    def queue(self, *payloads: Any) -> None:
        for payload in payloads:
            self.responses.append(payload if isinstance(payload, Exception) else json.dumps(payload).encode())

    def queue_stream(self, *payloads: Any) -> None:
        self.streams.append(
            [payload if isinstance(payload, (bytes, Exception)) else json.dumps(payload).encode() for payload in payloads]
        )

    async def send(self, url: str, body: dict[str, Any], headers: dict[str, str], timeout: float) -> bytes:
        self.requests.append({"url": url, "body": body, "headers": headers, "timeout": timeout})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def send_stream(
        self, url: str, body: dict[str, Any], headers: dict[str, str], timeout: float
    ) -> AsyncIterator[bytes]:
        self.requests.append({"url": url, "body": body, "headers": headers, "timeout": timeout})
        try:
            for line in self.streams.pop(0):
                if isinstance(line, Exception):
                    raise line
                yield line
        finally:
            self.closed_streams += 1


@pytest.fixture
def transport():
    return MockedTransport()


@pytest.fixture
def agenerator():
    """Create an async generator from a list of items."""

    async def _async_generator(items):
        for item in items:
            yield item

    return _async_generator


@pytest.fixture
def alist():
    """Fixture to convert async generators to lists for testing."""

    async def _alist(async_gen) -> list:
        result = []
        async for item in async_gen:
            result.append(item)
        return result

    return _alist


@pytest.fixture
def text_response():
    """Build a unary response payload holding one text candidate."""

    def _text_response(text: str, finish_reason: str = "STOP") -> dict[str, Any]:
        return {
            "candidates": [
                {"content": {"role": "model", "parts": [{"text": text}]}, "finishReason": finish_reason},
            ],
        }

    return _text_response
