"""Assembly of streamed response fragments into one model turn.

Each server-sent event carries a complete ``GenerateContentResponse``. Fragments are forwarded to the caller as soon
as they are decoded while their parts are merged into a single ``Content``. The merged turn is only handed to the
``on_complete`` hook once the whole stream succeeded; a failed or abandoned stream never reaches it.
"""

import dataclasses
import logging
from enum import Enum
from typing import AsyncGenerator, AsyncIterable, Callable, Optional, Union

from ..models.response_decoder import decode_response
from ..types.content import Content, Part, TextPart
from ..types.exceptions import DecodeError, GenerativeLanguageError, PromptBlockedError, ResponseStoppedEarlyError
from ..types.response import FinishReason, GenerateContentResponse, UsageMetadata

logger = logging.getLogger(__name__)


class StreamState(Enum):
    """Lifecycle of a streamed response."""

    IDLE = "idle"
    RECEIVING = "receiving"
    COMPLETED = "completed"
    FAILED = "failed"


class StreamAssembler:
    """Decodes fragments in arrival order and merges their parts.

    Adjacent text parts are coalesced into one part; every other part is kept whole. Only the first candidate of each
    fragment contributes to the merged content.
    """

    def __init__(self) -> None:
        """Initialize assembler."""
        self.state = StreamState.IDLE
        self._parts: list[Part] = []
        self._last_fragment: Optional[GenerateContentResponse] = None
        self._fragment_count = 0

    @property
    def fragment_count(self) -> int:
        """Number of fragments decoded so far."""
        return self._fragment_count

    @property
    def usage_metadata(self) -> Optional[UsageMetadata]:
        """Usage reported by the terminal fragment; None until the stream completed."""
        if self.state != StreamState.COMPLETED or self._last_fragment is None:
            return None
        return self._last_fragment.usage_metadata

    def _merge(self, fragment: GenerateContentResponse) -> None:
        if not fragment.candidates:
            return
        for part in fragment.candidates[0].content.parts:
            if isinstance(part, TextPart) and self._parts and isinstance(self._parts[-1], TextPart):
                self._parts[-1] = TextPart(self._parts[-1].text + part.text)
            else:
                self._parts.append(part)

    def merged_content(self) -> Content:
        """Return the parts merged so far as a ``model`` turn."""
        return Content("model", tuple(self._parts))

    def partial_response(self, fragment: GenerateContentResponse) -> GenerateContentResponse:
        """Return ``fragment`` with its first candidate's content replaced by everything merged so far."""
        if not fragment.candidates:
            return dataclasses.replace(fragment, candidates=())
        candidate = dataclasses.replace(fragment.candidates[0], content=self.merged_content())
        return dataclasses.replace(fragment, candidates=(candidate, *fragment.candidates[1:]))

    def _fail(self, error: Exception) -> Exception:
        self.state = StreamState.FAILED
        logger.debug("fragments=<%d>, error=<%s> | stream failed", self._fragment_count, error)
        return error

    def feed(self, line: Union[bytes, str]) -> GenerateContentResponse:
        """Decode and merge one fragment.

        Args:
            line: One event payload.

        Returns:
            The decoded fragment, ready to be shown to the caller.

        Raises:
            DecodeError: If the fragment cannot be decoded.
            InvalidCandidateError: If a candidate's content is empty or malformed.
            PromptBlockedError: If the fragment reports a blocked prompt.
            ResponseStoppedEarlyError: If the fragment carries a finish reason other than ``STOP``. The error holds a
                response with everything merged up to and including this fragment.
            ValueError: If the stream already completed or failed.
        """
        if self.state in (StreamState.COMPLETED, StreamState.FAILED):
            raise ValueError(f"state=<{self.state.value}> | cannot feed a finished stream")
        self.state = StreamState.RECEIVING

        try:
            fragment = decode_response(line)
        except GenerativeLanguageError as e:
            self._fail(e)
            raise

        self._fragment_count += 1

        prompt_feedback = fragment.prompt_feedback
        if prompt_feedback is not None and prompt_feedback.block_reason is not None and not fragment.candidates:
            raise self._fail(PromptBlockedError(fragment))

        self._merge(fragment)
        self._last_fragment = fragment

        finish_reason = fragment.candidates[0].finish_reason if fragment.candidates else None
        if finish_reason is not None and finish_reason != FinishReason.STOP:
            raise self._fail(ResponseStoppedEarlyError(finish_reason, self.partial_response(fragment)))

        return fragment

    def finish(self) -> Content:
        """Mark the end of input and return the merged turn.

        Raises:
            DecodeError: If the stream ended without a single fragment.
            ValueError: If the stream already failed.
        """
        if self.state == StreamState.FAILED:
            raise ValueError("cannot finish a failed stream")
        if self._fragment_count == 0:
            raise self._fail(DecodeError("stream ended without any response"))

        self.state = StreamState.COMPLETED
        logger.debug("fragments=<%d>, parts=<%d> | stream completed", self._fragment_count, len(self._parts))
        return self.merged_content()


async def assemble_stream(
    lines: AsyncIterable[bytes],
    on_complete: Optional[Callable[[Content], None]] = None,
    assembler: Optional[StreamAssembler] = None,
) -> AsyncGenerator[GenerateContentResponse, None]:
    """Decode a stream of event payloads, yielding each fragment as it arrives.

    ``on_complete`` is called exactly once with the merged turn after the last fragment was consumed. It is not
    called when decoding fails, when the model stops early, or when the consumer stops iterating.

    Args:
        lines: Event payloads in arrival order.
        on_complete: Hook receiving the merged ``model`` turn on success.
        assembler: The assembler to use; pass one in to read its state and usage afterwards.

    Yields:
        Each decoded fragment.

    Raises:
        DecodeError: If a fragment cannot be decoded or the stream is empty.
        InvalidCandidateError: If a candidate's content is empty or malformed.
        PromptBlockedError: If the prompt was blocked.
        ResponseStoppedEarlyError: If the model stopped for a reason other than ``STOP``.
    """
    assembler = assembler or StreamAssembler()
    try:
        async for line in lines:
            yield assembler.feed(line)
    except GeneratorExit:
        logger.debug("fragments=<%d> | stream abandoned by consumer", assembler.fragment_count)
        raise
    finally:
        aclose = getattr(lines, "aclose", None)
        if aclose is not None:
            await aclose()

    content = assembler.finish()
    if on_complete is not None:
        on_complete(content)
