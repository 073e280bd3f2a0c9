"""Multi-turn chat sessions.

A chat owns its history. A turn is only committed once it fully succeeded, so a failed request, a failed stream or an
abandoned stream leaves the history exactly as it was.

A chat is not safe for concurrent use: callers must not start a new message before the previous one finished.
"""

import logging
from typing import TYPE_CHECKING, Any, AsyncGenerator, Callable, Iterable, Optional

from .._async import run_async
from ..event_loop.function_calling import DEFAULT_MAX_ROUNDS, FunctionCallLoop, LoopResult, model_turn
from ..handlers.callback_handler import null_callback_handler
from ..tools.registry import FunctionRegistry
from ..types.content import Content, user_content
from ..types.response import GenerateContentResponse

if TYPE_CHECKING:
    from ..models.model import GenerativeModel

logger = logging.getLogger(__name__)


class Chat:
    """A conversation with a generative model."""

    def __init__(
        self,
        model: "GenerativeModel",
        history: Optional[Iterable[Content]] = None,
        *,
        max_function_rounds: int = DEFAULT_MAX_ROUNDS,
        callback_handler: Optional[Callable[..., Any]] = None,
    ) -> None:
        """Initialize a chat.

        Args:
            model: The model to talk to.
            history: Turns to start with.
            max_function_rounds: Maximum number of function-calling rounds per message.
            callback_handler: Receives ``data``/``complete`` events for response text and ``function_call`` events.
        """
        self.model = model
        self._history: list[Content] = list(history or ())
        self.max_function_rounds = max_function_rounds
        self.callback_handler = callback_handler or null_callback_handler

    @property
    def history(self) -> tuple[Content, ...]:
        """The committed conversation, oldest turn first."""
        return tuple(self._history)

    def _commit(self, history: Iterable[Content]) -> None:
        self._history = list(history)
        logger.debug("history=<%d> | message committed", len(self._history))

    def _function_loop(self) -> Optional[FunctionCallLoop]:
        registry = FunctionRegistry.from_tools(self.model.get_config().get("tools"))
        if not registry.has_handlers:
            return None
        return FunctionCallLoop(self._send, registry, max_rounds=self.max_function_rounds)

    def _emit_function_calls(self, content: Content) -> None:
        for call in content.function_calls:
            self.callback_handler(function_call=call)

    async def _send(self, contents: tuple[Content, ...]) -> GenerateContentResponse:
        response = await self.model.generate_content(contents[-1], history=contents[:-1])
        if response.candidates:
            self._emit_function_calls(response.candidates[0].content)
        return response

    def _stream(
        self, contents: tuple[Content, ...], on_complete: Callable[[Content], None]
    ) -> AsyncGenerator[GenerateContentResponse, None]:
        def complete(content: Content) -> None:
            self._emit_function_calls(content)
            on_complete(content)

        return self.model.generate_content_stream(contents[-1], history=contents[:-1], on_complete=complete)

    async def send_message(self, *values: Any) -> GenerateContentResponse:
        """Send a message and commit the exchange to history.

        When the model's tools declare functions with handlers, the model's function calls are answered until it
        produces a final turn; every call and response is committed along with it. Otherwise one request is sent
        and any function calls are returned to the caller.

        Args:
            *values: The user turn: a ``Content`` or anything ``to_parts`` accepts.

        Returns:
            The model's final response.

        Raises:
            DecodeError: If the response holds no candidate.
            FunctionCallProtocolError: If a function call cannot be answered.
            RoundLimitExceededError: If the function-call loop runs out of rounds.
            GenerativeLanguageError: Any failure raised by the model.
        """
        content = user_content(values)
        loop = self._function_loop()

        if loop is not None:
            result = await loop.run(self._history, content)
            response = result.response
            self._commit(result.history)
        else:
            response = await self._send((*self._history, content))
            self._commit([*self._history, content, model_turn(response)])

        self.callback_handler(data=response.text or "", complete=True)
        return response

    async def send_message_stream(self, *values: Any) -> AsyncGenerator[GenerateContentResponse, None]:
        """Send a message and stream the response.

        When the model's tools declare functions with handlers, every round of the function-call loop is streamed and
        the calls in each merged turn are answered before the next round. The whole exchange is committed once the
        final turn completed. Nothing is committed when a round fails or when the caller stops iterating early.

        Args:
            *values: The user turn: a ``Content`` or anything ``to_parts`` accepts.

        Yields:
            Response fragments as they arrive.

        Raises:
            FunctionCallProtocolError: If a function call cannot be answered.
            RoundLimitExceededError: If the function-call loop runs out of rounds.
            GenerativeLanguageError: Any failure raised by the model or while assembling the stream.
        """
        content = user_content(values)
        history = self.history
        loop = self._function_loop()

        def commit_result(result: LoopResult) -> None:
            self._commit(result.history)

        def commit_turn(turn: Content) -> None:
            self._commit([*history, content, turn])

        if loop is not None:
            fragments = loop.run_stream(history, content, self._stream, commit_result)
        else:
            fragments = self._stream((*history, content), commit_turn)

        try:
            async for fragment in fragments:
                if fragment.candidates:
                    self.callback_handler(data=fragment.candidates[0].text or "", complete=False)
                yield fragment
        finally:
            await fragments.aclose()

        self.callback_handler(data="", complete=True)

    def __call__(self, *values: Any) -> GenerateContentResponse:
        """Send a message synchronously.

        Args:
            *values: The user turn: a ``Content`` or anything ``to_parts`` accepts.

        Returns:
            The model's final response.
        """
        return run_async(lambda: self.send_message(*values))
