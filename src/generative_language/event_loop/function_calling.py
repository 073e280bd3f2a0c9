"""Function-call loop.

This module drives the exchange between the model and client-side function handlers:

1. Send the conversation to the model, as one request or as a stream
2. Inspect the returned turn for function calls
3. Invoke the handler of each call and record the call and its response as a pair of turns
4. Send the updated conversation and repeat until the model answers without function calls

The loop works on a private copy of the conversation. The caller's history only changes when the loop returns.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import AsyncGenerator, Awaitable, Callable, Iterable, Optional

from opentelemetry import trace as trace_api

from ..telemetry.tracer import get_tracer
from ..tools.registry import FunctionRegistry
from ..types.content import Content, FunctionCallPart, FunctionResponsePart
from ..types.exceptions import DecodeError, RoundLimitExceededError
from ..types.json import JSONObjectFields
from ..types.response import GenerateContentResponse

logger = logging.getLogger(__name__)

DEFAULT_MAX_ROUNDS = 10

SendFunction = Callable[[tuple[Content, ...]], Awaitable[GenerateContentResponse]]
"""Sends the full conversation to the model and returns its response."""

StreamFunction = Callable[
    [tuple[Content, ...], Callable[[Content], None]], AsyncGenerator[GenerateContentResponse, None]
]
"""Streams the model's response to the full conversation, handing the merged turn to the hook on completion."""


def model_turn(response: GenerateContentResponse) -> Content:
    """Return the first candidate's content as a ``model`` turn.

    Raises:
        DecodeError: If the response holds no candidate.
    """
    if not response.candidates:
        raise DecodeError("response holds no candidate")
    return Content("model", response.candidates[0].content.parts)


class LoopState(Enum):
    """States of the function-call loop."""

    AWAITING_MODEL = "awaiting_model"
    INSPECTING_RESPONSE = "inspecting_response"
    INVOKING_FUNCTIONS = "invoking_functions"
    DONE = "done"


@dataclass(frozen=True)
class LoopResult:
    """Outcome of a completed loop.

    Attributes:
        response: The last response received from the model. For a streamed loop, its last fragment.
        content: The model's final turn, which holds no function calls.
        history: The conversation to commit: the previous history, the user turn, every call/response pair and the
            final turn.
        rounds: Number of function-calling rounds that were executed.
    """

    response: GenerateContentResponse
    content: Content
    history: tuple[Content, ...]
    rounds: int


class FunctionCallLoop:
    """Answers the model's function calls until it produces a final turn."""

    def __init__(self, send: SendFunction, registry: FunctionRegistry, *, max_rounds: int = DEFAULT_MAX_ROUNDS) -> None:
        """Initialize the loop.

        Args:
            send: Sends the conversation to the model and returns its response.
            registry: Handlers for the declared functions.
            max_rounds: Maximum number of function-calling rounds before giving up.

        Raises:
            ValueError: If ``max_rounds`` is negative.
        """
        if max_rounds < 0:
            raise ValueError("max_rounds must not be negative")

        self.send = send
        self.registry = registry
        self.max_rounds = max_rounds
        self.state = LoopState.DONE

    async def _invoke(self, call: FunctionCallPart) -> JSONObjectFields:
        tracer = get_tracer()
        span = tracer.start_function_call_span(call.name)
        with trace_api.use_span(span):
            try:
                result = await self.registry.invoke(call.name, call.args)
            except Exception as e:
                tracer.end_span_with_error(span, str(e), e)
                raise
            tracer.end_span(span)
        return result

    def _finished(self, working: list[Content], content: Content, rounds: int) -> bool:
        self.state = LoopState.INSPECTING_RESPONSE
        if not content.function_calls:
            working.append(content)
            self.state = LoopState.DONE
            logger.debug("rounds=<%d> | function call loop finished", rounds)
            return True

        if rounds >= self.max_rounds:
            self.state = LoopState.DONE
            raise RoundLimitExceededError(self.max_rounds)

        return False

    async def _answer(self, working: list[Content], content: Content, rounds: int) -> None:
        self.state = LoopState.INVOKING_FUNCTIONS
        calls = content.function_calls
        logger.debug("round=<%d>, calls=<%d> | invoking functions", rounds, len(calls))
        for call in calls:
            working.append(Content("model", (call,)))
            response = await self._invoke(call)
            working.append(Content("function", (FunctionResponsePart(call.name, response),)))

    async def run(self, history: Iterable[Content], user_content: Content) -> LoopResult:
        """Run the loop for one user turn.

        For every function call in a model turn, a ``model`` turn holding only that call and a ``function`` turn
        holding its response are appended before the model is asked again. The model never sees an unanswered call.

        Args:
            history: The committed conversation so far. It is never modified.
            user_content: The new user turn.

        Returns:
            The final response and the conversation to commit.

        Raises:
            DecodeError: If a response holds no candidate.
            FunctionCallProtocolError: If a call names an unregistered function or its handler fails.
            RoundLimitExceededError: If the model still asks for function calls after ``max_rounds`` rounds.
        """
        working = [*history, user_content]
        rounds = 0

        while True:
            self.state = LoopState.AWAITING_MODEL
            response = await self.send(tuple(working))
            content = model_turn(response)

            if self._finished(working, content, rounds):
                return LoopResult(response=response, content=content, history=tuple(working), rounds=rounds)

            rounds += 1
            await self._answer(working, content, rounds)

    async def run_stream(
        self,
        history: Iterable[Content],
        user_content: Content,
        stream: StreamFunction,
        on_complete: Callable[[LoopResult], None],
    ) -> AsyncGenerator[GenerateContentResponse, None]:
        """Run the loop for one user turn, streaming every model turn.

        Each round is streamed with ``stream`` and its fragments are yielded as they arrive. Function calls in the
        merged turn are answered exactly as in ``run`` before the next round starts.

        Args:
            history: The committed conversation so far. It is never modified.
            user_content: The new user turn.
            stream: Streams one model turn.
            on_complete: Called once with the result after the final turn completed. It is not called when a round
                fails or the consumer stops iterating.

        Yields:
            The fragments of every round, in order.

        Raises:
            DecodeError: If a round ends without a model turn.
            FunctionCallProtocolError: If a call names an unregistered function or its handler fails.
            RoundLimitExceededError: If the model still asks for function calls after ``max_rounds`` rounds.
        """
        working = [*history, user_content]
        rounds = 0

        while True:
            self.state = LoopState.AWAITING_MODEL
            turns: list[Content] = []
            last_fragment: Optional[GenerateContentResponse] = None

            fragments = stream(tuple(working), turns.append)
            try:
                async for fragment in fragments:
                    last_fragment = fragment
                    yield fragment
            finally:
                await fragments.aclose()

            if not turns or last_fragment is None:
                raise DecodeError("stream ended without a model turn")
            content = turns[-1]

            if self._finished(working, content, rounds):
                on_complete(LoopResult(response=last_fragment, content=content, history=tuple(working), rounds=rounds))
                return

            rounds += 1
            await self._answer(working, content, rounds)
