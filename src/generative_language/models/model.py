"""Generative model client.

- Docs: https://ai.google.dev/api/generate-content
"""

import logging
import os
from typing import Any, AsyncGenerator, Callable, Iterable, Optional, TypedDict, Union

from opentelemetry import trace as trace_api
from typing_extensions import Unpack

from ..chat.chat import Chat
from ..event_loop.streaming import assemble_stream
from ..telemetry.tracer import get_tracer
from ..transport.base import ApiKeyCredentials, Credentials, Transport
from ..transport.endpoints import count_tokens_url, request_url
from ..transport.httpx_transport import HttpxTransport
from ..types.content import Content, to_parts, user_content
from ..types.exceptions import CountTokensError, GenerativeLanguageError, InternalError
from ..types.generation import GenerationConfig, SafetySetting
from ..types.request import GenerateContentRequest, RequestOptions
from ..types.response import CountTokensResponse, GenerateContentResponse
from ..types.tools import Tool, ToolConfig
from .request_builder import build_count_tokens_request, build_request, model_resource_name
from .response_decoder import decode_count_tokens_response, decode_response, validate_response

logger = logging.getLogger(__name__)

API_KEY_ENV_VAR = "GOOGLE_API_KEY"
CLIENT_HEADER = "x-goog-api-client"
CLIENT_NAME = "generative-language-python/0.1.0"


class GenerativeModel:
    """A remote generative model."""

    class ModelConfig(TypedDict, total=False):
        """Configuration applied to every request sent by a model.

        Attributes:
            generation_config: Generation parameters.
            safety_settings: Per-category blocking thresholds.
            tools: Tools the model may use.
            tool_config: Configuration shared by all tools.
            system_instruction: Instructions for the model, as text or content.
        """

        generation_config: Optional[GenerationConfig]
        safety_settings: Optional[list[SafetySetting]]
        tools: Optional[list[Tool]]
        tool_config: Optional[ToolConfig]
        system_instruction: Optional[Union[str, Content]]

    def __init__(
        self,
        model_name: str,
        *,
        api_key: Optional[str] = None,
        credentials: Optional[Credentials] = None,
        transport: Optional[Transport] = None,
        request_options: Optional[RequestOptions] = None,
        **model_config: Unpack[ModelConfig],
    ) -> None:
        """Initialize the model.

        Args:
            model_name: The model name, e.g. ``gemini-1.5-flash`` or ``tunedModels/my-model``.
            api_key: Google AI API key. If not provided, will use GOOGLE_API_KEY env var.
            credentials: Credentials to use instead of an API key.
            transport: The transport; defaults to an ``HttpxTransport``.
            request_options: Transport options applied to every request.
            **model_config: Configuration options for the model.

        Raises:
            ValueError: If neither credentials nor an API key are available.
        """
        self.model_name = model_resource_name(model_name)
        self.config = GenerativeModel.ModelConfig(**model_config)
        self.request_options = request_options or RequestOptions()

        if credentials is None:
            api_key = api_key or os.environ.get(API_KEY_ENV_VAR)
            if not api_key:
                raise ValueError(f"no API key was provided and {API_KEY_ENV_VAR} is not set")
            credentials = ApiKeyCredentials(api_key)

        self.credentials = credentials
        self.transport = transport or HttpxTransport()

        logger.debug("model=<%s>, config=<%s> | initializing", self.model_name, self.config)

    def update_config(self, **model_config: Unpack[ModelConfig]) -> None:
        """Update the model configuration with the provided arguments.

        Args:
            **model_config: Configuration overrides.
        """
        self.config.update(model_config)

    def get_config(self) -> ModelConfig:
        """Get the model configuration.

        Returns:
            The model configuration.
        """
        return self.config

    @property
    def system_instruction(self) -> Optional[Content]:
        """The configured system instruction as content."""
        instruction = self.config.get("system_instruction")
        if isinstance(instruction, str):
            return Content("system", to_parts(instruction))
        return instruction

    def build_request(
        self, user_content: Content, history: Iterable[Content] = (), streaming: bool = False
    ) -> GenerateContentRequest:
        """Build a request for ``user_content`` using this model's configuration.

        Args:
            user_content: The new turn.
            history: Earlier turns of the conversation.
            streaming: Whether to target the streaming endpoint.

        Returns:
            The request.
        """
        return build_request(
            self.model_name,
            user_content,
            history=history,
            config=self.config.get("generation_config"),
            safety_settings=self.config.get("safety_settings"),
            tools=self.config.get("tools"),
            tool_config=self.config.get("tool_config"),
            system_instruction=self.system_instruction,
            streaming=streaming,
            options=self.request_options,
        )

    def _headers(self) -> dict[str, str]:
        return self.credentials.authorize({CLIENT_HEADER: CLIENT_NAME})

    async def send_request(self, request: GenerateContentRequest) -> GenerateContentResponse:
        """Send a unary request and validate the response.

        Args:
            request: The request to send.

        Returns:
            The validated response.

        Raises:
            GenerativeLanguageError: A typed error describing the failure.
            InternalError: If an unexpected error occurs.
        """
        tracer = get_tracer()
        span = tracer.start_model_invoke_span("generate_content", request.model)
        with trace_api.use_span(span):
            try:
                body = await self.transport.send(
                    request_url(request), request.to_dict(), self._headers(), request.options.timeout
                )
                response = validate_response(decode_response(body))
            except GenerativeLanguageError as e:
                tracer.end_span_with_error(span, str(e), e)
                raise
            except Exception as e:
                tracer.end_span_with_error(span, str(e), e)
                raise InternalError(e) from e

            tracer.end_model_invoke_span(span, response)
        return response

    async def generate_content(self, *values: Any, history: Iterable[Content] = ()) -> GenerateContentResponse:
        """Generate a response to a single turn.

        Args:
            *values: The user turn: a ``Content`` or anything ``to_parts`` accepts.
            history: Earlier turns of the conversation.

        Returns:
            The model's response.

        Raises:
            PromptBlockedError: If the prompt was blocked.
            ResponseStoppedEarlyError: If the model stopped for a reason other than ``STOP``.
            GenerativeLanguageError: Any other typed failure.
            InternalError: If an unexpected error occurs.
        """
        request = self.build_request(user_content(values), history)
        logger.debug("model=<%s> | generating content", self.model_name)
        return await self.send_request(request)

    async def generate_content_stream(
        self,
        *values: Any,
        history: Iterable[Content] = (),
        on_complete: Optional[Callable[[Content], None]] = None,
    ) -> AsyncGenerator[GenerateContentResponse, None]:
        """Generate a streamed response to a single turn.

        Args:
            *values: The user turn: a ``Content`` or anything ``to_parts`` accepts.
            history: Earlier turns of the conversation.
            on_complete: Called once with the merged model turn when the stream completed successfully.

        Yields:
            Response fragments as they arrive.

        Raises:
            PromptBlockedError: If the prompt was blocked.
            ResponseStoppedEarlyError: If the model stopped for a reason other than ``STOP``.
            GenerativeLanguageError: Any other typed failure.
            InternalError: If an unexpected error occurs.
        """
        request = self.build_request(user_content(values), history, streaming=True)
        logger.debug("model=<%s> | streaming content", self.model_name)

        tracer = get_tracer()
        span = tracer.start_model_invoke_span("generate_content_stream", request.model, streaming=True)
        lines = self.transport.send_stream(
            request_url(request), request.to_dict(), self._headers(), request.options.timeout
        )
        stream = assemble_stream(lines, on_complete=on_complete)
        last_fragment: Optional[GenerateContentResponse] = None

        try:
            async for fragment in stream:
                last_fragment = fragment
                yield fragment
        except GeneratorExit:
            tracer.end_span(span)
            raise
        except GenerativeLanguageError as e:
            tracer.end_span_with_error(span, str(e), e)
            raise
        except Exception as e:
            tracer.end_span_with_error(span, str(e), e)
            raise InternalError(e) from e
        finally:
            await stream.aclose()

        tracer.end_model_invoke_span(span, last_fragment)

    async def count_tokens(self, *values: Any, history: Iterable[Content] = ()) -> CountTokensResponse:
        """Count the tokens a generate content request would consume.

        Args:
            *values: The user turn: a ``Content`` or anything ``to_parts`` accepts.
            history: Earlier turns of the conversation.

        Returns:
            The token count.

        Raises:
            GenerativeLanguageError: A typed failure reported by the transport or decoder.
            CountTokensError: If an unexpected error occurs.
        """
        request = build_count_tokens_request(self.build_request(user_content(values), history))

        tracer = get_tracer()
        span = tracer.start_model_invoke_span("count_tokens", request.model)
        with trace_api.use_span(span):
            try:
                body = await self.transport.send(
                    count_tokens_url(request, self.request_options),
                    request.to_dict(),
                    self._headers(),
                    self.request_options.timeout,
                )
                response = decode_count_tokens_response(body)
            except GenerativeLanguageError as e:
                tracer.end_span_with_error(span, str(e), e)
                raise
            except Exception as e:
                tracer.end_span_with_error(span, str(e), e)
                raise CountTokensError(e) from e

            tracer.end_span(span)
        return response

    def start_chat(self, history: Optional[Iterable[Content]] = None, **kwargs: Any) -> Chat:
        """Start a multi-turn conversation.

        Args:
            history: Turns to start the conversation with.
            **kwargs: Additional ``Chat`` arguments.

        Returns:
            The chat session.
        """
        return Chat(self, history, **kwargs)
