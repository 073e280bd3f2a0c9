"""OpenTelemetry spans for model requests and function invocations.

Spans are created through the global tracer provider. Without an installed SDK the API's no-op provider is used, so
tracing costs nothing unless the host application configures it.

- Semantic conventions: https://opentelemetry.io/docs/specs/semconv/gen-ai/
"""

import logging
from typing import Any, Optional

from opentelemetry import trace as trace_api
from opentelemetry.trace import Span, StatusCode

from ..types.response import GenerateContentResponse

logger = logging.getLogger(__name__)

TRACER_NAME = "generative_language"


class Tracer:
    """Starts and ends the spans emitted by the SDK."""

    def __init__(self) -> None:
        """Initialize tracer."""
        self.tracer = trace_api.get_tracer(TRACER_NAME)

    def _start_span(self, name: str, attributes: dict[str, Any]) -> Span:
        return self.tracer.start_span(name=name, attributes={k: v for k, v in attributes.items() if v is not None})

    def start_model_invoke_span(self, operation: str, model_id: str, streaming: bool = False) -> Span:
        """Start a span for one model request.

        Args:
            operation: The API operation, e.g. ``generate_content``.
            model_id: The model resource name.
            streaming: Whether the response is streamed.

        Returns:
            The started span.
        """
        return self._start_span(
            f"{operation} {model_id}",
            {
                "gen_ai.system": "gemini",
                "gen_ai.operation.name": operation,
                "gen_ai.request.model": model_id,
                "gen_ai.request.streaming": streaming,
            },
        )

    def end_model_invoke_span(self, span: Span, response: Optional[GenerateContentResponse] = None) -> None:
        """End a model request span, recording finish reason and usage when available."""
        if response is not None:
            if response.candidates and response.candidates[0].finish_reason is not None:
                span.set_attribute("gen_ai.response.finish_reasons", [response.candidates[0].finish_reason.value])
            if response.usage_metadata is not None:
                span.set_attribute("gen_ai.usage.input_tokens", response.usage_metadata.prompt_token_count)
                span.set_attribute("gen_ai.usage.output_tokens", response.usage_metadata.candidates_token_count)
        span.set_status(StatusCode.OK)
        span.end()

    def start_function_call_span(self, name: str) -> Span:
        """Start a span for one client-side function invocation."""
        return self._start_span(
            f"execute_tool {name}",
            {"gen_ai.operation.name": "execute_tool", "gen_ai.tool.name": name},
        )

    def end_span(self, span: Span) -> None:
        """End a span successfully."""
        span.set_status(StatusCode.OK)
        span.end()

    def end_span_with_error(self, span: Span, error_message: str, exception: Optional[BaseException] = None) -> None:
        """End a span with an error status."""
        span.set_status(StatusCode.ERROR, error_message)
        if exception is not None:
            span.record_exception(exception)
        span.end()


_tracer_instance: Optional[Tracer] = None


def get_tracer() -> Tracer:
    """Return the shared tracer instance."""
    global _tracer_instance

    if _tracer_instance is None:
        _tracer_instance = Tracer()

    return _tracer_instance
