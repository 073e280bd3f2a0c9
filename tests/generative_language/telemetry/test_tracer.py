import unittest.mock

import pytest
from opentelemetry.trace import StatusCode

from generative_language.telemetry.tracer import Tracer, get_tracer
from generative_language.types.content import Content
from generative_language.types.response import CandidateResponse, FinishReason, GenerateContentResponse, UsageMetadata


@pytest.fixture
def mock_tracer():
    with unittest.mock.patch("generative_language.telemetry.tracer.trace_api") as mock_trace_api:
        mock_otel_tracer = unittest.mock.MagicMock()
        mock_trace_api.get_tracer.return_value = mock_otel_tracer
        yield mock_otel_tracer


@pytest.fixture
def mock_span():
    return unittest.mock.MagicMock()


def test_get_tracer_singleton():
    assert get_tracer() is get_tracer()


def test_start_model_invoke_span(mock_tracer, mock_span):
    mock_tracer.start_span.return_value = mock_span
    tracer = Tracer()

    span = tracer.start_model_invoke_span("generate_content", "models/gemini-pro", streaming=True)

    assert span is mock_span
    mock_tracer.start_span.assert_called_once_with(
        name="generate_content models/gemini-pro",
        attributes={
            "gen_ai.system": "gemini",
            "gen_ai.operation.name": "generate_content",
            "gen_ai.request.model": "models/gemini-pro",
            "gen_ai.request.streaming": True,
        },
    )


def test_end_model_invoke_span(mock_tracer, mock_span):
    tracer = Tracer()
    response = GenerateContentResponse(
        candidates=(CandidateResponse(Content("model", ()), finish_reason=FinishReason.STOP),),
        usage_metadata=UsageMetadata(prompt_token_count=3, candidates_token_count=7, total_token_count=10),
    )

    tracer.end_model_invoke_span(mock_span, response)

    mock_span.set_attribute.assert_has_calls(
        [
            unittest.mock.call("gen_ai.response.finish_reasons", ["STOP"]),
            unittest.mock.call("gen_ai.usage.input_tokens", 3),
            unittest.mock.call("gen_ai.usage.output_tokens", 7),
        ]
    )
    mock_span.set_status.assert_called_once_with(StatusCode.OK)
    mock_span.end.assert_called_once()


def test_start_function_call_span(mock_tracer):
    tracer = Tracer()

    tracer.start_function_call_span("sum")

    mock_tracer.start_span.assert_called_once_with(
        name="execute_tool sum",
        attributes={"gen_ai.operation.name": "execute_tool", "gen_ai.tool.name": "sum"},
    )


def test_end_span_with_error(mock_tracer, mock_span):
    tracer = Tracer()
    error = ValueError("boom")

    tracer.end_span_with_error(mock_span, "boom", error)

    mock_span.set_status.assert_called_once_with(StatusCode.ERROR, "boom")
    mock_span.record_exception.assert_called_once_with(error)
    mock_span.end.assert_called_once()
