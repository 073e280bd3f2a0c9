import pytest

from generative_language.types.content import (
    CodeExecutionResultPart,
    Content,
    ExecutableCodePart,
    FunctionCallPart,
    Outcome,
    TextPart,
)
from generative_language.types.exceptions import DecodeError, EmptyContentError, MalformedContentError
from generative_language.types.generation import (
    BlockThreshold,
    GenerationConfig,
    HarmCategory,
    HarmProbability,
    SafetyRating,
    SafetySetting,
)
from generative_language.types.json import JSONNumber
from generative_language.types.response import (
    BlockReason,
    CandidateResponse,
    Citation,
    CountTokensResponse,
    FinishReason,
    GenerateContentResponse,
    UsageMetadata,
)


def candidate(*parts):
    return CandidateResponse(content=Content("model", parts))


def test_text_derivation_with_code():
    response = candidate(
        TextPart("A"),
        ExecutableCodePart("PYTHON", "print(1)"),
        CodeExecutionResultPart(Outcome.OK, "1\n"),
        TextPart("B"),
    )

    tru_text = response.text
    exp_text = "A\n```python\nprint(1)\n```\n```\n1\n```\nB"

    assert tru_text == exp_text


def test_text_derivation_unspecified_language():
    tru_text = candidate(ExecutableCodePart("LANGUAGE_UNSPECIFIED", "x = 1")).text
    exp_text = "```\nx = 1\n```"

    assert tru_text == exp_text


def test_text_derivation_output_without_trailing_newline():
    tru_text = candidate(CodeExecutionResultPart(Outcome.OK, "42")).text
    exp_text = "```\n42\n```"

    assert tru_text == exp_text


def test_text_derivation_empty_output_only():
    assert candidate(CodeExecutionResultPart(Outcome.OK, "")).text is None


def test_text_derivation_skips_empty_output():
    tru_text = candidate(TextPart("A"), CodeExecutionResultPart(Outcome.FAILED, ""), TextPart("B")).text
    exp_text = "A\nB"

    assert tru_text == exp_text


def test_text_derivation_function_call_only():
    assert candidate(FunctionCallPart("sum", {"x": JSONNumber(1)})).text is None


def test_decode_response():
    raw = {
        "candidates": [
            {
                "content": {"role": "model", "parts": [{"text": "hi"}]},
                "finishReason": "STOP",
                "safetyRatings": [{"category": "HARM_CATEGORY_HARASSMENT", "probability": "NEGLIGIBLE"}],
                "citationMetadata": {"citationSources": [{"endIndex": 5, "uri": "https://example.com"}]},
            }
        ],
        "usageMetadata": {"promptTokenCount": 3, "totalTokenCount": 4},
    }

    tru_response = GenerateContentResponse.from_dict(raw)

    assert tru_response.text == "hi"
    assert tru_response.candidates[0].finish_reason == FinishReason.STOP
    assert tru_response.candidates[0].safety_ratings == (
        SafetyRating(HarmCategory.HARASSMENT, HarmProbability.NEGLIGIBLE),
    )
    assert tru_response.candidates[0].citation_metadata.citation_sources == (
        Citation(start_index=0, end_index=5, uri="https://example.com"),
    )
    assert tru_response.usage_metadata == UsageMetadata(prompt_token_count=3, total_token_count=4)


def test_decode_response_citations_key():
    raw = {"candidates": [{"content": {"parts": []}, "citationMetadata": {"citations": [{"startIndex": 1, "endIndex": 2}]}}]}

    tru_sources = GenerateContentResponse.from_dict(raw).candidates[0].citation_metadata.citation_sources

    assert tru_sources == (Citation(start_index=1, end_index=2),)


def test_decode_response_unknown_enums():
    raw = {
        "candidates": [
            {
                "content": {"parts": [{"text": "x"}]},
                "finishReason": "SOMETHING_NEW",
                "safetyRatings": [{"category": "HARM_CATEGORY_FUTURE", "probability": "EXTREME"}],
            }
        ],
        "promptFeedback": {"blockReason": "NEW_REASON"},
    }

    tru_response = GenerateContentResponse.from_dict(raw)

    assert tru_response.candidates[0].finish_reason == FinishReason.UNKNOWN
    assert tru_response.candidates[0].safety_ratings[0].category == HarmCategory.UNKNOWN
    assert tru_response.candidates[0].safety_ratings[0].probability == HarmProbability.UNKNOWN
    assert tru_response.prompt_feedback.block_reason == BlockReason.UNKNOWN


def test_decode_response_empty_content():
    with pytest.raises(EmptyContentError) as exc_info:
        GenerateContentResponse.from_dict({"candidates": [{"content": {}}]})

    assert isinstance(exc_info.value.underlying_error, DecodeError)


def test_decode_response_missing_content():
    tru_response = GenerateContentResponse.from_dict({"candidates": [{"finishReason": "STOP"}]})

    assert tru_response.candidates[0].content == Content("model", ())
    assert tru_response.text is None


@pytest.mark.parametrize(
    "content",
    [
        {"parts": [{"unknownPart": {}}]},
        {"role": "model"},
        {"parts": "text"},
        "text",
    ],
)
def test_decode_response_malformed_content(content):
    with pytest.raises(MalformedContentError) as exc_info:
        GenerateContentResponse.from_dict({"candidates": [{"content": content}]})

    assert isinstance(exc_info.value.underlying_error, DecodeError)


def test_decode_response_requires_candidates_or_feedback():
    with pytest.raises(DecodeError, match="missing keys 'candidates' and 'promptFeedback'"):
        GenerateContentResponse.from_dict({"usageMetadata": {}})


@pytest.mark.parametrize(
    ("raw", "key"),
    [
        ({"candidates": [{"citationMetadata": {"citationSources": ["x"]}}]}, "citationSources"),
        ({"candidates": [{"citationMetadata": "x"}]}, "citationMetadata"),
        ({"candidates": [{"citationMetadata": {"citationSources": [{"endIndex": "end"}]}}]}, "endIndex"),
        ({"promptFeedback": "blocked"}, "promptFeedback"),
        ({"candidates": [], "usageMetadata": []}, "usageMetadata"),
        ({"candidates": [], "usageMetadata": {"promptTokenCount": "abc"}}, "promptTokenCount"),
        ({"candidates": [], "usageMetadata": {"totalTokenCount": None}}, "totalTokenCount"),
        ({"candidates": [], "usageMetadata": {"totalTokenCount": True}}, "totalTokenCount"),
    ],
)
def test_decode_response_malformed_metadata(raw, key):
    with pytest.raises(DecodeError, match=f"key=<{key}>"):
        GenerateContentResponse.from_dict(raw)


def test_count_tokens_response_not_an_integer():
    with pytest.raises(DecodeError, match="expected an integer"):
        CountTokensResponse.from_dict({"totalTokens": "many"})


def test_decode_prompt_feedback_only():
    tru_response = GenerateContentResponse.from_dict({"promptFeedback": {"blockReason": "SAFETY"}})

    assert tru_response.candidates == ()
    assert tru_response.prompt_feedback.block_reason == BlockReason.SAFETY
    assert tru_response.text is None
    assert tru_response.function_calls == []


def test_function_calls_in_order():
    raw = {
        "candidates": [
            {
                "content": {
                    "parts": [
                        {"functionCall": {"name": "a", "args": {}}},
                        {"text": "between"},
                        {"functionCall": {"name": "b", "args": {"n": 1}}},
                    ]
                }
            }
        ]
    }

    tru_names = [call.name for call in GenerateContentResponse.from_dict(raw).function_calls]
    exp_names = ["a", "b"]

    assert tru_names == exp_names


def test_count_tokens_response():
    assert CountTokensResponse.from_dict({"totalTokens": 12}) == CountTokensResponse(12)

    with pytest.raises(DecodeError, match="totalTokens"):
        CountTokensResponse.from_dict({})


def test_generation_config_to_dict_omits_unset():
    config = GenerationConfig(temperature=0.5, max_output_tokens=64, stop_sequences=["END"])

    tru_encoded = config.to_dict()
    exp_encoded = {"temperature": 0.5, "maxOutputTokens": 64, "stopSequences": ["END"]}

    assert tru_encoded == exp_encoded


def test_generation_config_has_no_implicit_defaults():
    assert GenerationConfig().to_dict() == {}


def test_safety_setting_to_dict():
    setting = SafetySetting(HarmCategory.HATE_SPEECH, BlockThreshold.BLOCK_ONLY_HIGH)

    tru_encoded = setting.to_dict()
    exp_encoded = {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_ONLY_HIGH"}

    assert tru_encoded == exp_encoded


def test_safety_rating_missing_key():
    with pytest.raises(DecodeError, match="safetyRatings.probability"):
        SafetyRating.from_dict({"category": "HARM_CATEGORY_HARASSMENT"})
