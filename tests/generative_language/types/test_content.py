import base64
import logging

import pytest

from generative_language.types.content import (
    CodeExecutionResultPart,
    Content,
    ExecutableCodePart,
    FunctionCallPart,
    FunctionResponsePart,
    InlineDataPart,
    Outcome,
    TextPart,
    decode_part,
    encode_part,
    to_parts,
)
from generative_language.types.exceptions import DecodeError, PartConversionError
from generative_language.types.json import JSONNumber, JSONString


@pytest.fixture
def all_parts():
    return (
        TextPart("hello"),
        InlineDataPart.png(b"\x89PNG\r\n"),
        FunctionCallPart("sum", {"x": JSONNumber(4), "y": JSONNumber(5)}),
        FunctionResponsePart("sum", {"sum": JSONNumber(9)}),
        ExecutableCodePart("PYTHON", "print(1)"),
        CodeExecutionResultPart(Outcome.OK, "1\n"),
    )


def test_content_round_trip(all_parts):
    content = Content("model", all_parts)

    tru_content = Content.from_dict(content.to_dict())
    exp_content = content

    assert tru_content == exp_content


def test_encode_part_inline_data():
    tru_encoded = encode_part(InlineDataPart.jpeg(b"abc"))
    exp_encoded = {"inlineData": {"mimeType": "image/jpeg", "data": base64.b64encode(b"abc").decode()}}

    assert tru_encoded == exp_encoded


def test_encode_part_unsupported_type():
    with pytest.raises(TypeError, match="unsupported type"):
        encode_part("text")  # type: ignore[arg-type]


def test_decode_part_snake_case_inline_data():
    raw = {"inline_data": {"mime_type": "image/png", "data": base64.b64encode(b"png").decode()}}

    tru_part = decode_part(raw)
    exp_part = InlineDataPart("image/png", b"png")

    assert tru_part == exp_part


def test_decode_part_invalid_base64():
    with pytest.raises(DecodeError, match="invalid base64"):
        decode_part({"inlineData": {"mimeType": "image/png", "data": "***"}})


def test_decode_part_ignores_unknown_keys():
    tru_part = decode_part({"text": "hi", "thought": True})
    exp_part = TextPart("hi")

    assert tru_part == exp_part


def test_decode_part_text_wins_over_inline_data():
    tru_part = decode_part({"text": "hi", "inlineData": "not checked"})
    exp_part = TextPart("hi")

    assert tru_part == exp_part


def test_decode_part_no_known_key():
    with pytest.raises(DecodeError, match="neither text nor a recognized part was found"):
        decode_part({"videoMetadata": {}})


def test_decode_part_function_call_without_args():
    tru_part = decode_part({"functionCall": {"name": "now"}})
    exp_part = FunctionCallPart("now", {})

    assert tru_part == exp_part


def test_decode_part_function_call_missing_name():
    with pytest.raises(DecodeError, match="functionCall.name"):
        decode_part({"functionCall": {"args": {}}})


def test_decode_part_code_execution_result_defaults_output():
    tru_part = decode_part({"codeExecutionResult": {"outcome": "OUTCOME_FAILED"}})
    exp_part = CodeExecutionResultPart(Outcome.FAILED, "")

    assert tru_part == exp_part


def test_decode_part_unknown_outcome(caplog):
    with caplog.at_level(logging.ERROR):
        tru_part = decode_part({"codeExecutionResult": {"outcome": "OUTCOME_SOMETHING_NEW", "output": "x"}})

    assert tru_part == CodeExecutionResultPart(Outcome.UNKNOWN, "x")
    assert "unrecognized value" in caplog.text


def test_content_to_dict_omits_missing_role():
    tru_encoded = Content(None, (TextPart("x"),)).to_dict()
    exp_encoded = {"parts": [{"text": "x"}]}

    assert tru_encoded == exp_encoded


def test_content_from_dict_missing_parts():
    tru_content = Content.from_dict({"role": "model"})
    exp_content = Content("model", ())

    assert tru_content == exp_content


@pytest.mark.parametrize("raw", [[], {"parts": {}}, {"role": 1, "parts": []}])
def test_content_from_dict_malformed(raw):
    with pytest.raises(DecodeError):
        Content.from_dict(raw)


def test_content_text_and_function_calls():
    call = FunctionCallPart("sum", {"x": JSONNumber(1)})
    content = Content("model", [call, TextPart("first"), TextPart("second")])

    assert content.text == "first"
    assert content.function_calls == [call]
    assert isinstance(content.parts, tuple)


def test_content_user_and_model():
    tru_user = Content.user("a", TextPart("b"))
    tru_model = Content.model(Content("user", (TextPart("c"),)))

    assert tru_user == Content("user", (TextPart("a"), TextPart("b")))
    assert tru_model == Content("model", (TextPart("c"),))


class Upper:
    def __init__(self, text):
        self.text = text

    def produces_parts(self):
        return [TextPart(self.text.upper())]


class Broken:
    def produces_parts(self):
        raise OSError("cannot encode image")


def test_to_parts_parts_representable():
    tru_parts = to_parts(["a", Upper("b"), [FunctionResponsePart("f", {"v": JSONString("x")})]])
    exp_parts = [TextPart("a"), TextPart("B"), FunctionResponsePart("f", {"v": JSONString("x")})]

    assert tru_parts == exp_parts


def test_to_parts_conversion_failure():
    with pytest.raises(PartConversionError, match="failed to convert to parts") as exc_info:
        to_parts(Broken())

    assert isinstance(exc_info.value.__cause__, OSError)


@pytest.mark.parametrize("value", [b"raw", 42])
def test_to_parts_unsupported(value):
    with pytest.raises(PartConversionError):
        to_parts(value)
