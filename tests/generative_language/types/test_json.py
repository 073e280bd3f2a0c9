import pytest

from generative_language.types.exceptions import DecodeError
from generative_language.types.json import (
    JSONArray,
    JSONBool,
    JSONNull,
    JSONNumber,
    JSONObject,
    JSONString,
    decode_object,
    decode_value,
    encode_object,
    from_python,
    object_from_python,
    to_python,
)


@pytest.mark.parametrize(
    ("raw", "exp_value"),
    [
        (None, JSONNull()),
        (42, JSONNumber(42.0)),
        (1.5, JSONNumber(1.5)),
        ("42", JSONString("42")),
        ("true", JSONString("true")),
        (True, JSONBool(True)),
        (False, JSONBool(False)),
        ({"a": 1}, JSONObject({"a": JSONNumber(1)})),
        ([1, "x", None], JSONArray((JSONNumber(1), JSONString("x"), JSONNull()))),
    ],
)
def test_decode_value(raw, exp_value):
    tru_value = decode_value(raw)
    assert tru_value == exp_value


def test_decode_value_bool_is_never_a_number():
    tru_value = decode_value(True)

    assert isinstance(tru_value, JSONBool)
    assert not isinstance(tru_value, JSONNumber)


def test_decode_value_unsupported_type():
    with pytest.raises(DecodeError, match="failed to decode JSON value"):
        decode_value(object())


def test_decode_object_requires_object():
    with pytest.raises(DecodeError, match="expected a JSON object"):
        decode_object([1, 2])


def test_encode_object_collapses_integral_numbers():
    fields = {"x": JSONNumber(4), "y": JSONNumber(0.5), "nested": JSONObject({"ok": JSONBool(True)})}

    tru_encoded = encode_object(fields)
    exp_encoded = {"x": 4, "y": 0.5, "nested": {"ok": True}}

    assert tru_encoded == exp_encoded
    assert isinstance(tru_encoded["x"], int)


def test_json_array_freezes_items():
    array = JSONArray([JSONNumber(1)])

    assert array.items == (JSONNumber(1),)


def test_from_python_passes_tagged_values_through():
    value = JSONString("x")

    assert from_python(value) is value


def test_object_from_python_round_trip():
    values = {"sum": 9, "tags": ["a", "b"], "meta": {"ok": True, "note": None}}

    tru_values = to_python(object_from_python(values))

    assert tru_values == values
