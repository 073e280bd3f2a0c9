"""JSON value type definitions for the SDK.

Function call arguments and function responses are opaque JSON objects. They are represented as a closed set
of tagged variants so that the decode order between numbers, strings and booleans is an explicit rule:

    null -> number -> string -> boolean -> object -> array

A quoted numeric value (``"42"``) therefore stays a string, and a JSON boolean never decodes as a number even
though Python's ``bool`` is a subclass of ``int``.

- Protobuf docs: https://protobuf.dev/reference/protobuf/google.protobuf/#value
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from .exceptions import DecodeError


@dataclass(frozen=True)
class JSONNull:
    """A ``null`` value."""

    def encode(self) -> None:
        """Return the plain JSON value."""
        return None


@dataclass(frozen=True)
class JSONNumber:
    """A numeric value; all JSON numbers are held as floats."""

    value: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", float(self.value))

    def encode(self) -> Union[int, float]:
        """Return the plain JSON value, collapsing integral floats to ``int``."""
        if self.value.is_integer():
            return int(self.value)
        return self.value


@dataclass(frozen=True)
class JSONString:
    """A string value."""

    value: str

    def encode(self) -> str:
        """Return the plain JSON value."""
        return self.value


@dataclass(frozen=True)
class JSONBool:
    """A boolean value."""

    value: bool

    def encode(self) -> bool:
        """Return the plain JSON value."""
        return self.value


@dataclass(frozen=True)
class JSONObject:
    """A JSON object; key order is preserved."""

    fields: dict[str, "JSONValue"] = field(default_factory=dict)

    def encode(self) -> dict[str, Any]:
        """Return the plain JSON value."""
        return encode_object(self.fields)


@dataclass(frozen=True)
class JSONArray:
    """An array of JSON values."""

    items: tuple["JSONValue", ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))

    def encode(self) -> list[Any]:
        """Return the plain JSON value."""
        return [item.encode() for item in self.items]


JSONValue = Union[JSONNull, JSONNumber, JSONString, JSONBool, JSONObject, JSONArray]
"""A value in one of JSON's data types."""

JSONObjectFields = dict[str, JSONValue]
"""A collection of name-value pairs representing a JSON object."""


def decode_value(raw: Any) -> JSONValue:
    """Decode a Python value produced by ``json.loads`` into a tagged JSON value.

    Args:
        raw: A value parsed from JSON.

    Returns:
        The tagged JSON value.

    Raises:
        DecodeError: If the value is not one of JSON's data types.
    """
    if raw is None:
        return JSONNull()
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return JSONNumber(float(raw))
    if isinstance(raw, str):
        return JSONString(raw)
    if isinstance(raw, bool):
        return JSONBool(raw)
    if isinstance(raw, Mapping):
        return JSONObject(decode_object(raw))
    if isinstance(raw, (list, tuple)):
        return JSONArray(tuple(decode_value(item) for item in raw))

    raise DecodeError(f"value_type=<{type(raw).__name__}> | failed to decode JSON value")


def decode_object(raw: Any) -> JSONObjectFields:
    """Decode a JSON object into a mapping of tagged values.

    Args:
        raw: A dict parsed from JSON.

    Returns:
        The decoded name-value pairs.

    Raises:
        DecodeError: If ``raw`` is not an object or a member cannot be decoded.
    """
    if not isinstance(raw, Mapping):
        raise DecodeError(f"value_type=<{type(raw).__name__}> | expected a JSON object")
    return {str(key): decode_value(value) for key, value in raw.items()}


def encode_object(fields: Mapping[str, JSONValue]) -> dict[str, Any]:
    """Encode a mapping of tagged values into a plain JSON object."""
    return {key: value.encode() for key, value in fields.items()}


def from_python(value: Any) -> JSONValue:
    """Coerce a plain Python value, or an already tagged value, into a tagged JSON value.

    Used to accept function handler results written with ordinary dicts, lists and numbers.

    Args:
        value: The value to coerce.

    Returns:
        The tagged JSON value.

    Raises:
        DecodeError: If the value has no JSON representation.
    """
    if isinstance(value, (JSONNull, JSONNumber, JSONString, JSONBool, JSONObject, JSONArray)):
        return value
    if isinstance(value, Mapping):
        return JSONObject({str(key): from_python(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return JSONArray(tuple(from_python(item) for item in value))
    return decode_value(value)


def object_from_python(values: Mapping[str, Any]) -> JSONObjectFields:
    """Coerce a plain Python mapping into JSON object fields."""
    return {str(key): from_python(value) for key, value in values.items()}


def to_python(fields: Mapping[str, JSONValue]) -> dict[str, Any]:
    """Convert JSON object fields into plain Python values."""
    return encode_object(fields)

