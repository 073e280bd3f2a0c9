"""Content-related type definitions for the SDK.

A conversation turn is a ``Content``: a role plus an ordered sequence of ``Part`` values. A part is exactly one of
text, inline binary data, a function call, a function response, executable code or a code execution result.

- Docs: https://ai.google.dev/api/caching#Content
"""

import base64
import binascii
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Protocol, Union, runtime_checkable

from ._enum import ServerEnum
from .exceptions import DecodeError, PartConversionError
from .json import JSONObjectFields, decode_object, encode_object


class Outcome(ServerEnum):
    """Outcome of a code execution run by the model."""

    UNKNOWN = "OUTCOME_UNKNOWN"
    UNSPECIFIED = "OUTCOME_UNSPECIFIED"
    OK = "OUTCOME_OK"
    FAILED = "OUTCOME_FAILED"
    DEADLINE_EXCEEDED = "OUTCOME_DEADLINE_EXCEEDED"


@dataclass(frozen=True)
class TextPart:
    """Text value."""

    text: str


@dataclass(frozen=True)
class InlineDataPart:
    """Binary data with a media type. Not all media types are supported by every model.

    Attributes:
        mime_type: The IANA media type of the data, e.g. ``image/png``.
        data: The raw bytes; base64 encoded on the wire.
    """

    mime_type: str
    data: bytes

    @classmethod
    def jpeg(cls, data: bytes) -> "InlineDataPart":
        """Create a part holding JPEG image data."""
        return cls("image/jpeg", data)

    @classmethod
    def png(cls, data: bytes) -> "InlineDataPart":
        """Create a part holding PNG image data."""
        return cls("image/png", data)


@dataclass(frozen=True)
class FunctionCallPart:
    """A function call predicted by the model.

    Attributes:
        name: The name of the function to call.
        args: The function parameters and values.
    """

    name: str
    args: JSONObjectFields = field(default_factory=dict)


@dataclass(frozen=True)
class FunctionResponsePart:
    """The result of a function call, sent back to the model.

    Attributes:
        name: The name of the function that was called.
        response: The function's output as a JSON object.
    """

    name: str
    response: JSONObjectFields = field(default_factory=dict)


@dataclass(frozen=True)
class ExecutableCodePart:
    """Code generated by the model for execution.

    Attributes:
        language: The programming language, e.g. ``PYTHON`` or ``LANGUAGE_UNSPECIFIED``.
        code: The source code.
    """

    language: str
    code: str


@dataclass(frozen=True)
class CodeExecutionResultPart:
    """The result of running an ``ExecutableCodePart``.

    Attributes:
        outcome: Outcome of the run.
        output: Stdout when successful, otherwise an error description. May be empty.
    """

    outcome: Outcome
    output: str = ""


Part = Union[TextPart, InlineDataPart, FunctionCallPart, FunctionResponsePart, ExecutableCodePart, CodeExecutionResultPart]
"""A discrete piece of data in a media format interpretable by a model."""

INLINE_DATA_KEYS = ("inlineData", "inline_data")

PART_KEYS = ("text", *INLINE_DATA_KEYS, "functionCall", "functionResponse", "executableCode", "codeExecutionResult")
"""Discriminator keys in the order they are checked when decoding a part."""


def encode_part(part: Part) -> dict[str, Any]:
    """Encode a part into its wire object.

    Args:
        part: The part to encode.

    Returns:
        A JSON object holding exactly one part discriminator key.

    Raises:
        TypeError: If ``part`` is not a known part type.
    """
    match part:
        case TextPart(text=text):
            return {"text": text}
        case InlineDataPart(mime_type=mime_type, data=data):
            return {"inlineData": {"mimeType": mime_type, "data": base64.b64encode(data).decode("utf-8")}}
        case FunctionCallPart(name=name, args=args):
            return {"functionCall": {"name": name, "args": encode_object(args)}}
        case FunctionResponsePart(name=name, response=response):
            return {"functionResponse": {"name": name, "response": encode_object(response)}}
        case ExecutableCodePart(language=language, code=code):
            return {"executableCode": {"language": language, "code": code}}
        case CodeExecutionResultPart(outcome=outcome, output=output):
            return {"codeExecutionResult": {"outcome": outcome.value, "output": output}}
        case _:
            raise TypeError(f"part_type=<{type(part).__name__}> | unsupported type")


def _require(container: Mapping[str, Any], key: str, parent: str) -> Any:
    if key not in container:
        raise DecodeError(f"key=<{parent}.{key}> | missing required key")
    return container[key]


def _require_str(container: Mapping[str, Any], key: str, parent: str) -> str:
    value = _require(container, key, parent)
    if not isinstance(value, str):
        raise DecodeError(f"key=<{parent}.{key}> | expected a string, got {type(value).__name__}")
    return value


def _require_mapping(raw: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = raw[key]
    if not isinstance(value, Mapping):
        raise DecodeError(f"key=<{key}> | expected an object, got {type(value).__name__}")
    return value


def decode_part(raw: Any) -> Part:
    """Decode a wire object into a part.

    The variant is chosen by the presence of its discriminator key, checked in ``PART_KEYS`` order; no variant is
    trial-decoded. Keys that do not belong to any known variant are ignored.

    Args:
        raw: A JSON object parsed from the wire.

    Returns:
        The decoded part.

    Raises:
        DecodeError: If no known discriminator key is present or the matching variant is malformed.
    """
    if not isinstance(raw, Mapping):
        raise DecodeError(f"value_type=<{type(raw).__name__}> | expected a part object")

    if "text" in raw:
        text = raw["text"]
        if not isinstance(text, str):
            raise DecodeError(f"key=<text> | expected a string, got {type(text).__name__}")
        return TextPart(text)

    for key in INLINE_DATA_KEYS:
        if key in raw:
            inline_data = _require_mapping(raw, key)
            mime_type = inline_data.get("mimeType", inline_data.get("mime_type"))
            if not isinstance(mime_type, str):
                raise DecodeError(f"key=<{key}.mimeType> | missing required key")
            encoded = _require_str(inline_data, "data", key)
            try:
                data = base64.b64decode(encoded, validate=True)
            except (binascii.Error, ValueError) as e:
                raise DecodeError(f"key=<{key}.data> | invalid base64 data", e) from e
            return InlineDataPart(mime_type, data)

    if "functionCall" in raw:
        function_call = _require_mapping(raw, "functionCall")
        args = function_call.get("args")
        return FunctionCallPart(
            name=_require_str(function_call, "name", "functionCall"),
            args=decode_object(args) if args is not None else {},
        )

    if "functionResponse" in raw:
        function_response = _require_mapping(raw, "functionResponse")
        response = function_response.get("response")
        return FunctionResponsePart(
            name=_require_str(function_response, "name", "functionResponse"),
            response=decode_object(response) if response is not None else {},
        )

    if "executableCode" in raw:
        executable_code = _require_mapping(raw, "executableCode")
        return ExecutableCodePart(
            language=_require_str(executable_code, "language", "executableCode"),
            code=_require_str(executable_code, "code", "executableCode"),
        )

    if "codeExecutionResult" in raw:
        result = _require_mapping(raw, "codeExecutionResult")
        output = result.get("output", "")
        if not isinstance(output, str):
            raise DecodeError("key=<codeExecutionResult.output> | expected a string")
        return CodeExecutionResultPart(outcome=Outcome(_require(result, "outcome", "codeExecutionResult")), output=output)

    raise DecodeError(f"keys=<{sorted(raw)}> | neither text nor a recognized part was found")


@dataclass(frozen=True)
class Content:
    """One conversation turn: an optional role and an ordered sequence of parts.

    ``role`` is one of ``user``, ``model``, ``function`` or ``system`` by convention; it is omitted from the wire
    when ``None``. Parts are stored as a tuple, so a ``Content`` value never changes after construction.
    """

    role: Optional[str] = "user"
    parts: tuple[Part, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "parts", tuple(self.parts))

    @classmethod
    def user(cls, *values: Any) -> "Content":
        """Create a ``user`` turn from anything ``to_parts`` accepts."""
        return cls("user", to_parts(values))

    @classmethod
    def model(cls, *values: Any) -> "Content":
        """Create a ``model`` turn from anything ``to_parts`` accepts."""
        return cls("model", to_parts(values))

    @property
    def text(self) -> Optional[str]:
        """The first text part, if any."""
        for part in self.parts:
            if isinstance(part, TextPart):
                return part.text
        return None

    @property
    def function_calls(self) -> list[FunctionCallPart]:
        """All function call parts, in order."""
        return [part for part in self.parts if isinstance(part, FunctionCallPart)]

    def to_dict(self) -> dict[str, Any]:
        """Encode the content into its wire object."""
        encoded: dict[str, Any] = {}
        if self.role is not None:
            encoded["role"] = self.role
        encoded["parts"] = [encode_part(part) for part in self.parts]
        return encoded

    @classmethod
    def from_dict(cls, raw: Any) -> "Content":
        """Decode a wire object into a content value.

        Args:
            raw: A JSON object parsed from the wire.

        Returns:
            The decoded content. A missing ``parts`` key decodes to no parts.

        Raises:
            DecodeError: If the object or any of its parts is malformed.
        """
        if not isinstance(raw, Mapping):
            raise DecodeError(f"value_type=<{type(raw).__name__}> | expected a content object")

        role = raw.get("role")
        if role is not None and not isinstance(role, str):
            raise DecodeError("key=<role> | expected a string")

        parts = raw.get("parts", [])
        if not isinstance(parts, list):
            raise DecodeError("key=<parts> | expected an array")

        return cls(role=role, parts=tuple(decode_part(part) for part in parts))


@runtime_checkable
class PartsRepresentable(Protocol):
    """Any value that can be converted into content parts.

    Conversion may fail, for example when an image cannot be encoded, in which case ``PartConversionError`` is
    raised.
    """

    def produces_parts(self) -> list[Part]:
        """Convert this value into parts."""
        ...


_PART_TYPES = (TextPart, InlineDataPart, FunctionCallPart, FunctionResponsePart, ExecutableCodePart, CodeExecutionResultPart)


def to_parts(value: Any) -> list[Part]:
    """Convert a value into content parts.

    Accepts a string, a part, a ``Content`` (its parts), a ``PartsRepresentable`` or an iterable of any of those.

    Args:
        value: The value to convert.

    Returns:
        The parts, in order.

    Raises:
        PartConversionError: If the value, or an element of it, cannot be converted.
    """
    if isinstance(value, str):
        return [TextPart(value)]
    if isinstance(value, _PART_TYPES):
        return [value]
    if isinstance(value, Content):
        return list(value.parts)
    if isinstance(value, PartsRepresentable):
        try:
            return list(value.produces_parts())
        except PartConversionError:
            raise
        except Exception as e:
            raise PartConversionError(f"value_type=<{type(value).__name__}> | failed to convert to parts: {e}") from e
    if isinstance(value, (bytes, bytearray)):
        raise PartConversionError("bytes have no media type; wrap them in an InlineDataPart")
    if isinstance(value, Iterable):
        parts: list[Part] = []
        for element in value:
            parts.extend(to_parts(element))
        return parts

    raise PartConversionError(f"value_type=<{type(value).__name__}> | cannot be converted to parts")


def user_content(values: tuple[Any, ...]) -> Content:
    """Build the user turn for a call taking ``*values``.

    A single ``Content`` is sent as is; anything else is converted with ``to_parts`` into a ``user`` turn.
    """
    if len(values) == 1 and isinstance(values[0], Content):
        return values[0]
    return Content.user(*values)
