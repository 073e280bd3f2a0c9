"""Decoding of server payloads into response values and typed errors.

- Docs: https://ai.google.dev/api/generate-content#generatecontentresponse
- Error model: https://cloud.google.com/apis/design/errors#error_model
"""

import json
import logging
from enum import Enum
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..types.exceptions import (
    DecodeError,
    InvalidAPIKeyError,
    PromptBlockedError,
    ResponseStoppedEarlyError,
    RPCError,
    UnsupportedUserLocationError,
)
from ..types.response import CountTokensResponse, FinishReason, GenerateContentResponse

logger = logging.getLogger(__name__)

UNSUPPORTED_LOCATION_MESSAGE = "User location is not supported for the API use."
API_KEY_INVALID_REASON = "API_KEY_INVALID"


def _load(wire: Union[bytes, str, Mapping[str, Any]]) -> Any:
    if isinstance(wire, Mapping):
        return wire
    try:
        return json.loads(wire)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError(f"invalid JSON payload: {e}", e) from e


def decode_response(wire: Union[bytes, str, Mapping[str, Any]]) -> GenerateContentResponse:
    """Decode a generate content response or one streamed fragment.

    Args:
        wire: The raw JSON payload, or an already parsed JSON object.

    Returns:
        The decoded response.

    Raises:
        DecodeError: If the payload is not JSON or violates the response schema.
        EmptyContentError: If a candidate's content is an empty object.
        MalformedContentError: If a candidate's content cannot be decoded.
    """
    raw = _load(wire)
    try:
        return GenerateContentResponse.from_dict(raw)
    except (AttributeError, TypeError, ValueError) as e:
        raise DecodeError(f"malformed response: {e}", e) from e


def decode_count_tokens_response(wire: Union[bytes, str, Mapping[str, Any]]) -> CountTokensResponse:
    """Decode a count tokens response.

    Raises:
        DecodeError: If the payload is not JSON or ``totalTokens`` is missing.
    """
    return CountTokensResponse.from_dict(_load(wire))


def validate_response(response: GenerateContentResponse) -> GenerateContentResponse:
    """Check a unary response for a blocked prompt or an early stop.

    Args:
        response: The decoded response.

    Returns:
        The same response when it completed normally.

    Raises:
        PromptBlockedError: If the prompt was blocked and no candidate was generated.
        ResponseStoppedEarlyError: If the first candidate stopped for a reason other than ``STOP``.
    """
    if response.prompt_feedback is not None and response.prompt_feedback.block_reason is not None:
        if not response.candidates:
            raise PromptBlockedError(response)

    if response.candidates:
        finish_reason = response.candidates[0].finish_reason
        if finish_reason is not None and finish_reason != FinishReason.STOP:
            raise ResponseStoppedEarlyError(finish_reason, response)

    return response


class RPCStatus(str, Enum):
    """Canonical RPC status codes; unrecognized codes decode to ``UNKNOWN``."""

    OK = "OK"
    CANCELLED = "CANCELLED"
    UNKNOWN = "UNKNOWN"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    DEADLINE_EXCEEDED = "DEADLINE_EXCEEDED"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    RESOURCE_EXHAUSTED = "RESOURCE_EXHAUSTED"
    FAILED_PRECONDITION = "FAILED_PRECONDITION"
    ABORTED = "ABORTED"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    UNIMPLEMENTED = "UNIMPLEMENTED"
    INTERNAL = "INTERNAL"
    UNAVAILABLE = "UNAVAILABLE"
    DATA_LOSS = "DATA_LOSS"
    UNAUTHENTICATED = "UNAUTHENTICATED"


class FieldViolation(BaseModel):
    """A single bad request field."""

    field: str = ""
    description: str = ""


class BadRequestDetail(BaseModel):
    """Describes violations in a client request."""

    type: str = Field(alias="@type")
    field_violations: list[FieldViolation] = Field(default_factory=list, alias="fieldViolations")


class ErrorInfoDetail(BaseModel):
    """Describes the cause of an error with structured details."""

    type: str = Field(alias="@type")
    reason: str = ""
    domain: str = ""
    metadata: dict[str, str] = Field(default_factory=dict)


class UnknownDetail(BaseModel):
    """A detail of a type this SDK does not interpret."""

    model_config = ConfigDict(extra="allow")

    type: str = Field(default="", alias="@type")


ErrorDetail = Union[BadRequestDetail, ErrorInfoDetail, UnknownDetail]


class RPCErrorBody(BaseModel):
    """The ``error`` member of a server error payload."""

    code: int = 0
    message: str = ""
    status: RPCStatus = RPCStatus.UNKNOWN
    details: list[ErrorDetail] = Field(default_factory=list)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> RPCStatus:
        try:
            return RPCStatus(value)
        except ValueError:
            logger.error("status=<%s> | unrecognized rpc status, using UNKNOWN", value)
            return RPCStatus.UNKNOWN

    @field_validator("details", mode="before")
    @classmethod
    def _details(cls, value: Any) -> list[ErrorDetail]:
        details: list[ErrorDetail] = []
        for detail in value or []:
            match detail.get("@type") if isinstance(detail, Mapping) else None:
                case "type.googleapis.com/google.rpc.BadRequest":
                    details.append(BadRequestDetail.model_validate(detail))
                case "type.googleapis.com/google.rpc.ErrorInfo":
                    details.append(ErrorInfoDetail.model_validate(detail))
                case _:
                    details.append(UnknownDetail.model_validate(detail if isinstance(detail, Mapping) else {}))
        return details


class RPCErrorPayload(BaseModel):
    """A server error payload: ``{"error": {...}}``."""

    error: RPCErrorBody


def _parse_error_body(body: bytes) -> Optional[RPCErrorBody]:
    try:
        return RPCErrorPayload.model_validate_json(body).error
    except ValidationError as e:
        logger.debug("error=<%s> | failed to parse server error body", e)
        return None


def decode_server_error(status_code: int, body: bytes) -> Exception:
    """Map a non-success HTTP response to a typed error.

    An ``ErrorInfo`` detail with reason ``API_KEY_INVALID`` maps to ``InvalidAPIKeyError``, the known unsupported
    location message maps to ``UnsupportedUserLocationError`` and everything else to ``RPCError``.

    Args:
        status_code: The HTTP status code.
        body: The raw response body.

    Returns:
        The error to raise.
    """
    error = _parse_error_body(body)
    if error is None:
        text = body.decode("utf-8", errors="replace")
        return RPCError(status_code, text or f"HTTP {status_code}")

    logger.debug("http_status=<%s>, status=<%s> | server returned an error", status_code, error.status.value)

    if any(isinstance(detail, ErrorInfoDetail) and detail.reason == API_KEY_INVALID_REASON for detail in error.details):
        return InvalidAPIKeyError(error.message)

    if error.message == UNSUPPORTED_LOCATION_MESSAGE:
        return UnsupportedUserLocationError(error.message)

    return RPCError(status_code, error.message, status=error.status, details=list(error.details))
