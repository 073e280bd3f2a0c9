"""Response type definitions for the SDK.

- Docs: https://ai.google.dev/api/generate-content#generatecontentresponse
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from ._enum import ServerEnum
from .content import CodeExecutionResultPart, Content, ExecutableCodePart, FunctionCallPart, Part, TextPart
from .exceptions import DecodeError, EmptyContentError, MalformedContentError
from .generation import SafetyRating

logger = logging.getLogger(__name__)

UNSPECIFIED_LANGUAGE = "LANGUAGE_UNSPECIFIED"


class FinishReason(ServerEnum):
    """Reason the model stopped generating tokens."""

    UNKNOWN = "FINISH_REASON_UNKNOWN"
    UNSPECIFIED = "FINISH_REASON_UNSPECIFIED"
    STOP = "STOP"
    """Natural stop point of the model or a provided stop sequence."""
    MAX_TOKENS = "MAX_TOKENS"
    """The maximum number of tokens specified in the request was reached."""
    SAFETY = "SAFETY"
    """Generation was stopped because the response was flagged for safety reasons."""
    RECITATION = "RECITATION"
    OTHER = "OTHER"


class BlockReason(ServerEnum):
    """Reason a prompt was blocked."""

    UNKNOWN = "UNKNOWN"
    UNSPECIFIED = "BLOCK_REASON_UNSPECIFIED"
    SAFETY = "SAFETY"
    OTHER = "OTHER"


def _object(raw: Any, key: str) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise DecodeError(f"key=<{key}> | expected an object")
    return raw


def _count(raw: Mapping[str, Any], key: str) -> int:
    value = raw.get(key, 0)
    if isinstance(value, bool):
        raise DecodeError(f"key=<{key}> | expected an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"key=<{key}> | expected an integer", e) from e


def _list_of(raw: Mapping[str, Any], key: str) -> list[Any]:
    value = raw.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise DecodeError(f"key=<{key}> | expected an array")
    return value


@dataclass(frozen=True)
class Citation:
    """A source attribution for a span of generated content."""

    start_index: int
    end_index: int
    uri: Optional[str] = None
    license: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Any) -> "Citation":
        """Decode a citation; a missing ``startIndex`` means the span starts at 0."""
        raw = _object(raw, "citationSources")
        return cls(
            start_index=_count(raw, "startIndex"),
            end_index=_count(raw, "endIndex"),
            uri=raw.get("uri"),
            license=raw.get("license") or None,
        )


@dataclass(frozen=True)
class CitationMetadata:
    """A collection of source attributions for a piece of content."""

    citation_sources: tuple[Citation, ...] = ()

    @classmethod
    def from_dict(cls, raw: Any) -> "CitationMetadata":
        """Decode citation metadata; accepts both ``citationSources`` and ``citations``."""
        raw = _object(raw, "citationMetadata")
        key = "citationSources" if "citationSources" in raw else "citations"
        return cls(tuple(Citation.from_dict(source) for source in _list_of(raw, key)))


@dataclass(frozen=True)
class UsageMetadata:
    """Token usage for a request. Only complete on the final fragment of a stream."""

    prompt_token_count: int = 0
    candidates_token_count: int = 0
    total_token_count: int = 0

    @classmethod
    def from_dict(cls, raw: Any) -> "UsageMetadata":
        """Decode usage metadata; missing counts decode to 0."""
        raw = _object(raw, "usageMetadata")
        return cls(
            prompt_token_count=_count(raw, "promptTokenCount"),
            candidates_token_count=_count(raw, "candidatesTokenCount"),
            total_token_count=_count(raw, "totalTokenCount"),
        )


@dataclass(frozen=True)
class PromptFeedback:
    """Feedback about the prompt, including whether it was blocked."""

    block_reason: Optional[BlockReason] = None
    safety_ratings: tuple[SafetyRating, ...] = ()

    @classmethod
    def from_dict(cls, raw: Any) -> "PromptFeedback":
        """Decode prompt feedback; unrecognized block reasons decode to ``UNKNOWN``."""
        raw = _object(raw, "promptFeedback")
        block_reason = raw.get("blockReason")
        return cls(
            block_reason=BlockReason(block_reason) if block_reason is not None else None,
            safety_ratings=tuple(SafetyRating.from_dict(rating) for rating in _list_of(raw, "safetyRatings")),
        )


def render_part(part: Part) -> Optional[str]:
    """Render one part for assembled text; None when the part contributes nothing."""
    match part:
        case TextPart(text=text):
            return text
        case ExecutableCodePart(language=language, code=code):
            tag = "" if language == UNSPECIFIED_LANGUAGE else language.lower()
            return f"```{tag}\n{code}\n```"
        case CodeExecutionResultPart(output=output) if output:
            closing = "```" if output.endswith("\n") else "\n```"
            return f"```\n{output}{closing}"
    return None


@dataclass(frozen=True)
class CandidateResponse:
    """One candidate completion generated by the model."""

    content: Content = field(default_factory=lambda: Content("model", ()))
    safety_ratings: tuple[SafetyRating, ...] = ()
    finish_reason: Optional[FinishReason] = None
    citation_metadata: Optional[CitationMetadata] = None

    @property
    def text(self) -> Optional[str]:
        """The candidate's parts rendered as text, joined with newlines.

        Text parts render verbatim, executable code as a fenced block tagged with the lower-cased language, and code
        execution results with output as an untagged fenced block. Returns None when no part renders.
        """
        rendered = [text for text in (render_part(part) for part in self.content.parts) if text is not None]
        if not rendered:
            return None
        return "\n".join(rendered)

    @classmethod
    def from_dict(cls, raw: Any) -> "CandidateResponse":
        """Decode a candidate.

        A missing ``content`` decodes to content with no parts. ``"content": {}`` raises ``EmptyContentError``;
        any other undecodable content raises ``MalformedContentError``.

        Raises:
            DecodeError: If the candidate itself is not an object.
            EmptyContentError: If the content is an empty object.
            MalformedContentError: If the content cannot be decoded.
        """
        if not isinstance(raw, Mapping):
            raise DecodeError("key=<candidates> | expected an object")

        raw_content = raw.get("content")
        if raw_content is None:
            content = Content("model", ())
        elif isinstance(raw_content, Mapping) and not raw_content:
            raise EmptyContentError(DecodeError("key=<content> | content is an empty object"))
        else:
            try:
                content = Content.from_dict(raw_content)
                if "parts" not in raw_content:
                    raise DecodeError("key=<content.parts> | missing required key")
            except DecodeError as e:
                raise MalformedContentError(e) from e

        finish_reason = raw.get("finishReason")
        citation_metadata = raw.get("citationMetadata")
        return cls(
            content=content,
            safety_ratings=tuple(SafetyRating.from_dict(rating) for rating in _list_of(raw, "safetyRatings")),
            finish_reason=FinishReason(finish_reason) if finish_reason is not None else None,
            citation_metadata=CitationMetadata.from_dict(citation_metadata) if citation_metadata is not None else None,
        )


@dataclass(frozen=True)
class GenerateContentResponse:
    """The model's response to a generate content request, or one fragment of a streamed response."""

    candidates: tuple[CandidateResponse, ...] = ()
    prompt_feedback: Optional[PromptFeedback] = None
    usage_metadata: Optional[UsageMetadata] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "candidates", tuple(self.candidates))

    @property
    def text(self) -> Optional[str]:
        """Assembled text of the first candidate, or None."""
        if not self.candidates:
            logger.error("could not get text from a response that had no candidates")
            return None
        return self.candidates[0].text

    @property
    def function_calls(self) -> list[FunctionCallPart]:
        """Function calls requested by the first candidate, in order."""
        if not self.candidates:
            return []
        return self.candidates[0].content.function_calls

    @classmethod
    def from_dict(cls, raw: Any) -> "GenerateContentResponse":
        """Decode a response object.

        Raises:
            DecodeError: If neither ``candidates`` nor ``promptFeedback`` is present, or the object is malformed.
            EmptyContentError: If a candidate's content is an empty object.
            MalformedContentError: If a candidate's content cannot be decoded.
        """
        if not isinstance(raw, Mapping):
            raise DecodeError(f"value_type=<{type(raw).__name__}> | expected a response object")
        if "candidates" not in raw and "promptFeedback" not in raw:
            raise DecodeError("failed to decode GenerateContentResponse; missing keys 'candidates' and 'promptFeedback'")

        prompt_feedback = raw.get("promptFeedback")
        usage_metadata = raw.get("usageMetadata")
        return cls(
            candidates=tuple(CandidateResponse.from_dict(candidate) for candidate in _list_of(raw, "candidates")),
            prompt_feedback=PromptFeedback.from_dict(prompt_feedback) if prompt_feedback is not None else None,
            usage_metadata=UsageMetadata.from_dict(usage_metadata) if usage_metadata is not None else None,
        )


@dataclass(frozen=True)
class CountTokensResponse:
    """The model's response to a count tokens request."""

    total_tokens: int

    @classmethod
    def from_dict(cls, raw: Any) -> "CountTokensResponse":
        """Decode a count tokens response.

        Raises:
            DecodeError: If ``totalTokens`` is missing or not an integer.
        """
        if not isinstance(raw, Mapping) or "totalTokens" not in raw:
            raise DecodeError("key=<totalTokens> | missing required key")
        return cls(total_tokens=_count(raw, "totalTokens"))
