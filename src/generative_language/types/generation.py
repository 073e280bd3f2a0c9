"""Generation and safety configuration type definitions for the SDK.

- Docs: https://ai.google.dev/api/generate-content#generationconfig
- Docs: https://ai.google.dev/api/generate-content#safetysetting
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from ._enum import ServerEnum
from .exceptions import DecodeError


@dataclass(frozen=True)
class GenerationConfig:
    """Optional generation parameters.

    Unset fields are omitted from the request so that server-side defaults apply. No field has an implicit default
    in this SDK, including ``max_output_tokens`` for either streaming or unary calls.
    """

    temperature: Optional[float] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None
    candidate_count: Optional[int] = None
    max_output_tokens: Optional[int] = None
    stop_sequences: Optional[tuple[str, ...]] = None
    response_mime_type: Optional[str] = None

    def __post_init__(self) -> None:
        if self.stop_sequences is not None:
            object.__setattr__(self, "stop_sequences", tuple(self.stop_sequences))

    def to_dict(self) -> dict[str, Any]:
        """Encode the configuration into its wire object, omitting unset fields."""
        encoded: dict[str, Any] = {
            "temperature": self.temperature,
            "topP": self.top_p,
            "topK": self.top_k,
            "candidateCount": self.candidate_count,
            "maxOutputTokens": self.max_output_tokens,
            "stopSequences": list(self.stop_sequences) if self.stop_sequences is not None else None,
            "responseMimeType": self.response_mime_type,
        }
        return {key: value for key, value in encoded.items() if value is not None}


class HarmCategory(ServerEnum):
    """Categories of potentially harmful content."""

    UNKNOWN = "HARM_CATEGORY_UNKNOWN"
    UNSPECIFIED = "HARM_CATEGORY_UNSPECIFIED"
    HARASSMENT = "HARM_CATEGORY_HARASSMENT"
    HATE_SPEECH = "HARM_CATEGORY_HATE_SPEECH"
    SEXUALLY_EXPLICIT = "HARM_CATEGORY_SEXUALLY_EXPLICIT"
    DANGEROUS_CONTENT = "HARM_CATEGORY_DANGEROUS_CONTENT"


class HarmProbability(ServerEnum):
    """Probability that a piece of content is harmful."""

    UNKNOWN = "UNKNOWN"
    UNSPECIFIED = "HARM_PROBABILITY_UNSPECIFIED"
    NEGLIGIBLE = "NEGLIGIBLE"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class BlockThreshold(str, Enum):
    """Probability at and above which content is blocked."""

    UNSPECIFIED = "HARM_BLOCK_THRESHOLD_UNSPECIFIED"
    BLOCK_LOW_AND_ABOVE = "BLOCK_LOW_AND_ABOVE"
    BLOCK_MEDIUM_AND_ABOVE = "BLOCK_MEDIUM_AND_ABOVE"
    BLOCK_ONLY_HIGH = "BLOCK_ONLY_HIGH"
    BLOCK_NONE = "BLOCK_NONE"


@dataclass(frozen=True)
class SafetySetting:
    """A blocking threshold for one harm category."""

    harm_category: HarmCategory
    threshold: BlockThreshold

    def to_dict(self) -> dict[str, Any]:
        """Encode the setting into its wire object."""
        return {"category": self.harm_category.value, "threshold": self.threshold.value}


@dataclass(frozen=True)
class SafetyRating:
    """The safety rating for a piece of content."""

    category: HarmCategory
    probability: HarmProbability
    blocked: bool = False

    @classmethod
    def from_dict(cls, raw: Any) -> "SafetyRating":
        """Decode a safety rating; unrecognized enum values decode to ``UNKNOWN``.

        Raises:
            DecodeError: If the rating is not an object or a required key is missing.
        """
        if not isinstance(raw, Mapping):
            raise DecodeError("key=<safetyRatings> | expected an object")
        try:
            return cls(
                category=HarmCategory(raw["category"]),
                probability=HarmProbability(raw["probability"]),
                blocked=bool(raw.get("blocked", False)),
            )
        except KeyError as e:
            raise DecodeError(f"key=<safetyRatings.{e.args[0]}> | missing required key", e) from e
