"""SDK type definitions."""

from .content import (
    CodeExecutionResultPart,
    Content,
    ExecutableCodePart,
    FunctionCallPart,
    FunctionResponsePart,
    InlineDataPart,
    Outcome,
    Part,
    PartsRepresentable,
    TextPart,
    to_parts,
)
from .generation import BlockThreshold, GenerationConfig, HarmCategory, HarmProbability, SafetyRating, SafetySetting
from .json import JSONArray, JSONBool, JSONNull, JSONNumber, JSONObject, JSONString, JSONValue
from .request import CountTokensRequest, GenerateContentRequest, RequestOptions
from .response import (
    BlockReason,
    CandidateResponse,
    Citation,
    CitationMetadata,
    CountTokensResponse,
    FinishReason,
    GenerateContentResponse,
    PromptFeedback,
    UsageMetadata,
)
from .tools import (
    CodeExecution,
    DataType,
    FunctionCallingConfig,
    FunctionCallingMode,
    FunctionDeclaration,
    Schema,
    Tool,
    ToolConfig,
)

__all__ = [
    "BlockReason",
    "BlockThreshold",
    "CandidateResponse",
    "Citation",
    "CitationMetadata",
    "CodeExecution",
    "CodeExecutionResultPart",
    "Content",
    "CountTokensRequest",
    "CountTokensResponse",
    "DataType",
    "ExecutableCodePart",
    "FinishReason",
    "FunctionCallPart",
    "FunctionCallingConfig",
    "FunctionCallingMode",
    "FunctionDeclaration",
    "FunctionResponsePart",
    "GenerateContentRequest",
    "GenerateContentResponse",
    "GenerationConfig",
    "HarmCategory",
    "HarmProbability",
    "InlineDataPart",
    "JSONArray",
    "JSONBool",
    "JSONNull",
    "JSONNumber",
    "JSONObject",
    "JSONString",
    "JSONValue",
    "Outcome",
    "Part",
    "PartsRepresentable",
    "PromptFeedback",
    "RequestOptions",
    "SafetyRating",
    "SafetySetting",
    "Schema",
    "TextPart",
    "Tool",
    "ToolConfig",
    "UsageMetadata",
    "to_parts",
]
