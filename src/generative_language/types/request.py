"""Request type definitions for the SDK.

- Docs: https://ai.google.dev/api/generate-content#method:-models.generatecontent
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from .content import Content
from .generation import GenerationConfig, SafetySetting
from .tools import Tool, ToolConfig

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"
DEFAULT_API_VERSION = "v1beta"
DEFAULT_TIMEOUT = 300.0


@dataclass(frozen=True)
class RequestOptions:
    """Transport-level options for a request.

    Attributes:
        timeout: Seconds to wait for the server; passed to the transport untouched.
        api_version: The API version segment of the request URL.
        base_url: Scheme and host of the API.
    """

    timeout: float = DEFAULT_TIMEOUT
    api_version: str = DEFAULT_API_VERSION
    base_url: str = DEFAULT_BASE_URL


@dataclass(frozen=True)
class GenerateContentRequest:
    """A fully built generate content request.

    ``model`` travels in the URL path and ``is_streaming`` selects the endpoint; neither is part of the request body
    unless explicitly asked for.
    """

    model: str
    contents: tuple[Content, ...]
    generation_config: Optional[GenerationConfig] = None
    safety_settings: Optional[tuple[SafetySetting, ...]] = None
    tools: Optional[tuple[Tool, ...]] = None
    tool_config: Optional[ToolConfig] = None
    system_instruction: Optional[Content] = None
    is_streaming: bool = False
    options: RequestOptions = field(default_factory=RequestOptions)

    def __post_init__(self) -> None:
        object.__setattr__(self, "contents", tuple(self.contents))
        if self.safety_settings is not None:
            object.__setattr__(self, "safety_settings", tuple(self.safety_settings))
        if self.tools is not None:
            object.__setattr__(self, "tools", tuple(self.tools))

    def to_dict(self, include_model: bool = False) -> dict[str, Any]:
        """Encode the request body.

        Args:
            include_model: Whether to add ``model`` to the body, as required when nested in a count tokens request.

        Returns:
            The JSON request body; only ``contents`` is always present.
        """
        body: dict[str, Any] = {}
        if include_model:
            body["model"] = self.model
        body["contents"] = [content.to_dict() for content in self.contents]
        if self.generation_config is not None:
            body["generationConfig"] = self.generation_config.to_dict()
        if self.safety_settings is not None:
            body["safetySettings"] = [setting.to_dict() for setting in self.safety_settings]
        if self.tools is not None:
            body["tools"] = [tool.to_dict() for tool in self.tools]
        if self.tool_config is not None:
            body["toolConfig"] = self.tool_config.to_dict()
        if self.system_instruction is not None:
            body["systemInstruction"] = self.system_instruction.to_dict()
        return body


@dataclass(frozen=True)
class CountTokensRequest:
    """A request to count the tokens of a generate content request."""

    model: str
    generate_content_request: GenerateContentRequest

    def to_dict(self) -> dict[str, Any]:
        """Encode the request body; the model is only named inside the nested request."""
        return {"generateContentRequest": self.generate_content_request.to_dict(include_model=True)}
