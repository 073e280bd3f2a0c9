"""Construction of generate content requests.

Building a request never touches conversation history: ``contents`` is a fresh tuple holding the history followed by
the new user turn. Committing turns to history is left to the caller.
"""

import logging
from typing import Iterable, Optional

from ..types.content import Content
from ..types.generation import GenerationConfig, SafetySetting
from ..types.request import CountTokensRequest, GenerateContentRequest, RequestOptions
from ..types.tools import Tool, ToolConfig

logger = logging.getLogger(__name__)

MODELS_PREFIX = "models/"


def model_resource_name(name: str) -> str:
    """Qualify a model name as a resource name.

    Bare names such as ``gemini-1.5-flash`` become ``models/gemini-1.5-flash``; names that already contain a
    collection, such as ``tunedModels/my-model``, are kept as is.

    Raises:
        ValueError: If the name is empty.
    """
    if not name:
        raise ValueError("model name must not be empty")
    if "/" in name:
        return name
    return f"{MODELS_PREFIX}{name}"


def build_request(
    model: str,
    user_content: Content,
    *,
    history: Iterable[Content] = (),
    config: Optional[GenerationConfig] = None,
    safety_settings: Optional[Iterable[SafetySetting]] = None,
    tools: Optional[Iterable[Tool]] = None,
    tool_config: Optional[ToolConfig] = None,
    system_instruction: Optional[Content] = None,
    streaming: bool = False,
    options: Optional[RequestOptions] = None,
) -> GenerateContentRequest:
    """Build a generate content request.

    Args:
        model: The model name; qualified with ``model_resource_name``.
        user_content: The new turn to send.
        history: Earlier turns of the conversation, oldest first.
        config: Optional generation parameters.
        safety_settings: Optional per-category blocking thresholds.
        tools: Optional tools the model may use.
        tool_config: Optional configuration shared by all tools.
        system_instruction: Optional system instruction.
        streaming: Whether the request targets the streaming endpoint.
        options: Transport options; defaults to ``RequestOptions()``.

    Returns:
        The request, with ``contents`` equal to the history followed by ``user_content``.
    """
    contents = (*history, user_content)
    logger.debug("model=<%s>, contents=<%d>, streaming=<%s> | building request", model, len(contents), streaming)

    return GenerateContentRequest(
        model=model_resource_name(model),
        contents=contents,
        generation_config=config,
        safety_settings=tuple(safety_settings) if safety_settings is not None else None,
        tools=tuple(tools) if tools is not None else None,
        tool_config=tool_config,
        system_instruction=system_instruction,
        is_streaming=streaming,
        options=options or RequestOptions(),
    )


def build_count_tokens_request(request: GenerateContentRequest) -> CountTokensRequest:
    """Wrap a generate content request for token counting."""
    return CountTokensRequest(model=request.model, generate_content_request=request)
