"""URL construction for the generative language REST endpoints."""

from ..types.request import CountTokensRequest, GenerateContentRequest, RequestOptions


def _model_url(model: str, options: RequestOptions) -> str:
    return f"{options.base_url.rstrip('/')}/{options.api_version}/{model}"


def request_url(request: GenerateContentRequest) -> str:
    """Return the endpoint for a generate content request.

    Streaming requests target ``streamGenerateContent`` with server-sent events; unary requests target
    ``generateContent``.
    """
    base = _model_url(request.model, request.options)
    if request.is_streaming:
        return f"{base}:streamGenerateContent?alt=sse"
    return f"{base}:generateContent"


def count_tokens_url(request: CountTokensRequest, options: RequestOptions) -> str:
    """Return the endpoint for a count tokens request."""
    return f"{_model_url(request.model, options)}:countTokens"
