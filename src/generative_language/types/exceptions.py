"""Exception-related type definitions for the SDK."""

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .response import FinishReason, GenerateContentResponse


class GenerativeLanguageError(Exception):
    """Base class for all errors raised by the SDK."""

    pass


class DecodeError(GenerativeLanguageError):
    """Exception raised when a wire payload cannot be decoded.

    Raised for malformed JSON and for schema violations at the part, content or response level.
    """

    def __init__(self, message: str, underlying_error: Optional[BaseException] = None) -> None:
        """Initialize exception.

        Args:
            message: Description of the decode failure.
            underlying_error: The parser or validation error that caused the failure, if any.
        """
        self.message = message
        self.underlying_error = underlying_error
        super().__init__(message)


class InvalidCandidateError(GenerativeLanguageError):
    """Exception raised when a candidate's content cannot be decoded."""

    def __init__(self, underlying_error: BaseException) -> None:
        """Initialize exception.

        Args:
            underlying_error: The decode error raised for the candidate content.
        """
        self.underlying_error = underlying_error
        super().__init__(f"{self.__class__.__name__}: {underlying_error}")


class EmptyContentError(InvalidCandidateError):
    """Exception raised when the server returns `"content": {}` for a candidate.

    This is a known server behaviour; callers may treat it as "the model produced nothing".
    """

    pass


class MalformedContentError(InvalidCandidateError):
    """Exception raised when candidate content is present but not decodable as any known part."""

    pass


class ResponseStoppedEarlyError(GenerativeLanguageError):
    """Exception raised when the model stopped generating for a reason other than a natural stop.

    The partial response is preserved so callers can still inspect whatever was produced.
    """

    def __init__(self, reason: "FinishReason", response: "GenerateContentResponse") -> None:
        """Initialize exception.

        Args:
            reason: The finish reason reported by the server.
            response: The (partial) response produced before the stop.
        """
        self.reason = reason
        self.response = response
        super().__init__(f"response stopped early: {reason.value}")


class PromptBlockedError(GenerativeLanguageError):
    """Exception raised when the prompt was blocked before any candidate was generated."""

    def __init__(self, response: "GenerateContentResponse") -> None:
        """Initialize exception.

        Args:
            response: The response carrying the prompt feedback.
        """
        self.response = response
        block_reason = response.prompt_feedback.block_reason if response.prompt_feedback else None
        super().__init__(f"prompt blocked: {block_reason.value if block_reason else 'unknown'}")


class TransportError(GenerativeLanguageError):
    """Exception raised for network, non-HTTP or timeout failures in the transport."""

    def __init__(self, message: str, underlying_error: Optional[BaseException] = None) -> None:
        """Initialize exception.

        Args:
            message: Description of the transport failure.
            underlying_error: The error raised by the HTTP library, if any.
        """
        self.message = message
        self.underlying_error = underlying_error
        super().__init__(message)


class RPCError(GenerativeLanguageError):
    """Exception raised when the backend answers with a structured error payload."""

    def __init__(self, http_status: int, message: str, status: Any = None, details: Optional[list[Any]] = None) -> None:
        """Initialize exception.

        Args:
            http_status: The HTTP status code of the response.
            message: The error message from the server.
            status: The RPC status code reported by the server.
            details: Typed error details reported by the server.
        """
        self.http_status = http_status
        self.message = message
        self.status = status
        self.details = details or []
        super().__init__(f"RPC error {http_status}: {message}")


class InvalidAPIKeyError(GenerativeLanguageError):
    """Exception raised when the server rejects the API key."""

    def __init__(self, message: str) -> None:
        """Initialize exception.

        Args:
            message: The message from the server that describes the problem with the key.
        """
        self.message = message
        super().__init__(message)


class UnsupportedUserLocationError(GenerativeLanguageError):
    """Exception raised when the API is not available in the caller's location."""

    pass


class InternalError(GenerativeLanguageError):
    """Exception raised when an unexpected error occurs while generating content."""

    def __init__(self, underlying_error: BaseException) -> None:
        """Initialize exception.

        Args:
            underlying_error: The unexpected error.
        """
        self.underlying_error = underlying_error
        super().__init__(f"internal error: {underlying_error}")


class CountTokensError(GenerativeLanguageError):
    """Exception raised when a token counting request fails."""

    def __init__(self, underlying_error: BaseException) -> None:
        """Initialize exception.

        Args:
            underlying_error: The error raised while counting tokens.
        """
        self.underlying_error = underlying_error
        super().__init__(f"count tokens failed: {underlying_error}")


class PartConversionError(GenerativeLanguageError):
    """Exception raised when a value cannot be converted into content parts."""

    pass


class FunctionCallProtocolError(GenerativeLanguageError):
    """Exception raised when a function call requested by the model cannot be answered.

    This covers both a call naming a function with no registered handler and a handler that failed.
    """

    def __init__(self, name: str, message: str, underlying_error: Optional[BaseException] = None) -> None:
        """Initialize exception.

        Args:
            name: The name of the function the model asked to call.
            message: Description of the failure.
            underlying_error: The error raised by the handler, if any.
        """
        self.name = name
        self.message = message
        self.underlying_error = underlying_error
        super().__init__(f"function_name=<{name}> | {message}")


class RoundLimitExceededError(GenerativeLanguageError):
    """Exception raised when the function-call loop exceeds its configured number of rounds."""

    def __init__(self, max_rounds: int) -> None:
        """Initialize exception.

        Args:
            max_rounds: The configured maximum number of function-call rounds.
        """
        self.max_rounds = max_rounds
        super().__init__(f"function calling exceeded max_rounds=<{max_rounds}>")
