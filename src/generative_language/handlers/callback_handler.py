"""This module provides handlers for displaying events from a chat session."""

from collections.abc import Callable
from typing import Any


class PrintingCallbackHandler:
    """Handler for streaming text output and function calls to stdout."""

    def __init__(self) -> None:
        """Initialize handler."""
        self.function_call_count = 0

    def __call__(self, **kwargs: Any) -> None:
        """Stream text output and function calls to stdout.

        Args:
            **kwargs: Callback event data including:
                - data (str): Text content to stream.
                - complete (bool): Whether this is the final chunk of a response.
                - function_call (FunctionCallPart): A function call the model asked for.
        """
        data = kwargs.get("data", "")
        complete = kwargs.get("complete", False)
        function_call = kwargs.get("function_call")

        if data:
            print(data, end="" if not complete else "\n")

        if function_call is not None:
            self.function_call_count += 1
            print(f"\nFunction #{self.function_call_count}: {function_call.name}")

        if complete and data:
            print("\n")


class CompositeCallbackHandler:
    """Class-based callback handler that combines multiple callback handlers.

    This handler allows multiple callback handlers to be invoked for the same events,
    enabling different processing or output formats for the same stream data.
    """

    def __init__(self, *handlers: Callable) -> None:
        """Initialize handler."""
        self.handlers = handlers

    def __call__(self, **kwargs: Any) -> None:
        """Invoke all handlers in the chain."""
        for handler in self.handlers:
            handler(**kwargs)


def null_callback_handler(**_kwargs: Any) -> None:
    """Callback handler that discards all output.

    Args:
        **_kwargs: Event data (ignored).
    """
    return None
