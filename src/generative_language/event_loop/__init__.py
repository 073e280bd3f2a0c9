"""This package provides the stream assembly and function-call loops that drive a model exchange."""

from . import function_calling, streaming

__all__ = ["function_calling", "streaming"]
