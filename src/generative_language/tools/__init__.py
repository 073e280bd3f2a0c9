"""Client-side function handling.

This package routes the model's function calls to registered handlers.
"""

from .registry import FunctionRegistry

__all__ = ["FunctionRegistry"]
