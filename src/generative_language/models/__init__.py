"""SDK model client.

This package includes the generative model client together with the request builder and response decoder it uses.
"""

from . import model, request_builder, response_decoder
from .model import GenerativeModel

__all__ = ["GenerativeModel", "model", "request_builder", "response_decoder"]
