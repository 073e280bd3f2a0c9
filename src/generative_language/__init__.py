"""A client for generative language models."""

from . import models, types
from .chat.chat import Chat
from .models.model import GenerativeModel

__all__ = ["Chat", "GenerativeModel", "models", "types"]
