"""Multi-turn chat sessions."""

from .chat import Chat

__all__ = ["Chat"]
