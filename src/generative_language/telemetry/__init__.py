"""Telemetry support for the SDK."""

from .tracer import Tracer, get_tracer

__all__ = ["Tracer", "get_tracer"]
