"""Mock provider package exposing scripted replies for tests."""

from .client import MockProvider, MockReply

__all__ = ["MockProvider", "MockReply"]
