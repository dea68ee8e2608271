"""
Provider-agnostic interfaces for the adapter layer.

Re-exports the single-class Protocol modules under
``uniai.base.interfaces_parts``.
"""

from __future__ import annotations

from .interfaces_parts.chat_provider import ChatProvider
from .interfaces_parts.supports_streaming import SupportsStreaming

__all__ = ["ChatProvider", "SupportsStreaming"]
