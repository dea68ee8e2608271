"""SupportsStreaming Protocol (single-class module)."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class SupportsStreaming(Protocol):
    """Capability probe for adapters that implement the streaming contract."""

    def supports_streaming(self) -> bool:
        ...
