"""ChatProvider Protocol (single-class module).

Defines the one operation every vendor adapter implements.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol, runtime_checkable

from ..models import Request, Result

if TYPE_CHECKING:
    from ..cancellation import CancellationToken


@runtime_checkable
class ChatProvider(Protocol):
    """Minimal interface for vendor adapters.

    Implementations map the IR onto their wire protocol (roles, parts, tools
    after schema normalization, tool choice), map returned tool calls back
    into ``ToolCall`` with the id preserved, and honor ``options.on_stream``
    through the streaming contract or reject it with ``UnsupportedCapability``.

    Errors are raised, never encoded in the Result; nothing is retried.
    """

    @property
    def provider_name(self) -> str:
        """Name the adapter is registered under, e.g. ``"openai"``."""
        ...

    def chat(self, request: Request, *, token: Optional["CancellationToken"] = None) -> Result:
        """Execute one chat completion and return its Result."""
        ...
