"""
Tool call emitted by an assistant turn.

The ``id`` is opaque: adapters may embed continuation metadata in it (see
``uniai.base.tools.call_id``) and callers must replay it unchanged.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class ToolCallFunction:
    """Function name plus its arguments as a JSON string."""

    name: str
    arguments: str = "{}"


@dataclass
class ToolCall:
    """A function call requested by the model.

    Attributes:
        id: Opaque identifier. Tool result messages reference it verbatim.
        function: Name and JSON-encoded arguments.
        type: Always ``"function"``.
        thought_signature: Vendor continuation token that must be replayed on
            the next turn (Gemini-class providers only).
    """

    id: str
    function: ToolCallFunction = field(default_factory=lambda: ToolCallFunction(name=""))
    type: str = "function"
    thought_signature: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "function": {"name": self.function.name, "arguments": self.function.arguments},
        }
        if self.thought_signature:
            out["thought_signature"] = self.thought_signature
        return out


__all__ = ["ToolCall", "ToolCallFunction"]
