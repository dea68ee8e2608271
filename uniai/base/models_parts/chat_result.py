"""
Result DTO returned once per successful chat call.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .content_part import Part
from .tool_call import ToolCall


WARNING_TOOL_CALLS_EMULATED = "tool calls emulated"


@dataclass
class Usage:
    """Token accounting as reported by the vendor."""

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def of(cls, input_tokens: Optional[int], output_tokens: Optional[int], total_tokens: Optional[int] = None) -> "Usage":
        """Build usage from possibly-missing counts, deriving the total when absent."""
        inp = int(input_tokens or 0)
        out = int(output_tokens or 0)
        total = int(total_tokens) if total_tokens else inp + out
        return cls(input_tokens=inp, output_tokens=out, total_tokens=total)

    def to_dict(self) -> Dict[str, int]:
        return {"input": self.input_tokens, "output": self.output_tokens, "total": self.total_tokens}


@dataclass
class Result:
    """Normalized chat result.

    Attributes:
        text: Aggregated assistant text.
        parts: Normalized structured output (text parts today).
        model: Model that produced the answer, as reported by the vendor.
        tool_calls: Calls requested by the model.
        usage: Token usage.
        raw: Untouched vendor payload for diagnostics.
        warnings: Best-effort degradations (e.g. ``"tool calls emulated"``).
        provider: Provider name that served the call.
    """

    text: str = ""
    parts: List[Part] = field(default_factory=list)
    model: str = ""
    tool_calls: List[ToolCall] = field(default_factory=list)
    usage: Usage = field(default_factory=Usage)
    raw: Any = None
    warnings: List[str] = field(default_factory=list)
    provider: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable view (``raw`` is omitted)."""
        return {
            "provider": self.provider,
            "model": self.model,
            "text": self.text,
            "parts": [p.to_dict() for p in self.parts],
            "tool_calls": [tc.to_dict() for tc in self.tool_calls],
            "usage": self.usage.to_dict(),
            "warnings": list(self.warnings),
        }


__all__ = ["Result", "Usage", "WARNING_TOOL_CALLS_EMULATED"]
