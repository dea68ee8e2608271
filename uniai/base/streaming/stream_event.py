"""Unified stream event emitted to the caller's streaming callback."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..models import Usage


@dataclass
class ToolCallDelta:
    """Incremental tool-call data for the call at ``index``.

    ``id`` and ``name`` usually arrive once (first fragment); ``args_chunk``
    carries the next slice of the JSON arguments string.
    """

    index: int
    id: str = ""
    name: str = ""
    args_chunk: str = ""


@dataclass
class StreamEvent:
    """One streaming event.

    Exactly one of ``delta`` / ``tool_call_delta`` / ``usage`` is meaningful on
    intermediate events. The final event has ``done=True`` and always carries
    the final ``usage``.
    """

    delta: str = ""
    tool_call_delta: Optional[ToolCallDelta] = None
    usage: Optional[Usage] = None
    done: bool = False

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.delta:
            out["delta"] = self.delta
        if self.tool_call_delta is not None:
            d = self.tool_call_delta
            out["tool_call_delta"] = {"index": d.index, "id": d.id, "name": d.name, "args_chunk": d.args_chunk}
        if self.usage is not None:
            out["usage"] = self.usage.to_dict()
        if self.done:
            out["done"] = True
        return out


__all__ = ["StreamEvent", "ToolCallDelta"]
