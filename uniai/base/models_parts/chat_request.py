"""
Request DTO for provider-agnostic chat invocations.

Adapters map this normalized shape onto their wire protocol. A request is
built and validated once (see ``uniai.base.request_builder``) and treated as
immutable afterwards; code that needs a variant works on ``clone()``.
"""
from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from .message import Message
from .options import Options
from .tool import Tool, ToolChoice


@dataclass
class Request:
    """Normalized chat request sent to provider adapters.

    Attributes:
        messages: Ordered, non-empty list of `Message` instances.
        model: Target model identifier; empty means the adapter default.
        provider: Optional per-request provider override.
        options: Sampling knobs, callbacks and escape hatches.
        tools: Function tools offered to the model.
        tool_choice: Optional tool-choice constraint.
    """

    messages: List[Message] = field(default_factory=list)
    model: str = ""
    provider: str = ""
    options: Options = field(default_factory=Options)
    tools: List[Tool] = field(default_factory=list)
    tool_choice: Optional[ToolChoice] = None

    def clone(self) -> "Request":
        """Return a deep copy that shares only the callbacks.

        Messages, tools and escape-hatch maps are copied so the clone can be
        edited without touching the original request.
        """
        on_stream = self.options.on_stream
        debug_sink = self.options.debug_sink
        bare = replace(self, options=replace(self.options, on_stream=None, debug_sink=None))
        out = copy.deepcopy(bare)
        out.options.on_stream = on_stream
        out.options.debug_sink = debug_sink
        return out

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dictionary representation of the request."""
        out: Dict[str, Any] = {
            "messages": [m.to_dict() for m in self.messages],
            "options": self.options.to_dict(),
        }
        if self.model:
            out["model"] = self.model
        if self.provider:
            out["provider"] = self.provider
        if self.tools:
            out["tools"] = [t.to_dict() for t in self.tools]
        if self.tool_choice is not None:
            out["tool_choice"] = self.tool_choice.to_dict()
        return out


__all__ = ["Request"]
