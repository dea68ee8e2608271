"""Anthropic SSE event translator.

Events handled (everything else is ignored):

``message_start``
    Model name and input token count.
``content_block_start``
    A ``tool_use`` block opens a tool call at the block ``index`` (id and
    name arrive here).
``content_block_delta``
    ``text_delta`` feeds text; ``input_json_delta`` feeds argument chunks for
    the block at ``index``.
``message_delta``
    Output token count.
"""

from __future__ import annotations

from typing import Any

from ..base.streaming import StreamAccumulator


def translate_event(event: Any, acc: StreamAccumulator) -> None:
    """Feed one SDK stream event into ``acc``."""
    kind = getattr(event, "type", "")
    if kind == "message_start":
        message = getattr(event, "message", None)
        acc.set_model(getattr(message, "model", None))
        usage = getattr(message, "usage", None)
        if usage is not None:
            acc.set_usage(input_tokens=getattr(usage, "input_tokens", None))
    elif kind == "content_block_start":
        block = getattr(event, "content_block", None)
        if getattr(block, "type", "") == "tool_use":
            acc.add_tool_call_delta(
                int(getattr(event, "index", 0) or 0),
                id=getattr(block, "id", None),
                name=getattr(block, "name", None),
            )
    elif kind == "content_block_delta":
        delta = getattr(event, "delta", None)
        delta_type = getattr(delta, "type", "")
        if delta_type == "text_delta":
            acc.add_text(getattr(delta, "text", None))
        elif delta_type == "input_json_delta":
            acc.add_tool_call_delta(
                int(getattr(event, "index", 0) or 0),
                args_chunk=getattr(delta, "partial_json", None),
            )
    elif kind == "message_delta":
        usage = getattr(event, "usage", None)
        if usage is not None:
            acc.set_usage(output_tokens=getattr(usage, "output_tokens", None))


__all__ = ["translate_event"]
