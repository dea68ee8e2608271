"""Stream chunk translator for OpenAI-compatible Chat Completions.

Each ``ChatCompletionChunk`` is mapped onto the accumulator in this order:
model, text delta, one tool-call delta per ``delta.tool_calls`` entry (keyed
by the vendor ``index``), then usage. With ``stream_options.include_usage``
the final chunk carries usage and no choices.
"""

from __future__ import annotations

from typing import Any

from ..base.streaming import StreamAccumulator
from .conversion import extract_thought_signature


def translate_chunk(chunk: Any, acc: StreamAccumulator) -> None:
    """Feed one SDK chunk into ``acc``."""
    acc.set_model(getattr(chunk, "model", None))
    choices = getattr(chunk, "choices", None) or []
    if choices:
        delta = getattr(choices[0], "delta", None)
        if delta is not None:
            acc.add_text(getattr(delta, "content", None))
            for tc in getattr(delta, "tool_calls", None) or []:
                fn = getattr(tc, "function", None)
                acc.add_tool_call_delta(
                    int(getattr(tc, "index", 0) or 0),
                    id=getattr(tc, "id", None),
                    name=getattr(fn, "name", None),
                    args_chunk=getattr(fn, "arguments", None),
                    thought_signature=extract_thought_signature(tc),
                )
    usage = getattr(chunk, "usage", None)
    if usage is not None:
        acc.set_usage(
            input_tokens=getattr(usage, "prompt_tokens", None),
            output_tokens=getattr(usage, "completion_tokens", None),
            total_tokens=getattr(usage, "total_tokens", None),
        )


__all__ = ["translate_chunk"]
