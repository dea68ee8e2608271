"""Streaming accumulator: vendor chunks in, unified events and one Result out.

Adapters translate each vendor chunk into calls on :class:`StreamAccumulator`
(``add_text``, ``add_tool_call_delta``, ``set_usage``...). Each call forwards
the matching :class:`StreamEvent` to the caller's callback synchronously, in
arrival order. ``finish`` emits the single ``done`` event with final usage and
builds the :class:`Result`.

If the callback raises, the accumulator stops and raises
:class:`StreamCancelled` (the callback's exception is chained and kept as
``raw``). No further events are emitted and no Result is produced.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..errors import StreamCancelled
from ..models import PART_TEXT, Part, Result, StreamCallback, ToolCall, ToolCallFunction, Usage
from .stream_event import StreamEvent, ToolCallDelta
from .streaming_metrics import StreamMetrics


@dataclass
class _PendingCall:
    id: str = ""
    name: str = ""
    arguments: str = ""
    thought_signature: str = ""


class StreamAccumulator:
    """Accumulates text and per-index tool calls while emitting events."""

    def __init__(
        self,
        callback: Optional[StreamCallback],
        *,
        provider: str,
        model: str,
        metrics: Optional[StreamMetrics] = None,
    ) -> None:
        self._callback = callback
        self.provider = provider
        self.model = model
        self.metrics = metrics or StreamMetrics()
        self._text: List[str] = []
        self._calls: Dict[int, _PendingCall] = {}
        self._usage = Usage()
        self._raw_chunks: List[Any] = []
        self._stopped = False
        self._finished = False

    # -- event emission -------------------------------------------------

    def _emit(self, event: StreamEvent) -> None:
        if self._stopped:
            raise StreamCancelled(
                message="stream already aborted by callback",
                provider=self.provider,
                model=self.model,
                stage="stream",
            )
        if self._callback is None:
            return
        try:
            self._callback(event)
        except StreamCancelled:
            self._stopped = True
            raise
        except Exception as exc:
            self._stopped = True
            raise StreamCancelled(
                message=f"stream callback aborted: {exc}",
                provider=self.provider,
                model=self.model,
                stage="stream",
                raw=exc,
            ) from exc
        self.metrics.record_emit()

    # -- chunk intake ---------------------------------------------------

    def add_raw(self, chunk: Any) -> None:
        """Keep a vendor chunk for ``Result.raw`` (diagnostics only)."""
        self._raw_chunks.append(chunk)

    def set_model(self, model: Optional[str]) -> None:
        if model:
            self.model = model

    def add_text(self, delta: Optional[str]) -> None:
        if not delta:
            return
        self._text.append(delta)
        self._emit(StreamEvent(delta=delta))

    def add_tool_call_delta(
        self,
        index: int,
        *,
        id: Optional[str] = None,
        name: Optional[str] = None,
        args_chunk: Optional[str] = None,
        thought_signature: Optional[str] = None,
    ) -> None:
        """Merge one tool-call fragment into the call at ``index`` and emit it.

        The first non-empty ``id``/``name`` wins; argument chunks concatenate.
        """
        pending = self._calls.setdefault(index, _PendingCall())
        if id and not pending.id:
            pending.id = id
        if name and not pending.name:
            pending.name = name
        if args_chunk:
            pending.arguments += args_chunk
        if thought_signature and not pending.thought_signature:
            pending.thought_signature = thought_signature
        if not (id or name or args_chunk):
            return
        self._emit(
            StreamEvent(
                tool_call_delta=ToolCallDelta(
                    index=index, id=id or "", name=name or "", args_chunk=args_chunk or ""
                )
            )
        )

    def set_usage(
        self,
        *,
        input_tokens: Optional[int] = None,
        output_tokens: Optional[int] = None,
        total_tokens: Optional[int] = None,
    ) -> None:
        """Record usage; missing values keep what earlier chunks reported."""
        inp = input_tokens if input_tokens is not None else self._usage.input_tokens
        out = output_tokens if output_tokens is not None else self._usage.output_tokens
        self._usage = Usage.of(inp, out, total_tokens)

    # -- results ----------------------------------------------------------

    @property
    def text(self) -> str:
        return "".join(self._text)

    def tool_calls(self) -> List[ToolCall]:
        calls: List[ToolCall] = []
        for index in sorted(self._calls):
            pending = self._calls[index]
            calls.append(
                ToolCall(
                    id=pending.id,
                    function=ToolCallFunction(name=pending.name, arguments=pending.arguments or "{}"),
                    thought_signature=pending.thought_signature or None,
                )
            )
        return calls

    def finish(self) -> Result:
        """Emit the ``done`` event with final usage and return the Result."""
        if self._finished:
            raise RuntimeError("stream accumulator already finished")
        self._emit(StreamEvent(usage=self._usage, done=True))
        self._finished = True
        self.metrics.close()
        self.metrics.tokens = self._usage.to_dict()
        text = self.text
        return Result(
            text=text,
            parts=[Part(type=PART_TEXT, text=text)] if text else [],
            model=self.model,
            tool_calls=self.tool_calls(),
            usage=self._usage,
            raw=list(self._raw_chunks),
            provider=self.provider,
        )


__all__ = ["StreamAccumulator"]
