"""Streaming contract: events, accumulator, metrics and the shared loop."""

from .stream_event import StreamEvent, ToolCallDelta
from .streaming_metrics import StreamMetrics
from .accumulator import StreamAccumulator
from .streaming_adapter import BaseStreamingAdapter, Translator

__all__ = [
    "StreamEvent",
    "ToolCallDelta",
    "StreamMetrics",
    "StreamAccumulator",
    "BaseStreamingAdapter",
    "Translator",
]
