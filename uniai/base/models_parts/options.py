"""
Per-request options: typed sampling knobs, emulation mode, callbacks and the
per-vendor escape-hatch maps.

The escape-hatch maps (``openai``, ``anthropic``, ``gemini``, ``azure``) are
merged into the vendor payload last. They carry fields with no cross-vendor
equivalent and have no compatibility guarantee.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

if TYPE_CHECKING:
    from ..streaming.stream_event import StreamEvent


class EmulationMode(str, Enum):
    """When the tool-calling emulation engine runs."""

    OFF = "off"
    FALLBACK = "fallback"
    FORCE = "force"


StreamCallback = Callable[["StreamEvent"], None]
DebugSink = Callable[[str, str], None]


@dataclass
class Options:
    """Sampling knobs and call-scoped hooks.

    ``on_stream`` is invoked serially for every stream event; raising from it
    stops the stream and fails the call with ``StreamCancelled``.
    ``emulation_mode`` of ``None`` defers to the client default.
    """

    temperature: Optional[float] = None
    top_p: Optional[float] = None
    max_tokens: Optional[int] = None
    stop: List[str] = field(default_factory=list)
    presence_penalty: Optional[float] = None
    frequency_penalty: Optional[float] = None
    user: Optional[str] = None
    emulation_mode: Optional[EmulationMode] = None
    on_stream: Optional[StreamCallback] = None
    debug_sink: Optional[DebugSink] = None
    openai: Dict[str, Any] = field(default_factory=dict)
    anthropic: Dict[str, Any] = field(default_factory=dict)
    gemini: Dict[str, Any] = field(default_factory=dict)
    azure: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Return the serializable subset (callbacks are reported as flags)."""
        out: Dict[str, Any] = {}
        for key in ("temperature", "top_p", "max_tokens", "presence_penalty", "frequency_penalty", "user"):
            val = getattr(self, key)
            if val is not None:
                out[key] = val
        if self.stop:
            out["stop"] = list(self.stop)
        if self.emulation_mode is not None:
            out["emulation_mode"] = self.emulation_mode.value
        if self.on_stream is not None:
            out["stream"] = True
        for vendor in ("openai", "anthropic", "gemini", "azure"):
            extra = getattr(self, vendor)
            if extra:
                out[vendor] = dict(extra)
        return out


__all__ = ["Options", "EmulationMode", "StreamCallback", "DebugSink"]
