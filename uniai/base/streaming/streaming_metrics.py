"""Streaming metrics collected for one adapter invocation."""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class StreamMetrics:
    """Counters reported with the ``stream.end`` / ``stream.error`` events.

    Attributes:
        emitted: Number of events delivered to the callback.
        time_to_first_delta_ms: Delay between stream start and first event.
        total_duration_ms: Wall time once the stream finished.
        tokens: Final usage mapping (``input``/``output``/``total``).
    """

    started_at: float = field(default_factory=time.perf_counter)
    emitted: int = 0
    time_to_first_delta_ms: Optional[float] = None
    total_duration_ms: Optional[float] = None
    tokens: Optional[Dict[str, Any]] = None

    def record_emit(self) -> None:
        self.emitted += 1
        if self.time_to_first_delta_ms is None:
            self.time_to_first_delta_ms = (time.perf_counter() - self.started_at) * 1000.0

    def close(self) -> None:
        self.total_duration_ms = (time.perf_counter() - self.started_at) * 1000.0


__all__ = ["StreamMetrics"]
