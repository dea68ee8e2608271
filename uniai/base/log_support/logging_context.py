"""Correlation fields shared by every log event of one chat call."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class LogContext:
    """Who is being called and how.

    ``emulation_mode`` is set only on events logged by the emulation engine
    and the public client. ``extra`` keys are flattened into the event;
    ``None`` values are dropped.
    """

    provider: Optional[str] = None
    model: Optional[str] = None
    emulation_mode: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def bind(self, **fields: Any) -> "LogContext":
        """Return a copy with ``fields`` merged into ``extra``."""
        return replace(self, extra={**self.extra, **fields})

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"provider": self.provider, "model": self.model, "emulation_mode": self.emulation_mode}
        out.update(self.extra)
        return {k: v for k, v in out.items() if v is not None}


__all__ = ["LogContext"]
