"""
Root exception type for the chat abstraction.

Every error raised by the core is a dataclass exception carrying enough
context (provider, model, stage) for the caller to act on it without parsing
message strings.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .error_code import ErrorCode


@dataclass(eq=False)
class UniAIError(Exception):
    """Structured error with a normalized code.

    Attributes:
        message: Human-readable error message suitable for logging.
        provider: Provider key where the error originated (e.g. ``"openai"``).
        model: Optional model name associated with the failure.
        stage: Pipeline stage that failed (``"validate"``, ``"dispatch"``,
            ``"decision"``, ``"stream"``...).
        code: Normalized :class:`ErrorCode` classification.
        raw: Optional underlying object (vendor body, original exception).
    """

    message: str
    provider: Optional[str] = None
    model: Optional[str] = None
    stage: Optional[str] = None
    code: ErrorCode = ErrorCode.UNKNOWN
    raw: Optional[Any] = None

    def __str__(self) -> str:
        """Return a compact string combining provider, model, code, and message."""
        where = f"{self.provider or '-'}:{self.model or '-'}"
        stage = f"[{self.stage}]" if self.stage else ""
        return f"{where} {self.code.value}{stage}: {self.message}"

    def to_dict(self) -> dict:
        """Return a JSON-friendly view used by structured logging."""
        return {
            "error": type(self).__name__,
            "code": self.code.value,
            "message": self.message,
            "provider": self.provider,
            "model": self.model,
            "stage": self.stage,
        }


__all__ = ["UniAIError"]
