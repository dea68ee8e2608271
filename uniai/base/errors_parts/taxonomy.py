"""
Concrete error categories.

Each class fixes its default :class:`ErrorCode`; callers distinguish failures
with ``except`` clauses on the class rather than by inspecting codes.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode
from .uniai_error import UniAIError


@dataclass(eq=False)
class ConfigError(UniAIError):
    """Missing key/model or unknown provider name. Raised before any network call."""

    code: ErrorCode = ErrorCode.CONFIG


@dataclass(eq=False)
class ValidationError(UniAIError):
    """Bad message, part, role or tool shape. Raised before any network call."""

    code: ErrorCode = ErrorCode.VALIDATION


@dataclass(eq=False)
class ProviderError(UniAIError):
    """Non-success HTTP or vendor response.

    ``code`` is refined from the HTTP status (see ``classify_status``) and
    ``raw`` holds the vendor error body when one was available. ``retryable``
    is a hint for callers; nothing in this package retries.
    """

    code: ErrorCode = ErrorCode.PROVIDER
    status_code: Optional[int] = None
    retryable: bool = False


@dataclass(eq=False)
class UnsupportedCapability(UniAIError):
    """Streaming, a role, or a tool-choice mode the selected provider cannot honor."""

    code: ErrorCode = ErrorCode.UNSUPPORTED


@dataclass(eq=False)
class StreamCancelled(UniAIError):
    """The streaming callback raised; ``raw`` holds the callback's exception."""

    code: ErrorCode = ErrorCode.STREAM_CANCELLED


@dataclass(eq=False)
class Cancelled(UniAIError):
    """The caller's cancellation token fired before or during the call."""

    code: ErrorCode = ErrorCode.CANCELLED


@dataclass(eq=False)
class EmulationParseError(UniAIError):
    """The emulation decision text could not be recovered as a decision payload."""

    code: ErrorCode = ErrorCode.EMULATION_PARSE


@dataclass(eq=False)
class EmulationPolicyViolation(UniAIError):
    """The emulation decision violates the request's tool choice."""

    code: ErrorCode = ErrorCode.EMULATION_POLICY


@dataclass(eq=False)
class UnknownToolError(UniAIError):
    """The emulation decision names a tool absent from the request."""

    code: ErrorCode = ErrorCode.UNKNOWN_TOOL
    tool_name: Optional[str] = None


__all__ = [
    "ConfigError",
    "ValidationError",
    "ProviderError",
    "UnsupportedCapability",
    "StreamCancelled",
    "Cancelled",
    "EmulationParseError",
    "EmulationPolicyViolation",
    "UnknownToolError",
]
