"""
Normalized error codes for the chat abstraction.

The first group names the taxonomy categories raised by the core (one per
exception class). The second group refines :class:`ProviderError` with the
HTTP/transport failure kind. Values are lowercase snake_case and are a stable
contract for logging and analytics.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Enumerated normalized error codes representing failure categories."""

    CONFIG = "config"
    VALIDATION = "validation"
    PROVIDER = "provider"
    UNSUPPORTED = "unsupported"
    STREAM_CANCELLED = "stream_cancelled"
    CANCELLED = "cancelled"
    EMULATION_PARSE = "emulation_parse"
    EMULATION_POLICY = "emulation_policy"
    UNKNOWN_TOOL = "unknown_tool"

    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    TIMEOUT = "timeout"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    SERVER_ERROR = "server_error"
    UNAVAILABLE = "unavailable"
    TRANSIENT = "transient"
    UNKNOWN = "unknown"


__all__ = ["ErrorCode"]
