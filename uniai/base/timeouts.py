"""Timeout configuration for adapter HTTP transport.

``get_timeout_config()`` parses environment overrides once and caches the
result; explicit values passed through ``ClientConfig`` take precedence.

Supported environment variables (all optional):
    UNIAI_HTTP_TIMEOUT           total per-request timeout in seconds (default 120)
    UNIAI_CONNECT_TIMEOUT        connect timeout in seconds (default 10)
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

import httpx

DEFAULT_HTTP_TIMEOUT_SECONDS = 120.0
DEFAULT_CONNECT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class TimeoutConfig:
    """Normalized timeout values (seconds).

    Attributes:
        http_timeout_seconds: Read/write/pool budget for one HTTP exchange.
            Streaming reads use it as the idle timeout between chunks.
        connect_timeout_seconds: Budget for establishing the connection.
    """

    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    connect_timeout_seconds: float = DEFAULT_CONNECT_TIMEOUT_SECONDS

    def to_httpx(self) -> httpx.Timeout:
        return httpx.Timeout(self.http_timeout_seconds, connect=self.connect_timeout_seconds)


_CACHED: Optional[TimeoutConfig] = None


def _parse_positive(value: Optional[str], default: float) -> float:
    if not value:
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def get_timeout_config(*, refresh: bool = False) -> TimeoutConfig:
    """Return the process-wide timeout defaults (environment parsed once)."""
    global _CACHED
    if _CACHED is None or refresh:
        _CACHED = TimeoutConfig(
            http_timeout_seconds=_parse_positive(os.getenv("UNIAI_HTTP_TIMEOUT"), DEFAULT_HTTP_TIMEOUT_SECONDS),
            connect_timeout_seconds=_parse_positive(
                os.getenv("UNIAI_CONNECT_TIMEOUT"), DEFAULT_CONNECT_TIMEOUT_SECONDS
            ),
        )
    return _CACHED


def resolve_timeout(seconds: Optional[float]) -> TimeoutConfig:
    """Merge an explicit total timeout with the cached defaults."""
    base = get_timeout_config()
    if seconds is None or seconds <= 0:
        return base
    return TimeoutConfig(http_timeout_seconds=float(seconds), connect_timeout_seconds=base.connect_timeout_seconds)


__all__ = [
    "TimeoutConfig",
    "get_timeout_config",
    "resolve_timeout",
    "DEFAULT_HTTP_TIMEOUT_SECONDS",
    "DEFAULT_CONNECT_TIMEOUT_SECONDS",
]
