"""Structured logging for the chat abstraction.

All loggers are children of the base ``uniai`` logger, which writes one JSON
object per line to stderr. The level comes from ``UNIAI_LOG_LEVEL`` (default
``WARNING``) so the library stays quiet unless asked.

``normalized_log_event`` guarantees a stable key set across adapters:
``phase``, ``attempt``, ``error_code``, ``emitted`` and ``tokens``. Adapters,
the streaming loop and the emulation engine all log through it.
"""
from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any, Dict, Mapping, Optional

from .log_support import JsonFormatter, LogContext

BASE_LOGGER = "uniai"
LOG_LEVEL_ENV = "UNIAI_LOG_LEVEL"

_HANDLER_ATTR = "_uniai_console_handler"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _parse_level(value: Optional[str], default: int = logging.WARNING) -> int:
    """Parse a level name case-insensitively, falling back to ``default``."""
    if not value:
        return default
    return _LEVELS.get(value.strip().upper(), default)


def _ensure_base_logger() -> logging.Logger:
    logger = logging.getLogger(BASE_LOGGER)
    level = _parse_level(os.getenv(LOG_LEVEL_ENV))
    logger.setLevel(level)
    if not any(getattr(h, _HANDLER_ATTR, False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JsonFormatter())
        setattr(handler, _HANDLER_ATTR, True)
        logger.addHandler(handler)
    return logger


def get_logger(name: str = BASE_LOGGER) -> logging.Logger:
    """Return ``name`` under the configured ``uniai`` hierarchy.

    Names outside the hierarchy are prefixed (``"openai"`` becomes
    ``"uniai.openai"``). Child loggers carry no handlers of their own and
    propagate to the base logger.
    """
    base = _ensure_base_logger()
    if name == BASE_LOGGER:
        return base
    if not name.startswith(BASE_LOGGER + "."):
        name = f"{BASE_LOGGER}.{name}"
    return logging.getLogger(name)


def log_event(
    logger: logging.Logger,
    event: str,
    ctx: Optional[LogContext] = None,
    *,
    level: int = logging.INFO,
    keep_none: bool = False,
    **fields: Any,
) -> None:
    """Emit a single-line JSON event.

    Parameters
    ----------
    logger: logging.Logger
        Logger from ``get_logger``.
    event: str
        Event name (e.g. ``chat.start``).
    ctx: LogContext | None
        Correlation context merged shallowly.
    level: int
        Logging level for the record.
    keep_none: bool
        Preserve keys whose values are ``None``.
    **fields: Any
        Arbitrary serializable key/value pairs.
    """
    if not logger.isEnabledFor(level):
        return
    payload: Dict[str, Any] = {"event": event}
    if ctx:
        payload |= ctx.to_dict()
    if keep_none:
        payload.update(fields)
    else:
        payload.update({k: v for k, v in fields.items() if v is not None})
    logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))


def _coerce_tokens(tokens: Any) -> Any:
    if tokens is None:
        return None
    if isinstance(tokens, Mapping):
        return dict(tokens.items())
    to_dict = getattr(tokens, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return {"value": repr(tokens)}


def normalized_log_event(
    logger: logging.Logger,
    event: str,
    ctx: Optional[LogContext] = None,
    *,
    phase: str,
    attempt: Optional[int] = None,
    error_code: Optional[str] = None,
    emitted: Optional[bool] = None,
    tokens: Any = None,
    level: int = logging.INFO,
    **extra_fields: Any,
) -> None:
    """Emit an event carrying the normalized key set.

    ``error_code`` is omitted when ``None``; the other normalized keys are
    always present (possibly ``null``). ``extra_fields`` never overwrite a
    normalized value.
    """
    base_fields: Dict[str, Any] = {
        "phase": phase,
        "attempt": attempt,
        "emitted": emitted,
        "tokens": _coerce_tokens(tokens),
    }
    if error_code is not None:
        base_fields["error_code"] = error_code
    for k, v in extra_fields.items():
        if v is None or k in base_fields:
            continue
        base_fields[k] = v
    log_event(logger, event, ctx, level=level, keep_none=True, **base_fields)


__all__ = [
    "LogContext",
    "get_logger",
    "log_event",
    "normalized_log_event",
    "BASE_LOGGER",
    "LOG_LEVEL_ENV",
]
