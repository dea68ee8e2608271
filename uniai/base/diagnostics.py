"""Debug sink helpers.

A debug sink is a ``(label, payload)`` callback supplied per request
(``Options.debug_sink``). Adapters and the emulation engine report payloads at
well-known labels such as ``"openai.chat.request"`` and
``"tool_emulation.decision_response"``. When no sink is set but the client was
built with ``debug=True``, payloads go to the ``uniai.diagnostics`` logger at
DEBUG level instead. Sink return values are ignored.
"""
from __future__ import annotations

import json
import logging
from dataclasses import asdict, is_dataclass
from typing import Any, Optional

from .logging import get_logger
from .models import DebugSink

_logger = get_logger("uniai.diagnostics")


def _to_jsonable(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    model_dump = getattr(value, "model_dump", None)
    if callable(model_dump):
        return model_dump()
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    return value


def emit_text(debug: bool, sink: Optional[DebugSink], label: str, text: str) -> None:
    """Forward ``text`` to ``sink``, or log it when only ``debug`` is set."""
    if sink is not None:
        sink(label, text)
        return
    if debug:
        _logger.log(logging.DEBUG, "%s: %s", label, text)


def emit_json(debug: bool, sink: Optional[DebugSink], label: str, value: Any) -> None:
    """Serialize ``value`` to JSON and forward it like :func:`emit_text`.

    Objects exposing ``to_dict``/``model_dump`` and dataclasses are converted
    first; anything else falls back to ``str``.
    """
    if sink is None and not debug:
        return
    try:
        text = json.dumps(_to_jsonable(value), ensure_ascii=False, default=str)
    except (TypeError, ValueError) as exc:
        text = f"<marshal error: {exc}>"
    emit_text(debug, sink, label, text)


def emit_error(debug: bool, sink: Optional[DebugSink], label: str, error: BaseException) -> None:
    """Report an error; vendor bodies carried as ``raw`` follow under ``<label>.raw``."""
    emit_text(debug, sink, label, str(error))
    raw = getattr(error, "raw", None)
    if raw is None or isinstance(raw, BaseException):
        return
    emit_json(debug, sink, f"{label}.raw", raw)


__all__ = ["emit_text", "emit_json", "emit_error"]
