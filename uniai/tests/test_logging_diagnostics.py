"""Structured logging and debug-sink reporting.

Covers:
- level parsing and logger naming under the ``uniai`` hierarchy
- ``normalized_log_event`` key set and token coercion
- ``JsonFormatter`` hoisting JSON messages
- ``emit_json`` / ``emit_error`` routing to sinks and the diagnostics logger
"""
from __future__ import annotations

import json
import logging
from typing import List, Tuple

from uniai.base.diagnostics import emit_error, emit_json, emit_text
from uniai.base.errors import ProviderError
from uniai.base.log_support import JsonFormatter, LogContext
from uniai.base.logging import _parse_level, get_logger, normalized_log_event  # type: ignore[attr-defined]
from uniai.base.models import Usage


class _ListHandler(logging.Handler):
    """Capture log records into a list for assertions."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.messages: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.messages.append(record.getMessage())


def _capturing_logger(name: str) -> Tuple[logging.Logger, _ListHandler]:
    logger = get_logger(name)
    handler = _ListHandler()
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    return logger, handler


def test_parse_level_variants():
    assert _parse_level(None) == logging.WARNING  # nosec B101
    assert _parse_level("debug") == logging.DEBUG  # nosec B101
    assert _parse_level("WARN") == logging.WARNING  # nosec B101
    assert _parse_level("unknown", default=logging.ERROR) == logging.ERROR  # nosec B101


def test_loggers_live_under_base():
    assert get_logger("openai").name == "uniai.openai"  # nosec B101
    assert get_logger("uniai.gemini").name == "uniai.gemini"  # nosec B101


def test_normalized_event_has_stable_keys():
    logger, handler = _capturing_logger("tests.logging.keys")
    normalized_log_event(
        logger,
        "chat.end",
        LogContext(provider="p", model="m"),
        phase="finalize",
        emitted=True,
        tokens=Usage.of(3, 4),
        latency_ms=1.5,
    )
    payload = json.loads(handler.messages[-1])
    for key in ("event", "provider", "model", "phase", "attempt", "emitted", "tokens"):
        assert key in payload  # nosec B101
    assert "error_code" not in payload  # nosec B101
    assert payload["attempt"] is None  # nosec B101
    assert payload["tokens"] == {"input": 3, "output": 4, "total": 7}  # nosec B101
    assert payload["latency_ms"] == 1.5  # nosec B101


def test_extra_fields_never_overwrite_normalized_keys():
    logger, handler = _capturing_logger("tests.logging.extra")
    normalized_log_event(logger, "chat.error", None, phase="finalize", error_code="auth", tokens={"a": 1}, emitted=False)
    payload = json.loads(handler.messages[-1])
    assert payload["error_code"] == "auth"  # nosec B101
    assert payload["tokens"] == {"a": 1}  # nosec B101


def test_json_formatter_hoists_message_keys():
    record = logging.LogRecord("uniai.x", logging.INFO, __file__, 1, json.dumps({"event": "e", "phase": "start"}), None, None)
    line = json.loads(JsonFormatter().format(record))
    assert line["event"] == "e"  # nosec B101
    assert line["logger"] == "uniai.x"  # nosec B101
    assert "msg" not in line  # nosec B101
    plain = logging.LogRecord("uniai.x", logging.INFO, __file__, 1, "hello %s", ("there",), None)
    assert json.loads(JsonFormatter().format(plain))["msg"] == "hello there"  # nosec B101


def test_emit_json_prefers_sink():
    seen: List[Tuple[str, str]] = []
    emit_json(True, lambda label, text: seen.append((label, text)), "openai.chat.request", {"model": "m"})
    emit_json(False, None, "ignored", {"x": 1})
    assert seen == [("openai.chat.request", '{"model": "m"}')]  # nosec B101


def test_emit_json_converts_objects():
    seen: List[Tuple[str, str]] = []
    emit_json(False, lambda label, text: seen.append((label, text)), "usage", Usage.of(1, 2))
    assert json.loads(seen[0][1]) == {"input": 1, "output": 2, "total": 3}  # nosec B101


def test_debug_without_sink_logs(monkeypatch):
    logger = get_logger("uniai.diagnostics")
    handler = _ListHandler()
    monkeypatch.setattr(logger, "handlers", [handler])
    monkeypatch.setattr(logger, "propagate", False)
    previous = logger.level
    logger.setLevel(logging.DEBUG)
    try:
        emit_text(True, None, "label", "payload")
    finally:
        logger.setLevel(previous)
    assert handler.messages == ["label: payload"]  # nosec B101


def test_emit_error_reports_raw_body():
    seen: List[Tuple[str, str]] = []
    err = ProviderError(message="HTTP 400: bad", provider="p", raw={"error": {"message": "bad"}})
    emit_error(False, lambda label, text: seen.append((label, text)), "p.chat.error", err)
    assert [label for label, _ in seen] == ["p.chat.error", "p.chat.error.raw"]  # nosec B101
    assert json.loads(seen[1][1]) == {"error": {"message": "bad"}}  # nosec B101


def test_log_context_bind_and_prune():
    ctx = LogContext(provider="p", emulation_mode="force")
    bound = ctx.bind(step="final", skipped=None)
    assert bound.to_dict() == {"provider": "p", "emulation_mode": "force", "step": "final"}  # nosec B101
    assert ctx.extra == {}  # nosec B101
