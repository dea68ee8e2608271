"""
Tolerant parsing of emulation decision text.

Models asked for "JSON only" still wrap their answer in code fences, prose or
an extra layer of string quoting, and sometimes leave a trailing comma or an
unclosed brace. ``parse_decision`` therefore collects several candidate
snippets and takes the first one that decodes (after light repair) into a
decision payload.

Accepted payloads::

    {"tools": [{"tool": "<name>", "arguments": {...}}, ...]}
    {"tool": "<name>" | null, "arguments": {...}}

An empty ``tools`` array, or a null/empty ``tool``, means "no tool calls".

The extraction is heuristic and can pick up a JSON-looking fragment from free
text. When nothing recoverable is found it fails with ``EmulationParseError``
rather than guessing further.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ..base.errors import EmulationParseError

# A line outside any open JSON value is kept only when a brace or bracket
# starts within this many characters.
_BRACE_WINDOW = 20

_TRAILING_COMMA = re.compile(r",\s*([}\]])")
_CLOSERS = {"{": "}", "[": "]"}


@dataclass
class DecisionCall:
    """One call named by the decision; ``arguments`` is a JSON string."""

    name: str
    arguments: str = "{}"

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "arguments": self.arguments}


def _parse_error(message: str) -> EmulationParseError:
    return EmulationParseError(message=message, stage="decision")


def _is_valid(text: str) -> bool:
    try:
        json.loads(text)
    except ValueError:
        return False
    return True


# ----- candidate extraction -----


def _scan_depth(line: str, depth: int, in_string: bool, escape: bool) -> Tuple[int, bool, bool]:
    for ch in line:
        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in "{[":
            depth += 1
        elif ch in "}]" and depth > 0:
            depth -= 1
    return depth, in_string, escape


def strip_non_json_lines(text: str) -> str:
    """Drop prose lines that sit outside any JSON value."""
    out: List[str] = []
    depth, in_string, escape = 0, False, False
    for line in text.split("\n"):
        head = line.lstrip()
        if depth > 0 or head.startswith(("{", "[")) or any(c in head[:_BRACE_WINDOW] for c in "{["):
            out.append(line)
        depth, in_string, escape = _scan_depth(line, depth, in_string, escape)
    return "\n".join(out)


def _balanced_at(text: str, start: int) -> Optional[str]:
    """Return the balanced, valid JSON value opening at ``start``, if any."""
    stack: List[str] = []
    in_string = escape = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in _CLOSERS:
            stack.append(ch)
        elif ch in "}]":
            if not stack or _CLOSERS[stack[-1]] != ch:
                return None
            stack.pop()
            if not stack:
                snippet = text[start : i + 1]
                return snippet if _is_valid(snippet) else None
    return None


def find_json_snippets(text: str) -> List[str]:
    """Return every top-level balanced JSON object or array embedded in ``text``."""
    snippets: List[str] = []
    i = 0
    while i < len(text):
        if text[i] in _CLOSERS:
            snippet = _balanced_at(text, i)
            if snippet is not None:
                snippets.append(snippet)
                i += len(snippet)
                continue
        i += 1
    return snippets


def unquote_json(text: str) -> str:
    """Decode ``text`` when it is itself a JSON string literal, else ``""``."""
    trimmed = text.strip()
    if not trimmed.startswith('"'):
        return ""
    try:
        value = json.loads(trimmed)
    except ValueError:
        return ""
    return value.strip() if isinstance(value, str) else ""


def _fenced_blocks(text: str) -> List[str]:
    blocks: List[str] = []
    for block in text.split("```")[1::2]:
        block = block.strip()
        if block.startswith("json"):
            block = block[4:].strip()
        if block:
            blocks.append(block)
    return blocks


def collect_candidates(text: str) -> List[str]:
    """Return candidate JSON snippets in priority order.

    Order: the whole text, fenced blocks, embedded balanced snippets, the
    unquoted text and its snippets, then the span from the first ``{`` to the
    last ``}``.

    Raises:
        EmulationParseError: ``text`` is blank.
    """
    trimmed = text.strip()
    if not trimmed:
        raise _parse_error("empty tool decision")
    candidates = [trimmed]
    if "```" in trimmed:
        candidates.extend(_fenced_blocks(trimmed))
    candidates.extend(find_json_snippets(trimmed))
    unquoted = unquote_json(trimmed)
    if unquoted:
        candidates.append(unquoted)
        candidates.extend(find_json_snippets(unquoted))
    first, last = trimmed.find("{"), trimmed.rfind("}")
    if 0 <= first < last:
        candidates.append(trimmed[first : last + 1])
    return candidates


def repair_json(text: str) -> str:
    """Best-effort fix of nearly-JSON text; ``""`` when there is nothing to fix.

    Removes trailing commas, closes a dangling string and appends missing
    closing braces and brackets.
    """
    trimmed = text.strip()
    if not trimmed or not any(c in trimmed for c in "{["):
        return ""
    repaired = _TRAILING_COMMA.sub(r"\1", trimmed)
    in_string = escaped = False
    for ch in repaired:
        if escaped:
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == '"':
            in_string = not in_string
    if in_string:
        repaired += '"'
    repaired += "}" * max(0, repaired.count("{") - repaired.count("}"))
    repaired += "]" * max(0, repaired.count("[") - repaired.count("]"))
    return repaired


# ----- payload decoding -----


def _arguments_json(raw: Any) -> str:
    if raw is None:
        return "{}"
    if isinstance(raw, str):
        # Stringified arguments: the string itself must hold JSON.
        try:
            raw = json.loads(raw) if raw.strip() else {}
        except ValueError as exc:
            raise _parse_error("tool arguments must be valid JSON") from exc
    return json.dumps(raw, ensure_ascii=False, separators=(",", ":"))


def _single_call(tool: Any, arguments: Any) -> Optional[DecisionCall]:
    if tool is None:
        return None
    if not isinstance(tool, str):
        raise _parse_error("tool must be string or null")
    name = tool.strip()
    if not name:
        return None
    return DecisionCall(name=name, arguments=_arguments_json(arguments))


def _tools_array(raw: Any) -> List[DecisionCall]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise _parse_error("tools must be an array")
    calls: List[DecisionCall] = []
    for item in raw:
        if not isinstance(item, dict):
            raise _parse_error("tools must be an array of objects")
        call = _single_call(item.get("tool"), item.get("arguments"))
        if call is not None:
            calls.append(call)
    return calls


def decode_payload(payload: Any) -> Optional[List[DecisionCall]]:
    """Decode one parsed JSON value.

    Returns ``None`` when the value carries neither ``tools`` nor ``tool``,
    otherwise the (possibly empty) list of calls.

    Raises:
        EmulationParseError: The value is a decision but malformed.
    """
    if not isinstance(payload, dict):
        return None
    if "tools" in payload:
        return _tools_array(payload["tools"])
    if "tool" in payload:
        call = _single_call(payload["tool"], payload.get("arguments"))
        return [call] if call is not None else []
    return None


def parse_decision(text: str) -> List[DecisionCall]:
    """Extract the tool calls named by a decision reply.

    Candidates from the prose-stripped text come first, then those from the
    text as given, so an object behind a long preamble on the same line is
    still found. A JSON value that is not a decision is remembered; when no
    candidate carries a decision but one such value was seen, the result is
    "no calls".

    Raises:
        EmulationParseError: The text is blank, no candidate decodes to JSON,
            or the first decision found is malformed.
    """
    if not text.strip():
        raise _parse_error("empty tool decision")
    stripped = strip_non_json_lines(text)
    candidates = collect_candidates(stripped) if stripped.strip() else []
    if stripped.strip() != text.strip():
        candidates.extend(collect_candidates(text))
    seen_json = False
    for candidate in candidates:
        payload_text = candidate.strip()
        if not payload_text:
            continue
        payload_text = unquote_json(payload_text) or payload_text
        try:
            payload = json.loads(payload_text)
        except ValueError:
            repaired = repair_json(payload_text)
            if not repaired:
                continue
            try:
                payload = json.loads(repaired)
            except ValueError:
                continue
        seen_json = True
        calls = decode_payload(payload)
        if calls is not None:
            return calls
    if seen_json:
        return []
    raise _parse_error(f"invalid tool decision JSON: {text.strip()!r}")


__all__ = [
    "DecisionCall",
    "collect_candidates",
    "decode_payload",
    "find_json_snippets",
    "parse_decision",
    "repair_json",
    "strip_non_json_lines",
    "unquote_json",
]
