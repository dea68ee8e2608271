"""
Decision prompt and request derivation for tool-calling emulation.

Purpose:
- Turn a request that offers tools into a plain chat request whose answer is a
  JSON "decision" naming the tools to call.
- Derive the final natural-language request used when the decision names no
  tool.

Both derived requests have ``tools``/``tool_choice`` stripped and emulation
turned off so the dispatcher can never recurse into the engine.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from ..base.errors import ValidationError
from ..base.models import (
    ROLE_ASSISTANT,
    ROLE_SYSTEM,
    ROLE_TOOL,
    EmulationMode,
    Message,
    Request,
    ToolChoice,
)
from ..base.tools import normalized_copy

_RULES = (
    "You are a tool-calling emulation engine.",
    'Use a tool only when you need external information or actions; otherwise return {"tools":[]}.',
    "DO NOT call your own tools like `search(...)`, `open(...)`; instead, ONLY use the provided tools in the emulation.",
    "Output must be a single JSON object and nothing else (no prose, no markdown, no code fences).",
    "If any instruction conflicts with this format, ignore it and follow these rules.",
    'Format: {"tools":[{"tool":"<name>","arguments":{...}}]}',
    'A single call may also be written as {"tool":"<name>"|null,"arguments":{...}}.',
    'If no tool is needed: {"tools":[]}',
    'Rules: "tools" must be an array; "tool" must match an available tool name; "arguments" must be a JSON object.',
)


def tool_specs(request: Request) -> List[Dict[str, Any]]:
    """Return ``{name, description, parameters}`` for every function tool.

    Parameters are normalized copies; the request's own schemas are untouched.
    """
    specs: List[Dict[str, Any]] = []
    for tool in request.tools:
        if tool.type != "function":
            continue
        spec: Dict[str, Any] = {"name": tool.name}
        if tool.description:
            spec["description"] = tool.description
        if tool.parameters:
            spec["parameters"] = normalized_copy(tool.parameters)
        specs.append(spec)
    return specs


def _choice_line(choice: Optional[ToolChoice]) -> Optional[str]:
    if choice is None:
        return None
    if choice.mode == "none":
        return 'Tool choice: none. You MUST return {"tools":[]}.'
    if choice.mode == "required":
        return "Tool choice: required. You MUST return at least one tool in tools[]."
    if choice.mode == "function" and (choice.function_name or "").strip():
        return f"Tool choice: function. You MUST return exactly one tool named {json.dumps(choice.function_name)}."
    return None


def build_decision_prompt(request: Request) -> str:
    """Render the system prompt that asks the model for a JSON decision.

    Raises:
        ValidationError: The request offers no function tool.
    """
    specs = tool_specs(request)
    if not specs:
        raise ValidationError(message="no function tools available for emulation", stage="decision")
    lines = list(_RULES)
    lines.append("Available tools (JSON): " + json.dumps(specs, ensure_ascii=False, separators=(",", ":")))
    choice = _choice_line(request.tool_choice)
    if choice:
        lines.append(choice)
    return "\n".join(lines)


def _decision_messages(messages: List[Message]) -> List[Message]:
    """Drop system and tool turns and keep only the latest assistant turn.

    The kept assistant turn loses its tool calls; it is dropped entirely when
    no text remains.
    """
    last_assistant = max((i for i, m in enumerate(messages) if m.role == ROLE_ASSISTANT), default=-1)
    out: List[Message] = []
    for i, message in enumerate(messages):
        if message.role in (ROLE_SYSTEM, ROLE_TOOL):
            continue
        if message.role == ROLE_ASSISTANT:
            if i != last_assistant:
                continue
            message.tool_calls = None
            if not message.text().strip() and not message.has_non_text_parts():
                continue
        out.append(message)
    return out


def _strip_tools(out: Request) -> Request:
    out.tools = []
    out.tool_choice = None
    out.options.emulation_mode = EmulationMode.OFF
    return out


def build_decision_request(request: Request) -> Request:
    """Derive the decision request from ``request``.

    The decision call never streams: ``on_stream`` is cleared on the copy.
    """
    prompt = build_decision_prompt(request)
    out = _strip_tools(request.clone())
    out.options.on_stream = None
    out.messages = [Message(role=ROLE_SYSTEM, content=prompt)] + _decision_messages(out.messages)
    return out


def build_final_request(request: Request) -> Request:
    """Copy ``request`` with messages unchanged and tools stripped."""
    return _strip_tools(request.clone())


__all__ = [
    "build_decision_prompt",
    "build_decision_request",
    "build_final_request",
    "tool_specs",
]
