"""Tool-choice and tool-name checks applied to a parsed emulation decision."""
from __future__ import annotations

from typing import Optional, Sequence

from ..base.errors import EmulationPolicyViolation, UnknownToolError
from ..base.models import Tool, ToolChoice
from .parser import DecisionCall


def _violation(message: str) -> EmulationPolicyViolation:
    return EmulationPolicyViolation(message=message, stage="policy")


def enforce_tool_choice(choice: Optional[ToolChoice], calls: Sequence[DecisionCall]) -> None:
    """Check ``calls`` against the request's tool choice.

    ``none`` forbids any call, ``required`` needs at least one and
    ``function(name)`` needs exactly one call to ``name``. ``auto`` and an
    unset choice accept anything.

    Raises:
        EmulationPolicyViolation: The decision breaks the constraint.
    """
    if choice is None:
        return
    if choice.mode == "none" and calls:
        raise _violation("tool_choice none forbids tool calls")
    if choice.mode == "required" and not calls:
        raise _violation("tool_choice required expects at least one tool call")
    if choice.mode == "function":
        name = (choice.function_name or "").strip()
        if not name:
            raise _violation("tool_choice function_name is required")
        if len(calls) != 1:
            raise _violation(f"tool_choice function expects exactly one tool call, got {len(calls)}")
        if calls[0].name != name:
            raise _violation(f"tool_choice function expects {name!r}, got {calls[0].name!r}")


def ensure_known_tools(tools: Sequence[Tool], calls: Sequence[DecisionCall]) -> None:
    """Raise :class:`UnknownToolError` for the first call naming no offered function tool."""
    known = {t.name for t in tools if t.type == "function"}
    for call in calls:
        if call.name not in known:
            raise UnknownToolError(
                message=f"emulated decision names unknown tool {call.name!r}",
                stage="policy",
                tool_name=call.name,
            )


__all__ = ["enforce_tool_choice", "ensure_known_tools"]
