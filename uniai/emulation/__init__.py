"""Tool-calling emulation: decision prompt, tolerant parser, policy and engine."""

from .engine import ToolEmulationEngine, synthesize_tool_calls
from .parser import DecisionCall, parse_decision
from .policy import enforce_tool_choice, ensure_known_tools
from .prompt import build_decision_prompt, build_decision_request, build_final_request

__all__ = [
    "ToolEmulationEngine",
    "synthesize_tool_calls",
    "DecisionCall",
    "parse_decision",
    "enforce_tool_choice",
    "ensure_known_tools",
    "build_decision_prompt",
    "build_decision_request",
    "build_final_request",
]
