"""
Tool definitions and tool-choice variants.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional


ToolChoiceMode = Literal["auto", "none", "required", "function"]

TOOL_CHOICE_MODES = ("auto", "none", "required", "function")


@dataclass
class Tool:
    """A function tool offered to the model.

    Attributes:
        name: Function name the model uses to call the tool.
        description: Natural language description shown to the model.
        parameters: Raw JSON Schema (a mapping) for the arguments object.
        strict: Optional strict-schema flag for vendors that support it.
        type: Always ``"function"``.
    """

    name: str
    description: str = ""
    parameters: Optional[Dict[str, Any]] = None
    strict: Optional[bool] = None
    type: str = "function"

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": self.type, "name": self.name}
        if self.description:
            out["description"] = self.description
        if self.parameters is not None:
            out["parameters"] = self.parameters
        if self.strict is not None:
            out["strict"] = self.strict
        return out


@dataclass
class ToolChoice:
    """Tagged tool-choice variant: ``auto | none | required | function(name)``."""

    mode: ToolChoiceMode = "auto"
    function_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.mode == "function":
            return {"mode": self.mode, "function_name": self.function_name}
        return {"mode": self.mode}


__all__ = ["Tool", "ToolChoice", "ToolChoiceMode", "TOOL_CHOICE_MODES"]
