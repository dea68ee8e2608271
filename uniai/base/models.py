"""Vendor-neutral IR public surface.

Re-exports the dataclasses under ``uniai.base.models_parts``.
"""

from .models_parts.content_part import PART_IMAGE_BASE64, PART_IMAGE_URL, PART_TEXT, Part, PartType
from .models_parts.tool_call import ToolCall, ToolCallFunction
from .models_parts.message import (
    ROLE_ASSISTANT,
    ROLE_SYSTEM,
    ROLE_TOOL,
    ROLE_USER,
    ROLES,
    Message,
    Role,
)
from .models_parts.tool import TOOL_CHOICE_MODES, Tool, ToolChoice, ToolChoiceMode
from .models_parts.options import DebugSink, EmulationMode, Options, StreamCallback
from .models_parts.chat_request import Request
from .models_parts.chat_result import WARNING_TOOL_CALLS_EMULATED, Result, Usage

__all__ = [
    "Part",
    "PartType",
    "PART_TEXT",
    "PART_IMAGE_URL",
    "PART_IMAGE_BASE64",
    "ToolCall",
    "ToolCallFunction",
    "Message",
    "Role",
    "ROLE_SYSTEM",
    "ROLE_USER",
    "ROLE_ASSISTANT",
    "ROLE_TOOL",
    "ROLES",
    "Tool",
    "ToolChoice",
    "ToolChoiceMode",
    "TOOL_CHOICE_MODES",
    "Options",
    "EmulationMode",
    "StreamCallback",
    "DebugSink",
    "Request",
    "Result",
    "Usage",
    "WARNING_TOOL_CALLS_EMULATED",
]
