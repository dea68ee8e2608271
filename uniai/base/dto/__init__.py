"""DTO validation package."""

from .chat import (
    ChatRequestDTO,
    MessageDTO,
    PartDTO,
    Role,
    ToolCallDTO,
    ToolCallFunctionDTO,
    ToolChoiceDTO,
    ToolDTO,
)

__all__ = [
    "Role",
    "PartDTO",
    "ToolCallDTO",
    "ToolCallFunctionDTO",
    "MessageDTO",
    "ToolDTO",
    "ToolChoiceDTO",
    "ChatRequestDTO",
]
