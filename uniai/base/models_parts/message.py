"""
Message DTO used across providers.

Defines the `Message` dataclass and the `Role` literal. Content is either the
legacy ``content`` string or an ordered list of ``Part`` objects; when both
are present ``parts`` wins.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional

from .content_part import PART_TEXT, Part
from .tool_call import ToolCall


# Message roles used across providers.
Role = Literal["system", "user", "assistant", "tool"]

ROLE_SYSTEM = "system"
ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"
ROLE_TOOL = "tool"
ROLES = (ROLE_SYSTEM, ROLE_USER, ROLE_ASSISTANT, ROLE_TOOL)


@dataclass
class Message:
    """A chat message in the vendor-neutral IR.

    Attributes:
        role: The role of the message author.
        content: Legacy plain-text content.
        parts: Ordered multimodal parts; takes precedence over ``content``.
        name: Optional participant name.
        tool_calls: Calls requested by an assistant turn.
        tool_call_id: For tool messages, the id of the call being answered.
    """

    role: Role
    content: str = ""
    parts: Optional[List[Part]] = None
    name: Optional[str] = None
    tool_calls: Optional[List[ToolCall]] = None
    tool_call_id: Optional[str] = None

    def effective_parts(self) -> List[Part]:
        """Return ``parts`` when set, else a single text part for ``content``."""
        if self.parts:
            return list(self.parts)
        if self.content:
            return [Part(type=PART_TEXT, text=self.content)]
        return []

    def text(self) -> str:
        """Return the concatenated text of all text parts."""
        if not self.parts:
            return self.content
        return "".join(p.text or "" for p in self.parts if p.type == PART_TEXT)

    def has_non_text_parts(self) -> bool:
        return any(p.type != PART_TEXT for p in (self.parts or []))

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"role": self.role}
        if self.parts:
            out["parts"] = [p.to_dict() for p in self.parts]
        else:
            out["content"] = self.content
        if self.name:
            out["name"] = self.name
        if self.tool_calls:
            out["tool_calls"] = [tc.to_dict() for tc in self.tool_calls]
        if self.tool_call_id:
            out["tool_call_id"] = self.tool_call_id
        return out


__all__ = [
    "Message",
    "Role",
    "ROLE_SYSTEM",
    "ROLE_USER",
    "ROLE_ASSISTANT",
    "ROLE_TOOL",
    "ROLES",
]
