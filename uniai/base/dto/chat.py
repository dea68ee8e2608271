"""
Pydantic DTOs and validators for chat requests.

Purpose
-------
Validate a :class:`uniai.base.models.Request` once, before any adapter sees
it. The dataclass IR is converted into plain dictionaries and checked against
these models; the first violation wins and is reported as
:class:`uniai.base.errors.ValidationError` by ``validate_request``.

Ordering
--------
Two structural rules run first, in this order, on the raw payload:

1. at least one message (``"messages required"``);
2. non-text parts only inside user messages (the error names the message
   index and role).

Field-level checks (roles, part payloads, tool shapes, tool choice) follow.

External dependencies: Pydantic only. No network access.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator


Role = Literal["system", "user", "assistant", "tool"]


class PartDTO(BaseModel):
    """One content part; the payload field must match the discriminator."""

    type: Literal["text", "image_url", "image_base64"]
    text: Optional[str] = None
    url: Optional[str] = None
    data_base64: Optional[str] = None
    mime_type: Optional[str] = None

    @model_validator(mode="after")
    def _validate_payload(self) -> "PartDTO":
        if self.type == "text" and self.text is None:
            raise ValueError("text part requires text")
        if self.type == "image_url" and not (self.url or "").strip():
            raise ValueError("image_url part requires url")
        if self.type == "image_base64" and not (self.data_base64 or "").strip():
            raise ValueError("image_base64 part requires data_base64")
        return self


class ToolCallFunctionDTO(BaseModel):
    name: str = Field(..., min_length=1)
    arguments: str = "{}"


class ToolCallDTO(BaseModel):
    """Assistant tool call replayed in a later turn."""

    id: str = Field(..., min_length=1)
    type: Literal["function"] = "function"
    function: ToolCallFunctionDTO
    thought_signature: Optional[str] = None


class MessageDTO(BaseModel):
    """Represents a chat message with either a text string or structured parts.

    Rules:
        - ``tool_calls`` only on assistant messages.
        - tool messages must reference the call they answer (``tool_call_id``).
    """

    role: Role
    content: str = ""
    parts: Optional[List[PartDTO]] = None
    name: Optional[str] = None
    tool_calls: Optional[List[ToolCallDTO]] = None
    tool_call_id: Optional[str] = None

    @model_validator(mode="after")
    def _validate_tool_fields(self) -> "MessageDTO":
        if self.tool_calls and self.role != "assistant":
            raise ValueError(f"tool_calls are only allowed on assistant messages (role={self.role})")
        if self.role == "tool" and not (self.tool_call_id or "").strip():
            raise ValueError("tool message requires tool_call_id")
        return self


class ToolDTO(BaseModel):
    """Function tool specification."""

    type: Literal["function"] = "function"
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None
    strict: Optional[bool] = None


class ToolChoiceDTO(BaseModel):
    mode: Literal["auto", "none", "required", "function"]
    function_name: Optional[str] = None

    @model_validator(mode="after")
    def _validate_function_name(self) -> "ToolChoiceDTO":
        if self.mode == "function" and not (self.function_name or "").strip():
            raise ValueError("tool_choice function requires a function name")
        return self


class ChatRequestDTO(BaseModel):
    """Validated view of a request.

    Parameters:
        messages: Ordered, non-empty list of messages.
        tools: Function tools (unique, non-empty names).
        tool_choice: Optional tool-choice constraint.
        emulation_mode: ``off``, ``fallback`` or ``force`` when set.
        temperature / top_p / max_tokens: Numeric knobs with basic bounds.

    Raises:
        pydantic.ValidationError: On the first violated rule.
    """

    messages: List[MessageDTO]
    tools: List[ToolDTO] = Field(default_factory=list)
    tool_choice: Optional[ToolChoiceDTO] = None
    emulation_mode: Optional[Literal["off", "fallback", "force"]] = None
    temperature: Optional[float] = Field(default=None, ge=0.0)
    top_p: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    max_tokens: Optional[int] = Field(default=None, gt=0)

    @model_validator(mode="before")
    @classmethod
    def _validate_structure(cls, data: Any) -> Any:
        """Apply the two structural rules before any field is parsed."""
        if not isinstance(data, dict):
            return data
        messages = data.get("messages") or []
        if not messages:
            raise ValueError("messages required")
        for idx, msg in enumerate(messages):
            if not isinstance(msg, dict):
                continue
            role = msg.get("role")
            if role == "user":
                continue
            for part in msg.get("parts") or []:
                ptype = part.get("type") if isinstance(part, dict) else None
                if ptype != "text":
                    raise ValueError(
                        f"message[{idx}] (role={role}): part type {ptype!r} is only allowed in user messages"
                    )
        return data

    @model_validator(mode="after")
    def _validate_tools(self) -> "ChatRequestDTO":
        seen = set()
        for tool in self.tools:
            if tool.name in seen:
                raise ValueError(f"duplicate tool name {tool.name!r}")
            seen.add(tool.name)
        return self


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
