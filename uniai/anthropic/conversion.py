"""Anthropic Messages API parameter builders and response extraction.

Purpose:
- Map the IR onto ``client.messages.create`` keyword arguments.
- Extract text, tool calls and usage from a ``Message`` response.

Mapping rules:
- System messages are joined with newlines into the top-level ``system``.
- Tool messages become ``tool_result`` blocks in a user turn; consecutive
  results share one turn.
- Assistant tool calls become ``tool_use`` blocks after the text block.
- ``max_tokens`` is mandatory on this API and defaults to 8192.
- Tool choice: ``auto`` -> ``auto``, ``none`` -> ``none``, ``required`` ->
  ``any``, ``function(name)`` -> ``{"type": "tool", "name": name}``.
- Escape hatch (``options.anthropic``): ``top_k`` and ``user_id`` /
  ``metadata.user_id`` are typed; other keys go through ``extra_body``.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..base.errors import UnsupportedCapability, ValidationError
from ..base.models import (
    PART_IMAGE_BASE64,
    PART_IMAGE_URL,
    PART_TEXT,
    ROLE_ASSISTANT,
    ROLE_SYSTEM,
    ROLE_TOOL,
    ROLE_USER,
    Message,
    Part,
    Request,
    Result,
    Tool,
    ToolCall,
    ToolCallFunction,
    ToolChoice,
    Usage,
)
from ..base.tools import normalized_copy
from ..config.defaults import ANTHROPIC_DEFAULT_MAX_TOKENS

DEFAULT_IMAGE_MIME = "image/png"


def _content_block(part: Part) -> Dict[str, Any]:
    if part.type == PART_TEXT:
        return {"type": "text", "text": part.text or ""}
    if part.type == PART_IMAGE_URL:
        return {"type": "image", "source": {"type": "url", "url": (part.url or "").strip()}}
    if part.type == PART_IMAGE_BASE64:
        return {
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": (part.mime_type or "").strip() or DEFAULT_IMAGE_MIME,
                "data": (part.data_base64 or "").strip(),
            },
        }
    raise ValidationError(message=f"unsupported part type {part.type!r}", stage="encode")


def _tool_use_blocks(calls: Sequence[ToolCall]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for call in calls:
        if not call.function.name:
            continue
        call_id = (call.id or "").strip()
        if not call_id:
            raise ValidationError(message="tool call id is required for anthropic tool_use", stage="encode")
        args = (call.function.arguments or "").strip() or "{}"
        try:
            payload = json.loads(args)
        except ValueError as exc:
            raise ValidationError(
                message=f"invalid tool call arguments for {call.function.name!r}: {exc}",
                stage="encode",
            ) from exc
        out.append({"type": "tool_use", "id": call_id, "name": call.function.name, "input": payload})
    return out


def to_system_and_messages(messages: Sequence[Message]) -> tuple[str, List[Dict[str, Any]]]:
    """Split IR messages into the ``system`` string and Anthropic turns.

    Raises:
        ValidationError: Missing ``tool_call_id``, invalid tool-call arguments,
            or no non-system message left.
    """
    system_parts: List[str] = []
    out: List[Dict[str, Any]] = []
    for message in messages:
        if message.role == ROLE_SYSTEM:
            text = message.text()
            if text:
                system_parts.append(text)
            continue
        if message.role == ROLE_USER:
            blocks = [_content_block(p) for p in message.effective_parts()]
            if blocks:
                out.append({"role": "user", "content": blocks})
        elif message.role == ROLE_ASSISTANT:
            blocks = []
            text = message.text()
            if text:
                blocks.append({"type": "text", "text": text})
            blocks.extend(_tool_use_blocks(message.tool_calls or []))
            if blocks:
                out.append({"role": "assistant", "content": blocks})
        elif message.role == ROLE_TOOL:
            if not message.tool_call_id:
                raise ValidationError(message="tool_call_id is required for tool messages", stage="encode")
            block = {"type": "tool_result", "tool_use_id": message.tool_call_id, "content": message.text()}
            last = out[-1] if out else None
            if last is not None and last["role"] == "user" and all(
                b.get("type") == "tool_result" for b in last["content"]
            ):
                last["content"].append(block)
            else:
                out.append({"role": "user", "content": [block]})
        else:
            raise UnsupportedCapability(message=f"anthropic does not support role {message.role!r}", stage="encode")
    if not out:
        raise ValidationError(message="at least one non-system message is required", stage="encode")
    return "\n".join(system_parts), out


def to_tools(tools: Sequence[Tool]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for tool in tools:
        if tool.type != "function" or not tool.name:
            continue
        item: Dict[str, Any] = {
            "name": tool.name,
            "input_schema": normalized_copy(tool.parameters) if tool.parameters else {"type": "object"},
        }
        if tool.description:
            item["description"] = tool.description
        out.append(item)
    return out


def to_tool_choice(choice: ToolChoice) -> Optional[Dict[str, Any]]:
    if choice.mode == "auto":
        return {"type": "auto"}
    if choice.mode == "none":
        return {"type": "none"}
    if choice.mode == "required":
        return {"type": "any"}
    if choice.mode == "function":
        name = (choice.function_name or "").strip()
        if not name:
            raise ValidationError(message="tool_choice function_name is required", stage="encode")
        return {"type": "tool", "name": name}
    return None


def _read_user_id(opts: Mapping[str, Any]) -> str:
    if "user_id" in opts:
        return str(opts.get("user_id") or "").strip()
    meta = opts.get("metadata")
    if isinstance(meta, Mapping) and isinstance(meta.get("user_id"), str):
        return meta["user_id"].strip()
    return ""


def build_params(request: Request, model: str) -> Dict[str, Any]:
    """Assemble keyword arguments for ``client.messages.create`` (without ``stream``)."""
    opts = request.options
    system, messages = to_system_and_messages(request.messages)
    params: Dict[str, Any] = {
        "model": model,
        "messages": messages,
        "max_tokens": int(opts.max_tokens) if opts.max_tokens is not None else ANTHROPIC_DEFAULT_MAX_TOKENS,
    }
    if system:
        params["system"] = system
    if opts.temperature is not None:
        params["temperature"] = float(opts.temperature)
    if opts.top_p is not None:
        params["top_p"] = float(opts.top_p)
    if opts.stop:
        params["stop_sequences"] = list(opts.stop)
    if opts.user:
        params["metadata"] = {"user_id": opts.user}
    tools = to_tools(request.tools)
    if tools:
        params["tools"] = tools
    if request.tool_choice is not None:
        choice = to_tool_choice(request.tool_choice)
        if choice is not None:
            params["tool_choice"] = choice

    hatch = dict(opts.anthropic)
    top_k = hatch.pop("top_k", None)
    if isinstance(top_k, (int, float)) and int(top_k) > 0:
        params["top_k"] = int(top_k)
    user_id = _read_user_id(hatch)
    hatch.pop("user_id", None)
    hatch.pop("metadata", None)
    if user_id:
        params["metadata"] = {"user_id": user_id}
    if hatch:
        params["extra_body"] = hatch
    return params


def tool_call_from_block(block: Any) -> ToolCall:
    """Convert a ``tool_use`` content block.

    Raises:
        ValidationError: Block without id or name.
    """
    call_id = (getattr(block, "id", "") or "").strip()
    name = (getattr(block, "name", "") or "").strip()
    if not call_id or not name:
        raise ValidationError(message="anthropic tool_use missing id or name", stage="decode")
    payload = getattr(block, "input", None)
    args = json.dumps(payload, ensure_ascii=False) if payload is not None else "{}"
    return ToolCall(id=call_id, function=ToolCallFunction(name=name, arguments=args))


def to_result(resp: Any) -> Result:
    """Convert a non-streaming ``Message``; non-blank text blocks are newline-joined."""
    texts: List[str] = []
    calls: List[ToolCall] = []
    for block in getattr(resp, "content", None) or []:
        kind = getattr(block, "type", "")
        if kind == "text":
            text = getattr(block, "text", "") or ""
            if text.strip():
                texts.append(text)
        elif kind == "tool_use":
            calls.append(tool_call_from_block(block))
    text = "\n".join(texts)
    usage = getattr(resp, "usage", None)
    return Result(
        text=text,
        parts=[Part(type=PART_TEXT, text=text)] if text else [],
        model=getattr(resp, "model", "") or "",
        tool_calls=calls,
        usage=Usage.of(getattr(usage, "input_tokens", 0), getattr(usage, "output_tokens", 0)),
        raw=resp,
    )


__all__ = [
    "build_params",
    "to_result",
    "to_system_and_messages",
    "to_tool_choice",
    "to_tools",
    "tool_call_from_block",
]
