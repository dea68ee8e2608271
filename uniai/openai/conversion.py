"""
Translation helpers between the IR and OpenAI-compatible Chat Completions.

Purpose:
- Build the keyword arguments for ``client.chat.completions.create`` from a
  :class:`Request` (messages, tools, tool choice, sampling knobs and the
  ``openai`` escape hatch).
- Convert SDK responses and stream chunks back into IR values.

Gemini models served through the OpenAI-compatible endpoint require a thought
signature on every replayed assistant tool call. It travels in the
non-standard ``extra_content.google.thought_signature`` field; when the
caller has none, the documented validator bypass value is sent instead.

No network I/O happens here.
"""

from __future__ import annotations

import typing as _t

from ..base.errors import ValidationError
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
from ..base.tools import normalized_copy, split_tool_call_id
from ..config.defaults import GEMINI_THOUGHT_SIGNATURE_BYPASS

DEFAULT_IMAGE_MIME = "image/png"


def is_gemini_model(model: str) -> bool:
    """Return True for Gemini model names (``gemini-*``, ``models/gemini-*``, ``google/gemini-*``)."""
    normalized = (model or "").strip().lower()
    if normalized.startswith("models/"):
        normalized = normalized[len("models/"):]
    return normalized.startswith("gemini-") or "/gemini-" in normalized


def uses_max_completion_tokens(model: str) -> bool:
    """Reasoning models (``o1``/``o3``/``o4`` families) reject ``max_tokens``."""
    model = (model or "").lower()
    return model.startswith(("o1", "o3", "o4"))


# ----- messages -----


def _user_part(part: Part) -> dict:
    if part.type == PART_TEXT:
        return {"type": "text", "text": part.text or ""}
    if part.type == PART_IMAGE_URL:
        return {"type": "image_url", "image_url": {"url": (part.url or "").strip()}}
    if part.type == PART_IMAGE_BASE64:
        mime = (part.mime_type or "").strip() or DEFAULT_IMAGE_MIME
        data = (part.data_base64 or "").strip()
        return {"type": "image_url", "image_url": {"url": f"data:{mime};base64,{data}"}}
    raise ValidationError(message=f"unsupported part type {part.type!r}", stage="encode")


def _user_content(message: Message) -> _t.Union[str, list]:
    parts = message.effective_parts()
    if not parts:
        return ""
    if len(parts) == 1 and parts[0].type == PART_TEXT:
        return parts[0].text or ""
    return [_user_part(p) for p in parts]


def _thought_signature_for(call: ToolCall, call_id: str) -> str:
    signature = (call.thought_signature or "").strip()
    if signature:
        return signature
    _, decoded = split_tool_call_id(call_id)
    return decoded or GEMINI_THOUGHT_SIGNATURE_BYPASS


def to_tool_call_params(calls: _t.Sequence[ToolCall], model: str) -> list[dict]:
    """Map assistant tool calls to wire dicts, skipping incomplete entries."""
    attach_signature = is_gemini_model(model)
    out: list[dict] = []
    for call in calls:
        if call.type and call.type != "function":
            continue
        if not call.id or not call.function.name:
            continue
        item: dict = {
            "id": call.id,
            "type": "function",
            "function": {"name": call.function.name, "arguments": call.function.arguments or "{}"},
        }
        if attach_signature:
            item["id"] = split_tool_call_id(call.id)[0]
            item["extra_content"] = {"google": {"thought_signature": _thought_signature_for(call, call.id)}}
        out.append(item)
    return out


def to_messages(messages: _t.Sequence[Message], model: str) -> list[dict]:
    """Convert IR messages into Chat Completions message dicts.

    Raises:
        ValidationError: A tool message without ``tool_call_id``.
    """
    gemini = is_gemini_model(model)
    out: list[dict] = []
    for message in messages:
        role = message.role
        if role == ROLE_SYSTEM:
            item: dict = {"role": "system", "content": message.text()}
        elif role == ROLE_USER:
            item = {"role": "user", "content": _user_content(message)}
        elif role == ROLE_ASSISTANT:
            item = {"role": "assistant"}
            text = message.text()
            if text:
                item["content"] = text
            if message.tool_calls:
                item["tool_calls"] = to_tool_call_params(message.tool_calls, model)
        elif role == ROLE_TOOL:
            if not message.tool_call_id:
                raise ValidationError(message="tool_call_id is required for tool messages", stage="encode")
            call_id = split_tool_call_id(message.tool_call_id)[0] if gemini else message.tool_call_id
            item = {"role": "tool", "content": message.text(), "tool_call_id": call_id}
        else:
            item = {"role": "user", "content": message.text()}
        if message.name and role in (ROLE_SYSTEM, ROLE_USER, ROLE_ASSISTANT):
            item["name"] = message.name
        out.append(item)
    return out


# ----- tools -----


def to_tool_params(tools: _t.Sequence[Tool]) -> list[dict]:
    """Map function tools, normalizing each parameter schema."""
    out: list[dict] = []
    for tool in tools:
        if tool.type != "function":
            continue
        fn: dict = {"name": tool.name}
        if tool.description:
            fn["description"] = tool.description
        if tool.strict is not None:
            fn["strict"] = bool(tool.strict)
        if tool.parameters:
            fn["parameters"] = normalized_copy(tool.parameters)
        out.append({"type": "function", "function": fn})
    return out


def to_tool_choice(choice: ToolChoice) -> _t.Union[str, dict]:
    if choice.mode in ("none", "required"):
        return choice.mode
    if choice.mode == "function":
        return {"type": "function", "function": {"name": choice.function_name or ""}}
    return "auto"


# ----- params -----


def _escape_hatch(extra: _t.Mapping[str, _t.Any]) -> dict:
    """Copy the ``openai`` option map; a string ``response_format`` becomes ``{"type": ...}``."""
    out = dict(extra)
    fmt = out.get("response_format")
    if isinstance(fmt, str):
        fmt = fmt.strip()
        if fmt:
            out["response_format"] = {"type": fmt}
        else:
            out.pop("response_format")
    return out


def build_chat_params(request: Request, model: str, *, extra: _t.Optional[_t.Mapping[str, _t.Any]] = None) -> dict:
    """Assemble keyword arguments for ``client.chat.completions.create``.

    Parameters:
        request: The validated IR request.
        model: Resolved model (for Azure, the deployment name).
        extra: Escape-hatch map; defaults to ``request.options.openai``.
            Keys are sent through ``extra_body`` so they are merged into the
            JSON payload last and override typed fields.

    Returns:
        A dict suitable for ``create(**params)`` (without ``stream``).
    """
    opts = request.options
    params: dict = {"model": model, "messages": to_messages(request.messages, model)}
    if opts.temperature is not None:
        params["temperature"] = float(opts.temperature)
    if opts.top_p is not None:
        params["top_p"] = float(opts.top_p)
    if opts.max_tokens is not None:
        key = "max_completion_tokens" if uses_max_completion_tokens(model) else "max_tokens"
        params[key] = int(opts.max_tokens)
    if opts.stop:
        params["stop"] = list(opts.stop)
    if opts.presence_penalty is not None:
        params["presence_penalty"] = float(opts.presence_penalty)
    if opts.frequency_penalty is not None:
        params["frequency_penalty"] = float(opts.frequency_penalty)
    if opts.user:
        params["user"] = opts.user
    tools = to_tool_params(request.tools)
    if tools:
        params["tools"] = tools
        if request.tool_choice is not None:
            params["tool_choice"] = to_tool_choice(request.tool_choice)
    hatch = _escape_hatch(opts.openai if extra is None else extra)
    if hatch:
        params["extra_body"] = hatch
    return params


def build_stream_params(request: Request, model: str, *, extra: _t.Optional[_t.Mapping[str, _t.Any]] = None) -> dict:
    """Same as :func:`build_chat_params` with streaming and usage reporting enabled."""
    params = build_chat_params(request, model, extra=extra)
    params["stream"] = True
    params["stream_options"] = {"include_usage": True}
    return params


# ----- responses -----


def extract_thought_signature(obj: _t.Any) -> str:
    """Read ``extra_content.google.thought_signature`` from an SDK model or dict."""
    extra = obj.get("extra_content") if isinstance(obj, dict) else (getattr(obj, "model_extra", None) or {}).get("extra_content")
    if not isinstance(extra, dict):
        return ""
    google = extra.get("google")
    if not isinstance(google, dict):
        return ""
    signature = google.get("thought_signature")
    return signature.strip() if isinstance(signature, str) else ""


def to_tool_calls(calls: _t.Optional[_t.Sequence[_t.Any]]) -> list[ToolCall]:
    """Convert SDK tool-call objects; non-function or unnamed calls are dropped."""
    out: list[ToolCall] = []
    for call in calls or []:
        if getattr(call, "type", "function") != "function":
            continue
        fn = getattr(call, "function", None)
        name = getattr(fn, "name", None) or ""
        if not name:
            continue
        out.append(
            ToolCall(
                id=getattr(call, "id", "") or "",
                function=ToolCallFunction(name=name, arguments=getattr(fn, "arguments", None) or "{}"),
                thought_signature=extract_thought_signature(call) or None,
            )
        )
    return out


def usage_from(usage: _t.Any) -> Usage:
    if usage is None:
        return Usage()
    return Usage.of(
        getattr(usage, "prompt_tokens", 0),
        getattr(usage, "completion_tokens", 0),
        getattr(usage, "total_tokens", None),
    )


def to_result(resp: _t.Any) -> Result:
    """Convert a non-streaming ``ChatCompletion`` into a :class:`Result`.

    Text is concatenated across choices; tool calls come from the first choice
    that carries any.
    """
    text = ""
    tool_calls: list[ToolCall] = []
    for choice in getattr(resp, "choices", None) or []:
        message = getattr(choice, "message", None)
        if message is None:
            continue
        text += getattr(message, "content", None) or ""
        if not tool_calls:
            tool_calls = to_tool_calls(getattr(message, "tool_calls", None))
    return Result(
        text=text,
        parts=[Part(type=PART_TEXT, text=text)] if text else [],
        model=getattr(resp, "model", "") or "",
        tool_calls=tool_calls,
        usage=usage_from(getattr(resp, "usage", None)),
        raw=resp,
    )


__all__ = [
    "build_chat_params",
    "build_stream_params",
    "extract_thought_signature",
    "is_gemini_model",
    "to_messages",
    "to_result",
    "to_tool_call_params",
    "to_tool_calls",
    "to_tool_choice",
    "to_tool_params",
    "usage_from",
    "uses_max_completion_tokens",
]
