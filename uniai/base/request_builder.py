"""Request construction helpers.

``build_request`` applies functional options to an empty :class:`Request` and
validates the result once. Message, part, tool and tool-choice constructors
live here too so call sites read declaratively::

    req = build_request(
        with_model("gpt-4o-mini"),
        with_messages(system("Be brief."), user("Weather in Tokyo?")),
        with_tools(function_tool("get_weather", "Look up weather", {"type": "object"})),
        with_tool_choice(tool_choice_required()),
    )

No network or provider-specific knowledge lives here.
"""
from __future__ import annotations

import json
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from .dto.chat import ChatRequestDTO
from .errors import ValidationError
from .models import (
    PART_IMAGE_BASE64,
    PART_IMAGE_URL,
    PART_TEXT,
    ROLE_ASSISTANT,
    ROLE_SYSTEM,
    ROLE_TOOL,
    ROLE_USER,
    DebugSink,
    EmulationMode,
    Message,
    Part,
    Request,
    StreamCallback,
    Tool,
    ToolCall,
    ToolChoice,
)

RequestOption = Callable[[Request], None]


# ----------------------------------------------------------------- validation


def _validation_payload(req: Request) -> Dict[str, Any]:
    mode = req.options.emulation_mode
    return {
        "messages": [m.to_dict() for m in req.messages],
        "tools": [t.to_dict() for t in req.tools],
        "tool_choice": req.tool_choice.to_dict() if req.tool_choice is not None else None,
        "emulation_mode": getattr(mode, "value", mode),
        "temperature": req.options.temperature,
        "top_p": req.options.top_p,
        "max_tokens": req.options.max_tokens,
    }


def _first_error_message(exc: PydanticValidationError) -> str:
    """Render the first pydantic error as ``"<loc>: <message>"``."""
    err = exc.errors()[0]
    original = (err.get("ctx") or {}).get("error")
    msg = str(original) if original is not None else str(err.get("msg", "invalid request"))
    loc_parts: List[str] = []
    for item in err.get("loc", ()):
        if isinstance(item, int):
            loc_parts.append(f"[{item}]")
        else:
            loc_parts.append(("." if loc_parts else "") + str(item))
    loc = "".join(loc_parts)
    return f"{loc}: {msg}" if loc else msg


def validate_request(req: Request) -> Request:
    """Validate ``req`` and return it unchanged.

    Raises:
        ValidationError: On the first violated rule; nothing is sent anywhere.
    """
    try:
        ChatRequestDTO.model_validate(_validation_payload(req))
    except PydanticValidationError as exc:
        raise ValidationError(
            message=_first_error_message(exc),
            provider=req.provider or None,
            model=req.model or None,
            stage="validate",
            raw=exc,
        ) from exc
    return req


def build_request(*options: RequestOption) -> Request:
    """Apply ``options`` to an empty request, then validate it.

    Returns:
        The validated :class:`Request`.

    Raises:
        ValidationError: When the assembled request violates a rule.
    """
    req = Request()
    for opt in options:
        opt(req)
    return validate_request(req)


# ------------------------------------------------------------ request options


def with_provider(name: str) -> RequestOption:
    def _apply(req: Request) -> None:
        req.provider = name.strip()

    return _apply


def with_model(model: str) -> RequestOption:
    def _apply(req: Request) -> None:
        req.model = model.strip()

    return _apply


def with_messages(*messages: Message) -> RequestOption:
    """Replace the message list (order is preserved)."""

    def _apply(req: Request) -> None:
        req.messages = list(messages)

    return _apply


def with_message(message: Message) -> RequestOption:
    """Append one message."""

    def _apply(req: Request) -> None:
        req.messages.append(message)

    return _apply


def _set_option(field_name: str, value: Any) -> RequestOption:
    def _apply(req: Request) -> None:
        setattr(req.options, field_name, value)

    return _apply


def with_temperature(value: float) -> RequestOption:
    return _set_option("temperature", value)


def with_top_p(value: float) -> RequestOption:
    return _set_option("top_p", value)


def with_max_tokens(value: int) -> RequestOption:
    return _set_option("max_tokens", value)


def with_stop(*stop: str) -> RequestOption:
    return _set_option("stop", list(stop))


def with_presence_penalty(value: float) -> RequestOption:
    return _set_option("presence_penalty", value)


def with_frequency_penalty(value: float) -> RequestOption:
    return _set_option("frequency_penalty", value)


def with_user(value: str) -> RequestOption:
    return _set_option("user", value)


def with_on_stream(callback: StreamCallback) -> RequestOption:
    """Stream the response; ``callback`` receives every event in arrival order."""
    return _set_option("on_stream", callback)


def with_debug_sink(sink: DebugSink) -> RequestOption:
    return _set_option("debug_sink", sink)


def with_emulation_mode(mode: Union[EmulationMode, str]) -> RequestOption:
    """Select the tool-calling emulation mode for this request.

    Unknown mode strings are reported by validation, not here.
    """

    def _apply(req: Request) -> None:
        try:
            req.options.emulation_mode = EmulationMode(mode)
        except ValueError:
            req.options.emulation_mode = mode  # type: ignore[assignment]

    return _apply


def with_tools(*tools: Tool) -> RequestOption:
    def _apply(req: Request) -> None:
        req.tools = list(tools)

    return _apply


def with_tool_choice(choice: ToolChoice) -> RequestOption:
    def _apply(req: Request) -> None:
        req.tool_choice = choice

    return _apply


def _merge_vendor(vendor: str, values: Mapping[str, Any]) -> RequestOption:
    def _apply(req: Request) -> None:
        getattr(req.options, vendor).update(values)

    return _apply


def with_openai_options(values: Mapping[str, Any]) -> RequestOption:
    """Escape hatch merged into the OpenAI-compatible payload (no compatibility guarantee)."""
    return _merge_vendor("openai", values)


def with_anthropic_options(values: Mapping[str, Any]) -> RequestOption:
    """Escape hatch for the Anthropic payload (``top_k``, ``metadata``...)."""
    return _merge_vendor("anthropic", values)


def with_gemini_options(values: Mapping[str, Any]) -> RequestOption:
    """Escape hatch for Gemini ``generationConfig`` fields (``topK``, ``responseMimeType``...)."""
    return _merge_vendor("gemini", values)


def with_azure_options(values: Mapping[str, Any]) -> RequestOption:
    return _merge_vendor("azure", values)


# --------------------------------------------------------- message builders


def text_part(text: str) -> Part:
    return Part(type=PART_TEXT, text=text)


def image_url_part(url: str) -> Part:
    return Part(type=PART_IMAGE_URL, url=url)


def image_base64_part(data_base64: str, mime_type: str = "image/png") -> Part:
    return Part(type=PART_IMAGE_BASE64, data_base64=data_base64, mime_type=mime_type)


def system(text: str) -> Message:
    return Message(role=ROLE_SYSTEM, content=text)


def user(text: str) -> Message:
    return Message(role=ROLE_USER, content=text)


def user_parts(*parts: Part) -> Message:
    """User message made of multimodal parts."""
    return Message(role=ROLE_USER, parts=list(parts))


def assistant(text: str) -> Message:
    return Message(role=ROLE_ASSISTANT, content=text)


def assistant_tool_calls(tool_calls: Iterable[ToolCall], text: str = "") -> Message:
    """Assistant turn replaying the tool calls of a previous result verbatim."""
    return Message(role=ROLE_ASSISTANT, content=text, tool_calls=list(tool_calls))


def tool_result(tool_call_id: str, content: Union[str, Mapping[str, Any], List[Any]]) -> Message:
    """Tool message answering ``tool_call_id``; non-string content is JSON-encoded."""
    if not isinstance(content, str):
        content = json.dumps(content, ensure_ascii=False)
    return Message(role=ROLE_TOOL, content=content, tool_call_id=tool_call_id)


# ------------------------------------------------------------ tool builders


def function_tool(
    name: str,
    description: str = "",
    parameters: Optional[Mapping[str, Any]] = None,
    *,
    strict: Optional[bool] = None,
) -> Tool:
    """Build a function tool. ``parameters`` may be a mapping or a JSON string."""
    schema: Optional[Dict[str, Any]] = None
    if isinstance(parameters, str):
        schema = json.loads(parameters)
    elif parameters is not None:
        schema = dict(parameters)
    return Tool(name=name, description=description, parameters=schema, strict=strict)


def tool_choice_auto() -> ToolChoice:
    return ToolChoice(mode="auto")


def tool_choice_none() -> ToolChoice:
    return ToolChoice(mode="none")


def tool_choice_required() -> ToolChoice:
    return ToolChoice(mode="required")


def tool_choice_function(name: str) -> ToolChoice:
    return ToolChoice(mode="function", function_name=name)


__all__ = [
    "RequestOption",
    "build_request",
    "validate_request",
    "with_provider",
    "with_model",
    "with_messages",
    "with_message",
    "with_temperature",
    "with_top_p",
    "with_max_tokens",
    "with_stop",
    "with_presence_penalty",
    "with_frequency_penalty",
    "with_user",
    "with_on_stream",
    "with_debug_sink",
    "with_emulation_mode",
    "with_tools",
    "with_tool_choice",
    "with_openai_options",
    "with_anthropic_options",
    "with_gemini_options",
    "with_azure_options",
    "text_part",
    "image_url_part",
    "image_base64_part",
    "system",
    "user",
    "user_parts",
    "assistant",
    "assistant_tool_calls",
    "tool_result",
    "function_tool",
    "tool_choice_auto",
    "tool_choice_none",
    "tool_choice_required",
    "tool_choice_function",
]
