"""
Gemini ``generateContent`` payload builders and response parsing.

Purpose:
- Map the IR onto the native Gemini REST body: ``contents`` with ``user`` /
  ``model`` roles, ``systemInstruction``, ``tools.functionDeclarations``,
  ``toolConfig`` and ``generationConfig``.
- Parse candidates back into text and tool calls. Every function call carries
  a thought signature that must be replayed on the next turn; it is folded
  into the returned tool-call id (see ``uniai.base.tools.call_id``).

Schema dialect:
- Gemini accepts an OpenAPI-flavoured subset of JSON Schema: type names are
  upper case, ``"null"`` in a type union becomes ``nullable: true`` and
  ``additionalProperties`` is rejected.
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
    Options,
    Part,
    Request,
    Result,
    Tool,
    ToolCall,
    ToolCallFunction,
    ToolChoice,
    Usage,
)
from ..base.tools import encode_tool_call_id, normalized_copy, resolve_thought_signature, split_tool_call_id

DEFAULT_IMAGE_MIME = "image/png"

_DROPPED_SCHEMA_KEYS = frozenset({"additionalProperties"})
# Keywords whose value maps names to subschemas.
_MAP_KEYS = frozenset({"properties", "patternProperties", "definitions", "$defs"})


# ----- schema -----


def _normalize_type(raw: Any) -> tuple[List[str], bool]:
    values = [raw] if isinstance(raw, str) else raw if isinstance(raw, list) else []
    names: List[str] = []
    nullable = False
    for item in values:
        if not isinstance(item, str):
            continue
        upper = item.strip().upper()
        if not upper:
            continue
        if upper == "NULL":
            nullable = True
            continue
        names.append(upper)
    return names, nullable


def to_gemini_schema(node: Any) -> Any:
    """Rewrite a JSON Schema tree into Gemini's dialect (returns a new tree)."""
    if isinstance(node, list):
        return [to_gemini_schema(item) for item in node]
    if not isinstance(node, dict):
        return node
    out: Dict[str, Any] = {}
    for key, value in node.items():
        if key in _DROPPED_SCHEMA_KEYS:
            continue
        if key in _MAP_KEYS and isinstance(value, dict):
            out[key] = {name: to_gemini_schema(sub) for name, sub in value.items()}
        else:
            out[key] = to_gemini_schema(value)
    names, nullable = _normalize_type(node.get("type"))
    if names:
        out["type"] = names[0]
    else:
        out.pop("type", None)
    if nullable:
        out["nullable"] = True
    if "type" not in out:
        if "properties" in out:
            out["type"] = "OBJECT"
        elif "items" in out:
            out["type"] = "ARRAY"
    if out.get("type") == "ARRAY" and out.get("items") is None:
        out["items"] = {}
    return out


# ----- contents -----


def _append(contents: List[Dict[str, Any]], role: str, part: Dict[str, Any]) -> None:
    """Append ``part`` to the last turn when the role repeats, else open a new turn."""
    if contents and contents[-1]["role"] == role:
        contents[-1]["parts"].append(part)
        return
    contents.append({"role": role, "parts": [part]})


def _user_part(part: Part) -> Optional[Dict[str, Any]]:
    if part.type == PART_TEXT:
        return {"text": part.text} if (part.text or "").strip() else None
    mime = (part.mime_type or "").strip() or DEFAULT_IMAGE_MIME
    if part.type == PART_IMAGE_BASE64:
        return {"inlineData": {"mimeType": mime, "data": (part.data_base64 or "").strip()}}
    if part.type == PART_IMAGE_URL:
        return {"fileData": {"mimeType": mime, "fileUri": (part.url or "").strip()}}
    raise ValidationError(message=f"unsupported part type {part.type!r}", stage="encode")


def _parse_json_object(raw: str, key: str) -> Dict[str, Any]:
    """Decode ``raw`` as a JSON object; anything else is wrapped under ``key``."""
    raw = (raw or "").strip()
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except ValueError:
        return {key: raw}
    return value if isinstance(value, dict) else {key: value}


def to_contents(messages: Sequence[Message], *, provider: str, model: str) -> tuple[Optional[Dict[str, Any]], List[Dict[str, Any]]]:
    """Return ``(systemInstruction, contents)``.

    Tool results are resolved to function names through the preceding
    assistant tool calls, by full id or by base id.

    Raises:
        ValidationError: Missing thought signature on a replayed tool call,
            unknown or missing ``tool_call_id``, or no non-system message.
    """
    system_parts: List[Dict[str, Any]] = []
    contents: List[Dict[str, Any]] = []
    name_by_id: Dict[str, str] = {}
    for message in messages:
        if message.role == ROLE_SYSTEM:
            text = message.text()
            if text.strip():
                system_parts.append({"text": text})
        elif message.role == ROLE_USER:
            for part in message.effective_parts():
                item = _user_part(part)
                if item is not None:
                    _append(contents, "user", item)
        elif message.role == ROLE_ASSISTANT:
            text = message.text()
            if text.strip():
                _append(contents, "model", {"text": text})
            for call in message.tool_calls or []:
                if call.type and call.type != "function":
                    continue
                if not call.function.name.strip():
                    raise ValidationError(message="assistant tool call name is required", stage="encode")
                base_id, signature = resolve_thought_signature(call, provider=provider, model=model)
                if call.id:
                    name_by_id[call.id.strip()] = call.function.name
                if base_id:
                    name_by_id[base_id.strip()] = call.function.name
                _append(
                    contents,
                    "model",
                    {
                        "functionCall": {
                            "name": call.function.name,
                            "args": _parse_json_object(call.function.arguments, "raw"),
                        },
                        "thoughtSignature": signature,
                    },
                )
        elif message.role == ROLE_TOOL:
            call_id = (message.tool_call_id or "").strip()
            if not call_id:
                raise ValidationError(message="tool_call_id is required for tool messages", stage="encode")
            name = name_by_id.get(call_id) or name_by_id.get(split_tool_call_id(call_id)[0])
            if not name:
                raise ValidationError(
                    message=f"tool message references unknown tool_call_id: {call_id}",
                    stage="encode",
                )
            _append(
                contents,
                "user",
                {"functionResponse": {"name": name, "response": _parse_json_object(message.text(), "content")}},
            )
        else:
            raise UnsupportedCapability(message=f"gemini does not support role {message.role!r}", stage="encode")
    if not contents:
        raise ValidationError(message="at least one non-system message is required", stage="encode")
    system = {"parts": system_parts} if system_parts else None
    return system, contents


# ----- tools -----


def to_tools(tools: Sequence[Tool]) -> List[Dict[str, Any]]:
    decls: List[Dict[str, Any]] = []
    for tool in tools:
        if tool.type != "function" or not tool.name.strip():
            continue
        decl: Dict[str, Any] = {"name": tool.name}
        if tool.description:
            decl["description"] = tool.description
        if tool.parameters:
            decl["parameters"] = to_gemini_schema(normalized_copy(tool.parameters))
        else:
            decl["parameters"] = {"type": "OBJECT", "properties": {}}
        decls.append(decl)
    return [{"functionDeclarations": decls}] if decls else []


def to_function_calling_config(choice: ToolChoice) -> Dict[str, Any]:
    if choice.mode == "none":
        return {"mode": "NONE"}
    if choice.mode == "required":
        return {"mode": "ANY"}
    if choice.mode == "function":
        name = (choice.function_name or "").strip()
        if not name:
            raise ValidationError(message="tool_choice function_name is required when mode=function", stage="encode")
        return {"mode": "ANY", "allowedFunctionNames": [name]}
    return {"mode": "AUTO"}


# ----- generation config -----


def _positive_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value) if int(value) > 0 else None


def _response_schema(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            value = json.loads(value)
        except ValueError:
            return None
    if isinstance(value, (dict, list)) and value:
        return to_gemini_schema(value)
    return None


def to_generation_config(opts: Options) -> Optional[Dict[str, Any]]:
    """Build ``generationConfig``; ``None`` when nothing is set.

    Escape-hatch keys (``options.gemini``): ``top_k``, ``candidate_count``
    (or ``n``), ``response_mime_type`` and ``response_schema`` (mapping,
    list or JSON string).
    """
    cfg: Dict[str, Any] = {}
    if opts.temperature is not None:
        cfg["temperature"] = float(opts.temperature)
    if opts.top_p is not None:
        cfg["topP"] = float(opts.top_p)
    if opts.max_tokens is not None:
        cfg["maxOutputTokens"] = int(opts.max_tokens)
    if opts.stop:
        cfg["stopSequences"] = list(opts.stop)
    extra: Mapping[str, Any] = opts.gemini
    if (top_k := _positive_int(extra.get("top_k"))) is not None:
        cfg["topK"] = top_k
    count = _positive_int(extra.get("candidate_count")) or _positive_int(extra.get("n"))
    if count is not None:
        cfg["candidateCount"] = count
    mime = extra.get("response_mime_type")
    if isinstance(mime, str) and mime.strip():
        cfg["responseMimeType"] = mime.strip()
    if "response_schema" in extra:
        schema = _response_schema(extra["response_schema"])
        if schema is not None:
            cfg["responseSchema"] = schema
    return cfg or None


def build_payload(request: Request, *, provider: str, model: str) -> Dict[str, Any]:
    """Assemble the ``generateContent`` JSON body."""
    system, contents = to_contents(request.messages, provider=provider, model=model)
    payload: Dict[str, Any] = {"contents": contents}
    if system is not None:
        payload["systemInstruction"] = system
    tools = to_tools(request.tools)
    if tools:
        payload["tools"] = tools
        if request.tool_choice is not None:
            payload["toolConfig"] = {"functionCallingConfig": to_function_calling_config(request.tool_choice)}
    gen = to_generation_config(request.options)
    if gen is not None:
        payload["generationConfig"] = gen
    return payload


# ----- response -----


def to_result(body: Mapping[str, Any], fallback_model: str) -> Result:
    """Convert a ``generateContent`` response body.

    Only the first candidate is read. Function calls get ids ``call_<n>`` (the
    part position, 1-based) with the thought signature encoded into them.
    """
    meta = body.get("usageMetadata") or {}
    result = Result(
        model=body.get("modelVersion") or fallback_model,
        usage=Usage.of(
            meta.get("promptTokenCount"),
            meta.get("candidatesTokenCount"),
            meta.get("totalTokenCount"),
        ),
        raw=body,
    )
    candidates = body.get("candidates") or []
    if not candidates:
        return result
    parts = ((candidates[0] or {}).get("content") or {}).get("parts") or []
    texts: List[str] = []
    calls: List[ToolCall] = []
    for i, part in enumerate(parts):
        text = part.get("text")
        if isinstance(text, str) and text.strip():
            texts.append(text)
        fn = part.get("functionCall")
        if isinstance(fn, dict):
            args = fn.get("args")
            signature = (part.get("thoughtSignature") or "").strip()
            calls.append(
                ToolCall(
                    id=encode_tool_call_id(f"call_{i + 1}", signature),
                    function=ToolCallFunction(
                        name=fn.get("name") or "",
                        arguments=json.dumps(args, ensure_ascii=False) if args is not None else "{}",
                    ),
                    thought_signature=signature or None,
                )
            )
    result.text = "".join(texts)
    result.parts = [Part(type=PART_TEXT, text=result.text)] if result.text else []
    result.tool_calls = calls
    return result


__all__ = [
    "build_payload",
    "to_contents",
    "to_function_calling_config",
    "to_gemini_schema",
    "to_generation_config",
    "to_result",
    "to_tools",
]
