"""OpenAI-compatible adapter over a mocked transport."""

from __future__ import annotations

from typing import List

import httpx
import pytest

from uniai.base.errors import ConfigError, ErrorCode, ProviderError
from uniai.base.models import ToolCall, ToolCallFunction
from uniai.base.request_builder import (
    assistant_tool_calls,
    build_request,
    function_tool,
    system,
    tool_choice_function,
    tool_result,
    user,
    with_max_tokens,
    with_messages,
    with_model,
    with_on_stream,
    with_openai_options,
    with_temperature,
    with_tool_choice,
    with_tools,
)
from uniai.base.streaming import StreamEvent
from uniai.base.tools import encode_tool_call_id
from uniai.config.defaults import GEMINI_THOUGHT_SIGNATURE_BYPASS
from uniai.config.settings import ProviderSettings
from uniai.openai import OpenAIProvider
from uniai.openai.conversion import build_chat_params

BASE_URL = "https://api.openai.com/v1"


def _completion(**message) -> dict:
    message.setdefault("role", "assistant")
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "created": 0,
        "model": "gpt-4o-mini",
        "choices": [{"index": 0, "message": message, "finish_reason": "stop"}],
        "usage": {"prompt_tokens": 5, "completion_tokens": 2, "total_tokens": 7},
    }


def _chunk(delta: dict, *, usage=None, choices=True) -> dict:
    out = {
        "id": "chatcmpl-1",
        "object": "chat.completion.chunk",
        "created": 0,
        "model": "gpt-4o-mini",
        "choices": [{"index": 0, "delta": delta, "finish_reason": None}] if choices else [],
    }
    if usage is not None:
        out["usage"] = usage
    return out


def _provider(client: httpx.Client, *, api_key="sk-test", name="openai", base_url=BASE_URL) -> OpenAIProvider:
    return OpenAIProvider(
        ProviderSettings(name=name, api_key=api_key, base_url=base_url, model="gpt-4o-mini"),
        http_client=client,
    )


def test_chat_posts_completion_request(mock_http):
    client = mock_http(lambda req: httpx.Response(200, json=_completion(content="Hello")))
    weather = function_tool("get_weather", "Look up weather", {"type": "object", "properties": {"days": {"type": "array"}}})
    req = build_request(
        with_messages(system("be brief"), user("hi")),
        with_temperature(0.2),
        with_max_tokens(64),
        with_tools(weather),
        with_tool_choice(tool_choice_function("get_weather")),
        with_openai_options({"seed": 7}),
    )
    result = _provider(client).chat(req)

    assert result.text == "Hello"  # nosec B101
    assert result.provider == "openai"  # nosec B101
    assert result.usage.total_tokens == 7  # nosec B101
    sent = client.recorder.requests[0]
    assert str(sent.url) == f"{BASE_URL}/chat/completions"  # nosec B101
    assert sent.headers["authorization"] == "Bearer sk-test"  # nosec B101
    body = client.recorder.json_bodies()[0]
    assert body["model"] == "gpt-4o-mini"  # nosec B101
    assert [m["role"] for m in body["messages"]] == ["system", "user"]  # nosec B101
    assert body["max_tokens"] == 64  # nosec B101
    assert body["seed"] == 7  # nosec B101
    assert body["tool_choice"] == {"type": "function", "function": {"name": "get_weather"}}  # nosec B101
    params = body["tools"][0]["function"]["parameters"]
    assert params["properties"]["days"]["items"] == {}  # nosec B101


def test_tool_calls_are_returned(mock_http):
    reply = _completion(
        content=None,
        tool_calls=[
            {"id": "call_1", "type": "function", "function": {"name": "get_weather", "arguments": '{"city":"Tokyo"}'}}
        ],
    )
    client = mock_http(lambda req: httpx.Response(200, json=reply))
    result = _provider(client).chat(build_request(with_messages(user("weather?"))))
    assert result.text == ""  # nosec B101
    assert [(c.id, c.function.name) for c in result.tool_calls] == [("call_1", "get_weather")]  # nosec B101
    assert result.tool_calls[0].function.arguments == '{"city":"Tokyo"}'  # nosec B101


def test_streaming_emits_deltas_and_one_done(mock_http, sse):
    chunks = [
        _chunk({"role": "assistant", "content": "Hel"}),
        _chunk({"content": "lo"}),
        _chunk(
            {
                "tool_calls": [
                    {"index": 0, "id": "call_1", "type": "function", "function": {"name": "f", "arguments": '{"a"'}}
                ]
            }
        ),
        _chunk({"tool_calls": [{"index": 0, "function": {"arguments": ":1}"}}]}),
        _chunk({}, choices=False, usage={"prompt_tokens": 3, "completion_tokens": 4, "total_tokens": 7}),
    ]
    client = mock_http(lambda req: sse(chunks, done=True))
    events: List[StreamEvent] = []
    result = _provider(client).chat(build_request(with_messages(user("hi")), with_on_stream(events.append)))

    body = client.recorder.json_bodies()[0]
    assert body["stream"] is True  # nosec B101
    assert body["stream_options"] == {"include_usage": True}  # nosec B101
    assert "".join(e.delta for e in events if e.delta) == "Hello"  # nosec B101
    assert [e.done for e in events].count(True) == 1  # nosec B101
    assert events[-1].done is True  # nosec B101
    assert result.text == "Hello"  # nosec B101
    assert result.tool_calls[0].function.arguments == '{"a":1}'  # nosec B101
    assert result.usage.total_tokens == 7  # nosec B101


def test_status_error_is_classified(mock_http):
    client = mock_http(lambda req: httpx.Response(401, json={"error": {"message": "bad key", "type": "invalid_request_error"}}))
    with pytest.raises(ProviderError) as ei:
        _provider(client).chat(build_request(with_messages(user("hi"))))
    assert ei.value.code is ErrorCode.AUTH  # nosec B101
    assert ei.value.status_code == 401  # nosec B101
    assert ei.value.provider == "openai"  # nosec B101


def test_missing_key_fails_before_network(mock_http):
    client = mock_http(lambda req: httpx.Response(200, json=_completion(content="x")))
    with pytest.raises(ConfigError):
        _provider(client, api_key=None).chat(build_request(with_messages(user("hi"))))
    assert client.recorder.requests == []  # nosec B101


def test_reasoning_models_use_max_completion_tokens():
    req = build_request(with_messages(user("hi")), with_max_tokens(10))
    params = build_chat_params(req, "o1-mini")
    assert params["max_completion_tokens"] == 10  # nosec B101
    assert "max_tokens" not in params  # nosec B101


def test_string_response_format_is_wrapped():
    req = build_request(with_messages(user("hi")), with_openai_options({"response_format": "json_object"}))
    params = build_chat_params(req, "gpt-4o-mini")
    assert params["extra_body"]["response_format"] == {"type": "json_object"}  # nosec B101


class TestGeminiCompatibleReplay:
    def _history(self, call: ToolCall):
        return build_request(
            with_model("gemini-2.5-flash"),
            with_messages(user("weather?"), assistant_tool_calls([call]), tool_result(call.id, {"temp": 21})),
        )

    def test_signature_from_encoded_id(self):
        call = ToolCall(id=encode_tool_call_id("call_1", "sig-abc"), function=ToolCallFunction(name="get_weather"))
        params = build_chat_params(self._history(call), "gemini-2.5-flash")
        replayed = params["messages"][1]["tool_calls"][0]
        assert replayed["id"] == "call_1"  # nosec B101
        assert replayed["extra_content"] == {"google": {"thought_signature": "sig-abc"}}  # nosec B101
        assert params["messages"][2]["tool_call_id"] == "call_1"  # nosec B101

    def test_bypass_value_when_signature_missing(self):
        call = ToolCall(id="call_1", function=ToolCallFunction(name="get_weather"))
        params = build_chat_params(self._history(call), "gemini-2.5-flash")
        signature = params["messages"][1]["tool_calls"][0]["extra_content"]["google"]["thought_signature"]
        assert signature == GEMINI_THOUGHT_SIGNATURE_BYPASS  # nosec B101

    def test_non_gemini_models_send_plain_calls(self):
        call = ToolCall(id="call_1", function=ToolCallFunction(name="get_weather"))
        params = build_chat_params(self._history(call), "gpt-4o-mini")
        assert "extra_content" not in params["messages"][1]["tool_calls"][0]  # nosec B101

    def test_response_signature_is_kept(self, mock_http):
        reply = _completion(
            content=None,
            tool_calls=[
                {
                    "id": "call_1",
                    "type": "function",
                    "function": {"name": "get_weather", "arguments": "{}"},
                    "extra_content": {"google": {"thought_signature": "sig-xyz"}},
                }
            ],
        )
        client = mock_http(lambda req: httpx.Response(200, json=reply))
        provider = _provider(client, name="gemini_openai", base_url="https://gemini.example/v1beta/openai")
        result = provider.chat(build_request(with_model("gemini-2.5-flash"), with_messages(user("hi"))))
        assert result.tool_calls[0].thought_signature == "sig-xyz"  # nosec B101
        assert str(client.recorder.requests[0].url) == "https://gemini.example/v1beta/openai/chat/completions"  # nosec B101
