"""Anthropic Messages adapter: request mapping, responses and SSE streaming."""

from __future__ import annotations

import json
from typing import List

import httpx
import pytest

from uniai.anthropic import AnthropicProvider
from uniai.anthropic.conversion import build_params, to_system_and_messages, to_tool_choice
from uniai.base.errors import ErrorCode, ProviderError, ValidationError
from uniai.base.models import ToolCall, ToolCallFunction, ToolChoice
from uniai.base.request_builder import (
    assistant_tool_calls,
    build_request,
    function_tool,
    system,
    tool_result,
    user,
    with_anthropic_options,
    with_messages,
    with_on_stream,
    with_stop,
    with_tools,
    with_user,
)
from uniai.base.streaming import StreamEvent
from uniai.config.settings import ProviderSettings

BASE_URL = "https://api.anthropic.com"
MODEL = "claude-3-5-sonnet-latest"


def _message(content: list, *, stop_reason="end_turn") -> dict:
    return {
        "id": "msg_1",
        "type": "message",
        "role": "assistant",
        "model": MODEL,
        "content": content,
        "stop_reason": stop_reason,
        "stop_sequence": None,
        "usage": {"input_tokens": 4, "output_tokens": 3},
    }


def _provider(client: httpx.Client) -> AnthropicProvider:
    return AnthropicProvider(
        ProviderSettings(name="anthropic", api_key="ak-test", base_url=BASE_URL, model=MODEL),
        http_client=client,
    )


def _call(call_id="toolu_1", name="get_weather", arguments='{"city":"Paris"}') -> ToolCall:
    return ToolCall(id=call_id, function=ToolCallFunction(name=name, arguments=arguments))


class TestMapping:
    def test_system_joined_and_default_max_tokens(self):
        req = build_request(with_messages(system("one"), system("two"), user("hi")))
        params = build_params(req, MODEL)
        assert params["system"] == "one\ntwo"  # nosec B101
        assert params["max_tokens"] == 8192  # nosec B101
        assert params["messages"] == [{"role": "user", "content": [{"type": "text", "text": "hi"}]}]  # nosec B101

    def test_tool_round_trip_history(self):
        calls = [_call("toolu_1"), _call("toolu_2", arguments="{}")]
        req = build_request(
            with_messages(
                user("weather?"),
                assistant_tool_calls(calls, text="checking"),
                tool_result("toolu_1", "sunny"),
                tool_result("toolu_2", "rainy"),
            )
        )
        _, messages = to_system_and_messages(req.messages)
        assistant_blocks = messages[1]["content"]
        assert assistant_blocks[0] == {"type": "text", "text": "checking"}  # nosec B101
        assert assistant_blocks[1]["input"] == {"city": "Paris"}  # nosec B101
        # Consecutive tool results share one user turn.
        assert len(messages) == 3  # nosec B101
        assert [b["tool_use_id"] for b in messages[2]["content"]] == ["toolu_1", "toolu_2"]  # nosec B101

    def test_invalid_replayed_arguments(self):
        req = build_request(
            with_messages(user("x"), assistant_tool_calls([_call(arguments="{bad")]), tool_result("toolu_1", "ok"))
        )
        with pytest.raises(ValidationError):
            to_system_and_messages(req.messages)

    @pytest.mark.parametrize(
        "choice, expected",
        [
            (ToolChoice(mode="auto"), {"type": "auto"}),
            (ToolChoice(mode="none"), {"type": "none"}),
            (ToolChoice(mode="required"), {"type": "any"}),
            (ToolChoice(mode="function", function_name="f"), {"type": "tool", "name": "f"}),
        ],
    )
    def test_tool_choice(self, choice, expected):
        assert to_tool_choice(choice) == expected  # nosec B101

    def test_escape_hatch_fields(self):
        req = build_request(
            with_messages(user("hi")),
            with_stop("END"),
            with_user("u-1"),
            with_anthropic_options({"top_k": 5, "metadata": {"user_id": "u-2"}, "service_tier": "auto"}),
        )
        params = build_params(req, MODEL)
        assert params["stop_sequences"] == ["END"]  # nosec B101
        assert params["top_k"] == 5  # nosec B101
        assert params["metadata"] == {"user_id": "u-2"}  # nosec B101
        assert params["extra_body"] == {"service_tier": "auto"}  # nosec B101


def test_chat_posts_messages_request(mock_http):
    reply = _message(
        [
            {"type": "text", "text": "Let me check."},
            {"type": "tool_use", "id": "toolu_9", "name": "get_weather", "input": {"city": "Paris"}},
        ],
        stop_reason="tool_use",
    )
    client = mock_http(lambda req: httpx.Response(200, json=reply))
    weather = function_tool("get_weather", "Weather", {"type": "object", "properties": {"city": {"type": "string"}}})
    result = _provider(client).chat(build_request(with_messages(system("sys"), user("weather?")), with_tools(weather)))

    sent = client.recorder.requests[0]
    assert str(sent.url) == f"{BASE_URL}/v1/messages"  # nosec B101
    assert sent.headers["x-api-key"] == "ak-test"  # nosec B101
    body = json.loads(sent.content)
    assert body["system"] == "sys"  # nosec B101
    assert body["tools"][0]["input_schema"]["properties"]["city"] == {"type": "string"}  # nosec B101
    assert result.text == "Let me check."  # nosec B101
    assert result.tool_calls[0].id == "toolu_9"  # nosec B101
    assert json.loads(result.tool_calls[0].function.arguments) == {"city": "Paris"}  # nosec B101
    assert result.usage.total_tokens == 7  # nosec B101


def test_streaming_events(mock_http, sse):
    events = [
        {"type": "message_start", "message": dict(_message([], stop_reason=None), usage={"input_tokens": 4, "output_tokens": 1})},
        {"type": "content_block_start", "index": 0, "content_block": {"type": "text", "text": ""}},
        {"type": "content_block_delta", "index": 0, "delta": {"type": "text_delta", "text": "Hi"}},
        {"type": "content_block_delta", "index": 0, "delta": {"type": "text_delta", "text": " there"}},
        {"type": "content_block_stop", "index": 0},
        {
            "type": "content_block_start",
            "index": 1,
            "content_block": {"type": "tool_use", "id": "toolu_1", "name": "f", "input": {}},
        },
        {"type": "content_block_delta", "index": 1, "delta": {"type": "input_json_delta", "partial_json": '{"x":'}},
        {"type": "content_block_delta", "index": 1, "delta": {"type": "input_json_delta", "partial_json": "2}"}},
        {"type": "content_block_stop", "index": 1},
        {"type": "message_delta", "delta": {"stop_reason": "tool_use", "stop_sequence": None}, "usage": {"output_tokens": 9}},
        {"type": "message_stop"},
    ]
    client = mock_http(lambda req: sse(events, named=True))
    seen: List[StreamEvent] = []
    result = _provider(client).chat(build_request(with_messages(user("hi")), with_on_stream(seen.append)))

    assert client.recorder.json_bodies()[0]["stream"] is True  # nosec B101
    assert [e.delta for e in seen if e.delta] == ["Hi", " there"]  # nosec B101
    assert sum(1 for e in seen if e.done) == 1  # nosec B101
    assert result.text == "Hi there"  # nosec B101
    assert result.tool_calls[0].function.arguments == '{"x":2}'  # nosec B101
    assert (result.usage.input_tokens, result.usage.output_tokens) == (4, 9)  # nosec B101


def test_rate_limit_is_retryable(mock_http):
    body = {"type": "error", "error": {"type": "rate_limit_error", "message": "slow down"}}
    client = mock_http(lambda req: httpx.Response(429, json=body))
    with pytest.raises(ProviderError) as ei:
        _provider(client).chat(build_request(with_messages(user("hi"))))
    assert ei.value.code is ErrorCode.RATE_LIMIT  # nosec B101
    assert ei.value.retryable is True  # nosec B101
