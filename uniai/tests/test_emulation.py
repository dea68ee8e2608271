"""Tool-calling emulation: decision request, policy checks and the engine flow."""

from __future__ import annotations

import json
from typing import List, Tuple

import pytest

from uniai.base.dispatcher import Dispatcher
from uniai.base.errors import (
    ConfigError,
    EmulationParseError,
    EmulationPolicyViolation,
    ProviderError,
    UnknownToolError,
    ValidationError,
)
from uniai.base.models import (
    WARNING_TOOL_CALLS_EMULATED,
    EmulationMode,
    ToolCall,
    ToolCallFunction,
    ToolChoice,
    Usage,
)
from uniai.base.request_builder import (
    assistant,
    assistant_tool_calls,
    build_request,
    function_tool,
    system,
    tool_choice_function,
    tool_choice_none,
    tool_choice_required,
    tool_result,
    user,
    with_debug_sink,
    with_messages,
    with_model,
    with_on_stream,
    with_tool_choice,
    with_tools,
)
from uniai.emulation import (
    DecisionCall,
    ToolEmulationEngine,
    build_decision_prompt,
    build_decision_request,
    build_final_request,
    enforce_tool_choice,
    ensure_known_tools,
)
from uniai.mock import MockProvider, MockReply

WEATHER = function_tool(
    "get_weather",
    "Look up current weather",
    {"type": "object", "properties": {"city": {"type": "string"}, "days": {"type": "array"}}},
)
FENCED_DECISION = '```json\n{"tool":"get_weather","arguments":{"city":"Tokyo"}}\n```'


def _request(*extra):
    return build_request(
        with_model("m"),
        with_messages(user("What's the weather in Tokyo?")),
        with_tools(WEATHER),
        *extra,
    )


def _engine(*replies, debug: bool = False) -> Tuple[ToolEmulationEngine, MockProvider]:
    mock = MockProvider(list(replies))
    return ToolEmulationEngine(Dispatcher({"mock": mock}, default_provider="mock"), debug=debug), mock


class TestDecisionRequest:
    def test_prompt_lists_normalized_tools_and_formats(self):
        prompt = build_decision_prompt(_request())
        assert prompt.startswith("You are a tool-calling emulation engine.")  # nosec B101
        assert '{"tools":[{"tool":"<name>","arguments":{...}}]}' in prompt  # nosec B101
        assert '{"tool":"<name>"|null,"arguments":{...}}' in prompt  # nosec B101
        listed = json.loads(prompt.split("Available tools (JSON): ", 1)[1].splitlines()[0])
        assert listed[0]["name"] == "get_weather"  # nosec B101
        assert listed[0]["parameters"]["properties"]["days"]["items"] == {}  # nosec B101
        assert "items" not in WEATHER.parameters["properties"]["days"]  # nosec B101

    @pytest.mark.parametrize(
        "choice, line",
        [
            (tool_choice_none(), 'Tool choice: none. You MUST return {"tools":[]}.'),
            (tool_choice_required(), "Tool choice: required. You MUST return at least one tool in tools[]."),
            (tool_choice_function("get_weather"), 'exactly one tool named "get_weather"'),
        ],
    )
    def test_prompt_states_tool_choice(self, choice, line):
        assert line in build_decision_prompt(_request(with_tool_choice(choice)))  # nosec B101

    def test_prompt_requires_function_tools(self):
        req = _request()
        req.tools = []
        with pytest.raises(ValidationError):
            build_decision_prompt(req)

    def test_history_is_reduced(self):
        call = ToolCall(id="c1", function=ToolCallFunction(name="get_weather", arguments="{}"))
        req = build_request(
            with_model("m"),
            with_messages(
                system("original system"),
                user("first question"),
                assistant("first answer"),
                user("second question"),
                assistant_tool_calls([call], text="checking"),
                tool_result("c1", {"temp": 20}),
            ),
            with_tools(WEATHER),
            with_tool_choice(tool_choice_required()),
        )
        out = build_decision_request(req)
        roles = [m.role for m in out.messages]
        assert roles == ["system", "user", "user", "assistant"]  # nosec B101
        assert out.messages[0].content.startswith("You are a tool-calling emulation engine.")  # nosec B101
        assert out.messages[3].content == "checking"  # nosec B101
        assert out.messages[3].tool_calls is None  # nosec B101
        assert out.tools == [] and out.tool_choice is None  # nosec B101
        assert out.options.emulation_mode is EmulationMode.OFF  # nosec B101
        # The caller's request is untouched.
        assert len(req.messages) == 6 and req.messages[4].tool_calls  # nosec B101

    def test_latest_assistant_without_text_is_dropped(self):
        call = ToolCall(id="c1", function=ToolCallFunction(name="get_weather"))
        req = build_request(
            with_messages(user("q"), assistant_tool_calls([call]), tool_result("c1", "ok")),
            with_tools(WEATHER),
        )
        assert [m.role for m in build_decision_request(req).messages] == ["system", "user"]  # nosec B101

    def test_decision_never_streams_but_final_does(self):
        req = _request(with_on_stream(lambda event: None))
        assert build_decision_request(req).options.on_stream is None  # nosec B101
        final = build_final_request(req)
        assert final.options.on_stream is req.options.on_stream  # nosec B101
        assert final.messages[0].content == req.messages[0].content  # nosec B101
        assert final.tools == []  # nosec B101


class TestPolicy:
    def test_none_forbids_calls(self):
        with pytest.raises(EmulationPolicyViolation):
            enforce_tool_choice(ToolChoice(mode="none"), [DecisionCall("get_weather")])
        enforce_tool_choice(ToolChoice(mode="none"), [])

    def test_required_needs_a_call(self):
        with pytest.raises(EmulationPolicyViolation):
            enforce_tool_choice(ToolChoice(mode="required"), [])
        enforce_tool_choice(ToolChoice(mode="required"), [DecisionCall("a"), DecisionCall("b")])

    @pytest.mark.parametrize(
        "calls",
        [[], [DecisionCall("other")], [DecisionCall("get_weather"), DecisionCall("get_weather")]],
    )
    def test_function_needs_exactly_the_named_call(self, calls):
        with pytest.raises(EmulationPolicyViolation):
            enforce_tool_choice(ToolChoice(mode="function", function_name="get_weather"), calls)

    def test_auto_and_unset_accept_anything(self):
        enforce_tool_choice(None, [DecisionCall("x")])
        enforce_tool_choice(ToolChoice(mode="auto"), [])

    def test_unknown_tool(self):
        with pytest.raises(UnknownToolError) as ei:
            ensure_known_tools([WEATHER], [DecisionCall("get_weather"), DecisionCall("search")])
        assert ei.value.tool_name == "search"  # nosec B101


class TestEngine:
    def test_off_mode_dispatches_once(self):
        engine, mock = _engine(MockReply(text="plain"))
        result = engine.chat(_request(), mode=EmulationMode.OFF)
        assert result.text == "plain"  # nosec B101
        assert result.warnings == []  # nosec B101
        assert mock.requests[0].tools  # nosec B101

    def test_force_with_fenced_required_decision(self):
        engine, mock = _engine(MockReply(text=FENCED_DECISION, usage=Usage.of(10, 5), model="decider-1"))
        result = engine.chat(_request(with_tool_choice(tool_choice_required())), mode="force")
        assert len(result.tool_calls) == 1  # nosec B101
        call = result.tool_calls[0]
        assert call.function.name == "get_weather"  # nosec B101
        assert json.loads(call.function.arguments) == {"city": "Tokyo"}  # nosec B101
        assert call.id.startswith("emulated_") and call.id.endswith("_0")  # nosec B101
        assert call.type == "function"  # nosec B101
        assert result.warnings == [WARNING_TOOL_CALLS_EMULATED]  # nosec B101
        assert result.text == ""  # nosec B101
        assert result.model == "decider-1"  # nosec B101
        assert result.usage.total_tokens == 15  # nosec B101
        assert mock.calls == 1  # nosec B101
        assert mock.requests[0].tools == []  # nosec B101

    def test_force_without_tools_dispatches_directly(self):
        engine, mock = _engine(MockReply(text="hi"))
        req = build_request(with_messages(user("hi")))
        assert engine.chat(req, mode=EmulationMode.FORCE).warnings == []  # nosec B101
        assert mock.calls == 1  # nosec B101

    def test_fallback_returns_native_tool_calls(self):
        native = ToolCall(id="call_1", function=ToolCallFunction(name="get_weather", arguments="{}"))
        engine, mock = _engine(MockReply(tool_calls=[native]))
        result = engine.chat(_request(), mode=EmulationMode.FALLBACK)
        assert result.tool_calls[0].id == "call_1"  # nosec B101
        assert result.warnings == []  # nosec B101
        assert mock.calls == 1  # nosec B101

    def test_fallback_no_tool_decided_reissues_original(self):
        engine, mock = _engine(
            MockReply(text="I think it is sunny."),
            MockReply(text='{"tools":[]}'),
            MockReply(text="Probably sunny in Tokyo."),
        )
        result = engine.chat(_request(), mode=EmulationMode.FALLBACK)
        assert mock.calls == 3  # nosec B101
        assert result.text == "Probably sunny in Tokyo."  # nosec B101
        assert result.tool_calls == []  # nosec B101
        assert result.warnings == [WARNING_TOOL_CALLS_EMULATED]  # nosec B101
        final = mock.requests[2]
        assert final.tools == [] and final.tool_choice is None  # nosec B101
        assert [m.content for m in final.messages] == ["What's the weather in Tokyo?"]  # nosec B101

    def test_fallback_decides_tools_after_empty_native(self):
        engine, mock = _engine(
            MockReply(text="no tools here"),
            MockReply(text='{"tools":[{"tool":"get_weather","arguments":{"city":"Paris"}}]}'),
        )
        result = engine.chat(_request(), mode=EmulationMode.FALLBACK)
        assert mock.calls == 2  # nosec B101
        assert [c.function.name for c in result.tool_calls] == ["get_weather"]  # nosec B101

    def test_required_without_decided_call_fails_without_final_call(self):
        engine, mock = _engine(MockReply(text='{"tool": null}'))
        with pytest.raises(EmulationPolicyViolation):
            engine.chat(_request(with_tool_choice(tool_choice_required())), mode=EmulationMode.FORCE)
        assert mock.calls == 1  # nosec B101

    def test_function_choice_mismatch(self):
        engine, _ = _engine(MockReply(text='{"tool":"get_weather"}'))
        other = function_tool("get_time")
        req = build_request(
            with_messages(user("q")),
            with_tools(WEATHER, other),
            with_tool_choice(tool_choice_function("get_time")),
        )
        with pytest.raises(EmulationPolicyViolation):
            engine.chat(req, mode=EmulationMode.FORCE)

    def test_unknown_tool_aborts(self):
        engine, _ = _engine(MockReply(text='{"tool":"search","arguments":{}}'))
        with pytest.raises(UnknownToolError) as ei:
            engine.chat(_request(), mode=EmulationMode.FORCE)
        assert ei.value.provider == "mock"  # nosec B101

    def test_unparseable_decision_aborts(self):
        engine, mock = _engine(MockReply(text="Let me think about it."))
        with pytest.raises(EmulationParseError):
            engine.chat(_request(), mode=EmulationMode.FORCE)
        assert mock.calls == 1  # nosec B101

    def test_provider_error_in_decision_propagates(self):
        boom = ProviderError(message="HTTP 500: down", provider="mock", status_code=500)
        engine, _ = _engine(MockReply(error=boom))
        with pytest.raises(ProviderError) as ei:
            engine.chat(_request(), mode=EmulationMode.FORCE)
        assert ei.value is boom  # nosec B101

    def test_unknown_mode_is_config_error(self):
        engine, mock = _engine(MockReply(text="x"))
        with pytest.raises(ConfigError) as ei:
            engine.chat(_request(), mode="sometimes")
        assert ei.value.stage == "config"  # nosec B101
        assert mock.calls == 0  # nosec B101

    def test_mode_defaults_to_request_option(self):
        engine, mock = _engine(MockReply(text='{"tool":"get_weather"}'))
        req = _request()
        req.options.emulation_mode = EmulationMode.FORCE
        assert engine.chat(req).tool_calls  # nosec B101
        assert mock.requests[0].tools == []  # nosec B101

    def test_debug_sink_labels(self):
        labels: List[str] = []
        engine, _ = _engine(MockReply(text='{"tools":[]}'), MockReply(text="final"))
        engine.chat(_request(with_debug_sink(lambda label, payload: labels.append(label))), mode="force")
        assert labels == [  # nosec B101
            "tool_emulation.start",
            "tool_emulation.decision_request",
            "tool_emulation.decision_response",
            "tool_emulation.parsed_calls",
            "tool_emulation.final_request",
        ]

    def test_streaming_fallback_streams_native_and_final_only(self):
        events = []
        engine, mock = _engine(
            MockReply(text="native"),
            MockReply(text='{"tools":[]}'),
            MockReply(text="final answer"),
        )
        result = engine.chat(_request(with_on_stream(events.append)), mode=EmulationMode.FALLBACK)
        assert mock.requests[1].options.on_stream is None  # nosec B101
        assert mock.requests[2].options.on_stream is not None  # nosec B101
        deltas = "".join(e.delta for e in events)
        assert deltas == "nativefinal answer"  # nosec B101
        assert sum(1 for e in events if e.done) == 2  # nosec B101
        assert result.text == "final answer"  # nosec B101

    def test_streaming_force_replays_emulated_calls(self):
        events = []
        engine, _ = _engine(MockReply(text='{"tool":"get_weather","arguments":{"city":"Tokyo"}}'))
        result = engine.chat(_request(with_on_stream(events.append)), mode=EmulationMode.FORCE)
        deltas = [e.tool_call_delta for e in events if e.tool_call_delta is not None]
        assert [d.name for d in deltas] == ["get_weather"]  # nosec B101
        assert deltas[0].id == result.tool_calls[0].id  # nosec B101
        assert events[-1].done is True  # nosec B101
