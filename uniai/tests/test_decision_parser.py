"""Tolerant parsing of emulation decision replies."""

from __future__ import annotations

import json

import pytest

from uniai.base.errors import EmulationParseError
from uniai.emulation.parser import (
    collect_candidates,
    find_json_snippets,
    parse_decision,
    repair_json,
    strip_non_json_lines,
    unquote_json,
)


def _names(calls):
    return [c.name for c in calls]


class TestParseDecision:
    def test_raw_single_tool(self):
        calls = parse_decision('{"tool":"get_weather","arguments":{"city":"Tokyo"}}')
        assert _names(calls) == ["get_weather"]  # nosec B101
        assert json.loads(calls[0].arguments) == {"city": "Tokyo"}  # nosec B101

    def test_fenced_json_block(self):
        text = '```json\n{"tool":"get_weather","arguments":{"city":"Tokyo"}}\n```'
        calls = parse_decision(text)
        assert _names(calls) == ["get_weather"]  # nosec B101

    def test_embedded_in_prose(self):
        text = 'Sure! I will call {"tools":[{"tool":"a","arguments":{}},{"tool":"b"}]} now.'
        calls = parse_decision(text)
        assert _names(calls) == ["a", "b"]  # nosec B101
        assert calls[1].arguments == "{}"  # nosec B101

    def test_object_after_long_preamble_on_same_line(self):
        text = 'Okay, after thinking about it I will call: {"tool":"get_weather","arguments":{"city":"Tokyo"}}'
        calls = parse_decision(text)
        assert _names(calls) == ["get_weather"]  # nosec B101
        assert json.loads(calls[0].arguments) == {"city": "Tokyo"}  # nosec B101

    def test_prose_only_reply_reports_invalid_json(self):
        with pytest.raises(EmulationParseError) as ei:
            parse_decision("I cannot help with that.")
        assert "invalid tool decision JSON" in ei.value.message  # nosec B101

    def test_multiline_object_after_prose_lines(self):
        text = "Here is my decision:\n{\n  \"tools\": [\n    {\"tool\": \"lookup\", \"arguments\": {\"q\": \"x\"}}\n  ]\n}\nThanks"
        assert _names(parse_decision(text)) == ["lookup"]  # nosec B101

    def test_quoted_json_string(self):
        text = json.dumps('{"tool":"a","arguments":{"k":1}}')
        assert _names(parse_decision(text)) == ["a"]  # nosec B101

    def test_trailing_comma_repaired(self):
        calls = parse_decision('{"tools":[{"tool":"a","arguments":{"k":1,}},]}')
        assert _names(calls) == ["a"]  # nosec B101
        assert json.loads(calls[0].arguments) == {"k": 1}  # nosec B101

    def test_unclosed_braces_repaired(self):
        assert _names(parse_decision('{"tool":"a","arguments":{"k":"v"')) == ["a"]  # nosec B101

    @pytest.mark.parametrize(
        "text",
        ['{"tools":[]}', '{"tool":null}', '{"tool":""}', '{"tool":"  ","arguments":{}}', '{"tools":null}'],
    )
    def test_no_tool_calls(self, text):
        assert parse_decision(text) == []  # nosec B101

    def test_tools_array_wins_over_tool(self):
        assert _names(parse_decision('{"tools":[{"tool":"a"}],"tool":"b"}')) == ["a"]  # nosec B101

    def test_stringified_arguments_decoded(self):
        calls = parse_decision('{"tool":"a","arguments":"{\\"k\\": 2}"}')
        assert json.loads(calls[0].arguments) == {"k": 2}  # nosec B101

    def test_valid_json_without_decision_means_no_calls(self):
        assert parse_decision('{"answer": 42}') == []  # nosec B101

    def test_later_candidate_with_decision_wins_over_plain_json(self):
        text = '{"note": "thinking"}\n{"tool": "a", "arguments": {}}'
        assert _names(parse_decision(text)) == ["a"]  # nosec B101

    @pytest.mark.parametrize(
        "text, fragment",
        [
            ('{"tool": 5}', "tool must be string or null"),
            ('{"tools": {"tool": "a"}}', "tools must be an array"),
            ('{"tool": "a", "arguments": "{not json"}', "valid JSON"),
        ],
    )
    def test_malformed_decision_raises(self, text, fragment):
        with pytest.raises(EmulationParseError) as ei:
            parse_decision(text)
        assert fragment in ei.value.message  # nosec B101
        assert ei.value.stage == "decision"  # nosec B101

    @pytest.mark.parametrize("text", ["", "   ", "I cannot help with that."])
    def test_unrecoverable_text_raises(self, text):
        with pytest.raises(EmulationParseError):
            parse_decision(text)


class TestHelpers:
    def test_strip_non_json_lines_keeps_open_value(self):
        text = "intro line\n{\n\"a\": 1\n}\noutro"
        assert strip_non_json_lines(text) == '{\n"a": 1\n}'  # nosec B101

    def test_strip_keeps_line_with_brace_near_start(self):
        assert strip_non_json_lines('Result: {"a":1}') == 'Result: {"a":1}'  # nosec B101

    def test_find_snippets_skips_unbalanced(self):
        assert find_json_snippets('x {"a":1} y [1,2] z {"b":') == ['{"a":1}', "[1,2]"]  # nosec B101

    def test_unquote_only_for_string_literals(self):
        assert unquote_json('"  {\\"a\\":1}  "') == '{"a":1}'  # nosec B101
        assert unquote_json("{}") == ""  # nosec B101
        assert unquote_json('"unterminated') == ""  # nosec B101

    def test_repair_closes_string_and_brackets(self):
        assert json.loads(repair_json('{"a": "x')) == {"a": "x"}  # nosec B101
        assert json.loads(repair_json('["x", "y')) == ["x", "y"]  # nosec B101
        assert repair_json("no json here") == ""  # nosec B101

    def test_candidates_include_fence_and_span(self):
        text = 'pre ```json\n{"a":1}\n``` post {"b":2}'
        candidates = collect_candidates(text)
        assert candidates[0] == text  # nosec B101
        assert '{"a":1}' in candidates  # nosec B101
        assert '{"b":2}' in candidates  # nosec B101
