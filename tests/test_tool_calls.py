"""Tests for tool-call argument parsing."""

from graphmem.utils.tool_calls import ParsedArguments, ParseFailure, ToolCall, parse_tool_call


class TestParseToolCall:

    def test_valid_object(self):
        result = parse_tool_call(ToolCall(name='extract_entities', arguments='{"entities": []}'))
        assert result == ParsedArguments(name='extract_entities', arguments={'entities': []})

    def test_code_fenced_arguments(self):
        result = parse_tool_call(ToolCall(name='x', arguments='```json\n{"a": 1}\n```'))
        assert isinstance(result, ParsedArguments)
        assert result.arguments == {'a': 1}

    def test_malformed_json(self):
        result = parse_tool_call(ToolCall(name='x', arguments='{"a": '))
        assert isinstance(result, ParseFailure)
        assert result.raw == '{"a": '

    def test_empty_arguments(self):
        result = parse_tool_call(ToolCall(name='x', arguments='  '))
        assert isinstance(result, ParseFailure)
        assert result.error == 'empty arguments'

    def test_non_object_json(self):
        result = parse_tool_call(ToolCall(name='x', arguments='[1, 2]'))
        assert isinstance(result, ParseFailure)
        assert 'list' in result.error
