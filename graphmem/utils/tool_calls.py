"""
Provider-neutral chat responses and tool-call argument parsing.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

from .json_utils import clean_json_response


@dataclass
class ToolCall:
    """A single tool invocation returned by the model."""
    name: str
    arguments: str  # JSON-encoded argument object


@dataclass
class LLMResponse:
    """Model output: plain text, tool invocations, or both."""
    content: str = ''
    tool_calls: List[ToolCall] = field(default_factory=list)


@dataclass(frozen=True)
class ParsedArguments:
    """Tool call whose arguments decoded to a JSON object."""
    name: str
    arguments: Dict[str, Any]


@dataclass(frozen=True)
class ParseFailure:
    """Tool call whose arguments were missing or malformed."""
    name: str
    raw: str
    error: str


ToolCallResult = Union[ParsedArguments, ParseFailure]


def parse_tool_call(call: ToolCall) -> ToolCallResult:
    """Decode a tool call's JSON arguments without raising.

    Args:
        call: Tool call as returned by the model

    Returns:
        ParsedArguments on success, ParseFailure otherwise
    """
    raw = call.arguments if isinstance(call.arguments, str) else ''
    if not raw.strip():
        return ParseFailure(name=call.name, raw=raw, error='empty arguments')

    try:
        decoded = json.loads(clean_json_response(raw))
    except json.JSONDecodeError as e:
        return ParseFailure(name=call.name, raw=raw, error=str(e))

    if not isinstance(decoded, dict):
        return ParseFailure(name=call.name, raw=raw, error=f'expected object, got {type(decoded).__name__}')

    return ParsedArguments(name=call.name, arguments=decoded)
