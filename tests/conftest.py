"""Shared fixtures: fake model collaborators and a mocked graph store."""

import json
from unittest.mock import AsyncMock, Mock

import pytest

from graphmem.utils.config import load_config
from graphmem.utils.tool_calls import LLMResponse, ToolCall


def tool_response(*calls):
    """Build an LLMResponse from (name, arguments) pairs; dict arguments are JSON-encoded."""
    tool_calls = []
    for name, arguments in calls:
        if not isinstance(arguments, str):
            arguments = json.dumps(arguments)
        tool_calls.append(ToolCall(name=name, arguments=arguments))
    return LLMResponse(content='', tool_calls=tool_calls)


@pytest.fixture
def app_config(monkeypatch):
    monkeypatch.setenv('GRAPH_STORE_PROVIDER', 'falkordb')
    monkeypatch.delenv('GRAPH_STORE_LLM_PROVIDER', raising=False)
    monkeypatch.delenv('GRAPH_STORE_CUSTOM_PROMPT', raising=False)
    return load_config()


@pytest.fixture
def mock_llm():
    llm = Mock()
    llm.generate_response = AsyncMock(return_value=LLMResponse())
    return llm


@pytest.fixture
def mock_embedder():
    embedder = Mock()
    embedder.embed = AsyncMock(side_effect=lambda text: [float(len(text)), 1.0, 0.0])
    return embedder


@pytest.fixture
def mock_graph():
    graph = Mock()
    graph.query = AsyncMock(return_value=[])
    graph.close = AsyncMock()
    graph.graph_name_for = Mock(side_effect=lambda tenant_id: f'mem0_{tenant_id}')
    return graph
