"""Tests for entity, relation and deletion extraction."""

import pytest

from conftest import tool_response
from graphmem.models.core import RelationshipTriple, SearchHit
from graphmem.services.entity_extraction import EntityExtractionService
from graphmem.utils.tool_calls import LLMResponse


def make_hit(source, relationship, destination):
    return SearchHit(source=source, source_id=1, relationship=relationship, relation_id=2, destination=destination,
                     destination_id=3, similarity=0.95)


class TestExtractEntities:

    @pytest.mark.asyncio
    async def test_normalizes_names_and_types(self, mock_llm):
        mock_llm.generate_response.return_value = tool_response(('extract_entities', {
            'entities': [{'entity': 'Alice', 'entity_type': 'Person'}, {'entity': 'New York', 'entity_type': 'City'}]
        }))
        service = EntityExtractionService(mock_llm)

        result = await service.extract_entities('Alice lives in New York', 'alice')

        assert result == {'alice': 'person', 'new_york': 'city'}

    @pytest.mark.asyncio
    async def test_prompt_mentions_tenant_and_passes_tool(self, mock_llm):
        service = EntityExtractionService(mock_llm)

        await service.extract_entities('I like tea', 'user-42')

        messages = mock_llm.generate_response.await_args.args[0]
        tools = mock_llm.generate_response.await_args.kwargs['tools']
        assert messages[0]['role'] == 'system'
        assert 'use user-42 as the source entity' in messages[0]['content']
        assert messages[1] == {'role': 'user', 'content': 'I like tea'}
        assert tools[0]['function']['name'] == 'extract_entities'

    @pytest.mark.asyncio
    async def test_malformed_arguments_yield_nothing(self, mock_llm):
        mock_llm.generate_response.return_value = tool_response(('extract_entities', '{"entities": [{"entity"'))
        service = EntityExtractionService(mock_llm)

        assert await service.extract_entities('text', 'alice') == {}

    @pytest.mark.asyncio
    async def test_malformed_payload_skipped_other_calls_kept(self, mock_llm):
        mock_llm.generate_response.return_value = tool_response(
            ('extract_entities', {'entities': 'not a list'}),
            ('extract_entities', {'entities': [{'entity': 'Bob', 'entity_type': 'person'}, {'entity': 'x'}]}),
            ('something_else', {'entities': [{'entity': 'Carol', 'entity_type': 'person'}]}),
        )
        service = EntityExtractionService(mock_llm)

        assert await service.extract_entities('text', 'alice') == {'bob': 'person'}

    @pytest.mark.asyncio
    async def test_no_tool_calls(self, mock_llm):
        mock_llm.generate_response.return_value = LLMResponse(content='nothing here')
        service = EntityExtractionService(mock_llm)

        assert await service.extract_entities('text', 'alice') == {}

    @pytest.mark.asyncio
    async def test_model_errors_propagate(self, mock_llm):
        mock_llm.generate_response.side_effect = RuntimeError('throttled')
        service = EntityExtractionService(mock_llm)

        with pytest.raises(RuntimeError):
            await service.extract_entities('text', 'alice')


class TestExtractRelations:

    @pytest.mark.asyncio
    async def test_first_tool_call_only(self, mock_llm):
        mock_llm.generate_response.return_value = tool_response(
            ('establish_relationships', {
                'entities': [{'source': 'Alice', 'relationship': 'Works At', 'destination': 'Acme Corp'}]
            }),
            ('establish_relationships', {'entities': [{'source': 'x', 'relationship': 'y', 'destination': 'z'}]}),
        )
        service = EntityExtractionService(mock_llm)

        relations = await service.extract_relations('Alice works at Acme Corp', 'alice', {'alice': 'person'})

        assert relations == [RelationshipTriple('alice', 'works_at', 'acme_corp')]

    @pytest.mark.asyncio
    async def test_prompt_without_custom_prompt(self, mock_llm):
        service = EntityExtractionService(mock_llm)

        await service.extract_relations('I met Bob', 'alice', {'alice': 'person', 'bob': 'person'})

        system, user = mock_llm.generate_response.await_args.args[0]
        assert 'Use "alice" as the source entity' in system['content']
        assert 'CUSTOM_PROMPT' not in system['content']
        assert 'USER_ID' not in system['content']
        assert system['content'].endswith('\nPlease provide your response in JSON format.')
        assert user['content'] == 'List of entities: alice, bob. \n\nText: I met Bob'

    @pytest.mark.asyncio
    async def test_custom_prompt_becomes_rule_four(self, mock_llm):
        service = EntityExtractionService(mock_llm)

        await service.extract_relations('I met Bob', 'alice', {'bob': 'person'}, custom_prompt='Ignore pets.')

        system, user = mock_llm.generate_response.await_args.args[0]
        assert '4. Ignore pets.' in system['content']
        assert user['content'].startswith('List of entities: bob.')

    @pytest.mark.asyncio
    async def test_incomplete_items_skipped(self, mock_llm):
        mock_llm.generate_response.return_value = tool_response(('establish_relationships', {
            'entities': [
                {'source': 'alice', 'relationship': 'likes'},
                {'source': 'alice', 'relationship': 'likes', 'destination': 'tea'},
            ]
        }))
        service = EntityExtractionService(mock_llm)

        relations = await service.extract_relations('text', 'alice', {})

        assert relations == [RelationshipTriple('alice', 'likes', 'tea')]

    @pytest.mark.asyncio
    async def test_unparseable_first_call_returns_empty(self, mock_llm):
        mock_llm.generate_response.return_value = tool_response(('establish_relationships', 'oops'))
        service = EntityExtractionService(mock_llm)

        assert await service.extract_relations('text', 'alice', {}) == []


class TestDecideDeletions:

    @pytest.mark.asyncio
    async def test_formats_memories_and_collects_deletions(self, mock_llm):
        mock_llm.generate_response.return_value = tool_response(
            ('delete_graph_memory', {'source': 'Alice', 'relationship': 'Lives In', 'destination': 'Paris'}),
            ('delete_graph_memory', '{broken'),
        )
        service = EntityExtractionService(mock_llm)
        hits = [make_hit('alice', 'lives_in', 'paris'), make_hit('alice', 'likes', 'tea')]

        deletions = await service.decide_deletions(hits, 'Alice moved to Berlin', 'alice')

        assert deletions == [RelationshipTriple('alice', 'lives_in', 'paris')]
        system, user = mock_llm.generate_response.await_args.args[0]
        assert 'USER_ID' not in system['content']
        assert user['content'] == ('Here are the existing memories: alice -- lives_in -- paris\nalice -- likes -- tea '
                                   '\n\n New Information: Alice moved to Berlin')
        assert mock_llm.generate_response.await_args.kwargs['tools'][0]['function']['name'] == 'delete_graph_memory'

    @pytest.mark.asyncio
    async def test_no_deletions(self, mock_llm):
        service = EntityExtractionService(mock_llm)
        assert await service.decide_deletions([], 'Alice also likes burgers', 'alice') == []
