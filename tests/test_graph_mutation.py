"""Tests for relationship merges and deletions."""

from unittest.mock import AsyncMock, Mock

import pytest

from graphmem.models.core import RelationshipTriple
from graphmem.services.graph_mutation import GraphMutator


def make_mutator(mock_graph, mock_embedder, source_id, destination_id):
    resolver = Mock()
    resolver.resolve_candidate = AsyncMock(side_effect=[source_id, destination_id])
    return GraphMutator(mock_graph, mock_embedder, resolver), resolver


TRIPLE = RelationshipTriple('alice', 'works_at', 'acme')
TYPES = {'alice': 'person', 'acme': 'organization'}


class TestAddEntities:

    @pytest.mark.asyncio
    async def test_neither_resolves_merges_both_nodes(self, mock_graph, mock_embedder):
        mutator, resolver = make_mutator(mock_graph, mock_embedder, None, None)

        await mutator.add_entities([TRIPLE], 'alice', TYPES)

        cypher, params = mock_graph.query.await_args.args
        assert 'MERGE (n:`person` {name: $source_name, user_id: $user_id})' in cypher
        assert 'MERGE (m:`organization` {name: $dest_name, user_id: $user_id})' in cypher
        assert 'ON MATCH SET n.embedding = $source_embedding' in cypher
        assert 'MERGE (n)-[rel:`works_at`]->(m)' in cypher
        assert params['source_name'] == 'alice' and params['dest_name'] == 'acme'
        assert params['source_embedding'] == [5.0, 1.0, 0.0]
        assert mock_graph.query.await_args.kwargs['graph_name'] == 'mem0_alice'
        assert resolver.resolve_candidate.await_args_list[0].args == ([5.0, 1.0, 0.0], 'alice', 0.9)

    @pytest.mark.asyncio
    async def test_only_source_resolves(self, mock_graph, mock_embedder):
        mutator, _ = make_mutator(mock_graph, mock_embedder, 11, None)

        await mutator.add_entities([TRIPLE], 'alice', TYPES)

        cypher, params = mock_graph.query.await_args.args
        assert 'WHERE id(source) = $source_id' in cypher
        assert 'MERGE (destination:`organization` {name: $destination_name, user_id: $user_id})' in cypher
        assert params['source_id'] == 11
        assert params['destination_name'] == 'acme'

    @pytest.mark.asyncio
    async def test_only_destination_resolves(self, mock_graph, mock_embedder):
        mutator, _ = make_mutator(mock_graph, mock_embedder, None, 22)

        await mutator.add_entities([TRIPLE], 'alice', TYPES)

        cypher, params = mock_graph.query.await_args.args
        assert 'WHERE id(destination) = $destination_id' in cypher
        assert 'MERGE (source:`person` {name: $source_name, user_id: $user_id})' in cypher
        assert params['destination_id'] == 22
        assert params['source_name'] == 'alice'

    @pytest.mark.asyncio
    async def test_both_resolve(self, mock_graph, mock_embedder):
        mutator, _ = make_mutator(mock_graph, mock_embedder, 11, 22)

        await mutator.add_entities([TRIPLE], 'alice', TYPES)

        cypher, params = mock_graph.query.await_args.args
        assert 'r.created_at = timestamp()' in cypher
        assert 'MERGE (source)-[r:`works_at`]->(destination)' in cypher
        assert params == {'source_id': 11, 'destination_id': 22, 'user_id': 'alice'}

    @pytest.mark.asyncio
    async def test_unknown_type_and_quoting(self, mock_graph, mock_embedder):
        mutator, _ = make_mutator(mock_graph, mock_embedder, None, None)

        await mutator.add_entities([RelationshipTriple('alice', 'bad`type', 'mystery')], 'alice', {})

        cypher, _ = mock_graph.query.await_args.args
        assert 'MERGE (n:`unknown`' in cypher
        assert '[rel:`bad``type`]' in cypher

    @pytest.mark.asyncio
    async def test_returns_rows_per_triple(self, mock_graph, mock_embedder):
        resolver = Mock()
        resolver.resolve_candidate = AsyncMock(return_value=None)
        mock_graph.query.return_value = [{'source': 'alice', 'relationship': 'works_at', 'target': 'acme'}]
        mutator = GraphMutator(mock_graph, mock_embedder, resolver)

        results = await mutator.add_entities([TRIPLE, TRIPLE], 'alice', TYPES)

        assert len(results) == 2
        assert results[0] == [{'source': 'alice', 'relationship': 'works_at', 'target': 'acme'}]


class TestDeleteEntities:

    @pytest.mark.asyncio
    async def test_deletes_exact_edge(self, mock_graph, mock_embedder):
        mutator = GraphMutator(mock_graph, mock_embedder, Mock())

        results = await mutator.delete_entities([RelationshipTriple('alice', 'lives_in', 'paris')], 'alice')

        cypher, params = mock_graph.query.await_args.args
        assert '-[r:`lives_in`]->' in cypher
        assert 'DELETE r' in cypher
        assert params == {'source_name': 'alice', 'dest_name': 'paris', 'user_id': 'alice'}
        assert results == [[]]

    @pytest.mark.asyncio
    async def test_nothing_to_delete(self, mock_graph, mock_embedder):
        mutator = GraphMutator(mock_graph, mock_embedder, Mock())

        assert await mutator.delete_entities([], 'alice') == []
        mock_graph.query.assert_not_awaited()
