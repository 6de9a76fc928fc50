"""
Memory graph engine: per-tenant knowledge graph ingestion, search and maintenance.
"""

from typing import Any, Dict, List, Optional

from ..models.core import AddResult, RelationshipTriple, SearchHit
from ..utils.bm25 import BM25
from ..utils.config import AppConfig, ConfigurationError
from ..utils.config import config as default_config
from ..utils.falkordb_client import FalkorDBClient
from ..utils.logging_config import get_logger
from ..utils.providers import ChatModel, EmbeddingModel, create_embedder, create_llm
from .entity_extraction import EntityExtractionService
from .graph_mutation import GraphMutator
from .node_resolution import SEARCH_THRESHOLD, NodeResolver

logger = get_logger(__name__)

SEARCH_RESULT_LIMIT = 5


class MemoryGraphError(Exception):
    """Custom exception for memory graph errors."""
    pass


class MemoryGraphEngine:
    """Knowledge-graph memory partitioned by tenant."""

    def __init__(self,
                 config: Optional[AppConfig] = None,
                 llm: Optional[ChatModel] = None,
                 embedder: Optional[EmbeddingModel] = None,
                 graph: Optional[FalkorDBClient] = None):
        """
        Initialize the memory graph engine.

        Collaborators not passed in are built from configuration.

        Args:
            config: Application configuration (module config if None)
            llm: Chat model for extraction
            embedder: Embedding model for node similarity
            graph: Graph store client

        Raises:
            ConfigurationError: If no graph store is configured or a provider is unsupported
        """
        self.config = config or default_config
        graph_store = self.config.graph_store
        if graph_store is None:
            raise ConfigurationError('Graph store configuration is required (set GRAPH_STORE_PROVIDER=falkordb)')

        self.custom_prompt = graph_store.custom_prompt
        self.llm = llm or create_llm(graph_store.llm_provider or self.config.llm_provider, self.config)
        self.embedder = embedder or create_embedder(self.config.embedder_provider, self.config)
        self.graph = graph or FalkorDBClient(graph_store.falkordb)

        self.extraction = EntityExtractionService(self.llm)
        self.resolver = NodeResolver(self.graph)
        self.mutator = GraphMutator(self.graph, self.embedder, self.resolver)

        logger.info('Initialized MemoryGraphEngine')

    async def add(self, text: str, tenant_id: str) -> AddResult:
        """
        Ingest text into the tenant's graph.

        Outdated relationships are deleted before new ones are merged.

        Args:
            text: New information
            tenant_id: Tenant identifier

        Returns:
            AddResult with deleted rows, added rows and the proposed relations

        Raises:
            MemoryGraphError: If a model or graph store call fails
        """
        try:
            entity_type_map = await self.extraction.extract_entities(text, tenant_id)
            to_be_added = await self.extraction.extract_relations(text, tenant_id, entity_type_map, self.custom_prompt)

            search_output = await self._search_graph_db(list(entity_type_map.keys()), tenant_id)
            to_be_deleted = await self.extraction.decide_deletions(search_output, text, tenant_id)

            deleted_entities = await self.mutator.delete_entities(to_be_deleted, tenant_id)
            added_entities = await self.mutator.add_entities(to_be_added, tenant_id, entity_type_map)

            logger.debug(f'Added {len(to_be_added)} and deleted {len(to_be_deleted)} relations for tenant {tenant_id}')
            return AddResult(deleted_entities=deleted_entities, added_entities=added_entities, relations=to_be_added)

        except Exception as e:
            logger.error(f'Error adding graph memory: {e}')
            raise MemoryGraphError(f'Graph memory add failed: {e}') from e

    async def search(self, query: str, tenant_id: str, limit: int = 100) -> List[RelationshipTriple]:
        """
        Search the tenant's graph and re-rank the hits lexically.

        Args:
            query: Query text
            tenant_id: Tenant identifier
            limit: Maximum rows per entity lookup

        Returns:
            Up to five relationship triples, best first

        Raises:
            MemoryGraphError: If a model or graph store call fails
        """
        try:
            entity_type_map = await self.extraction.extract_entities(query, tenant_id)
            search_output = await self._search_graph_db(list(entity_type_map.keys()), tenant_id, limit)
        except Exception as e:
            logger.error(f'Error searching graph memory: {e}')
            raise MemoryGraphError(f'Graph memory search failed: {e}') from e

        if not search_output:
            return []

        documents = [[hit.source, hit.relationship, hit.destination] for hit in search_output]
        ranked = BM25(documents).search(query.split(' '))[:SEARCH_RESULT_LIMIT]

        results = [RelationshipTriple(source=doc[0], relationship=doc[1], destination=doc[2]) for doc in ranked]
        logger.debug(f'Returned {len(results)} search results for tenant {tenant_id}')
        return results

    async def get_all(self, tenant_id: str, limit: int = 100) -> List[Dict[str, Any]]:
        """
        List relationships in the tenant's graph.

        Args:
            tenant_id: Tenant identifier
            limit: Maximum number of rows

        Returns:
            Dicts with source, relationship and target keys

        Raises:
            MemoryGraphError: If the graph store call fails
        """
        cypher = """
            MATCH (n {user_id: $user_id})-[r]->(m {user_id: $user_id})
            RETURN n.name AS source, type(r) AS relationship, m.name AS target
            LIMIT $limit
        """
        try:
            rows = await self.graph.query(cypher, {
                'user_id': tenant_id,
                'limit': int(limit)
            },
                                          graph_name=self.graph.graph_name_for(tenant_id))
        except Exception as e:
            logger.error(f'Error listing graph memories: {e}')
            raise MemoryGraphError(f'Graph memory get_all failed: {e}') from e

        return [{'source': row['source'], 'relationship': row['relationship'], 'target': row['target']} for row in rows]

    async def delete_all(self, tenant_id: str) -> None:
        """
        Remove every node and edge owned by the tenant.

        Raises:
            MemoryGraphError: If the graph store call fails
        """
        try:
            await self.graph.query('MATCH (n {user_id: $user_id}) DETACH DELETE n', {'user_id': tenant_id},
                                   graph_name=self.graph.graph_name_for(tenant_id))
            logger.info(f'Deleted all graph memories for tenant {tenant_id}')
        except Exception as e:
            logger.error(f'Error deleting graph memories: {e}')
            raise MemoryGraphError(f'Graph memory delete_all failed: {e}') from e

    async def close(self) -> None:
        await self.graph.close()

    async def _search_graph_db(self, node_list: List[str], tenant_id: str, limit: int = 100) -> List[SearchHit]:
        """Collect neighbourhood hits for each entity name, in order."""
        results = []
        for node in node_list:
            embedding = await self.embedder.embed(node)
            results.extend(await self.resolver.search_graph(node, embedding, tenant_id, SEARCH_THRESHOLD, int(limit)))
        return results
