"""
Graph mutation service: merge new relationships and delete outdated ones.
"""

from typing import Any, Dict, List

from ..models.core import RelationshipTriple
from ..utils.cypher_translator import quote_identifier
from ..utils.falkordb_client import FalkorDBClient
from ..utils.logging_config import get_logger
from ..utils.providers import EmbeddingModel
from .node_resolution import MERGE_THRESHOLD, NodeResolver

logger = get_logger(__name__)

DEFAULT_ENTITY_TYPE = 'unknown'


class GraphMutator:
    """Apply additions and deletions to a tenant's graph."""

    def __init__(self, graph: FalkorDBClient, embedder: EmbeddingModel, resolver: NodeResolver):
        self.graph = graph
        self.embedder = embedder
        self.resolver = resolver

    async def add_entities(self, triples: List[RelationshipTriple], tenant_id: str,
                           entity_type_map: Dict[str, str]) -> List[List[Dict[str, Any]]]:
        """
        Merge each triple into the graph, reusing nodes that resolve by similarity.

        Args:
            triples: Relationships to add
            tenant_id: Tenant owning the graph
            entity_type_map: Entity name to type, used as node labels

        Returns:
            One list of result rows per triple
        """
        graph_name = self.graph.graph_name_for(tenant_id)
        results = []

        for triple in triples:
            source_label = quote_identifier(entity_type_map.get(triple.source) or DEFAULT_ENTITY_TYPE)
            destination_label = quote_identifier(entity_type_map.get(triple.destination) or DEFAULT_ENTITY_TYPE)
            relationship = quote_identifier(triple.relationship)

            source_embedding = await self.embedder.embed(triple.source)
            destination_embedding = await self.embedder.embed(triple.destination)

            source_id = await self.resolver.resolve_candidate(source_embedding, tenant_id, MERGE_THRESHOLD)
            destination_id = await self.resolver.resolve_candidate(destination_embedding, tenant_id, MERGE_THRESHOLD)

            if source_id is not None and destination_id is None:
                cypher = f"""
                    MATCH (source)
                    WHERE id(source) = $source_id
                    MERGE (destination:{destination_label} {{name: $destination_name, user_id: $user_id}})
                    ON CREATE SET
                        destination.created = timestamp(),
                        destination.embedding = $destination_embedding
                    MERGE (source)-[r:{relationship}]->(destination)
                    ON CREATE SET
                        r.created = timestamp()
                    RETURN source.name AS source, type(r) AS relationship, destination.name AS target
                """
                params = {
                    'source_id': source_id,
                    'destination_name': triple.destination,
                    'destination_embedding': destination_embedding,
                    'user_id': tenant_id,
                }
            elif source_id is None and destination_id is not None:
                cypher = f"""
                    MATCH (destination)
                    WHERE id(destination) = $destination_id
                    MERGE (source:{source_label} {{name: $source_name, user_id: $user_id}})
                    ON CREATE SET
                        source.created = timestamp(),
                        source.embedding = $source_embedding
                    MERGE (source)-[r:{relationship}]->(destination)
                    ON CREATE SET
                        r.created = timestamp()
                    RETURN source.name AS source, type(r) AS relationship, destination.name AS target
                """
                params = {
                    'destination_id': destination_id,
                    'source_name': triple.source,
                    'source_embedding': source_embedding,
                    'user_id': tenant_id,
                }
            elif source_id is not None and destination_id is not None:
                cypher = f"""
                    MATCH (source)
                    WHERE id(source) = $source_id
                    MATCH (destination)
                    WHERE id(destination) = $destination_id
                    MERGE (source)-[r:{relationship}]->(destination)
                    ON CREATE SET
                        r.created_at = timestamp(),
                        r.updated_at = timestamp()
                    RETURN source.name AS source, type(r) AS relationship, destination.name AS target
                """
                params = {
                    'source_id': source_id,
                    'destination_id': destination_id,
                    'user_id': tenant_id,
                }
            else:
                cypher = f"""
                    MERGE (n:{source_label} {{name: $source_name, user_id: $user_id}})
                    ON CREATE SET n.created = timestamp(), n.embedding = $source_embedding
                    ON MATCH SET n.embedding = $source_embedding
                    MERGE (m:{destination_label} {{name: $dest_name, user_id: $user_id}})
                    ON CREATE SET m.created = timestamp(), m.embedding = $dest_embedding
                    ON MATCH SET m.embedding = $dest_embedding
                    MERGE (n)-[rel:{relationship}]->(m)
                    ON CREATE SET rel.created = timestamp()
                    RETURN n.name AS source, type(rel) AS relationship, m.name AS target
                """
                params = {
                    'source_name': triple.source,
                    'dest_name': triple.destination,
                    'source_embedding': source_embedding,
                    'dest_embedding': destination_embedding,
                    'user_id': tenant_id,
                }

            logger.debug(f'Adding {triple} (source_id={source_id}, destination_id={destination_id})')
            results.append(await self.graph.query(cypher, params, graph_name=graph_name))

        return results

    async def delete_entities(self, triples: List[RelationshipTriple], tenant_id: str) -> List[List[Dict[str, Any]]]:
        """
        Delete the exact (source, relationship, destination) edges.

        Missing edges produce an empty row list.

        Args:
            triples: Relationships to delete
            tenant_id: Tenant owning the graph

        Returns:
            One list of result rows per triple
        """
        graph_name = self.graph.graph_name_for(tenant_id)
        results = []

        for triple in triples:
            cypher = f"""
                MATCH (n {{name: $source_name, user_id: $user_id}})
                -[r:{quote_identifier(triple.relationship)}]->
                (m {{name: $dest_name, user_id: $user_id}})
                DELETE r
                RETURN
                    n.name AS source,
                    m.name AS target,
                    type(r) AS relationship
            """
            params = {
                'source_name': triple.source,
                'dest_name': triple.destination,
                'user_id': tenant_id,
            }
            logger.debug(f'Deleting {triple}')
            results.append(await self.graph.query(cypher, params, graph_name=graph_name))

        return results
