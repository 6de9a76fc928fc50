"""
Embedding-similarity lookups over a tenant's graph nodes.
"""

from typing import Any, List, Optional

from ..models.core import SearchHit
from ..utils.falkordb_client import FalkorDBClient
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

MERGE_THRESHOLD = 0.9
SEARCH_THRESHOLD = 0.7
SIMILARITY_DIGITS = 4


def cosine_similarity_expression(node: str, param: str) -> str:
    """
    Cypher expression for the cosine similarity between a node's embedding and a parameter vector.

    The result is rounded to four decimals. Scaling before round() keeps the
    expression valid where round() accepts a single argument.

    Args:
        node: Node variable name
        param: Parameter name holding the probe vector (without '$')

    Returns:
        Cypher expression text
    """
    return (f'round(10000 * reduce(dot = 0.0, i IN range(0, size({node}.embedding)-1) | '
            f'dot + {node}.embedding[i] * ${param}[i]) / '
            f'(sqrt(reduce(l2 = 0.0, i IN range(0, size({node}.embedding)-1) | '
            f'l2 + {node}.embedding[i] * {node}.embedding[i])) * '
            f'sqrt(reduce(l2 = 0.0, i IN range(0, size(${param})-1) | '
            f'l2 + ${param}[i] * ${param}[i])))) / 10000.0')


def meets_threshold(similarity: Any, threshold: float) -> bool:
    """Compare a similarity score against a threshold at four-decimal precision."""
    if similarity is None:
        return False
    return round(float(similarity), SIMILARITY_DIGITS) >= threshold


class NodeResolver:
    """Find existing nodes that an embedding refers to."""

    def __init__(self, graph: FalkorDBClient):
        self.graph = graph

    async def resolve_candidate(self, embedding: List[float], tenant_id: str, threshold: float = MERGE_THRESHOLD) -> Optional[Any]:
        """
        Return the id of the most similar node at or above the threshold.

        Args:
            embedding: Probe vector
            tenant_id: Tenant whose nodes are searched
            threshold: Minimum similarity

        Returns:
            Opaque node id, or None if no node qualifies
        """
        cypher = f"""
            MATCH (candidate)
            WHERE candidate.embedding IS NOT NULL
            AND candidate.user_id = $user_id
            WITH candidate, {cosine_similarity_expression('candidate', 'embedding')} AS similarity
            WHERE similarity >= $threshold
            WITH candidate, similarity
            ORDER BY similarity DESC
            LIMIT 1
            RETURN elementId(candidate) AS element_id, similarity
        """
        rows = await self.graph.query(cypher, {
            'embedding': embedding,
            'user_id': tenant_id,
            'threshold': threshold,
        },
                                      graph_name=self.graph.graph_name_for(tenant_id))

        for row in rows:
            if meets_threshold(row.get('similarity'), threshold):
                return row.get('element_id')
        return None

    async def search_graph(self,
                           name: str,
                           embedding: List[float],
                           tenant_id: str,
                           threshold: float = SEARCH_THRESHOLD,
                           limit: int = 100) -> List[SearchHit]:
        """
        Find edges touching nodes similar to an entity, in both directions.

        Args:
            name: Entity name (for logging)
            embedding: Embedding of the entity name
            tenant_id: Tenant whose graph is searched
            threshold: Minimum node similarity
            limit: Maximum number of rows

        Returns:
            Search hits ordered by similarity, highest first
        """
        similarity = cosine_similarity_expression('n', 'n_embedding')
        cypher = f"""
            MATCH (n)
            WHERE n.embedding IS NOT NULL AND n.user_id = $user_id
            WITH n, {similarity} AS similarity
            WHERE similarity >= $threshold
            MATCH (n)-[r]->(m)
            WHERE m.user_id = $user_id
            RETURN n.name AS source, elementId(n) AS source_id, type(r) AS relationship, elementId(r) AS relation_id, m.name AS destination, elementId(m) AS destination_id, similarity
            UNION
            MATCH (n)
            WHERE n.embedding IS NOT NULL AND n.user_id = $user_id
            WITH n, {similarity} AS similarity
            WHERE similarity >= $threshold
            MATCH (m)-[r]->(n)
            WHERE m.user_id = $user_id
            RETURN m.name AS source, elementId(m) AS source_id, type(r) AS relationship, elementId(r) AS relation_id, n.name AS destination, elementId(n) AS destination_id, similarity
            ORDER BY similarity DESC
            LIMIT $limit
        """
        rows = await self.graph.query(cypher, {
            'n_embedding': embedding,
            'threshold': threshold,
            'user_id': tenant_id,
            'limit': int(limit),
        },
                                      graph_name=self.graph.graph_name_for(tenant_id))

        hits = [SearchHit.from_record(row) for row in rows if meets_threshold(row.get('similarity'), threshold)]
        logger.debug(f'Graph search for {name!r} returned {len(hits)} hits')
        return hits
