"""
FalkorDB graph database client with lazy connection and Cypher dialect translation.
"""

import asyncio
from typing import Any, Dict, List, Optional

from falkordb.asyncio import FalkorDB

from .config import FalkorDBConfig
from .cypher_translator import CypherTranslator
from .logging_config import get_logger

logger = get_logger(__name__)


class GraphStoreError(Exception):
    """Custom exception for graph store errors."""

    def __init__(self, message: str, query: Optional[str] = None):
        super().__init__(message)
        self.query = query


class FalkorDBClient:
    """FalkorDB client that translates every query before running it.

    The connection is opened on first use. One tenant maps to one graph,
    named ``<graph_name>_<tenant_id>``.
    """

    def __init__(self, config: FalkorDBConfig):
        """
        Initialize FalkorDB client. No connection is opened here.

        Args:
            config: FalkorDBConfig instance with connection parameters
        """
        self.config = config
        self.db = None
        self._graphs: Dict[str, Any] = {}
        self._initialized = False
        self._init_lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def init(self) -> None:
        """Open the connection once; repeated or concurrent calls are no-ops."""
        if self._initialized:
            return

        async with self._init_lock:
            if self._initialized:
                return

            host = self.config.host or 'localhost'
            port = self.config.port or 6379
            self.db = FalkorDB(host=host, port=port, username=self.config.username, password=self.config.password)
            self._graphs = {}
            self._initialized = True

            logger.info(f'Connected to FalkorDB at {host}:{port}')

    def graph_name_for(self, tenant_id: str) -> str:
        """Graph namespace holding a single tenant's nodes and edges."""
        return f'{self.config.graph_name or "mem0"}_{tenant_id}'

    def _select_graph(self, graph_name: Optional[str]):
        name = graph_name or self.config.graph_name or 'mem0'
        if name not in self._graphs:
            self._graphs[name] = self.db.select_graph(name)
        return self._graphs[name]

    async def query(self,
                    cypher: str,
                    params: Optional[Dict[str, Any]] = None,
                    graph_name: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Translate and execute a Cypher query.

        Args:
            cypher: Query text, Neo4j or FalkorDB dialect
            params: Query parameters
            graph_name: Graph to run against (default graph if None)

        Returns:
            Result rows as dicts keyed by column name

        Raises:
            GraphStoreError: If the query fails; the message includes the translated query
        """
        await self.init()

        translated_query, translated_params = CypherTranslator.translate(cypher, params or {})

        try:
            graph = self._select_graph(graph_name)
            result = await graph.query(translated_query, translated_params)
        except Exception as e:
            logger.error(f'FalkorDB query failed: {e}')
            raise GraphStoreError(f'FalkorDB query failed: {e}\nQuery: {translated_query}', query=translated_query) from e

        rows = _rows_from_result(result)
        logger.debug(f'FalkorDB query returned {len(rows)} rows')
        return rows

    async def close(self) -> None:
        """Close the FalkorDB connection. Safe to call when never initialized."""
        if not self._initialized:
            return

        async with self._init_lock:
            if self.db is not None:
                await self.db.aclose()
            self.db = None
            self._graphs = {}
            self._initialized = False
            logger.debug('Closed FalkorDB connection')

    async def health_check(self) -> bool:
        """
        Perform a health check on the FalkorDB service.

        Returns:
            True if service is healthy, False otherwise
        """
        try:
            await self.query('RETURN 1 AS ok')
            return True
        except GraphStoreError as e:
            logger.error(f'FalkorDB health check failed: {e}')
            return False


def _rows_from_result(result: Any) -> List[Dict[str, Any]]:
    """Convert a FalkorDB QueryResult into a list of dict rows."""
    result_set = getattr(result, 'result_set', None) or []
    header = getattr(result, 'header', None) or []

    # Header entries are [column_type, column_name]
    columns = [column[1] if isinstance(column, (list, tuple)) else column for column in header]
    columns = [column.decode() if isinstance(column, bytes) else column for column in columns]

    return [dict(zip(columns, row)) for row in result_set]
