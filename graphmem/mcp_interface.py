"""
MCP Interface Layer using fastmcp for agent orchestration.
"""
from typing import Dict, List, Optional

from fastmcp import FastMCP

from graphmem.services.memory_graph import MemoryGraphEngine, MemoryGraphError
from graphmem.utils.config import config
from graphmem.utils.logging_config import get_logger

logger = get_logger(__name__)

# Initialize FastMCP application
mcp = FastMCP('Graph Memory')
_engine: Optional[MemoryGraphEngine] = None


def get_engine() -> MemoryGraphEngine:
    """Return the shared engine, building it from configuration on first use."""
    global _engine
    if _engine is None:
        _engine = MemoryGraphEngine(config)
    return _engine


def _require_user_id(user_id: str) -> None:
    if not user_id or not user_id.strip():
        raise ValueError('User ID is required')


@mcp.tool()
async def add_graph_memory(user_id: str, text: str) -> Dict[str, List]:
    """Store new information in the user's graph memory.

    Relationships contradicted by the new information are removed first.

    Args:
        user_id: User ID
        text: Natural language statement

    Returns:
        Dict with deleted_entities, added_entities and relations

    Raises:
        Exception: If the add fails
    """
    _require_user_id(user_id)
    if not text or not text.strip():
        return {'deleted_entities': [], 'added_entities': [], 'relations': []}

    try:
        result = await get_engine().add(text, user_id)
        logger.debug(f'MCP add proposed {len(result.relations)} relations for user {user_id}')
        return result.to_dict()

    except MemoryGraphError as e:
        logger.error(f'Memory graph error in MCP add: {e}')
        raise Exception(f'Memory add failed: {e}')


@mcp.tool()
async def search_graph_memories(user_id: str, query: str, limit: int = 100) -> List[Dict[str, str]]:
    """Search the user's graph memories.

    Args:
        user_id: User ID
        query: Natural language query
        limit: Maximum graph rows considered per entity (default: 100)

    Returns:
        Up to five dicts with source, relationship and destination

    Raises:
        Exception: If search fails
    """
    _require_user_id(user_id)
    if not query or not query.strip():
        return []

    try:
        relations = await get_engine().search(query, user_id, limit)
        result = [relation.to_dict() for relation in relations]

        logger.debug(f'MCP search returned {len(result)} memories for user {user_id}')
        return result

    except MemoryGraphError as e:
        logger.error(f'Memory graph error in MCP search: {e}')
        raise Exception(f'Memory search failed: {e}')


@mcp.tool()
async def get_all_graph_memories(user_id: str, limit: int = 100) -> List[Dict[str, str]]:
    """List the user's graph memories.

    Args:
        user_id: User ID
        limit: Maximum number of relationships (default: 100)

    Returns:
        Dicts with source, relationship and target
    """
    _require_user_id(user_id)

    try:
        return await get_engine().get_all(user_id, limit)

    except MemoryGraphError as e:
        logger.error(f'Memory graph error in MCP get_all: {e}')
        raise Exception(f'Memory listing failed: {e}')


@mcp.tool()
async def delete_all_graph_memories(user_id: str) -> str:
    """Delete every graph memory owned by the user.

    Args:
        user_id: User ID

    Returns:
        Confirmation message
    """
    _require_user_id(user_id)

    try:
        await get_engine().delete_all(user_id)
        return f'Deleted all graph memories for user {user_id}'

    except MemoryGraphError as e:
        logger.error(f'Memory graph error in MCP delete_all: {e}')
        raise Exception(f'Memory deletion failed: {e}')


if __name__ == '__main__':
    transport = config.mcp.transport
    if transport == 'stdio':
        mcp.run(transport=transport)
    else:
        mcp.run(transport=transport, host=config.mcp.host, port=config.mcp.port)
