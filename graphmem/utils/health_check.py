"""
Health check utilities for the application.
"""

from typing import Any, Dict, Optional

from .config import AppConfig
from .config import config as default_config
from .falkordb_client import FalkorDBClient
from .logging_config import get_logger
from .providers import create_embedder, create_llm

logger = get_logger(__name__)


async def check_health(config: Optional[AppConfig] = None) -> bool:
    """Check the health of all system components.

    Returns:
        True if all components are healthy, False otherwise
    """
    health_status = await get_health_status(config)

    all_healthy = all(status.get('healthy', False) for status in health_status.values())

    if all_healthy:
        logger.info('All system components are healthy')
    else:
        logger.warning('Some system components are unhealthy')

    return all_healthy


async def get_health_status(config: Optional[AppConfig] = None) -> Dict[str, Any]:
    """Get detailed health status of all components.

    Args:
        config: AppConfig instance, uses default if None

    Returns:
        Dictionary with health status of each component
    """
    config = config or default_config
    llm_provider = (config.graph_store.llm_provider if config.graph_store else None) or config.llm_provider
    health_status = {}

    # Check LLM
    try:
        llm = create_llm(llm_provider, config)
        health_status['llm'] = {
            'healthy': await llm.health_check(),
            'provider': llm_provider,
            'model': getattr(llm, 'model_id', None) or getattr(llm, 'model', None)
        }
    except Exception as e:
        health_status['llm'] = {'healthy': False, 'provider': llm_provider, 'error': str(e)}

    # Check embedder
    try:
        embedder = create_embedder(config.embedder_provider, config)
        health_status['embedder'] = {
            'healthy': await embedder.health_check(),
            'provider': config.embedder_provider,
            'model': getattr(embedder, 'model_id', None) or getattr(embedder, 'model', None)
        }
    except Exception as e:
        health_status['embedder'] = {'healthy': False, 'provider': config.embedder_provider, 'error': str(e)}

    # Check FalkorDB
    if config.graph_store is None:
        health_status['falkordb'] = {'healthy': False, 'service': 'FalkorDB', 'error': 'graph store not configured'}
    else:
        falkordb = FalkorDBClient(config.graph_store.falkordb)
        try:
            health_status['falkordb'] = {
                'healthy': await falkordb.health_check(),
                'service': 'FalkorDB',
                'endpoint': f'{config.graph_store.falkordb.host}:{config.graph_store.falkordb.port}'
            }
        except Exception as e:
            health_status['falkordb'] = {'healthy': False, 'service': 'FalkorDB', 'error': str(e)}
        finally:
            await falkordb.close()

    return health_status
