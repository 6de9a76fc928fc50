"""Tests for health status reporting."""

import dataclasses
from unittest.mock import AsyncMock, Mock, patch

import pytest

from graphmem.utils import health_check


def healthy_model(result=True):
    model = Mock()
    model.model_id = 'test-model'
    model.health_check = AsyncMock(return_value=result)
    return model


@pytest.mark.asyncio
async def test_all_components_healthy(app_config):
    with patch.object(health_check, 'create_llm', return_value=healthy_model()), \
            patch.object(health_check, 'create_embedder', return_value=healthy_model()), \
            patch.object(health_check, 'FalkorDBClient') as client_cls:
        client_cls.return_value.health_check = AsyncMock(return_value=True)
        client_cls.return_value.close = AsyncMock()

        status = await health_check.get_health_status(app_config)
        assert await health_check.check_health(app_config) is True

    assert set(status) == {'llm', 'embedder', 'falkordb'}
    assert status['llm']['model'] == 'test-model'
    client_cls.return_value.close.assert_awaited()


@pytest.mark.asyncio
async def test_missing_graph_store_is_unhealthy(app_config):
    config = dataclasses.replace(app_config, graph_store=None)
    with patch.object(health_check, 'create_llm', return_value=healthy_model()), \
            patch.object(health_check, 'create_embedder', return_value=healthy_model()):
        status = await health_check.get_health_status(config)

    assert status['falkordb']['healthy'] is False
    assert status['llm']['healthy'] is True


@pytest.mark.asyncio
async def test_provider_error_reported(app_config):
    with patch.object(health_check, 'create_llm', side_effect=RuntimeError('no credentials')), \
            patch.object(health_check, 'create_embedder', return_value=healthy_model(False)), \
            patch.object(health_check, 'FalkorDBClient') as client_cls:
        client_cls.return_value.health_check = AsyncMock(return_value=True)
        client_cls.return_value.close = AsyncMock()

        status = await health_check.get_health_status(app_config)

    assert status['llm'] == {'healthy': False, 'provider': app_config.llm_provider, 'error': 'no credentials'}
    assert status['embedder']['healthy'] is False
