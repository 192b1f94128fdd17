"""
Health check and metrics tests
"""
from unittest.mock import AsyncMock

import pytest

from shortcode_cache.cache import NOT_GENERATED
from shortcode_cache.monitoring import HealthChecker, HealthStatus, MetricsCollector


@pytest.mark.asyncio
async def test_healthy(cache):
    result = await HealthChecker(cache).check_health()

    assert result.status == HealthStatus.HEALTHY
    assert result.environment == 'test'
    assert {c.name for c in result.components} == {'cache', 'backend'}
    assert len(cache.backend) == 0


@pytest.mark.asyncio
async def test_unreachable_backend(cache):
    backend = AsyncMock()
    backend.set.side_effect = ConnectionError("refused")
    cache.backend = backend

    result = await HealthChecker(cache).check_health()

    assert result.status == HealthStatus.UNHEALTHY


@pytest.mark.asyncio
async def test_backend_not_reading_back(cache):
    backend = AsyncMock()
    backend.get.return_value = None
    cache.backend = backend

    result = await HealthChecker(cache).check_health()

    assert result.status == HealthStatus.DEGRADED


@pytest.mark.asyncio
async def test_hits_are_counted(cache):
    before = MetricsCollector.cache_hits_total.labels(shortcode='metered')._value.get()

    await cache.maybe_cache_output('<m/>', 'metered', {})
    await cache.maybe_return_cached_output(NOT_GENERATED, 'metered', {})

    after = MetricsCollector.cache_hits_total.labels(shortcode='metered')._value.get()
    assert after == before + 1
    assert b'shortcode_cache_hits_total' in MetricsCollector.get_metrics()
