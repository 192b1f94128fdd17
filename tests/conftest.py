"""
pytest configuration and shared fixtures
"""
import os

import pytest

os.environ['SHORTCODE_CACHE_ENV'] = 'test'
os.environ['SHORTCODE_CACHE_LOG_LEVEL'] = 'ERROR'

from shortcode_cache.cache import LocalCache, Registry, ShortcodeCache
from shortcode_cache.config import Settings, get_settings
from shortcode_cache.models import ContentEntity, InvocationContext


@pytest.fixture(autouse=True)
def reset_settings():
    """Drop the cached settings between tests"""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings():
    return Settings(environment='test', redis_url=None, log_file='')


@pytest.fixture
def backend():
    return LocalCache(max_size=100)


@pytest.fixture
def registry():
    return Registry()


@pytest.fixture
def cache(settings, registry, backend):
    return ShortcodeCache(registry=registry, backend=backend, settings=settings)


@pytest.fixture
def anonymous_context():
    return InvocationContext()


@pytest.fixture
def user_context():
    return InvocationContext(
        principal_id=7,
        current_entity=ContentEntity(id=42, modified_gmt='2024-01-01 10:00:00')
    )
