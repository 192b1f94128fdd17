"""
Cache coordinator tests
"""
from unittest.mock import AsyncMock

import pytest

from shortcode_cache.cache import (
    LocalCache,
    NOT_GENERATED,
    ShortcodeCache,
    UseCachePolicy,
    derive_key,
)
from shortcode_cache.config import Settings
from shortcode_cache.models import CacheError, ContentEntity, InvocationContext


def get_theme_color():
    return 'teal'


class TestPhases:
    """Pre- and post-phase behaviour"""

    @pytest.mark.asyncio
    async def test_callback_scenario(self, cache, backend):
        cache.register_external_data_value('box', 'color', get_theme_color, 'callback')

        output = await cache.maybe_return_cached_output(NOT_GENERATED, 'box', {})
        assert output is NOT_GENERATED

        result = await cache.maybe_cache_output('<div/>', 'box', {})
        assert result == '<div/>'

        expected_key = derive_key('box', {'color': 'teal', 'content': None})
        assert await backend.get(expected_key, 'shortcodes') == '<div/>'

        cached = await cache.maybe_return_cached_output(NOT_GENERATED, 'box', {})
        assert cached == '<div/>'

    @pytest.mark.asyncio
    async def test_existing_output_is_kept(self, cache):
        await cache.maybe_cache_output('<cached/>', 'box', {'a': 1})

        output = await cache.maybe_return_cached_output('<other/>', 'box', {'a': 1})

        assert output == '<other/>'

    @pytest.mark.asyncio
    async def test_empty_string_counts_as_existing_output(self, cache):
        await cache.maybe_cache_output('<cached/>', 'box', {})
        assert await cache.maybe_return_cached_output('', 'box', {}) == ''

    @pytest.mark.asyncio
    async def test_attributes_change_key(self, cache):
        await cache.maybe_cache_output('<red/>', 'box', {'color': 'red'})

        assert await cache.maybe_return_cached_output(NOT_GENERATED, 'box', {'color': 'blue'}) is NOT_GENERATED
        assert await cache.maybe_return_cached_output(NOT_GENERATED, 'box', {'color': 'red'}) == '<red/>'

    @pytest.mark.asyncio
    async def test_content_changes_key(self, cache):
        await cache.maybe_cache_output('<a/>', 'box', {}, InvocationContext(content='a'))

        miss = await cache.maybe_return_cached_output(NOT_GENERATED, 'box', {}, InvocationContext(content='b'))
        hit = await cache.maybe_return_cached_output(NOT_GENERATED, 'box', {}, InvocationContext(content='a'))

        assert miss is NOT_GENERATED
        assert hit == '<a/>'

    @pytest.mark.asyncio
    async def test_external_data_changes_key(self, cache):
        cache.register_external_data_value('box', 'page', 'page', 'get')

        await cache.maybe_cache_output('<p1/>', 'box', {}, InvocationContext(query={'page': '1'}))

        miss = await cache.maybe_return_cached_output(
            NOT_GENERATED, 'box', {}, InvocationContext(query={'page': '2'})
        )
        assert miss is NOT_GENERATED

    @pytest.mark.asyncio
    async def test_forced_off(self, cache, backend):
        cache.disable_cache('gallery')

        await cache.maybe_cache_output('<gallery/>', 'gallery', {})
        assert len(backend) == 0

        backend_key = derive_key('gallery', {'content': None})
        await backend.set(backend_key, '<stale/>', 'shortcodes')

        output = await cache.maybe_return_cached_output(NOT_GENERATED, 'gallery', {})
        assert output is NOT_GENERATED

    @pytest.mark.asyncio
    async def test_forced_on_overrides_existing_output(self, cache):
        cache.set_use_cache_policy('box', UseCachePolicy.FORCE_ON)
        await cache.maybe_cache_output('<cached/>', 'box', {})

        assert await cache.maybe_return_cached_output('<other/>', 'box', {}) == '<cached/>'

    @pytest.mark.asyncio
    async def test_callable_policy(self, cache, backend):
        seen = []

        def only_short_output(use_cache, output, pre):
            seen.append((use_cache, output, pre))
            return use_cache and (pre or len(output) < 10)

        cache.set_use_cache_policy('box', only_short_output)

        await cache.maybe_cache_output('<a long piece of output/>', 'box', {})
        assert len(backend) == 0

        await cache.maybe_cache_output('<b/>', 'box', {})
        assert len(backend) == 1

        assert seen[0] == (True, '<a long piece of output/>', False)

    @pytest.mark.asyncio
    async def test_disabled_globally(self, registry, backend):
        cache = ShortcodeCache(
            registry=registry,
            backend=backend,
            settings=Settings(environment='test', enabled=False)
        )

        await cache.maybe_cache_output('<b/>', 'box', {})

        assert len(backend) == 0


class TestBundle:
    """Default bundle and durations"""

    def test_default_bundle_for_user(self, cache, user_context):
        bundle = cache.build_bundle('box', {'a': 1}, user_context)

        assert bundle == {
            'a': 1,
            '__post_id': 42,
            '__post_last_changed': '2024-01-01 10:00:00',
            '__user_id': 7,
            'content': None,
        }

    def test_default_bundle_anonymous(self, cache, anonymous_context):
        assert cache.build_bundle('box', None, anonymous_context) == {'content': None}

    def test_registered_bundle_skips_defaults(self, cache, user_context):
        cache.set_cache_duration('box', 60)

        assert cache.build_bundle('box', {}, user_context) == {'content': None}

    def test_content_overrides_attribute(self, cache):
        bundle = cache.build_bundle('box', {'content': 'attr'}, InvocationContext(content='body'))
        assert bundle['content'] == 'body'

    def test_bundle_is_stable_between_phases(self, cache, user_context):
        cache.register_external_data_value('box', 'color', get_theme_color, 'callback')

        assert cache.build_bundle('box', {}, user_context) == cache.build_bundle('box', {}, user_context)

    def test_default_duration(self, cache, user_context, anonymous_context):
        assert cache.get_cache_duration('unregistered_tag', user_context) == 3600
        assert cache.get_cache_duration('unregistered_tag', anonymous_context) == 0
        assert cache.get_cache_duration('unregistered_tag') == 0

    def test_registered_duration(self, cache, user_context):
        cache.set_cache_duration('box', 0)
        assert cache.get_cache_duration('box', user_context) == 0

    def test_string_principal(self, cache):
        context = InvocationContext(principal_id='alice')
        assert cache.get_cache_duration('unregistered_tag', context) == 3600
        assert cache.build_bundle('x', {}, context)['__user_id'] == 'alice'

    def test_zero_principal_is_anonymous(self, cache):
        assert cache.get_cache_duration('unregistered_tag', InvocationContext(principal_id=0)) == 0

    @pytest.mark.asyncio
    async def test_store_uses_duration(self, cache, user_context):
        backend = AsyncMock()
        backend.set.return_value = True
        cache.backend = backend

        await cache.maybe_cache_output('<b/>', 'box', {}, user_context)

        args = backend.set.await_args.args
        assert args[1] == '<b/>'
        assert args[2] == 'shortcodes'
        assert args[3] == 3600
        assert args[0].startswith('box:')


class TestBackendFailures:
    """Backend errors degrade to misses and dropped writes"""

    @pytest.mark.asyncio
    async def test_read_failure_is_a_miss(self, cache):
        backend = AsyncMock()
        backend.get.side_effect = CacheError("down", operation="get")
        cache.backend = backend

        output = await cache.maybe_return_cached_output(NOT_GENERATED, 'box', {})

        assert output is NOT_GENERATED
        assert cache.get_stats()['errors'] == 1

    @pytest.mark.asyncio
    async def test_write_failure_is_swallowed(self, cache):
        backend = AsyncMock()
        backend.set.side_effect = ConnectionError("down")
        cache.backend = backend

        assert await cache.maybe_cache_output('<b/>', 'box', {}) == '<b/>'
        assert cache.get_stats()['errors'] == 1

    @pytest.mark.asyncio
    async def test_flush_failure_returns_zero(self, cache):
        backend = AsyncMock()
        backend.clear.side_effect = CacheError("down")
        cache.backend = backend

        assert await cache.flush('box') == 0

    @pytest.mark.asyncio
    async def test_unkeyable_attribute_bypasses_cache(self, cache):
        backend = AsyncMock()
        cache.backend = backend
        attrs = {'handle': object()}

        assert cache.cache_key('box', attrs, InvocationContext()) is None
        assert await cache.maybe_return_cached_output(NOT_GENERATED, 'box', attrs) is NOT_GENERATED
        assert await cache.maybe_cache_output('<b/>', 'box', attrs) == '<b/>'
        backend.get.assert_not_called()
        backend.set.assert_not_called()


class TestStatsAndFlush:

    @pytest.mark.asyncio
    async def test_stats(self, cache):
        await cache.maybe_return_cached_output(NOT_GENERATED, 'box', {})
        await cache.maybe_cache_output('<b/>', 'box', {})
        await cache.maybe_return_cached_output(NOT_GENERATED, 'box', {})

        stats = cache.get_stats()
        assert stats['hits'] == 1
        assert stats['misses'] == 1
        assert stats['stores'] == 1
        assert stats['hit_rate'] == 50.0

    @pytest.mark.asyncio
    async def test_flush_one_shortcode(self, cache, backend):
        await cache.maybe_cache_output('<b/>', 'box', {})
        await cache.maybe_cache_output('<p/>', 'panel', {})

        assert await cache.flush('box') == 1
        assert await cache.maybe_return_cached_output(NOT_GENERATED, 'box', {}) is NOT_GENERATED
        assert await cache.maybe_return_cached_output(NOT_GENERATED, 'panel', {}) == '<p/>'

    @pytest.mark.asyncio
    async def test_flush_all(self, cache, backend):
        await cache.maybe_cache_output('<b/>', 'box', {})
        await cache.maybe_cache_output('<p/>', 'panel', {})

        assert await cache.flush() == 2
        assert len(backend) == 0


def test_registry_is_injected(registry, settings):
    cache = ShortcodeCache(registry=registry, backend=LocalCache(), settings=settings)
    cache.set_cache_duration('box', 5)

    assert registry.get_cache_duration('box') == 5


def test_entity_datetime_in_bundle(cache):
    from datetime import datetime

    context = InvocationContext(current_entity=ContentEntity(id=1, modified_gmt=datetime(2024, 1, 1)))
    key = derive_key('box', cache.build_bundle('box', {}, context))

    assert key.startswith('box:')
