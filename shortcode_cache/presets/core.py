"""
Support for the built-in shortcodes
"""
from ..cache import ShortcodeCache

# Output depends on a per-request instance counter the key cannot capture
UNCACHEABLE = ('gallery', 'playlist', 'audio', 'video')


def register_core_support(cache: ShortcodeCache):
    cache.disable_cache(*UNCACHEABLE)

    for tag in ('caption', 'wp_caption'):
        cache.register_external_data_values(tag, {})
        cache.set_cache_duration(tag, 0)
