"""
Shortcode caching system
"""
from .backends import (
    CacheBackend,
    RedisCache,
    LocalCache,
    create_backend
)
from .keys import (
    CONTENT_KEY,
    canonicalize,
    serialize_bundle,
    hash_bundle,
    derive_key
)
from .registry import (
    GeneratorCacheConfig,
    Registry
)
from .coordinator import (
    NOT_GENERATED,
    UseCachePolicy,
    ShortcodeCache
)
from .decorators import (
    cached_shortcode,
    invalidate_shortcode_cache
)

__all__ = [
    # Backends
    'CacheBackend',
    'RedisCache',
    'LocalCache',
    'create_backend',

    # Keys
    'CONTENT_KEY',
    'canonicalize',
    'serialize_bundle',
    'hash_bundle',
    'derive_key',

    # Registry
    'GeneratorCacheConfig',
    'Registry',

    # Coordinator
    'NOT_GENERATED',
    'UseCachePolicy',
    'ShortcodeCache',

    # Decorators
    'cached_shortcode',
    'invalidate_shortcode_cache',
]
