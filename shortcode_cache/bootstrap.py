"""
Builds a ready-to-use shortcode cache
"""
import logging
from typing import Any, Optional

from .cache import CacheBackend, Registry, ShortcodeCache
from .config import Settings, get_settings
from .presets import register_support
from .utils import setup_logging

logger = logging.getLogger(__name__)


def create_shortcode_cache(
    settings: Optional[Settings] = None,
    backend: Optional[CacheBackend] = None,
    store: Optional[Any] = None,
    with_presets: bool = True,
    configure_logging: bool = False
) -> ShortcodeCache:
    """
    Create a ShortcodeCache and register the integration presets

    The caller keeps the returned instance and hands its
    ``maybe_return_cached_output`` / ``maybe_cache_output`` methods to the
    shortcode dispatcher. Hosts that own their logging setup leave
    ``configure_logging`` off.
    """
    settings = settings or get_settings()
    if configure_logging:
        setup_logging(settings)

    cache = ShortcodeCache(registry=Registry(), backend=backend, settings=settings)

    if with_presets:
        register_support(cache, store=store)

    logger.info(
        f"Shortcode cache ready (backend: {type(cache.backend).__name__}, "
        f"namespace: {cache.namespace})"
    )
    return cache
