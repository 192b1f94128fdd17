"""
Cache decorators
Wrap shortcode handlers with the pre- and post-phase of a ShortcodeCache
"""
import functools
import inspect
import logging
from typing import Any, Callable, Mapping, Optional

from ..models import InvocationContext
from ..utils.logging import AuditLogger, PerformanceLogger
from .coordinator import NOT_GENERATED, ShortcodeCache

logger = logging.getLogger(__name__)


def cached_shortcode(cache: ShortcodeCache, name: Optional[str] = None):
    """
    Shortcode cache decorator

    The decorated handler is called as ``handler(attrs, context)`` and must
    return the generated output.

    Args:
        cache: Cache the phases run against
        name: Shortcode name (defaults to the function name)
    """
    def decorator(func: Callable) -> Callable:
        tag = name or func.__name__

        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(
                attrs: Optional[Mapping[str, Any]] = None,
                context: Optional[InvocationContext] = None
            ):
                attrs = dict(attrs or {})
                context = context or InvocationContext()

                output = await cache.maybe_return_cached_output(NOT_GENERATED, tag, attrs, context)
                if output is not NOT_GENERATED:
                    return output

                async with PerformanceLogger(f"{tag}_generate", logger).add_context(shortcode=tag):
                    output = await func(attrs, context)

                return await cache.maybe_cache_output(output, tag, attrs, context)

            async_wrapper.shortcode = tag
            return async_wrapper
        else:
            @functools.wraps(func)
            def sync_wrapper(*args, **kwargs):
                # Phases are async; sync handlers run uncached
                logger.warning(f"Caching is not supported for sync shortcode handler {func.__name__}")
                return func(*args, **kwargs)

            sync_wrapper.shortcode = tag
            return sync_wrapper

    return decorator


def invalidate_shortcode_cache(cache: ShortcodeCache, name: Optional[str] = None):
    """
    Flush cached output after the decorated coroutine has run

    Args:
        cache: Cache to flush
        name: Shortcode whose output to drop (None for all)
    """
    def decorator(func: Callable) -> Callable:
        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                result = await func(*args, **kwargs)

                count = await cache.flush(name)
                AuditLogger().log_flush(name, count)

                return result

            return async_wrapper
        else:
            @functools.wraps(func)
            def sync_wrapper(*args, **kwargs):
                result = func(*args, **kwargs)
                logger.warning(f"Cache invalidation is not supported for sync function {func.__name__}")
                return result

            return sync_wrapper

    return decorator
