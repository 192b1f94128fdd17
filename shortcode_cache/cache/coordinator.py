"""
Shortcode cache coordinator
Looks up cached output before a shortcode runs and stores it afterwards
"""
import logging
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Union

from ..config import Settings, get_settings
from ..models import InvocationContext, SourceKind, SourceName, SourceSpec
from ..monitoring.metrics import MetricsCollector
from .backends import CacheBackend, create_backend
from .keys import CONTENT_KEY, POST_ID_KEY, POST_LAST_CHANGED_KEY, USER_ID_KEY, derive_key
from .registry import Registry

logger = logging.getLogger(__name__)

# Output value meaning "nothing generated yet" in the pre-phase
NOT_GENERATED = None

UseCacheOverride = Callable[[bool, Optional[str], bool], bool]


class UseCachePolicy(str, Enum):
    """Per-shortcode override of the use-cache decision"""
    DEFAULT = "default"
    FORCE_ON = "force_on"
    FORCE_OFF = "force_off"


class ShortcodeCache:
    """
    Cache coordinator

    Hook ``maybe_return_cached_output`` in before a shortcode is generated and
    ``maybe_cache_output`` after it. Both derive the same key from the
    shortcode attributes, registered external data and the raw content.
    """

    def __init__(
        self,
        registry: Optional[Registry] = None,
        backend: Optional[CacheBackend] = None,
        settings: Optional[Settings] = None
    ):
        self.settings = settings or get_settings()
        self.registry = registry if registry is not None else Registry()
        self.backend = backend if backend is not None else create_backend(self.settings)
        self.namespace = self.settings.namespace
        self._policies: Dict[str, Union[UseCachePolicy, UseCacheOverride]] = {}
        self._stats = {
            'hits': 0,
            'misses': 0,
            'stores': 0,
            'errors': 0
        }

    # Registration

    def register_external_data_values(self, name: str, sources: Mapping[str, SourceSpec]):
        self.registry.register_external_data_values(name, sources)

    def register_external_data_value(
        self,
        name: str,
        identifier: str,
        source_name: SourceName,
        kind: Any = SourceKind.GLOBAL,
        args: tuple = ()
    ):
        self.registry.register_external_data_value(name, identifier, source_name, kind, args)

    def unregister_external_data_value(self, name: str, identifier: str):
        self.registry.unregister_external_data_value(name, identifier)

    def set_cache_duration(self, name: str, duration: int):
        self.registry.set_cache_duration(name, duration)

    def set_use_cache_policy(self, name: str, policy: Union[UseCachePolicy, UseCacheOverride]):
        """Force caching on or off for a shortcode, or decide with a callable"""
        self._policies[name] = policy

    def disable_cache(self, *names: str):
        for name in names:
            self.set_use_cache_policy(name, UseCachePolicy.FORCE_OFF)

    # Phases

    async def maybe_return_cached_output(
        self,
        output: Optional[str],
        name: str,
        attrs: Optional[Mapping[str, Any]] = None,
        context: Optional[InvocationContext] = None
    ) -> Optional[str]:
        """
        Pre-phase: cached output if there is any, else ``output`` unchanged

        Args:
            output: NOT_GENERATED unless an earlier hook already produced output
            name: Shortcode name
            attrs: Explicit shortcode attributes
            context: Invocation context
        """
        if not self.use_cache(name, output, pre=True):
            return output

        context = context or InvocationContext()
        cache_key = self.cache_key(name, attrs, context)
        if cache_key is None:
            return output

        cached_output = await self.get_cached_output(cache_key, name)
        if cached_output is None:
            return output

        return cached_output

    async def maybe_cache_output(
        self,
        output: str,
        name: str,
        attrs: Optional[Mapping[str, Any]] = None,
        context: Optional[InvocationContext] = None
    ) -> str:
        """Post-phase: store generated ``output`` and pass it through"""
        if not self.use_cache(name, output, pre=False):
            return output

        context = context or InvocationContext()
        cache_key = self.cache_key(name, attrs, context)
        if cache_key is None:
            return output
        duration = self.get_cache_duration(name, context)

        await self.set_cached_output(cache_key, output, duration, name)

        return output

    def use_cache(self, name: str, output: Optional[str] = NOT_GENERATED, pre: bool = False) -> bool:
        """Skip the lookup when an earlier hook already supplied output, then apply overrides"""
        if not self.settings.enabled:
            return False

        use_cache = not pre or output is NOT_GENERATED

        policy = self._policies.get(name, UseCachePolicy.DEFAULT)
        if policy == UseCachePolicy.FORCE_ON:
            return True
        if policy == UseCachePolicy.FORCE_OFF:
            return False
        if callable(policy):
            return bool(policy(use_cache, output, pre))
        return use_cache

    def build_bundle(
        self,
        name: str,
        attrs: Optional[Mapping[str, Any]],
        context: InvocationContext
    ) -> Dict[str, Any]:
        """All data the cache key of this invocation depends on"""
        attrs = dict(attrs or {})

        if name in self.registry:
            bundle = self.registry.resolve_bundle(name, attrs, context)
        else:
            # Without registration, vary by current post and user
            bundle = attrs
            entity = context.current_entity
            if entity is not None:
                bundle[POST_ID_KEY] = entity.id
                bundle[POST_LAST_CHANGED_KEY] = entity.modified_gmt
            if context.is_authenticated:
                bundle[USER_ID_KEY] = context.principal_id

        bundle[CONTENT_KEY] = context.content
        return bundle

    def cache_key(
        self,
        name: str,
        attrs: Optional[Mapping[str, Any]],
        context: InvocationContext
    ) -> Optional[str]:
        """Key for this invocation, or None when the bundle has no stable form"""
        try:
            return derive_key(name, self.build_bundle(name, attrs, context))
        except TypeError as e:
            logger.warning(f"Not caching {name}: {e}")
            return None

    def get_cache_duration(self, name: str, context: Optional[InvocationContext] = None) -> int:
        """Registered duration; unregistered shortcodes get an hour for logged-in users"""
        duration = self.registry.get_cache_duration(name)
        if duration is not None:
            return duration

        if context is not None and context.is_authenticated:
            return self.settings.default_user_duration

        return 0

    # Storage

    async def get_cached_output(self, cache_key: str, name: str = "") -> Optional[str]:
        """Cached value, or None on a miss or backend failure"""
        try:
            value = await self.backend.get(cache_key, self.namespace)
        except Exception as e:
            self._record_error('get', name)
            logger.error(f"Cache read error for {cache_key}: {e}")
            return None

        if value is not None:
            self._stats['hits'] += 1
            if self.settings.metrics_enabled:
                MetricsCollector.record_cache_hit(name)
            logger.debug(f"Cache hit: {cache_key}")
        else:
            self._stats['misses'] += 1
            if self.settings.metrics_enabled:
                MetricsCollector.record_cache_miss(name)
            logger.debug(f"Cache miss: {cache_key}")

        return value

    async def set_cached_output(self, cache_key: str, value: str, duration: int = 0, name: str = "") -> bool:
        """Best-effort write; failures are logged, never raised"""
        try:
            success = await self.backend.set(cache_key, value, self.namespace, duration)
        except Exception as e:
            self._record_error('set', name)
            logger.error(f"Cache write error for {cache_key}: {e}")
            return False

        if success:
            self._stats['stores'] += 1
            if self.settings.metrics_enabled:
                MetricsCollector.record_cache_store(name)
            logger.debug(f"Cached: {cache_key} (duration: {duration}s)")

        return success

    async def flush(self, name: Optional[str] = None) -> int:
        """Drop cached output of one shortcode, or of all of them"""
        prefix = f"{name}:" if name else None
        try:
            count = await self.backend.clear(self.namespace, prefix)
        except Exception as e:
            self._record_error('clear', name or '')
            logger.error(f"Cache flush error: {e}")
            return 0

        logger.info(f"Flushed {count} cached outputs (shortcode: {name or 'all'})")
        return count

    def _record_error(self, operation: str, name: str):
        self._stats['errors'] += 1
        if self.settings.metrics_enabled:
            MetricsCollector.record_error(operation, name)

    def get_stats(self) -> Dict[str, Any]:
        total_requests = self._stats['hits'] + self._stats['misses']
        hit_rate = (self._stats['hits'] / total_requests * 100) if total_requests > 0 else 0

        return {
            **self._stats,
            'total_requests': total_requests,
            'hit_rate': round(hit_rate, 2)
        }

    async def close(self):
        await self.backend.close()
