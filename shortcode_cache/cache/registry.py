"""
Per-shortcode external data and duration registry
"""
import logging
import threading
from typing import Any, Dict, Iterator, List, Mapping, Optional

from ..models import (
    ExternalDataSource,
    InvocationContext,
    NotFoundError,
    RegistrationError,
    RegistrationErrors,
    SourceKind,
    SourceName,
    SourceSpec,
    make_source,
    parse_source_spec
)

logger = logging.getLogger(__name__)

LAST_CHANGED_SUFFIX = "_last_changed"


class GeneratorCacheConfig:
    """External data sources and cache duration of one shortcode"""

    def __init__(self, name: str):
        self.name = name
        self.duration = 0
        self._callbacks: Dict[str, ExternalDataSource] = {}
        self._context_sources: Dict[str, ExternalDataSource] = {}

    @property
    def callbacks(self) -> Dict[str, ExternalDataSource]:
        return dict(self._callbacks)

    @property
    def context_sources(self) -> Dict[str, ExternalDataSource]:
        return dict(self._context_sources)

    def __iter__(self) -> Iterator[ExternalDataSource]:
        yield from list(self._callbacks.values())
        yield from list(self._context_sources.values())

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._callbacks or identifier in self._context_sources

    def add(self, source: ExternalDataSource):
        """Store a source; an identifier lives in only one of the two tables"""
        if source.is_callback:
            self._context_sources.pop(source.identifier, None)
            self._callbacks[source.identifier] = source
        else:
            self._callbacks.pop(source.identifier, None)
            self._context_sources[source.identifier] = source

    def remove(self, identifier: str):
        if identifier in self._callbacks:
            del self._callbacks[identifier]
            return
        if identifier in self._context_sources:
            del self._context_sources[identifier]
            return
        raise NotFoundError(self.name, identifier)

    def fill_external_data(
        self,
        attrs: Mapping[str, Any],
        context: InvocationContext
    ) -> Dict[str, Any]:
        """
        Add every registered external value not already present in ``attrs``

        Callback sources are evaluated before context sources, each in
        registration order. Values that cannot be found are left out.
        """
        bundle = dict(attrs)

        for source in self:
            if source.identifier in bundle:
                continue

            if source.kind == SourceKind.CONTENT_ENTITY:
                _fill_current_entity(bundle, source.identifier, context)
            elif source.kind == SourceKind.CALLBACK:
                bundle[source.identifier] = source.name(*source.args)
            else:
                found, value = context.lookup(source.kind, source.name)
                if found:
                    bundle[source.identifier] = value

        return bundle


def _fill_current_entity(bundle: Dict[str, Any], identifier: str, context: InvocationContext):
    entity = context.current_entity
    if entity is None:
        return
    bundle[identifier] = entity.id
    bundle[identifier + LAST_CHANGED_SUFFIX] = entity.modified_gmt


class Registry:
    """
    Shortcode name -> GeneratorCacheConfig

    Entries are created on first registration and live as long as the
    registry. Writers are serialized; readers see whole entries.
    """

    def __init__(self):
        self._tags: Dict[str, GeneratorCacheConfig] = {}
        self._lock = threading.RLock()

    def __contains__(self, name: str) -> bool:
        return name in self._tags

    def get(self, name: str) -> Optional[GeneratorCacheConfig]:
        return self._tags.get(name)

    def names(self) -> List[str]:
        return list(self._tags)

    def _get_or_create(self, name: str) -> GeneratorCacheConfig:
        tag = self._tags.get(name)
        if tag is None:
            tag = GeneratorCacheConfig(name)
            self._tags[name] = tag
        return tag

    def register_external_data_values(self, name: str, sources: Mapping[str, SourceSpec]):
        """
        Register several external data sources for a shortcode

        Args:
            name: Shortcode name
            sources: identifier -> spec, where spec is a global name string,
                ``Named``, ``Detailed`` or a mapping with ``name`` and
                optionally ``kind`` and ``args``

        Raises:
            RegistrationErrors: listing every entry that failed; the valid
                entries are registered regardless
        """
        errors: List[RegistrationError] = []

        with self._lock:
            tag = self._get_or_create(name)
            for identifier, spec in sources.items():
                try:
                    tag.add(parse_source_spec(name, identifier, spec))
                except RegistrationError as e:
                    errors.append(e)

        if errors:
            raise RegistrationErrors(name, errors)

    def register_external_data_value(
        self,
        name: str,
        identifier: str,
        source_name: SourceName,
        kind: Any = SourceKind.GLOBAL,
        args: tuple = ()
    ):
        """
        Register one external data source for a shortcode

        ``identifier`` is the bundle key the value is stored under. Passing the
        name of a shortcode attribute makes the source act as its fallback.

        Raises:
            InvalidKindError: if ``kind`` is not a SourceKind
            InvalidCallbackError: if a callback source is not callable
        """
        source = make_source(name, identifier, source_name, kind, args)
        with self._lock:
            self._get_or_create(name).add(source)
        logger.debug(f"Registered {source.kind.value} source {identifier} for {name}")

    def unregister_external_data_value(self, name: str, identifier: str):
        """
        Raises:
            NotFoundError: if the shortcode or the identifier is not registered
        """
        with self._lock:
            tag = self._tags.get(name)
            if tag is None:
                raise NotFoundError(name)
            tag.remove(identifier)

    def set_cache_duration(self, name: str, duration: int):
        """Duration in seconds, 0 for no expiration; negatives are made positive"""
        with self._lock:
            self._get_or_create(name).duration = abs(int(duration))

    def get_cache_duration(self, name: str) -> Optional[int]:
        """Registered duration, or None when the shortcode has no entry"""
        tag = self._tags.get(name)
        if tag is None:
            return None
        return tag.duration

    def resolve_bundle(
        self,
        name: str,
        attrs: Mapping[str, Any],
        context: InvocationContext
    ) -> Dict[str, Any]:
        """Explicit attributes merged with registered external data"""
        tag = self._tags.get(name)
        if tag is None:
            return dict(attrs)
        return tag.fill_external_data(attrs, context)
