"""
External data source models
"""
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from .errors import InvalidCallbackError, InvalidKindError, MissingNameError

SourceName = Union[str, Callable[..., Any]]

# Legacy spellings of the current content entity
CONTENT_ENTITY_GLOBAL = "post"
CONTENT_ENTITY_CALLBACK = "get_post"


class SourceKind(str, Enum):
    """Where an external data value is read from"""
    CALLBACK = "callback"
    GLOBAL = "global"
    REQUEST = "request"
    QUERY_GET = "get"
    QUERY_POST = "post"
    SESSION = "session"
    CONTENT_ENTITY = "content_entity"


class Named(BaseModel):
    """Shorthand spec: a global variable name"""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)


class Detailed(BaseModel):
    """Structured spec with an explicit kind"""
    model_config = ConfigDict(frozen=True)

    name: SourceName
    kind: SourceKind = SourceKind.GLOBAL
    args: Tuple[Any, ...] = ()


SourceSpec = Union[str, Named, Detailed, Mapping[str, Any]]


class ExternalDataSource(BaseModel):
    """One registered way of obtaining a value outside the explicit attributes"""
    model_config = ConfigDict(frozen=True)

    identifier: str
    kind: SourceKind
    name: SourceName
    args: Tuple[Any, ...] = ()

    @property
    def is_callback(self) -> bool:
        return self.kind == SourceKind.CALLBACK


def coerce_kind(kind: Any, generator: str, identifier: Optional[str] = None) -> SourceKind:
    """Convert a kind given as enum, value or member name"""
    if isinstance(kind, SourceKind):
        return kind
    if isinstance(kind, str):
        try:
            return SourceKind(kind.lower())
        except ValueError:
            pass
        try:
            return SourceKind[kind.upper()]
        except KeyError:
            pass
    raise InvalidKindError(kind, generator, identifier)


def make_source(
    generator: str,
    identifier: str,
    name: SourceName,
    kind: Any = SourceKind.GLOBAL,
    args: Tuple[Any, ...] = ()
) -> ExternalDataSource:
    """
    Build a validated source

    The legacy global ``post`` and callback ``get_post`` both fold into
    CONTENT_ENTITY. Any other callback name must be callable.
    """
    source_kind = coerce_kind(kind, generator, identifier)
    if source_kind == SourceKind.GLOBAL and name == CONTENT_ENTITY_GLOBAL:
        source_kind = SourceKind.CONTENT_ENTITY
    elif source_kind == SourceKind.CALLBACK and name == CONTENT_ENTITY_CALLBACK:
        source_kind = SourceKind.CONTENT_ENTITY
    elif source_kind == SourceKind.CALLBACK and not callable(name):
        raise InvalidCallbackError(name, generator, identifier)

    return ExternalDataSource(
        identifier=identifier,
        kind=source_kind,
        name=name,
        args=tuple(args)
    )


def parse_source_spec(generator: str, identifier: str, spec: SourceSpec) -> ExternalDataSource:
    """
    Turn any accepted spec form into an ExternalDataSource

    Accepts a bare name string, ``Named``, ``Detailed`` or a mapping with
    ``name`` and optional ``kind`` (``type`` is accepted as an alias) and ``args``.
    """
    if isinstance(spec, str):
        return make_source(generator, identifier, spec)

    if isinstance(spec, Named):
        return make_source(generator, identifier, spec.name)

    if isinstance(spec, Detailed):
        return make_source(generator, identifier, spec.name, spec.kind, spec.args)

    if isinstance(spec, Mapping):
        if 'name' not in spec or spec['name'] is None:
            raise MissingNameError(generator, identifier)
        kind = spec.get('kind', spec.get('type', SourceKind.GLOBAL))
        return make_source(generator, identifier, spec['name'], kind, tuple(spec.get('args', ())))

    raise MissingNameError(generator, identifier)
