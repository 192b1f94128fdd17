"""
Data models and error definitions
"""
from .sources import (
    SourceKind,
    Named,
    Detailed,
    SourceName,
    SourceSpec,
    ExternalDataSource,
    coerce_kind,
    make_source,
    parse_source_spec
)
from .context import (
    ContentEntity,
    InvocationContext
)
from .errors import (
    ErrorResponse,
    RegistrationError,
    InvalidKindError,
    InvalidCallbackError,
    MissingNameError,
    NotFoundError,
    RegistrationErrors,
    CacheError
)

__all__ = [
    # Sources
    'SourceKind',
    'Named',
    'Detailed',
    'SourceName',
    'SourceSpec',
    'ExternalDataSource',
    'coerce_kind',
    'make_source',
    'parse_source_spec',

    # Context
    'ContentEntity',
    'InvocationContext',

    # Errors
    'ErrorResponse',
    'RegistrationError',
    'InvalidKindError',
    'InvalidCallbackError',
    'MissingNameError',
    'NotFoundError',
    'RegistrationErrors',
    'CacheError',
]
