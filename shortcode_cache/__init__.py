"""
Shortcode Cache
Transparent cache layer for named, parameterized content generators
"""

__version__ = "1.0.0"
__license__ = "MIT"

from .bootstrap import create_shortcode_cache
from .cache import (
    NOT_GENERATED,
    ShortcodeCache,
    Registry,
    UseCachePolicy,
    cached_shortcode,
    derive_key
)
from .models import (
    SourceKind,
    Named,
    Detailed,
    ContentEntity,
    InvocationContext,
    RegistrationError,
    RegistrationErrors
)

__all__ = [
    'create_shortcode_cache',
    'NOT_GENERATED',
    'ShortcodeCache',
    'Registry',
    'UseCachePolicy',
    'cached_shortcode',
    'derive_key',
    'SourceKind',
    'Named',
    'Detailed',
    'ContentEntity',
    'InvocationContext',
    'RegistrationError',
    'RegistrationErrors',
    '__version__',
]
