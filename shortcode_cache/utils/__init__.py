"""
Utility module
"""
from .logging import (
    setup_logging,
    PerformanceLogger,
    AuditLogger,
    ContextFilter,
    set_request_context,
    clear_request_context
)

__all__ = [
    'setup_logging',
    'PerformanceLogger',
    'AuditLogger',
    'ContextFilter',
    'set_request_context',
    'clear_request_context',
]
