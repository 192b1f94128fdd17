"""
Logging utilities
Structured logging with request context and audit events
"""
import logging
import logging.config
import time
from typing import Dict, Any, Optional, Union
from datetime import datetime, timezone
from contextvars import ContextVar

from ..config import Settings, get_settings
from ..models import RegistrationError, RegistrationErrors

# Request context
request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
principal_id_var: ContextVar[Optional[Union[int, str]]] = ContextVar('principal_id', default=None)


class ContextFilter(logging.Filter):
    """Adds request context to log records"""

    def filter(self, record):
        record.request_id = request_id_var.get() or 'no-request-id'
        record.principal_id = principal_id_var.get() or 'anonymous'
        return True


class AuditLogger:
    """Audit logging for integrator-facing events"""

    def __init__(self, name: str = "shortcode_cache"):
        self.logger = logging.getLogger(f"{name}.audit")

    def log_registration_error(self, error: RegistrationError):
        """Log a failed registration, one record per failed identifier"""
        errors = error.errors if isinstance(error, RegistrationErrors) else [error]
        for e in errors:
            self.logger.warning(
                "registration_failed",
                extra={
                    'event_type': 'registration',
                    'error_code': e.error_code,
                    'generator': e.generator,
                    'identifier': e.identifier,
                    'error_message': e.message,
                    'timestamp': datetime.now(timezone.utc).isoformat()
                }
            )

    def log_flush(self, shortcode: Optional[str], count: int):
        self.logger.info(
            "cache_flushed",
            extra={
                'event_type': 'flush',
                'generator': shortcode or '*',
                'count': count,
                'timestamp': datetime.now(timezone.utc).isoformat()
            }
        )


class PerformanceLogger:
    """Async context manager timing an operation"""

    def __init__(self, operation: str, logger: logging.Logger):
        self.operation = operation
        self.logger = logger
        self.start_time: Optional[float] = None
        self.duration: float = 0.0
        self.context: Dict[str, Any] = {}

    def add_context(self, **kwargs):
        self.context.update(kwargs)
        return self

    async def __aenter__(self):
        self.start_time = time.perf_counter()
        self.logger.debug(f"{self.operation} started", extra=self.context)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.perf_counter() - self.start_time

        if exc_type:
            self.logger.error(
                f"{self.operation} failed",
                extra={
                    **self.context,
                    'duration': self.duration,
                    'error': str(exc_val)
                }
            )
        else:
            self.logger.debug(
                f"{self.operation} finished",
                extra={
                    **self.context,
                    'duration': self.duration
                }
            )


def setup_logging(settings: Optional[Settings] = None):
    """Configure logging from settings"""
    settings = settings or get_settings()
    log_config = settings.get_log_config()

    for handler in log_config.get('handlers', {}).values():
        handler.setdefault('filters', []).append('context_filter')

    log_config.setdefault('filters', {})['context_filter'] = {
        '()': ContextFilter
    }

    logging.config.dictConfig(log_config)

    logging.getLogger('redis').setLevel(logging.WARNING)


def set_request_context(request_id: Optional[str] = None, principal_id: Optional[Union[int, str]] = None):
    """Set request context"""
    if request_id:
        request_id_var.set(request_id)
    if principal_id:
        principal_id_var.set(principal_id)


def clear_request_context():
    """Clear request context"""
    request_id_var.set(None)
    principal_id_var.set(None)
