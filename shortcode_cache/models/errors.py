"""
Error models and exception handling using Pydantic v2
"""
from typing import Optional, Dict, Any, List
from datetime import datetime, timezone
import logging

from pydantic import BaseModel, Field, ConfigDict

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    """Standard error response"""
    model_config = ConfigDict(populate_by_name=True)

    error_code: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    details: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return self.model_dump(exclude_none=True)


class RegistrationError(Exception):
    """Base class for external data registration errors"""

    error_code = "registration_error"

    def __init__(
        self,
        message: str,
        generator: Optional[str] = None,
        identifier: Optional[str] = None
    ):
        self.message = message
        self.generator = generator
        self.identifier = identifier
        super().__init__(self.message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response"""
        details = {}
        if self.generator:
            details['generator'] = self.generator
        if self.identifier is not None:
            details['identifier'] = self.identifier

        return ErrorResponse(
            error_code=self.error_code,
            message=self.message,
            details=details if details else None
        )


class InvalidKindError(RegistrationError):
    """Unsupported external data source kind"""

    error_code = "invalid_kind"

    def __init__(self, kind: Any, generator: str, identifier: Optional[str] = None):
        self.kind = kind
        super().__init__(
            f"{kind!r} is not a valid kind for external cache data registered for shortcode {generator}.",
            generator=generator,
            identifier=identifier
        )


class MissingNameError(RegistrationError):
    """Structured source spec without a name"""

    error_code = "missing_name"

    def __init__(self, generator: str, identifier: Optional[str] = None):
        super().__init__(
            f"The name argument is missing for external cache data registered for shortcode {generator}.",
            generator=generator,
            identifier=identifier
        )


class InvalidCallbackError(RegistrationError):
    """Callback source whose name cannot be called"""

    error_code = "invalid_callback"

    def __init__(self, name: Any, generator: str, identifier: Optional[str] = None):
        self.name = name
        super().__init__(
            f"{name!r} is not callable and cannot be used as a callback "
            f"for external cache data registered for shortcode {generator}.",
            generator=generator,
            identifier=identifier
        )


class NotFoundError(RegistrationError):
    """Unregistering something that is not registered"""

    error_code = "not_found"

    def __init__(self, generator: str, identifier: Optional[str] = None):
        if identifier is None:
            message = f"No external cache data is registered for shortcode {generator}."
        else:
            message = (
                f"No external cache data value with identifier {identifier} "
                f"is registered for shortcode {generator}."
            )
        super().__init__(message, generator=generator, identifier=identifier)


class RegistrationErrors(RegistrationError):
    """Aggregate of every failure from a bulk registration"""

    error_code = "registration_failed"

    def __init__(self, generator: str, errors: List[RegistrationError]):
        self.errors = list(errors)
        failed = ', '.join(str(e.identifier) for e in self.errors)
        super().__init__(
            f"{len(self.errors)} external cache data value(s) failed to register "
            f"for shortcode {generator}: {failed}",
            generator=generator
        )

    @property
    def codes(self) -> List[str]:
        return [e.error_code for e in self.errors]

    def to_response(self) -> ErrorResponse:
        """Convert to error response listing each failure"""
        return ErrorResponse(
            error_code=self.error_code,
            message=self.message,
            details={
                'generator': self.generator,
                'errors': [
                    {
                        'identifier': e.identifier,
                        'error_code': e.error_code,
                        'message': e.message,
                    }
                    for e in self.errors
                ]
            }
        )


class CacheError(Exception):
    """Storage backend error"""
    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.error_code = "cache_error"
        self.message = message
        self.operation = operation
        self.details = details
        super().__init__(self.message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response"""
        error_details = {}
        if self.operation:
            error_details['operation'] = self.operation
        if self.details:
            error_details.update(self.details)

        return ErrorResponse(
            error_code=self.error_code,
            message=self.message,
            details=error_details if error_details else None
        )
