"""
Custom exception hierarchy for type-safe error handling

Provides a structured exception hierarchy that maps to HTTP status codes
and enables consistent error responses across the scheduler API.

Usage:
    from maintplan.error_handlers.exceptions import ValidationException

    def parse_config(args):
        if buffer < 0:
            raise ValidationException('bufferMinutes must be >= 0')

Exception Hierarchy:
    AppException (base)
    ├── ValidationException (400)
    ├── ResourceNotFoundException (404)
    ├── ConflictException (409)
    ├── DataIntegrityException (422)
    ├── ConfigurationException (500)
    ├── DatabaseException (500)
    └── StorageTimeoutException (503, retryable)
"""
from typing import Dict, Any, Optional


class AppException(Exception):
    """
    Base exception for all application errors

    All custom exceptions should inherit from this class to enable
    consistent error handling and response formatting.

    Attributes:
        status_code: HTTP status code for the error
        error_type: String identifier for the error type
        retryable: Whether the caller may retry the same request
        message: Human-readable error message
        details: Additional context about the error
    """
    status_code = 500
    error_type = 'ApplicationError'
    retryable = False

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize application exception

        Args:
            message: Human-readable error message
            status_code: Optional HTTP status code override
            details: Optional dictionary with additional error context
        """
        super().__init__(message)
        self.message = message
        if status_code:
            self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to JSON-serializable dictionary

        Returns:
            Dictionary suitable for JSON response
        """
        result = {
            'error': self.error_type,
            'message': self.message,
            'status_code': self.status_code,
            'retryable': self.retryable
        }

        if self.details:
            result.update(self.details)

        return result

    def __str__(self) -> str:
        return f"{self.error_type}: {self.message}"

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}('{self.message}', status_code={self.status_code})>"


class ValidationException(AppException):
    """
    Invalid input (HTTP 400)

    Raised for malformed dates, negative configuration values, unknown
    execution statuses and missing request fields. Never retried.

    Example:
        >>> if buffer_minutes < 0:
        ...     raise ValidationException('bufferMinutes must be >= 0')
    """
    status_code = 400
    error_type = 'InvalidInput'


class ResourceNotFoundException(AppException):
    """
    Resource not found (HTTP 404)

    Example:
        >>> execution = db.session.get(MaintenanceExecution, execution_id)
        >>> if not execution:
        ...     raise ResourceNotFoundException(f'Execution {execution_id} not found')
    """
    status_code = 404
    error_type = 'NotFound'


class ConflictException(AppException):
    """
    Concurrent write conflict (HTTP 409)

    Raised when two writers race on the same execution key and the
    storage layer could not serialize them.
    """
    status_code = 409
    error_type = 'ConflictError'
    retryable = True


class DataIntegrityException(AppException):
    """
    Data integrity errors (HTTP 422)

    Raised when the stored roster or shift catalog is inconsistent:
    an operator rostered twice, a shift ending before it starts, or a
    roster entry pointing at an unknown shift. Aborts the allocation run.
    """
    status_code = 422
    error_type = 'DataIntegrityError'


class ConfigurationException(AppException):
    """
    Configuration errors (HTTP 500)

    Example:
        >>> if not config.SECRET_KEY:
        ...     raise ConfigurationException('SECRET_KEY not configured')
    """
    status_code = 500
    error_type = 'ConfigurationError'


class DatabaseException(AppException):
    """
    Database operation errors (HTTP 500)

    Raised when database operations fail.
    """
    status_code = 500
    error_type = 'DatabaseError'


class StorageTimeoutException(AppException):
    """
    Storage timeout (HTTP 503)

    Raised when an execution read or write exceeds the configured bound.
    The caller may retry.
    """
    status_code = 503
    error_type = 'StorageTimeout'
    retryable = True
