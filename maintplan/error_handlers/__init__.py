"""
Unified Error Handling System

Provides centralized, consistent error handling across the scheduler API.

Usage:
    from maintplan.error_handlers import handle_errors
    from maintplan.error_handlers.exceptions import ValidationException

    @bp.route('/endpoint')
    @handle_errors
    def my_endpoint():
        if not valid:
            raise ValidationException('Invalid data')
        return jsonify({'success': True})
"""
from .exceptions import (
    AppException,
    ValidationException,
    ResourceNotFoundException,
    ConflictException,
    DataIntegrityException,
    ConfigurationException,
    DatabaseException,
    StorageTimeoutException
)
from .decorators import handle_errors


__all__ = [
    # Exceptions
    'AppException',
    'ValidationException',
    'ResourceNotFoundException',
    'ConflictException',
    'DataIntegrityException',
    'ConfigurationException',
    'DatabaseException',
    'StorageTimeoutException',
    # Decorators
    'handle_errors',
    # Setup
    'setup_logging',
    'register_error_handlers',
]


def setup_logging(app):
    """Configure application logging"""
    from maintplan.error_handlers import logging as eh_logging
    return eh_logging.setup_logging(app)


def register_error_handlers(app):
    """Register global error handlers for the Flask app"""
    from maintplan.error_handlers import logging as eh_logging
    eh_logging.register_error_handlers(app)
