"""
Unified Error Handling System

Usage:
    from rota_app.error_handlers import handle_errors, ValidationException

    @rota_bp.route('/endpoint')
    @handle_errors
    def my_endpoint():
        if not valid:
            raise ValidationException('Invalid data')
        return jsonify({'success': True})
"""
from .exceptions import (
    AppException,
    ValidationException,
    AuthenticationException,
    AuthorizationException,
    CrossTenantException,
    ResourceNotFoundException,
    ConflictException,
    ConfigurationException,
    DatabaseException,
)
from .decorators import handle_errors
from .logging import setup_logging, register_error_handlers


__all__ = [
    # Exceptions
    'AppException',
    'ValidationException',
    'AuthenticationException',
    'AuthorizationException',
    'CrossTenantException',
    'ResourceNotFoundException',
    'ConflictException',
    'ConfigurationException',
    'DatabaseException',
    # Decorators
    'handle_errors',
    # Setup
    'setup_logging',
    'register_error_handlers',
]
