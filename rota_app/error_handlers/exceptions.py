"""
Custom exception hierarchy for type-safe error handling

Maps hard failures to HTTP status codes so every endpoint returns
consistent error responses. Advisory rota findings are never raised;
they travel as ConstraintViolation objects instead.

Exception Hierarchy:
    AppException (base)
    ├── ValidationException (400)
    ├── AuthenticationException (401)
    ├── AuthorizationException (403)
    │   └── CrossTenantException (403)
    ├── ResourceNotFoundException (404)
    ├── ConflictException (409)
    ├── ConfigurationException (500)
    └── DatabaseException (500)
"""
from typing import Dict, Any, Optional


class AppException(Exception):
    """
    Base exception for all application errors

    Attributes:
        status_code: HTTP status code for the error
        error_type: String identifier for the error type
        message: Human-readable error message
        details: Additional context about the error
    """
    status_code = 500
    error_type = 'ApplicationError'

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
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
            'success': False,
            'error': self.error_type,
            'message': self.message,
            'status_code': self.status_code
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

    Missing identifiers, malformed dates, or a request the task state
    does not allow (e.g. assigning an archived task).
    """
    status_code = 400
    error_type = 'ValidationError'


class AuthenticationException(AppException):
    """No authenticated user on the request (HTTP 401)"""
    status_code = 401
    error_type = 'AuthenticationError'


class AuthorizationException(AppException):
    """
    Authorization errors (HTTP 403)

    Example:
        >>> if not has_at_least_role(user.role, UserRole.MANAGER):
        ...     raise AuthorizationException('Manager access required')
    """
    status_code = 403
    error_type = 'AuthorizationError'


class CrossTenantException(AuthorizationException):
    """
    Worker and task belong to different companies (HTTP 403)

    Always a hard failure; never downgraded to a warning.
    """
    error_type = 'CrossTenant'


class ResourceNotFoundException(AppException):
    """
    Resource not found (HTTP 404)

    Example:
        >>> task = session.get(Task, task_id)
        >>> if not task:
        ...     raise ResourceNotFoundException(f'Task {task_id} not found')
    """
    status_code = 404
    error_type = 'NotFound'


class ConflictException(AppException):
    """
    Write refused because of advisory findings (HTTP 409)

    Only raised when the deployment opts into ROTA_REJECT_ON_WARNINGS and
    the caller did not acknowledge the warnings.
    """
    status_code = 409
    error_type = 'Conflict'


class ConfigurationException(AppException):
    """Application is misconfigured (HTTP 500)"""
    status_code = 500
    error_type = 'ConfigurationError'


class DatabaseException(AppException):
    """Database operation errors (HTTP 500)"""
    status_code = 500
    error_type = 'DatabaseError'
