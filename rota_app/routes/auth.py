"""
Request authentication helpers
Resolves the acting user from the signed Flask session and enforces role rank

Sessions are issued by the host application; this module only reads them.
"""
from flask import session, request
from functools import wraps

from rota_app.error_handlers.exceptions import (
    AuthenticationException,
    AuthorizationException,
    CrossTenantException,
    ValidationException,
)
from rota_app.models import get_models, get_db, has_at_least_role, can_access_company


def get_current_user():
    """Get current authenticated user, or None"""
    user_id = session.get('user_id')
    if user_id is None:
        return None

    User = get_models()['User']
    user = get_db().session.query(User).filter(User.id == user_id).first()
    if user is None or not user.is_active:
        return None

    return user


def require_role(min_role):
    """
    Decorator to require an authenticated user of at least min_role

    Raises AuthenticationException when nobody is signed in and
    AuthorizationException when the user's rank is too low. Use beneath
    @handle_errors so both become JSON responses.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = get_current_user()
            if user is None:
                raise AuthenticationException('Authentication required')
            if not has_at_least_role(user.role, min_role):
                raise AuthorizationException(
                    'Insufficient role',
                    details={'required': getattr(min_role, 'value', min_role), 'role': user.role}
                )
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def resolve_company_id(requested=None):
    """
    Company the request acts on.

    Users act on their own company unless a global role names another one
    through the companyId parameter.
    """
    user = get_current_user()
    if requested is None:
        requested = request.args.get('companyId')
        if requested is None and request.is_json:
            requested = (request.get_json(silent=True) or {}).get('companyId')

    if requested in (None, ''):
        if user.company_id is None:
            raise ValidationException('companyId is required')
        return user.company_id

    try:
        company_id = int(requested)
    except (TypeError, ValueError):
        raise ValidationException('companyId must be an integer')

    if not can_access_company(user.role, user.company_id, company_id):
        raise CrossTenantException(
            'You do not have access to this company',
            details={'company_id': company_id}
        )
    return company_id
