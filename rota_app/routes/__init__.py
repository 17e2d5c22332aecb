"""
Routes package for the Rota service
Centralizes all route blueprints
"""
from .auth import (
    get_current_user,
    require_role,
    resolve_company_id,
)
from .rota import rota_bp
from .health import health_bp

__all__ = [
    'rota_bp',
    'health_bp',
    'get_current_user',
    'require_role',
    'resolve_company_id',
]
