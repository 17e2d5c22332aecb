"""
Database models for the Rota service
Centralizes all SQLAlchemy model creation using the factory pattern
"""
from .company import create_company_model
from .user import create_user_model, UserRole, has_at_least_role, can_access_company
from .skill import create_skill_models
from .property import create_property_model
from .task import (
    create_task_models,
    TaskStatus,
    ACTIVE_STATUSES,
    ACTIVE_STATUS_VALUES,
    InvalidTransition,
    assignment_transition,
    clone_transition,
)
from .availability import create_availability_models
from .audit import create_audit_model


def init_models(db):
    """
    Initialize all models with the database instance

    Args:
        db: SQLAlchemy database instance

    Returns:
        dict: Dictionary containing all model classes
    """
    Company = create_company_model(db)
    User = create_user_model(db)
    Skill, CleanerSkill, PropertyRequiredSkill = create_skill_models(db)
    Property = create_property_model(db)
    Task, TaskAssignment, ChecklistItem = create_task_models(db)
    CleanerAvailability, LeaveRequest = create_availability_models(db)
    AuditLog = create_audit_model(db)

    return {
        'Company': Company,
        'User': User,
        'Skill': Skill,
        'CleanerSkill': CleanerSkill,
        'PropertyRequiredSkill': PropertyRequiredSkill,
        'Property': Property,
        'Task': Task,
        'TaskAssignment': TaskAssignment,
        'ChecklistItem': ChecklistItem,
        'CleanerAvailability': CleanerAvailability,
        'LeaveRequest': LeaveRequest,
        'AuditLog': AuditLog,
    }


__all__ = [
    'init_models',
    'UserRole',
    'TaskStatus',
    'ACTIVE_STATUSES',
    'ACTIVE_STATUS_VALUES',
    'InvalidTransition',
    'assignment_transition',
    'clone_transition',
    'has_at_least_role',
    'can_access_company',
    # Model registry exports
    'model_registry',
    'get_models',
    'get_db'
]

from .registry import model_registry, get_models, get_db
