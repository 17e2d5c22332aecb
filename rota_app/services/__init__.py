"""
Services package for rota business logic
"""

from .validation_types import (
    AssignmentOutcome,
    ConflictRecord,
    ConstraintType,
    ConstraintViolation,
    ValidationResult,
)

from .task_queries import TaskCriteria, find_tasks
from .conflict_detector import ConflictDetector, detect_conflicts
from .availability_checker import AvailabilityChecker, check_availability, check_leave
from .skill_matcher import SkillMatcher, match_skills
from .workload_analytics import WorkloadAnalytics, summarize_team
from .assignment_validator import AssignmentValidator
from .week_cloner import CloneResult, WeekCloner

__all__ = [
    # Validation types
    'AssignmentOutcome',
    'ConflictRecord',
    'ConstraintType',
    'ConstraintViolation',
    'ValidationResult',
    # Queries
    'TaskCriteria',
    'find_tasks',
    # Pure checks
    'detect_conflicts',
    'check_availability',
    'check_leave',
    'match_skills',
    'summarize_team',
    # Services
    'ConflictDetector',
    'AvailabilityChecker',
    'SkillMatcher',
    'WorkloadAnalytics',
    'AssignmentValidator',
    'WeekCloner',
    'CloneResult',
]
