"""
Validation types and data classes for rota assignment checks
"""
from dataclasses import dataclass, field
from typing import List, Optional
from enum import Enum


class ConstraintType(str, Enum):
    """Categories of advisory rota findings, in report order"""
    CONFLICT = "conflict"
    AVAILABILITY = "availability"
    ON_LEAVE = "on_leave"
    SKILL_MISMATCH = "skill_mismatch"
    SKILL_PREFERRED = "skill_preferred"
    MAX_HOURS = "max_hours"


@dataclass
class ConstraintViolation:
    """A single advisory finding. Never raised, only reported."""
    constraint_type: ConstraintType
    message: str
    details: dict = field(default_factory=dict)

    def __str__(self):
        return f"{self.constraint_type.value}: {self.message}"

    def to_dict(self):
        return {
            'type': self.constraint_type.value,
            'severity': 'warning',
            'message': self.message,
            'details': self.details,
        }


@dataclass(frozen=True, order=True)
class ConflictRecord:
    """One task involved in a same-day double booking"""
    task_id: int
    worker_id: int
    reason: str

    def to_dict(self):
        return {'task_id': self.task_id, 'worker_id': self.worker_id, 'reason': self.reason}


@dataclass
class ValidationResult:
    """
    Result of validating a proposed assignment

    Every finding is a warning; an assignment is always allowed.
    """
    violations: List[ConstraintViolation] = field(default_factory=list)

    @property
    def warnings(self) -> List[str]:
        """Human-readable warnings, in check order"""
        return [v.message for v in self.violations]

    @property
    def has_warnings(self) -> bool:
        return len(self.violations) > 0

    def add_violation(self, violation: ConstraintViolation):
        self.violations.append(violation)

    def extend(self, violations: List[ConstraintViolation]):
        self.violations.extend(violations)

    def of_type(self, constraint_type: ConstraintType) -> List[ConstraintViolation]:
        return [v for v in self.violations if v.constraint_type == constraint_type]

    def to_dict(self):
        return {
            'valid': True,
            'can_assign': True,
            'warnings': self.warnings,
            'violations': [v.to_dict() for v in self.violations],
        }


@dataclass
class AssignmentOutcome:
    """Result of a committed assignment"""
    task: object
    validation: ValidationResult
    warnings_acknowledged: bool = False
    previous_worker_id: Optional[int] = None

    @property
    def warnings(self) -> List[str]:
        return self.validation.warnings
