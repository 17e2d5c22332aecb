"""
Skill Matcher

Compares the skills a property requires with the skills a worker holds.
Proficiency level is ignored; only membership counts.
"""
import logging
from typing import Iterable, List

from .validation_types import ConstraintViolation, ConstraintType


logger = logging.getLogger(__name__)


def _skill_name(requirement) -> str:
    skill = getattr(requirement, 'skill', None)
    if skill is not None and getattr(skill, 'name', None):
        return skill.name
    return getattr(requirement, 'name', None) or f"skill #{requirement.skill_id}"


def match_skills(requirements: Iterable, worker_skill_ids: Iterable[int],
                 worker_name: str = 'Worker', warn_preferred: bool = True) -> List[ConstraintViolation]:
    """
    Report required (and optionally preferred) skills the worker lacks.

    All missing required skills go into one warning so the operator sees
    every gap from a single assignment attempt. Missing preferred skills get
    their own, separately typed warning.

    Args:
        requirements: Objects with skill_id, is_required and a skill name
        worker_skill_ids: Skill ids the worker holds
        worker_name: Name used in messages
        warn_preferred: Also report missing preferred skills
    """
    held = set(worker_skill_ids)
    requirements = list(requirements)
    missing_required = [r for r in requirements if r.is_required and r.skill_id not in held]
    missing_preferred = [r for r in requirements if not r.is_required and r.skill_id not in held]

    violations = []
    if missing_required:
        names = [_skill_name(r) for r in missing_required]
        violations.append(ConstraintViolation(
            constraint_type=ConstraintType.SKILL_MISMATCH,
            message=f"{worker_name} is missing required skills: {', '.join(names)}",
            details={
                'missing_skills': names,
                'missing_skill_ids': [r.skill_id for r in missing_required],
                'skill_level': 'required',
            }
        ))

    if warn_preferred and missing_preferred:
        names = [_skill_name(r) for r in missing_preferred]
        violations.append(ConstraintViolation(
            constraint_type=ConstraintType.SKILL_PREFERRED,
            message=f"{worker_name} is missing preferred skills: {', '.join(names)}",
            details={
                'missing_skills': names,
                'missing_skill_ids': [r.skill_id for r in missing_preferred],
                'skill_level': 'preferred',
            }
        ))

    return violations


class SkillMatcher:
    """Loads property requirements and worker skills from the database."""

    def __init__(self, db_session, models: dict):
        self.db = db_session
        self.CleanerSkill = models['CleanerSkill']
        self.PropertyRequiredSkill = models['PropertyRequiredSkill']

    def requirements(self, property_id: int) -> list:
        return self.db.query(self.PropertyRequiredSkill).filter(
            self.PropertyRequiredSkill.property_id == property_id
        ).order_by(self.PropertyRequiredSkill.id).all()

    def worker_skill_ids(self, worker_id: int) -> set:
        rows = self.db.query(self.CleanerSkill.skill_id).filter(
            self.CleanerSkill.user_id == worker_id
        ).all()
        return {skill_id for (skill_id,) in rows}

    def check(self, worker, property_id: int, warn_preferred: bool = True) -> List[ConstraintViolation]:
        requirements = self.requirements(property_id)
        if not requirements:
            return []
        return match_skills(
            requirements,
            self.worker_skill_ids(worker.id),
            worker_name=worker.full_name,
            warn_preferred=warn_preferred,
        )
