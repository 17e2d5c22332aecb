"""
Week Cloner

Copies the previous week's tasks into a target week. Cloned tasks keep their
property, workers, duration and checklist but restart at PLANNED.

Cloning is not idempotent: running it twice for the same week creates the
tasks twice. Cloned tasks are not re-validated.
"""
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List

from sqlalchemy.exc import SQLAlchemyError

from rota_app.error_handlers.exceptions import DatabaseException, ValidationException
from rota_app.models.task import clone_transition
from .task_queries import TaskCriteria, find_tasks
from .week_calendar import end_of_day, has_time_of_day, parse_date_param


logger = logging.getLogger(__name__)

ONE_WEEK = timedelta(days=7)


@dataclass
class CloneResult:
    """Outcome of a week clone"""
    cloned_count: int = 0
    tasks: List[object] = field(default_factory=list)

    def to_dict(self):
        return {
            'cloned_tasks_count': self.cloned_count,
            'tasks': [t.to_dict() for t in self.tasks],
        }


class WeekCloner:
    """Seeds a week from the one before it."""

    def __init__(self, db_session, models: dict):
        self.db = db_session
        self.models = models
        self.Task = models['Task']
        self.TaskAssignment = models['TaskAssignment']
        self.ChecklistItem = models['ChecklistItem']

    def clone_week(self, company_id: int, target_week_start, target_week_end) -> CloneResult:
        """
        Clone every scheduled task of the previous week into the target week.

        The source window is the target window moved back seven days. Each
        task is shifted by the distance between the two window starts.

        Args:
            company_id: Company whose tasks are cloned
            target_week_start: First instant of the target week
            target_week_end: Last instant of the target week; a date-only
                value covers that whole day

        Returns:
            CloneResult with the new tasks

        Raises:
            ValidationException: If a bound is missing, malformed or reversed
        """
        target_start = parse_date_param(target_week_start, 'weekStart')
        target_end = parse_date_param(target_week_end, 'weekEnd')
        if not has_time_of_day(target_end):
            target_end = end_of_day(target_end)
        if target_end < target_start:
            raise ValidationException('weekEnd must not be before weekStart')

        previous_start = target_start - ONE_WEEK
        previous_end = target_end - ONE_WEEK
        days_offset = timedelta(days=(target_start - previous_start).days)

        source_tasks = find_tasks(self.db, self.models, TaskCriteria(
            company_id=company_id,
            date_from=previous_start,
            date_to=previous_end,
            scheduled_only=True,
        ))

        logger.info(
            f"Cloning {len(source_tasks)} tasks for company {company_id}: "
            f"{previous_start:%Y-%m-%d} -> {target_start:%Y-%m-%d}"
        )

        cloned = []
        try:
            for source in source_tasks:
                cloned.append(self._clone_task(source, days_offset))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Week clone failed for company {company_id}: {e}", exc_info=True)
            raise DatabaseException("Week clone failed; no tasks were created") from e
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Cloned {len(cloned)} tasks into week of {target_start:%Y-%m-%d}")
        return CloneResult(cloned_count=len(cloned), tasks=cloned)

    def _clone_task(self, source, days_offset: timedelta):
        task = self.Task(
            company_id=source.company_id,
            property_id=source.property_id,
            title=source.title,
            description=source.description,
            scheduled_date=source.scheduled_date + days_offset,
            estimated_duration_minutes=source.estimated_duration_minutes,
            assigned_user_id=source.assigned_user_id,
            status=clone_transition(source.status).value,
        )
        self.db.add(task)
        self.db.flush()

        for assignment in source.assignments:
            self.db.add(self.TaskAssignment(task_id=task.id, user_id=assignment.user_id))

        for item in source.checklists:
            self.db.add(self.ChecklistItem(task_id=task.id, title=item.title, order=item.order))

        return task
