"""
Assignment Validation Service

Validates a proposed "assign worker W to task T on date D" and, on request,
performs the assignment.

Findings are advisory and reported in a fixed order:
    conflicts -> availability/leave -> skills -> capacity
Every check runs; none short-circuits another.

Hard failures are raised instead of reported:
- task, worker or property not found
- worker is not a cleaner
- worker and task belong to different companies
- missing identifiers, malformed dates, archived task
"""
import logging
import time
from datetime import datetime
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from rota_app.error_handlers.exceptions import (
    ConflictException,
    CrossTenantException,
    DatabaseException,
    ResourceNotFoundException,
    ValidationException,
)
from rota_app.models.task import InvalidTransition, assignment_transition, is_regression
from rota_app.models.user import UserRole
from .availability_checker import AvailabilityChecker
from .conflict_detector import ConflictDetector
from .skill_matcher import SkillMatcher
from .validation_types import (
    AssignmentOutcome,
    ConstraintType,
    ConstraintViolation,
    ValidationResult,
)
from .week_calendar import parse_date_param, to_day, week_bounds
from .workload_analytics import DEFAULT_DURATION_MINUTES, WorkloadAnalytics


logger = logging.getLogger(__name__)


class AssignmentValidator:
    """
    Composes the conflict, availability, skill and workload checks into one
    warnings report for a proposed assignment.
    """

    # Validations slower than this are logged as warnings
    SLOW_VALIDATION_MS = 200

    def __init__(self, db_session, models: dict,
                 default_duration_minutes: int = DEFAULT_DURATION_MINUTES,
                 warn_preferred_skills: bool = True):
        """
        Initialize AssignmentValidator.

        Args:
            db_session: SQLAlchemy database session
            models: Dictionary of model classes from the registry
            default_duration_minutes: Duration assumed for tasks without an estimate
            warn_preferred_skills: Also report missing preferred skills
        """
        self.db = db_session
        self.models = models
        self.Task = models['Task']
        self.User = models['User']
        self.Property = models['Property']
        self.TaskAssignment = models['TaskAssignment']
        self.AuditLog = models['AuditLog']
        self.default_duration_minutes = default_duration_minutes
        self.warn_preferred_skills = warn_preferred_skills

        self.conflicts = ConflictDetector(db_session, models)
        self.availability = AvailabilityChecker(db_session, models)
        self.skills = SkillMatcher(db_session, models)
        self.workload = WorkloadAnalytics(db_session, models, default_duration_minutes)

    # ------------------------------------------------------------------
    # Lookups (hard failures)
    # ------------------------------------------------------------------

    def _load_task(self, task_id: int, lock: bool = False):
        query = self.db.query(self.Task).filter(self.Task.id == task_id)
        if lock:
            query = query.with_for_update()
        task = query.first()
        if not task:
            logger.error(f"Task not found: {task_id}")
            raise ResourceNotFoundException(f"Task not found: {task_id}")
        return task

    def _load_worker(self, worker_id: int, task, lock: bool = False):
        query = self.db.query(self.User).filter(self.User.id == worker_id)
        if lock:
            query = query.with_for_update()
        worker = query.first()
        if not worker or worker.role != UserRole.CLEANER.value:
            logger.error(f"Cleaner not found: {worker_id}")
            raise ResourceNotFoundException(f"Cleaner not found: {worker_id}")
        if worker.company_id != task.company_id:
            logger.warning(
                f"Cross-tenant assignment rejected: worker {worker.id} (company {worker.company_id}) "
                f"-> task {task.id} (company {task.company_id})"
            )
            raise CrossTenantException(
                "Cleaner does not belong to the task's company",
                details={'task_id': task.id, 'worker_id': worker.id}
            )
        return worker

    def _check_property(self, property_id: int):
        exists = self.db.query(self.Property.id).filter(self.Property.id == property_id).first()
        if not exists:
            raise ResourceNotFoundException(f"Property not found: {property_id}")

    @staticmethod
    def _assignment_status(task):
        try:
            return assignment_transition(task.status)
        except InvalidTransition as e:
            raise ValidationException(str(e), details={'task_id': task.id, 'status': task.status})

    @staticmethod
    def _require_id(value, name: str) -> int:
        if value is None or value == '':
            raise ValidationException(f"{name} is required")
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ValidationException(f"{name} must be an integer")

    @staticmethod
    def _require_duration(value) -> int:
        if isinstance(value, bool):
            raise ValidationException('estimatedDurationMinutes must be an integer')
        try:
            minutes = int(value)
        except (TypeError, ValueError):
            raise ValidationException('estimatedDurationMinutes must be an integer')
        if minutes < 0:
            raise ValidationException(
                'estimatedDurationMinutes must not be negative',
                details={'estimatedDurationMinutes': minutes}
            )
        return minutes

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(
        self,
        worker_id: int,
        task_id: int,
        scheduled_date=None,
        property_id: Optional[int] = None,
        estimated_duration_minutes: Optional[int] = None,
        week_start: Optional[datetime] = None,
        week_end: Optional[datetime] = None,
    ) -> ValidationResult:
        """
        Validate assigning worker_id to task_id.

        Args:
            worker_id: Cleaner to assign
            task_id: Task to assign
            scheduled_date: Proposed date; defaults to the task's own date
            property_id: Defaults to the task's property
            estimated_duration_minutes: Defaults to the task's estimate (or 120)
            week_start: Capacity window start; defaults to the Monday of the scheduled week
            week_end: Capacity window end; defaults to the following Sunday

        Returns:
            ValidationResult whose warnings are never fatal

        Raises:
            ValidationException, ResourceNotFoundException, CrossTenantException
        """
        worker_id = self._require_id(worker_id, 'cleanerId')
        task_id = self._require_id(task_id, 'taskId')
        task = self._load_task(task_id)
        worker = self._load_worker(worker_id, task)
        self._assignment_status(task)
        return self._run_checks(
            task, worker, scheduled_date, property_id,
            estimated_duration_minutes, week_start, week_end
        )

    def _run_checks(self, task, worker, scheduled_date, property_id,
                    estimated_duration_minutes, week_start, week_end) -> ValidationResult:
        start_time = time.time()

        if scheduled_date is not None:
            scheduled = parse_date_param(scheduled_date, 'scheduledDate')
        else:
            scheduled = task.scheduled_date

        if property_id is None:
            property_id = task.property_id
        else:
            property_id = self._require_id(property_id, 'propertyId')
            if property_id != task.property_id:
                self._check_property(property_id)

        if estimated_duration_minutes in (None, ''):
            estimated_duration_minutes = None
        else:
            estimated_duration_minutes = self._require_duration(estimated_duration_minutes)
        duration = estimated_duration_minutes or task.estimated_duration_minutes or self.default_duration_minutes

        if scheduled is not None and (week_start is None or week_end is None):
            week_start, week_end = week_bounds(scheduled)

        logger.info(
            f"Validating assignment: worker={worker.id}, task={task.id}, "
            f"date={scheduled}, duration={duration}min"
        )

        result = ValidationResult()
        result.extend(self.conflicts.check_assignment(worker, task.id, scheduled))
        result.extend(self.availability.check(worker, scheduled))
        result.extend(self.skills.check(worker, property_id, self.warn_preferred_skills))
        result.extend(self._check_capacity(worker, task.id, duration, week_start, week_end))

        elapsed_ms = (time.time() - start_time) * 1000
        if elapsed_ms > self.SLOW_VALIDATION_MS:
            logger.warning(
                f"Slow assignment validation: {elapsed_ms:.0f}ms for worker={worker.id}, task={task.id}"
            )
        else:
            logger.info(
                f"Validation complete in {elapsed_ms:.0f}ms: warnings={len(result.violations)}"
            )

        return result

    def _check_capacity(self, worker, task_id: int, duration_minutes: int,
                        week_start, week_end) -> List[ConstraintViolation]:
        """Warn if this task would push the worker past max_working_hours for the week."""
        if not worker.max_working_hours or week_start is None or week_end is None:
            return []

        current_hours = self.workload.hours_for_worker(
            worker.id, week_start, week_end, exclude_task_id=task_id
        )
        new_hours = duration_minutes / 60
        total_hours = current_hours + new_hours

        if total_hours <= worker.max_working_hours:
            return []

        logger.debug(
            f"Capacity warning: worker {worker.id} would reach {total_hours:.1f}h "
            f"of {worker.max_working_hours}h"
        )
        return [ConstraintViolation(
            constraint_type=ConstraintType.MAX_HOURS,
            message=(
                f"Assignment would exceed maximum working hours "
                f"({total_hours:.1f}/{worker.max_working_hours:g} hours)"
            ),
            details={
                'current_hours': round(current_hours, 1),
                'new_task_hours': round(new_hours, 1),
                'total_hours': round(total_hours, 1),
                'max_hours': worker.max_working_hours,
            }
        )]

    # ------------------------------------------------------------------
    # Assignment
    # ------------------------------------------------------------------

    def _lock_worker_day(self, worker_id: int, day):
        """
        Serialize assignments for one worker and day.

        The worker row is already held FOR UPDATE; PostgreSQL additionally
        takes a transaction-scoped advisory lock keyed by (worker, day).
        """
        if day is None:
            return
        if self.db.get_bind().dialect.name == 'postgresql':
            self.db.execute(
                text('SELECT pg_advisory_xact_lock(:worker_key, :day_key)'),
                {'worker_key': worker_id, 'day_key': to_day(day).toordinal()}
            )

    def assign(
        self,
        task_id: int,
        worker_id: int,
        scheduled_date=None,
        ignore_warnings: bool = False,
        acting_user_id: Optional[int] = None,
        reject_on_warnings: bool = False,
    ) -> AssignmentOutcome:
        """
        Validate and write an assignment in a single transaction.

        Warnings never block the write unless reject_on_warnings is set and
        the caller did not pass ignore_warnings. Hard failures roll back and
        leave the task untouched.

        Args:
            task_id: Task to assign
            worker_id: Cleaner to assign
            scheduled_date: New scheduled date, optional
            ignore_warnings: Operator acknowledged the warnings
            acting_user_id: Operator recorded in the audit log
            reject_on_warnings: Refuse the write when unacknowledged warnings exist

        Returns:
            AssignmentOutcome with the updated task and its warnings

        Raises:
            ValidationException, ResourceNotFoundException, CrossTenantException,
            ConflictException
        """
        worker_id = self._require_id(worker_id, 'cleanerId')
        task_id = self._require_id(task_id, 'taskId')

        try:
            task = self._load_task(task_id, lock=True)
            worker = self._load_worker(worker_id, task, lock=True)

            if scheduled_date is not None:
                scheduled = parse_date_param(scheduled_date, 'scheduledDate')
            else:
                scheduled = task.scheduled_date
            self._lock_worker_day(worker.id, scheduled)

            new_status = self._assignment_status(task)

            validation = self._run_checks(task, worker, scheduled, None, None, None, None)

            if reject_on_warnings and validation.has_warnings and not ignore_warnings:
                raise ConflictException(
                    'Assignment has unacknowledged warnings',
                    details={'warnings': validation.warnings}
                )

            if is_regression(task.status, new_status):
                logger.warning(
                    f"Assignment moves task {task.id} back from {task.status} to {new_status.value}"
                )

            previous_worker_id = task.assigned_user_id
            old_values = {
                'assigned_user_id': previous_worker_id,
                'status': task.status,
                'scheduled_date': task.scheduled_date.isoformat() if task.scheduled_date else None,
            }

            task.assigned_user_id = worker.id
            task.status = new_status.value
            if scheduled_date is not None:
                task.scheduled_date = scheduled
            self._sync_assignment_rows(task, previous_worker_id, worker.id)

            self.db.add(self.AuditLog(
                company_id=task.company_id,
                user_id=acting_user_id,
                action='assign',
                entity_type='task',
                entity_id=task.id,
                old_values=old_values,
                new_values={
                    'assigned_user_id': worker.id,
                    'status': task.status,
                    'scheduled_date': task.scheduled_date.isoformat() if task.scheduled_date else None,
                    'warnings': validation.warnings,
                    'ignore_warnings': bool(ignore_warnings),
                },
            ))

            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Assignment of task {task_id} to worker {worker_id} failed: {e}", exc_info=True)
            raise DatabaseException("Assignment could not be saved") from e
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"Assigned task {task.id} to worker {worker.id} "
            f"(previous={previous_worker_id}, warnings={len(validation.violations)})"
        )
        return AssignmentOutcome(
            task=task,
            validation=validation,
            warnings_acknowledged=bool(ignore_warnings),
            previous_worker_id=previous_worker_id,
        )

    def _sync_assignment_rows(self, task, previous_worker_id, worker_id):
        """The primary assignee replaces the previous one in the assignment rows."""
        if previous_worker_id is not None and previous_worker_id != worker_id:
            self.db.query(self.TaskAssignment).filter(
                self.TaskAssignment.task_id == task.id,
                self.TaskAssignment.user_id == previous_worker_id,
            ).delete(synchronize_session='fetch')

        existing = self.db.query(self.TaskAssignment).filter(
            self.TaskAssignment.task_id == task.id,
            self.TaskAssignment.user_id == worker_id,
        ).first()
        if not existing:
            self.db.add(self.TaskAssignment(task_id=task.id, user_id=worker_id))
