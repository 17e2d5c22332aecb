"""
Conflict Detector

Finds same-day double booking: two or more active tasks assigned to the
same worker on the same calendar day. Only the day matters; the time of
day on a task is not authoritative for conflicts.
"""
import logging
from collections import defaultdict
from datetime import datetime
from typing import Iterable, List, Optional

from rota_app.models.task import ACTIVE_STATUS_VALUES
from .task_queries import TaskCriteria, find_tasks
from .validation_types import ConflictRecord, ConstraintViolation, ConstraintType
from .week_calendar import to_day, start_of_day, end_of_day


logger = logging.getLogger(__name__)


def _worker_ids(task) -> set:
    ids = getattr(task, 'assigned_worker_ids', None)
    if ids is not None:
        return set(ids)
    worker_id = getattr(task, 'assigned_user_id', None)
    return {worker_id} if worker_id is not None else set()


def _status_value(task) -> Optional[str]:
    status = getattr(task, 'status', None)
    return getattr(status, 'value', status)


def detect_conflicts(tasks: Iterable) -> List[ConflictRecord]:
    """
    Group tasks by (worker, calendar day) and report every crowded group.

    Tasks without a scheduled date or without any worker are skipped, as are
    tasks outside the active statuses. A task with several workers is
    considered once per worker.

    Args:
        tasks: Objects with id, scheduled_date, status and either
            assigned_worker_ids or assigned_user_id

    Returns:
        list[ConflictRecord]: Ordered by worker id, day, then task id
    """
    groups = defaultdict(set)
    for task in tasks:
        if task.scheduled_date is None or _status_value(task) not in ACTIVE_STATUS_VALUES:
            continue
        day = to_day(task.scheduled_date)
        for worker_id in _worker_ids(task):
            groups[(worker_id, day)].add(task.id)

    conflicts = []
    for (worker_id, day), task_ids in sorted(groups.items()):
        if len(task_ids) < 2:
            continue
        reason = f"Multiple tasks assigned on {day.isoformat()}"
        for task_id in sorted(task_ids):
            conflicts.append(ConflictRecord(task_id=task_id, worker_id=worker_id, reason=reason))
    return conflicts


class ConflictDetector:
    """
    Database-backed conflict lookups for the rota.

    Used by:
    - the rota conflicts endpoint (whole company, one window)
    - AssignmentValidator (one worker, one day)
    """

    def __init__(self, db_session, models: dict):
        self.db = db_session
        self.models = models

    def detect_for_company(self, company_id: int, date_from: datetime, date_to: datetime) -> List[ConflictRecord]:
        """
        All same-day conflicts among a company's active tasks in a window.

        Args:
            company_id: Company to scan
            date_from: Window start (inclusive)
            date_to: Window end (inclusive)
        """
        tasks = find_tasks(self.db, self.models, TaskCriteria(
            company_id=company_id,
            date_from=date_from,
            date_to=date_to,
            statuses=ACTIVE_STATUS_VALUES,
            scheduled_only=True,
        ))
        conflicts = detect_conflicts(tasks)
        logger.info(
            f"Conflict scan company={company_id} {date_from:%Y-%m-%d}..{date_to:%Y-%m-%d}: "
            f"{len(tasks)} tasks, {len(conflicts)} conflicting entries"
        )
        return conflicts

    def tasks_on_day(self, worker_id: int, day, company_id: Optional[int] = None,
                     exclude_task_id: Optional[int] = None) -> list:
        """Active tasks already on a worker's calendar for one day."""
        return find_tasks(self.db, self.models, TaskCriteria(
            company_id=company_id,
            worker_id=worker_id,
            date_from=start_of_day(day),
            date_to=end_of_day(day),
            statuses=ACTIVE_STATUS_VALUES,
            exclude_task_id=exclude_task_id,
        ))

    def check_assignment(self, worker, task_id: int, scheduled_date) -> List[ConstraintViolation]:
        """
        Would assigning task_id to worker on scheduled_date double-book them?

        Returns a single warning naming every colliding task, or nothing.
        """
        if scheduled_date is None:
            return []

        clashing = self.tasks_on_day(worker.id, scheduled_date, exclude_task_id=task_id)
        if not clashing:
            return []

        day = to_day(scheduled_date)
        names = ', '.join(f'"{t.title}" (#{t.id})' for t in clashing)
        logger.debug(f"Same-day conflict for worker {worker.id} on {day}: {names}")
        return [ConstraintViolation(
            constraint_type=ConstraintType.CONFLICT,
            message=(
                f"{worker.full_name} is already assigned to {len(clashing)} other "
                f"task(s) on {day.isoformat()}: {names}"
            ),
            details={
                'date': day.isoformat(),
                'conflicting_task_ids': [t.id for t in clashing],
            }
        )]
