"""
Workload Analytics Service

Aggregates task counts and scheduled hours per worker over a week window
and summarizes the team for load-balancing displays on the rota.

The calculator reports numbers only; it never enforces hour caps.
"""
import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from rota_app.models.task import ACTIVE_STATUS_VALUES
from rota_app.models.user import UserRole
from .task_queries import TaskCriteria, find_tasks
from .week_calendar import to_day


logger = logging.getLogger(__name__)

DEFAULT_DURATION_MINUTES = 120


def task_minutes(task, default_minutes: int = DEFAULT_DURATION_MINUTES) -> int:
    """Estimated duration of a task, falling back to the default when unset."""
    return task.estimated_duration_minutes or default_minutes


def summarize_team(rows: Iterable[dict]) -> Dict[str, float]:
    """
    Team-wide min/max/average of task counts and hours.

    An empty team yields zeros for every statistic.

    Args:
        rows: Per-worker dicts with 'task_count' and 'hours_worked'
    """
    rows = list(rows)
    if not rows:
        return {
            'average': 0, 'max': 0, 'min': 0,
            'average_hours': 0, 'max_hours': 0, 'min_hours': 0,
        }

    counts = [r['task_count'] for r in rows]
    hours = [r['hours_worked'] for r in rows]
    return {
        'average': sum(counts) / len(counts),
        'max': max(counts),
        'min': min(counts),
        'average_hours': round(sum(hours) / len(hours), 2),
        'max_hours': max(hours),
        'min_hours': min(hours),
    }


class WorkloadAnalytics:
    """
    Service for analyzing worker workload across a date window.

    Helps operators balance assignments fairly across their team.
    """

    def __init__(self, db_session, models: dict,
                 default_duration_minutes: int = DEFAULT_DURATION_MINUTES,
                 high_ratio: float = 0.8):
        """
        Args:
            db_session: SQLAlchemy database session
            models: Dictionary of model classes from the registry
            default_duration_minutes: Duration assumed for tasks without an estimate
            high_ratio: Share of max_working_hours at which a worker counts as 'high'
        """
        self.db = db_session
        self.models = models
        self.User = models['User']
        self.LeaveRequest = models['LeaveRequest']
        self.default_duration_minutes = default_duration_minutes
        self.high_ratio = high_ratio

    def get_workload_data(self, company_id: int, start_date=None, end_date=None) -> dict:
        """
        Aggregate worker workload for a company.

        Counts active tasks (PLANNED, ASSIGNED, IN_PROGRESS, SUBMITTED) inside
        the window, or across all time when no window is given. Every active
        cleaner appears, including those with no tasks.

        Args:
            company_id: Company to aggregate
            start_date: Window start (inclusive), optional
            end_date: Window end (inclusive), optional

        Returns:
            dict: {
                "per_worker": [
                    {
                        "worker_id": 7,
                        "name": "Jane Doe",
                        "task_count": 3,
                        "hours_worked": 6.5,
                        "max_working_hours": 20.0,
                        "on_leave": False,
                        "status": "normal"|"high"|"overloaded"|"unlimited"
                    }
                ],
                "stats": {average, max, min, average_hours, max_hours, min_hours}
            }
        """
        workers = self.db.query(self.User).filter(
            self.User.company_id == company_id,
            self.User.role == UserRole.CLEANER.value,
            self.User.is_active.is_(True),
        ).order_by(self.User.id).all()

        tasks = find_tasks(self.db, self.models, TaskCriteria(
            company_id=company_id,
            date_from=start_date,
            date_to=end_date,
            statuses=ACTIVE_STATUS_VALUES,
        ), order_by_date=False)

        counts = defaultdict(int)
        minutes = defaultdict(int)
        for task in tasks:
            for worker_id in task.assigned_worker_ids:
                counts[worker_id] += 1
                minutes[worker_id] += task_minutes(task, self.default_duration_minutes)

        on_leave = self._workers_on_leave([w.id for w in workers], start_date, end_date)

        per_worker = []
        for worker in workers:
            hours_worked = round(minutes[worker.id] / 60, 2)
            per_worker.append({
                'worker_id': worker.id,
                'name': worker.full_name,
                'email': worker.email,
                'task_count': counts[worker.id],
                'hours_worked': hours_worked,
                'max_working_hours': worker.max_working_hours,
                'on_leave': worker.id in on_leave,
                'status': self._calculate_status(hours_worked, worker.max_working_hours),
            })

        logger.debug(f"Workload for company {company_id}: {len(per_worker)} workers, {len(tasks)} tasks")

        return {
            'per_worker': per_worker,
            'stats': summarize_team(per_worker),
        }

    def hours_for_worker(self, worker_id: int, start_date, end_date,
                         exclude_task_id: Optional[int] = None) -> float:
        """Hours of active work already booked for a worker in a window."""
        tasks = find_tasks(self.db, self.models, TaskCriteria(
            worker_id=worker_id,
            date_from=start_date,
            date_to=end_date,
            statuses=ACTIVE_STATUS_VALUES,
            exclude_task_id=exclude_task_id,
        ), order_by_date=False)
        return sum(task_minutes(t, self.default_duration_minutes) for t in tasks) / 60

    def _workers_on_leave(self, worker_ids: List[int], start_date, end_date) -> set:
        if not worker_ids or start_date is None or end_date is None:
            return set()
        rows = self.db.query(self.LeaveRequest.user_id).filter(
            self.LeaveRequest.user_id.in_(worker_ids),
            self.LeaveRequest.status == 'approved',
            self.LeaveRequest.start_date <= to_day(end_date),
            self.LeaveRequest.end_date >= to_day(start_date),
        ).all()
        return {user_id for (user_id,) in rows}

    def _calculate_status(self, hours_worked: float, max_hours: Optional[float]) -> str:
        """
        Classify load relative to the worker's weekly cap.

        Thresholds:
        - unlimited: no cap configured
        - normal: below high_ratio of the cap
        - high: from high_ratio up to the cap
        - overloaded: above the cap
        """
        if not max_hours:
            return 'unlimited'
        if hours_worked > max_hours:
            return 'overloaded'
        if hours_worked >= max_hours * self.high_ratio:
            return 'high'
        return 'normal'
