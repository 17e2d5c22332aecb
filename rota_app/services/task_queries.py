"""
Typed task filters shared by the rota services.

Each query is described by a TaskCriteria with named fields; apply() turns
the populated fields into SQLAlchemy filter clauses.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import or_

from .week_calendar import exclusive_end


@dataclass
class TaskCriteria:
    """Filter for task lookups. Fields left as None are not applied."""
    company_id: Optional[int] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    statuses: Optional[Iterable[str]] = None
    worker_id: Optional[int] = None
    exclude_task_id: Optional[int] = None
    property_id: Optional[int] = None
    scheduled_only: bool = False

    def apply(self, query, Task, TaskAssignment):
        """
        Add this criteria's filters to a query over Task.

        worker_id matches both the primary assignee and multi-assignment rows.
        date_to is an inclusive end; it is queried as an exclusive bound on
        the next millisecond.
        """
        if self.company_id is not None:
            query = query.filter(Task.company_id == self.company_id)
        if self.property_id is not None:
            query = query.filter(Task.property_id == self.property_id)
        if self.date_from is not None:
            query = query.filter(Task.scheduled_date >= self.date_from)
        if self.date_to is not None:
            query = query.filter(Task.scheduled_date < exclusive_end(self.date_to))
        if self.scheduled_only:
            query = query.filter(Task.scheduled_date.isnot(None))
        if self.statuses is not None:
            query = query.filter(Task.status.in_([str(getattr(s, 'value', s)) for s in self.statuses]))
        if self.exclude_task_id is not None:
            query = query.filter(Task.id != self.exclude_task_id)
        if self.worker_id is not None:
            query = query.filter(or_(
                Task.assigned_user_id == self.worker_id,
                Task.id.in_(
                    query.session.query(TaskAssignment.task_id).filter(
                        TaskAssignment.user_id == self.worker_id
                    )
                ),
            ))
        return query


def find_tasks(session, models, criteria: TaskCriteria, order_by_date: bool = True):
    """Run a TaskCriteria against the session and return the matching tasks."""
    Task = models['Task']
    query = criteria.apply(session.query(Task), Task, models['TaskAssignment'])
    if order_by_date:
        query = query.order_by(Task.scheduled_date.asc(), Task.id.asc())
    return query.all()
