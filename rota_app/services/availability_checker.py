"""
Availability & Leave Checker

Tests a scheduled task against a worker's recurring weekly availability and
approved leave. Both checks are advisory: they produce warnings, never
errors, and never block an assignment.
"""
import logging
from typing import Iterable, List

from .validation_types import ConstraintViolation, ConstraintType
from .week_calendar import day_of_week, day_name, has_time_of_day, to_day


logger = logging.getLogger(__name__)

APPROVED_LEAVE = 'approved'


def _within(hhmm: str, record) -> bool:
    return record.start_time <= hhmm <= record.end_time


def check_availability(records: Iterable, scheduled, worker_name: str = 'Worker') -> List[ConstraintViolation]:
    """
    Compare a scheduled day/time with weekly availability records.

    Rules:
    - No record for that weekday: availability unknown, no warning.
    - Records exist but none is available: not available that day.
    - Time known and inside an unavailable window: marked unavailable.
    - Time known and outside every available window: outside hours.
    Date-only schedules (no time of day) are checked at day level only.

    Args:
        records: Objects with day_of_week, start_time, end_time, is_available
        scheduled: date or datetime of the task
        worker_name: Name used in messages
    """
    dow = day_of_week(scheduled)
    day_records = [r for r in records if r.day_of_week == dow]
    if not day_records:
        return []

    available = [r for r in day_records if r.is_available]
    unavailable = [r for r in day_records if not r.is_available]

    if not available:
        return [ConstraintViolation(
            constraint_type=ConstraintType.AVAILABILITY,
            message=f"{worker_name} is not available on {day_name(dow)}",
            details={'day_of_week': dow, 'date': to_day(scheduled).isoformat()}
        )]

    if not has_time_of_day(scheduled):
        return []

    hhmm = scheduled.strftime('%H:%M')
    blocked = [r for r in unavailable if _within(hhmm, r)]
    if blocked:
        return [ConstraintViolation(
            constraint_type=ConstraintType.AVAILABILITY,
            message=(
                f"{worker_name} is marked unavailable {blocked[0].start_time}-{blocked[0].end_time} "
                f"on {day_name(dow)}"
            ),
            details={'day_of_week': dow, 'scheduled_time': hhmm}
        )]

    if not any(_within(hhmm, r) for r in available):
        windows = [f"{r.start_time}-{r.end_time}" for r in available]
        return [ConstraintViolation(
            constraint_type=ConstraintType.AVAILABILITY,
            message=(
                f"Scheduled time {hhmm} falls outside {worker_name}'s available hours "
                f"on {day_name(dow)} ({', '.join(windows)})"
            ),
            details={'day_of_week': dow, 'scheduled_time': hhmm, 'available_windows': windows}
        )]

    return []


def check_leave(leave_ranges: Iterable, scheduled, worker_name: str = 'Worker') -> List[ConstraintViolation]:
    """
    Warn if the scheduled day falls inside approved leave (inclusive).

    Non-approved leave (pending, rejected) is ignored.
    """
    day = to_day(scheduled)
    hits = [
        lr for lr in leave_ranges
        if getattr(lr, 'status', APPROVED_LEAVE) == APPROVED_LEAVE
        and lr.start_date <= day <= lr.end_date
    ]
    if not hits:
        return []

    return [ConstraintViolation(
        constraint_type=ConstraintType.ON_LEAVE,
        message=(
            f"{worker_name} is on approved leave from {hits[0].start_date.isoformat()} "
            f"to {hits[0].end_date.isoformat()}"
        ),
        details={
            'leave': [
                {
                    'start_date': lr.start_date.isoformat(),
                    'end_date': lr.end_date.isoformat(),
                    'reason': getattr(lr, 'reason', None),
                }
                for lr in hits
            ]
        }
    )]


class AvailabilityChecker:
    """Loads a worker's availability and leave, then runs the checks above."""

    def __init__(self, db_session, models: dict):
        self.db = db_session
        self.CleanerAvailability = models['CleanerAvailability']
        self.LeaveRequest = models['LeaveRequest']

    def weekly_records(self, worker_id: int) -> list:
        return self.db.query(self.CleanerAvailability).filter(
            self.CleanerAvailability.user_id == worker_id
        ).order_by(self.CleanerAvailability.day_of_week).all()

    def approved_leave(self, worker_id: int, date_from, date_to) -> list:
        """Approved leave overlapping [date_from, date_to]."""
        return self.db.query(self.LeaveRequest).filter(
            self.LeaveRequest.user_id == worker_id,
            self.LeaveRequest.status == APPROVED_LEAVE,
            self.LeaveRequest.start_date <= to_day(date_to),
            self.LeaveRequest.end_date >= to_day(date_from),
        ).all()

    def check(self, worker, scheduled) -> List[ConstraintViolation]:
        """Availability warnings first, then the leave warning."""
        if scheduled is None:
            return []

        violations = check_availability(self.weekly_records(worker.id), scheduled, worker.full_name)
        violations.extend(check_leave(
            self.approved_leave(worker.id, scheduled, scheduled), scheduled, worker.full_name
        ))
        if violations:
            logger.debug(f"Availability findings for worker {worker.id} on {to_day(scheduled)}: {len(violations)}")
        return violations
