"""
Calendar and week-boundary helpers for the rota.

Weeks run Monday 00:00:00 through Sunday 23:59:59.999 (ISO-8601). A Sunday
belongs to the week that started six days earlier.

Availability records store day-of-week with 0=Sunday, so day_of_week()
converts from Python's Monday-based weekday().

Window ends are inclusive at millisecond precision for display; queries use
exclusive_end() so sub-millisecond timestamps at the very end still match.
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Tuple, Union

from rota_app.error_handlers.exceptions import ValidationException

DateLike = Union[date, datetime]

DAY_NAMES = ['Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday']

# Sunday 23:59:59.999 relative to Monday 00:00
WEEK_SPAN = timedelta(days=6, hours=23, minutes=59, seconds=59, microseconds=999000)


def to_day(value: DateLike) -> date:
    """Truncate a date or datetime to its calendar day."""
    if isinstance(value, datetime):
        return value.date()
    return value


def same_day(a: DateLike, b: DateLike) -> bool:
    return to_day(a) == to_day(b)


def week_start(value: DateLike) -> datetime:
    """Monday 00:00:00 of the week containing value."""
    day = to_day(value)
    monday = day - timedelta(days=day.weekday())
    return datetime.combine(monday, time.min)


def week_end(value: DateLike) -> datetime:
    """Sunday 23:59:59.999 of the week containing value."""
    return week_start(value) + WEEK_SPAN


def week_bounds(value: DateLike) -> Tuple[datetime, datetime]:
    start = week_start(value)
    return start, start + WEEK_SPAN


def day_of_week(value: DateLike) -> int:
    """Day index with 0=Sunday ... 6=Saturday."""
    return (to_day(value).weekday() + 1) % 7


def day_name(index: int) -> str:
    if 0 <= index < len(DAY_NAMES):
        return DAY_NAMES[index]
    return 'Unknown'


def start_of_day(value: DateLike) -> datetime:
    return datetime.combine(to_day(value), time.min)


def end_of_day(value: DateLike) -> datetime:
    """23:59:59.999 on the day of value."""
    return datetime.combine(to_day(value), time(23, 59, 59, 999000))


def exclusive_end(value: DateLike) -> datetime:
    """
    First instant after an inclusive window end.

    Ends carry millisecond precision, so Sunday 23:59:59.999 becomes Monday
    00:00:00. A plain date covers that whole day.
    """
    if not isinstance(value, datetime):
        return start_of_day(value) + timedelta(days=1)
    truncated = value.replace(microsecond=value.microsecond - value.microsecond % 1000)
    return truncated + timedelta(milliseconds=1)


def _to_naive_utc(value: datetime) -> datetime:
    """Stored datetimes are naive UTC; convert offsets before dropping them."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.replace(tzinfo=None)


def has_time_of_day(value: DateLike) -> bool:
    """
    True if value carries an explicit time.

    Plain dates and datetimes at exactly midnight are treated as date-only.
    """
    return isinstance(value, datetime) and value.time() != time.min


def parse_date_param(value, param_name: str = 'date') -> datetime:
    """
    Parse an ISO date or datetime parameter.

    Args:
        value: 'YYYY-MM-DD' or ISO-8601 datetime string, date or datetime
        param_name: Name used in the error message

    Returns:
        datetime: Naive datetime (midnight for date-only input)

    Raises:
        ValidationException: If value is missing or malformed
    """
    if value is None or value == '':
        raise ValidationException(f"Missing required parameter: {param_name}")
    if isinstance(value, datetime):
        return _to_naive_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    try:
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        raise ValidationException(
            f"Invalid {param_name} format. Use YYYY-MM-DD or ISO-8601 datetime"
        )
    return _to_naive_utc(parsed)
