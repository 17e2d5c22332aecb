"""
Tests for week boundaries and date parameter parsing
"""
import pytest
from datetime import date, datetime, timedelta, timezone

from rota_app.error_handlers.exceptions import ValidationException
from rota_app.services.week_calendar import (
    WEEK_SPAN,
    day_name,
    day_of_week,
    end_of_day,
    exclusive_end,
    has_time_of_day,
    parse_date_param,
    same_day,
    week_bounds,
    week_end,
    week_start,
)


@pytest.mark.parametrize('value', [
    datetime(2026, 3, 2, 0, 0),      # Monday midnight
    datetime(2026, 3, 4, 13, 45),    # Wednesday afternoon
    datetime(2026, 3, 8, 23, 59),    # Sunday night
    date(2026, 3, 7),                # Saturday as a plain date
])
def test_week_start_is_monday_of_same_week(value):
    start = week_start(value)
    assert start == datetime(2026, 3, 2)
    assert start.weekday() == 0


def test_week_start_is_idempotent():
    d = datetime(2026, 3, 5, 10, 30)
    assert week_start(week_start(d)) == week_start(d)


def test_value_lies_within_its_week():
    for offset in range(14):
        d = datetime(2026, 3, 1, 12) + timedelta(days=offset)
        assert week_start(d) <= d <= week_end(d)


def test_week_span_is_six_days_and_almost_a_day():
    start, end = week_bounds(datetime(2026, 3, 4))
    assert end - start == timedelta(days=6, hours=23, minutes=59, seconds=59, milliseconds=999)
    assert end - start == WEEK_SPAN
    assert end == datetime(2026, 3, 8, 23, 59, 59, 999000)


def test_sunday_belongs_to_preceding_monday():
    assert week_start(date(2026, 3, 8)) == datetime(2026, 3, 2)
    assert week_start(date(2026, 3, 9)) == datetime(2026, 3, 9)


def test_day_of_week_counts_from_sunday():
    assert day_of_week(date(2026, 3, 1)) == 0
    assert day_name(day_of_week(date(2026, 3, 1))) == 'Sunday'
    assert day_of_week(date(2026, 3, 2)) == 1
    assert day_of_week(datetime(2026, 3, 7, 8)) == 6
    assert day_name(9) == 'Unknown'


def test_same_day_ignores_time():
    assert same_day(datetime(2026, 3, 4, 0, 1), datetime(2026, 3, 4, 23, 59))
    assert same_day(date(2026, 3, 4), datetime(2026, 3, 4, 9))
    assert not same_day(datetime(2026, 3, 4, 23, 59), datetime(2026, 3, 5, 0, 0))


def test_has_time_of_day():
    assert has_time_of_day(datetime(2026, 3, 4, 9, 30))
    assert not has_time_of_day(datetime(2026, 3, 4))
    assert not has_time_of_day(date(2026, 3, 4))


def test_end_of_day():
    assert end_of_day(date(2026, 3, 4)) == datetime(2026, 3, 4, 23, 59, 59, 999000)


class TestParseDateParam:
    def test_date_only(self):
        assert parse_date_param('2026-03-04') == datetime(2026, 3, 4)

    def test_iso_datetime_with_zulu(self):
        assert parse_date_param('2026-03-04T09:15:00Z') == datetime(2026, 3, 4, 9, 15)

    def test_passes_through_date_objects(self):
        assert parse_date_param(date(2026, 3, 4)) == datetime(2026, 3, 4)

    def test_missing_value(self):
        with pytest.raises(ValidationException) as exc:
            parse_date_param(None, 'weekStart')
        assert 'weekStart' in exc.value.message

    def test_malformed_value(self):
        with pytest.raises(ValidationException):
            parse_date_param('04/03/2026', 'date')

    def test_utc_offset_is_converted(self):
        assert parse_date_param('2026-03-04T23:30:00-05:00') == datetime(2026, 3, 5, 4, 30)

    def test_aware_datetime_is_converted(self):
        eastern = timezone(timedelta(hours=-5))
        assert parse_date_param(datetime(2026, 3, 4, 23, 30, tzinfo=eastern)) == datetime(2026, 3, 5, 4, 30)


def test_exclusive_end_of_week_is_next_monday():
    _, end = week_bounds(datetime(2026, 3, 4))
    assert exclusive_end(end) == datetime(2026, 3, 9)
    assert datetime(2026, 3, 8, 23, 59, 59, 999999) < exclusive_end(end)


def test_exclusive_end_of_plain_date():
    assert exclusive_end(date(2026, 3, 4)) == datetime(2026, 3, 5)
    assert exclusive_end(end_of_day(date(2026, 3, 4))) == datetime(2026, 3, 5)
