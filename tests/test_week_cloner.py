"""
Tests for cloning the previous week's tasks forward
"""
from datetime import datetime

import pytest

from rota_app.error_handlers.exceptions import ValidationException
from rota_app.services.week_cloner import WeekCloner


@pytest.fixture
def last_week(cleaner, user_factory, task_factory):
    """Three tasks in the week of Monday 2 March 2026, plus noise outside it."""
    helper = user_factory(first_name='Helper')
    tasks = [
        task_factory(title='Mon', scheduled_date=datetime(2026, 3, 2, 9), assigned_user_id=cleaner.id,
                     status='APPROVED', checklist=['Hoover', 'Mop', 'Bins']),
        task_factory(title='Wed', scheduled_date=datetime(2026, 3, 4, 13), assigned_user_id=cleaner.id,
                     status='IN_PROGRESS', extra_workers=[helper]),
        task_factory(title='Sun', scheduled_date=datetime(2026, 3, 8, 23, 30), estimated_duration_minutes=None),
    ]
    task_factory(title='Earlier', scheduled_date=datetime(2026, 2, 27, 9))
    task_factory(title='Unscheduled', scheduled_date=None)
    return tasks


def test_clones_three_tasks_a_week_later(db_session, models, company, last_week):
    result = WeekCloner(db_session, models).clone_week(company.id, '2026-03-09', '2026-03-15')

    assert result.cloned_count == 3
    by_title = {t.title: t for t in result.tasks}
    assert set(by_title) == {'Mon', 'Wed', 'Sun'}
    assert by_title['Mon'].scheduled_date == datetime(2026, 3, 9, 9)
    assert by_title['Wed'].scheduled_date == datetime(2026, 3, 11, 13)
    assert by_title['Sun'].scheduled_date == datetime(2026, 3, 15, 23, 30)
    assert all(t.status == 'PLANNED' for t in result.tasks)
    assert by_title['Sun'].estimated_duration_minutes is None


def test_clone_copies_workers_and_checklists(db_session, models, company, cleaner, last_week):
    result = WeekCloner(db_session, models).clone_week(company.id, '2026-03-09', '2026-03-15')
    by_title = {t.title: t for t in result.tasks}

    mon = by_title['Mon']
    assert mon.assigned_user_id == cleaner.id
    assert [(c.title, c.order) for c in mon.checklists] == [('Hoover', 0), ('Mop', 1), ('Bins', 2)]
    assert all(not c.is_completed for c in mon.checklists)
    assert len(by_title['Wed'].assigned_worker_ids) == 2

    # Originals are untouched
    assert [c.task_id for c in last_week[0].checklists] == [last_week[0].id] * 3
    assert last_week[0].status == 'APPROVED'


def test_cloning_twice_duplicates(db_session, models, company, last_week):
    cloner = WeekCloner(db_session, models)
    cloner.clone_week(company.id, '2026-03-09', '2026-03-15')
    cloner.clone_week(company.id, '2026-03-09', '2026-03-15')

    Task = models['Task']
    in_target = db_session.query(Task).filter(
        Task.scheduled_date >= datetime(2026, 3, 9),
        Task.scheduled_date < datetime(2026, 3, 16),
    ).count()
    assert in_target == 6


def test_clone_is_company_scoped(db_session, models, company_factory, last_week):
    other = company_factory()
    result = WeekCloner(db_session, models).clone_week(other.id, '2026-03-09', '2026-03-15')
    assert result.cloned_count == 0
    assert result.to_dict() == {'cloned_tasks_count': 0, 'tasks': []}


def test_clone_rejects_reversed_window(db_session, models, company):
    with pytest.raises(ValidationException):
        WeekCloner(db_session, models).clone_week(company.id, '2026-03-15', '2026-03-09')
