"""
Tests for the assignment validator and the assign operation
"""
from datetime import date, datetime

import pytest

from rota_app.error_handlers.exceptions import (
    ConflictException,
    CrossTenantException,
    ResourceNotFoundException,
    ValidationException,
)
from rota_app.services.assignment_validator import AssignmentValidator
from rota_app.services.validation_types import ConstraintType


@pytest.fixture
def validator(db_session, models):
    return AssignmentValidator(db_session, models)


@pytest.fixture
def fully_blocked(cleaner, task_factory, property_factory, skill_factory, availability_factory):
    """A task for which the cleaner is double-booked, unavailable and unskilled."""
    task_factory(title='Morning office', assigned_user_id=cleaner.id,
                 scheduled_date=datetime(2026, 3, 4, 8))
    availability_factory(cleaner, day_of_week=3, is_available=False)
    prop = property_factory()
    skill_factory.require(prop, skill_factory(name='Deep Clean'))
    return task_factory(prop=prop, title='Afternoon flat', scheduled_date=datetime(2026, 3, 4, 14),
                        estimated_duration_minutes=60)


class TestValidate:
    def test_clean_assignment_has_no_warnings(self, validator, cleaner, task_factory):
        task = task_factory()
        result = validator.validate(cleaner.id, task.id)
        assert result.warnings == []
        assert result.to_dict()['can_assign'] is True

    def test_three_problems_give_three_distinct_warnings(self, validator, cleaner, fully_blocked):
        result = validator.validate(cleaner.id, fully_blocked.id)

        assert [v.constraint_type for v in result.violations] == [
            ConstraintType.CONFLICT,
            ConstraintType.AVAILABILITY,
            ConstraintType.SKILL_MISMATCH,
        ]
        assert len(set(result.warnings)) == 3
        assert 'Morning office' in result.warnings[0]
        assert 'Deep Clean' in result.warnings[2]

    def test_leave_warning_follows_availability(self, validator, cleaner, task_factory,
                                                availability_factory, leave_factory):
        availability_factory(cleaner, day_of_week=3, start_time='13:00', end_time='17:00')
        leave_factory(cleaner, start_date=date(2026, 3, 4), end_date=date(2026, 3, 4))
        task = task_factory(scheduled_date=datetime(2026, 3, 4, 9))

        result = validator.validate(cleaner.id, task.id)
        assert [v.constraint_type for v in result.violations] == [
            ConstraintType.AVAILABILITY, ConstraintType.ON_LEAVE
        ]

    def test_capacity_warning(self, validator, cleaner, task_factory):
        # 20h cap; 19h already booked this week
        task_factory(assigned_user_id=cleaner.id, estimated_duration_minutes=19 * 60,
                     scheduled_date=datetime(2026, 3, 2, 6))
        task = task_factory(estimated_duration_minutes=120, scheduled_date=datetime(2026, 3, 6, 9))

        result = validator.validate(cleaner.id, task.id)

        capacity = result.of_type(ConstraintType.MAX_HOURS)
        assert len(capacity) == 1
        assert capacity[0].message == 'Assignment would exceed maximum working hours (21.0/20 hours)'

    def test_capacity_uses_default_duration(self, validator, cleaner, task_factory):
        task_factory(assigned_user_id=cleaner.id, estimated_duration_minutes=19 * 60,
                     scheduled_date=datetime(2026, 3, 2, 6))
        task = task_factory(estimated_duration_minutes=None, scheduled_date=datetime(2026, 3, 6, 9))
        assert validator.validate(cleaner.id, task.id).of_type(ConstraintType.MAX_HOURS)

    def test_capacity_ignores_other_weeks(self, validator, cleaner, task_factory):
        task_factory(assigned_user_id=cleaner.id, estimated_duration_minutes=19 * 60,
                     scheduled_date=datetime(2026, 2, 27, 6))
        task = task_factory(scheduled_date=datetime(2026, 3, 6, 9))
        assert validator.validate(cleaner.id, task.id).warnings == []

    def test_overrides_scheduled_date(self, validator, cleaner, task_factory):
        task_factory(assigned_user_id=cleaner.id, scheduled_date=datetime(2026, 3, 5, 9))
        task = task_factory(scheduled_date=datetime(2026, 3, 4, 9))

        assert validator.validate(cleaner.id, task.id).warnings == []
        result = validator.validate(cleaner.id, task.id, scheduled_date='2026-03-05')
        assert result.of_type(ConstraintType.CONFLICT)

    def test_missing_task(self, validator, cleaner):
        with pytest.raises(ResourceNotFoundException):
            validator.validate(cleaner.id, 9999)

    def test_worker_must_be_cleaner(self, validator, manager, task_factory):
        with pytest.raises(ResourceNotFoundException):
            validator.validate(manager.id, task_factory().id)

    def test_missing_ids(self, validator, cleaner):
        with pytest.raises(ValidationException):
            validator.validate(cleaner.id, None)
        with pytest.raises(ValidationException):
            validator.validate(None, 1)

    def test_cross_tenant(self, validator, company_factory, user_factory, task_factory):
        outsider = user_factory(company_id=company_factory().id)
        with pytest.raises(CrossTenantException):
            validator.validate(outsider.id, task_factory().id)

    def test_unknown_property(self, validator, cleaner, task_factory):
        with pytest.raises(ResourceNotFoundException):
            validator.validate(cleaner.id, task_factory().id, property_id=9999)


class TestAssign:
    def test_assign_writes_task_assignment_and_audit(self, validator, db_session, models,
                                                     cleaner, manager, task_factory):
        task = task_factory(status='PLANNED')

        outcome = validator.assign(task.id, cleaner.id, acting_user_id=manager.id)

        assert outcome.task.assigned_user_id == cleaner.id
        assert outcome.task.status == 'ASSIGNED'
        assert outcome.warnings == []
        rows = db_session.query(models['TaskAssignment']).filter_by(task_id=task.id).all()
        assert [r.user_id for r in rows] == [cleaner.id]
        audit = db_session.query(models['AuditLog']).filter_by(entity_id=task.id).one()
        assert audit.action == 'assign'
        assert audit.user_id == manager.id
        assert audit.old_values['status'] == 'PLANNED'
        assert audit.new_values['assigned_user_id'] == cleaner.id

    def test_assign_proceeds_despite_warnings(self, validator, cleaner, fully_blocked):
        outcome = validator.assign(fully_blocked.id, cleaner.id)
        assert len(outcome.warnings) == 3
        assert outcome.task.assigned_user_id == cleaner.id
        assert outcome.warnings_acknowledged is False

    def test_ignore_warnings_is_recorded(self, validator, db_session, models, cleaner, fully_blocked):
        outcome = validator.assign(fully_blocked.id, cleaner.id, ignore_warnings=True)
        assert outcome.warnings_acknowledged is True
        assert len(outcome.warnings) == 3
        audit = db_session.query(models['AuditLog']).filter_by(entity_id=fully_blocked.id).one()
        assert audit.new_values['ignore_warnings'] is True

    def test_reject_on_warnings_policy(self, validator, db_session, models, cleaner, fully_blocked):
        with pytest.raises(ConflictException):
            validator.assign(fully_blocked.id, cleaner.id, reject_on_warnings=True)

        db_session.expire_all()
        task = db_session.get(models['Task'], fully_blocked.id)
        assert task.assigned_user_id is None

        outcome = validator.assign(fully_blocked.id, cleaner.id, ignore_warnings=True,
                                   reject_on_warnings=True)
        assert outcome.task.assigned_user_id == cleaner.id

    def test_reassign_replaces_previous_worker(self, validator, db_session, models,
                                               user_factory, task_factory):
        first = user_factory()
        second = user_factory()
        task = task_factory()

        validator.assign(task.id, first.id)
        outcome = validator.assign(task.id, second.id, scheduled_date='2026-03-05T10:00:00')

        assert outcome.previous_worker_id == first.id
        assert outcome.task.scheduled_date == datetime(2026, 3, 5, 10)
        assert outcome.task.assigned_worker_ids == {second.id}

    def test_forced_transition_from_later_status(self, validator, cleaner, task_factory):
        task = task_factory(status='QA_REVIEW')
        assert validator.assign(task.id, cleaner.id).task.status == 'ASSIGNED'

    def test_archived_task_is_rejected(self, validator, cleaner, task_factory):
        task = task_factory(status='ARCHIVED')
        with pytest.raises(ValidationException):
            validator.assign(task.id, cleaner.id)

    def test_cross_tenant_assign_writes_nothing(self, validator, db_session, models,
                                                company_factory, user_factory, task_factory):
        outsider = user_factory(company_id=company_factory().id)
        task = task_factory(status='PLANNED')

        with pytest.raises(CrossTenantException):
            validator.assign(task.id, outsider.id)

        db_session.expire_all()
        task = db_session.get(models['Task'], task.id)
        assert task.assigned_user_id is None
        assert task.status == 'PLANNED'
        assert db_session.query(models['TaskAssignment']).count() == 0
        assert db_session.query(models['AuditLog']).count() == 0
