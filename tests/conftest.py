"""
Pytest configuration and fixtures for the Rota service tests.

This module provides shared fixtures for:
- Flask application with test configuration
- Database setup and teardown
- Model factories for creating test data
- Logged-in test clients
"""
import pytest
from datetime import datetime, date, timedelta

from rota_app import create_app
from rota_app.extensions import db as _db


@pytest.fixture(scope='session')
def app():
    """
    Create application for the tests.

    Uses TestingConfig with in-memory SQLite database.
    Scope is 'session' to reuse the same app across all tests.
    """
    app = create_app('testing')
    app.config.update({
        'TESTING': True,
        'WTF_CSRF_ENABLED': False,  # Disable CSRF for testing
        'RATELIMIT_ENABLED': False,  # Disable rate limiting for tests
    })

    return app


@pytest.fixture(scope='function')
def db(app):
    """
    Create database for the tests.

    Creates all tables before each test function and drops them after.
    This ensures test isolation.
    """
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope='function')
def db_session(db):
    """The scoped session used by the app, bound to the test database."""
    return db.session


@pytest.fixture(scope='function')
def client(app, db):
    """
    Create a test client for the app.

    The client can be used to make requests to the application.
    """
    with app.test_client() as client:
        yield client


@pytest.fixture(scope='function')
def models(app, db):
    """Models registered by create_app()."""
    from rota_app.models import get_models
    return get_models()


# =============================================================================
# Model Factories
# =============================================================================

@pytest.fixture
def company_factory(models, db):
    """
    Factory for creating Company instances.

    Usage:
        company = company_factory(name="Sparkle Ltd")
    """
    counter = [0]

    def _create_company(**kwargs):
        Company = models['Company']
        counter[0] += 1
        defaults = {
            'name': f'Test Company {counter[0]}',
            'is_active': True,
        }
        defaults.update(kwargs)
        company = Company(**defaults)
        db.session.add(company)
        db.session.commit()
        return company

    return _create_company


@pytest.fixture
def company(company_factory):
    return company_factory(name='Sparkle Cleaning')


@pytest.fixture
def user_factory(models, db, company):
    """
    Factory for creating User instances (cleaners by default).

    Usage:
        cleaner = user_factory(first_name="Ana", max_working_hours=20)
        manager = user_factory(role="MANAGER")
    """
    counter = [0]

    def _create_user(**kwargs):
        User = models['User']
        counter[0] += 1
        defaults = {
            'company_id': company.id,
            'email': f'user{counter[0]}@example.com',
            'first_name': 'Test',
            'last_name': f'Cleaner {counter[0]}',
            'role': 'CLEANER',
            'is_active': True,
            'max_working_hours': None,
        }
        defaults.update(kwargs)
        user = User(**defaults)
        db.session.add(user)
        db.session.commit()
        return user

    return _create_user


@pytest.fixture
def property_factory(models, db, company):
    """Factory for creating Property instances."""
    counter = [0]

    def _create_property(**kwargs):
        Property = models['Property']
        counter[0] += 1
        defaults = {
            'company_id': company.id,
            'address': f'{counter[0]} High Street',
        }
        defaults.update(kwargs)
        prop = Property(**defaults)
        db.session.add(prop)
        db.session.commit()
        return prop

    return _create_property


@pytest.fixture
def skill_factory(models, db, company):
    """
    Factory for creating Skill instances.

    Usage:
        skill = skill_factory(name="Deep Clean")
        skill_factory.require(prop, skill)          # property needs it
        skill_factory.prefer(prop, skill)           # property would like it
        skill_factory.grant(cleaner, skill)         # cleaner has it
    """
    class _SkillFactory:
        def __call__(self, **kwargs):
            Skill = models['Skill']
            defaults = {'company_id': company.id, 'name': 'Skill', 'category': 'general'}
            defaults.update(kwargs)
            skill = Skill(**defaults)
            db.session.add(skill)
            db.session.commit()
            return skill

        def require(self, prop, skill, is_required=True):
            row = models['PropertyRequiredSkill'](
                property_id=prop.id, skill_id=skill.id, is_required=is_required
            )
            db.session.add(row)
            db.session.commit()
            return row

        def prefer(self, prop, skill):
            return self.require(prop, skill, is_required=False)

        def grant(self, user, skill, level='basic'):
            row = models['CleanerSkill'](user_id=user.id, skill_id=skill.id, level=level)
            db.session.add(row)
            db.session.commit()
            return row

    return _SkillFactory()


@pytest.fixture
def task_factory(models, db, company, property_factory):
    """
    Factory for creating Task instances.

    Creates a property if not provided.

    Usage:
        task = task_factory(scheduled_date=datetime(2026, 3, 4, 9), assigned_user_id=cleaner.id)
        task = task_factory(checklist=['Hoover', 'Mop'])
    """
    counter = [0]

    def _create_task(prop=None, checklist=None, extra_workers=None, **kwargs):
        Task = models['Task']
        counter[0] += 1

        if prop is None:
            prop = property_factory(company_id=kwargs.get('company_id', company.id))

        defaults = {
            'company_id': company.id,
            'property_id': prop.id,
            'title': f'Clean #{counter[0]}',
            'scheduled_date': datetime(2026, 3, 4, 9, 0),
            'estimated_duration_minutes': 120,
            'status': 'PLANNED',
        }
        defaults.update(kwargs)
        task = Task(**defaults)
        db.session.add(task)
        db.session.flush()

        for order, title in enumerate(checklist or []):
            db.session.add(models['ChecklistItem'](task_id=task.id, title=title, order=order))
        for worker in extra_workers or []:
            db.session.add(models['TaskAssignment'](task_id=task.id, user_id=worker.id))

        db.session.commit()
        return task

    return _create_task


@pytest.fixture
def availability_factory(models, db):
    """
    Factory for creating CleanerAvailability instances.

    day_of_week uses 0=Sunday.
    """
    def _create_availability(user, **kwargs):
        CleanerAvailability = models['CleanerAvailability']
        defaults = {
            'user_id': user.id,
            'day_of_week': 1,  # Monday
            'start_time': '08:00',
            'end_time': '17:00',
            'is_available': True,
        }
        defaults.update(kwargs)
        availability = CleanerAvailability(**defaults)
        db.session.add(availability)
        db.session.commit()
        return availability

    return _create_availability


@pytest.fixture
def leave_factory(models, db):
    """Factory for creating LeaveRequest instances (approved by default)."""
    def _create_leave(user, **kwargs):
        LeaveRequest = models['LeaveRequest']
        defaults = {
            'user_id': user.id,
            'start_date': date(2026, 3, 2),
            'end_date': date(2026, 3, 6),
            'status': 'approved',
            'reason': 'Holiday',
        }
        defaults.update(kwargs)
        leave = LeaveRequest(**defaults)
        db.session.add(leave)
        db.session.commit()
        return leave

    return _create_leave


# =============================================================================
# Helper Fixtures
# =============================================================================

@pytest.fixture
def cleaner(user_factory):
    """A single cleaner with a 20 hour weekly cap."""
    return user_factory(first_name='Ana', last_name='Silva', email='ana@example.com', max_working_hours=20)


@pytest.fixture
def manager(user_factory):
    return user_factory(first_name='Max', last_name='Manager', email='max@example.com', role='MANAGER')


@pytest.fixture
def login(client):
    """
    Sign a user in on the test client.

    Usage:
        login(manager)
    """
    def _login(user):
        with client.session_transaction() as sess:
            sess['user_id'] = user.id
        return client

    return _login


@pytest.fixture
def week():
    """Monday 2 March 2026 through Sunday 8 March 2026."""
    start = datetime(2026, 3, 2)
    return start, start + timedelta(days=6, hours=23, minutes=59, seconds=59, microseconds=999000)
