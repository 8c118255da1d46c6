"""
Pytest configuration and fixtures for maintenance scheduler tests.

This module provides shared fixtures for:
- Flask application with test configuration
- Database setup and teardown
- Model factories for creating catalog data
"""
import pytest
from datetime import date, time

from maintplan import create_app
from maintplan.extensions import db as _db


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
        'RATELIMIT_ENABLED': False,
    })
    return app


@pytest.fixture(scope='function')
def db(app):
    """
    Create database for the tests.

    Creates all tables before each test function and drops them after.
    """
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope='function')
def client(app, db):
    """Test client sharing the per-test database."""
    with app.test_client() as client:
        yield client


@pytest.fixture(scope='function')
def models(app, db):
    """Model classes from the model registry."""
    from maintplan.models import get_models
    return get_models()


# =============================================================================
# Model Factories
# =============================================================================

@pytest.fixture
def shift_factory(models, db):
    """
    Factory for creating Shift instances.

    Usage:
        shift = shift_factory(name="Shift B", start_time=time(14, 0), end_time=time(22, 0))
    """
    def _create_shift(**kwargs):
        Shift = models['Shift']
        defaults = {
            'name': 'Shift A',
            'start_time': time(6, 0),
            'end_time': time(14, 0),
            'break_minutes': 30,
            'is_active': True,
        }
        defaults.update(kwargs)
        shift = Shift(**defaults)
        db.session.add(shift)
        db.session.commit()
        return shift

    return _create_shift


@pytest.fixture
def operator_factory(models, db):
    """
    Factory for creating Operator instances.

    Usage:
        operator = operator_factory(name="Ana", default_shift=shift)
    """
    counter = [0]

    def _create_operator(default_shift=None, **kwargs):
        Operator = models['Operator']
        counter[0] += 1
        defaults = {
            'name': f'Operator {counter[0]}',
            'department': 'Maintenance',
            'email': f'operator{counter[0]}@example.com',
            'is_active': True,
            'default_shift_id': default_shift.id if default_shift else None,
        }
        defaults.update(kwargs)
        operator = Operator(**defaults)
        db.session.add(operator)
        db.session.commit()
        return operator

    return _create_operator


@pytest.fixture
def override_factory(models, db):
    """
    Factory for creating OperatorShiftOverride instances.

    Passing shift=None records a day off.
    """
    def _create_override(operator, shift_date, shift=None):
        Override = models['OperatorShiftOverride']
        override = Override(
            operator_id=operator.id,
            shift_date=shift_date,
            shift_id=shift.id if shift else None,
        )
        db.session.add(override)
        db.session.commit()
        return override

    return _create_override


@pytest.fixture
def authorization_factory(models, db):
    """Factory granting an operator an authorization group."""
    def _grant(operator, group):
        Authorization = models['OperatorAuthorization']
        grant = Authorization(operator_id=operator.id, authorization_group=group)
        db.session.add(grant)
        db.session.commit()
        return grant

    return _grant


@pytest.fixture
def machine_factory(models, db):
    """
    Factory for creating Machine instances.

    Usage:
        machine = machine_factory(final_code="PRS-01", authorization_group="PRESS")
    """
    counter = [0]

    def _create_machine(**kwargs):
        Machine = models['Machine']
        counter[0] += 1
        defaults = {
            'final_code': f'MC-{counter[0]:03d}',
            'description': 'Test machine',
            'area': 'Assembly',
            'authorization_group': None,
            'maintenance_needed': True,
            'maintenance_on_hold': False,
        }
        defaults.update(kwargs)
        machine = Machine(**defaults)
        db.session.add(machine)
        db.session.commit()
        return machine

    return _create_machine


@pytest.fixture
def action_factory(models, db, machine_factory):
    """
    Factory for creating MaintenanceAction instances.

    Creates a machine when none is given. Default is a MONTHLY, 30-minute
    IDEAL action (due on the 1st of every month).
    """
    def _create_action(machine=None, **kwargs):
        Action = models['MaintenanceAction']
        if machine is None:
            machine = machine_factory()
        defaults = {
            'machine_id': machine.id,
            'action': 'Lubricate guide rails',
            'periodicity': 'MONTHLY',
            'priority': 'IDEAL',
            'time_needed': 30,
            'maintenance_in_charge': False,
        }
        defaults.update(kwargs)
        action = Action(**defaults)
        db.session.add(action)
        db.session.commit()
        return action

    return _create_action


@pytest.fixture
def first_of_month():
    """A date on which MONTHLY actions are due."""
    return date(2025, 6, 1)
