"""
Tests for the daily schedule pipeline end to end (without HTTP).
"""
from datetime import date, time

import pytest

from maintplan.error_handlers.exceptions import DataIntegrityException, StorageTimeoutException
from maintplan.services.roster_resolver import RosterResolver
from maintplan.services.schedule_service import DailyScheduleService
from maintplan.services.schedule_types import ExecutionStatus, ScheduleConfig, UnscheduledReason


@pytest.fixture
def two_shifts(shift_factory):
    shift_a = shift_factory(name='Shift A', start_time=time(6, 0), end_time=time(14, 0), break_minutes=30)
    shift_b = shift_factory(name='Shift B', start_time=time(14, 0), end_time=time(22, 0), break_minutes=30)
    return shift_a, shift_b


def test_override_moves_operator_for_one_day(db, models, two_shifts, operator_factory, override_factory):
    shift_a, shift_b = two_shifts
    operator = operator_factory(name='Ana', default_shift=shift_a)
    override_factory(operator, date(2025, 6, 10), shift_b)

    resolver = RosterResolver(db.session, models)
    assert resolver.resolve_roster(date(2025, 6, 10))[operator.id] == shift_b.id
    assert resolver.resolve_roster(date(2025, 6, 11))[operator.id] == shift_a.id


def test_schedule_places_due_tasks(db, models, two_shifts, operator_factory, action_factory, first_of_month):
    shift_a, shift_b = two_shifts
    ana = operator_factory(name='Ana', default_shift=shift_a)
    operator_factory(name='Bruno', default_shift=shift_b)
    action_factory(priority='MANDATORY', time_needed=60)
    action_factory(time_needed=45)

    schedule = DailyScheduleService(db.session, models).build(first_of_month)

    assert [s.shift.name for s in schedule.shifts] == ['Shift A', 'Shift B']
    assert schedule.summary.total_tasks == 2
    assert schedule.summary.scheduled_tasks == 2
    assert schedule.summary.rostered_operator_count == 2
    first = schedule.shifts[0].lanes[0]
    assert first.operator_id == ana.id
    assert first.capacity_minutes == 450
    assert first.tasks[0].start_time == '06:00'
    assert schedule.execution_status_known is True


def test_day_off_operator_is_unassigned(db, models, two_shifts, operator_factory, override_factory, first_of_month):
    shift_a, _ = two_shifts
    ana = operator_factory(name='Ana', default_shift=shift_a)
    override_factory(ana, first_of_month, None)
    operator_factory(name='Carla')

    schedule = DailyScheduleService(db.session, models).build(first_of_month)

    unassigned = {op.operator_name: op for op in schedule.unassigned}
    assert unassigned['Ana'].is_day_off is True
    assert unassigned['Carla'].is_day_off is False
    assert schedule.shifts == []


def test_authorization_grants_are_applied(db, models, two_shifts, operator_factory, machine_factory,
                                          action_factory, authorization_factory, first_of_month):
    shift_a, _ = two_shifts
    ana = operator_factory(name='Ana', default_shift=shift_a)
    bruno = operator_factory(name='Bruno', default_shift=shift_a)
    authorization_factory(bruno, 'PRESS')
    press = machine_factory(authorization_group='PRESS')
    weld = machine_factory(authorization_group='WELD')
    action_factory(machine=press)
    action_factory(machine=weld)

    schedule = DailyScheduleService(db.session, models).build(first_of_month)

    placed = {t.task.machine_id: t.operator_id for t in schedule.scheduled_tasks()}
    assert placed == {press.id: bruno.id}
    assert schedule.unscheduled[0].reason is UnscheduledReason.NO_AUTHORIZED_OPERATOR
    assert ana.id not in placed.values()


def test_config_changes_capacity(db, models, two_shifts, operator_factory, action_factory, first_of_month):
    shift_a, _ = two_shifts
    operator_factory(name='Ana', default_shift=shift_a)
    action_factory(time_needed=400)

    config = ScheduleConfig(break_duration=60, buffer_minutes=30)
    schedule = DailyScheduleService(db.session, models).build(first_of_month, config)

    assert schedule.shifts[0].lanes[0].capacity_minutes == 390
    assert schedule.unscheduled[0].reason is UnscheduledReason.NO_CAPACITY


def test_completion_is_overlaid(db, models, two_shifts, operator_factory, action_factory, first_of_month):
    from maintplan.services.execution_overlay import ExecutionOverlay

    shift_a, _ = two_shifts
    ana = operator_factory(name='Ana', default_shift=shift_a)
    action = action_factory()
    ExecutionOverlay(db.session, models).upsert_execution(action.id, action.machine_id, first_of_month,
                                                          completed_by_id=ana.id)

    schedule = DailyScheduleService(db.session, models).build(first_of_month)

    task = next(schedule.scheduled_tasks())
    assert task.execution_status is ExecutionStatus.COMPLETED
    assert task.completed_by_name == 'Ana'
    assert schedule.summary.completed_count == 1


def test_execution_timeout_degrades(db, models, two_shifts, operator_factory, action_factory,
                                    first_of_month, monkeypatch):
    shift_a, _ = two_shifts
    operator_factory(name='Ana', default_shift=shift_a)
    action_factory()

    service = DailyScheduleService(db.session, models)

    def timed_out(target_date):
        raise StorageTimeoutException('Storage timed out during load executions')

    monkeypatch.setattr(service.overlay, 'executions_for_date', timed_out)
    schedule = service.build(first_of_month)

    assert schedule.execution_status_known is False
    assert schedule.summary.pending_count == 1


def test_malformed_rostered_shift_blocks_schedule(db, models, shift_factory, operator_factory, first_of_month):
    night = shift_factory(name='Night', start_time=time(22, 0), end_time=time(6, 0))
    operator_factory(name='Ana', default_shift=night)

    with pytest.raises(DataIntegrityException):
        DailyScheduleService(db.session, models).build(first_of_month)
