"""
Unit tests for summary aggregation.
"""
from dataclasses import replace
from datetime import date

from maintplan.services.allocator import allocate
from maintplan.services.schedule_types import (
    DailySchedule,
    DueTask,
    ExecutionStatus,
    Periodicity,
    Priority,
    RosterMember,
    ScheduleConfig,
    ShiftDefinition,
    ShiftSchedule,
)
from maintplan.services.summary import summarize

DAY = date(2025, 6, 2)
SHIFTS = [
    ShiftDefinition(shift_id=1, name='A', start_minute=360, end_minute=840, break_minutes=30),
    ShiftDefinition(shift_id=2, name='B', start_minute=840, end_minute=1320, break_minutes=30),
]


def task(action_id, duration, priority=Priority.IDEAL):
    return DueTask(
        action_id=action_id, machine_id=action_id, scheduled_date=DAY,
        action_text='Check', periodicity=Periodicity.MONTHLY, priority=priority,
        duration_minutes=duration, machine_code=f'M{action_id}',
    )


def build_schedule(tasks, roster):
    config = ScheduleConfig()
    result = allocate(tasks, roster, SHIFTS, config)
    shifts = [
        ShiftSchedule(shift=s, break_minutes=config.break_for(s), buffer_minutes=0, lanes=result.lanes_for(s.shift_id))
        for s in result.shifts
    ]
    return DailySchedule(date=DAY, config=config, shifts=shifts, unscheduled=result.unscheduled)


def test_counts_scheduled_and_unscheduled():
    tasks = [task(1, 200, Priority.MANDATORY), task(2, 200), task(3, 300)]
    roster = [
        RosterMember(operator_id=1, operator_name='Ana', shift_id=1),
        RosterMember(operator_id=2, operator_name='Bruno', shift_id=1),
    ]
    summary = summarize(build_schedule(tasks, roster))

    assert summary.total_tasks == 3
    assert summary.scheduled_tasks + summary.unscheduled_tasks == 3
    assert summary.mandatory_count == 1
    assert summary.ideal_count == 2
    assert summary.shift_count == 1
    assert summary.rostered_operator_count == 2
    assert summary.pending_count == summary.scheduled_tasks


def test_idle_operator_is_not_counted_as_working():
    roster = [
        RosterMember(operator_id=1, operator_name='Ana', shift_id=1),
        RosterMember(operator_id=2, operator_name='Bruno', shift_id=2),
    ]
    summary = summarize(build_schedule([task(1, 30)], roster))

    assert summary.operator_count == 1
    assert summary.rostered_operator_count == 2
    assert summary.shift_count == 2
    assert summary.total_minutes == 30


def test_execution_statuses_are_counted():
    roster = [RosterMember(operator_id=1, operator_name='Ana', shift_id=1)]
    schedule = build_schedule([task(1, 30), task(2, 30), task(3, 30)], roster)
    lane = schedule.shifts[0].lanes[0]
    lane.tasks[0] = replace(lane.tasks[0], execution_status=ExecutionStatus.COMPLETED)
    lane.tasks[1] = replace(lane.tasks[1], execution_status=ExecutionStatus.SKIPPED)

    summary = summarize(schedule)
    assert (summary.completed_count, summary.skipped_count, summary.pending_count) == (1, 1, 1)


def test_empty_schedule():
    summary = summarize(DailySchedule(date=DAY, config=ScheduleConfig()))
    assert summary.to_dict()['totalTasks'] == 0
    assert summary.shift_count == 0
