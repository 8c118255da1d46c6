"""
Summary aggregation over a merged daily schedule
"""
from .schedule_types import DailySchedule, DailyScheduleSummary, ExecutionStatus


def summarize(schedule: DailySchedule) -> DailyScheduleSummary:
    """Roll-up counts; derived only from the schedule's lanes and unscheduled list"""
    scheduled = list(schedule.scheduled_tasks())
    lanes = list(schedule.lanes())
    all_due = [s.task for s in scheduled] + [u.task for u in schedule.unscheduled]
    statuses = [s.execution_status for s in scheduled]

    mandatory = sum(1 for task in all_due if task.is_mandatory)

    return DailyScheduleSummary(
        total_tasks=len(all_due),
        scheduled_tasks=len(scheduled),
        unscheduled_tasks=len(schedule.unscheduled),
        shift_count=sum(1 for shift in schedule.shifts if shift.lanes),
        operator_count=sum(1 for lane in lanes if lane.tasks),
        rostered_operator_count=len(lanes),
        total_minutes=sum(s.task.duration_minutes for s in scheduled),
        mandatory_count=mandatory,
        ideal_count=len(all_due) - mandatory,
        completed_count=statuses.count(ExecutionStatus.COMPLETED),
        skipped_count=statuses.count(ExecutionStatus.SKIPPED),
        pending_count=statuses.count(ExecutionStatus.PENDING),
    )
