"""
Scheduling services
"""
from .allocator import allocate
from .due_task_collector import DueTaskCollector, collect_due_tasks
from .execution_overlay import ExecutionOverlay
from .roster_resolver import RosterResolver, resolve_roster
from .schedule_service import DailyScheduleService
from .summary import summarize

__all__ = [
    'allocate',
    'collect_due_tasks',
    'DueTaskCollector',
    'ExecutionOverlay',
    'resolve_roster',
    'RosterResolver',
    'DailyScheduleService',
    'summarize',
]
