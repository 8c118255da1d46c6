"""
Data classes and enums shared by the daily schedule pipeline

Roster resolution, due-task collection, allocation, execution overlay and
summary aggregation all exchange these immutable-by-convention records.
"""
from dataclasses import dataclass, field, replace
from datetime import date, time
from enum import Enum
from typing import Dict, FrozenSet, Iterator, List, Optional, Tuple, Union

from maintplan.error_handlers.exceptions import ValidationException, DataIntegrityException


MINUTES_PER_DAY = 1440


class Periodicity(str, Enum):
    """Recurrence class of a maintenance action"""
    BEFORE_EACH_USE = "BEFORE_EACH_USE"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    YEARLY = "YEARLY"

    @classmethod
    def parse(cls, value: Union[str, 'Periodicity']) -> 'Periodicity':
        """Accepts enum members and stored labels such as 'BEFORE EACH USE'"""
        if isinstance(value, cls):
            return value
        normalized = str(value or '').strip().upper().replace(' ', '_').replace('-', '_')
        try:
            return cls(normalized)
        except ValueError:
            raise DataIntegrityException(f"Unknown periodicity: {value!r}")


class Priority(str, Enum):
    """Priority class; mandatory tasks are placed ahead of ideal ones"""
    MANDATORY = "MANDATORY"
    IDEAL = "IDEAL"

    @classmethod
    def parse(cls, value: Union[str, 'Priority']) -> 'Priority':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or '').strip().upper())
        except ValueError:
            raise DataIntegrityException(f"Unknown priority: {value!r}")


class ExecutionStatus(str, Enum):
    """Execution overlay state of a scheduled task"""
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    SKIPPED = "SKIPPED"

    @classmethod
    def parse(cls, value: Union[str, 'ExecutionStatus']) -> 'ExecutionStatus':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or '').strip().upper())
        except ValueError:
            allowed = ', '.join(s.value for s in cls)
            raise ValidationException(f"Invalid status {value!r}. Use one of: {allowed}")


class SchedulingNote(str, Enum):
    """Why the allocator picked a lane"""
    GROUPED_WITH_MACHINE = "GROUPED_WITH_MACHINE"
    PERSON_IN_CHARGE = "PERSON_IN_CHARGE"
    BEST_FIT_TIE_BREAK = "BEST_FIT_TIE_BREAK"

    @property
    def message(self) -> str:
        return _NOTE_MESSAGES[self]


class UnscheduledReason(str, Enum):
    """Why the allocator could not place a task"""
    NO_CAPACITY = "NO_CAPACITY"
    NO_AUTHORIZED_OPERATOR = "NO_AUTHORIZED_OPERATOR"
    NO_OPERATOR_ON_SHIFT = "NO_OPERATOR_ON_SHIFT"
    MACHINE_ON_HOLD = "MACHINE_ON_HOLD"

    @property
    def message(self) -> str:
        return _REASON_MESSAGES[self]


_NOTE_MESSAGES = {
    SchedulingNote.GROUPED_WITH_MACHINE: "grouped with same-machine task",
    SchedulingNote.PERSON_IN_CHARGE: "assigned to machine person in charge",
    SchedulingNote.BEST_FIT_TIE_BREAK: "best-fit tie broken by operator id",
}

_REASON_MESSAGES = {
    UnscheduledReason.NO_CAPACITY: "no available capacity",
    UnscheduledReason.NO_AUTHORIZED_OPERATOR: "no authorized operator",
    UnscheduledReason.NO_OPERATOR_ON_SHIFT: "no operator on shift",
    UnscheduledReason.MACHINE_ON_HOLD: "machine on hold",
}


def clock_to_minutes(value: Union[str, time]) -> int:
    """
    Convert a clock-of-day value to minutes after midnight.

    Args:
        value: datetime.time or 'HH:MM' string

    Returns:
        int: minutes after midnight

    Raises:
        ValidationException: If the string is not a valid HH:MM time
    """
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    try:
        hours, minutes = str(value).split(':')[:2]
        hours, minutes = int(hours), int(minutes)
    except (ValueError, AttributeError):
        raise ValidationException(f"Invalid time {value!r}. Use HH:MM")
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        raise ValidationException(f"Invalid time {value!r}. Use HH:MM")
    return hours * 60 + minutes


def minutes_to_clock(minutes: int) -> str:
    """Format minutes after midnight as HH:MM (wraps past midnight)"""
    normalized = minutes % MINUTES_PER_DAY
    return f"{normalized // 60:02d}:{normalized % 60:02d}"


@dataclass(frozen=True)
class ShiftDefinition:
    """Read-only snapshot of a configured shift"""
    shift_id: int
    name: str
    start_minute: int
    end_minute: int
    break_minutes: Optional[int] = None

    @property
    def length_minutes(self) -> int:
        return self.end_minute - self.start_minute

    @property
    def start_time(self) -> str:
        return minutes_to_clock(self.start_minute)

    @property
    def end_time(self) -> str:
        return minutes_to_clock(self.end_minute)

    @classmethod
    def from_model(cls, shift) -> 'ShiftDefinition':
        return cls(
            shift_id=shift.id,
            name=shift.name,
            start_minute=clock_to_minutes(shift.start_time),
            end_minute=clock_to_minutes(shift.end_time),
            break_minutes=shift.break_minutes,
        )


@dataclass(frozen=True)
class RosterMember:
    """An operator working a shift on the scheduled date"""
    operator_id: int
    operator_name: str
    shift_id: int
    department: str = ''
    authorized_groups: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class DueTask:
    """A maintenance action due on the scheduled date"""
    action_id: int
    machine_id: int
    scheduled_date: date
    action_text: str
    periodicity: Periodicity
    priority: Priority
    duration_minutes: int
    machine_code: str
    machine_area: str = ''
    authorization_group: Optional[str] = None
    maintenance_in_charge: bool = False
    person_in_charge_id: Optional[int] = None
    machine_on_hold: bool = False

    @property
    def key(self) -> Tuple[int, int, date]:
        return (self.action_id, self.machine_id, self.scheduled_date)

    @property
    def is_mandatory(self) -> bool:
        return self.priority is Priority.MANDATORY

    def to_dict(self) -> dict:
        return {
            'actionId': str(self.action_id),
            'machineId': str(self.machine_id),
            'scheduledDate': self.scheduled_date.isoformat(),
            'machineFinalCode': self.machine_code,
            'machineArea': self.machine_area,
            'authorizationGroup': self.authorization_group,
            'actionText': self.action_text,
            'periodicity': self.periodicity.value,
            'status': self.priority.value,
            'maintenanceInCharge': self.maintenance_in_charge,
            'timeNeeded': self.duration_minutes,
        }


@dataclass(frozen=True)
class ScheduleConfig:
    """
    Per-request allocation settings

    break_duration overrides the shift's own break when given; otherwise
    the shift break (or 0) applies.
    """
    break_duration: Optional[int] = None
    buffer_minutes: int = 0
    group_by_machine: bool = False
    prioritize_mandatory: bool = True
    prefer_person_in_charge: bool = True

    def __post_init__(self):
        if self.break_duration is not None and self.break_duration < 0:
            raise ValidationException('breakDuration must be >= 0')
        if self.buffer_minutes < 0:
            raise ValidationException('bufferMinutes must be >= 0')

    def break_for(self, shift: ShiftDefinition) -> int:
        if self.break_duration is not None:
            return self.break_duration
        return shift.break_minutes or 0

    def to_dict(self) -> dict:
        return {
            'breakDuration': self.break_duration,
            'bufferMinutes': self.buffer_minutes,
            'groupByMachine': self.group_by_machine,
            'prioritizeMandatory': self.prioritize_mandatory,
            'preferPersonInCharge': self.prefer_person_in_charge,
        }


@dataclass(frozen=True)
class ScheduledTask:
    """A due task placed in an operator lane"""
    task: DueTask
    operator_id: int
    operator_name: str
    start_minute: int
    notes: Tuple[SchedulingNote, ...] = ()
    execution_status: ExecutionStatus = ExecutionStatus.PENDING
    execution_id: Optional[int] = None
    completed_by_name: Optional[str] = None

    @property
    def end_minute(self) -> int:
        return self.start_minute + self.task.duration_minutes

    @property
    def start_time(self) -> str:
        return minutes_to_clock(self.start_minute)

    @property
    def end_time(self) -> str:
        return minutes_to_clock(self.end_minute)

    def to_dict(self) -> dict:
        result = self.task.to_dict()
        result.update({
            'id': f"{self.task.action_id}-{self.task.machine_id}-{self.task.scheduled_date.isoformat()}",
            'assignedOperatorId': str(self.operator_id),
            'assignedOperatorName': self.operator_name,
            'startTime': self.start_time,
            'endTime': self.end_time,
            'startMinute': self.start_minute,
            'endMinute': self.end_minute,
            'executionStatus': self.execution_status.value,
            'executionId': str(self.execution_id) if self.execution_id is not None else None,
            'completedByName': self.completed_by_name,
            'schedulingNoteCodes': [note.value for note in self.notes],
            'schedulingNotes': [note.message for note in self.notes],
        })
        return result


@dataclass(frozen=True)
class UnscheduledTask:
    """A due task the allocator could not place"""
    task: DueTask
    reason: UnscheduledReason

    def to_dict(self) -> dict:
        result = self.task.to_dict()
        result.update({
            'reasonCode': self.reason.value,
            'reason': self.reason.message,
        })
        return result


@dataclass
class OperatorLane:
    """
    One operator's ordered task list within a shift

    Tasks are appended at the cursor, so start minutes are strictly
    increasing and never overlap.
    """
    member: RosterMember
    shift_id: int
    start_minute: int
    capacity_minutes: int
    tasks: List[ScheduledTask] = field(default_factory=list)

    @property
    def operator_id(self) -> int:
        return self.member.operator_id

    @property
    def operator_name(self) -> str:
        return self.member.operator_name

    @property
    def total_minutes(self) -> int:
        return sum(t.task.duration_minutes for t in self.tasks)

    @property
    def remaining_minutes(self) -> int:
        return self.capacity_minutes - self.total_minutes

    @property
    def cursor_minute(self) -> int:
        return self.tasks[-1].end_minute if self.tasks else self.start_minute

    @property
    def utilization_percent(self) -> int:
        if self.capacity_minutes <= 0:
            return 0
        return round(self.total_minutes * 100 / self.capacity_minutes)

    def has_machine(self, machine_id: int) -> bool:
        return any(t.task.machine_id == machine_id for t in self.tasks)

    def place(self, task: DueTask, notes: Tuple[SchedulingNote, ...] = ()) -> ScheduledTask:
        """Append task right after the current last task"""
        scheduled = ScheduledTask(
            task=task,
            operator_id=self.operator_id,
            operator_name=self.operator_name,
            start_minute=self.cursor_minute,
            notes=tuple(notes),
        )
        self.tasks.append(scheduled)
        return scheduled

    def with_tasks(self, tasks: List[ScheduledTask]) -> 'OperatorLane':
        """Copy of the lane carrying a different task list"""
        return replace(self, tasks=list(tasks))

    def to_dict(self) -> dict:
        return {
            'operatorId': str(self.operator_id),
            'operatorName': self.operator_name,
            'department': self.member.department,
            'capacityMinutes': self.capacity_minutes,
            'totalMinutes': self.total_minutes,
            'utilizationPercent': self.utilization_percent,
            'tasks': [t.to_dict() for t in self.tasks],
        }


@dataclass
class AllocationResult:
    """Allocator output: lanes grouped by the shifts that have operators"""
    shifts: List[ShiftDefinition]
    lanes: List[OperatorLane]
    unscheduled: List[UnscheduledTask]

    def lanes_for(self, shift_id: int) -> List[OperatorLane]:
        return [lane for lane in self.lanes if lane.shift_id == shift_id]

    def scheduled_tasks(self) -> Iterator[ScheduledTask]:
        for lane in self.lanes:
            yield from lane.tasks


@dataclass
class ShiftSchedule:
    """One shift of the daily schedule with its operator lanes"""
    shift: ShiftDefinition
    break_minutes: int
    buffer_minutes: int
    lanes: List[OperatorLane] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'shiftId': str(self.shift.shift_id),
            'shiftName': self.shift.name,
            'workdayStart': self.shift.start_time,
            'workdayEnd': self.shift.end_time,
            'breakMinutes': self.break_minutes,
            'bufferMinutes': self.buffer_minutes,
            'operators': [lane.to_dict() for lane in self.lanes],
        }


@dataclass(frozen=True)
class UnassignedOperator:
    """Active operator without an effective shift on the date"""
    operator_id: int
    operator_name: str
    department: str = ''
    is_day_off: bool = False

    def to_dict(self) -> dict:
        return {
            'operatorId': str(self.operator_id),
            'operatorName': self.operator_name,
            'department': self.department,
            'isDayOff': self.is_day_off,
        }


@dataclass(frozen=True)
class DailyScheduleSummary:
    """Roll-up counts over a merged daily schedule"""
    total_tasks: int = 0
    scheduled_tasks: int = 0
    unscheduled_tasks: int = 0
    shift_count: int = 0
    operator_count: int = 0
    rostered_operator_count: int = 0
    total_minutes: int = 0
    mandatory_count: int = 0
    ideal_count: int = 0
    completed_count: int = 0
    skipped_count: int = 0
    pending_count: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            'totalTasks': self.total_tasks,
            'scheduledTasks': self.scheduled_tasks,
            'unscheduledTasks': self.unscheduled_tasks,
            'shiftCount': self.shift_count,
            'operatorCount': self.operator_count,
            'rosteredOperatorCount': self.rostered_operator_count,
            'totalMinutes': self.total_minutes,
            'mandatoryCount': self.mandatory_count,
            'idealCount': self.ideal_count,
            'completedCount': self.completed_count,
            'skippedCount': self.skipped_count,
            'pendingCount': self.pending_count,
        }


@dataclass
class DailySchedule:
    """The single response object for a date"""
    date: date
    config: ScheduleConfig
    shifts: List[ShiftSchedule] = field(default_factory=list)
    unscheduled: List[UnscheduledTask] = field(default_factory=list)
    unassigned: List[UnassignedOperator] = field(default_factory=list)
    summary: DailyScheduleSummary = field(default_factory=DailyScheduleSummary)
    execution_status_known: bool = True
    warnings: List[str] = field(default_factory=list)

    def lanes(self) -> Iterator[OperatorLane]:
        for shift in self.shifts:
            yield from shift.lanes

    def scheduled_tasks(self) -> Iterator[ScheduledTask]:
        for lane in self.lanes():
            yield from lane.tasks

    def to_dict(self) -> dict:
        return {
            'date': self.date.isoformat(),
            'config': self.config.to_dict(),
            'shifts': [s.to_dict() for s in self.shifts],
            'unassigned': [op.to_dict() for op in self.unassigned],
            'unscheduled': [t.to_dict() for t in self.unscheduled],
            'summary': self.summary.to_dict(),
            'executionStatusKnown': self.execution_status_known,
            'warnings': list(self.warnings),
        }
