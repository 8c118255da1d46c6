"""
Allocator
Greedy best-fit packing of due tasks into operator lanes

Deterministic: the same tasks, roster, shifts and config always produce the
same lanes, in the same order, with the same start minutes.
"""
import logging
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from maintplan.error_handlers.exceptions import DataIntegrityException
from .schedule_types import (
    AllocationResult,
    DueTask,
    OperatorLane,
    RosterMember,
    ScheduleConfig,
    SchedulingNote,
    ShiftDefinition,
    UnscheduledReason,
    UnscheduledTask,
)

logger = logging.getLogger(__name__)

AuthorizationPredicate = Callable[[RosterMember, Optional[str]], bool]
Placement = Tuple[OperatorLane, Tuple[SchedulingNote, ...]]


def is_authorized(member: RosterMember, authorization_group: Optional[str]) -> bool:
    """Machines without an authorization group are open to every operator"""
    if not authorization_group:
        return True
    return authorization_group in member.authorized_groups


def lane_capacity(shift: ShiftDefinition, config: ScheduleConfig) -> int:
    """Working minutes of a shift after break and buffer, never negative"""
    return max(0, shift.length_minutes - config.break_for(shift) - config.buffer_minutes)


def check_shift(shift: ShiftDefinition) -> None:
    """
    Raises:
        DataIntegrityException: If the shift ends at or before its start
    """
    if shift.end_minute <= shift.start_minute:
        raise DataIntegrityException(
            f"Shift '{shift.name}' ends at {shift.end_time}, not after its start {shift.start_time}",
            details={'shiftId': str(shift.shift_id)}
        )


def index_shifts(shifts: Iterable[ShiftDefinition]) -> Dict[int, ShiftDefinition]:
    """
    Map shifts by id.

    Raises:
        DataIntegrityException: If a shift id repeats
    """
    shift_map = {}
    for shift in shifts:
        if shift.shift_id in shift_map:
            raise DataIntegrityException(f"Shift {shift.shift_id} is defined twice")
        shift_map[shift.shift_id] = shift
    return shift_map


def machine_free(busy: Dict[int, List[Tuple[int, int]]], machine_id: int, start: int, end: int) -> bool:
    """True when [start, end) overlaps no slot already booked on the machine"""
    return all(end <= booked_start or start >= booked_end for booked_start, booked_end in busy.get(machine_id, ()))


def sort_key(task: DueTask, config: ScheduleConfig) -> tuple:
    priority_rank = 0 if (config.prioritize_mandatory and task.is_mandatory) else 1
    return (priority_rank, -task.duration_minutes, task.machine_code, task.action_id, task.machine_id)


def best_fit(candidates: Sequence[OperatorLane]) -> Placement:
    """Lane with the least remaining capacity; ties go to the lowest operator id"""
    tightest = min(lane.remaining_minutes for lane in candidates)
    tied = sorted(
        (lane for lane in candidates if lane.remaining_minutes == tightest),
        key=lambda lane: lane.operator_id
    )
    notes = (SchedulingNote.BEST_FIT_TIE_BREAK,) if len(tied) > 1 else ()
    return tied[0], notes


def choose_lane(task: DueTask, candidates: Sequence[OperatorLane], config: ScheduleConfig) -> Placement:
    """
    Placement rule: pick one lane among those that can fit the task.

    Preference: a lane already holding the same machine (when grouping),
    then the machine's person in charge for in-charge actions, then best fit.
    """
    if config.group_by_machine:
        same_machine = [lane for lane in candidates if lane.has_machine(task.machine_id)]
        if same_machine:
            lane, notes = best_fit(same_machine)
            return lane, (SchedulingNote.GROUPED_WITH_MACHINE,) + notes

    if config.prefer_person_in_charge and task.maintenance_in_charge and task.person_in_charge_id is not None:
        for lane in candidates:
            if lane.operator_id == task.person_in_charge_id:
                return lane, (SchedulingNote.PERSON_IN_CHARGE,)

    return best_fit(candidates)


def build_lanes(
    roster: Iterable[RosterMember],
    shift_map: Dict[int, ShiftDefinition],
    config: ScheduleConfig,
) -> List[OperatorLane]:
    """
    One empty lane per rostered operator, ordered by shift start then operator.

    Raises:
        DataIntegrityException: On a duplicate operator, an unknown shift or a
            rostered shift that ends before it starts
    """
    seen = set()
    lanes = []
    for member in roster:
        if member.operator_id in seen:
            raise DataIntegrityException(
                f"Operator {member.operator_id} is rostered more than once",
                details={'operatorId': str(member.operator_id)}
            )
        seen.add(member.operator_id)

        shift = shift_map.get(member.shift_id)
        if shift is None:
            raise DataIntegrityException(
                f"Operator {member.operator_id} is rostered on unknown shift {member.shift_id}",
                details={'operatorId': str(member.operator_id), 'shiftId': str(member.shift_id)}
            )
        check_shift(shift)
        lanes.append(OperatorLane(
            member=member,
            shift_id=shift.shift_id,
            start_minute=shift.start_minute,
            capacity_minutes=lane_capacity(shift, config),
        ))

    lanes.sort(key=lambda lane: (
        shift_map[lane.shift_id].start_minute, lane.shift_id, lane.operator_name, lane.operator_id
    ))
    return lanes


def allocate(
    due_tasks: Iterable[DueTask],
    roster: Iterable[RosterMember],
    shifts: Iterable[ShiftDefinition],
    config: Optional[ScheduleConfig] = None,
    authorized: AuthorizationPredicate = is_authorized,
) -> AllocationResult:
    """
    Pack due tasks into operator lanes.

    Args:
        due_tasks: Tasks due on the date
        roster: Operators working that date with their shift
        shifts: Shift catalog
        config: Allocation settings (defaults when None)
        authorized: Predicate deciding whether an operator may service a group

    Returns:
        AllocationResult with every task either in one lane or unscheduled

    Raises:
        DataIntegrityException: On malformed shifts, duplicate operators,
            unknown shift references or duplicate tasks
    """
    config = config or ScheduleConfig()
    shift_map = index_shifts(shifts)
    lanes = build_lanes(roster, shift_map, config)

    tasks = list(due_tasks)
    keys = set()
    for task in tasks:
        if task.key in keys:
            raise DataIntegrityException(
                f"Action {task.action_id} on machine {task.machine_id} is due twice on the same date"
            )
        keys.add(task.key)

    unscheduled: List[UnscheduledTask] = []
    # Booked slots per machine across every lane
    machine_busy: Dict[int, List[Tuple[int, int]]] = {}
    for task in sorted(tasks, key=lambda t: sort_key(t, config)):
        if task.machine_on_hold:
            unscheduled.append(UnscheduledTask(task, UnscheduledReason.MACHINE_ON_HOLD))
            continue
        if not lanes:
            unscheduled.append(UnscheduledTask(task, UnscheduledReason.NO_OPERATOR_ON_SHIFT))
            continue

        eligible = [lane for lane in lanes if authorized(lane.member, task.authorization_group)]
        if not eligible:
            unscheduled.append(UnscheduledTask(task, UnscheduledReason.NO_AUTHORIZED_OPERATOR))
            continue

        candidates = [
            lane for lane in eligible
            if lane.remaining_minutes >= task.duration_minutes
            and machine_free(machine_busy, task.machine_id,
                             lane.cursor_minute, lane.cursor_minute + task.duration_minutes)
        ]
        if not candidates:
            unscheduled.append(UnscheduledTask(task, UnscheduledReason.NO_CAPACITY))
            continue

        lane, notes = choose_lane(task, candidates, config)
        scheduled = lane.place(task, notes)
        machine_busy.setdefault(task.machine_id, []).append((scheduled.start_minute, scheduled.end_minute))

    used_shift_ids = {lane.shift_id for lane in lanes}
    used_shifts = sorted(
        (shift for shift in shift_map.values() if shift.shift_id in used_shift_ids),
        key=lambda s: (s.start_minute, s.shift_id)
    )

    placed = sum(len(lane.tasks) for lane in lanes)
    logger.debug(f"Allocated {placed} tasks across {len(lanes)} lanes, {len(unscheduled)} unscheduled")
    return AllocationResult(shifts=used_shifts, lanes=lanes, unscheduled=unscheduled)
