"""
Execution Overlay Service
Merges stored execution records into allocator output and owns the
execution write path

Execution records are keyed by (action, machine, scheduled date). The
overlay never validates writes against the allocator output, so a task can
be completed even if it is no longer scheduled.
"""
import logging
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from maintplan.error_handlers.exceptions import (
    ConflictException,
    ResourceNotFoundException,
    StorageTimeoutException,
    ValidationException,
)
from maintplan.utils.db_helpers import storage_guard
from maintplan.utils.validators import parse_id, parse_non_negative_int, validate_date_param
from .occurrences import planned_occurrence_count
from .schedule_types import (
    AllocationResult,
    DailySchedule,
    ExecutionStatus,
    ScheduleConfig,
    ScheduledTask,
    ShiftSchedule,
    UnassignedOperator,
)

logger = logging.getLogger(__name__)

MAX_NOTES_LENGTH = 1000
EXECUTION_FIELDS = ('status', 'actual_time', 'completed_by_id', 'notes')

ExecutionKey = Tuple[int, int, date]


class ExecutionOverlay:
    """
    Read and write access to maintenance execution records

    Handles:
    - Overlaying execution status onto scheduled tasks
    - Upsert, patch and idempotent delete of execution records
    - Range listing and per-action completion statistics
    """

    MAX_WRITE_ATTEMPTS = 2

    def __init__(self, db_session: Session, models: dict):
        """
        Initialize ExecutionOverlay

        Args:
            db_session: SQLAlchemy database session
            models: Dictionary of model classes from the model registry
        """
        self.db = db_session
        self.MaintenanceExecution = models['MaintenanceExecution']
        self.MaintenanceAction = models['MaintenanceAction']

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    def executions_for_date(self, target_date: date) -> Dict[ExecutionKey, Any]:
        """Execution records for a date keyed by (action id, machine id, date)"""
        Execution = self.MaintenanceExecution
        with storage_guard('load executions', self.db):
            rows = (
                self.db.query(Execution)
                .options(joinedload(Execution.completed_by))
                .filter(Execution.scheduled_date == target_date)
                .all()
            )
            return {(row.action_id, row.machine_id, row.scheduled_date): row for row in rows}

    def merge(
        self,
        allocation: AllocationResult,
        target_date: date,
        config: ScheduleConfig,
        unassigned: Iterable[UnassignedOperator] = (),
    ) -> DailySchedule:
        """
        Build the DailySchedule with execution state applied.

        The allocation itself is not modified. When the execution lookup
        times out every task stays PENDING and the schedule is flagged.
        """
        schedule = DailySchedule(
            date=target_date,
            config=config,
            unscheduled=list(allocation.unscheduled),
            unassigned=list(unassigned),
        )

        try:
            executions = self.executions_for_date(target_date)
        except StorageTimeoutException as e:
            logger.warning(f"Execution lookup for {target_date} degraded: {e.message}")
            executions = {}
            schedule.execution_status_known = False
            schedule.warnings.append(
                'Execution status unavailable (storage timed out); tasks are shown as PENDING'
            )

        for shift in allocation.shifts:
            lanes = [
                lane.with_tasks([self._apply(task, executions) for task in lane.tasks])
                for lane in allocation.lanes_for(shift.shift_id)
            ]
            schedule.shifts.append(ShiftSchedule(
                shift=shift,
                break_minutes=config.break_for(shift),
                buffer_minutes=config.buffer_minutes,
                lanes=lanes,
            ))
        return schedule

    def _apply(self, scheduled: ScheduledTask, executions: Dict[ExecutionKey, Any]) -> ScheduledTask:
        record = executions.get(scheduled.task.key)
        if record is None:
            return scheduled
        try:
            status = ExecutionStatus.parse(record.status)
        except ValidationException:
            logger.warning(f"Execution {record.id} has unknown status {record.status!r}; shown as PENDING")
            status = ExecutionStatus.PENDING
        return ScheduledTask(
            task=scheduled.task,
            operator_id=scheduled.operator_id,
            operator_name=scheduled.operator_name,
            start_minute=scheduled.start_minute,
            notes=scheduled.notes,
            execution_status=status,
            execution_id=record.id,
            completed_by_name=record.completed_by.name if record.completed_by else None,
        )

    def list_executions(self, range_start, range_end) -> List[Any]:
        """Execution records with scheduled_date in [range_start, range_end]"""
        range_start = validate_date_param(range_start, 'from')
        range_end = validate_date_param(range_end, 'to')
        if range_end < range_start:
            raise ValidationException("'from' must not be after 'to'")

        Execution = self.MaintenanceExecution
        with storage_guard('list executions', self.db):
            return (
                self.db.query(Execution)
                .options(joinedload(Execution.completed_by))
                .filter(Execution.scheduled_date >= range_start, Execution.scheduled_date <= range_end)
                .order_by(Execution.scheduled_date, Execution.id)
                .all()
            )

    def execution_stats(self, machine_id: Optional[int] = None, as_of: Optional[date] = None) -> List[Dict[str, Any]]:
        """
        Per-action completion statistics for the current year up to as_of.

        Args:
            machine_id: Restrict to one machine's actions
            as_of: Last day counted (today when None)

        Returns:
            List of dicts (camelCase keys), one per action, ordered by action id
        """
        as_of = validate_date_param(as_of, 'asOf') if as_of else date.today()
        year_start = date(as_of.year, 1, 1)
        Execution = self.MaintenanceExecution
        Action = self.MaintenanceAction

        is_completed = Execution.status == ExecutionStatus.COMPLETED.value
        query = (
            self.db.query(
                Action.id,
                Action.machine_id,
                Action.periodicity,
                Action.month,
                Action.anchor_date,
                func.count(case((is_completed, 1))).label('total_completed'),
                func.count(case((Execution.status == ExecutionStatus.SKIPPED.value, 1))).label('total_skipped'),
                func.count(Execution.id).label('total_records'),
                func.max(case((is_completed, Execution.completed_date))).label('last_completed'),
                func.avg(case((is_completed, Execution.actual_time))).label('avg_actual_time'),
            )
            .outerjoin(Execution, Execution.action_id == Action.id)
            .group_by(Action.id, Action.machine_id, Action.periodicity, Action.month, Action.anchor_date)
            .order_by(Action.id)
        )
        if machine_id is not None:
            query = query.filter(Action.machine_id == machine_id)

        with storage_guard('execution stats', self.db):
            rows = query.all()

        stats = []
        for row in rows:
            planned = planned_occurrence_count(row.periodicity, year_start, as_of, row.month, row.anchor_date)
            stats.append({
                'actionId': str(row.id),
                'machineId': str(row.machine_id),
                'totalCompleted': row.total_completed,
                'totalSkipped': row.total_skipped,
                'totalRecords': row.total_records,
                'plannedOccurrences': planned,
                'lastCompleted': row.last_completed.isoformat() if row.last_completed else None,
                'avgActualTime': round(float(row.avg_actual_time)) if row.avg_actual_time is not None else None,
                'completionRate': round(row.total_completed * 100 / planned) if planned else 0,
            })
        return stats

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    def _clean_fields(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Validate writable execution fields and derive completed_date"""
        unknown = set(fields) - set(EXECUTION_FIELDS)
        if unknown:
            raise ValidationException(f"Unknown execution fields: {', '.join(sorted(unknown))}")

        values = {}
        if 'status' in fields:
            status = ExecutionStatus.parse(fields['status'])
            values['status'] = status.value
            values['completed_date'] = datetime.utcnow() if status is ExecutionStatus.COMPLETED else None
        if 'actual_time' in fields:
            values['actual_time'] = parse_non_negative_int(fields['actual_time'], 'actualTime')
        if 'completed_by_id' in fields:
            value = fields['completed_by_id']
            values['completed_by_id'] = parse_id(value, 'completedById') if value not in (None, '') else None
        if 'notes' in fields:
            notes = fields['notes']
            if notes is not None and not isinstance(notes, str):
                raise ValidationException('notes must be a string')
            if notes and len(notes) > MAX_NOTES_LENGTH:
                raise ValidationException(f'notes must be at most {MAX_NOTES_LENGTH} characters')
            values['notes'] = notes or None
        return values

    def _key_exists(self, key: Dict[str, Any]) -> bool:
        return self.db.query(self.MaintenanceExecution.id).filter_by(**key).first() is not None

    def upsert_execution(
        self,
        action_id: int,
        machine_id: int,
        scheduled_date,
        status=ExecutionStatus.COMPLETED,
        actual_time: Optional[int] = None,
        completed_by_id: Optional[int] = None,
        notes: Optional[str] = None,
    ):
        """
        Create or overwrite the execution record for (action, machine, date).

        A concurrent insert that wins the race on the unique key turns this
        call into an update (last write wins).

        Returns:
            tuple: (record, created)

        Raises:
            ValidationException: On invalid fields or unknown references
            ConflictException: If the write still collides after retrying
            StorageTimeoutException: If storage does not answer in time
        """
        key = {
            'action_id': parse_id(action_id, 'actionId'),
            'machine_id': parse_id(machine_id, 'machineId'),
            'scheduled_date': validate_date_param(scheduled_date, 'scheduledDate'),
        }
        values = self._clean_fields({
            'status': status,
            'actual_time': actual_time,
            'completed_by_id': completed_by_id,
            'notes': notes,
        })
        Execution = self.MaintenanceExecution

        for attempt in range(1, self.MAX_WRITE_ATTEMPTS + 1):
            with storage_guard('upsert execution', self.db):
                try:
                    record = self.db.query(Execution).filter_by(**key).with_for_update().one_or_none()
                    created = record is None
                    if created:
                        record = Execution(**key)
                        self.db.add(record)
                    for field, value in values.items():
                        setattr(record, field, value)
                    self.db.commit()
                except IntegrityError as e:
                    self.db.rollback()
                    # Only a lost insert race is retryable; anything else is a bad reference
                    if not created or not self._key_exists(key):
                        raise ValidationException(
                            'Execution refers to an unknown action, machine or operator',
                            details={'actionId': str(key['action_id']), 'machineId': str(key['machine_id'])}
                        ) from e
                    logger.warning(
                        f"Concurrent write on execution {key['action_id']}/{key['machine_id']}/"
                        f"{key['scheduled_date']} (attempt {attempt}), retrying as update"
                    )
                    continue

            logger.info(
                f"{'Created' if created else 'Updated'} execution {record.id}: "
                f"action {record.action_id} machine {record.machine_id} on {record.scheduled_date} {record.status}"
            )
            return record, created

        raise ConflictException(
            'Execution was modified concurrently, please retry',
            details={'actionId': str(key['action_id']), 'machineId': str(key['machine_id']),
                     'scheduledDate': key['scheduled_date'].isoformat()}
        )

    def update_execution(self, execution_id: int, fields: Dict[str, Any]):
        """
        Apply a partial update to an execution record.

        Raises:
            ResourceNotFoundException: If the record does not exist
            ValidationException: On invalid fields or an unknown operator
        """
        execution_id = parse_id(execution_id, 'id')
        values = self._clean_fields(fields)
        Execution = self.MaintenanceExecution

        with storage_guard('update execution', self.db):
            record = self.db.query(Execution).filter_by(id=execution_id).with_for_update().one_or_none()
            if record is None:
                raise ResourceNotFoundException(f'Execution {execution_id} not found')
            for field, value in values.items():
                setattr(record, field, value)
            try:
                self.db.commit()
            except IntegrityError as e:
                self.db.rollback()
                raise ValidationException(
                    'Execution refers to an unknown operator',
                    details={'completedById': str(values.get('completed_by_id'))}
                ) from e

        logger.info(f"Patched execution {execution_id}: {', '.join(sorted(values)) or 'no changes'}")
        return record

    def delete_execution(self, execution_id: int) -> bool:
        """
        Delete an execution record (undo). Deleting a missing id is not an error.

        Returns:
            bool: True if a record was removed
        """
        execution_id = parse_id(execution_id, 'id')
        with storage_guard('delete execution', self.db):
            deleted = self.db.query(self.MaintenanceExecution).filter_by(id=execution_id).delete()
            self.db.commit()

        if deleted:
            logger.info(f"Deleted execution {execution_id}")
        return bool(deleted)
