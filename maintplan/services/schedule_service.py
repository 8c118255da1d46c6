"""
Daily Schedule Service
Orchestrates roster resolution, due-task collection, allocation, execution
overlay and summary aggregation for one date
"""
import logging
from datetime import date
from typing import Dict, FrozenSet, List, Optional

from sqlalchemy.orm import Session

from maintplan.utils.db_helpers import storage_guard
from maintplan.utils.validators import validate_date_param
from .allocator import allocate
from .due_task_collector import DEFAULT_TASK_MINUTES, DueTaskCollector
from .execution_overlay import ExecutionOverlay
from .roster_resolver import RosterEntry, RosterResolver
from .schedule_types import DailySchedule, RosterMember, ScheduleConfig, ShiftDefinition, UnassignedOperator
from .summary import summarize

logger = logging.getLogger(__name__)


class DailyScheduleService:
    """
    Builds the DailySchedule for a date

    Catalog data (shifts, operators, overrides, grants, machines, actions)
    is read into plain snapshots before allocation; nothing here writes to
    the catalog.
    """

    def __init__(self, db_session: Session, models: dict, default_task_minutes: int = DEFAULT_TASK_MINUTES):
        """
        Initialize DailyScheduleService

        Args:
            db_session: SQLAlchemy database session
            models: Dictionary of model classes from the model registry
            default_task_minutes: Duration used for actions without time_needed
        """
        self.db = db_session
        self.Shift = models['Shift']
        self.OperatorAuthorization = models['OperatorAuthorization']
        self.roster_resolver = RosterResolver(db_session, models)
        self.collector = DueTaskCollector(db_session, models, default_task_minutes)
        self.overlay = ExecutionOverlay(db_session, models)

    def load_shifts(self) -> List[ShiftDefinition]:
        # Inactive shifts stay loadable: overrides may still point at them
        with storage_guard('load shifts', self.db):
            return [ShiftDefinition.from_model(row) for row in self.db.query(self.Shift).order_by(self.Shift.id).all()]

    def load_authorizations(self) -> Dict[int, FrozenSet[str]]:
        with storage_guard('load authorizations', self.db):
            grants: Dict[int, set] = {}
            for row in self.db.query(self.OperatorAuthorization).all():
                grants.setdefault(row.operator_id, set()).add(row.authorization_group)
            return {operator_id: frozenset(groups) for operator_id, groups in grants.items()}

    @staticmethod
    def roster_members(entries: List[RosterEntry], grants: Dict[int, FrozenSet[str]]) -> List[RosterMember]:
        return [
            RosterMember(
                operator_id=entry.operator_id,
                operator_name=entry.operator_name,
                shift_id=entry.effective_shift_id,
                department=entry.department,
                authorized_groups=grants.get(entry.operator_id, frozenset()),
            )
            for entry in entries
            if entry.effective_shift_id is not None
        ]

    def build(self, target_date, config: Optional[ScheduleConfig] = None) -> DailySchedule:
        """
        Produce the merged daily schedule.

        Args:
            target_date: date or YYYY-MM-DD string
            config: Allocation settings (defaults when None)

        Raises:
            ValidationException: Malformed date
            DataIntegrityException: Inconsistent roster or shift catalog
            StorageTimeoutException: Catalog could not be read in time
        """
        target_date: date = validate_date_param(target_date)
        config = config or ScheduleConfig()

        shifts = self.load_shifts()
        entries = self.roster_resolver.resolve_entries(target_date)
        due_tasks = self.collector.collect(target_date)
        roster = self.roster_members(entries, self.load_authorizations())

        allocation = allocate(due_tasks, roster, shifts, config)

        unassigned = [
            UnassignedOperator(
                operator_id=entry.operator_id,
                operator_name=entry.operator_name,
                department=entry.department,
                is_day_off=entry.is_day_off,
            )
            for entry in entries
            if entry.effective_shift_id is None
        ]

        schedule = self.overlay.merge(allocation, target_date, config, unassigned)
        schedule.summary = summarize(schedule)

        logger.info(
            f"Schedule for {target_date}: {schedule.summary.scheduled_tasks}/{schedule.summary.total_tasks} "
            f"tasks scheduled across {schedule.summary.shift_count} shifts"
        )
        return schedule
