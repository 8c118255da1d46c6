"""
Due-Task Collector Service
Expands recurring maintenance actions into the tasks due on one date
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from maintplan.utils.db_helpers import storage_guard
from maintplan.utils.validators import validate_date_param
from .occurrences import is_due_on
from .schedule_types import DueTask, Periodicity, Priority

logger = logging.getLogger(__name__)

DEFAULT_TASK_MINUTES = 15


@dataclass(frozen=True)
class MachineRecord:
    """Snapshot of a machine's scheduling attributes"""
    machine_id: int
    final_code: str
    area: str = ''
    authorization_group: Optional[str] = None
    maintenance_needed: bool = True
    maintenance_on_hold: bool = False
    person_in_charge_id: Optional[int] = None

    @property
    def schedulable(self) -> bool:
        return self.maintenance_needed and not self.maintenance_on_hold


@dataclass(frozen=True)
class ActionRecord:
    """Snapshot of a recurring maintenance action"""
    action_id: int
    machine_id: int
    action: str
    periodicity: str
    priority: str = Priority.IDEAL.value
    time_needed: Optional[int] = None
    month: Optional[str] = None
    anchor_date: Optional[date] = None
    maintenance_in_charge: bool = False


def collect_due_tasks(
    actions: Iterable[ActionRecord],
    machines: Iterable[MachineRecord],
    target_date: date,
    default_minutes: int = DEFAULT_TASK_MINUTES,
) -> List[DueTask]:
    """
    Build the DueTasks for target_date.

    An action is due when its recurrence includes the date and its machine
    needs maintenance and is not on hold. Existing execution records do not
    filter anything out.

    Raises:
        ValidationException: If target_date is malformed
        DataIntegrityException: If an action carries an unknown periodicity or priority
    """
    target_date = validate_date_param(target_date)
    machine_map: Dict[int, MachineRecord] = {m.machine_id: m for m in machines}

    tasks = []
    for action in sorted(actions, key=lambda a: a.action_id):
        machine = machine_map.get(action.machine_id)
        if machine is None or not machine.schedulable:
            continue
        periodicity = Periodicity.parse(action.periodicity)
        if not is_due_on(periodicity, target_date, action.month, action.anchor_date):
            continue

        tasks.append(DueTask(
            action_id=action.action_id,
            machine_id=machine.machine_id,
            scheduled_date=target_date,
            action_text=action.action,
            periodicity=periodicity,
            priority=Priority.parse(action.priority),
            duration_minutes=action.time_needed if action.time_needed is not None else default_minutes,
            machine_code=machine.final_code,
            machine_area=machine.area or '',
            authorization_group=machine.authorization_group or None,
            maintenance_in_charge=bool(action.maintenance_in_charge),
            person_in_charge_id=machine.person_in_charge_id,
        ))
    return tasks


class DueTaskCollector:
    """
    Loads machines and actions and collects the tasks due on a date
    """

    def __init__(self, db_session: Session, models: dict, default_minutes: int = DEFAULT_TASK_MINUTES):
        self.db = db_session
        self.Machine = models['Machine']
        self.MaintenanceAction = models['MaintenanceAction']
        self.default_minutes = default_minutes

    def load_machines(self) -> List[MachineRecord]:
        with storage_guard('load machines', self.db):
            return [
                MachineRecord(
                    machine_id=row.id,
                    final_code=row.final_code,
                    area=row.area or '',
                    authorization_group=row.authorization_group,
                    maintenance_needed=bool(row.maintenance_needed),
                    maintenance_on_hold=bool(row.maintenance_on_hold),
                    person_in_charge_id=row.person_in_charge_id,
                )
                for row in self.db.query(self.Machine).all()
            ]

    def load_actions(self) -> List[ActionRecord]:
        with storage_guard('load maintenance actions', self.db):
            return [
                ActionRecord(
                    action_id=row.id,
                    machine_id=row.machine_id,
                    action=row.action,
                    periodicity=row.periodicity,
                    priority=row.priority,
                    time_needed=row.time_needed,
                    month=row.month,
                    anchor_date=row.anchor_date,
                    maintenance_in_charge=bool(row.maintenance_in_charge),
                )
                for row in self.db.query(self.MaintenanceAction).order_by(self.MaintenanceAction.id).all()
            ]

    def collect(self, target_date) -> List[DueTask]:
        target_date = validate_date_param(target_date)
        tasks = collect_due_tasks(self.load_actions(), self.load_machines(), target_date, self.default_minutes)
        logger.debug(f"Collected {len(tasks)} due tasks for {target_date}")
        return tasks
