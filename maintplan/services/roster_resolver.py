"""
Roster Resolver Service
Determines which shift each operator works on a given date

A per-date override wins over the operator's default shift; an override
without a shift is an explicit day off.
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from maintplan.error_handlers.exceptions import DataIntegrityException
from maintplan.utils.db_helpers import storage_guard
from maintplan.utils.validators import validate_date_param

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperatorRecord:
    """Snapshot of an active operator"""
    operator_id: int
    name: str
    department: str = ''
    default_shift_id: Optional[int] = None


@dataclass(frozen=True)
class ShiftOverrideRecord:
    """Snapshot of a per-date shift override (shift_id None = day off)"""
    operator_id: int
    shift_date: date
    shift_id: Optional[int] = None


@dataclass(frozen=True)
class RosterEntry:
    """Resolved shift of one operator on one date"""
    operator_id: int
    operator_name: str
    department: str
    default_shift_id: Optional[int]
    effective_shift_id: Optional[int]
    has_override: bool = False

    @property
    def is_day_off(self) -> bool:
        return self.has_override and self.effective_shift_id is None

    def to_dict(self, shift_names: Optional[Dict[int, str]] = None) -> dict:
        shift_names = shift_names or {}
        return {
            'operatorId': str(self.operator_id),
            'operatorName': self.operator_name,
            'department': self.department,
            'defaultShiftId': str(self.default_shift_id) if self.default_shift_id is not None else None,
            'effectiveShiftId': str(self.effective_shift_id) if self.effective_shift_id is not None else None,
            'effectiveShiftName': shift_names.get(self.effective_shift_id),
            'hasOverride': self.has_override,
            'isDayOff': self.is_day_off,
        }


def resolve_roster_entries(
    operators: Iterable[OperatorRecord],
    overrides: Iterable[ShiftOverrideRecord],
    target_date: date,
) -> List[RosterEntry]:
    """
    Resolve the effective shift of every operator on target_date.

    Args:
        operators: Active operators
        overrides: Shift overrides (rows for other dates are ignored)
        target_date: Date to resolve

    Returns:
        Roster entries ordered by operator name then id

    Raises:
        ValidationException: If target_date is malformed
        DataIntegrityException: If an operator has two overrides for the date
    """
    target_date = validate_date_param(target_date)

    override_by_operator: Dict[int, ShiftOverrideRecord] = {}
    for override in overrides:
        if override.shift_date != target_date:
            continue
        if override.operator_id in override_by_operator:
            raise DataIntegrityException(
                f"Operator {override.operator_id} has more than one shift override on {target_date.isoformat()}",
                details={'operatorId': str(override.operator_id)}
            )
        override_by_operator[override.operator_id] = override

    entries = []
    for operator in operators:
        override = override_by_operator.get(operator.operator_id)
        entries.append(RosterEntry(
            operator_id=operator.operator_id,
            operator_name=operator.name,
            department=operator.department or '',
            default_shift_id=operator.default_shift_id,
            effective_shift_id=override.shift_id if override else operator.default_shift_id,
            has_override=override is not None,
        ))

    entries.sort(key=lambda e: (e.operator_name, e.operator_id))
    return entries


def resolve_roster(
    operators: Iterable[OperatorRecord],
    overrides: Iterable[ShiftOverrideRecord],
    target_date: date,
) -> Dict[int, Optional[int]]:
    """Mapping of operator id to effective shift id (None = not working)"""
    return {
        entry.operator_id: entry.effective_shift_id
        for entry in resolve_roster_entries(operators, overrides, target_date)
    }


class RosterResolver:
    """
    Loads operators and overrides and resolves the roster for a date

    Read-only: never writes operator or override records.
    """

    def __init__(self, db_session: Session, models: dict):
        """
        Initialize RosterResolver

        Args:
            db_session: SQLAlchemy database session
            models: Dictionary of model classes from the model registry
        """
        self.db = db_session
        self.Operator = models['Operator']
        self.OperatorShiftOverride = models['OperatorShiftOverride']

    def load_operators(self) -> List[OperatorRecord]:
        with storage_guard('load operators', self.db):
            rows = self.db.query(self.Operator).filter_by(is_active=True).all()
            return [
                OperatorRecord(
                    operator_id=row.id,
                    name=row.name,
                    department=row.department or '',
                    default_shift_id=row.default_shift_id,
                )
                for row in rows
            ]

    def load_overrides(self, target_date: date) -> List[ShiftOverrideRecord]:
        with storage_guard('load shift overrides', self.db):
            rows = self.db.query(self.OperatorShiftOverride).filter_by(shift_date=target_date).all()
            return [
                ShiftOverrideRecord(operator_id=row.operator_id, shift_date=row.shift_date, shift_id=row.shift_id)
                for row in rows
            ]

    def resolve_entries(self, target_date) -> List[RosterEntry]:
        target_date = validate_date_param(target_date)
        entries = resolve_roster_entries(self.load_operators(), self.load_overrides(target_date), target_date)
        logger.debug(f"Resolved roster for {target_date}: {len(entries)} active operators")
        return entries

    def resolve_roster(self, target_date) -> Dict[int, Optional[int]]:
        return {entry.operator_id: entry.effective_shift_id for entry in self.resolve_entries(target_date)}
