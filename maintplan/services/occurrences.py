"""
Recurrence rules for maintenance actions

Decides on which calendar dates an action with a given periodicity is due.
"""
from datetime import date, timedelta
from typing import List, Optional, Union

from .schedule_types import Periodicity

MONTHS = {
    'JANUARY': 1, 'FEBRUARY': 2, 'MARCH': 3, 'APRIL': 4,
    'MAY': 5, 'JUNE': 6, 'JULY': 7, 'AUGUST': 8,
    'SEPTEMBER': 9, 'OCTOBER': 10, 'NOVEMBER': 11, 'DECEMBER': 12,
}

QUARTER_START_MONTHS = (1, 4, 7, 10)


def month_number(month: Union[str, int, None]) -> int:
    """Month name or number to 1-12; unknown values mean January"""
    if isinstance(month, int):
        return month if 1 <= month <= 12 else 1
    if not month:
        return 1
    name = str(month).strip().upper()
    if name.isdigit():
        return month_number(int(name))
    return MONTHS.get(name, 1)


def is_due_on(
    periodicity: Union[str, Periodicity],
    target_date: date,
    month: Union[str, int, None] = None,
    anchor_date: Optional[date] = None,
) -> bool:
    """
    Check whether an action recurs on target_date.

    WEEKLY actions repeat every 7 days from anchor_date (1 January of the
    target year when unset). MONTHLY, QUARTERLY and YEARLY actions fall on
    the first day of their month. BEFORE_EACH_USE actions are triggered by
    use, never by the calendar.
    """
    periodicity = Periodicity.parse(periodicity)

    if periodicity is Periodicity.WEEKLY:
        anchor = anchor_date or date(target_date.year, 1, 1)
        if target_date < anchor:
            return False
        return (target_date - anchor).days % 7 == 0

    if target_date.day != 1:
        return False

    if periodicity is Periodicity.MONTHLY:
        return True
    if periodicity is Periodicity.QUARTERLY:
        return target_date.month in QUARTER_START_MONTHS
    if periodicity is Periodicity.YEARLY:
        return target_date.month == month_number(month)
    return False


def generate_occurrences(
    periodicity: Union[str, Periodicity],
    range_start: date,
    range_end: date,
    month: Union[str, int, None] = None,
    anchor_date: Optional[date] = None,
) -> List[date]:
    """All dates in [range_start, range_end] on which the action is due"""
    occurrences = []
    current = range_start
    while current <= range_end:
        if is_due_on(periodicity, current, month, anchor_date):
            occurrences.append(current)
        current += timedelta(days=1)
    return occurrences


def planned_occurrence_count(
    periodicity: Union[str, Periodicity],
    range_start: date,
    range_end: date,
    month: Union[str, int, None] = None,
    anchor_date: Optional[date] = None,
) -> int:
    """
    Occurrences counted for completion statistics.

    BEFORE_EACH_USE actions count once per day in the range, since every
    working day is a potential use.
    """
    if range_end < range_start:
        return 0
    if Periodicity.parse(periodicity) is Periodicity.BEFORE_EACH_USE:
        return (range_end - range_start).days + 1
    return len(generate_occurrences(periodicity, range_start, range_end, month, anchor_date))
