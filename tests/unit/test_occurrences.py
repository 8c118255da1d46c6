"""
Unit tests for maintenance recurrence rules.
"""
from datetime import date

import pytest

from maintplan.error_handlers.exceptions import DataIntegrityException
from maintplan.services.occurrences import (
    generate_occurrences,
    is_due_on,
    month_number,
    planned_occurrence_count,
)
from maintplan.services.schedule_types import Periodicity


class TestIsDueOn:
    def test_weekly_defaults_to_first_of_january_anchor(self):
        # 2025-01-01 is a Wednesday
        assert is_due_on('WEEKLY', date(2025, 1, 1))
        assert is_due_on('WEEKLY', date(2025, 1, 8))
        assert not is_due_on('WEEKLY', date(2025, 1, 9))

    def test_weekly_uses_action_anchor(self):
        anchor = date(2025, 3, 3)
        assert not is_due_on(Periodicity.WEEKLY, date(2025, 2, 24), anchor_date=anchor)
        assert is_due_on(Periodicity.WEEKLY, date(2025, 3, 3), anchor_date=anchor)
        assert is_due_on(Periodicity.WEEKLY, date(2025, 3, 17), anchor_date=anchor)
        assert not is_due_on(Periodicity.WEEKLY, date(2025, 3, 18), anchor_date=anchor)

    def test_monthly_on_first_day(self):
        assert is_due_on('MONTHLY', date(2025, 6, 1))
        assert not is_due_on('MONTHLY', date(2025, 6, 2))

    def test_quarterly_on_quarter_starts(self):
        assert is_due_on('QUARTERLY', date(2025, 4, 1))
        assert is_due_on('QUARTERLY', date(2025, 10, 1))
        assert not is_due_on('QUARTERLY', date(2025, 5, 1))

    def test_yearly_uses_month_name(self):
        assert is_due_on('YEARLY', date(2025, 3, 1), month='March')
        assert not is_due_on('YEARLY', date(2025, 1, 1), month='MARCH')
        assert is_due_on('YEARLY', date(2025, 1, 1))

    def test_before_each_use_is_never_calendar_due(self):
        assert not is_due_on('BEFORE EACH USE', date(2025, 6, 1))

    def test_unknown_periodicity_is_a_data_error(self):
        with pytest.raises(DataIntegrityException):
            is_due_on('FORTNIGHTLY', date(2025, 6, 1))


class TestGeneration:
    def test_monthly_occurrences_in_range(self):
        dates = generate_occurrences('MONTHLY', date(2025, 1, 15), date(2025, 4, 15))
        assert dates == [date(2025, 2, 1), date(2025, 3, 1), date(2025, 4, 1)]

    def test_planned_count_for_before_each_use_counts_days(self):
        assert planned_occurrence_count('BEFORE_EACH_USE', date(2025, 1, 1), date(2025, 1, 10)) == 10

    def test_planned_count_for_empty_range(self):
        assert planned_occurrence_count('MONTHLY', date(2025, 2, 1), date(2025, 1, 1)) == 0

    def test_month_number_falls_back_to_january(self):
        assert month_number('december') == 12
        assert month_number('7') == 7
        assert month_number('Smarch') == 1
        assert month_number(None) == 1
