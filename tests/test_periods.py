"""Tests for date and month helpers."""

import pytest
from datetime import date, datetime

from sow_ledger.models import LedgerValidationError
from sow_ledger.periods import (
    add_years,
    format_year_month,
    is_active_at,
    iter_months,
    month_end,
    overlaps,
    parse_date,
    parse_year_month,
)


class TestParsing:
    def test_parse_date(self):
        assert parse_date("2024-03-15") == date(2024, 3, 15)
        assert parse_date(date(2024, 3, 15)) == date(2024, 3, 15)
        assert parse_date(datetime(2024, 3, 15, 10, 30)) == date(2024, 3, 15)

    @pytest.mark.parametrize("value", ["2024-02-30", "15/03/2024", "", None, 20240315])
    def test_parse_date_invalid(self, value):
        with pytest.raises(LedgerValidationError) as exc_info:
            parse_date(value, "as_of")
        assert exc_info.value.errors[0].startswith("as_of:")

    def test_parse_year_month(self):
        assert parse_year_month("2024-02") == (date(2024, 2, 1), date(2024, 2, 29))
        assert parse_year_month("2023-12") == (date(2023, 12, 1), date(2023, 12, 31))
        assert parse_year_month(date(2024, 4, 17)) == (date(2024, 4, 1), date(2024, 4, 30))

    @pytest.mark.parametrize("value", ["2024-00", "2024-13", "24-03", "2024-3", "2024-03-01"])
    def test_parse_year_month_invalid(self, value):
        with pytest.raises(LedgerValidationError):
            parse_year_month(value)

    def test_format_year_month(self):
        assert format_year_month(date(2024, 3, 9)) == "2024-03"


class TestCalendar:
    def test_month_end_leap_year(self):
        assert month_end(date(2024, 2, 10)) == date(2024, 2, 29)
        assert month_end(date(2023, 2, 10)) == date(2023, 2, 28)

    def test_add_years_leap_day(self):
        assert add_years(date(2024, 2, 29), 10) == date(2034, 2, 28)
        assert add_years(date(2024, 3, 1), 10) == date(2034, 3, 1)

    def test_add_years_clamped_to_last_date(self):
        assert add_years(date(9995, 1, 1), 10) == date.max
        assert add_years(date(9989, 12, 31), 10) == date(9999, 12, 31)

    def test_iter_months_at_calendar_end(self):
        assert list(iter_months("9999-11", "9999-12")) == [date(9999, 11, 1), date(9999, 12, 1)]

    def test_iter_months_across_year(self):
        assert list(iter_months("2023-11", "2024-02")) == [
            date(2023, 11, 1),
            date(2023, 12, 1),
            date(2024, 1, 1),
            date(2024, 2, 1),
        ]

    def test_iter_months_single(self):
        assert list(iter_months("2024-05", "2024-05")) == [date(2024, 5, 1)]

    def test_iter_months_reversed_raises(self):
        with pytest.raises(LedgerValidationError, match="month range"):
            list(iter_months("2024-05", "2024-04"))


class TestOverlap:
    WINDOW = (date(2024, 3, 1), date(2024, 3, 31))

    def test_open_ended(self):
        assert overlaps(date(2024, 1, 1), None, *self.WINDOW)

    def test_touching_edges(self):
        assert overlaps(date(2024, 3, 31), date(2024, 5, 1), *self.WINDOW)
        assert overlaps(date(2024, 1, 1), date(2024, 3, 1), *self.WINDOW)

    def test_outside(self):
        assert not overlaps(date(2024, 4, 1), None, *self.WINDOW)
        assert not overlaps(date(2024, 1, 1), date(2024, 2, 29), *self.WINDOW)

    def test_missing_start_never_overlaps(self):
        assert not overlaps(None, None, *self.WINDOW)

    def test_is_active_at(self):
        assert is_active_at(date(2024, 1, 1), date(2024, 1, 31), date(2024, 1, 31))
        assert not is_active_at(date(2024, 1, 1), date(2024, 1, 31), date(2024, 2, 1))
