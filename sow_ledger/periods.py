"""Date and calendar-month helpers shared by the stores and the engine."""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime
from typing import Iterator, Optional, Union

from sow_ledger.models import LedgerValidationError

_YEAR_MONTH_RE = re.compile(r'^(\d{4})-(\d{2})$')


def parse_date(value: Union[str, date], field_name: str = "date") -> date:
    """Parse an ISO ``YYYY-MM-DD`` string; dates pass through unchanged."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            pass
    raise LedgerValidationError([f"{field_name}: {value!r} is not a valid YYYY-MM-DD date"])


def parse_year_month(value: Union[str, date]) -> tuple[date, date]:
    """Return ``(month_start, month_end)`` for ``YYYY-MM`` or any date in the month."""
    if isinstance(value, date):
        return month_start(value), month_end(value)
    if isinstance(value, str):
        match = _YEAR_MONTH_RE.match(value.strip())
        if match:
            year, month = int(match.group(1)), int(match.group(2))
            if 1 <= month <= 12 and year >= 1:
                start = date(year, month, 1)
                return start, month_end(start)
    raise LedgerValidationError([f"year_month: {value!r} is not a valid YYYY-MM month"])


def format_year_month(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def month_start(day: date) -> date:
    return day.replace(day=1)


def month_end(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def add_years(day: date, years: int) -> date:
    """Shift by whole years; 29 February falls back to 28 February.

    Results past the last representable year are clamped to ``date.max``.
    """
    if day.year + years > date.max.year:
        return date.max
    try:
        return day.replace(year=day.year + years)
    except ValueError:
        return day.replace(year=day.year + years, day=28)


def iter_months(start: Union[str, date], end: Union[str, date]) -> Iterator[date]:
    """Yield the first day of every month from ``start`` to ``end`` inclusive."""
    first, _ = parse_year_month(start)
    last, _ = parse_year_month(end)
    if first > last:
        raise LedgerValidationError([
            f"month range: {format_year_month(first)} is after {format_year_month(last)}"
        ])
    current = first
    while True:
        yield current
        if current == last:
            return
        current = date(current.year + current.month // 12, current.month % 12 + 1, 1)


def overlaps(
    start: Optional[date],
    end: Optional[date],
    window_start: date,
    window_end: date,
) -> bool:
    """True when ``[start, end]`` intersects the window; a null end is open-ended."""
    if start is None:
        return False
    if start > window_end:
        return False
    return end is None or end >= window_start


def is_active_at(start: Optional[date], end: Optional[date], day: date) -> bool:
    return overlaps(start, end, day, day)
