"""Monthly reports combining the resource snapshot with billing."""

from __future__ import annotations

from datetime import date
from typing import Optional, Union

from sow_ledger.engine.billing import billing_breakdown
from sow_ledger.engine.snapshot import calculate_monthly_snapshot
from sow_ledger.models import MonthlyReport
from sow_ledger.periods import format_year_month, iter_months, parse_year_month
from sow_ledger.stores.memory import Ledger


def build_monthly_report(
    ledger: Ledger,
    contract_id: int,
    year_month: Union[str, date],
    today: Optional[date] = None,
) -> MonthlyReport:
    month_start, _ = parse_year_month(year_month)
    return MonthlyReport(
        contract_id=contract_id,
        year_month=format_year_month(month_start),
        engineers=calculate_monthly_snapshot(ledger, contract_id, month_start, today=today),
        billing=billing_breakdown(ledger, contract_id, month_start),
    )


def build_monthly_reports(
    ledger: Ledger,
    contract_id: int,
    start: Union[str, date],
    end: Union[str, date],
    today: Optional[date] = None,
) -> list[MonthlyReport]:
    """One report per month from ``start`` to ``end`` inclusive."""
    return [
        build_monthly_report(ledger, contract_id, month, today=today)
        for month in iter_months(start, end)
    ]
