"""Billing accumulator.

Current billing for a month = baseline amount fixed at signing (zero when
none was recorded) + every approved billing delta for that month.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Union

from sow_ledger.engine.approval import approved_billing_events
from sow_ledger.logging_config import get_logger
from sow_ledger.models import BillingBreakdown
from sow_ledger.periods import parse_year_month
from sow_ledger.stores.memory import Ledger

logger = get_logger("engine.billing")


def billing_breakdown(
    ledger: Ledger,
    contract_id: int,
    month: Union[str, date],
) -> BillingBreakdown:
    """Baseline amount and approved deltas for one billing month."""
    billing_month, _ = parse_year_month(month)
    baseline = ledger.baseline.billing_for_contract_and_month(contract_id, billing_month)
    deltas = approved_billing_events(ledger, contract_id, billing_month)

    breakdown = BillingBreakdown(
        contract_id=contract_id,
        billing_month=billing_month,
        baseline_amount=baseline if baseline is not None else Decimal("0"),
        deltas=tuple(deltas),
    )
    logger.debug(
        "billing_calculated",
        extra={
            "contract_id": contract_id,
            "billing_month": billing_month,
            "has_baseline": baseline is not None,
            "deltas": len(deltas),
            "total": breakdown.total,
        },
    )
    return breakdown


def calculate_current_billing(
    ledger: Ledger,
    contract_id: int,
    month: Union[str, date],
) -> Decimal:
    return billing_breakdown(ledger, contract_id, month).total
