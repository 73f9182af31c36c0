"""Approval filter.

Only events whose change request is APPROVED or ACTIVE take part in a
reconstruction. Drafts, requests under review, requests sent back for
changes and terminated requests are invisible here.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from sow_ledger.logging_config import get_logger
from sow_ledger.models import BillingEvent, ResourceEvent
from sow_ledger.stores.memory import Ledger

logger = get_logger("engine.approval")


def approved_resource_events(
    ledger: Ledger,
    contract_id: int,
    up_to: Optional[date] = None,
) -> list[ResourceEvent]:
    """Approved resource events of a contract, oldest first.

    Ordered by effective start, then creation time, then event id. When
    ``up_to`` is given, events effective after that day are left out.
    An unknown contract simply has no events.
    """
    events = ledger.events.resource_events_for_contract(contract_id, ledger.change_requests)
    approved = [e for e in events if ledger.change_requests.is_approved(e.change_request_id)]
    if up_to is not None:
        approved = [e for e in approved if e.effective_start <= up_to]

    logger.debug(
        "approved_resource_events",
        extra={
            "contract_id": contract_id,
            "up_to": up_to,
            "total_events": len(events),
            "approved_events": len(approved),
        },
    )
    return sorted(approved, key=lambda e: e.sort_key)


def approved_billing_events(
    ledger: Ledger,
    contract_id: int,
    month: Optional[date] = None,
) -> list[BillingEvent]:
    """Approved billing events of a contract, optionally for one billing month."""
    events = ledger.events.billing_events_for_contract(contract_id, ledger.change_requests)
    approved = [e for e in events if ledger.change_requests.is_approved(e.change_request_id)]
    if month is not None:
        approved = [e for e in approved if e.billing_month == month]
    return sorted(approved, key=lambda e: (e.billing_month, e.id))
