"""Heuristic matching of resource events to change-request line items.

Resource events do not carry a reference to the engineer line item of the
change request that produced them, so billing fields (billing type, hourly
rate, hours, subtotal) are recovered by best-effort matching. Order of
preference:

1. a line item of the same change request with the same engineer level
   whose start date is within ``START_DATE_TOLERANCE`` of the event's start
   (or where neither side has a start date);
2. otherwise the first line item of the change request;
3. otherwise nothing, and the caller keeps its defaults.

The match is lossy. Replace this module with a strict lookup
once events reference their line item directly.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Optional, Sequence

from sow_ledger.logging_config import get_logger
from sow_ledger.models import (
    HOURLY,
    MONTHLY,
    EngineerLineItem,
    MonthlyEngineerSnapshot,
    ResourceEvent,
)

logger = get_logger("engine.matching")

START_DATE_TOLERANCE = timedelta(days=1)


def match_line_item(
    event: ResourceEvent,
    line_items: Sequence[EngineerLineItem],
) -> Optional[EngineerLineItem]:
    """Pick the line item that most plausibly produced ``event``."""
    if not line_items:
        return None

    level = event.engineer_level
    start = event.start_date if event.start_date is not None else event.effective_start

    if level is not None:
        for item in line_items:
            if item.engineer_level != level:
                continue
            if start is not None and item.start_date is not None:
                if abs(start - item.start_date) <= START_DATE_TOLERANCE:
                    return item
            elif start is None and item.start_date is None:
                return item

    logger.debug(
        "line_item_fallback",
        extra={
            "event_id": event.id,
            "change_request_id": event.change_request_id,
            "engineer_level": level,
            "line_item_id": line_items[0].id,
        },
    )
    return line_items[0]


def apply_line_item(snapshot: MonthlyEngineerSnapshot, item: EngineerLineItem) -> None:
    """Copy billing fields from a matched line item onto a snapshot.

    For hourly engineers the monthly charge is the line item's subtotal, so
    it replaces ``salary``.
    """
    snapshot.billing_type = item.billing_type if item.billing_type is not None else MONTHLY
    snapshot.hourly_rate = item.hourly_rate
    snapshot.hours = item.hours
    snapshot.subtotal = item.subtotal
    if (item.billing_type or "").lower() == HOURLY.lower() and item.subtotal is not None:
        snapshot.salary = item.subtotal
