"""Monthly resource snapshot calculator.

Builds the roster for one calendar month from the baseline (or, for
contracts that predate baseline capture, the legacy engineer table) and the
approved resource events whose effective interval touches the month.

Amendments are often approved out of order, so events are not folded
chronologically. They are processed newest first (effective start, then
creation time, then event id, all descending) and the first event that
touches an engineer decides that engineer's shape for the month. Older
events for an engineer that has already been decided are skipped.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Union

from sow_ledger.engine.approval import approved_resource_events
from sow_ledger.engine.legacy import project_legacy_engineers
from sow_ledger.engine.matching import apply_line_item, match_line_item
from sow_ledger.logging_config import get_logger
from sow_ledger.models import (
    DEFAULT_RATING,
    MONTHLY,
    AddResource,
    BaselineEngineer,
    ModifyResource,
    MonthlyEngineerSnapshot,
    RemoveResource,
    ResourceEvent,
)
from sow_ledger.periods import add_years, format_year_month, overlaps, parse_year_month
from sow_ledger.stores.memory import Ledger

logger = get_logger("engine.snapshot")

# Upper bound given to events that carry neither an end nor a start date
OPEN_ENDED_YEARS = 10


def _from_baseline(base: BaselineEngineer) -> MonthlyEngineerSnapshot:
    return MonthlyEngineerSnapshot(
        engineer_id=base.id,
        engineer_level=base.engineer_level,
        start_date=base.start_date,
        end_date=base.end_date,
        billing_type=MONTHLY,
        rating=base.rating if base.rating is not None else DEFAULT_RATING,
        salary=base.unit_rate if base.unit_rate is not None else Decimal("0"),
    )


def effective_interval(event: ResourceEvent, today: date) -> tuple[date, date]:
    """The period an event can influence: effective start to its end date.

    Without an end date the event is treated as open for ten years from its
    new start date, or from ``today`` when it has neither.
    """
    if event.end_date is not None:
        end = event.end_date
    elif event.start_date is not None:
        end = add_years(event.start_date, OPEN_ENDED_YEARS)
    else:
        end = add_years(today, OPEN_ENDED_YEARS)
    return event.effective_start, end


def candidate_events(
    events: list[ResourceEvent],
    month_start: date,
    month_end: date,
    today: date,
) -> list[ResourceEvent]:
    """Events touching the month, newest first."""
    touching = [
        e for e in events
        if overlaps(*effective_interval(e, today), month_start, month_end)
    ]
    return sorted(touching, key=lambda e: e.sort_key, reverse=True)


def _roster_key(event: ResourceEvent) -> int:
    if event.engineer_id is not None:
        return event.engineer_id
    # Negative keys never collide with stored engineer ids
    return -event.id


def _sort_key(snapshot: MonthlyEngineerSnapshot) -> tuple[str, date]:
    return (snapshot.engineer_level or "", snapshot.start_date or date.min)


def calculate_monthly_snapshot(
    ledger: Ledger,
    contract_id: int,
    year_month: Union[str, date],
    today: Optional[date] = None,
) -> list[MonthlyEngineerSnapshot]:
    """Engineers in effect for a contract during ``year_month`` (``YYYY-MM``)."""
    month_start, month_end = parse_year_month(year_month)
    today = today or date.today()

    roster: dict[int, MonthlyEngineerSnapshot] = {}
    if ledger.baseline.has_engineers(contract_id):
        for base in ledger.baseline.engineers_for_contract(contract_id):
            if overlaps(base.start_date, base.end_date, month_start, month_end):
                roster[base.id] = _from_baseline(base)
    else:
        legacy = ledger.legacy.engineers_for_contract(contract_id)
        for snapshot in project_legacy_engineers(legacy, month_start, month_end, purpose="primary"):
            roster[snapshot.engineer_id] = snapshot

    events = candidate_events(
        approved_resource_events(ledger, contract_id), month_start, month_end, today,
    )

    decided: set[int] = set()
    for event in events:
        key = _roster_key(event)
        if key in decided:
            logger.debug(
                "superseded_resource_event",
                extra={"contract_id": contract_id, "event_id": event.id, "engineer_key": key},
            )
            continue

        if isinstance(event, AddResource):
            if key in roster:
                continue
            snapshot = MonthlyEngineerSnapshot(
                engineer_id=event.engineer_id,
                engineer_level=event.engineer_level,
                start_date=event.start_date if event.start_date is not None else month_start,
                end_date=event.end_date if event.end_date is not None else month_end,
                rating=event.rating if event.rating is not None else DEFAULT_RATING,
                salary=event.unit_rate if event.unit_rate is not None else Decimal("0"),
            )
            item = match_line_item(event, ledger.line_items.for_change_request(event.change_request_id))
            if item is not None:
                apply_line_item(snapshot, item)
            roster[key] = snapshot
            decided.add(key)

        elif isinstance(event, RemoveResource):
            # A removal decides the engineer even when nothing is there to remove
            if roster.pop(key, None) is None:
                logger.debug(
                    "orphaned_resource_event",
                    extra={"contract_id": contract_id, "event_id": event.id, "engineer_id": key},
                )
            decided.add(key)

        elif isinstance(event, ModifyResource):
            snapshot = roster.get(key)
            if snapshot is None:
                logger.debug(
                    "orphaned_resource_event",
                    extra={"contract_id": contract_id, "event_id": event.id, "engineer_id": key},
                )
                continue
            if event.level is not None:
                snapshot.engineer_level = event.level
            if event.start_date is not None:
                snapshot.start_date = event.start_date
            if event.end_date is not None:
                snapshot.end_date = event.end_date
            if event.rating is not None:
                snapshot.rating = event.rating
            if event.unit_rate is not None:
                snapshot.salary = event.unit_rate
            item = match_line_item(event, ledger.line_items.for_change_request(event.change_request_id))
            if item is not None:
                apply_line_item(snapshot, item)
            decided.add(key)

    result = sorted(
        (s for s in roster.values() if overlaps(s.start_date, s.end_date, month_start, month_end)),
        key=_sort_key,
    )

    if not result:
        legacy = ledger.legacy.engineers_for_contract(contract_id)
        result = sorted(
            project_legacy_engineers(legacy, month_start, month_end, purpose="fallback"),
            key=_sort_key,
        )

    logger.debug(
        "monthly_snapshot_calculated",
        extra={
            "contract_id": contract_id,
            "year_month": format_year_month(month_start),
            "candidate_events": len(events),
            "engineers": len(result),
        },
    )
    return result
