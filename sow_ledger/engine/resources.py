"""Point-in-time resource calculator.

Current roster = baseline engineers active on the day, with every approved
resource event effective on or before that day applied in chronological
order.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Union

from sow_ledger.engine.approval import approved_resource_events
from sow_ledger.logging_config import get_logger
from sow_ledger.models import (
    AddResource,
    BaselineEngineer,
    CurrentEngineerState,
    ModifyResource,
    RemoveResource,
    ResourceEvent,
)
from sow_ledger.periods import is_active_at, parse_date
from sow_ledger.stores.memory import Ledger

logger = get_logger("engine.resources")


def _from_baseline(base: BaselineEngineer) -> CurrentEngineerState:
    return CurrentEngineerState(
        engineer_id=base.id,
        role=base.role,
        level=base.level,
        rating=base.rating,
        unit_rate=base.unit_rate,
        start_date=base.start_date,
        end_date=base.end_date,
    )


def _matching(roster: list[CurrentEngineerState], engineer_id: int) -> list[CurrentEngineerState]:
    return [s for s in roster if s.engineer_id is not None and s.engineer_id == engineer_id]


def _apply(roster: list[CurrentEngineerState], event: ResourceEvent, contract_id: int) -> None:
    if isinstance(event, AddResource):
        # New engineers have no baseline identity
        roster.append(CurrentEngineerState(
            engineer_id=None,
            role=event.role,
            level=event.level,
            rating=event.rating,
            unit_rate=event.unit_rate,
            start_date=event.start_date,
            end_date=event.end_date,
        ))
        return

    targets = _matching(roster, event.engineer_id)
    if not targets:
        logger.debug(
            "orphaned_resource_event",
            extra={
                "contract_id": contract_id,
                "event_id": event.id,
                "action": event.action.value,
                "engineer_id": event.engineer_id,
            },
        )
        return

    if isinstance(event, RemoveResource):
        end_date = event.end_date
        if end_date is None:
            # A removal without an end date closes the engagement the day
            # before it takes effect; a null end date would re-open it.
            if event.effective_start > date.min:
                end_date = event.effective_start - timedelta(days=1)
            else:
                end_date = date.min
        for state in targets:
            state.end_date = end_date
    elif isinstance(event, ModifyResource):
        for state in targets:
            if event.rating is not None:
                state.rating = event.rating
            if event.unit_rate is not None:
                state.unit_rate = event.unit_rate
            if event.start_date is not None:
                state.start_date = event.start_date
            if event.end_date is not None:
                state.end_date = event.end_date


def calculate_current_resources(
    ledger: Ledger,
    contract_id: int,
    as_of: Union[str, date],
) -> list[CurrentEngineerState]:
    """Engineers in effect for a contract on ``as_of``."""
    as_of = parse_date(as_of, "as_of")

    baseline = ledger.baseline.engineers_for_contract(contract_id, active_at=as_of)
    events = approved_resource_events(ledger, contract_id, up_to=as_of)

    roster = [_from_baseline(base) for base in baseline]
    for event in events:
        if event.effective_start > as_of:
            continue
        _apply(roster, event, contract_id)

    result = [s for s in roster if is_active_at(s.start_date, s.end_date, as_of)]

    logger.debug(
        "current_resources_calculated",
        extra={
            "contract_id": contract_id,
            "as_of": as_of,
            "baseline_engineers": len(baseline),
            "events_applied": len(events),
            "engineers": len(result),
        },
    )
    return result
