"""In-memory stores for baseline, legacy and change-request records.

Baseline, legacy and line-item stores are fixed at construction. The event
log only grows: events are appended once, when their change request is
approved, and are never updated or removed. Every query returns a new list
so callers cannot reach the stored tuples.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from sow_ledger.models import (
    BaselineBilling,
    BaselineEngineer,
    BillingEvent,
    ChangeRequest,
    EngineerLineItem,
    LegacyEngineerRecord,
    ResourceEvent,
)
from sow_ledger.periods import is_active_at


class BaselineStore:
    """Read-only engineer roster and billing schedule fixed at signing."""

    def __init__(
        self,
        engineers: Iterable[BaselineEngineer] = (),
        billing: Iterable[BaselineBilling] = (),
    ) -> None:
        self._engineers = tuple(engineers)
        self._billing = tuple(billing)

    def engineers_for_contract(
        self, contract_id: int, active_at: Optional[date] = None,
    ) -> list[BaselineEngineer]:
        rows = [e for e in self._engineers if e.contract_id == contract_id]
        if active_at is not None:
            rows = [e for e in rows if is_active_at(e.start_date, e.end_date, active_at)]
        return sorted(rows, key=lambda e: (e.start_date, e.id))

    def has_engineers(self, contract_id: int) -> bool:
        return any(e.contract_id == contract_id for e in self._engineers)

    def billing_for_contract_and_month(self, contract_id: int, month: date) -> Optional[Decimal]:
        for row in self._billing:
            if row.contract_id == contract_id and row.billing_month == month:
                return row.amount
        return None


class ChangeRequestRegistry:
    """Read-only view of change requests and their approval status."""

    def __init__(self, change_requests: Iterable[ChangeRequest] = ()) -> None:
        self._by_id: dict[int, ChangeRequest] = {}
        for cr in change_requests:
            if cr.id in self._by_id:
                raise ValueError(f"Duplicate change request id {cr.id}")
            self._by_id[cr.id] = cr

    def get(self, change_request_id: int) -> Optional[ChangeRequest]:
        return self._by_id.get(change_request_id)

    def is_approved(self, change_request_id: int) -> bool:
        cr = self.get(change_request_id)
        return cr is not None and cr.is_approved

    def contract_of(self, change_request_id: int) -> Optional[int]:
        cr = self.get(change_request_id)
        return cr.contract_id if cr is not None else None

    def for_contract(self, contract_id: int) -> list[ChangeRequest]:
        rows = [cr for cr in self._by_id.values() if cr.contract_id == contract_id]
        return sorted(rows, key=lambda cr: cr.id)


class EventLog:
    """Append-only store of resource and billing events."""

    def __init__(
        self,
        resource_events: Iterable[ResourceEvent] = (),
        billing_events: Iterable[BillingEvent] = (),
    ) -> None:
        self._resource_events: list[ResourceEvent] = []
        self._billing_events: list[BillingEvent] = []
        self._resource_ids: set[int] = set()
        self._billing_ids: set[int] = set()
        for event in resource_events:
            self.append_resource_event(event)
        for event in billing_events:
            self.append_billing_event(event)

    def append_resource_event(self, event: ResourceEvent) -> ResourceEvent:
        if event.id in self._resource_ids:
            raise ValueError(f"Resource event {event.id} already recorded")
        self._resource_ids.add(event.id)
        self._resource_events.append(event)
        return event

    def append_billing_event(self, event: BillingEvent) -> BillingEvent:
        if event.id in self._billing_ids:
            raise ValueError(f"Billing event {event.id} already recorded")
        self._billing_ids.add(event.id)
        self._billing_events.append(event)
        return event

    def resource_events_for_change_request(self, change_request_id: int) -> list[ResourceEvent]:
        return [e for e in self._resource_events if e.change_request_id == change_request_id]

    def resource_events_for_contract(
        self, contract_id: int, registry: ChangeRequestRegistry,
    ) -> list[ResourceEvent]:
        """All resource events of a contract, regardless of approval status."""
        return [
            e for e in self._resource_events
            if registry.contract_of(e.change_request_id) == contract_id
        ]

    def billing_events_for_contract(
        self, contract_id: int, registry: ChangeRequestRegistry,
    ) -> list[BillingEvent]:
        return [
            e for e in self._billing_events
            if registry.contract_of(e.change_request_id) == contract_id
        ]

    def __len__(self) -> int:
        return len(self._resource_events) + len(self._billing_events)


class LegacyEngineerStore:
    def __init__(self, engineers: Iterable[LegacyEngineerRecord] = ()) -> None:
        self._engineers = tuple(engineers)

    def engineers_for_contract(self, contract_id: int) -> list[LegacyEngineerRecord]:
        rows = [e for e in self._engineers if e.contract_id == contract_id]
        return sorted(rows, key=lambda e: (e.start_date is None, e.start_date or date.min, e.id))


class LineItemStore:
    def __init__(self, line_items: Iterable[EngineerLineItem] = ()) -> None:
        self._items = tuple(line_items)

    def for_change_request(self, change_request_id: int) -> list[EngineerLineItem]:
        return [i for i in self._items if i.change_request_id == change_request_id]


@dataclass
class Ledger:
    """The collaborators a reconstruction reads from."""
    baseline: BaselineStore = field(default_factory=BaselineStore)
    change_requests: ChangeRequestRegistry = field(default_factory=ChangeRequestRegistry)
    events: EventLog = field(default_factory=EventLog)
    legacy: LegacyEngineerStore = field(default_factory=LegacyEngineerStore)
    line_items: LineItemStore = field(default_factory=LineItemStore)
