"""Tests for the approval filter."""

import pytest
from decimal import Decimal
from datetime import date, datetime

from sow_ledger.engine.approval import approved_billing_events, approved_resource_events
from sow_ledger.models import BillingEvent, ChangeRequest, ModifyResource
from sow_ledger.stores import ChangeRequestRegistry, EventLog, Ledger

CONTRACT = 10


def _make_modify(id, cr, effective_start=date(2024, 3, 1), created_at=datetime(2024, 2, 1)):
    return ModifyResource(
        id=id,
        change_request_id=cr,
        effective_start=effective_start,
        created_at=created_at,
        engineer_id=1,
    )


def _make_ledger(statuses: dict[int, str], resource_events=(), billing_events=()) -> Ledger:
    return Ledger(
        change_requests=ChangeRequestRegistry(
            ChangeRequest(id=cr_id, contract_id=CONTRACT, status=status)
            for cr_id, status in statuses.items()
        ),
        events=EventLog(resource_events, billing_events),
    )


class TestChangeRequestStatus:
    @pytest.mark.parametrize("status", ["Approved", "APPROVED", "active", " Active "])
    def test_approved_statuses(self, status):
        assert ChangeRequest(id=1, contract_id=CONTRACT, status=status).is_approved

    @pytest.mark.parametrize("status", ["Draft", "Request for Change", "Under Review", "Terminated", ""])
    def test_other_statuses(self, status):
        assert not ChangeRequest(id=1, contract_id=CONTRACT, status=status).is_approved

    def test_unknown_change_request_not_approved(self):
        registry = ChangeRequestRegistry([ChangeRequest(id=1, contract_id=CONTRACT, status="Approved")])
        assert registry.is_approved(1)
        assert not registry.is_approved(2)


class TestApprovedResourceEvents:
    def test_filters_and_orders(self):
        events = [
            _make_modify(1, cr=1, effective_start=date(2024, 4, 1)),
            _make_modify(2, cr=2),
            _make_modify(3, cr=1, effective_start=date(2024, 3, 1), created_at=datetime(2024, 2, 5)),
            _make_modify(4, cr=1, effective_start=date(2024, 3, 1), created_at=datetime(2024, 2, 1)),
        ]
        ledger = _make_ledger({1: "Approved", 2: "Draft"}, resource_events=events)
        assert [e.id for e in approved_resource_events(ledger, CONTRACT)] == [4, 3, 1]

    def test_up_to_excludes_future(self):
        events = [
            _make_modify(1, cr=1, effective_start=date(2024, 3, 1)),
            _make_modify(2, cr=1, effective_start=date(2024, 3, 2)),
        ]
        ledger = _make_ledger({1: "Approved"}, resource_events=events)
        assert [e.id for e in approved_resource_events(ledger, CONTRACT, up_to=date(2024, 3, 1))] == [1]

    def test_other_contract_excluded(self):
        ledger = Ledger(
            change_requests=ChangeRequestRegistry([
                ChangeRequest(id=1, contract_id=CONTRACT, status="Approved"),
                ChangeRequest(id=2, contract_id=99, status="Approved"),
            ]),
            events=EventLog([_make_modify(1, cr=1), _make_modify(2, cr=2)]),
        )
        assert [e.id for e in approved_resource_events(ledger, CONTRACT)] == [1]
        assert approved_resource_events(ledger, 12345) == []


class TestApprovedBillingEvents:
    def test_filters_by_status_and_month(self):
        events = [
            BillingEvent(id=1, change_request_id=1, billing_month=date(2024, 3, 1), delta_amount=Decimal("1")),
            BillingEvent(id=2, change_request_id=2, billing_month=date(2024, 3, 1), delta_amount=Decimal("2")),
            BillingEvent(id=3, change_request_id=1, billing_month=date(2024, 4, 1), delta_amount=Decimal("3")),
        ]
        ledger = _make_ledger({1: "Active", 2: "Request for Change"}, billing_events=events)
        assert [e.id for e in approved_billing_events(ledger, CONTRACT)] == [1, 3]
        assert [e.id for e in approved_billing_events(ledger, CONTRACT, date(2024, 4, 1))] == [3]
