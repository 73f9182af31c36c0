"""Tests for audit output and monthly report assembly."""

import json
from decimal import Decimal
from datetime import date, datetime

from sow_ledger.audit import generate_audit, generate_audit_dict
from sow_ledger.engine.reports import build_monthly_report, build_monthly_reports
from sow_ledger.models import (
    BaselineBilling,
    BaselineEngineer,
    BillingEvent,
    BillingEventType,
    ChangeRequest,
    ModifyResource,
)
from sow_ledger.stores import BaselineStore, ChangeRequestRegistry, EventLog, Ledger

CONTRACT = 10
TODAY = date(2024, 6, 1)


def _make_ledger() -> Ledger:
    return Ledger(
        baseline=BaselineStore(
            [
                BaselineEngineer(
                    id=1, contract_id=CONTRACT, role="Developer", level="Senior",
                    rating=Decimal("100"), unit_rate=Decimal("8000"), start_date=date(2024, 1, 1),
                ),
            ],
            [
                BaselineBilling(CONTRACT, date(2024, 2, 1), Decimal("8000")),
                BaselineBilling(CONTRACT, date(2024, 3, 1), Decimal("8000")),
            ],
        ),
        change_requests=ChangeRequestRegistry([
            ChangeRequest(id=5, contract_id=CONTRACT, status="Approved"),
        ]),
        events=EventLog(
            [
                ModifyResource(
                    id=1, change_request_id=5, effective_start=date(2024, 3, 1),
                    created_at=datetime(2024, 2, 20), engineer_id=1, rating=Decimal("90"),
                ),
            ],
            [
                BillingEvent(
                    id=9, change_request_id=5, billing_month=date(2024, 3, 1),
                    delta_amount=Decimal("-800"), description="Rating 100 -> 90",
                    type=BillingEventType.RESOURCE_CHANGE,
                ),
            ],
        ),
    )


class TestMonthlyReports:
    def test_single_month(self):
        report = build_monthly_report(_make_ledger(), CONTRACT, "2024-03", today=TODAY)
        assert report.year_month == "2024-03"
        assert report.headcount == 1
        assert report.engineers[0].rating == Decimal("90")
        assert report.billing_total == Decimal("7200")

    def test_range(self):
        reports = build_monthly_reports(_make_ledger(), CONTRACT, "2024-01", "2024-03", today=TODAY)
        assert [r.year_month for r in reports] == ["2024-01", "2024-02", "2024-03"]
        assert [r.billing_total for r in reports] == [Decimal("0"), Decimal("8000"), Decimal("7200")]


class TestAudit:
    def test_audit_dict(self):
        reports = build_monthly_reports(_make_ledger(), CONTRACT, "2024-02", "2024-03", today=TODAY)
        audit = generate_audit_dict(reports)

        assert audit["contract_ids"] == [CONTRACT]
        assert [m["year_month"] for m in audit["months"]] == ["2024-02", "2024-03"]

        march = audit["months"][1]
        assert march["headcount"] == 1
        assert march["total_salary"] == 8000.0
        assert march["engineers"][0] == {
            "engineer_id": 1,
            "engineer_level": "Senior",
            "start_date": "2024-01-01",
            "end_date": None,
            "billing_type": "Monthly",
            "rating": 90.0,
            "salary": 8000.0,
            "hourly_rate": None,
            "hours": None,
            "subtotal": None,
        }
        assert march["billing"] == {
            "baseline_amount": 8000.0,
            "deltas": [{
                "billing_event_id": 9,
                "change_request_id": 5,
                "type": "RESOURCE_CHANGE",
                "description": "Rating 100 -> 90",
                "delta_amount": -800.0,
            }],
            "total": 7200.0,
        }

        summary = audit["summary"]
        assert summary["total_months"] == 2
        assert summary["period_start"] == "2024-02"
        assert summary["period_end"] == "2024-03"
        assert summary["peak_headcount"] == 1
        assert summary["total_billing"] == 15200.0
        assert summary["change_requests"] == [5]

    def test_empty_audit(self):
        summary = generate_audit_dict([])["summary"]
        assert summary["total_months"] == 0
        assert summary["period_start"] is None
        assert summary["total_billing"] == 0.0

    def test_writes_json_file(self, tmp_path):
        reports = build_monthly_reports(_make_ledger(), CONTRACT, "2024-03", "2024-03", today=TODAY)
        path = generate_audit(reports, tmp_path / "audit.json")
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["months"][0]["billing"]["total"] == 7200.0
