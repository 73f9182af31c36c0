"""Tests for the HTTP API."""

from decimal import Decimal
from datetime import date, datetime

import pytest
from fastapi.testclient import TestClient

from api.main import app
from api.routes import get_ledger
from sow_ledger.models import (
    BaselineBilling,
    BaselineEngineer,
    BillingEvent,
    ChangeRequest,
    ModifyResource,
)
from sow_ledger.stores import BaselineStore, ChangeRequestRegistry, EventLog, Ledger

CONTRACT = 10


def _make_ledger() -> Ledger:
    return Ledger(
        baseline=BaselineStore(
            [
                BaselineEngineer(
                    id=1, contract_id=CONTRACT, role="Developer", level="Senior",
                    rating=Decimal("100"), unit_rate=Decimal("8000"), start_date=date(2024, 1, 1),
                ),
            ],
            [BaselineBilling(CONTRACT, date(2024, 3, 1), Decimal("8000"))],
        ),
        change_requests=ChangeRequestRegistry([
            ChangeRequest(id=1, contract_id=CONTRACT, status="Approved"),
        ]),
        events=EventLog(
            [
                ModifyResource(
                    id=1, change_request_id=1, effective_start=date(2024, 3, 1),
                    created_at=datetime(2024, 2, 20), engineer_id=1, rating=Decimal("90"),
                ),
            ],
            [
                BillingEvent(
                    id=4, change_request_id=1, billing_month=date(2024, 3, 1),
                    delta_amount=Decimal("-800"), description="Rating cut",
                ),
            ],
        ),
    )


@pytest.fixture
def client():
    app.dependency_overrides[get_ledger] = _make_ledger
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestEndpoints:
    def test_root_and_health(self, client):
        assert client.get("/").json()["health"] == "/api/v1/health"
        assert client.get("/api/v1/health").json() == {"status": "ok"}

    def test_resources(self, client):
        body = client.get(f"/api/v1/contracts/{CONTRACT}/resources", params={"as_of": "2024-03-15"}).json()
        assert body["success"] is True
        assert body["as_of"] == "2024-03-15"
        assert len(body["engineers"]) == 1
        assert body["engineers"][0]["engineer_id"] == 1
        assert body["engineers"][0]["rating"] == 90.0
        assert body["engineers"][0]["start_date"] == "2024-01-01"

    def test_snapshot(self, client):
        body = client.get(f"/api/v1/contracts/{CONTRACT}/snapshot/2024-02").json()
        assert body["success"] is True
        assert body["year_month"] == "2024-02"
        assert body["engineers"][0]["rating"] == 100.0
        assert body["engineers"][0]["billing_type"] == "Monthly"
        assert body["engineers"][0]["salary"] == 8000.0

    def test_billing(self, client):
        body = client.get(f"/api/v1/contracts/{CONTRACT}/billing/2024-03").json()
        assert body["success"] is True
        assert body["billing"] == {
            "billing_month": "2024-03",
            "baseline_amount": 8000.0,
            "deltas": [{
                "billing_event_id": 4,
                "change_request_id": 1,
                "type": "ADJUSTMENT",
                "description": "Rating cut",
                "delta_amount": -800.0,
            }],
            "total": 7200.0,
        }

    def test_unknown_contract_is_empty(self, client):
        body = client.get("/api/v1/contracts/999/snapshot/2024-03").json()
        assert body["success"] is True
        assert body["engineers"] == []


class TestValidationErrors:
    def test_bad_date(self, client):
        body = client.get(f"/api/v1/contracts/{CONTRACT}/resources", params={"as_of": "yesterday"}).json()
        assert body["success"] is False
        assert body["error_type"] == "validation_error"
        assert body["errors"] == ["as_of: 'yesterday' is not a valid YYYY-MM-DD date"]

    def test_bad_month(self, client):
        body = client.get(f"/api/v1/contracts/{CONTRACT}/billing/2024-13").json()
        assert body["success"] is False
        assert body["errors"][0].startswith("year_month:")


class TestLedgerFileErrors:
    def test_invalid_ledger_file_returns_envelope(self, tmp_path, monkeypatch):
        path = tmp_path / "ledger.json"
        path.write_text('{"baseline_engineers": [{"id": "x"}]}', encoding="utf-8")
        monkeypatch.setenv("SOW_LEDGER_FILE", str(path))
        get_ledger.cache_clear()
        try:
            response = TestClient(app).get(f"/api/v1/contracts/{CONTRACT}/snapshot/2024-03")
        finally:
            get_ledger.cache_clear()

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["contract_id"] == CONTRACT
        assert body["error_type"] == "validation_error"
        assert "baseline_engineers[0].id: 'x' is not an integer" in body["errors"]
