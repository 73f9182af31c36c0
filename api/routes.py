"""API routes for the Reconstruction Engine.

Read-only: every endpoint reconstructs state from the loaded ledger on each
request and never writes.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, Query

from sow_ledger.audit import engineer_dict
from sow_ledger.config import load_settings
from sow_ledger.engine import (
    billing_breakdown,
    calculate_current_resources,
    calculate_monthly_snapshot,
)
from sow_ledger.models import LedgerValidationError
from sow_ledger.periods import format_year_month, parse_year_month
from sow_ledger.stores import Ledger, load_ledger

from api.schemas import (
    BillingDelta,
    BillingResponse,
    BillingSummary,
    EngineerSnapshot,
    EngineerState,
    ResourcesResponse,
    SnapshotResponse,
)

router = APIRouter(prefix="/api/v1")


@lru_cache(maxsize=1)
def get_ledger() -> Ledger:
    """Ledger loaded once from $SOW_LEDGER_FILE; an empty ledger when unset."""
    settings = load_settings()
    if settings.ledger_file is None:
        return Ledger()
    return load_ledger(settings.ledger_file)


def _num(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@router.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


@router.get("/contracts/{contract_id}/resources", response_model=ResourcesResponse)
def resources(
    contract_id: int,
    as_of: str = Query(..., description="Date (YYYY-MM-DD)"),
    ledger: Ledger = Depends(get_ledger),
):
    """Engineers in effect on a given date."""
    try:
        states = calculate_current_resources(ledger, contract_id, as_of)
    except LedgerValidationError as e:
        return ResourcesResponse(
            success=False,
            contract_id=contract_id,
            error_type="validation_error",
            errors=e.errors,
        )

    return ResourcesResponse(
        success=True,
        contract_id=contract_id,
        as_of=as_of,
        engineers=[
            EngineerState(
                engineer_id=s.engineer_id,
                role=s.role,
                level=s.level,
                rating=_num(s.rating),
                unit_rate=_num(s.unit_rate),
                start_date=_iso(s.start_date),
                end_date=_iso(s.end_date),
            )
            for s in states
        ],
    )


@router.get("/contracts/{contract_id}/snapshot/{year_month}", response_model=SnapshotResponse)
def snapshot(
    contract_id: int,
    year_month: str,
    ledger: Ledger = Depends(get_ledger),
):
    """Engineers in effect during a calendar month."""
    try:
        engineers = calculate_monthly_snapshot(ledger, contract_id, year_month)
    except LedgerValidationError as e:
        return SnapshotResponse(
            success=False,
            contract_id=contract_id,
            error_type="validation_error",
            errors=e.errors,
        )

    return SnapshotResponse(
        success=True,
        contract_id=contract_id,
        year_month=format_year_month(parse_year_month(year_month)[0]),
        engineers=[EngineerSnapshot(**engineer_dict(e)) for e in engineers],
    )


@router.get("/contracts/{contract_id}/billing/{year_month}", response_model=BillingResponse)
def billing(
    contract_id: int,
    year_month: str,
    ledger: Ledger = Depends(get_ledger),
):
    """Baseline billing plus approved change-request deltas for a month."""
    try:
        breakdown = billing_breakdown(ledger, contract_id, year_month)
    except LedgerValidationError as e:
        return BillingResponse(
            success=False,
            contract_id=contract_id,
            error_type="validation_error",
            errors=e.errors,
        )

    return BillingResponse(
        success=True,
        contract_id=contract_id,
        billing=BillingSummary(
            billing_month=format_year_month(breakdown.billing_month),
            baseline_amount=float(breakdown.baseline_amount),
            deltas=[
                BillingDelta(
                    billing_event_id=d.id,
                    change_request_id=d.change_request_id,
                    type=d.type.value,
                    description=d.description,
                    delta_amount=float(d.delta_amount),
                )
                for d in breakdown.deltas
            ],
            total=float(breakdown.total),
        ),
    )
