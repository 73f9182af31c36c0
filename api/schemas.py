"""Pydantic response models for the Reconstruction API."""

from __future__ import annotations

from pydantic import BaseModel


class EngineerState(BaseModel):
    engineer_id: int | None = None
    role: str | None = None
    level: str | None = None
    rating: float | None = None
    unit_rate: float | None = None
    start_date: str | None = None
    end_date: str | None = None


class EngineerSnapshot(BaseModel):
    engineer_id: int | None = None
    engineer_level: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    billing_type: str
    rating: float
    salary: float
    hourly_rate: float | None = None
    hours: float | None = None
    subtotal: float | None = None


class BillingDelta(BaseModel):
    billing_event_id: int
    change_request_id: int
    type: str
    description: str
    delta_amount: float


class BillingSummary(BaseModel):
    billing_month: str
    baseline_amount: float
    deltas: list[BillingDelta]
    total: float


class ResourcesResponse(BaseModel):
    success: bool
    contract_id: int
    as_of: str | None = None
    engineers: list[EngineerState] | None = None
    error_type: str | None = None
    errors: list[str] | None = None


class SnapshotResponse(BaseModel):
    success: bool
    contract_id: int
    year_month: str | None = None
    engineers: list[EngineerSnapshot] | None = None
    error_type: str | None = None
    errors: list[str] | None = None


class BillingResponse(BaseModel):
    success: bool
    contract_id: int
    billing: BillingSummary | None = None
    error_type: str | None = None
    errors: list[str] | None = None
