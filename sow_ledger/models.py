"""Canonical data model for baseline and change-request reconstruction."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

MONTHLY = "Monthly"
HOURLY = "Hourly"

DEFAULT_RATING = Decimal("100")

APPROVED_STATUSES = frozenset({"APPROVED", "ACTIVE"})


class ResourceAction(Enum):
    ADD = "ADD"
    REMOVE = "REMOVE"
    MODIFY = "MODIFY"


class BillingEventType(Enum):
    RESOURCE_CHANGE = "RESOURCE_CHANGE"
    RATE_CHANGE = "RATE_CHANGE"
    SCOPE_CHANGE = "SCOPE_CHANGE"
    ADJUSTMENT = "ADJUSTMENT"


# ---------------------------------------------------------------------------
# Stored records (immutable)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BaselineEngineer:
    """One engineer engaged when the contract was signed."""
    id: int
    contract_id: int
    role: Optional[str]
    level: Optional[str]
    rating: Optional[Decimal]
    unit_rate: Optional[Decimal]
    start_date: date
    end_date: Optional[date] = None

    @property
    def engineer_level(self) -> Optional[str]:
        return self.level if self.level is not None else self.role


@dataclass(frozen=True)
class BaselineBilling:
    """Billing amount fixed at signing for one contract month."""
    contract_id: int
    billing_month: date
    amount: Decimal


@dataclass(frozen=True)
class ChangeRequest:
    id: int
    contract_id: int
    status: str
    created_at: Optional[datetime] = None

    @property
    def is_approved(self) -> bool:
        return (self.status or "").strip().upper() in APPROVED_STATUSES


@dataclass(frozen=True)
class _ResourceEventBase:
    id: int
    change_request_id: int
    effective_start: date
    created_at: datetime

    @property
    def sort_key(self) -> tuple[date, datetime, int]:
        """Chronological position; the event id breaks created_at ties."""
        return (self.effective_start, self.created_at, self.id)


@dataclass(frozen=True)
class AddResource(_ResourceEventBase):
    """Introduces a new roster entry with no baseline identity."""
    role: Optional[str] = None
    level: Optional[str] = None
    rating: Optional[Decimal] = None
    unit_rate: Optional[Decimal] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    engineer_id: Optional[int] = None

    action = ResourceAction.ADD

    @property
    def engineer_level(self) -> Optional[str]:
        return self.level if self.level is not None else self.role


@dataclass(frozen=True)
class RemoveResource(_ResourceEventBase):
    """Ends the engagement of an existing roster entry."""
    engineer_id: Optional[int] = None
    end_date: Optional[date] = None
    start_date: Optional[date] = None
    role: Optional[str] = None
    level: Optional[str] = None

    action = ResourceAction.REMOVE

    def __post_init__(self) -> None:
        if self.engineer_id is None:
            raise ValueError(f"REMOVE event {self.id} requires an engineer_id")

    @property
    def engineer_level(self) -> Optional[str]:
        return self.level if self.level is not None else self.role


@dataclass(frozen=True)
class ModifyResource(_ResourceEventBase):
    """Partial update of an existing roster entry.

    Only non-null new values are applied. The ``*_old`` fields record what
    the change request replaced and are kept for audit output only.
    """
    engineer_id: Optional[int] = None
    role: Optional[str] = None
    level: Optional[str] = None
    rating: Optional[Decimal] = None
    unit_rate: Optional[Decimal] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    rating_old: Optional[Decimal] = None
    unit_rate_old: Optional[Decimal] = None
    start_date_old: Optional[date] = None
    end_date_old: Optional[date] = None

    action = ResourceAction.MODIFY

    def __post_init__(self) -> None:
        if self.engineer_id is None:
            raise ValueError(f"MODIFY event {self.id} requires an engineer_id")

    @property
    def engineer_level(self) -> Optional[str]:
        return self.level if self.level is not None else self.role


ResourceEvent = Union[AddResource, RemoveResource, ModifyResource]


@dataclass(frozen=True)
class BillingEvent:
    """Signed billing delta contributed by a change request."""
    id: int
    change_request_id: int
    billing_month: date
    delta_amount: Decimal
    description: str = ""
    type: BillingEventType = BillingEventType.ADJUSTMENT


@dataclass(frozen=True)
class LegacyEngineerRecord:
    """Engineer row from the table that predates baseline capture."""
    id: int
    contract_id: int
    engineer_level: Optional[str]
    start_date: Optional[date]
    end_date: Optional[date] = None
    billing_type: Optional[str] = None
    rating: Optional[Decimal] = None
    salary: Optional[Decimal] = None
    hourly_rate: Optional[Decimal] = None
    hours: Optional[Decimal] = None
    subtotal: Optional[Decimal] = None


@dataclass(frozen=True)
class EngineerLineItem:
    """Engineer line item submitted with a change request."""
    id: int
    change_request_id: int
    engineer_level: Optional[str]
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    billing_type: Optional[str] = None
    rating: Optional[Decimal] = None
    salary: Optional[Decimal] = None
    hourly_rate: Optional[Decimal] = None
    hours: Optional[Decimal] = None
    subtotal: Optional[Decimal] = None


# ---------------------------------------------------------------------------
# Derived state (built fresh on every query, never persisted)
# ---------------------------------------------------------------------------


@dataclass
class CurrentEngineerState:
    """Roster entry in effect at a point in time."""
    engineer_id: Optional[int]
    role: Optional[str]
    level: Optional[str]
    rating: Optional[Decimal]
    unit_rate: Optional[Decimal]
    start_date: Optional[date]
    end_date: Optional[date]


@dataclass
class MonthlyEngineerSnapshot:
    """Roster entry in effect during one calendar month."""
    engineer_id: Optional[int]
    engineer_level: Optional[str]
    start_date: Optional[date]
    end_date: Optional[date]
    billing_type: str = MONTHLY
    rating: Decimal = DEFAULT_RATING
    salary: Decimal = Decimal("0")
    hourly_rate: Optional[Decimal] = None
    hours: Optional[Decimal] = None
    subtotal: Optional[Decimal] = None


@dataclass(frozen=True)
class BillingBreakdown:
    contract_id: int
    billing_month: date
    baseline_amount: Decimal
    deltas: tuple[BillingEvent, ...] = ()

    @property
    def delta_total(self) -> Decimal:
        return sum((e.delta_amount for e in self.deltas), Decimal("0"))

    @property
    def total(self) -> Decimal:
        return self.baseline_amount + self.delta_total


@dataclass
class MonthlyReport:
    """Snapshot and billing for one contract month, ready for output."""
    contract_id: int
    year_month: str
    engineers: list[MonthlyEngineerSnapshot] = field(default_factory=list)
    billing: Optional[BillingBreakdown] = None

    @property
    def headcount(self) -> int:
        return len(self.engineers)

    @property
    def total_salary(self) -> Decimal:
        return sum((e.salary for e in self.engineers), Decimal("0"))

    @property
    def billing_total(self) -> Decimal:
        return self.billing.total if self.billing is not None else Decimal("0")


class LedgerValidationError(Exception):
    """Raised when caller input or a ledger document cannot be parsed."""
    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Ledger validation failed with {len(errors)} error(s):\n" +
                         "\n".join(f"  - {e}" for e in errors))
