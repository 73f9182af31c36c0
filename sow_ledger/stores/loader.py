"""Ledger document loader.

Reads a JSON document holding baseline, change-request and legacy records
for one or more contracts and builds the in-memory stores from it. Every
section is optional. Problems are collected across the whole document and
raised together, so a bad file reports everything that is wrong with it.
"""

from __future__ import annotations

import json
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Callable, Optional

from sow_ledger.models import (
    AddResource,
    BaselineBilling,
    BaselineEngineer,
    BillingEvent,
    BillingEventType,
    ChangeRequest,
    EngineerLineItem,
    LedgerValidationError,
    LegacyEngineerRecord,
    ModifyResource,
    RemoveResource,
    ResourceAction,
    ResourceEvent,
)
from sow_ledger.periods import month_start
from sow_ledger.stores.memory import (
    BaselineStore,
    ChangeRequestRegistry,
    EventLog,
    Ledger,
    LegacyEngineerStore,
    LineItemStore,
)

SECTIONS = (
    "baseline_engineers",
    "baseline_billing",
    "change_requests",
    "resource_events",
    "billing_events",
    "legacy_engineers",
    "line_items",
)


class _Row:
    """Typed field access for one JSON object, recording errors instead of raising."""

    def __init__(self, section: str, index: int, data: dict[str, Any], errors: list[str]):
        self.section = section
        self.index = index
        self.data = data
        self.errors = errors

    def _error(self, name: str, message: str) -> None:
        self.errors.append(f"{self.section}[{self.index}].{name}: {message}")

    def _get(self, name: str, required: bool) -> Any:
        value = self.data.get(name)
        if value is None and required:
            self._error(name, "is required")
        return value

    def as_int(self, name: str, required: bool = True) -> Optional[int]:
        value = self._get(name, required)
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, (int, str)):
            self._error(name, f"{value!r} is not an integer")
            return None
        try:
            return int(value)
        except ValueError:
            self._error(name, f"{value!r} is not an integer")
            return None

    def as_str(self, name: str, required: bool = False) -> Optional[str]:
        value = self._get(name, required)
        if value is None:
            return None
        return str(value).strip() or None

    def as_decimal(self, name: str, required: bool = False) -> Optional[Decimal]:
        value = self._get(name, required)
        if value is None:
            return None
        if isinstance(value, bool):
            self._error(name, f"{value!r} is not a number")
            return None
        try:
            # str() keeps floats such as 0.1 from picking up binary noise
            result = Decimal(str(value).replace(",", ""))
        except InvalidOperation:
            self._error(name, f"{value!r} is not a number")
            return None
        if not result.is_finite():
            self._error(name, f"{value!r} is not finite")
            return None
        return result

    def as_date(self, name: str, required: bool = False) -> Optional[date]:
        value = self._get(name, required)
        if value is None:
            return None
        try:
            return date.fromisoformat(str(value))
        except ValueError:
            self._error(name, f"{value!r} is not a YYYY-MM-DD date")
            return None

    def as_datetime(self, name: str, required: bool = False) -> Optional[datetime]:
        value = self._get(name, required)
        if value is None:
            return None
        try:
            parsed = datetime.fromisoformat(str(value))
        except ValueError:
            self._error(name, f"{value!r} is not an ISO-8601 timestamp")
            return None
        # Stored as naive UTC so timestamps from mixed sources stay comparable
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return parsed


def _rows(data: dict[str, Any], section: str, errors: list[str]) -> list[_Row]:
    raw = data.get(section) or []
    if not isinstance(raw, list):
        errors.append(f"{section}: expected a list, got {type(raw).__name__}")
        return []
    rows = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            errors.append(f"{section}[{index}]: expected an object, got {type(item).__name__}")
            continue
        rows.append(_Row(section, index, item, errors))
    return rows


def _parse_baseline_engineer(row: _Row) -> Optional[BaselineEngineer]:
    before = len(row.errors)
    fields = dict(
        id=row.as_int("id"),
        contract_id=row.as_int("contract_id"),
        role=row.as_str("role"),
        level=row.as_str("level"),
        rating=row.as_decimal("rating"),
        unit_rate=row.as_decimal("unit_rate"),
        start_date=row.as_date("start_date", required=True),
        end_date=row.as_date("end_date"),
    )
    if len(row.errors) != before:
        return None
    return BaselineEngineer(**fields)


def _parse_baseline_billing(row: _Row) -> Optional[BaselineBilling]:
    before = len(row.errors)
    contract_id = row.as_int("contract_id")
    billing_month = row.as_date("billing_month", required=True)
    amount = row.as_decimal("amount", required=True)
    if len(row.errors) != before:
        return None
    return BaselineBilling(
        contract_id=contract_id,
        billing_month=month_start(billing_month),
        amount=amount,
    )


def _parse_change_request(row: _Row) -> Optional[ChangeRequest]:
    before = len(row.errors)
    fields = dict(
        id=row.as_int("id"),
        contract_id=row.as_int("contract_id"),
        status=row.as_str("status", required=True),
        created_at=row.as_datetime("created_at"),
    )
    if len(row.errors) != before:
        return None
    return ChangeRequest(**fields)


def _parse_resource_event(row: _Row) -> Optional[ResourceEvent]:
    before = len(row.errors)
    action_raw = row.as_str("action", required=True)
    action: Optional[ResourceAction] = None
    if action_raw is not None:
        try:
            action = ResourceAction(action_raw.upper())
        except ValueError:
            row.errors.append(
                f"{row.section}[{row.index}].action: {action_raw!r} is not one of ADD, REMOVE, MODIFY"
            )

    common = dict(
        id=row.as_int("id"),
        change_request_id=row.as_int("change_request_id"),
        effective_start=row.as_date("effective_start", required=True),
        created_at=row.as_datetime("created_at", required=True),
    )
    engineer_id = row.as_int("engineer_id", required=action in (ResourceAction.REMOVE, ResourceAction.MODIFY))
    role = row.as_str("role")
    level = row.as_str("level")
    rating_new = row.as_decimal("rating_new")
    unit_rate_new = row.as_decimal("unit_rate_new")
    start_date_new = row.as_date("start_date_new")
    end_date_new = row.as_date("end_date_new")
    rating_old = row.as_decimal("rating_old")
    unit_rate_old = row.as_decimal("unit_rate_old")
    start_date_old = row.as_date("start_date_old")
    end_date_old = row.as_date("end_date_old")

    if len(row.errors) != before or action is None:
        return None

    if action is ResourceAction.ADD:
        return AddResource(
            **common,
            role=role,
            level=level,
            rating=rating_new,
            unit_rate=unit_rate_new,
            start_date=start_date_new,
            end_date=end_date_new,
            engineer_id=engineer_id,
        )
    if action is ResourceAction.REMOVE:
        return RemoveResource(
            **common,
            engineer_id=engineer_id,
            end_date=end_date_new,
            start_date=start_date_new,
            role=role,
            level=level,
        )
    return ModifyResource(
        **common,
        engineer_id=engineer_id,
        role=role,
        level=level,
        rating=rating_new,
        unit_rate=unit_rate_new,
        start_date=start_date_new,
        end_date=end_date_new,
        rating_old=rating_old,
        unit_rate_old=unit_rate_old,
        start_date_old=start_date_old,
        end_date_old=end_date_old,
    )


def _parse_billing_event(row: _Row) -> Optional[BillingEvent]:
    before = len(row.errors)
    event_id = row.as_int("id")
    change_request_id = row.as_int("change_request_id")
    billing_month = row.as_date("billing_month", required=True)
    delta_amount = row.as_decimal("delta_amount", required=True)
    description = row.as_str("description") or ""
    type_raw = row.as_str("type")
    event_type = BillingEventType.ADJUSTMENT
    if type_raw is not None:
        try:
            event_type = BillingEventType(type_raw.upper())
        except ValueError:
            row.errors.append(f"{row.section}[{row.index}].type: unknown billing event type {type_raw!r}")
    if len(row.errors) != before:
        return None
    return BillingEvent(
        id=event_id,
        change_request_id=change_request_id,
        billing_month=month_start(billing_month),
        delta_amount=delta_amount,
        description=description,
        type=event_type,
    )


def _billing_fields(row: _Row) -> dict[str, Any]:
    return dict(
        engineer_level=row.as_str("engineer_level"),
        start_date=row.as_date("start_date"),
        end_date=row.as_date("end_date"),
        billing_type=row.as_str("billing_type"),
        rating=row.as_decimal("rating"),
        salary=row.as_decimal("salary"),
        hourly_rate=row.as_decimal("hourly_rate"),
        hours=row.as_decimal("hours"),
        subtotal=row.as_decimal("subtotal"),
    )


def _parse_legacy_engineer(row: _Row) -> Optional[LegacyEngineerRecord]:
    before = len(row.errors)
    fields = dict(id=row.as_int("id"), contract_id=row.as_int("contract_id"), **_billing_fields(row))
    if len(row.errors) != before:
        return None
    return LegacyEngineerRecord(**fields)


def _parse_line_item(row: _Row) -> Optional[EngineerLineItem]:
    before = len(row.errors)
    fields = dict(id=row.as_int("id"), change_request_id=row.as_int("change_request_id"), **_billing_fields(row))
    if len(row.errors) != before:
        return None
    return EngineerLineItem(**fields)


def _check_unique_ids(section: str, records: list[Any], errors: list[str]) -> None:
    seen: set[int] = set()
    for record in records:
        if record.id in seen:
            errors.append(f"{section}: duplicate id {record.id}")
        seen.add(record.id)


def ledger_from_dict(data: dict[str, Any]) -> Ledger:
    """Build a Ledger from an already-decoded ledger document."""
    errors: list[str] = []

    if not isinstance(data, dict):
        raise LedgerValidationError([f"ledger document: expected an object, got {type(data).__name__}"])

    unknown = sorted(set(data) - set(SECTIONS))
    for key in unknown:
        errors.append(f"{key}: unknown section (expected one of {', '.join(SECTIONS)})")

    def parse(section: str, parser: Callable[[_Row], Any]) -> list[Any]:
        return [r for r in (parser(row) for row in _rows(data, section, errors)) if r is not None]

    baseline_engineers = parse("baseline_engineers", _parse_baseline_engineer)
    baseline_billing = parse("baseline_billing", _parse_baseline_billing)
    change_requests = parse("change_requests", _parse_change_request)
    resource_events = parse("resource_events", _parse_resource_event)
    billing_events = parse("billing_events", _parse_billing_event)
    legacy_engineers = parse("legacy_engineers", _parse_legacy_engineer)
    line_items = parse("line_items", _parse_line_item)

    _check_unique_ids("baseline_engineers", baseline_engineers, errors)
    _check_unique_ids("change_requests", change_requests, errors)
    _check_unique_ids("resource_events", resource_events, errors)
    _check_unique_ids("billing_events", billing_events, errors)
    _check_unique_ids("legacy_engineers", legacy_engineers, errors)
    _check_unique_ids("line_items", line_items, errors)

    seen_months: set[tuple[int, date]] = set()
    for row in baseline_billing:
        key = (row.contract_id, row.billing_month)
        if key in seen_months:
            errors.append(
                f"baseline_billing: contract {row.contract_id} has more than one row "
                f"for {row.billing_month.isoformat()}"
            )
        seen_months.add(key)

    known_crs = {cr.id for cr in change_requests}
    for section, records in (("resource_events", resource_events), ("billing_events", billing_events)):
        for record in records:
            if record.change_request_id not in known_crs:
                errors.append(
                    f"{section}: event {record.id} references unknown change request "
                    f"{record.change_request_id}"
                )

    if errors:
        raise LedgerValidationError(errors)

    return Ledger(
        baseline=BaselineStore(baseline_engineers, baseline_billing),
        change_requests=ChangeRequestRegistry(change_requests),
        events=EventLog(resource_events, billing_events),
        legacy=LegacyEngineerStore(legacy_engineers),
        line_items=LineItemStore(line_items),
    )


def load_ledger(path: str | Path) -> Ledger:
    """Read and validate a JSON ledger document from disk."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except FileNotFoundError:
        raise LedgerValidationError([f"Ledger file not found: {path}"])
    except json.JSONDecodeError as e:
        raise LedgerValidationError([f"Ledger file {path} is not valid JSON: {e}"])
    return ledger_from_dict(data)
