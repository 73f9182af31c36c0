"""Projection of the pre-baseline engineer table onto a calendar month.

Contracts signed before baseline capture only have rows in the legacy
engineer table. The monthly snapshot reads them in two places: as the seed
roster when a contract has no baseline at all, and as a last resort when
the reconstructed month comes out empty.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable, Literal

from sow_ledger.logging_config import get_logger
from sow_ledger.models import (
    DEFAULT_RATING,
    MONTHLY,
    LegacyEngineerRecord,
    MonthlyEngineerSnapshot,
)
from sow_ledger.periods import overlaps

logger = get_logger("engine.legacy")

Purpose = Literal["primary", "fallback"]


def snapshot_from_legacy(record: LegacyEngineerRecord) -> MonthlyEngineerSnapshot:
    return MonthlyEngineerSnapshot(
        engineer_id=record.id,
        engineer_level=record.engineer_level,
        start_date=record.start_date,
        end_date=record.end_date,
        billing_type=record.billing_type if record.billing_type is not None else MONTHLY,
        rating=record.rating if record.rating is not None else DEFAULT_RATING,
        salary=record.salary if record.salary is not None else Decimal("0"),
        hourly_rate=record.hourly_rate,
        hours=record.hours,
        subtotal=record.subtotal,
    )


def project_legacy_engineers(
    records: Iterable[LegacyEngineerRecord],
    month_start: date,
    month_end: date,
    *,
    purpose: Purpose,
) -> list[MonthlyEngineerSnapshot]:
    """Legacy rows overlapping the month, as snapshots with their billing fields intact."""
    records = list(records)
    snapshots = [
        snapshot_from_legacy(r) for r in records
        if overlaps(r.start_date, r.end_date, month_start, month_end)
    ]
    logger.debug(
        "legacy_projection",
        extra={
            "purpose": purpose,
            "month_start": month_start,
            "legacy_rows": len(records),
            "engineers": len(snapshots),
        },
    )
    return snapshots
