"""Audit output for monthly reports.

Generates a JSON document tracing every month's roster and billing back to
its baseline amount and the change requests that contributed deltas.
"""

from __future__ import annotations

import json
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Optional

from sow_ledger.models import MonthlyEngineerSnapshot, MonthlyReport


class DecimalEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal and date values."""
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, date):
            return obj.isoformat()
        return super().default(obj)


def _num(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def engineer_dict(snapshot: MonthlyEngineerSnapshot) -> dict:
    return {
        "engineer_id": snapshot.engineer_id,
        "engineer_level": snapshot.engineer_level,
        "start_date": _iso(snapshot.start_date),
        "end_date": _iso(snapshot.end_date),
        "billing_type": snapshot.billing_type,
        "rating": _num(snapshot.rating),
        "salary": _num(snapshot.salary),
        "hourly_rate": _num(snapshot.hourly_rate),
        "hours": _num(snapshot.hours),
        "subtotal": _num(snapshot.subtotal),
    }


def generate_audit_dict(reports: list[MonthlyReport]) -> dict:
    """Build audit dictionary from computed monthly reports (no file I/O)."""
    months = []
    for report in reports:
        billing = report.billing
        months.append({
            "year_month": report.year_month,
            "headcount": report.headcount,
            "total_salary": float(report.total_salary),
            "engineers": [engineer_dict(e) for e in report.engineers],
            "billing": {
                "baseline_amount": _num(billing.baseline_amount) if billing else 0.0,
                "deltas": [
                    {
                        "billing_event_id": d.id,
                        "change_request_id": d.change_request_id,
                        "type": d.type.value,
                        "description": d.description,
                        "delta_amount": float(d.delta_amount),
                    }
                    for d in (billing.deltas if billing else ())
                ],
                "total": float(report.billing_total),
            },
        })

    contract_ids = sorted({r.contract_id for r in reports})
    return {
        "contract_ids": contract_ids,
        "months": months,
        "summary": {
            "total_months": len(reports),
            "period_start": reports[0].year_month if reports else None,
            "period_end": reports[-1].year_month if reports else None,
            "peak_headcount": max((r.headcount for r in reports), default=0),
            "total_billing": float(sum((r.billing_total for r in reports), Decimal("0"))),
            "change_requests": sorted({
                d.change_request_id
                for r in reports if r.billing
                for d in r.billing.deltas
            }),
        },
    }


def generate_audit(reports: list[MonthlyReport], output_path: str | Path) -> Path:
    """Generate audit JSON file from computed monthly reports."""
    output_path = Path(output_path)
    audit = generate_audit_dict(reports)
    output_path.write_text(json.dumps(audit, indent=2, cls=DecimalEncoder), encoding='utf-8')
    return output_path
