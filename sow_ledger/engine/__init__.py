"""Reconstruction engines."""
from sow_ledger.engine.approval import approved_billing_events, approved_resource_events
from sow_ledger.engine.resources import calculate_current_resources
from sow_ledger.engine.snapshot import calculate_monthly_snapshot
from sow_ledger.engine.billing import billing_breakdown, calculate_current_billing
from sow_ledger.engine.reports import build_monthly_report, build_monthly_reports

__all__ = [
    "approved_billing_events",
    "approved_resource_events",
    "calculate_current_resources",
    "calculate_monthly_snapshot",
    "billing_breakdown",
    "calculate_current_billing",
    "build_monthly_report",
    "build_monthly_reports",
]
