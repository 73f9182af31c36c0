"""CLI entry point.

Usage:
    python -m sow_ledger resources --ledger ledger.json --contract 12 --as-of 2024-03-15
    python -m sow_ledger snapshot --ledger ledger.json --contract 12 --month 2024-03
    python -m sow_ledger billing --ledger ledger.json --contract 12 --month 2024-03
    python -m sow_ledger change-requests --ledger ledger.json --contract 12
    python -m sow_ledger report --ledger ledger.json --contract 12 \
        --from 2024-01 --to 2024-06 --out Resources.xlsx --audit-out Audit.json

The ledger path defaults to $SOW_LEDGER_FILE.
"""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn, Optional

import typer

from sow_ledger.config import load_settings
from sow_ledger.logging_config import configure_logging
from sow_ledger.models import LedgerValidationError

app = typer.Typer(help="Reconstruct contract resources and billing from baseline + approved change requests.")


def _load(ledger: Optional[str]):
    from sow_ledger.stores import load_ledger

    settings = load_settings()
    configure_logging(level=settings.log_level_value)
    path = Path(ledger) if ledger else settings.ledger_file
    if path is None:
        raise LedgerValidationError(["No ledger file given (--ledger or SOW_LEDGER_FILE)"])
    return load_ledger(path)


def _fail(e: LedgerValidationError) -> NoReturn:
    typer.echo("\nVALIDATION FAILED:", err=True)
    for error in e.errors:
        typer.echo(f"  ERROR: {error}", err=True)
    raise typer.Exit(1)


def _fmt(value) -> str:
    return "-" if value is None else str(value)


@app.command()
def resources(
    ledger: Optional[str] = typer.Option(None, "--ledger", help="Path to the ledger JSON document (default: $SOW_LEDGER_FILE)"),
    contract: int = typer.Option(..., "--contract", help="Contract id"),
    as_of: str = typer.Option(..., "--as-of", help="Date (YYYY-MM-DD)"),
) -> None:
    """List the engineers in effect on a given date."""
    from sow_ledger.engine import calculate_current_resources

    try:
        states = calculate_current_resources(_load(ledger), contract, as_of)
    except LedgerValidationError as e:
        _fail(e)

    typer.echo(f"Contract {contract} as of {as_of}: {len(states)} engineer(s)")
    for s in states:
        ident = "new" if s.engineer_id is None else s.engineer_id
        typer.echo(
            f"  [{ident}] {_fmt(s.role)} / {_fmt(s.level)}  rating={_fmt(s.rating)}%  "
            f"rate={_fmt(s.unit_rate)}  {_fmt(s.start_date)} -> {_fmt(s.end_date)}"
        )


@app.command()
def snapshot(
    ledger: Optional[str] = typer.Option(None, "--ledger", help="Path to the ledger JSON document (default: $SOW_LEDGER_FILE)"),
    contract: int = typer.Option(..., "--contract", help="Contract id"),
    month: str = typer.Option(..., "--month", help="Calendar month (YYYY-MM)"),
) -> None:
    """List the engineers in effect during a calendar month."""
    from sow_ledger.engine import calculate_monthly_snapshot

    try:
        engineers = calculate_monthly_snapshot(_load(ledger), contract, month)
    except LedgerValidationError as e:
        _fail(e)

    typer.echo(f"Contract {contract} in {month}: {len(engineers)} engineer(s)")
    for e in engineers:
        typer.echo(
            f"  [{_fmt(e.engineer_id)}] {_fmt(e.engineer_level)}  {e.billing_type}  "
            f"rating={e.rating}%  salary={e.salary}  {_fmt(e.start_date)} -> {_fmt(e.end_date)}"
        )


@app.command()
def billing(
    ledger: Optional[str] = typer.Option(None, "--ledger", help="Path to the ledger JSON document (default: $SOW_LEDGER_FILE)"),
    contract: int = typer.Option(..., "--contract", help="Contract id"),
    month: str = typer.Option(..., "--month", help="Billing month (YYYY-MM)"),
) -> None:
    """Show baseline billing, approved deltas and the current total for a month."""
    from sow_ledger.engine import billing_breakdown

    try:
        breakdown = billing_breakdown(_load(ledger), contract, month)
    except LedgerValidationError as e:
        _fail(e)

    typer.echo(f"Contract {contract} billing for {month}:")
    typer.echo(f"  Baseline: ${breakdown.baseline_amount}")
    for d in breakdown.deltas:
        typer.echo(f"  CR {d.change_request_id} {d.type.value}: {d.delta_amount:+} {d.description}".rstrip())
    typer.echo(f"  CURRENT TOTAL: ${breakdown.total}")


@app.command()
def report(
    ledger: Optional[str] = typer.Option(None, "--ledger", help="Path to the ledger JSON document (default: $SOW_LEDGER_FILE)"),
    contract: int = typer.Option(..., "--contract", help="Contract id"),
    start: str = typer.Option(..., "--from", help="First month (YYYY-MM)"),
    end: str = typer.Option(..., "--to", help="Last month (YYYY-MM), inclusive"),
    out: str = typer.Option("Resources_Report.xlsx", "--out", help="Output Excel file path"),
    audit_out: Optional[str] = typer.Option(None, "--audit-out", help="Output audit JSON file path"),
) -> None:
    """Write an Excel workbook (and optional audit JSON) for a range of months."""
    from sow_ledger.audit import generate_audit
    from sow_ledger.engine import build_monthly_reports
    from sow_ledger.excel import generate_excel_report

    try:
        reports = build_monthly_reports(_load(ledger), contract, start, end)

        for r in reports:
            typer.echo(f"  {r.year_month}: {r.headcount} engineer(s), billing ${r.billing_total}")

        typer.echo(f"\nGenerating Excel report: {out}...")
        generate_excel_report(reports, out)
        typer.echo(f"  Excel report saved to: {out}")

        if audit_out:
            typer.echo(f"\nGenerating audit file: {audit_out}...")
            generate_audit(reports, audit_out)
            typer.echo(f"  Audit file saved to: {audit_out}")

    except LedgerValidationError as e:
        _fail(e)

    typer.echo("\nSUCCESS: Report generated.")


@app.command("change-requests")
def change_requests(
    ledger: Optional[str] = typer.Option(None, "--ledger", help="Path to the ledger JSON document (default: $SOW_LEDGER_FILE)"),
    contract: int = typer.Option(..., "--contract", help="Contract id"),
) -> None:
    """List a contract's change requests and the resource events each one carries."""
    try:
        data = _load(ledger)
    except LedgerValidationError as e:
        _fail(e)

    crs = data.change_requests.for_contract(contract)
    typer.echo(f"Contract {contract}: {len(crs)} change request(s)")
    for cr in crs:
        state = "approved" if cr.is_approved else "not approved"
        typer.echo(f"  CR {cr.id} [{cr.status}] {state}")
        events = sorted(data.events.resource_events_for_change_request(cr.id), key=lambda e: e.sort_key)
        for event in events:
            typer.echo(
                f"    {event.action.value} engineer={_fmt(event.engineer_id)} "
                f"effective {event.effective_start}"
            )


if __name__ == "__main__":
    app()
