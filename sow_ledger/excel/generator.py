"""Excel export of monthly reports.

Writes a fresh workbook: a Summary sheet with one row per month, then one
sheet per month listing the reconstructed roster. Excel formulas are NOT
used; every value is computed in Python before it is written.
"""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Optional

import openpyxl
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from sow_ledger.models import LedgerValidationError, MonthlyReport

SUMMARY_SHEET = "Summary"

# Sheet layout
TITLE_ROW = 1
CONTRACT_ROW = 2
HEADER_ROW = 4
DATA_START_ROW = 5

SUMMARY_HEADERS = [
    "Month",
    "Headcount",
    "Total Salary",
    "Baseline Billing",
    "CR Deltas",
    "Current Billing",
]

ENGINEER_HEADERS = [
    "Engineer ID",
    "Engineer Level",
    "Start Date",
    "End Date",
    "Billing Type",
    "Rating (%)",
    "Salary",
    "Hourly Rate",
    "Hours",
    "Subtotal",
]

# Formatting constants
THIN_BORDER = Border(
    left=Side(style='thin'),
    right=Side(style='thin'),
    top=Side(style='thin'),
    bottom=Side(style='thin'),
)

HEADER_FONT = Font(name='Calibri', size=11, bold=True)
DATA_FONT = Font(name='Calibri', size=11)
TITLE_FONT = Font(name='Calibri', size=12, bold=True)
HEADER_FILL = PatternFill(start_color='D9E1F2', end_color='D9E1F2', fill_type='solid')
CENTER_ALIGN = Alignment(horizontal='center', vertical='center')
DOLLAR_FORMAT = '_("$"* #,##0.00_);_("$"* \\(#,##0.00\\);_("$"* "-"??_);_(@_)'
NUMBER_FORMAT = '#,##0.00'
DATE_FORMAT = 'yyyy-mm-dd'


def _num(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def _write_title(ws, title: str, contract_id: int, last_col: int) -> None:
    ws.merge_cells(start_row=TITLE_ROW, start_column=1, end_row=TITLE_ROW, end_column=last_col)
    cell = ws.cell(row=TITLE_ROW, column=1)
    cell.value = title
    cell.font = TITLE_FONT
    cell.alignment = CENTER_ALIGN

    ws.cell(row=CONTRACT_ROW, column=1).value = 'Contract #'
    ws.cell(row=CONTRACT_ROW, column=1).font = HEADER_FONT
    ws.cell(row=CONTRACT_ROW, column=2).value = contract_id
    ws.cell(row=CONTRACT_ROW, column=2).font = HEADER_FONT


def _write_headers(ws, headers: list[str]) -> None:
    for col, header in enumerate(headers, start=1):
        cell = ws.cell(row=HEADER_ROW, column=col)
        cell.value = header
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.border = THIN_BORDER
        cell.alignment = CENTER_ALIGN
        ws.column_dimensions[get_column_letter(col)].width = max(14, len(header) + 4)


def _write_row(ws, row: int, values: list, formats: list[Optional[str]]) -> None:
    for col, (value, fmt) in enumerate(zip(values, formats), start=1):
        cell = ws.cell(row=row, column=col)
        cell.value = value
        cell.font = DATA_FONT
        cell.border = THIN_BORDER
        if fmt:
            cell.number_format = fmt


def _write_summary_sheet(ws, reports: list[MonthlyReport]) -> None:
    """Write one row per month plus a totals row."""
    _write_title(ws, 'Monthly Resource & Billing Summary', reports[0].contract_id, len(SUMMARY_HEADERS))
    _write_headers(ws, SUMMARY_HEADERS)

    formats = [None, None, DOLLAR_FORMAT, DOLLAR_FORMAT, DOLLAR_FORMAT, DOLLAR_FORMAT]
    row = DATA_START_ROW
    for report in reports:
        billing = report.billing
        _write_row(ws, row, [
            report.year_month,
            report.headcount,
            float(report.total_salary),
            _num(billing.baseline_amount) if billing else 0.0,
            _num(billing.delta_total) if billing else 0.0,
            float(report.billing_total),
        ], formats)
        row += 1

    total_billing = sum((r.billing_total for r in reports), Decimal("0"))
    ws.cell(row=row, column=1).value = 'Total'
    ws.cell(row=row, column=1).font = HEADER_FONT
    total_cell = ws.cell(row=row, column=len(SUMMARY_HEADERS))
    total_cell.value = float(total_billing)
    total_cell.font = HEADER_FONT
    total_cell.border = THIN_BORDER
    total_cell.number_format = DOLLAR_FORMAT


def _write_month_sheet(ws, report: MonthlyReport) -> None:
    _write_title(ws, f'Engaged Engineers {report.year_month}', report.contract_id, len(ENGINEER_HEADERS))
    _write_headers(ws, ENGINEER_HEADERS)

    formats = [None, None, DATE_FORMAT, DATE_FORMAT, None, NUMBER_FORMAT,
               DOLLAR_FORMAT, DOLLAR_FORMAT, NUMBER_FORMAT, DOLLAR_FORMAT]
    row = DATA_START_ROW
    for eng in report.engineers:
        _write_row(ws, row, [
            eng.engineer_id,
            eng.engineer_level,
            eng.start_date,
            eng.end_date,
            eng.billing_type,
            _num(eng.rating),
            _num(eng.salary),
            _num(eng.hourly_rate),
            _num(eng.hours),
            _num(eng.subtotal),
        ], formats)
        row += 1

    ws.cell(row=row, column=1).value = 'Total Salary'
    ws.cell(row=row, column=1).font = HEADER_FONT
    salary_cell = ws.cell(row=row, column=7)
    salary_cell.value = float(report.total_salary)
    salary_cell.font = HEADER_FONT
    salary_cell.number_format = DOLLAR_FORMAT

    ws.cell(row=row + 1, column=1).value = 'Current Billing'
    ws.cell(row=row + 1, column=1).font = HEADER_FONT
    billing_cell = ws.cell(row=row + 1, column=7)
    billing_cell.value = float(report.billing_total)
    billing_cell.font = HEADER_FONT
    billing_cell.number_format = DOLLAR_FORMAT


def generate_excel_report(reports: list[MonthlyReport], output_path: str | Path) -> Path:
    """Generate the Excel workbook for one contract's monthly reports."""
    if not reports:
        raise LedgerValidationError(["No monthly reports to write"])
    contract_ids = {r.contract_id for r in reports}
    if len(contract_ids) > 1:
        raise LedgerValidationError([
            f"Reports span several contracts: {sorted(contract_ids)}"
        ])

    output_path = Path(output_path)
    wb = openpyxl.Workbook()
    summary = wb.active
    summary.title = SUMMARY_SHEET
    _write_summary_sheet(summary, reports)

    for report in reports:
        _write_month_sheet(wb.create_sheet(title=report.year_month), report)

    wb.save(str(output_path))
    return output_path
