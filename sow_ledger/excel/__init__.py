"""Excel report generation."""
from sow_ledger.excel.generator import generate_excel_report

__all__ = ["generate_excel_report"]
