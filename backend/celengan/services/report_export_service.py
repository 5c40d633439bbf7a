"""Excel report export: transactions, savings targets and a summary sheet."""

from datetime import datetime
from decimal import Decimal
from io import BytesIO
from typing import Any, Dict, Iterable

import openpyxl
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from celengan.models.transaction import TransactionType
from celengan.services.target_metrics_service import TargetMetricsService

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_HEADER_FONT = Font(bold=True, color="1F2933")
_HEADER_FILL = PatternFill(start_color="E5E7EB", end_color="E5E7EB", fill_type="solid")

TYPE_LABELS = {
    TransactionType.INCOME: "Income",
    TransactionType.EXPENSE: "Expense",
}


def _style_header(ws) -> None:
    for cell in ws[1]:
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL


def _autosize(ws) -> None:
    for index, column in enumerate(ws.iter_cols(), start=1):
        width = max(len(str(cell.value)) if cell.value is not None else 0 for cell in column)
        ws.column_dimensions[get_column_letter(index)].width = min(max(width + 2, 10), 60)


def _number(value: Any) -> float:
    return float(value) if isinstance(value, Decimal) else value


class ReportExportService:
    """Builds the downloadable financial report workbook."""

    @staticmethod
    def summarize(transactions: Iterable[Any], targets: Iterable[Any]) -> Dict[str, Decimal]:
        """Totals over exactly the rows being exported, so filters apply to the summary too."""
        income = expense = Decimal("0")
        for txn in transactions:
            if TransactionType(txn.type) == TransactionType.INCOME:
                income += Decimal(str(txn.amount))
            else:
                expense += Decimal(str(txn.amount))

        return {
            "total_income": income,
            "total_expense": expense,
            "balance": income - expense,
            "total_savings": sum(
                (Decimal(str(t.current_amount)) for t in targets), Decimal("0")
            ),
        }

    @staticmethod
    def build_filename(now: datetime) -> str:
        return f"Laporan_Keuangan_{now.strftime('%d_%m_%Y')}.xlsx"

    @staticmethod
    def build_workbook(
        transactions: Iterable[Any],
        targets: Iterable[Any],
        summary: Dict[str, Decimal],
    ) -> bytes:
        """
        Serialize plain records into an .xlsx file.

        Args:
            transactions: Rows with type, category, description, amount, date
            targets: Rows with name, target_amount, current_amount, target_date
            summary: total_income, total_expense, balance, total_savings

        Returns:
            Workbook bytes
        """
        wb = openpyxl.Workbook()

        ws = wb.active
        ws.title = "Transactions"
        ws.append(["Type", "Category", "Description", "Amount", "Date"])
        for txn in transactions:
            ws.append(
                [
                    TYPE_LABELS.get(TransactionType(txn.type), str(txn.type)),
                    txn.category.name if txn.category else "",
                    txn.description or "-",
                    _number(txn.amount),
                    txn.date.strftime("%d/%m/%Y"),
                ]
            )
        _style_header(ws)
        _autosize(ws)

        ws_targets = wb.create_sheet("Savings Targets")
        ws_targets.append(["Name", "Target", "Current", "Progress (%)", "Target Date"])
        for target in targets:
            progress = TargetMetricsService.get_progress_percent(
                target.current_amount, target.target_amount
            )
            ws_targets.append(
                [
                    target.name,
                    _number(target.target_amount),
                    _number(target.current_amount),
                    round(progress, 1),
                    target.target_date.strftime("%d/%m/%Y"),
                ]
            )
        _style_header(ws_targets)
        _autosize(ws_targets)

        ws_summary = wb.create_sheet("Summary")
        ws_summary.append(["Item", "Amount"])
        ws_summary.append(["Total Income", _number(summary["total_income"])])
        ws_summary.append(["Total Expense", _number(summary["total_expense"])])
        ws_summary.append(["Balance", _number(summary["balance"])])
        ws_summary.append(["Total Savings", _number(summary["total_savings"])])
        _style_header(ws_summary)
        _autosize(ws_summary)

        bio = BytesIO()
        wb.save(bio)
        return bio.getvalue()


report_export_service = ReportExportService()
