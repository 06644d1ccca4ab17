"""Report writers for the filtered expense view."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Tuple

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import IllegalCharacterError
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .exceptions import ExportError
from .models import ExpenseRecord, format_amount

logger = logging.getLogger(__name__)

DOCUMENT_FILENAME = "expense_report.pdf"
SPREADSHEET_FILENAME = "expense_report.xlsx"
REPORT_TITLE = "Monthly Expense Report"
SHEET_NAME = "Expenses"
REPORT_HEADER = ("Date", "Category", "Amount")
SHEET_COLUMNS = ("id", "amount", "category", "date")


@dataclass(frozen=True)
class ExportResult:
    path: Path
    rows: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> "ExportResult":
        if self.error is not None:
            raise ExportError(self.error)
        return self


class DocumentWriter(Protocol):
    filename: str

    def write(self, expenses: Sequence[ExpenseRecord], path: Path) -> ExportResult:
        ...


class SpreadsheetWriter(Protocol):
    filename: str

    def write(self, expenses: Sequence[ExpenseRecord], path: Path) -> ExportResult:
        ...


def report_rows(expenses: Sequence[ExpenseRecord]) -> List[Tuple[str, str, str]]:
    """``(date, category, "$amount")`` rows for the printable report."""
    return [
        (expense.date.isoformat(), expense.category, f"${format_amount(expense.amount)}")
        for expense in expenses
    ]


class PDFReportWriter:
    """Title line plus a Date/Category/Amount table, rendered with reportlab."""

    filename = DOCUMENT_FILENAME

    def __init__(self, title: str = REPORT_TITLE) -> None:
        self.title = title

    def write(self, expenses: Sequence[ExpenseRecord], path: Path) -> ExportResult:
        rows = report_rows(expenses)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            self._render(rows, path)
        except OSError as exc:
            logger.exception("PDF export to %s failed", path)
            return ExportResult(path=path, error=f"Unable to write {path}: {exc}")
        logger.info("Exported %d expenses to %s", len(rows), path)
        return ExportResult(path=path, rows=len(rows))

    def _render(self, rows: List[Tuple[str, str, str]], path: Path) -> None:
        styles = getSampleStyleSheet()
        table = Table([list(REPORT_HEADER)] + [list(row) for row in rows], repeatRows=1)
        table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#4F81BD")),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("ALIGN", (2, 0), (2, -1), "RIGHT"),
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#A0A0A0")),
                ]
            )
        )
        document = SimpleDocTemplate(str(path), pagesize=A4, title=self.title)
        document.build([Paragraph(self.title, styles["Title"]), Spacer(1, 12), table])


def _style_header(ws, row: int = 1) -> None:
    header_font = Font(bold=True, color="FFFFFF")
    fill = PatternFill("solid", fgColor="4F81BD")
    align = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="A0A0A0")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    for cell in ws[row]:
        cell.font = header_font
        cell.fill = fill
        cell.alignment = align
        cell.border = border


def _autosize_columns(ws, min_width: int = 10, max_width: int = 45) -> None:
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        longest = max((len(str(cell.value)) for cell in ws[letter] if cell.value is not None), default=0)
        ws.column_dimensions[letter].width = max(min_width, min(max_width, longest + 2))


class ExcelReportWriter:
    """One "Expenses" sheet: a field-name header row, then one row per expense."""

    filename = SPREADSHEET_FILENAME

    def write(self, expenses: Sequence[ExpenseRecord], path: Path) -> ExportResult:
        try:
            wb = self._build(expenses)
            path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(path)
        except (OSError, ValueError, IllegalCharacterError) as exc:
            logger.exception("Spreadsheet export to %s failed", path)
            return ExportResult(path=path, error=f"Unable to write {path}: {exc}")
        logger.info("Exported %d expenses to %s", len(expenses), path)
        return ExportResult(path=path, rows=len(expenses))

    def _build(self, expenses: Sequence[ExpenseRecord]) -> Workbook:
        wb = Workbook()
        ws = wb.active
        ws.title = SHEET_NAME
        ws.append(list(SHEET_COLUMNS))
        _style_header(ws, 1)
        ws.freeze_panes = "A2"
        for expense in expenses:
            ws.append([expense.id, expense.amount, _cell_text(expense.category), expense.date.isoformat()])
        _autosize_columns(ws)
        return wb


def _cell_text(value: str) -> str:
    """Drop control characters worksheets cannot store."""
    return ILLEGAL_CHARACTERS_RE.sub("", value)
