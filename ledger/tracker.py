"""The ledger: user actions over the record store plus the form/filter state."""

from __future__ import annotations

import logging
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .aggregates import LedgerSummary, balance, category_totals, chart_data, summarize, total_expense, total_income
from .exporters import (
    DocumentWriter,
    ExcelReportWriter,
    ExportResult,
    PDFReportWriter,
    SpreadsheetWriter,
)
from .filters import expense_categories, filter_expenses
from .ids import IdGenerator
from .models import (
    ADDING,
    Editing,
    ExpenseInput,
    ExpenseRecord,
    FilterCriteria,
    IncomeInput,
    IncomeRecord,
    InputMode,
    format_amount,
)
from .storage import PersistenceAdapter
from .store import RecordStore
from .validators import parse_optional_date

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class Ledger:
    """Expense/income tracker as one user sees it.

    Owns the two record collections (through :class:`RecordStore`), the text
    typed into the expense and income forms, the active filter criteria and
    the input mode. The expense form either adds new records (``Adding``) or
    holds an existing record pending update (``Editing``).
    """

    def __init__(
        self,
        storage: PersistenceAdapter,
        *,
        id_generator: Optional[IdGenerator] = None,
        document_writer: Optional[DocumentWriter] = None,
        spreadsheet_writer: Optional[SpreadsheetWriter] = None,
        export_dir: Optional[Path] = None,
    ) -> None:
        self.store = RecordStore(storage, id_generator)
        self.expense_input = ExpenseInput()
        self.income_input = IncomeInput()
        self.criteria = FilterCriteria()
        self.mode: InputMode = ADDING
        self._document_writer = document_writer or PDFReportWriter()
        self._spreadsheet_writer = spreadsheet_writer or ExcelReportWriter()
        self._export_dir = Path(export_dir) if export_dir is not None else Path(".")

    # Records --------------------------------------------------------------
    @property
    def expenses(self):
        return self.store.expenses

    @property
    def incomes(self):
        return self.store.incomes

    @property
    def editing(self) -> bool:
        return isinstance(self.mode, Editing)

    # Expense form ---------------------------------------------------------
    def enter_expense(self, amount: Any = _UNSET, category: Any = _UNSET, date: Any = _UNSET) -> ExpenseInput:
        """Type into the expense form; omitted fields keep their text."""
        if amount is not _UNSET:
            self.expense_input.amount = _as_text(amount)
        if category is not _UNSET:
            self.expense_input.category = _as_text(category)
        if date is not _UNSET:
            self.expense_input.date = _as_text(date)
        return self.expense_input

    def add_expense(self) -> Optional[ExpenseRecord]:
        """Add the typed expense as a new record.

        A fresh add ends any edit session. When a field is empty nothing
        happens and the form keeps its text.
        """
        form = self.expense_input
        record = self.store.add_expense(form.amount, form.category, form.date)
        if record is None:
            return None
        self._reset_expense_form()
        return record

    def edit_expense(self, target: Union[ExpenseRecord, int]) -> Optional[ExpenseRecord]:
        """Load an existing expense into the form and switch to editing it."""
        expense_id = target.id if isinstance(target, ExpenseRecord) else target
        record = self.store.find_expense(expense_id)
        if record is None:
            logger.debug("Cannot edit unknown expense %s", expense_id)
            return None
        self.expense_input.amount = format_amount(record.amount)
        self.expense_input.category = record.category
        self.expense_input.date = record.date.isoformat()
        self.mode = Editing(record.id)
        return record

    def update_expense(self) -> Optional[ExpenseRecord]:
        """Commit the form to the record under edit; ends the session on success."""
        if not isinstance(self.mode, Editing):
            return None
        form = self.expense_input
        record = self.store.update_expense(self.mode.target_id, form.amount, form.category, form.date)
        if record is None:
            return None
        self._reset_expense_form()
        return record

    def submit_expense(self) -> Optional[ExpenseRecord]:
        """The form's single button: update while editing, add otherwise."""
        if self.editing:
            return self.update_expense()
        return self.add_expense()

    def cancel_edit(self) -> None:
        if self.editing:
            self._reset_expense_form()

    def replace_expense(self, expense_id: int, **changes: Any) -> Optional[ExpenseRecord]:
        """Update one expense directly, leaving the form and input mode alone.

        Omitted fields keep their current values. Raises
        :class:`RecordNotFoundError` for an unknown id.
        """
        current = self.store.get_expense(expense_id).to_dict()
        merged = {key: changes.get(key, current[key]) for key in ("amount", "category", "date")}
        return self.store.update_expense(expense_id, merged["amount"], merged["category"], merged["date"])

    def delete_expense(self, expense_id: int) -> bool:
        removed = self.store.delete_expense(expense_id)
        if removed and isinstance(self.mode, Editing) and self.mode.target_id == expense_id:
            self._reset_expense_form()
        return removed

    # Income form ----------------------------------------------------------
    def enter_income(self, amount: Any = _UNSET, date: Any = _UNSET) -> IncomeInput:
        if amount is not _UNSET:
            self.income_input.amount = _as_text(amount)
        if date is not _UNSET:
            self.income_input.date = _as_text(date)
        return self.income_input

    def add_income(self) -> Optional[IncomeRecord]:
        form = self.income_input
        record = self.store.add_income(form.amount, form.date)
        if record is not None:
            form.clear()
        return record

    # Filters --------------------------------------------------------------
    def set_filters(self, category: Any = _UNSET, date: Any = _UNSET) -> FilterCriteria:
        current = self.criteria
        self.criteria = FilterCriteria(
            category=current.category if category is _UNSET else (_as_text(category).strip() or None),
            date=current.date if date is _UNSET else parse_optional_date(date),
        )
        return self.criteria

    def clear_filters(self) -> FilterCriteria:
        self.criteria = FilterCriteria()
        return self.criteria

    def filtered_expenses(self) -> List[ExpenseRecord]:
        return filter_expenses(self.store.expenses, self.criteria)

    def categories(self) -> List[str]:
        return expense_categories(self.store.expenses)

    # Derived views --------------------------------------------------------
    def category_totals(self) -> Dict[str, Decimal]:
        return category_totals(self.store.expenses)

    def total_income(self) -> Decimal:
        return total_income(self.store.incomes)

    def total_expense(self) -> Decimal:
        return total_expense(self.store.expenses)

    def balance(self) -> Decimal:
        return balance(self.store.incomes, self.store.expenses)

    def chart_data(self) -> Dict[str, List[Any]]:
        return chart_data(self.store.expenses)

    def summary(self) -> LedgerSummary:
        return summarize(self.store.expenses, self.store.incomes)

    def snapshot(self) -> Dict[str, Any]:
        """Serialisable view of everything the widget renders."""
        chart = self.chart_data()
        return {
            "expenses": [expense.to_dict() for expense in self.filtered_expenses()],
            "incomes": [income.to_dict() for income in self.store.incomes],
            "categories": self.categories(),
            "filters": self.criteria.to_dict(),
            "input": {
                **self.mode.to_dict(),
                "expense": self.expense_input.to_dict(),
                "income": self.income_input.to_dict(),
            },
            "summary": self.summary().to_dict(),
            "chart": {
                "labels": chart["labels"],
                "values": [format_amount(value) for value in chart["values"]],
            },
        }

    # Exports --------------------------------------------------------------
    def export_document(self, directory: Optional[Path] = None) -> ExportResult:
        return self._export(self._document_writer, directory)

    def export_spreadsheet(self, directory: Optional[Path] = None) -> ExportResult:
        return self._export(self._spreadsheet_writer, directory)

    def _export(self, writer: Union[DocumentWriter, SpreadsheetWriter], directory: Optional[Path]) -> ExportResult:
        target = Path(directory) if directory is not None else self._export_dir
        return writer.write(self.filtered_expenses(), target / writer.filename)

    def _reset_expense_form(self) -> None:
        self.expense_input.clear()
        self.mode = ADDING


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Decimal):
        return format_amount(value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)
