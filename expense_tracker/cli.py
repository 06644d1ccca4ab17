"""Console interface for the expense tracker."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import List, Optional

from ledger.chart import write_chart_html
from ledger.exceptions import ExportError, PersistenceError, RecordNotFoundError, ValidationError
from ledger.models import ExpenseRecord, IncomeRecord, format_amount
from ledger.storage import FileStorage
from ledger.tracker import Ledger

DATE_FORMAT = "YYYY-MM-DD"


def _parse_date(value: str) -> str:
    try:
        date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"Invalid date '{value}'. Expected format {DATE_FORMAT}."
        ) from exc
    return value


def _parse_amount(value: str) -> str:
    try:
        amount = Decimal(value)
    except InvalidOperation as exc:
        raise argparse.ArgumentTypeError("Amount must be a numeric value") from exc
    if not amount.is_finite() or amount <= 0:
        raise argparse.ArgumentTypeError("Amount must be greater than zero")
    return value


def _load_ledger(args: argparse.Namespace) -> Ledger:
    return Ledger(FileStorage(args.data_dir), export_dir=args.export_dir)


def _format_expense(expense: ExpenseRecord) -> str:
    return f"[{expense.id}] {expense.date.isoformat()} {expense.category}: ${format_amount(expense.amount)}"


def _format_income(income: IncomeRecord) -> str:
    return f"[{income.id}] {income.date.isoformat()} +${format_amount(income.amount)}"


def handle_expense(args: argparse.Namespace, ledger: Ledger) -> None:
    if args.command == "add":
        ledger.enter_expense(amount=args.amount, category=args.category, date=args.date)
        expense = ledger.add_expense()
        if expense is None:
            raise ValidationError("amount, category and date are all required")
        print("Expense added: " + _format_expense(expense))
    elif args.command == "list":
        ledger.set_filters(category=args.category or "", date=args.date or "")
        expenses = ledger.filtered_expenses()
        if not expenses:
            print("No expenses found.")
            return
        print(f"Found {len(expenses)} expenses:")
        for expense in expenses:
            print("  " + _format_expense(expense))
    elif args.command == "edit":
        if ledger.edit_expense(args.id) is None:
            raise RecordNotFoundError(f"Expense {args.id} not found")
        changes = {"amount": args.amount, "category": args.category, "date": args.date}
        ledger.enter_expense(**{k: v for k, v in changes.items() if v is not None})
        expense = ledger.update_expense()
        if expense is None:
            raise ValidationError("amount, category and date cannot be empty")
        print("Expense updated: " + _format_expense(expense))
    elif args.command == "delete":
        if ledger.delete_expense(args.id):
            print(f"Expense {args.id} deleted.")
        else:
            print(f"Expense {args.id} not found; nothing deleted.")


def handle_income(args: argparse.Namespace, ledger: Ledger) -> None:
    if args.command == "add":
        ledger.enter_income(amount=args.amount, date=args.date)
        income = ledger.add_income()
        if income is None:
            raise ValidationError("amount and date are both required")
        print("Income added: " + _format_income(income))
    elif args.command == "list":
        if not ledger.incomes:
            print("No incomes found.")
            return
        print(f"Found {len(ledger.incomes)} incomes (total ${format_amount(ledger.total_income())}):")
        for income in ledger.incomes:
            print("  " + _format_income(income))


def handle_summary(args: argparse.Namespace, ledger: Ledger) -> None:
    summary = ledger.summary()
    print(f"Income:   ${format_amount(summary.total_income)}")
    print(f"Expenses: ${format_amount(summary.total_expense)}")
    print(f"Balance:  ${format_amount(summary.balance)}")
    if summary.category_totals:
        print("Spending breakdown:")
        for name, amount in summary.category_totals.items():
            print(f"  {name}: ${format_amount(amount)}")


def handle_export(args: argparse.Namespace, ledger: Ledger) -> None:
    ledger.set_filters(category=args.category or "", date=args.date or "")
    if args.format == "pdf":
        result = ledger.export_document()
    else:
        result = ledger.export_spreadsheet()
    result.raise_for_error()
    print(f"Exported {result.rows} expenses to {result.path}")


def handle_chart(args: argparse.Namespace, ledger: Ledger) -> None:
    output = args.output or (args.export_dir / "spending_breakdown.html")
    path = write_chart_html(ledger.chart_data(), output)
    print(f"Chart written to {path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Smart Expense Tracker CLI")
    parser.add_argument(
        "--data-dir",
        default="data",
        type=Path,
        help="Directory to store JSON data (default: ./data)",
    )
    parser.add_argument(
        "--export-dir",
        default=".",
        type=Path,
        help="Directory reports are written to (default: current directory)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="entity", required=True)

    expense_parser = subparsers.add_parser("expense", help="Manage expenses")
    expense_sub = expense_parser.add_subparsers(dest="command", required=True)

    expense_add = expense_sub.add_parser("add", help="Add a new expense")
    expense_add.add_argument("amount", type=_parse_amount)
    expense_add.add_argument("category")
    expense_add.add_argument("date", type=_parse_date)

    expense_list = expense_sub.add_parser("list", help="List expenses")
    expense_list.add_argument("--category")
    expense_list.add_argument("--date", type=_parse_date)

    expense_edit = expense_sub.add_parser("edit", help="Edit an existing expense")
    expense_edit.add_argument("id", type=int)
    expense_edit.add_argument("--amount", type=_parse_amount)
    expense_edit.add_argument("--category")
    expense_edit.add_argument("--date", type=_parse_date)

    expense_delete = expense_sub.add_parser("delete", help="Delete an expense")
    expense_delete.add_argument("id", type=int)

    income_parser = subparsers.add_parser("income", help="Manage incomes")
    income_sub = income_parser.add_subparsers(dest="command", required=True)

    income_add = income_sub.add_parser("add", help="Add a new income")
    income_add.add_argument("amount", type=_parse_amount)
    income_add.add_argument("date", type=_parse_date)

    income_sub.add_parser("list", help="List incomes")

    subparsers.add_parser("summary", help="Show totals, balance and category breakdown")

    export_parser = subparsers.add_parser("export", help="Export the filtered expenses")
    export_parser.add_argument("format", choices=("pdf", "xlsx"))
    export_parser.add_argument("--category")
    export_parser.add_argument("--date", type=_parse_date)

    chart_parser = subparsers.add_parser("chart", help="Render the spending breakdown chart")
    chart_parser.add_argument("--output", type=Path)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        ledger = _load_ledger(args)
        if args.entity == "expense":
            handle_expense(args, ledger)
        elif args.entity == "income":
            handle_income(args, ledger)
        elif args.entity == "summary":
            handle_summary(args, ledger)
        elif args.entity == "export":
            handle_export(args, ledger)
        elif args.entity == "chart":
            handle_chart(args, ledger)
        else:  # pragma: no cover - argparse should prevent this
            parser.error(f"Unknown entity: {args.entity}")
            return 2
    except ValidationError as exc:
        print(f"Validation error: {exc}", file=sys.stderr)
        return 1
    except RecordNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1
    except ExportError as exc:
        print(f"Export error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
