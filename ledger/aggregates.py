"""Totals, balance and category breakdown over the whole ledger.

Aggregates always cover every record; filter criteria only narrow the
visible expense list, never the figures computed here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import MAX_EMAX, MAX_PREC, MIN_EMIN, Context, Decimal
from typing import Any, Dict, Iterable, List

from .models import ExpenseRecord, IncomeRecord, format_amount

ZERO = Decimal("0")
# Totals are added without rounding, whatever the digit count of the amounts.
EXACT = Context(prec=MAX_PREC, Emax=MAX_EMAX, Emin=MIN_EMIN)


def category_totals(expenses: Iterable[ExpenseRecord]) -> Dict[str, Decimal]:
    totals: Dict[str, Decimal] = {}
    for expense in expenses:
        totals[expense.category] = EXACT.add(totals.get(expense.category, ZERO), expense.amount)
    return totals


def total_income(incomes: Iterable[IncomeRecord]) -> Decimal:
    return _exact_sum(income.amount for income in incomes)


def total_expense(expenses: Iterable[ExpenseRecord]) -> Decimal:
    return _exact_sum(expense.amount for expense in expenses)


def balance(incomes: Iterable[IncomeRecord], expenses: Iterable[ExpenseRecord]) -> Decimal:
    """Income minus expense; negative when spending exceeds income."""
    return EXACT.subtract(total_income(incomes), total_expense(expenses))


def _exact_sum(amounts: Iterable[Decimal]) -> Decimal:
    total = ZERO
    for amount in amounts:
        total = EXACT.add(total, amount)
    return total


def chart_data(expenses: Iterable[ExpenseRecord]) -> Dict[str, List[Any]]:
    """Labels and values for the spending breakdown chart."""
    totals = category_totals(expenses)
    return {"labels": list(totals), "values": list(totals.values())}


@dataclass(frozen=True)
class LedgerSummary:
    total_income: Decimal
    total_expense: Decimal
    balance: Decimal
    category_totals: Dict[str, Decimal] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_income": format_amount(self.total_income),
            "total_expense": format_amount(self.total_expense),
            "balance": format_amount(self.balance),
            "category_totals": {
                name: format_amount(amount) for name, amount in self.category_totals.items()
            },
        }


def summarize(expenses: Iterable[ExpenseRecord], incomes: Iterable[IncomeRecord]) -> LedgerSummary:
    expense_list = list(expenses)
    income_list = list(incomes)
    return LedgerSummary(
        total_income=total_income(income_list),
        total_expense=total_expense(expense_list),
        balance=balance(income_list, expense_list),
        category_totals=category_totals(expense_list),
    )
