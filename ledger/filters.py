"""Derive the visible expense list from the active filter criteria."""

from __future__ import annotations

from typing import Iterable, List

from .models import ExpenseRecord, FilterCriteria


def filter_expenses(records: Iterable[ExpenseRecord], criteria: FilterCriteria) -> List[ExpenseRecord]:
    """Exact-match category/date filter; source order is preserved."""
    category = criteria.category or None
    day = criteria.date

    def matches(expense: ExpenseRecord) -> bool:
        if category and expense.category != category:
            return False
        if day and expense.date != day:
            return False
        return True

    return list(filter(matches, records))


def expense_categories(records: Iterable[ExpenseRecord]) -> List[str]:
    """Distinct categories in order of first appearance."""
    seen = {}
    for expense in records:
        seen.setdefault(expense.category, None)
    return list(seen)
