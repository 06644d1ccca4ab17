"""Expense and income collections with load-once, save-on-change persistence."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

from .exceptions import PersistenceError, RecordNotFoundError
from .ids import IdGenerator, MonotonicIdGenerator
from .models import ExpenseRecord, IncomeRecord
from .storage import PersistenceAdapter
from .validators import is_blank, parse_amount, parse_date

logger = logging.getLogger(__name__)

EXPENSES_KEY = "expenses"
INCOMES_KEY = "incomes"

RecordT = TypeVar("RecordT", ExpenseRecord, IncomeRecord)


def serialize_records(records: Any) -> str:
    return json.dumps([record.to_dict() for record in records], indent=2)


def deserialize_records(text: str, factory: Callable[[dict], RecordT]) -> List[RecordT]:
    payload = json.loads(text)
    if not isinstance(payload, list):
        raise ValueError("Expected a list payload")
    return [factory(item) for item in payload]


class RecordStore:
    """Holds the ordered expense and income collections."""

    def __init__(
        self,
        storage: PersistenceAdapter,
        id_generator: Optional[IdGenerator] = None,
    ) -> None:
        self._storage = storage
        self._ids = id_generator or MonotonicIdGenerator()
        self._expenses: List[ExpenseRecord] = []
        self._incomes: List[IncomeRecord] = []
        self.load()  # Hydrate from persistence once, on construction.

    # Public API -----------------------------------------------------------
    @property
    def expenses(self) -> Tuple[ExpenseRecord, ...]:
        return tuple(self._expenses)

    @property
    def incomes(self) -> Tuple[IncomeRecord, ...]:
        return tuple(self._incomes)

    def add_expense(self, amount: object, category: object, date_value: object) -> Optional[ExpenseRecord]:
        """Append a new expense; returns ``None`` when a field is left empty."""
        if is_blank(amount) or is_blank(category) or is_blank(date_value):
            logger.debug("Ignoring expense with empty fields")
            return None
        fields = self._expense_fields(amount, category, date_value)
        record = ExpenseRecord(id=self._ids.next_id(), **fields)
        self._commit(self._expenses + [record], self._incomes)
        logger.info("Added expense %s (%s %s)", record.id, record.category, record.amount)
        return record

    def add_income(self, amount: object, date_value: object) -> Optional[IncomeRecord]:
        if is_blank(amount) or is_blank(date_value):
            logger.debug("Ignoring income with empty fields")
            return None
        value = parse_amount(amount)
        received = parse_date(date_value)
        record = IncomeRecord(id=self._ids.next_id(), amount=value, date=received)
        self._commit(self._expenses, self._incomes + [record])
        logger.info("Added income %s (%s)", record.id, record.amount)
        return record

    def update_expense(
        self, expense_id: int, amount: object, category: object, date_value: object
    ) -> Optional[ExpenseRecord]:
        """Replace every mutable field of an expense, keeping its id and position."""
        index = self._index_of(expense_id)
        if index is None:
            logger.debug("Expense %s not found; update ignored", expense_id)
            return None
        if is_blank(amount) or is_blank(category) or is_blank(date_value):
            return None
        updated = ExpenseRecord(id=expense_id, **self._expense_fields(amount, category, date_value))
        expenses = list(self._expenses)
        expenses[index] = updated
        self._commit(expenses, self._incomes)
        logger.info("Updated expense %s", expense_id)
        return updated

    def delete_expense(self, expense_id: int) -> bool:
        index = self._index_of(expense_id)
        if index is None:
            return False
        self._commit(self._expenses[:index] + self._expenses[index + 1:], self._incomes)
        logger.info("Deleted expense %s", expense_id)
        return True

    def find_expense(self, expense_id: int) -> Optional[ExpenseRecord]:
        index = self._index_of(expense_id)
        return None if index is None else self._expenses[index]

    def get_expense(self, expense_id: int) -> ExpenseRecord:
        """Return an expense or raise if it does not exist."""
        record = self.find_expense(expense_id)
        if record is None:
            raise RecordNotFoundError(f"Expense {expense_id} not found")
        return record

    def load(self) -> None:
        """Load both collections; unreadable entries start out empty."""
        self._expenses = self._load_collection(EXPENSES_KEY, ExpenseRecord.from_dict)
        self._incomes = self._load_collection(INCOMES_KEY, IncomeRecord.from_dict)
        self._ids.observe(record.id for record in self._expenses)
        self._ids.observe(record.id for record in self._incomes)

    # Internal helpers -----------------------------------------------------
    def _expense_fields(self, amount: object, category: object, date_value: object) -> Dict[str, Any]:
        return {
            "amount": parse_amount(amount),
            "category": category if isinstance(category, str) else str(category),
            "date": parse_date(date_value),
        }

    def _index_of(self, expense_id: int) -> Optional[int]:
        for index, record in enumerate(self._expenses):
            if record.id == expense_id:
                return index
        return None

    def _load_collection(self, key: str, factory: Callable[[dict], RecordT]) -> List[RecordT]:
        try:
            text = self._storage.load(key)
        except PersistenceError as exc:
            logger.warning("Could not read %r, starting empty: %s", key, exc)
            return []
        if not text:
            return []
        try:
            return deserialize_records(text, factory)
        except (ValueError, KeyError, TypeError, ArithmeticError) as exc:
            logger.warning("Discarding corrupt %r data: %s", key, exc)
            return []

    def _commit(self, expenses: List[ExpenseRecord], incomes: List[IncomeRecord]) -> None:
        """Write both collections in full, then adopt them in memory.

        Memory only changes once storage holds the new snapshot; a failed
        write leaves both collections as they were.
        """
        try:
            expenses_text = serialize_records(expenses)
            incomes_text = serialize_records(incomes)
        except (TypeError, ValueError) as exc:
            raise PersistenceError("Unable to serialise the ledger") from exc

        previous_expenses = serialize_records(self._expenses)
        self._storage.save(EXPENSES_KEY, expenses_text)
        try:
            self._storage.save(INCOMES_KEY, incomes_text)
        except PersistenceError:
            try:
                self._storage.save(EXPENSES_KEY, previous_expenses)
            except PersistenceError:
                logger.exception("Could not restore %r after a failed save", EXPENSES_KEY)
            raise
        self._expenses = list(expenses)
        self._incomes = list(incomes)
