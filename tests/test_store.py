"""Tests for the record store: CRUD, emptiness guard and persistence."""

import json
from datetime import date
from decimal import Decimal

import pytest

from ledger.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from ledger.ids import CounterIdGenerator
from ledger.models import ExpenseRecord, IncomeRecord, format_amount
from ledger.storage import MemoryStorage
from ledger.store import EXPENSES_KEY, INCOMES_KEY, RecordStore


class TestAddExpense:
    def test_valid_adds_are_appended_in_order(self, store):
        """Each valid add creates exactly one record with the given fields."""
        inputs = [("10", "food", "2024-01-01"), ("5.25", "gas", "2024-01-02"), ("7", "food", "2024-01-03")]
        for amount, category, day in inputs:
            store.add_expense(amount, category, day)

        assert len(store.expenses) == len(inputs)
        for record, (amount, category, day) in zip(store.expenses, inputs):
            assert record.amount == Decimal(amount)
            assert record.category == category
            assert record.date == date.fromisoformat(day)

    def test_ids_are_unique(self, store):
        for _ in range(5):
            store.add_expense("1", "misc", "2024-01-01")
        ids = [record.id for record in store.expenses]
        assert len(set(ids)) == 5

    @pytest.mark.parametrize(
        "amount, category, day",
        [("", "food", "2024-01-01"), ("10", "", "2024-01-01"), ("10", "food", ""), (None, "food", "2024-01-01"), ("10", "   ", "2024-01-01")],
    )
    def test_empty_field_is_a_no_op(self, store, storage, amount, category, day):
        assert store.add_expense(amount, category, day) is None
        assert store.expenses == ()
        assert storage.saves == []

    @pytest.mark.parametrize("amount", ["abc", "NaN", "-5", "0", "1e400000000", "1e-70", "1" * 65])
    def test_bad_amount_is_rejected(self, store, amount):
        with pytest.raises(ValidationError):
            store.add_expense(amount, "food", "2024-01-01")
        assert store.expenses == ()

    def test_bad_date_is_rejected(self, store):
        with pytest.raises(ValidationError):
            store.add_expense("10", "food", "01/02/2024")


class TestAddIncome:
    def test_income_is_appended(self, store):
        income = store.add_income("100", "2024-01-31")
        assert store.incomes == (income,)
        assert income.amount == Decimal("100")

    @pytest.mark.parametrize("amount, day", [("", "2024-01-31"), ("100", "")])
    def test_empty_field_is_a_no_op(self, store, amount, day):
        assert store.add_income(amount, day) is None
        assert store.incomes == ()


class TestUpdateAndDelete:
    def test_update_keeps_id_and_position(self, store):
        first = store.add_expense("10", "food", "2024-01-01")
        second = store.add_expense("20", "gas", "2024-01-02")

        updated = store.update_expense(first.id, "15", "groceries", "2024-01-05")

        assert updated.id == first.id
        assert store.expenses == (updated, second)
        assert updated.amount == Decimal("15")
        assert updated.category == "groceries"
        assert updated.date == date(2024, 1, 5)

    def test_update_unknown_id_is_a_no_op(self, store):
        store.add_expense("10", "food", "2024-01-01")
        before = store.expenses
        assert store.update_expense(999, "1", "x", "2024-01-01") is None
        assert store.expenses == before

    def test_update_with_empty_field_is_a_no_op(self, store):
        record = store.add_expense("10", "food", "2024-01-01")
        assert store.update_expense(record.id, "", "food", "2024-01-01") is None
        assert store.expenses == (record,)

    def test_delete_is_idempotent(self, store, storage):
        record = store.add_expense("10", "food", "2024-01-01")
        saves_after_add = len(storage.saves)

        assert store.delete_expense(record.id) is True
        assert store.delete_expense(record.id) is False
        assert store.expenses == ()
        # Only the effective delete writes.
        assert len(storage.saves) == saves_after_add + 2

    def test_get_expense_raises_for_unknown_id(self, store):
        with pytest.raises(RecordNotFoundError):
            store.get_expense(42)


class TestPersistence:
    def test_every_mutation_writes_both_collections(self, store, storage):
        store.add_expense("10", "food", "2024-01-01")
        assert storage.saves == [EXPENSES_KEY, INCOMES_KEY]
        store.add_income("50", "2024-01-01")
        assert storage.saves[-2:] == [EXPENSES_KEY, INCOMES_KEY]

    def test_round_trip_reproduces_collections(self, store, storage):
        store.add_expense("12.5", "food", "2024-01-01")
        store.add_expense("20", "gas", "2024-01-02")
        store.add_income("100", "2024-01-01")

        reloaded = RecordStore(storage, CounterIdGenerator())

        assert reloaded.expenses == store.expenses
        assert reloaded.incomes == store.incomes

    def test_missing_entries_start_empty(self):
        store = RecordStore(MemoryStorage())
        assert store.expenses == ()
        assert store.incomes == ()

    @pytest.mark.parametrize("payload", ["not json", '{"id": 1}', "[{\"id\": 1}]", "null"])
    def test_corrupt_entries_start_empty(self, payload):
        store = RecordStore(MemoryStorage({EXPENSES_KEY: payload, INCOMES_KEY: payload}))
        assert store.expenses == ()
        assert store.incomes == ()

    def test_loads_numeric_amounts(self):
        """Data saved by the browser widget stores amounts as JSON numbers."""
        raw = json.dumps([{"id": 1704067200000, "amount": 12.5, "category": "food", "date": "2024-01-01"}])
        store = RecordStore(MemoryStorage({EXPENSES_KEY: raw}))
        assert store.expenses == (
            ExpenseRecord(id=1704067200000, amount=Decimal("12.5"), category="food", date=date(2024, 1, 1)),
        )

    def test_new_ids_follow_loaded_ids(self):
        raw = json.dumps([{"id": 7, "amount": "100", "date": "2024-01-01"}])
        store = RecordStore(MemoryStorage({INCOMES_KEY: raw}), CounterIdGenerator())
        record = store.add_expense("1", "misc", "2024-01-02")
        assert record.id == 8
        assert store.incomes == (IncomeRecord(id=7, amount=Decimal("100"), date=date(2024, 1, 1)),)


class FailingStorage(MemoryStorage):
    """Refuses writes to the keys listed in ``broken``."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.broken = set()

    def save(self, key, text):
        if key in self.broken:
            raise PersistenceError(f"disk full while saving {key}")
        super().save(key, text)


class TestFailedWrites:
    @pytest.fixture
    def failing(self):
        return FailingStorage()

    @pytest.fixture
    def seeded(self, failing):
        store = RecordStore(failing, CounterIdGenerator())
        store.add_expense("10", "food", "2024-01-01")
        store.add_income("100", "2024-01-01")
        return store

    def _assert_unchanged(self, store, storage, expenses, incomes, entries):
        assert store.expenses == expenses
        assert store.incomes == incomes
        assert storage.entries == entries

    @pytest.mark.parametrize("broken_key", [EXPENSES_KEY, INCOMES_KEY])
    def test_mutations_leave_memory_and_storage_untouched(self, seeded, failing, broken_key):
        expenses, incomes, entries = seeded.expenses, seeded.incomes, dict(failing.entries)
        failing.broken = {broken_key}
        expense_id = expenses[0].id

        with pytest.raises(PersistenceError):
            seeded.add_expense("5", "gas", "2024-01-02")
        self._assert_unchanged(seeded, failing, expenses, incomes, entries)

        with pytest.raises(PersistenceError):
            seeded.add_income("50", "2024-01-02")
        self._assert_unchanged(seeded, failing, expenses, incomes, entries)

        with pytest.raises(PersistenceError):
            seeded.update_expense(expense_id, "99", "rent", "2024-01-03")
        self._assert_unchanged(seeded, failing, expenses, incomes, entries)

        with pytest.raises(PersistenceError):
            seeded.delete_expense(expense_id)
        self._assert_unchanged(seeded, failing, expenses, incomes, entries)

    def test_store_recovers_once_storage_works_again(self, seeded, failing):
        failing.broken = {EXPENSES_KEY}
        with pytest.raises(PersistenceError):
            seeded.add_expense("5", "gas", "2024-01-02")
        failing.broken = set()

        seeded.add_expense("5", "gas", "2024-01-02")

        assert [record.category for record in seeded.expenses] == ["food", "gas"]
        reloaded = RecordStore(failing, CounterIdGenerator())
        assert reloaded.expenses == seeded.expenses

    def test_unserialisable_records_raise_persistence_error(self, seeded, failing, monkeypatch):
        def broken(records):
            raise ValueError("cannot encode")

        monkeypatch.setattr("ledger.store.serialize_records", broken)
        entries = dict(failing.entries)

        with pytest.raises(PersistenceError):
            seeded.add_expense("5", "gas", "2024-01-02")

        assert [record.category for record in seeded.expenses] == ["food"]
        assert failing.entries == entries


class TestAmountsAndCategoriesAsTyped:
    def test_huge_amount_persists_and_reloads(self, store, storage):
        record = store.add_expense("1e30", "house", "2024-01-01")
        store.add_expense("5", "food", "2024-01-02")

        saved = json.loads(storage.entries[EXPENSES_KEY])
        assert saved[0]["amount"] == "1" + "0" * 30
        reloaded = RecordStore(storage, CounterIdGenerator())
        assert reloaded.expenses == store.expenses
        assert reloaded.expenses[0].amount == record.amount

    @pytest.mark.parametrize(
        "amount, expected",
        [("12.50", "12.5"), ("20.00", "20"), ("1e30", "1" + "0" * 30), ("0.000001", "0.000001"), ("12345678901234567890123456789012.5", "12345678901234567890123456789012.5")],
    )
    def test_amount_text(self, amount, expected):
        assert format_amount(Decimal(amount)) == expected

    def test_category_is_stored_exactly(self, store):
        typed = "  Groceries and household supplies for the whole month of January  "
        record = store.add_expense("10", typed, "2024-01-01")
        assert record.category == typed
        assert len(record.category) > 50
