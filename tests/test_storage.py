"""Tests for the file-backed persistence adapter and id generation."""

import pytest

from ledger.exceptions import PersistenceError
from ledger.ids import CounterIdGenerator, MonotonicIdGenerator
from ledger.storage import FileStorage
from ledger.store import RecordStore


class TestFileStorage:
    def test_missing_key_loads_none(self, tmp_path):
        assert FileStorage(tmp_path).load("expenses") is None

    def test_save_then_load(self, tmp_path):
        storage = FileStorage(tmp_path / "data")
        storage.save("incomes", "[]")
        assert storage.load("incomes") == "[]"
        assert (tmp_path / "data" / "incomes.json").exists()
        assert not (tmp_path / "data" / "incomes.json.tmp").exists()

    def test_unwritable_target_raises(self, tmp_path):
        storage = FileStorage(tmp_path)
        (tmp_path / "expenses.json.tmp").mkdir()
        with pytest.raises(PersistenceError):
            storage.save("expenses", "[]")

    def test_store_round_trip_through_files(self, tmp_path):
        store = RecordStore(FileStorage(tmp_path))
        store.add_expense("9.99", "books", "2024-05-01")
        store.add_income("250", "2024-05-01")

        reloaded = RecordStore(FileStorage(tmp_path))
        assert reloaded.expenses == store.expenses
        assert reloaded.incomes == store.incomes


class TestIdGenerators:
    def test_monotonic_ids_never_collide_within_a_tick(self):
        ids = MonotonicIdGenerator(clock=lambda: 1000)
        assert [ids.next_id() for _ in range(3)] == [1000, 1001, 1002]

    def test_monotonic_ids_follow_the_clock(self):
        ticks = iter([1000, 5000])
        ids = MonotonicIdGenerator(clock=lambda: next(ticks))
        assert ids.next_id() == 1000
        assert ids.next_id() == 5000

    def test_monotonic_ids_skip_observed(self):
        ids = MonotonicIdGenerator(clock=lambda: 1000)
        ids.observe([4000, 20])
        assert ids.next_id() == 4001

    def test_counter(self):
        ids = CounterIdGenerator()
        ids.observe([3])
        assert ids.next_id() == 4
        assert ids.next_id() == 5
