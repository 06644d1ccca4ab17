"""Shared fixtures: an in-memory persistence fake and a deterministic ledger."""

import pytest

from ledger.ids import CounterIdGenerator
from ledger.storage import MemoryStorage
from ledger.store import RecordStore
from ledger.tracker import Ledger


class CountingStorage(MemoryStorage):
    """MemoryStorage that records every save call."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.saves = []

    def save(self, key, text):
        self.saves.append(key)
        super().save(key, text)


@pytest.fixture
def storage():
    return CountingStorage()


@pytest.fixture
def store(storage):
    return RecordStore(storage, CounterIdGenerator())


@pytest.fixture
def ledger(storage, tmp_path):
    return Ledger(storage, id_generator=CounterIdGenerator(), export_dir=tmp_path)
