import logging
import sqlite3

import pytest

from saveup_api.app.core.config import Settings
from saveup_api.app.core.errors import ValidationError
from saveup_api.app.store import FallbackStore, MemoryStore, SQLiteStore, build_store


class BrokenStore(MemoryStore):
    """Primary store whose every storage access fails."""

    name = "broken"

    def __init__(self):
        super().__init__()
        self.attempts = 0

    def _fail(self):
        self.attempts += 1
        raise sqlite3.OperationalError("database is locked")

    def _insert(self, entity, values):
        self._fail()

    def _select(self, entity, filters, order_by, limit):
        self._fail()

    def _update_row(self, entity, record_id, values):
        self._fail()


def test_failed_primary_call_is_replayed_on_fallback(caplog):
    primary, fallback = BrokenStore(), MemoryStore()
    store = FallbackStore(primary, fallback)

    with caplog.at_level(logging.ERROR):
        created = store.create("portfolios", {"userId": 1, "name": "Growth", "type": "equity"})

    assert primary.attempts == 1
    assert fallback.get("portfolios", created["id"]) == created
    assert store.get_by_owner("portfolios", 1) == [created]
    assert "retrying" in caplog.text


def test_validation_errors_are_not_replayed():
    primary, fallback = BrokenStore(), MemoryStore()
    store = FallbackStore(primary, fallback)

    with pytest.raises(ValidationError):
        store.create("portfolios", {"userId": 1})

    assert primary.attempts == 0
    assert fallback.find("portfolios") == []


def test_working_primary_is_used():
    primary, fallback = MemoryStore(), MemoryStore()
    store = FallbackStore(primary, fallback)

    created = store.create("budgets", {"userId": 1, "category": "food", "monthlyLimit": "100"})
    store.update("budgets", created["id"], {"currentSpent": "20"})

    assert primary.get("budgets", created["id"])["currentSpent"] == "20.00"
    assert fallback.find("budgets") == []
    assert store.name == "memory"


def test_unavailable_sqlite_falls_back(tmp_path):
    primary = SQLiteStore(str(tmp_path / "missing-dir" / "saveup.db"))
    store = FallbackStore(primary, MemoryStore())

    store.initialize()

    assert primary.available is False
    assert store.name == "memory (fallback)"
    user = store.create_user({"email": "a@x.com", "username": "a", "name": "A", "password": "pw"})
    assert store.get_user_by_email("a@x.com")["id"] == user["id"]


def test_sqlite_primary_persists(tmp_path):
    path = str(tmp_path / "saveup.db")
    store = FallbackStore(SQLiteStore(path), MemoryStore())
    store.initialize()
    created = store.create("transactions", {"userId": 1, "type": "roundup", "amount": "3.50"})

    reopened = SQLiteStore(path)
    reopened.initialize()

    assert reopened.get("transactions", created["id"]) == created
    assert store.name == "sqlite"


def test_build_store_selects_strategy():
    assert isinstance(build_store(Settings(storage_backend="memory")), MemoryStore)
    store = build_store(Settings(storage_backend="sqlite"))
    assert isinstance(store, FallbackStore)
    assert isinstance(store.primary, SQLiteStore)
    assert isinstance(store.fallback, MemoryStore)
