import sqlite3

import pytest

from expenseflow.core.errors import PersistenceError
from expenseflow.storage.storage import KeyValueStore


def test_missing_key_returns_none(tmp_path):
    store = KeyValueStore(tmp_path / "kv.db")
    assert store.get("users") is None


def test_put_overwrites_value(tmp_path):
    store = KeyValueStore(tmp_path / "kv.db")
    store.put("users", "[]")
    store.put("users", '[{"id": "1"}]')
    assert store.get("users") == '[{"id": "1"}]'


def test_values_survive_reopen(tmp_path):
    path = tmp_path / "kv.db"
    KeyValueStore(path).put_many({"users": "[]", "expenses": "[1]"})

    reopened = KeyValueStore(path)
    assert reopened.get("users") == "[]"
    assert reopened.get("expenses") == "[1]"


def test_delete_reports_whether_key_existed(tmp_path):
    store = KeyValueStore(tmp_path / "kv.db")
    store.put("session", "{}")
    assert store.delete("session") is True
    assert store.delete("session") is False
    assert store.get("session") is None


def test_unopenable_path_raises_persistence_error(tmp_path):
    with pytest.raises(PersistenceError):
        KeyValueStore(tmp_path / "missing-dir" / "kv.db")


def test_failed_batch_keeps_previous_values(tmp_path):
    path = tmp_path / "kv.db"
    store = KeyValueStore(path)
    store.put("users", "old")

    # NOT NULL на value роняет второй INSERT, первый должен откатиться
    with pytest.raises(PersistenceError) as exc_info:
        store.put_many({"users": "new", "expenses": None})  # type: ignore[dict-item]

    assert isinstance(exc_info.value.__cause__, sqlite3.Error)
    assert store.get("users") == "old"
    assert store.get("expenses") is None
