from collections.abc import Mapping
from pathlib import Path

import pytest

from expenseflow.core.errors import PersistenceError
from expenseflow.session.session import SessionManager
from expenseflow.storage.repository import ExpenseRepository
from expenseflow.storage.storage import KeyValueStore


class FlakyStore(KeyValueStore):
    """Хранилище, запись в которое можно «сломать» из теста."""

    def __init__(self, db_path: Path) -> None:
        super().__init__(db_path)
        self.fail_writes = False

    def put_many(self, items: Mapping[str, str]) -> None:
        if self.fail_writes:
            raise PersistenceError("диск недоступен")
        super().put_many(items)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "expenseflow.db"


@pytest.fixture
def store(db_path: Path) -> FlakyStore:
    return FlakyStore(db_path)


@pytest.fixture
def repository(store: FlakyStore) -> ExpenseRepository:
    repo = ExpenseRepository(store)
    repo.initialize()
    return repo


@pytest.fixture
def user(repository: ExpenseRepository):
    return repository.add_user("alice", "secret")


@pytest.fixture
def session(repository: ExpenseRepository, store: FlakyStore) -> SessionManager:
    return SessionManager(repository, store)
