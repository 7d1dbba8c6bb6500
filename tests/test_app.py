import logging
from decimal import Decimal

import pytest

from expenseflow.app import create_application
from expenseflow.config.config import Config
from expenseflow.core.logger import resolve_level, setup_logger
from expenseflow.core.validators import validate_environment
from expenseflow.session.credentials import BcryptCredentials
from expenseflow.session.session import SessionManager, SessionState
from expenseflow.storage.repository import ExpenseRepository


def test_demo_walkthrough(store):
    repository = ExpenseRepository(
        store, seed_demo=True, demo_username="Demo", demo_password="Demo"
    )
    repository.initialize()
    session = SessionManager(repository, store)

    assert session.login("Demo", "Demo") is True
    assert session.state is SessionState.AUTHENTICATED
    user_id = session.require_user().id

    repository.add_expense(user_id, 12.50, "food", "Lunch", "2025-01-10")
    assert repository.get_total_expenses(user_id) == Decimal("12.50")
    assert repository.get_expenses_by_category(user_id) == {"food": Decimal("12.50")}

    session.logout()
    assert session.state is SessionState.UNAUTHENTICATED
    assert session.login("Demo", "wrong") is False
    assert session.state is SessionState.UNAUTHENTICATED


def test_application_restart_keeps_data_and_session(tmp_path):
    path = tmp_path / "app.db"
    app = create_application(path, seed_demo=True, password_scheme="plaintext")
    app.start()
    assert app.session.login(Config.DEMO_USERNAME, Config.DEMO_PASSWORD)
    user_id = app.session.require_user().id
    expense = app.repository.add_expense(user_id, "7.5", "travel", "Metro", "2025-03-03")

    restarted = create_application(path, seed_demo=True, password_scheme="plaintext")
    restarted.start()

    assert restarted.session.is_authenticated
    assert restarted.session.require_user().id == user_id
    assert restarted.repository.get_expenses(user_id) == [expense]
    assert restarted.dashboard.summary(user_id).total == Decimal("7.5")


def test_applications_do_not_share_state(tmp_path):
    first = create_application(tmp_path / "a.db", seed_demo=False)
    second = create_application(tmp_path / "b.db", seed_demo=False)
    first.start()
    second.start()

    first.repository.add_user("alice", "pw")
    assert second.repository.authenticate_user("alice", "pw") is None


def test_bcrypt_scheme_is_wired(tmp_path):
    app = create_application(tmp_path / "app.db", seed_demo=False, password_scheme="bcrypt")
    assert isinstance(app.repository._credentials, BcryptCredentials)


def test_config_rejects_unknown_password_scheme(monkeypatch):
    monkeypatch.setattr(Config, "PASSWORD_SCHEME", "md5")
    with pytest.raises(ValueError):
        validate_environment()


def test_config_rejects_empty_demo_username(monkeypatch):
    monkeypatch.setattr(Config, "PASSWORD_SCHEME", "plaintext")
    monkeypatch.setattr(Config, "SEED_DEMO", True)
    monkeypatch.setattr(Config, "DEMO_USERNAME", "")
    with pytest.raises(ValueError):
        Config.validate()


@pytest.mark.parametrize(
    ("level", "expected"),
    [("debug", logging.DEBUG), ("WARNING", logging.WARNING), ("verbose", logging.INFO)],
)
def test_resolve_level(level, expected):
    assert resolve_level(level) == expected


def test_setup_logger_without_level_keeps_configuration():
    root_handlers = list(logging.getLogger().handlers)
    logger = setup_logger("expenseflow.test")
    assert logger.name == "expenseflow.test"
    assert logging.getLogger().handlers == root_handlers


def test_validate_environment_checks_data_directory(monkeypatch, tmp_path):
    monkeypatch.setattr(Config, "PASSWORD_SCHEME", "plaintext")
    monkeypatch.setattr(Config, "DB_PATH", tmp_path / "missing" / "app.db")
    with pytest.raises(ValueError, match="Каталог"):
        validate_environment()

    monkeypatch.setattr(Config, "DB_PATH", tmp_path / "app.db")
    validate_environment()
