"""
Сборка приложения ExpenseFlow.

create_application() строит весь граф объектов (хранилище, фасад, сессию
и сервисы экранов) и возвращает его вызывающему коду. Глобального
изменяемого состояния нет: каждый вызов даёт независимый экземпляр,
поэтому тесты создают свежее приложение на временном файле.
"""

from dataclasses import dataclass
from pathlib import Path

from expenseflow.config.config import Config
from expenseflow.core.logger import setup_logger
from expenseflow.services.dashboard import DashboardService
from expenseflow.services.transactions import TransactionsService
from expenseflow.session.credentials import get_credential_checker
from expenseflow.session.session import SessionManager
from expenseflow.storage.repository import ExpenseRepository
from expenseflow.storage.storage import KeyValueStore

logger = setup_logger(__name__)


@dataclass
class Application:
    store: KeyValueStore
    repository: ExpenseRepository
    session: SessionManager
    transactions: TransactionsService
    dashboard: DashboardService

    def start(self) -> None:
        """Загрузить данные и восстановить сессию (вызывается один раз при старте)."""
        self.repository.initialize()
        self.session.restore()


def create_application(
    db_path: Path | None = None,
    seed_demo: bool | None = None,
    password_scheme: str | None = None,
) -> Application:
    """
    Создать приложение. Не переданные параметры берутся из Config.

    Parameters
    ----------
    db_path : Path | None, optional
        Файл SQLite с данными.
    seed_demo : bool | None, optional
        Создавать ли демо-пользователя в пустом хранилище.
    password_scheme : str | None, optional
        "plaintext" или "bcrypt".
    """
    store = KeyValueStore(db_path if db_path is not None else Config.DB_PATH)
    repository = ExpenseRepository(
        store,
        credentials=get_credential_checker(password_scheme or Config.PASSWORD_SCHEME),
        seed_demo=Config.SEED_DEMO if seed_demo is None else seed_demo,
        demo_username=Config.DEMO_USERNAME,
        demo_password=Config.DEMO_PASSWORD,
    )
    return Application(
        store=store,
        repository=repository,
        session=SessionManager(repository, store),
        transactions=TransactionsService(repository),
        dashboard=DashboardService(repository),
    )
