"""
Сессия пользователя: вход, выход и восстановление после перезапуска.

SessionManager хранит личность текущего пользователя и сохраняет её
в локальное хранилище под ключом "session", чтобы после перезапуска
приложение сразу открывалось без повторного ввода пароля.

Состояния:
- UNAUTHENTICATED — начальное, никто не вошёл;
- LOADING — только во время restore();
- AUTHENTICATED — известен SessionUser.
"""

import json
from dataclasses import dataclass
from enum import StrEnum
from typing import Final

from expenseflow.core.errors import NotAuthenticatedError, PersistenceError
from expenseflow.core.logger import setup_logger
from expenseflow.storage.repository import ExpenseRepository
from expenseflow.storage.storage import KeyValueStore

logger = setup_logger(__name__)

SESSION_KEY: Final[str] = "session"


class SessionState(StrEnum):
    UNAUTHENTICATED = "unauthenticated"
    LOADING = "loading"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class SessionUser:
    id: str
    username: str


class SessionManager:
    """
    Конечный автомат сессии.

    Проверка логина и пароля делегируется ExpenseRepository.authenticate_user();
    сам менеджер пишет в хранилище только токен сессии.

    Parameters
    ----------
    repository : ExpenseRepository
        Фасад хранения, по которому проверяются учётные данные.
    store : KeyValueStore
        Хранилище, в котором живёт токен сессии.
    """

    def __init__(self, repository: ExpenseRepository, store: KeyValueStore) -> None:
        self._repository = repository
        self._store = store
        self._state = SessionState.UNAUTHENTICATED
        self._user: SessionUser | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def user(self) -> SessionUser | None:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._state is SessionState.AUTHENTICATED

    @property
    def is_loading(self) -> bool:
        return self._state is SessionState.LOADING

    def require_user(self) -> SessionUser:
        """Для route guard: текущий пользователь или NotAuthenticatedError."""
        if self._user is None:
            raise NotAuthenticatedError("Требуется вход в приложение")
        return self._user

    def restore(self) -> SessionState:
        """
        Восстановить сессию из хранилища при старте приложения.

        Учётные данные повторно не проверяются: достаточно корректного
        токена. Повреждённый токен удаляется, а сессия остаётся
        неавторизованной.

        Returns
        -------
        SessionState
            Состояние после восстановления.
        """
        self._state = SessionState.LOADING
        self._user = None
        try:
            raw = self._store.get(SESSION_KEY)
        except PersistenceError:
            self._state = SessionState.UNAUTHENTICATED
            raise

        user = self._parse_token(raw)
        if user is None:
            self._state = SessionState.UNAUTHENTICATED
            if raw is not None:
                logger.warning("Токен сессии повреждён, требуется повторный вход")
                self._store.delete(SESSION_KEY)
            return self._state

        self._user = user
        self._state = SessionState.AUTHENTICATED
        logger.info("Сессия восстановлена: user=%s", user.username)
        return self._state

    @staticmethod
    def _parse_token(raw: str | None) -> SessionUser | None:
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            return None
        if not isinstance(data, dict):
            return None
        user_id, username = data.get("id"), data.get("username")
        if not isinstance(user_id, str) or not isinstance(username, str):
            return None
        return SessionUser(id=user_id, username=username)

    def login(self, username: str, password: str) -> bool:
        """
        Войти по логину и паролю.

        Returns
        -------
        bool
            True при успешном входе. Неверные данные — False, а не
            исключение; текущее состояние не меняется.

        Raises
        ------
        PersistenceError
            Вход подтверждён, но токен не удалось сохранить; состояние
            сессии не меняется.
        """
        user = self._repository.authenticate_user(username, password)
        if user is None:
            logger.warning("Неудачная попытка входа: user=%s", username)
            return False

        session_user = SessionUser(id=user.id, username=user.username)
        self._store.put(
            SESSION_KEY,
            json.dumps({"id": session_user.id, "username": session_user.username}),
        )
        self._user = session_user
        self._state = SessionState.AUTHENTICATED
        logger.info("Вход выполнен: user=%s", user.username)
        return True

    def logout(self) -> None:
        """Завершить сессию и удалить токен. Повторный вызов безопасен."""
        was_authenticated = self.is_authenticated
        self._store.delete(SESSION_KEY)
        self._user = None
        self._state = SessionState.UNAUTHENTICATED
        if was_authenticated:
            logger.info("Выход из приложения")
