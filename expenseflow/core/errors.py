"""
Иерархия исключений ExpenseFlow.

Все ошибки фасада хранения и сессии локальны и восстановимы: вызывающий
код (экран приложения) показывает их пользователю, а состояние в памяти
остаётся таким же, как до вызова. Неудачный вход исключением не считается.
"""

from collections.abc import Mapping


class ExpenseFlowError(Exception):
    """Базовое исключение приложения."""


class NotFoundError(ExpenseFlowError):
    """Запись с указанным идентификатором не найдена."""

    template: str = "Запись {identifier!r} не найдена"

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(self.template.format(identifier=identifier))


class UserNotFoundError(NotFoundError):
    template = "Пользователь {identifier!r} не найден"


class ExpenseNotFoundError(NotFoundError):
    template = "Трата {identifier!r} не найдена"


class CategoryNotFoundError(NotFoundError):
    template = "Категория {identifier!r} не найдена"


class ValidationError(ExpenseFlowError):
    """
    Некорректные входные данные.

    Attributes
    ----------
    fields : dict[str, str]
        Имя поля → описание проблемы. Содержит все найденные ошибки сразу,
        а не только первую.
    """

    def __init__(self, fields: Mapping[str, str]) -> None:
        self.fields: dict[str, str] = dict(fields)
        details = "; ".join(f"{name}: {reason}" for name, reason in self.fields.items())
        super().__init__(f"Некорректные данные ({details})")


class DuplicateUsernameError(ExpenseFlowError):
    """Пользователь с таким именем уже зарегистрирован."""

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(f"Имя пользователя {username!r} уже занято")


class PersistenceError(ExpenseFlowError):
    """Не удалось прочитать или записать локальное хранилище."""


class NotAuthenticatedError(ExpenseFlowError):
    """Операция требует активной сессии."""
