"""
Фасад хранения пользователей и трат.

Модуль инкапсулирует всю работу с данными приложения:
- загрузку коллекций users/expenses из локального хранилища при старте;
- CRUD-операции над тратами и регистрацию пользователей;
- простые агрегаты: общая сумма, суммы по категориям, выборка по датам.

Основной класс — ExpenseRepository. Коллекции живут в памяти и после
каждого изменения целиком записываются в KeyValueStore. Если запись не
удалась, изменение в памяти откатывается и поднимается PersistenceError.
"""

import json
import math
import uuid
from collections.abc import Callable, Iterable
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Final, TypeVar

from expenseflow.core.errors import (
    CategoryNotFoundError,
    DuplicateUsernameError,
    ExpenseNotFoundError,
    PersistenceError,
    UserNotFoundError,
    ValidationError,
)
from expenseflow.core.logger import setup_logger
from expenseflow.domain.domain import CATEGORIES, CATEGORIES_BY_ID, Category, Expense, User
from expenseflow.session.credentials import CredentialChecker, PlaintextCredentials
from expenseflow.storage.storage import KeyValueStore

logger = setup_logger(__name__)

USERS_KEY: Final[str] = "users"
EXPENSES_KEY: Final[str] = "expenses"

T = TypeVar("T")


def parse_calendar_date(value: Any) -> date:
    """
    Привести значение к календарной дате без времени.

    Поддерживаются date, datetime (время отбрасывается) и строки ISO 8601
    ("2025-01-10" или "2025-01-10T12:30:00").

    Raises
    ------
    ValueError
        Если значение нельзя интерпретировать как дату.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            return datetime.fromisoformat(text).date()
    raise ValueError(f"ожидалась дата, получено {type(value).__name__}")


def parse_amount(value: Any) -> Decimal:
    """
    Привести сумму к Decimal и проверить, что она конечна и неотрицательна.

    float переводится через str(), чтобы 12.5 стало Decimal("12.5"),
    а не двоичным приближением.

    Raises
    ------
    ValueError
        Если сумма не число, бесконечна, NaN или меньше нуля.
    """
    if isinstance(value, bool):
        raise ValueError("ожидалось число")
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError("сумма должна быть конечным числом")
        amount = Decimal(str(value))
    elif isinstance(value, (int, Decimal)):
        amount = Decimal(value)
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip().replace(",", "."))
        except InvalidOperation as e:
            raise ValueError("ожидалось число") from e
    else:
        raise ValueError("ожидалось число")

    if not amount.is_finite():
        raise ValueError("сумма должна быть конечным числом")
    if amount < 0:
        raise ValueError("сумма не может быть отрицательной")
    return amount


class ExpenseRepository:
    """
    Единая точка доступа к пользователям, тратам и категориям.

    Экраны приложения и SessionManager работают с данными только через
    этот класс; напрямую в хранилище пишет лишь он (кроме токена сессии).

    Parameters
    ----------
    store : KeyValueStore
        Локальное хранилище, в которое сбрасываются коллекции.
    credentials : CredentialChecker, optional
        Способ хранения и проверки паролей. По умолчанию — открытый текст.
    seed_demo : bool, optional
        Создать демо-пользователя, если хранилище пустое.
    demo_username, demo_password : str, optional
        Учётные данные демо-пользователя.
    """

    def __init__(
        self,
        store: KeyValueStore,
        credentials: CredentialChecker | None = None,
        seed_demo: bool = False,
        demo_username: str = "demo",
        demo_password: str = "password123",
    ) -> None:
        self._store = store
        self._credentials = credentials or PlaintextCredentials()
        self._seed_demo = seed_demo
        self._demo_username = demo_username
        self._demo_password = demo_password
        self._users: list[User] = []
        self._expenses: list[Expense] = []
        self._initialized = False

    # ------------------------------------------------------------------
    # Загрузка и сохранение
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """
        Загрузить коллекции из хранилища.

        Если хранилище пустое, коллекции начинаются пустыми, а в демо-режиме
        создаётся один демо-пользователь. Повреждённый документ считается
        пустым (с предупреждением в логе). Повторный вызов перечитывает
        хранилище и не создаёт демо-пользователя второй раз.

        Raises
        ------
        PersistenceError
            Если хранилище недоступно для чтения или не удалось сохранить
            демо-пользователя.
        """
        users_raw = self._store.get(USERS_KEY)
        expenses_raw = self._store.get(EXPENSES_KEY)

        self._users = self._load_collection(USERS_KEY, users_raw, _user_from_record)
        self._expenses = self._load_collection(
            EXPENSES_KEY, expenses_raw, _expense_from_record
        )

        if users_raw is None and expenses_raw is None and self._seed_demo:
            user = self._append_user(self._demo_username, self._demo_password)
            logger.info("Создан демо-пользователь %s", user.username)

        self._initialized = True
        logger.info(
            "Хранилище загружено: пользователей=%d, трат=%d",
            len(self._users),
            len(self._expenses),
        )

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            self.initialize()

    @staticmethod
    def _load_collection(
        key: str,
        raw: str | None,
        parse: Callable[[dict[str, Any]], T],
    ) -> list[T]:
        if raw is None:
            return []
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError(f"ожидался список, получен {type(data).__name__}")
            return [parse(item) for item in data]
        except (ValueError, KeyError, TypeError, ArithmeticError) as e:
            logger.warning("Документ %r повреждён, считаем его пустым: %s", key, e)
            return []

    def _save_users(self, previous: list[User]) -> None:
        payload = json.dumps([_user_to_record(u) for u in self._users])
        try:
            self._store.put(USERS_KEY, payload)
        except PersistenceError:
            self._users = previous
            logger.error("Не удалось сохранить пользователей", exc_info=True)
            raise

    def _save_expenses(self, previous: list[Expense]) -> None:
        payload = json.dumps([_expense_to_record(e) for e in self._expenses])
        try:
            self._store.put(EXPENSES_KEY, payload)
        except PersistenceError:
            self._expenses = previous
            logger.error("Не удалось сохранить траты", exc_info=True)
            raise

    # ------------------------------------------------------------------
    # Пользователи
    # ------------------------------------------------------------------

    def add_user(self, username: str, password: str) -> User:
        """
        Зарегистрировать пользователя.

        Raises
        ------
        ValidationError
            Пустое имя, пароль не строка, символы без представления в UTF-8
            или пароль длиннее, чем допускает CredentialChecker.
        DuplicateUsernameError
            Имя уже занято (сравнение с учётом регистра).
        PersistenceError
            Не удалось сохранить коллекцию.
        """
        self._ensure_initialized()

        errors: dict[str, str] = {}
        if not isinstance(username, str) or not username.strip():
            errors["username"] = "имя пользователя не может быть пустым"
        elif not _is_utf8(username):
            errors["username"] = "имя пользователя содержит недопустимые символы"
        if not isinstance(password, str):
            errors["password"] = "пароль должен быть строкой"
        elif not _is_utf8(password):
            errors["password"] = "пароль содержит недопустимые символы"
        elif (
            self._credentials.max_password_bytes is not None
            and len(password.encode("utf-8")) > self._credentials.max_password_bytes
        ):
            errors["password"] = (
                f"пароль длиннее {self._credentials.max_password_bytes} байт"
            )
        if errors:
            raise ValidationError(errors)

        if self._find_user_by_name(username) is not None:
            raise DuplicateUsernameError(username)

        user = self._append_user(username, password)
        logger.info("Зарегистрирован пользователь %s", username)
        return user

    def _append_user(self, username: str, password: str) -> User:
        user = User(
            id=str(uuid.uuid4()),
            username=username,
            password=self._credentials.encode(password),
        )
        previous = list(self._users)
        self._users.append(user)
        self._save_users(previous)
        return user

    def authenticate_user(self, username: str, password: str) -> User | None:
        """
        Найти пользователя по точному совпадению имени и пароля.

        Returns
        -------
        User | None
            Найденный пользователь или None. Несовпадение — обычный
            результат, а не ошибка.
        """
        self._ensure_initialized()
        user = self._find_user_by_name(username)
        if user is None or not self._credentials.verify(password, user.password):
            return None
        return user

    def get_user(self, user_id: str) -> User:
        self._ensure_initialized()
        for user in self._users:
            if user.id == user_id:
                return user
        raise UserNotFoundError(user_id)

    def _find_user_by_name(self, username: str) -> User | None:
        for user in self._users:
            if user.username == username:
                return user
        return None

    def _user_exists(self, user_id: Any) -> bool:
        return any(user.id == user_id for user in self._users)

    # ------------------------------------------------------------------
    # Траты
    # ------------------------------------------------------------------

    def add_expense(
        self,
        user_id: str,
        amount: Any,
        category_id: str,
        description: str,
        date: date | str,
    ) -> Expense:
        """
        Добавить трату пользователя.

        Parameters
        ----------
        user_id : str
            Идентификатор существующего пользователя.
        amount : Decimal | int | float | str
            Сумма; должна быть конечной и неотрицательной.
        category_id : str
            Идентификатор одной из фиксированных категорий.
        description : str
            Произвольное описание, сохраняется как есть.
        date : date | str
            Календарная дата или строка "YYYY-MM-DD".

        Returns
        -------
        Expense
            Сохранённая запись со сгенерированным идентификатором.

        Raises
        ------
        ValidationError
            Со списком всех некорректных полей.
        PersistenceError
            Не удалось сохранить коллекцию; трата не добавлена.
        """
        self._ensure_initialized()
        expense = self._build_expense(
            str(uuid.uuid4()), user_id, amount, category_id, description, date
        )

        previous = list(self._expenses)
        self._expenses.append(expense)
        self._save_expenses(previous)

        logger.info(
            "Трата добавлена: user=%s, %s (%s)",
            expense.user_id,
            expense.amount,
            expense.category_id,
        )
        return expense

    def _build_expense(
        self,
        expense_id: str,
        user_id: Any,
        amount: Any,
        category_id: Any,
        description: Any,
        expense_date: Any,
    ) -> Expense:
        errors: dict[str, str] = {}

        if not self._user_exists(user_id):
            errors["user_id"] = "пользователь не найден"

        parsed_amount = Decimal(0)
        try:
            parsed_amount = parse_amount(amount)
        except ValueError as e:
            errors["amount"] = str(e)

        if category_id not in CATEGORIES_BY_ID:
            errors["category_id"] = "неизвестная категория"

        if description is None:
            description = ""
        if not isinstance(description, str):
            errors["description"] = "описание должно быть строкой"

        parsed_date = date.min
        try:
            parsed_date = parse_calendar_date(expense_date)
        except ValueError:
            errors["date"] = "ожидалась дата в формате YYYY-MM-DD"

        if errors:
            raise ValidationError(errors)

        return Expense(
            id=expense_id,
            user_id=user_id,
            amount=parsed_amount,
            category_id=category_id,
            description=description,
            date=parsed_date,
        )

    def get_expenses(self, user_id: str) -> list[Expense]:
        """Все траты пользователя в порядке добавления."""
        self._ensure_initialized()
        return [e for e in self._expenses if e.user_id == user_id]

    def get_expense(self, expense_id: str) -> Expense:
        self._ensure_initialized()
        return self._expenses[self._index_of(expense_id)]

    def _index_of(self, expense_id: str) -> int:
        for index, expense in enumerate(self._expenses):
            if expense.id == expense_id:
                return index
        raise ExpenseNotFoundError(expense_id)

    def update_expense(self, expense: Expense) -> Expense:
        """
        Полностью заменить запись с тем же идентификатором.

        Поля проверяются так же, как в add_expense(). Позиция записи
        в порядке хранения не меняется.

        Raises
        ------
        ExpenseNotFoundError
            Записи с таким идентификатором нет; коллекция не меняется.
        ValidationError
            Новые значения полей некорректны.
        PersistenceError
            Не удалось сохранить коллекцию; изменение отменено.
        """
        self._ensure_initialized()
        index = self._index_of(expense.id)
        updated = self._build_expense(
            expense.id,
            expense.user_id,
            expense.amount,
            expense.category_id,
            expense.description,
            expense.date,
        )

        previous = list(self._expenses)
        self._expenses[index] = updated
        self._save_expenses(previous)

        logger.info("Трата обновлена: id=%s", updated.id)
        return updated

    def delete_expense(self, expense_id: str) -> bool:
        """
        Удалить трату.

        Returns
        -------
        bool
            True, если запись была удалена; False, если её не было.
        """
        self._ensure_initialized()
        try:
            index = self._index_of(expense_id)
        except ExpenseNotFoundError:
            return False

        previous = list(self._expenses)
        del self._expenses[index]
        self._save_expenses(previous)

        logger.info("Трата удалена: id=%s", expense_id)
        return True

    # ------------------------------------------------------------------
    # Категории
    # ------------------------------------------------------------------

    def get_categories(self) -> list[Category]:
        return list(CATEGORIES)

    def get_category(self, category_id: str) -> Category:
        try:
            return CATEGORIES_BY_ID[category_id]
        except KeyError:
            raise CategoryNotFoundError(category_id) from None

    # ------------------------------------------------------------------
    # Агрегаты
    # ------------------------------------------------------------------

    def get_expenses_by_category(self, user_id: str) -> dict[str, Decimal]:
        """
        Суммы трат пользователя по категориям.

        Returns
        -------
        dict[str, Decimal]
            {category_id: total_amount}. Категорий без трат в словаре нет.
        """
        summary: dict[str, Decimal] = {}
        for expense in self.get_expenses(user_id):
            summary[expense.category_id] = (
                summary.get(expense.category_id, Decimal(0)) + expense.amount
            )
        return summary

    def get_expenses_by_date_range(
        self,
        user_id: str,
        start: date | str,
        end: date | str,
    ) -> list[Expense]:
        """
        Траты пользователя с датой в интервале [start, end] включительно.

        Raises
        ------
        ValidationError
            Границы не разбираются как даты или end раньше start.
        """
        errors: dict[str, str] = {}
        parsed: dict[str, date] = {}
        for name, value in (("start", start), ("end", end)):
            try:
                parsed[name] = parse_calendar_date(value)
            except ValueError:
                errors[name] = "ожидалась дата в формате YYYY-MM-DD"
        if not errors and parsed["end"] < parsed["start"]:
            errors["end"] = "конец интервала раньше начала"
        if errors:
            raise ValidationError(errors)

        return [
            e
            for e in self.get_expenses(user_id)
            if parsed["start"] <= e.date <= parsed["end"]
        ]

    def get_total_expenses(self, user_id: str) -> Decimal:
        return _sum_amounts(self.get_expenses(user_id))


def _is_utf8(text: str) -> bool:
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def _sum_amounts(expenses: Iterable[Expense]) -> Decimal:
    return sum((e.amount for e in expenses), Decimal(0))


def _user_to_record(user: User) -> dict[str, str]:
    return {"id": user.id, "username": user.username, "password": user.password}


def _user_from_record(record: dict[str, Any]) -> User:
    return User(
        id=str(record["id"]),
        username=str(record["username"]),
        password=str(record["password"]),
    )


def _expense_to_record(expense: Expense) -> dict[str, str]:
    return {
        "id": expense.id,
        "user_id": expense.user_id,
        "amount": str(expense.amount),
        "category_id": expense.category_id,
        "description": expense.description,
        "date": expense.date.isoformat(),
    }


def _expense_from_record(record: dict[str, Any]) -> Expense:
    category_id = str(record["category_id"])
    if category_id not in CATEGORIES_BY_ID:
        raise ValueError(f"неизвестная категория {category_id!r}")
    return Expense(
        id=str(record["id"]),
        user_id=str(record["user_id"]),
        amount=parse_amount(str(record["amount"])),
        category_id=category_id,
        description=str(record["description"]),
        date=date.fromisoformat(record["date"]),
    )
