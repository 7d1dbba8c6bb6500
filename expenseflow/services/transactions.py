"""
Transactions Service
Поиск, фильтрация, сортировка и группировка списка трат
"""

from collections.abc import Iterable
from datetime import date
from enum import StrEnum

from expenseflow.domain.domain import Expense
from expenseflow.storage.repository import ExpenseRepository

ALL_CATEGORIES = "all"


class SortOrder(StrEnum):
    NEWEST = "newest"
    OLDEST = "oldest"
    HIGHEST = "highest"
    LOWEST = "lowest"


class TransactionsService:
    """SRP: сервис списка транзакций."""

    def __init__(self, repository: ExpenseRepository) -> None:
        self._repository = repository

    def list_transactions(
        self,
        user_id: str,
        search: str | None = None,
        category_id: str | None = None,
        sort: SortOrder = SortOrder.NEWEST,
    ) -> list[Expense]:
        """
        Траты пользователя с учётом фильтров.

        Parameters
        ----------
        user_id : str
            Идентификатор пользователя.
        search : str | None, optional
            Подстрока описания (без учёта регистра).
        category_id : str | None, optional
            Категория; None или "all" — без фильтра.
        sort : SortOrder, optional
            Порядок: по дате (newest/oldest) или по сумме (highest/lowest).
        """
        expenses = self._repository.get_expenses(user_id)

        if search:
            needle = search.casefold()
            expenses = [e for e in expenses if needle in e.description.casefold()]

        if category_id and category_id != ALL_CATEGORIES:
            expenses = [e for e in expenses if e.category_id == category_id]

        return sort_expenses(expenses, sort)

    def group_by_date(
        self,
        expenses: Iterable[Expense],
        sort: SortOrder = SortOrder.NEWEST,
    ) -> dict[date, list[Expense]]:
        """
        Сгруппировать траты по дате.

        Внутри группы сохраняется порядок входной последовательности. Даты
        идут от новых к старым, кроме SortOrder.OLDEST.
        """
        groups: dict[date, list[Expense]] = {}
        for expense in expenses:
            groups.setdefault(expense.date, []).append(expense)

        reverse = SortOrder(sort) is not SortOrder.OLDEST
        return {day: groups[day] for day in sorted(groups, reverse=reverse)}


def sort_expenses(expenses: Iterable[Expense], sort: SortOrder) -> list[Expense]:
    """Стабильная сортировка трат в указанном порядке."""
    order = SortOrder(sort)
    if order is SortOrder.NEWEST:
        return sorted(expenses, key=lambda e: e.date, reverse=True)
    if order is SortOrder.OLDEST:
        return sorted(expenses, key=lambda e: e.date)
    if order is SortOrder.HIGHEST:
        return sorted(expenses, key=lambda e: e.amount, reverse=True)
    return sorted(expenses, key=lambda e: e.amount)
