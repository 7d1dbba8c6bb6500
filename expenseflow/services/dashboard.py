"""
Dashboard Service
Сводка для главного экрана: общая сумма, разбивка по категориям, последние траты
"""

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Final

from expenseflow.core.logger import setup_logger
from expenseflow.core.errors import CategoryNotFoundError
from expenseflow.domain.domain import Category, Expense
from expenseflow.services.transactions import SortOrder, sort_expenses
from expenseflow.storage.repository import ExpenseRepository

logger = setup_logger(__name__)

CURRENCY_SYMBOLS: Final[dict[str, str]] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "RUB": "₽",
}

UNKNOWN_CATEGORY: Final[Category] = Category("unknown", "Unknown", "#cccccc", "question")


@dataclass(frozen=True)
class CategorySpend:
    category: Category
    amount: Decimal


@dataclass(frozen=True)
class DashboardSummary:
    total: Decimal
    by_category: list[CategorySpend]
    recent: list[Expense]


class DashboardService:
    """SRP: сводка по тратам пользователя."""

    def __init__(self, repository: ExpenseRepository) -> None:
        self._repository = repository

    def summary(self, user_id: str, recent_limit: int = 3) -> DashboardSummary:
        """Собрать данные главного экрана."""
        expenses = self._repository.get_expenses(user_id)
        by_category = self.category_breakdown(user_id)
        recent = sort_expenses(expenses, SortOrder.NEWEST)[: max(recent_limit, 0)]

        return DashboardSummary(
            total=self._repository.get_total_expenses(user_id),
            by_category=by_category,
            recent=recent,
        )

    def category_breakdown(self, user_id: str) -> list[CategorySpend]:
        """Суммы по категориям для диаграммы, от большей к меньшей."""
        totals = self._repository.get_expenses_by_category(user_id)
        items = [
            CategorySpend(self._resolve_category(category_id), amount)
            for category_id, amount in totals.items()
        ]
        return sorted(items, key=lambda item: item.amount, reverse=True)

    def daily_totals(
        self,
        user_id: str,
        days: int = 7,
        today: date | None = None,
    ) -> list[tuple[date, Decimal]]:
        """
        Суммы трат по дням за последние days дней (включая сегодня).

        Дни без трат присутствуют с нулевой суммой, порядок — от старых
        к новым, как на графике «Last 7 Days».
        """
        if days < 1:
            return []
        end = today or date.today()
        start = end - timedelta(days=days - 1)

        totals = {start + timedelta(days=offset): Decimal(0) for offset in range(days)}
        for expense in self._repository.get_expenses_by_date_range(user_id, start, end):
            totals[expense.date] += expense.amount
        return list(totals.items())

    def _resolve_category(self, category_id: str) -> Category:
        try:
            return self._repository.get_category(category_id)
        except CategoryNotFoundError:
            logger.warning("Неизвестная категория в данных: %s", category_id)
            return UNKNOWN_CATEGORY


def format_currency(amount: Decimal | float, currency: str = "USD") -> str:
    """
    Отформатировать сумму для отображения: 1234.5 → "$1,234.50".

    Неизвестная валюта выводится кодом после суммы: "1,234.50 CHF".
    """
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    digits = f"{abs(value):,.2f}"
    symbol = CURRENCY_SYMBOLS.get(currency.upper())
    if symbol is None:
        return f"{sign}{digits} {currency.upper()}"
    return f"{sign}{symbol}{digits}"
