from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Final


@dataclass(frozen=True)
class Category:
    id: str  # например: "food"
    name: str  # "Food & Dining"
    color: str  # "#FF9800"
    icon: str  # "utensils"


@dataclass(frozen=True)
class User:
    id: str
    username: str
    password: str  # в виде, который вернул CredentialChecker.encode()


@dataclass(frozen=True)
class Expense:
    id: str
    user_id: str
    amount: Decimal
    category_id: str
    description: str
    date: date


CATEGORIES: Final[tuple[Category, ...]] = (
    Category("food", "Food & Dining", "#FF9800", "utensils"),
    Category("transportation", "Transportation", "#2196F3", "car"),
    Category("shopping", "Shopping", "#E91E63", "shopping-bag"),
    Category("entertainment", "Entertainment", "#9C27B0", "film"),
    Category("bills", "Bills & Utilities", "#F44336", "file-invoice"),
    Category("health", "Health", "#4CAF50", "heartbeat"),
    Category("travel", "Travel", "#03A9F4", "plane"),
    Category("education", "Education", "#795548", "graduation-cap"),
    Category("other", "Other", "#607D8B", "ellipsis-h"),
)

CATEGORIES_BY_ID: Final[dict[str, Category]] = {c.id: c for c in CATEGORIES}
