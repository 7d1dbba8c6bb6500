"""
Конфигурация приложения и переменные окружения
"""

from pathlib import Path
from typing import Final
from dotenv import load_dotenv
import os

load_dotenv()

PASSWORD_SCHEMES: Final[tuple[str, ...]] = ("plaintext", "bcrypt")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    DB_PATH: Final[Path] = Path(os.getenv("EXPENSEFLOW_DB_PATH", "expenseflow.db"))
    SEED_DEMO: Final[bool] = _env_flag("EXPENSEFLOW_SEED_DEMO", "true")
    DEMO_USERNAME: Final[str] = os.getenv("EXPENSEFLOW_DEMO_USERNAME", "demo")
    DEMO_PASSWORD: Final[str] = os.getenv("EXPENSEFLOW_DEMO_PASSWORD", "password123")
    PASSWORD_SCHEME: Final[str] = os.getenv("EXPENSEFLOW_PASSWORD_SCHEME", "plaintext")
    LOG_LEVEL: Final[str] = os.getenv("EXPENSEFLOW_LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> None:
        """SRP: проверка значений окружения."""
        if cls.PASSWORD_SCHEME not in PASSWORD_SCHEMES:
            raise ValueError(
                f"❌ Неизвестная схема паролей: {cls.PASSWORD_SCHEME!r} "
                f"(допустимо: {', '.join(PASSWORD_SCHEMES)})"
            )
        if cls.SEED_DEMO and not cls.DEMO_USERNAME:
            raise ValueError("❌ EXPENSEFLOW_DEMO_USERNAME пуст, а демо-режим включён!")
