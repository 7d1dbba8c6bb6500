"""
Настройка логирования приложения (единая точка входа).

Модуль инкапсулирует конфигурацию стандартного logging, чтобы хранилище,
сессия и сервисы не дублировали настройку форматирования, уровней и
хендлеров.

Основная функция — setup_logger(), которая:
- конфигурирует базовую систему логирования;
- выбирает уровень логов на основе строкового параметра;
- возвращает именованный логгер, готовый к использованию в любом модуле.
"""

import logging
import sys
from typing import Final
from logging import Logger, StreamHandler


LOG_FORMAT: Final[str] = "%(asctime)s [%(levelname)s] %(message)s"

LOG_LEVELS: Final[dict[str, int]] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def resolve_level(level: str) -> int:
    """Перевести строковый уровень в значение logging (по умолчанию INFO)."""
    return LOG_LEVELS.get(level.upper(), logging.INFO)


def setup_logger(name: str = __name__, level: str | None = None) -> Logger:
    """
    Получить логгер модуля и, при необходимости, настроить logging.

    Без параметра level функция только возвращает именованный логгер: модули
    хранилища и сессии вызывают её при импорте и не должны сбрасывать
    конфигурацию, выбранную точкой входа. Если level передан, задаётся
    формат сообщений, вывод в stdout и глобальный уровень через
    logging.basicConfig().

    Parameters
    ----------
    name : str, optional
        Имя логгера, обычно __name__ модуля, который вызывает функцию.
    level : str | None, optional
        Строковый уровень логирования: "DEBUG", "INFO", "WARNING",
        "ERROR" или "CRITICAL". Значения в нижнем регистре также
        поддерживаются. При некорректном значении используется "INFO".

    Returns
    -------
    Logger
        Логгер, готовый к использованию в модуле.
    """
    if level is not None:
        logging.basicConfig(
            level=resolve_level(level),
            format=LOG_FORMAT,
            handlers=[StreamHandler(sys.stdout)],
            force=True,  # Явно перезаписывает предыдущую конфигурацию logging
        )

    return logging.getLogger(name)
