"""
Валидаторы окружения перед запуском приложения
"""

from expenseflow.config.config import Config


def validate_environment() -> None:
    """Проверить конфигурацию и доступность каталога с базой данных."""
    Config.validate()

    data_dir = Config.DB_PATH.resolve().parent
    if not data_dir.is_dir():
        raise ValueError(f"❌ Каталог для базы данных не найден: {data_dir}")
