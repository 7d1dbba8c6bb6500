"""
ExpenseFlow Entry Point
Единая точка входа (main)
"""

import sys
from expenseflow.config.config import Config
from expenseflow.core.logger import setup_logger
from expenseflow.core.validators import validate_environment
from expenseflow.app import create_application
from expenseflow.services.dashboard import format_currency


def main() -> None:
    """Главная точка входа: загрузить данные, восстановить сессию, вывести статус."""
    logger = setup_logger("expenseflow", Config.LOG_LEVEL)

    try:
        logger.info("🚀 Запускаем ExpenseFlow...")
        validate_environment()

        app = create_application()
        app.start()

        if app.session.is_authenticated:
            user = app.session.require_user()
            total = app.repository.get_total_expenses(user.id)
            logger.info("👤 %s, всего потрачено %s", user.username, format_currency(total))
        else:
            logger.info("🔒 Сессии нет, требуется вход")

    except KeyboardInterrupt:
        logger.info("🛑 Остановка по Ctrl+C")
    except Exception as e:
        logger.error(f"💥 Критическая ошибка: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
