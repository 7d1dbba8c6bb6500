"""
Локальное key-value хранилище на SQLite.

Модуль инкапсулирует всю работу с файлом базы данных:
- инициализацию схемы (создание таблицы storage при первом запуске);
- чтение документа по ключу;
- атомарную запись одного или нескольких документов;
- удаление документа.

Основной класс — KeyValueStore. Значения — это строки (JSON-документы
коллекций users/expenses и токен сессии); сериализацией занимаются
вызывающие модули, хранилище о формате ничего не знает.
"""

import sqlite3
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path

from expenseflow.core.errors import PersistenceError
from expenseflow.core.logger import setup_logger

logger = setup_logger(__name__)


class KeyValueStore:
    """
    Key-value хранилище поверх одной таблицы SQLite.

    Каждая запись выполняется в транзакции: либо все переданные ключи
    сохраняются, либо в файле остаются прежние значения. Любая ошибка
    sqlite3 превращается в PersistenceError.

    Parameters
    ----------
    db_path : Path
        Путь к файлу базы данных SQLite. Если файла ещё нет, он будет создан.

    Attributes
    ----------
    _db_path : Path
        Внутренний путь к файлу базы данных, используемый для подключений.
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = Path(db_path)
        self._init_db()

    @property
    def path(self) -> Path:
        return self._db_path

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """
        Создать контекстное подключение к базе данных.

        Открывает соединение при входе в контекст и гарантированно закрывает
        его при выходе. Ошибки открытия файла и выполнения запросов
        поднимаются как PersistenceError.

        Yields
        ------
        sqlite3.Connection
            Активное соединение с базой данных.
        """
        try:
            conn = sqlite3.connect(self._db_path)
        except sqlite3.Error as e:
            raise PersistenceError(f"Не удалось открыть {self._db_path}: {e}") from e
        try:
            yield conn
        except sqlite3.Error as e:
            conn.rollback()
            raise PersistenceError(f"Ошибка хранилища {self._db_path}: {e}") from e
        finally:
            conn.close()

    def _init_db(self) -> None:
        """
        Инициализировать схему базы данных, если она ещё не создана.

        Таблица storage:
        - key: имя документа ("users", "expenses", "session");
        - value: сериализованное значение.
        """
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS storage (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """,
            )
            conn.commit()

    def get(self, key: str) -> str | None:
        """
        Прочитать значение по ключу.

        Parameters
        ----------
        key : str
            Имя документа.

        Returns
        -------
        str | None
            Сохранённое значение или None, если ключа нет.
        """
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM storage WHERE key = ?",
                (key,),
            ).fetchone()
        return None if row is None else row[0]

    def put(self, key: str, value: str) -> None:
        """Записать одно значение (перезаписывает существующее)."""
        self.put_many({key: value})

    def put_many(self, items: Mapping[str, str]) -> None:
        """
        Атомарно записать несколько значений.

        Parameters
        ----------
        items : Mapping[str, str]
            Ключ → новое значение. Все значения пишутся в одной транзакции.

        Raises
        ------
        PersistenceError
            Если запись не удалась; в файле остаются прежние значения.
        """
        with self._connect() as conn:
            conn.executemany(
                """
                INSERT INTO storage (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                list(items.items()),
            )
            conn.commit()
        logger.debug("Сохранены ключи %s в %s", sorted(items), self._db_path)

    def delete(self, key: str) -> bool:
        """Удалить значение; возвращает True, если ключ существовал."""
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM storage WHERE key = ?", (key,))
            conn.commit()
        return cursor.rowcount > 0
