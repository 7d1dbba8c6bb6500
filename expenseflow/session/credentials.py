"""
Проверка учётных данных.

Фасад хранения не сравнивает пароли сам: он хранит то, что вернул
encode(), и спрашивает verify() при входе. По умолчанию используется
PlaintextCredentials (пароль хранится как есть, как в демо-версии),
BcryptCredentials включается через EXPENSEFLOW_PASSWORD_SCHEME=bcrypt.

verify() никогда не бросает исключений: любое несовпадение, в том числе
пароль, который нельзя закодировать в UTF-8, — это просто False.
"""

import hmac
from typing import Protocol

import bcrypt


class CredentialChecker(Protocol):
    # Ограничение длины пароля в байтах UTF-8 (None — без ограничения)
    max_password_bytes: int | None

    def encode(self, password: str) -> str: ...

    def verify(self, password: str, stored: str) -> bool: ...


class PlaintextCredentials:
    """Пароль хранится открытым текстом. Только для демо-данных."""

    max_password_bytes: int | None = None

    def encode(self, password: str) -> str:
        return password

    def verify(self, password: str, stored: str) -> bool:
        try:
            return hmac.compare_digest(password.encode("utf-8"), stored.encode("utf-8"))
        except UnicodeEncodeError:
            return False


class BcryptCredentials:
    """Пароль хранится в виде bcrypt-хэша."""

    max_password_bytes: int | None = 72

    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds

    def encode(self, password: str) -> str:
        return bcrypt.hashpw(
            password.encode("utf-8"),
            bcrypt.gensalt(rounds=self._rounds),
        ).decode("utf-8")

    def verify(self, password: str, stored: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), stored.encode("utf-8"))
        except ValueError:
            # Не bcrypt-хэш, пароль длиннее 72 байт или не кодируется в UTF-8
            return False


def get_credential_checker(scheme: str) -> CredentialChecker:
    """Вернуть реализацию по имени схемы ("plaintext" или "bcrypt")."""
    if scheme == "plaintext":
        return PlaintextCredentials()
    if scheme == "bcrypt":
        return BcryptCredentials()
    raise ValueError(f"Неизвестная схема паролей: {scheme!r}")
