# src/core/auth/telegram_auth.py
"""
Проверка подписи Telegram Mini App initData.

Подпись: HMAC-SHA256 от data-check-string, ключ — SHA-256 от токена бота.
data-check-string — все поля, кроме hash, отсортированные по ключу,
в виде "key=value", разделённые переводом строки.
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Mapping
from urllib.parse import parse_qsl


HASH_FIELD = "hash"
AUTH_DATE_FIELD = "auth_date"


class TelegramAuthError(Exception):
    """Ошибка валидации Telegram данных."""
    pass


class MissingSignature(TelegramAuthError):
    """В initData нет поля hash."""

    def __init__(self) -> None:
        super().__init__("Отсутствует hash в initData")


class SignatureMismatch(TelegramAuthError):
    """Подпись initData не совпала."""

    def __init__(self) -> None:
        super().__init__("Невалидная подпись Telegram")


class MissingOrInvalidAuthDate(TelegramAuthError):
    """auth_date отсутствует, равен нулю или не является числом."""

    def __init__(self) -> None:
        super().__init__("Отсутствует или некорректен auth_date в initData")


class AuthExpired(TelegramAuthError):
    """initData старше допустимого возраста."""

    def __init__(self, age_seconds: int, max_age_seconds: int) -> None:
        self.age_seconds = age_seconds
        self.max_age_seconds = max_age_seconds
        super().__init__("initData устарели")


class AuthConfigurationError(Exception):
    """Сервер не настроен для проверки подписи (нет токена бота)."""
    pass


def parse_init_data(init_data: str | None) -> dict[str, str]:
    """
    Разобрать URL-encoded initData в словарь.

    Пустые значения сохраняются; при повторе ключа берётся первое вхождение.
    """
    payload: dict[str, str] = {}
    for key, value in parse_qsl(init_data or "", keep_blank_values=True):
        payload.setdefault(key, value)
    return payload


def derive_secret_key(bot_token: str) -> bytes:
    """Ключ подписи: SHA-256 от токена бота."""
    return hashlib.sha256(bot_token.encode()).digest()


def build_data_check_string(payload: Mapping[str, str]) -> str:
    """Строка для подписи: все поля кроме hash, по возрастанию ключа."""
    return "\n".join(
        f"{key}={payload[key]}"
        for key in sorted(payload)
        if key != HASH_FIELD
    )


def sign_payload(payload: Mapping[str, str], secret: bytes) -> str:
    """HMAC-SHA256 от data-check-string в нижнем hex."""
    return hmac.new(
        secret,
        build_data_check_string(payload).encode(),
        hashlib.sha256,
    ).hexdigest()


def verify_init_data(
    payload: Mapping[str, str],
    secret: bytes,
    now: float,
    max_age_seconds: int,
) -> None:
    """
    Проверить подпись и свежесть initData.

    Args:
        payload: Разобранные поля initData (включая hash)
        secret: Ключ подписи, см. derive_secret_key()
        now: Текущее время, Unix timestamp в секундах
        max_age_seconds: Максимальный возраст данных

    Raises:
        MissingSignature: Нет поля hash
        SignatureMismatch: Подпись не совпала
        MissingOrInvalidAuthDate: auth_date отсутствует или некорректен
        AuthExpired: Данные устарели
    """
    received_hash = payload.get(HASH_FIELD)
    if not received_hash:
        raise MissingSignature()

    calculated_hash = sign_payload(payload, secret)
    if not hmac.compare_digest(calculated_hash.encode(), received_hash.encode()):
        raise SignatureMismatch()

    try:
        auth_date = int(payload.get(AUTH_DATE_FIELD) or 0)
    except ValueError:
        raise MissingOrInvalidAuthDate()
    if not auth_date:
        raise MissingOrInvalidAuthDate()

    age = int(now - auth_date)
    if now - auth_date > max_age_seconds:
        raise AuthExpired(age, max_age_seconds)
