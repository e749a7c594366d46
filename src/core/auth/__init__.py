# src/core/auth/__init__.py
"""
Проверка подписи Telegram initData и нормализация username.
"""

from src.core.auth.identity import normalize, same_identity, with_marker, without_marker
from src.core.auth.telegram_auth import (
    AuthConfigurationError,
    AuthExpired,
    MissingOrInvalidAuthDate,
    MissingSignature,
    SignatureMismatch,
    TelegramAuthError,
    derive_secret_key,
    parse_init_data,
    verify_init_data,
)

__all__ = [
    "normalize",
    "same_identity",
    "with_marker",
    "without_marker",
    "AuthConfigurationError",
    "AuthExpired",
    "MissingOrInvalidAuthDate",
    "MissingSignature",
    "SignatureMismatch",
    "TelegramAuthError",
    "derive_secret_key",
    "parse_init_data",
    "verify_init_data",
]
