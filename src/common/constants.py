# src/common/constants.py
"""
Общие константы и перечисления.
"""

from enum import Enum


class TypeMsg(str, Enum):
    """Типы сообщений для логирования."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuthMode(str, Enum):
    """Режим проверки подписи Telegram initData."""
    ENFORCED = "enforced"
    BYPASSED = "bypassed"


# Маркер публичного username в Telegram
IDENTITY_MARKER = "@"

# Текстовые поля заказа Tilda, по которым ищется username покупателя
ORDER_TEXT_FIELDS: tuple[str, ...] = (
    "email",
    "phone",
    "name",
    "address",
    "comment",
    "payment_comment",
    "delivery_comment",
)

# Максимальный возраст initData по умолчанию (24 часа)
DEFAULT_INIT_DATA_MAX_AGE = 24 * 3600
