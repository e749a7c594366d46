# tests/common/test_constants.py
"""
Тесты для модуля констант.
"""

from src.common.constants import (
    AuthMode,
    DEFAULT_INIT_DATA_MAX_AGE,
    IDENTITY_MARKER,
    ORDER_TEXT_FIELDS,
    TypeMsg,
)


class TestTypeMsg:
    """Тесты для enum TypeMsg."""

    def test_type_msg_values(self) -> None:
        assert TypeMsg.DEBUG.value == "debug"
        assert TypeMsg.WARNING.value == "warning"
        assert TypeMsg.CRITICAL.value == "critical"

    def test_type_msg_is_str_enum(self) -> None:
        assert isinstance(TypeMsg.INFO, str)
        assert TypeMsg.INFO == "info"


class TestAuthMode:
    """Тесты для enum AuthMode."""

    def test_values(self) -> None:
        assert AuthMode("enforced") is AuthMode.ENFORCED
        assert AuthMode("bypassed") is AuthMode.BYPASSED
        assert len(list(AuthMode)) == 2


def test_order_text_fields() -> None:
    assert ORDER_TEXT_FIELDS == (
        "email",
        "phone",
        "name",
        "address",
        "comment",
        "payment_comment",
        "delivery_comment",
    )


def test_defaults() -> None:
    assert IDENTITY_MARKER == "@"
    assert DEFAULT_INIT_DATA_MAX_AGE == 86400
