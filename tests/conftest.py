# tests/conftest.py
"""
Общие фикстуры и настройки для тестов.
"""

from __future__ import annotations

import os
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock
from urllib.parse import urlencode

import pytest

# Устанавливаем переменные окружения перед импортом модулей
os.environ.setdefault("BOT_TOKEN", "test_bot_token")
os.environ.pop("AUTH_MODE", None)
os.environ.pop("TELEGRAM_VERIFY_OFF", None)
os.environ.pop("GOOGLE_SA_BASE64", None)
os.environ.pop("GOOGLE_SHEET_ID", None)

from src.core.auth.telegram_auth import derive_secret_key, sign_payload  # noqa: E402
from src.core.users import OwnershipRepository, UserRepository  # noqa: E402
from src.infra.tilda_client import TildaClient  # noqa: E402
from src.services.miniapp_api.service import MiniAppGate  # noqa: E402


BOT_TOKEN = "123456:TEST-token"
NOW = 1_700_000_000


# =============================================================================
# ПОДПИСЬ initData
# =============================================================================

@pytest.fixture
def bot_token() -> str:
    return BOT_TOKEN


@pytest.fixture
def now() -> int:
    """Фиксированное «текущее» время."""
    return NOW


@pytest.fixture
def signed_payload() -> Callable[..., dict[str, str]]:
    """Фабрика подписанных полей initData (уже разобранных)."""

    def make(fields: dict[str, str], token: str = BOT_TOKEN) -> dict[str, str]:
        payload = dict(fields)
        payload["hash"] = sign_payload(payload, derive_secret_key(token))
        return payload

    return make


@pytest.fixture
def init_data(signed_payload: Callable[..., dict[str, str]]) -> Callable[..., str]:
    """Фабрика URL-encoded строки initData, как её отдаёт Telegram WebApp."""

    def make(fields: dict[str, str] | None = None, token: str = BOT_TOKEN) -> str:
        fields = fields if fields is not None else {
            "auth_date": str(NOW),
            "query_id": "AAHdF6IQAAAAAN0XohDhrOrc",
            "user": '{"id":42,"first_name":"Alice","username":"alice"}',
        }
        return urlencode(signed_payload(fields, token))

    return make


# =============================================================================
# ДАННЫЕ МАГАЗИНА
# =============================================================================

@pytest.fixture
def sample_orders() -> list[dict[str, Any]]:
    """Заказы Tilda: username встречается в разных полях и в разном виде."""
    return [
        {"orderid": "1", "email": "alice@example.com", "name": "Alice"},
        {"orderid": "2", "comment": "tg: @Carol", "phone": "+100000"},
        {"orderid": "3", "delivery_comment": "звонить Алисе, telegram ALICE"},
        {"orderid": "4", "email": "bob@example.com", "address": None},
    ]


@pytest.fixture
def owner_rows() -> list[list[str]]:
    """Строки листа ProductOwners."""
    return [
        ["SKU1", "P1", "@bob", "-"],
        ["SKU2", "P2", "carol", "-"],
        ["SKU3", "P3", " @BOB ", "второй товар"],
        ["SKU4", "P4"],
    ]


# =============================================================================
# МОКИ ЗАВИСИМОСТЕЙ
# =============================================================================

@pytest.fixture
def mock_shop() -> MagicMock:
    shop = MagicMock(spec=TildaClient)
    shop.list_orders = AsyncMock(return_value=[])
    shop.get_product = AsyncMock(return_value=None)
    shop.close = AsyncMock()
    return shop


@pytest.fixture
def mock_users() -> MagicMock:
    users = MagicMock(spec=UserRepository)
    users.upsert = AsyncMock(return_value=None)
    return users


@pytest.fixture
def mock_owners(owner_rows: list[list[str]]) -> MagicMock:
    owners = MagicMock(spec=OwnershipRepository)
    owners.list_rows = AsyncMock(return_value=owner_rows)
    return owners


@pytest.fixture
def gate(mock_shop: MagicMock, mock_users: MagicMock, mock_owners: MagicMock) -> MiniAppGate:
    return MiniAppGate(
        bot_token=BOT_TOKEN,
        shop=mock_shop,
        users=mock_users,
        owners=mock_owners,
        clock=lambda: NOW + 60,
    )
