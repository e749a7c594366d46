# src/services/miniapp_api/dependencies.py
"""
Dependency Injection для Mini App API.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.config.loader import Settings
    from src.services.miniapp_api.service import MiniAppGate


# Синглтон
_gate: "MiniAppGate | None" = None


def build_gate(settings: "Settings") -> "MiniAppGate":
    """Собрать шлюз из настроек: хранилище Google Sheets, клиент Tilda."""
    from src.core.users import OwnershipRepository, UserRepository
    from src.infra.google_sheets import SheetsRowStore
    from src.infra.tilda_client import TildaClient
    from src.services.miniapp_api.service import MiniAppGate

    sheets_cfg = settings.google_sheets
    users = owners = None
    if sheets_cfg.is_configured:
        store = SheetsRowStore(
            spreadsheet_id=sheets_cfg.GOOGLE_SHEET_ID,
            service_account_b64=sheets_cfg.GOOGLE_SA_BASE64,
            timeout=sheets_cfg.REQUEST_TIMEOUT,
        )
        users = UserRepository(
            store,
            append_range=sheets_cfg.USERS_APPEND_RANGE,
            read_range=sheets_cfg.USERS_READ_RANGE,
        )
        owners = OwnershipRepository(store, read_range=sheets_cfg.PRODUCT_OWNERS_RANGE)

    shop = TildaClient(
        public_key=settings.shop.TILDA_PUBLIC_KEY,
        secret_key=settings.shop.TILDA_SECRET_KEY,
        hosts=settings.shop.TILDA_API_HOSTS,
        timeout=settings.shop.REQUEST_TIMEOUT,
    )

    return MiniAppGate(
        bot_token=settings.telegram.BOT_TOKEN,
        shop=shop,
        users=users,
        owners=owners,
        auth_mode=settings.telegram.AUTH_MODE,
        max_age_seconds=settings.telegram.INIT_DATA_MAX_AGE,
    )


async def init_dependencies(gate: "MiniAppGate") -> None:
    """Инициализировать зависимости при старте приложения."""
    global _gate
    _gate = gate


def get_gate() -> "MiniAppGate":
    """Получить шлюз Mini App."""
    if _gate is None:
        raise RuntimeError("MiniAppGate не инициализирован. Вызовите init_dependencies()")
    return _gate


async def cleanup_dependencies() -> None:
    """Очистить ресурсы при остановке приложения."""
    global _gate
    if _gate:
        await _gate.close()
        _gate = None
