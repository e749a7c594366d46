# src/services/miniapp_api/service.py
"""
Шлюз Mini App: проверка initData и выдача данных магазина,
отфильтрованных по username пользователя.
"""

from __future__ import annotations

import asyncio
import json
import time
from typing import Any, Callable

from src.common.constants import AuthMode, DEFAULT_INIT_DATA_MAX_AGE, TypeMsg
from src.common.logger import log_error, log_info, log_warning
from src.core.access import match_orders, resolve_owned_products
from src.core.auth import (
    AuthConfigurationError,
    SignatureMismatch,
    TelegramAuthError,
    derive_secret_key,
    normalize,
    parse_init_data,
    verify_init_data,
)
from src.core.auth.telegram_auth import HASH_FIELD
from src.core.users import OwnershipRepository, UserRepository
from src.infra.tilda_client import TildaClient
from src.shared.errors import UpstreamUnavailable
from src.shared.models.shop import OwnedProduct, SaleItem
from src.shared.models.user import MeResponse, MeUser, MiniAppRequest, TelegramUser


class MiniAppGate:
    """
    Граница между недоверенным запросом Mini App и данными магазина.

    Каждая операция сначала проверяет подпись initData. Username берётся
    из initDataUnsafe.user; если в подписанных данных есть поле user
    с другим username, это логируется как подозрительный запрос.
    """

    def __init__(
        self,
        *,
        bot_token: str,
        shop: TildaClient,
        users: UserRepository | None = None,
        owners: OwnershipRepository | None = None,
        auth_mode: AuthMode = AuthMode.ENFORCED,
        max_age_seconds: int = DEFAULT_INIT_DATA_MAX_AGE,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.auth_mode = auth_mode
        self.max_age_seconds = max_age_seconds
        self.shop = shop
        self.users = users
        self.owners = owners
        self._bot_token = bot_token
        self._secret = derive_secret_key(bot_token) if bot_token else b""
        self._clock = clock

    async def close(self) -> None:
        await self.shop.close()

    # === АУТЕНТИФИКАЦИЯ ===

    async def authenticate(self, request: MiniAppRequest) -> TelegramUser:
        """
        Проверить initData и вернуть пользователя запроса.

        Raises:
            TelegramAuthError: Подпись или auth_date не прошли проверку
            AuthConfigurationError: Режим ENFORCED без токена бота
        """
        if self.auth_mode is AuthMode.BYPASSED:
            await log_warning("Проверка подписи Telegram отключена (AUTH_MODE=bypassed)")
            return request.user

        if not self._bot_token:
            await log_error("[verify] missing BOT_TOKEN")
            raise AuthConfigurationError("Server misconfigured: no BOT_TOKEN")

        payload = parse_init_data(request.init_data)
        try:
            verify_init_data(payload, self._secret, self._clock(), self.max_age_seconds)
        except SignatureMismatch:
            await log_warning(
                "[verify] mismatch",
                extra={"got_hash": payload.get(HASH_FIELD, "")[:10]},
            )
            raise
        except TelegramAuthError as e:
            await log_warning(f"[verify] {type(e).__name__}: {e}")
            raise

        await self._check_signed_identity(payload, request.user)
        return request.user

    async def _check_signed_identity(self, payload: dict[str, str], user: TelegramUser) -> None:
        """Сравнить username из подписанного поля user с клиентской копией."""
        signed_user = payload.get("user")
        if not signed_user:
            return
        try:
            signed = json.loads(signed_user)
        except ValueError:
            return
        if not isinstance(signed, dict):
            return

        if normalize(signed.get("username")) != normalize(user.username):
            await log_warning(
                "Подозрительный запрос: username в initDataUnsafe не совпадает с подписанным",
                extra={"signed_id": signed.get("id"), "unsafe_id": user.id},
            )

    # === ОПЕРАЦИИ ===

    async def identify(self, request: MiniAppRequest) -> MeResponse:
        """Проверить пользователя и записать его в лист Users (если он настроен)."""
        user = await self.authenticate(request)

        if self.users is not None:
            await self.users.upsert(user)

        return MeResponse(user=MeUser(id=user.id, username=user.username))

    async def list_my_orders(self, request: MiniAppRequest) -> list[dict[str, Any]]:
        """Заказы, в которых упомянут username пользователя."""
        user = await self.authenticate(request)

        if not normalize(user.username):
            return []

        orders = await self.shop.list_orders()
        mine = match_orders(user.username, orders)
        await log_info(
            f"Orders for @{normalize(user.username)}: {len(mine)} of {len(orders)}",
            type_msg=TypeMsg.DEBUG,
        )
        return mine

    async def list_my_products(self, request: MiniAppRequest) -> list[SaleItem]:
        """
        Товары, которыми управляет пользователь-продавец.

        Карточки загружаются параллельно; товар, который не удалось
        загрузить, пропускается. Порядок — как в листе ProductOwners.
        """
        user = await self.authenticate(request)

        if not normalize(user.username):
            return []
        if self.owners is None:
            raise UpstreamUnavailable("google_sheets", "not configured")

        rows = await self.owners.list_rows()
        links = resolve_owned_products(user.username, rows)

        items = await asyncio.gather(*(self._fetch_sale_item(link) for link in links))
        return [item for item in items if item is not None]

    async def _fetch_sale_item(self, link: OwnedProduct) -> SaleItem | None:
        try:
            product = await self.shop.get_product(link.product_id)
        except UpstreamUnavailable as e:
            await log_warning(f"Товар {link.product_id} пропущен: {e}")
            return None

        if not product:
            return None
        return SaleItem.from_product(link, product)
