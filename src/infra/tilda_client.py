# src/infra/tilda_client.py
"""
Клиент Tilda Store API (только чтение).

Запросы — POST с form-параметрами publickey/secretkey.
При таймауте, ошибке сети или 5xx запрос повторяется на следующем хосте из списка.
"""

from __future__ import annotations

from typing import Any

import httpx

from src.common.logger import log_debug, log_warning
from src.shared.errors import UpstreamUnavailable


SERVICE_NAME = "tilda"


class TildaClient:
    """Клиент магазина Tilda с переключением на резервный хост."""

    ORDERS_LIST_PATH = "/v2/shop/orders/list"
    PRODUCT_GET_PATH = "/v2/shop/product/get"

    def __init__(
        self,
        public_key: str,
        secret_key: str,
        hosts: list[str],
        timeout: float = 10.0,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.public_key = public_key
        self.secret_key = secret_key
        self.hosts = [host.rstrip("/") for host in hosts]

        # HTTP клиент с таймаутами
        self.http = http or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        """Закрыть HTTP клиент."""
        await self.http.aclose()

    async def _post(self, path: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        """
        POST на первый отвечающий хост.

        Returns:
            JSON ответа; пустой dict, если тело не JSON-объект

        Raises:
            UpstreamUnavailable: Ни один хост не ответил
        """
        form = {
            "publickey": self.public_key,
            "secretkey": self.secret_key,
            **(params or {}),
        }

        last_error = "no hosts configured"
        for host in self.hosts:
            try:
                response = await self.http.post(f"{host}{path}", data=form)
            except httpx.HTTPError as e:
                last_error = f"{host}: {type(e).__name__}"
                await log_warning(f"Tilda request failed, trying next host | {last_error}")
                continue

            if response.status_code >= 500:
                last_error = f"{host}: HTTP {response.status_code}"
                await log_warning(f"Tilda server error, trying next host | {last_error}")
                continue

            try:
                body = response.json()
            except ValueError:
                await log_warning(f"Tilda returned non-JSON body | {host}{path}")
                return {}
            return body if isinstance(body, dict) else {}

        raise UpstreamUnavailable(SERVICE_NAME, last_error)

    async def list_orders(self) -> list[dict[str, Any]]:
        """Все заказы магазина."""
        body = await self._post(self.ORDERS_LIST_PATH)
        result = body.get("result")
        orders = result.get("orders") if isinstance(result, dict) else None
        await log_debug(f"Tilda orders fetched: {len(orders or [])}")
        return list(orders or [])

    async def get_product(self, product_id: str) -> dict[str, Any] | None:
        """Карточка товара или None, если Tilda ничего не вернула."""
        body = await self._post(self.PRODUCT_GET_PATH, {"productid": str(product_id)})
        result = body.get("result")
        return result if isinstance(result, dict) and result else None
