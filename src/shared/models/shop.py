# src/shared/models/shop.py
"""
Модели витрины: привязки товаров к продавцам и товары продавца.
Заказы и товары Tilda передаются как есть (dict) — их схема принадлежит Tilda.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class OwnedProduct(BaseModel):
    """Товар, которым управляет продавец (строка листа ProductOwners)."""

    model_config = ConfigDict(frozen=True)

    sku: str
    product_id: str


class SaleItem(BaseModel):
    """Товар продавца с данными из Tilda."""

    model_config = ConfigDict(populate_by_name=True)

    sku: str
    tilda_id: str = Field(alias="tildaId")
    title: str | None = None
    price: Any = None
    images: list[Any] = Field(default_factory=list)

    @classmethod
    def from_product(cls, link: OwnedProduct, product: dict[str, Any]) -> "SaleItem":
        """
        Собрать товар из карточки Tilda.

        Tilda отдаёт images то списком, то JSON-строкой; всё, что не
        сводится к списку, заменяется пустым списком.
        """
        title = product.get("title")
        return cls(
            sku=link.sku,
            tilda_id=link.product_id,
            title=None if title is None else str(title),
            price=product.get("price"),
            images=_as_image_list(product.get("images")),
        )


def _as_image_list(raw: Any) -> list[Any]:
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return []
    return raw if isinstance(raw, list) else []


class OrdersResponse(BaseModel):
    """Ответ /api/me/orders."""

    orders: list[dict[str, Any]] = Field(default_factory=list)


class SalesResponse(BaseModel):
    """Ответ /api/me/sales."""

    products: list[SaleItem] = Field(default_factory=list)
