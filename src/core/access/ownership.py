# src/core/access/ownership.py
"""
Какими товарами управляет продавец.

Лист ProductOwners: [0] SKU, [1] ID товара в Tilda, [2] username продавца, [3] заметки.
Строки заполняет оператор вручную, поэтому username встречается и с "@", и без.
"""

from __future__ import annotations

from typing import Sequence

from src.core.auth.identity import normalize, same_identity
from src.shared.models.shop import OwnedProduct


SKU_COLUMN = 0
PRODUCT_ID_COLUMN = 1
OWNER_COLUMN = 2


def resolve_owned_products(
    identity: str | None,
    rows: Sequence[Sequence[str]],
) -> list[OwnedProduct]:
    """
    Найти товары продавца.

    Порядок строк сохраняется. Строки без колонки продавца пропускаются.
    Нет совпадений — пустой список.
    """
    if not normalize(identity):
        return []

    owned: list[OwnedProduct] = []
    for row in rows:
        if len(row) <= OWNER_COLUMN:
            continue
        if same_identity(identity, row[OWNER_COLUMN]):
            owned.append(
                OwnedProduct(
                    sku=str(row[SKU_COLUMN]),
                    product_id=str(row[PRODUCT_ID_COLUMN]),
                )
            )
    return owned
