# src/core/access/order_matcher.py
"""
Поиск заказов покупателя в общем списке заказов Tilda.

У заказа нет поля с Telegram username, поэтому ищем username подстрокой
в текстовых полях (контакты, адрес, комментарии). Возможны ложные
совпадения: "bob" найдётся и в заказе "bobby".
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from src.common.constants import ORDER_TEXT_FIELDS
from src.core.auth.identity import with_marker, without_marker


def order_haystack(order: Mapping[str, Any]) -> str:
    """Все непустые текстовые поля заказа через пробел, в нижнем регистре."""
    return " ".join(
        str(order[field])
        for field in ORDER_TEXT_FIELDS
        if order.get(field)
    ).lower()


def match_orders(
    identity: str | None,
    orders: Sequence[Mapping[str, Any]],
) -> list[Mapping[str, Any]]:
    """Заказы, в тексте которых упомянут username (с "@" или без)."""
    bare = without_marker(identity)
    if not bare:
        return []
    marked = with_marker(identity)

    matched = []
    for order in orders:
        haystack = order_haystack(order)
        if marked in haystack or bare in haystack:
            matched.append(order)
    return matched
