# src/core/access/__init__.py
"""
Авторизация доступа к данным магазина: товары продавца и заказы покупателя.
"""

from src.core.access.order_matcher import match_orders
from src.core.access.ownership import resolve_owned_products

__all__ = ["match_orders", "resolve_owned_products"]
