# src/services/__init__.py
"""
HTTP сервисы приложения.

- miniapp_api: backend Telegram Mini App (авторизация, заказы, товары продавца)
"""

__all__: list[str] = []
