# src/services/miniapp_api/__init__.py
"""
Mini App API — backend для Telegram Mini App магазина.

- Проверка подписи Telegram initData
- Запись пользователей в Google Sheets
- Заказы покупателя и товары продавца из Tilda
"""
