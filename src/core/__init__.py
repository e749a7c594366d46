# src/core/__init__.py
"""
Доменный слой (Core Domain).
Проверка подписи, нормализация username и правила доступа к данным магазина.
"""
