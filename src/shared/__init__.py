# src/shared/__init__.py
"""
Общий код: модели запросов/ответов и ошибки внешних сервисов.
"""

__all__: list[str] = []
