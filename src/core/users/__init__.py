# src/core/users/__init__.py
"""
Хранилище пользователей и привязок товаров к продавцам.
"""

from src.core.users.repository import OwnershipRepository, UserRepository

__all__ = [
    "OwnershipRepository",
    "UserRepository",
]
