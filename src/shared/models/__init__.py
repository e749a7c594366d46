# src/shared/models/__init__.py
"""
Pydantic-модели запросов и ответов Mini App.
"""

from src.shared.models.common import ErrorResponse, HealthStatus
from src.shared.models.shop import OrdersResponse, OwnedProduct, SaleItem, SalesResponse
from src.shared.models.user import (
    InitDataUnsafe,
    MeResponse,
    MeUser,
    MiniAppRequest,
    TelegramUser,
    UserRow,
)

__all__ = [
    "ErrorResponse",
    "HealthStatus",
    "OrdersResponse",
    "OwnedProduct",
    "SaleItem",
    "SalesResponse",
    "InitDataUnsafe",
    "MeResponse",
    "MeUser",
    "MiniAppRequest",
    "TelegramUser",
    "UserRow",
]
