# src/infra/__init__.py
"""
Инфраструктурный слой.
Работа с внешними сервисами: Google Sheets, Tilda Store API.
"""

from src.infra.google_sheets import SheetsRowStore
from src.infra.tilda_client import TildaClient

__all__ = [
    "SheetsRowStore",
    "TildaClient",
]
