# src/shared/errors.py
"""
Ошибки внешних зависимостей (Google Sheets, Tilda).
"""

from __future__ import annotations


class UpstreamUnavailable(Exception):
    """Внешний сервис недоступен (после всех попыток, включая резервный хост)."""

    def __init__(self, service: str, reason: str) -> None:
        self.service = service
        self.reason = reason
        super().__init__(f"{service} недоступен: {reason}")
