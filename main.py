#!/usr/bin/env python3
# main.py
"""
Точка входа Mini App API.

Запуск:
    python main.py

Порт по умолчанию: 3000 (переопределяется переменной окружения PORT).
"""

from __future__ import annotations

import uvicorn

from src.common.logger import setup_logging
from src.config import settings


def main() -> None:
    """Запустить Mini App API."""
    setup_logging()

    uvicorn.run(
        "src.services.miniapp_api.app:app",
        host=settings.server.HOST,
        port=settings.server.PORT,
        reload=settings.system.DEBUG,
        log_level=settings.logging.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
