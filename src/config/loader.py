# src/config/loader.py
"""
Загрузчик конфигурации проекта.
Единственный источник истины для несекретных значений — config/config.json.
Секреты (токен бота, ключи Google и Tilda) переопределяются из переменных окружения.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from src.common.constants import AuthMode, DEFAULT_INIT_DATA_MAX_AGE


# =============================================================================
# ОПРЕДЕЛЕНИЕ ПУТЕЙ
# =============================================================================

def get_project_root() -> Path:
    """Возвращает корневую директорию проекта."""
    return Path(__file__).parent.parent.parent


def get_config_path() -> Path:
    """Возвращает путь к файлу конфигурации."""
    return get_project_root() / "config" / "config.json"


def load_config_json(path: Path | None = None) -> dict[str, Any]:
    """Загружает config.json и возвращает словарь без ключей-комментариев."""
    config_path = path or get_config_path()
    if not config_path.exists():
        raise FileNotFoundError(f"Файл конфигурации не найден: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    return {k: v for k, v in data.items() if not k.startswith("_comment_")}


# =============================================================================
# PYDANTIC МОДЕЛИ КОНФИГУРАЦИИ
# =============================================================================

class SystemSettings(BaseModel):
    """Системные настройки."""
    PROJECT_NAME: str = "miniapp_backend"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"


class ServerSettings(BaseModel):
    """Настройки HTTP сервера."""
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    CORS_ALLOW_ORIGINS: list[str] = Field(default_factory=lambda: ["*"])

    @field_validator("CORS_ALLOW_ORIGINS", mode="before")
    @classmethod
    def split_origins(cls, v: str | list[str]) -> list[str]:
        """Разрешает задавать список доменов строкой через запятую."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v


class LoggingSettings(BaseModel):
    """Настройки логирования."""
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "colored"
    LOG_TO_FILE: bool = False
    LOG_FILE_PATH: str = "logs/app.log"
    LOG_MAX_BYTES: int = 10485760
    LOG_BACKUP_COUNT: int = 5


class TelegramSettings(BaseModel):
    """Настройки проверки Telegram Mini App initData."""
    BOT_TOKEN: str = ""
    AUTH_MODE: AuthMode = AuthMode.ENFORCED
    INIT_DATA_MAX_AGE: int = DEFAULT_INIT_DATA_MAX_AGE

    @field_validator("BOT_TOKEN", mode="before")
    @classmethod
    def get_from_env(cls, v: str) -> str:
        """Получает токен из переменных окружения, если не задан."""
        if not v:
            return os.getenv("BOT_TOKEN", "")
        return v

    @field_validator("AUTH_MODE", mode="before")
    @classmethod
    def parse_auth_mode(cls, v: Any) -> AuthMode:
        """Пустое значение — всегда ENFORCED."""
        if not v:
            return AuthMode.ENFORCED
        return AuthMode(str(v).lower())


class GoogleSheetsSettings(BaseModel):
    """Настройки Google Sheets (хранилище пользователей и владельцев товаров)."""
    GOOGLE_SA_BASE64: str = ""
    GOOGLE_SHEET_ID: str = ""
    USERS_APPEND_RANGE: str = "Users!A1"
    USERS_READ_RANGE: str = "Users!A2:H"
    PRODUCT_OWNERS_RANGE: str = "ProductOwners!A2:D"
    REQUEST_TIMEOUT: float = 10.0

    @property
    def is_configured(self) -> bool:
        """Заданы ли таблица и сервисный аккаунт."""
        return bool(self.GOOGLE_SHEET_ID and self.GOOGLE_SA_BASE64)


class ShopSettings(BaseModel):
    """Настройки Tilda Store API."""
    TILDA_PUBLIC_KEY: str = ""
    TILDA_SECRET_KEY: str = ""
    TILDA_API_HOSTS: list[str] = Field(
        default_factory=lambda: ["https://api.tilda.cc", "https://api2.tilda.cc"]
    )
    REQUEST_TIMEOUT: float = 10.0

    @field_validator("TILDA_API_HOSTS", mode="before")
    @classmethod
    def split_hosts(cls, v: str | list[str]) -> list[str]:
        """Основной хост первым, резервные — следом."""
        if isinstance(v, str):
            v = [item.strip() for item in v.split(",") if item.strip()]
        return [host.rstrip("/") for host in v]


# =============================================================================
# ГЛАВНЫЙ КЛАСС НАСТРОЕК
# =============================================================================

def _resolve_auth_mode(data: dict[str, Any]) -> str:
    """
    AUTH_MODE из окружения или config.json.
    Устаревший флаг TELEGRAM_VERIFY_OFF=1 включает режим BYPASSED.
    """
    mode = os.getenv("AUTH_MODE") or data.get("AUTH_MODE") or ""
    if not mode and os.getenv("TELEGRAM_VERIFY_OFF") == "1":
        mode = AuthMode.BYPASSED.value
    return mode


class Settings(BaseSettings):
    """
    Главный класс настроек приложения.
    Агрегирует все секции конфигурации.
    """
    system: SystemSettings = Field(default_factory=SystemSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    telegram: TelegramSettings = Field(default_factory=TelegramSettings)
    google_sheets: GoogleSheetsSettings = Field(default_factory=GoogleSheetsSettings)
    shop: ShopSettings = Field(default_factory=ShopSettings)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @classmethod
    def from_config_json(cls, path: Path | None = None) -> "Settings":
        """
        Создаёт объект Settings из config.json.
        Секреты и порт переопределяются из переменных окружения.
        """
        data = load_config_json(path)

        return cls(
            system=SystemSettings(
                PROJECT_NAME=data.get("PROJECT_NAME", "miniapp_backend"),
                VERSION=data.get("VERSION", "1.0.0"),
                DEBUG=data.get("DEBUG", False),
                ENVIRONMENT=os.getenv("ENVIRONMENT", data.get("ENVIRONMENT", "development")),
            ),
            server=ServerSettings(
                HOST=os.getenv("HOST", data.get("HOST", "0.0.0.0")),
                PORT=int(os.getenv("PORT", data.get("PORT", 3000))),
                CORS_ALLOW_ORIGINS=os.getenv("CORS_ALLOW_ORIGINS") or data.get("CORS_ALLOW_ORIGINS", ["*"]),
            ),
            logging=LoggingSettings(
                LOG_LEVEL=os.getenv("LOG_LEVEL", data.get("LOG_LEVEL", "INFO")),
                LOG_FORMAT=data.get("LOG_FORMAT", "colored"),
                LOG_TO_FILE=data.get("LOG_TO_FILE", False),
                LOG_FILE_PATH=data.get("LOG_FILE_PATH", "logs/app.log"),
                LOG_MAX_BYTES=data.get("LOG_MAX_BYTES", 10485760),
                LOG_BACKUP_COUNT=data.get("LOG_BACKUP_COUNT", 5),
            ),
            telegram=TelegramSettings(
                BOT_TOKEN=os.getenv("BOT_TOKEN", data.get("BOT_TOKEN", "")),
                AUTH_MODE=_resolve_auth_mode(data),
                INIT_DATA_MAX_AGE=data.get("INIT_DATA_MAX_AGE", DEFAULT_INIT_DATA_MAX_AGE),
            ),
            google_sheets=GoogleSheetsSettings(
                GOOGLE_SA_BASE64=os.getenv("GOOGLE_SA_BASE64", data.get("GOOGLE_SA_BASE64", "")),
                GOOGLE_SHEET_ID=os.getenv("GOOGLE_SHEET_ID", data.get("GOOGLE_SHEET_ID", "")),
                USERS_APPEND_RANGE=data.get("USERS_APPEND_RANGE", "Users!A1"),
                USERS_READ_RANGE=data.get("USERS_READ_RANGE", "Users!A2:H"),
                PRODUCT_OWNERS_RANGE=data.get("PRODUCT_OWNERS_RANGE", "ProductOwners!A2:D"),
                REQUEST_TIMEOUT=data.get("SHEETS_REQUEST_TIMEOUT", 10.0),
            ),
            shop=ShopSettings(
                TILDA_PUBLIC_KEY=os.getenv("TILDA_PUBLIC_KEY", data.get("TILDA_PUBLIC_KEY", "")),
                TILDA_SECRET_KEY=os.getenv("TILDA_SECRET_KEY", data.get("TILDA_SECRET_KEY", "")),
                TILDA_API_HOSTS=os.getenv("TILDA_API_HOSTS") or data.get(
                    "TILDA_API_HOSTS", ["https://api.tilda.cc", "https://api2.tilda.cc"]
                ),
                REQUEST_TIMEOUT=data.get("TILDA_REQUEST_TIMEOUT", 10.0),
            ),
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Возвращает синглтон настроек приложения.
    Перед сборкой загружает .env из корня проекта.
    """
    from dotenv import load_dotenv

    env_path = get_project_root() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    return Settings.from_config_json()


# Экспорт синглтона для удобного импорта
settings = get_settings()
