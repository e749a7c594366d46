# src/shared/models/user.py
"""
Модели пользователя Telegram Mini App.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TelegramUser(BaseModel):
    """Пользователь из initDataUnsafe.user (данные клиента, не подписаны)."""

    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None


class InitDataUnsafe(BaseModel):
    """Объект Telegram.WebApp.initDataUnsafe."""

    model_config = ConfigDict(extra="ignore")

    user: TelegramUser = Field(default_factory=TelegramUser)

    @field_validator("user", mode="before")
    @classmethod
    def empty_user(cls, v):
        return v or {}


class MiniAppRequest(BaseModel):
    """Тело запроса от Mini App: подписанная строка и её клиентская копия."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    init_data: str | None = Field(default="", alias="initData")
    init_data_unsafe: InitDataUnsafe = Field(default_factory=InitDataUnsafe, alias="initDataUnsafe")

    @field_validator("init_data_unsafe", mode="before")
    @classmethod
    def empty_unsafe(cls, v):
        return v or {}

    @property
    def user(self) -> TelegramUser:
        return self.init_data_unsafe.user


class UserRow(BaseModel):
    """
    Строка листа Users.

    Колонки: id, username, first_name, last_name, '', '', created_at, updated_at.
    """

    id: str
    username: str = ""
    first_name: str = ""
    last_name: str = ""
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_telegram_user(cls, user: TelegramUser, now: datetime) -> "UserRow":
        timestamp = now.isoformat()
        return cls(
            id="" if user.id is None else str(user.id),
            username=user.username or "",
            first_name=user.first_name or "",
            last_name=user.last_name or "",
            created_at=timestamp,
            updated_at=timestamp,
        )

    def to_row(self) -> list[str]:
        return [
            self.id,
            self.username,
            self.first_name,
            self.last_name,
            "",
            "",
            self.created_at,
            self.updated_at,
        ]


class MeUser(BaseModel):
    """Пользователь в ответе /api/me."""

    id: int | None = None
    username: str | None = None


class MeResponse(BaseModel):
    """Ответ /api/me."""

    ok: bool = True
    user: MeUser
