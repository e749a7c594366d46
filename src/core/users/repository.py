# src/core/users/repository.py
"""
Репозиторий пользователей Mini App в листе Users.
Реализует паттерн Repository поверх хранилища строк (Google Sheets).
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

from src.common.logger import log_info
from src.common.constants import TypeMsg
from src.infra.google_sheets import SheetsRowStore
from src.shared.models.user import TelegramUser, UserRow


ID_COLUMN = 0
CREATED_AT_COLUMN = 6

_RANGE_START = re.compile(r"^(?P<sheet>[^!]+)!\$?[A-Z]+\$?(?P<row>\d+)")


def _sheet_and_first_row(range_: str) -> tuple[str, int]:
    """'Users!A2:H' -> ('Users', 2)."""
    match = _RANGE_START.match(range_)
    if not match:
        raise ValueError(f"Некорректный диапазон: {range_}")
    return match.group("sheet"), int(match.group("row"))


class UserRepository:
    """Репозиторий пользователей."""

    def __init__(
        self,
        store: SheetsRowStore,
        append_range: str = "Users!A1",
        read_range: str = "Users!A2:H",
    ) -> None:
        """
        Args:
            store: Хранилище строк (Dependency Injection)
            append_range: Диапазон для добавления новых строк
            read_range: Диапазон с данными пользователей (без заголовка)
        """
        self._store = store
        self._append_range = append_range
        self._read_range = read_range

    async def upsert(self, user: TelegramUser, now: datetime | None = None) -> UserRow | None:
        """
        Создать или обновить строку пользователя.

        Существующая строка ищется по id; created_at при обновлении сохраняется.
        Пользователь без id не записывается.
        """
        if user.id is None:
            return None

        now = now or datetime.now(timezone.utc)
        row = UserRow.from_telegram_user(user, now)

        existing = await self._store.read(self._read_range)
        for offset, existing_row in enumerate(existing):
            if existing_row and str(existing_row[ID_COLUMN]).strip() == row.id:
                if len(existing_row) > CREATED_AT_COLUMN and existing_row[CREATED_AT_COLUMN]:
                    row.created_at = existing_row[CREATED_AT_COLUMN]

                sheet, first_row = _sheet_and_first_row(self._read_range)
                row_number = first_row + offset
                await self._store.update(f"{sheet}!A{row_number}:H{row_number}", row.to_row())
                await log_info(f"Пользователь {row.id} обновлён (строка {row_number})", type_msg=TypeMsg.DEBUG)
                return row

        await self._store.append(self._append_range, row.to_row())
        await log_info(f"Новый пользователь {row.id} (@{row.username})", type_msg=TypeMsg.INFO)
        return row


class OwnershipRepository:
    """Привязки товаров к продавцам (лист ProductOwners), только чтение."""

    def __init__(self, store: SheetsRowStore, read_range: str = "ProductOwners!A2:D") -> None:
        self._store = store
        self._read_range = read_range

    async def list_rows(self) -> list[list[str]]:
        return await self._store.read(self._read_range)
