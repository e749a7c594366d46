# src/core/auth/identity.py
"""
Нормализация Telegram username.

В таблицах и заказах username хранится по-разному: с "@" и без,
в разном регистре. Сравнение всегда идёт по канонической форме.
"""

from __future__ import annotations

from src.common.constants import IDENTITY_MARKER


def normalize(raw: str | None) -> str:
    """Каноническая форма: без пробелов по краям, в нижнем регистре, без ведущих "@"."""
    return (raw or "").strip().lower().lstrip(IDENTITY_MARKER)


def without_marker(raw: str | None) -> str:
    return normalize(raw)


def with_marker(raw: str | None) -> str:
    """Каноническая форма с одним ведущим "@"; для пустого username — пустая строка."""
    value = normalize(raw)
    return f"{IDENTITY_MARKER}{value}" if value else ""


def same_identity(left: str | None, right: str | None) -> bool:
    """Два username указывают на одного пользователя (пустые не совпадают ни с чем)."""
    canonical = normalize(left)
    return bool(canonical) and canonical == normalize(right)
