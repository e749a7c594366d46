# src/infra/google_sheets.py
"""
Google Sheets как хранилище строк.

Клиент googleapiclient синхронный, поэтому каждый запрос выполняется
в отдельном потоке через asyncio.to_thread. httplib2.Http не потокобезопасен:
каждый запрос получает собственный AuthorizedHttp.
"""

from __future__ import annotations

import asyncio
import base64
import json
import threading
from typing import Any, Callable, Sequence

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from src.common.logger import log_debug, log_error
from src.shared.errors import UpstreamUnavailable


_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
SERVICE_NAME = "google_sheets"


class ServiceAccountError(RuntimeError):
    """GOOGLE_SA_BASE64 не задан или не содержит ключ сервисного аккаунта."""


def load_service_account_info(service_account_b64: str) -> dict[str, Any]:
    """Декодировать JSON сервисного аккаунта из base64."""
    b64 = (service_account_b64 or "").strip()
    if not b64:
        raise ServiceAccountError("GOOGLE_SA_BASE64 is not set")

    try:
        return json.loads(base64.b64decode(b64).decode("utf-8"))
    except Exception as e:
        raise ServiceAccountError("Invalid GOOGLE_SA_BASE64") from e


class SheetsRowStore:
    """
    Чтение и запись строк одной таблицы.

    Сервис Sheets создаётся лениво при первом запросе.
    """

    def __init__(
        self,
        spreadsheet_id: str,
        service_account_b64: str = "",
        timeout: float = 10.0,
        service: Any = None,
    ) -> None:
        self.spreadsheet_id = spreadsheet_id
        self._service_account_b64 = service_account_b64
        self._timeout = timeout
        self._service = service
        self._credentials: Credentials | None = None
        self._lock = threading.Lock()

    def _get_service(self) -> Any:
        with self._lock:
            if self._service is None:
                try:
                    creds = Credentials.from_service_account_info(
                        load_service_account_info(self._service_account_b64),
                        scopes=_SCOPES,
                    )
                except ValueError as e:
                    raise ServiceAccountError(f"Invalid service account: {e}") from e
                self._service = build(
                    "sheets",
                    "v4",
                    credentials=creds,
                    cache_discovery=False,
                )
                self._credentials = creds
            return self._service

    def _new_http(self) -> AuthorizedHttp | None:
        """Отдельное соединение на запрос; None для сервиса, переданного снаружи."""
        if self._credentials is None:
            return None
        return AuthorizedHttp(self._credentials, http=httplib2.Http(timeout=self._timeout))

    async def _execute(self, action: str, make_request: Callable[[Any], Any]) -> dict[str, Any]:
        """Выполнить запрос в потоке, ошибки транспорта превратить в UpstreamUnavailable."""

        def run() -> dict[str, Any]:
            values = self._get_service().spreadsheets().values()
            request = make_request(values)
            http = self._new_http()
            if http is None:
                return request.execute()
            return request.execute(http=http)

        try:
            return await asyncio.to_thread(run)
        except HttpError as e:
            await log_error(
                f"Google Sheets {action} failed | status={e.resp.status}",
                logger_name="google_sheets",
            )
            raise UpstreamUnavailable(SERVICE_NAME, f"{action}: HTTP {e.resp.status}") from e
        except ServiceAccountError as e:
            await log_error(f"Google Sheets {action}: {e}", logger_name="google_sheets")
            raise UpstreamUnavailable(SERVICE_NAME, str(e)) from e
        except (OSError, httplib2.HttpLib2Error, GoogleAuthError) as e:
            await log_error(
                f"Google Sheets {action} exception: {e}",
                logger_name="google_sheets",
                exc_info=True,
            )
            raise UpstreamUnavailable(SERVICE_NAME, f"{action}: {e}") from e

    async def read(self, range_: str) -> list[list[str]]:
        """Прочитать диапазон; пустой диапазон — пустой список."""
        result = await self._execute(
            "read",
            lambda values: values.get(spreadsheetId=self.spreadsheet_id, range=range_),
        )
        rows = result.get("values", [])
        await log_debug(f"Google Sheets read {range_}: {len(rows)} rows", logger_name="google_sheets")
        return rows

    async def append(self, range_: str, row: Sequence[str]) -> None:
        """Дописать строку в конец таблицы."""
        await self._execute(
            "append",
            lambda values: values.append(
                spreadsheetId=self.spreadsheet_id,
                range=range_,
                valueInputOption="USER_ENTERED",
                body={"values": [list(row)]},
            ),
        )

    async def update(self, range_: str, row: Sequence[str]) -> None:
        """Перезаписать строку по диапазону (например, "Users!A5:H5")."""
        await self._execute(
            "update",
            lambda values: values.update(
                spreadsheetId=self.spreadsheet_id,
                range=range_,
                valueInputOption="USER_ENTERED",
                body={"values": [list(row)]},
            ),
        )
