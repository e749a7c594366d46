# src/services/miniapp_api/app.py
"""
FastAPI приложение Mini App API (только чтение).

Все POST endpoints принимают {initData, initDataUnsafe} от Telegram WebApp
и требуют валидную подпись initData.

Endpoints:
- GET  /                - проверка, что backend жив
- GET  /health          - статус сервиса
- POST /api/me          - авторизация и запись пользователя в Google Sheets
- POST /api/me/orders   - заказы пользователя из Tilda
- POST /api/me/sales    - товары, которыми управляет пользователь
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from src.common.logger import log_error, log_info, log_warning, setup_logging
from src.common.constants import AuthMode, TypeMsg
from src.config import settings
from src.core.auth import AuthConfigurationError, TelegramAuthError
from src.services.miniapp_api.dependencies import (
    build_gate,
    cleanup_dependencies,
    get_gate,
    init_dependencies,
)
from src.services.miniapp_api.service import MiniAppGate
from src.shared.errors import UpstreamUnavailable
from src.shared.models import (
    ErrorResponse,
    HealthStatus,
    MeResponse,
    MiniAppRequest,
    OrdersResponse,
    SalesResponse,
)


SERVICE_NAME = "miniapp_api"


# === LIFESPAN ===

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Жизненный цикл приложения."""
    setup_logging()

    gate = build_gate(settings)
    if gate.auth_mode is AuthMode.BYPASSED:
        await log_warning("AUTH_MODE=bypassed: подпись Telegram initData НЕ проверяется")
    await init_dependencies(gate)
    await log_info(f"{SERVICE_NAME} запущен на порту {settings.server.PORT}", type_msg=TypeMsg.INFO)

    yield

    await cleanup_dependencies()
    await log_info(f"{SERVICE_NAME} остановлен", type_msg=TypeMsg.INFO)


# === APP ===

app = FastAPI(
    title="Mini App API",
    description="Backend для Telegram Mini App магазина: авторизация, заказы и товары продавца.",
    version=settings.system.VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.server.CORS_ALLOW_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


# === ОБРАБОТКА ОШИБОК ===

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@app.exception_handler(TelegramAuthError)
async def handle_auth_error(request: Request, exc: TelegramAuthError) -> JSONResponse:
    return _error(401, str(exc))


@app.exception_handler(AuthConfigurationError)
async def handle_auth_configuration_error(request: Request, exc: AuthConfigurationError) -> JSONResponse:
    return _error(500, str(exc))


@app.exception_handler(UpstreamUnavailable)
async def handle_upstream_unavailable(request: Request, exc: UpstreamUnavailable) -> JSONResponse:
    await log_error(f"{request.url.path}: {exc}")
    return _error(502, str(exc))


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error(400, "Некорректное тело запроса")


# === HEALTH CHECK ===

@app.get("/", response_class=PlainTextResponse, tags=["Health"])
async def root() -> str:
    return "miniapp backend OK"


@app.get("/health", response_model=HealthStatus, tags=["Health"])
async def health_check() -> HealthStatus:
    """Проверка здоровья сервиса."""
    return HealthStatus(
        service=SERVICE_NAME,
        version=settings.system.VERSION,
        dependencies={
            "google_sheets": "configured" if settings.google_sheets.is_configured else "disabled",
            "tilda": "configured" if settings.shop.TILDA_PUBLIC_KEY else "disabled",
        },
    )


# === MINI APP ===

@app.post("/api/me", response_model=MeResponse, tags=["Mini App"])
async def me(
    gate: Annotated[MiniAppGate, Depends(get_gate)],
    request: MiniAppRequest | None = None,
) -> MeResponse:
    """Проверить пользователя и записать его в лист Users."""
    return await gate.identify(request or MiniAppRequest())


@app.post("/api/me/orders", response_model=OrdersResponse, tags=["Mini App"])
async def my_orders(
    gate: Annotated[MiniAppGate, Depends(get_gate)],
    request: MiniAppRequest | None = None,
) -> OrdersResponse:
    """Заказы пользователя (поиск username в контактах и комментариях заказа)."""
    orders = await gate.list_my_orders(request or MiniAppRequest())
    return OrdersResponse(orders=orders)


@app.post("/api/me/sales", response_model=SalesResponse, tags=["Mini App"])
async def my_sales(
    gate: Annotated[MiniAppGate, Depends(get_gate)],
    request: MiniAppRequest | None = None,
) -> SalesResponse:
    """Товары продавца из листа ProductOwners с данными из Tilda."""
    products = await gate.list_my_products(request or MiniAppRequest())
    return SalesResponse(products=products)


# === STARTUP ===

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.server.HOST, port=settings.server.PORT)
