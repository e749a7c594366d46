# tests/services/test_miniapp_gate.py
"""
Тесты шлюза Mini App (src/services/miniapp_api/service.py).
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.common.constants import AuthMode
from src.core.auth import AuthConfigurationError, AuthExpired, MissingSignature, SignatureMismatch
from src.services.miniapp_api.service import MiniAppGate
from src.shared.errors import UpstreamUnavailable
from src.shared.models.user import MiniAppRequest


def make_request(init_data: str, username: str | None = "alice", user_id: int | None = 42) -> MiniAppRequest:
    return MiniAppRequest.model_validate({
        "initData": init_data,
        "initDataUnsafe": {"user": {"id": user_id, "username": username, "first_name": "Alice"}},
    })


# === AUTHENTICATION ===

@pytest.mark.asyncio
async def test_identify_upserts_verified_user(gate: MiniAppGate, mock_users: MagicMock, init_data) -> None:
    response = await gate.identify(make_request(init_data()))

    assert response.ok is True
    assert response.user.id == 42
    assert response.user.username == "alice"
    mock_users.upsert.assert_awaited_once()
    assert mock_users.upsert.await_args.args[0].username == "alice"


@pytest.mark.asyncio
async def test_identify_bad_signature_has_no_side_effect(gate: MiniAppGate, mock_users: MagicMock, init_data) -> None:
    tampered = init_data().replace("query_id=", "query_id=X")

    with pytest.raises(SignatureMismatch):
        await gate.identify(make_request(tampered))
    mock_users.upsert.assert_not_awaited()


@pytest.mark.asyncio
async def test_missing_init_data(gate: MiniAppGate) -> None:
    with pytest.raises(MissingSignature):
        await gate.identify(MiniAppRequest())


@pytest.mark.asyncio
async def test_expired_init_data(mock_shop: MagicMock, init_data, now: int) -> None:
    gate = MiniAppGate(bot_token="123456:TEST-token", shop=mock_shop, clock=lambda: now + 86401)

    with pytest.raises(AuthExpired):
        await gate.list_my_orders(make_request(init_data()))
    mock_shop.list_orders.assert_not_awaited()


@pytest.mark.asyncio
async def test_identify_without_user_store(mock_shop: MagicMock, init_data, now: int) -> None:
    gate = MiniAppGate(bot_token="123456:TEST-token", shop=mock_shop, clock=lambda: now)

    response = await gate.identify(make_request(init_data()))
    assert response.user.username == "alice"


@pytest.mark.asyncio
async def test_bypassed_mode_skips_verification(mock_shop: MagicMock) -> None:
    gate = MiniAppGate(bot_token="", shop=mock_shop, auth_mode=AuthMode.BYPASSED)

    with patch("src.services.miniapp_api.service.log_warning", new_callable=AsyncMock) as warn:
        response = await gate.identify(make_request("garbage"))

    assert response.user.username == "alice"
    warn.assert_awaited_once()


@pytest.mark.asyncio
async def test_enforced_mode_without_token(mock_shop: MagicMock, init_data) -> None:
    gate = MiniAppGate(bot_token="", shop=mock_shop)

    with pytest.raises(AuthConfigurationError):
        await gate.identify(make_request(init_data()))


@pytest.mark.asyncio
async def test_unsafe_username_mismatch_is_logged(gate: MiniAppGate, init_data) -> None:
    with patch("src.services.miniapp_api.service.log_warning", new_callable=AsyncMock) as warn:
        response = await gate.identify(make_request(init_data(), username="mallory"))

    assert response.user.username == "mallory"
    warn.assert_awaited_once()
    assert "Подозрительный" in warn.await_args.args[0]


@pytest.mark.asyncio
async def test_matching_signed_username_is_not_logged(gate: MiniAppGate, init_data) -> None:
    with patch("src.services.miniapp_api.service.log_warning", new_callable=AsyncMock) as warn:
        await gate.identify(make_request(init_data(), username="@Alice"))
    warn.assert_not_awaited()


# === ORDERS ===

@pytest.mark.asyncio
async def test_list_my_orders(gate: MiniAppGate, mock_shop: MagicMock, sample_orders, init_data) -> None:
    mock_shop.list_orders.return_value = sample_orders

    orders = await gate.list_my_orders(make_request(init_data()))

    assert [o["orderid"] for o in orders] == ["1", "3"]


@pytest.mark.asyncio
async def test_list_my_orders_without_username(gate: MiniAppGate, mock_shop: MagicMock, init_data) -> None:
    assert await gate.list_my_orders(make_request(init_data(), username=None)) == []
    mock_shop.list_orders.assert_not_awaited()


@pytest.mark.asyncio
async def test_list_my_orders_upstream_failure_aborts(gate: MiniAppGate, mock_shop: MagicMock, init_data) -> None:
    mock_shop.list_orders.side_effect = UpstreamUnavailable("tilda", "down")

    with pytest.raises(UpstreamUnavailable):
        await gate.list_my_orders(make_request(init_data()))


# === PRODUCTS ===

@pytest.mark.asyncio
async def test_list_my_products(gate: MiniAppGate, mock_shop: MagicMock, init_data) -> None:
    products = {
        "P1": {"title": "Mug", "price": "10", "images": [{"img": "a.jpg"}]},
        "P3": {"title": "Cap", "price": "20"},
    }
    mock_shop.get_product.side_effect = lambda pid: products.get(pid)

    items = await gate.list_my_products(make_request(init_data(), username="bob"))

    assert [(i.sku, i.tilda_id, i.title) for i in items] == [("SKU1", "P1", "Mug"), ("SKU3", "P3", "Cap")]
    assert items[1].images == []


@pytest.mark.asyncio
async def test_list_my_products_skips_failed_fetch(gate: MiniAppGate, mock_shop: MagicMock, init_data) -> None:
    async def get_product(pid: str):
        if pid == "P1":
            raise UpstreamUnavailable("tilda", "timeout")
        return {"title": pid}

    mock_shop.get_product.side_effect = get_product

    items = await gate.list_my_products(make_request(init_data(), username="@BOB"))

    assert [i.sku for i in items] == ["SKU3"]


@pytest.mark.asyncio
async def test_list_my_products_skips_empty_product(gate: MiniAppGate, mock_shop: MagicMock, init_data) -> None:
    mock_shop.get_product.return_value = None
    assert await gate.list_my_products(make_request(init_data(), username="bob")) == []


@pytest.mark.asyncio
async def test_list_my_products_tolerates_odd_product_fields(gate: MiniAppGate, mock_shop: MagicMock, init_data) -> None:
    products = {
        "P1": {"title": 1001, "images": '[{"img": "a.jpg"}]'},
        "P3": {"title": "Cap", "images": "not-json"},
    }
    mock_shop.get_product.side_effect = lambda pid: products.get(pid)

    items = await gate.list_my_products(make_request(init_data(), username="bob"))

    assert [(i.sku, i.title) for i in items] == [("SKU1", "1001"), ("SKU3", "Cap")]
    assert items[0].images == [{"img": "a.jpg"}]
    assert items[1].images == []


@pytest.mark.asyncio
async def test_list_my_products_no_ownership(gate: MiniAppGate, mock_shop: MagicMock, init_data) -> None:
    assert await gate.list_my_products(make_request(init_data(), username="dave")) == []
    mock_shop.get_product.assert_not_awaited()


@pytest.mark.asyncio
async def test_list_my_products_sheet_failure_aborts(gate: MiniAppGate, mock_owners: MagicMock, init_data) -> None:
    mock_owners.list_rows.side_effect = UpstreamUnavailable("google_sheets", "HTTP 503")

    with pytest.raises(UpstreamUnavailable):
        await gate.list_my_products(make_request(init_data(), username="bob"))


@pytest.mark.asyncio
async def test_list_my_products_without_sheets(mock_shop: MagicMock, init_data, now: int) -> None:
    gate = MiniAppGate(bot_token="123456:TEST-token", shop=mock_shop, clock=lambda: now)

    with pytest.raises(UpstreamUnavailable):
        await gate.list_my_products(make_request(init_data(), username="bob"))


@pytest.mark.asyncio
async def test_close_closes_shop(gate: MiniAppGate, mock_shop: MagicMock) -> None:
    await gate.close()
    mock_shop.close.assert_awaited_once()
