"""Tests for HTTP endpoints (stores are monkeypatched, no DB/Redis)."""

from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient

from app.main import app
from app.services.lifecycle import derive_legacy_status
from app.services.rules import PricingRule, ValuationRule
from app.services.stock_errors import STOCK_CONFLICT_MESSAGE, STOCK_DELETE_BLOCKED_MESSAGE, StockMutationError
from app.stores import stock_repo


@pytest.fixture
async def client():
    """Create test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


def build_row(**kwargs) -> SimpleNamespace:
    """Object shaped like a StockItem row."""
    row = {
        "id": "stock-1",
        "state": "new",
        "sale_id": None,
        "is_promo": False,
        "version": 1,
        "category": "new",
        "brand": "Apple",
        "model": "iPhone 15 Pro",
        "storage_gb": 256,
        "color": "Natural",
        "condition": "new",
        "imei": "356789012345671",
        "battery_pct": 100.0,
        "purchase_usd": 950.0,
        "fx_rate_used": 1200.0,
        "purchase_ars": 1140000.0,
        "sale_price_usd": 1150.0,
        "sale_price_ars": 1380000.0,
        "warranty_days": 365,
        "reserve_type": None,
        "reserve_amount_ars": None,
        "days_in_stock": 4,
        "updated_at": None,
    }
    row.update(kwargs)
    row["status"] = derive_legacy_status(row["state"])
    return SimpleNamespace(**row)


@pytest.fixture
def stock_rows(monkeypatch: pytest.MonkeyPatch):
    rows = {"stock-1": build_row()}
    writes: list[tuple[str, dict]] = []

    async def fake_get(item_id: str):
        return rows.get(item_id)

    async def fake_update(item_id: str, patch: dict, *, expected_version: int | None = None):
        writes.append((item_id, patch))
        current = {k: v for k, v in vars(rows[item_id]).items() if k != "status"}
        rows[item_id] = build_row(**{**current, **patch})
        return rows[item_id]

    monkeypatch.setattr(stock_repo, "get_stock_item", fake_get)
    monkeypatch.setattr(stock_repo, "update_stock_item", fake_update)
    return SimpleNamespace(rows=rows, writes=writes)


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test health endpoint returns ok."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


@pytest.mark.asyncio
async def test_get_stock_item_includes_derived_status(client: AsyncClient, stock_rows):
    stock_rows.rows["stock-1"] = build_row(state="deposit")
    response = await client.get("/v1/stock/stock-1")
    assert response.status_code == 200
    data = response.json()
    assert data["state"] == "deposit"
    assert data["status"] == "available"
    assert data["saleId"] is None


@pytest.mark.asyncio
async def test_get_missing_stock_item_is_404(client: AsyncClient, stock_rows):
    response = await client.get("/v1/stock/nope")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "stock_not_found"


@pytest.mark.asyncio
async def test_change_state(client: AsyncClient, stock_rows):
    response = await client.patch("/v1/stock/stock-1/state", json={"state": "reserved"})
    assert response.status_code == 200
    data = response.json()
    assert data["state"] == "reserved"
    assert data["status"] == "reserved"
    assert stock_rows.writes == [("stock-1", {"state": "reserved"})]


@pytest.mark.asyncio
async def test_change_state_of_sold_item_is_blocked_locally(client: AsyncClient, stock_rows):
    stock_rows.rows["stock-1"] = build_row(state="sold", sale_id="sale-123")
    response = await client.patch("/v1/stock/stock-1/state", json={"state": "new"})
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "stock_locked"
    assert stock_rows.writes == []


@pytest.mark.asyncio
async def test_remote_conflict_is_mapped_to_fixed_message(
    client: AsyncClient, stock_rows, monkeypatch: pytest.MonkeyPatch
):
    async def conflicting_update(item_id: str, patch: dict, *, expected_version: int | None = None):
        raise StockMutationError("stock_conflict", "UPDATE matched 0 rows")

    monkeypatch.setattr(stock_repo, "update_stock_item", conflicting_update)

    response = await client.patch("/v1/stock/stock-1/state", json={"state": "drawer"})
    assert response.status_code == 409
    error = response.json()["error"]
    assert error["code"] == "stock_conflict"
    assert error["message"] == STOCK_CONFLICT_MESSAGE


@pytest.mark.asyncio
async def test_remote_promo_block_mentions_promo(client: AsyncClient, stock_rows, monkeypatch: pytest.MonkeyPatch):
    async def blocked_update(item_id: str, patch: dict, *, expected_version: int | None = None):
        raise StockMutationError("stock_promo_blocked", "sold meanwhile")

    monkeypatch.setattr(stock_repo, "update_stock_item", blocked_update)

    response = await client.patch("/v1/stock/stock-1/promo", json={"isPromo": True})
    assert response.status_code == 409
    assert "promo" in response.json()["error"]["message"]


@pytest.mark.asyncio
async def test_unclassified_store_error_shows_fallback(
    client: AsyncClient, stock_rows, monkeypatch: pytest.MonkeyPatch
):
    async def failing_update(item_id: str, patch: dict, *, expected_version: int | None = None):
        raise StockMutationError("invalid_patch", "Fields not updatable: ['sale_id']")

    monkeypatch.setattr(stock_repo, "update_stock_item", failing_update)

    response = await client.patch("/v1/stock/stock-1/state", json={"state": "drawer"})
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "No se pudo actualizar el equipo."


@pytest.mark.asyncio
async def test_reserve_with_sena_moves_to_deposit(client: AsyncClient, stock_rows):
    response = await client.post(
        "/v1/stock/stock-1/reserve",
        json={"reserveType": "sena", "reserveAmountArs": 100000},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["state"] == "deposit"
    assert data["status"] == "available"
    assert data["reserveType"] == "sena"


@pytest.mark.asyncio
async def test_delete_is_blocked(client: AsyncClient, stock_rows):
    response = await client.delete("/v1/stock/stock-1")
    assert response.status_code == 403
    assert response.json()["error"]["message"] == STOCK_DELETE_BLOCKED_MESSAGE
    assert stock_rows.writes == []


@pytest.mark.asyncio
async def test_installment_quote(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    from app.routes import pricing as pricing_routes

    async def fake_rules(channel: str | None = None, card_brand: str | None = None) -> list[PricingRule]:
        return [
            PricingRule(id="1", card_brand="Visa", installments=6, surcharge_pct=10),
            PricingRule(id="2", card_brand="Visa", installments=6, surcharge_pct=25, channel="mercado_pago"),
        ]

    monkeypatch.setattr(pricing_routes, "list_installment_rules", fake_rules)

    response = await client.post(
        "/v1/pricing/installments",
        json={"price": 100, "currency": "USD", "usdRate": 1000, "cardBrand": "Visa"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["basePriceArs"] == 100000
    rows = {row["installments"]: row for row in data["rows"]}
    assert rows[6]["total"] == pytest.approx(110000)
    assert rows[6]["perInstallment"] == pytest.approx(18333.3333, rel=1e-6)
    assert rows[3]["surchargePct"] == 0


@pytest.mark.asyncio
async def test_trade_in_suggestion(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    from app.routes import pricing as pricing_routes

    async def fake_plan(model: str | None = None) -> list[ValuationRule]:
        return [
            ValuationRule(id="pct", model="iPhone 13", battery_min=80, battery_max=100, pct_of_reference=50),
        ]

    monkeypatch.setattr(pricing_routes, "list_plan_canje_values", fake_plan)

    response = await client.post(
        "/v1/pricing/trade-in/suggest",
        json={"model": "iPhone 13", "batteryPct": 88, "referenceUsd": 400, "fxRate": 1000},
    )
    assert response.status_code == 200
    assert response.json() == {"suggestedValueArs": 200000.0, "ruleId": "pct"}

    response = await client.post("/v1/pricing/trade-in/suggest", json={"model": "iPhone 13", "batteryPct": 50})
    assert response.json() == {"suggestedValueArs": None, "ruleId": None}


@pytest.mark.asyncio
async def test_usd_quote_uses_configured_quote_currency(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    from app.routes import pricing as pricing_routes
    from app.settings import get_settings

    requested: list[str | None] = []

    async def fake_rate(currency: str | None = None, *, force_refresh: bool = False) -> float:
        requested.append(currency)
        return 40.0

    async def no_rules(channel: str | None = None, card_brand: str | None = None) -> list[PricingRule]:
        return []

    monkeypatch.setenv("FX_QUOTE_CURRENCY", "UYU")
    get_settings.cache_clear()
    monkeypatch.setattr(pricing_routes, "get_usd_rate", fake_rate)
    monkeypatch.setattr(pricing_routes, "list_installment_rules", no_rules)
    try:
        response = await client.post("/v1/pricing/installments", json={"price": 100, "currency": "USD"})
    finally:
        get_settings.cache_clear()

    assert response.status_code == 200
    assert response.json()["basePriceArs"] == 4000
    assert requested == ["UYU"]
