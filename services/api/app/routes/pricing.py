"""Pricing and valuation endpoints.

POST /v1/pricing/installments       - Installment table for a price
POST /v1/pricing/quotes             - Same table, persisted as a quote snapshot
POST /v1/pricing/trade-in/suggest   - Suggested trade-in value (plan canje)
GET  /v1/pricing/fx/usd-ars         - Current dollar rate
"""

import logging

from fastapi import APIRouter, HTTPException, Query
import httpx

from app.schemas import (
    FxRateResponse,
    InstallmentQuoteRequest,
    InstallmentQuoteResponse,
    InstallmentRowOut,
    SavedQuoteResponse,
    TradeInSuggestRequest,
    TradeInSuggestResponse,
)
from app.services.fx import FxError, get_usd_rate
from app.services.pricing import InstallmentRow, ars_base_price, build_installment_table, quote_snapshot_rows
from app.services.valuation import TradeInDevice, suggest_trade_in_value
from app.settings import get_settings
from app.stores.stock_repo import list_installment_rules, list_plan_canje_values, save_installment_quote

router = APIRouter()
logger = logging.getLogger("uvicorn.error")


async def _resolve_usd_rate(request: InstallmentQuoteRequest) -> float | None:
    if request.currency == "ARS":
        return None
    if request.usd_rate is not None:
        return request.usd_rate
    try:
        return await get_usd_rate(get_settings().fx_quote_currency)
    except (FxError, httpx.HTTPError) as e:
        # ars_base_price treats a missing rate as a zero base
        logger.warning(f"Dollar rate unavailable, quoting with zero base: {e}")
        return None


async def _build_rows(request: InstallmentQuoteRequest) -> tuple[float, float | None, list[InstallmentRow]]:
    usd_rate = await _resolve_usd_rate(request)
    base_price_ars = ars_base_price(request.price, request.currency, usd_rate)
    # All channels: the matcher prefers the requested one and falls back to any
    rules = await list_installment_rules()
    rows = build_installment_table(
        base_price_ars,
        rules,
        card_brand=request.card_brand,
        channel=request.channel,
        plan=get_settings().installment_plan,
    )
    return base_price_ars, usd_rate, rows


@router.post("/installments", response_model=InstallmentQuoteResponse)
async def quote_installments(request: InstallmentQuoteRequest) -> InstallmentQuoteResponse:
    """Compute the installment table (total and per-installment amount per count)."""
    base_price_ars, usd_rate, rows = await _build_rows(request)
    return InstallmentQuoteResponse(
        base_price_ars=base_price_ars,
        usd_rate=usd_rate,
        card_brand=request.card_brand,
        channel=request.channel,
        rows=[
            InstallmentRowOut(
                installments=row.installments,
                surcharge_pct=row.surcharge_pct,
                total=row.total,
                per_installment=row.per_installment,
            )
            for row in rows
        ],
    )


@router.post("/quotes", response_model=SavedQuoteResponse)
async def save_quote(request: InstallmentQuoteRequest) -> SavedQuoteResponse:
    """Compute and persist a quote snapshot (amounts rounded to cents)."""
    base_price_ars, usd_rate, rows = await _build_rows(request)
    snapshot_rows = quote_snapshot_rows(rows)
    quote = await save_installment_quote(
        card_brand=request.card_brand or "General",
        channel=request.channel.value,
        currency=request.currency,
        base_price=request.price,
        usd_rate=usd_rate,
        base_price_ars=base_price_ars,
        rows=snapshot_rows,
    )
    return SavedQuoteResponse(quote_id=quote.id, rows=snapshot_rows)


@router.post("/trade-in/suggest", response_model=TradeInSuggestResponse)
async def suggest_trade_in(request: TradeInSuggestRequest) -> TradeInSuggestResponse:
    """Suggest a trade-in value; null means the seller must enter it manually."""
    rules = await list_plan_canje_values(model=request.model)
    suggestion = suggest_trade_in_value(
        TradeInDevice(
            model=request.model,
            battery_pct=request.battery_pct,
            storage_gb=request.storage_gb,
            reference_price_ars=request.reference_price_ars,
            reference_usd=request.reference_usd,
            fx_rate=request.fx_rate,
        ),
        rules,
    )
    return TradeInSuggestResponse(suggested_value_ars=suggestion.value_ars, rule_id=suggestion.rule_id)


@router.get("/fx/usd-ars", response_model=FxRateResponse)
async def get_dollar_rate(
    refresh: bool = Query(default=False, description="Bypass the Redis cache"),
) -> FxRateResponse:
    """Current ARS per USD."""
    currency = get_settings().fx_quote_currency.upper()
    try:
        rate = await get_usd_rate(currency, force_refresh=refresh)
    except FxError as e:
        raise HTTPException(status_code=502, detail=f"FX rate unavailable: {e}")
    return FxRateResponse(currency=currency, usd_rate=rate)
