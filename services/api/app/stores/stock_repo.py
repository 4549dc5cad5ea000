"""Stock record store and rule source (PostgreSQL).

Writes are conditional updates:

    UPDATE stock_items SET ..., version = version + 1
    WHERE id = :id AND state <> 'sold' AND sale_id IS NULL [AND version = :expected]

If no row is updated the store re-reads the row and raises StockMutationError:
- stock_not_found: no such id
- stock_promo_blocked: promo toggle on a unit that is now sold/linked
- stock_conflict: anything else (sold/linked or stale version)

Rule reads are plain snapshots; freshness is the caller's concern.
"""

import json
import logging
from typing import Any

from sqlalchemy import select, update

from app.models import InstallmentQuote, InstallmentRule, PlanCanjeValue, StockItem
from app.services.lifecycle import StockState, coerce_state, is_sold_or_linked
from app.services.rules import PricingRule, ValuationRule
from app.services.stock_errors import (
    CODE_STOCK_CONFLICT,
    CODE_STOCK_NOT_FOUND,
    CODE_STOCK_PROMO_BLOCKED,
    STOCK_CONFLICT_MESSAGE,
    STOCK_PROMO_BLOCKED_MESSAGE,
    StockMutationError,
)
from app.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")

# Fields a regular update may touch. state=sold and sale_id go through mark_stock_item_sold.
UPDATABLE_FIELDS = frozenset(
    {
        "state",
        "is_promo",
        "category",
        "brand",
        "model",
        "storage_gb",
        "color",
        "color_other",
        "condition",
        "imei",
        "battery_pct",
        "is_sealed",
        "purchase_usd",
        "fx_rate_used",
        "purchase_ars",
        "sale_price_usd",
        "sale_price_ars",
        "warranty_days",
        "provider_name",
        "details",
        "received_at",
        "reserve_type",
        "reserve_amount_ars",
        "reserve_notes",
    }
)


def _clean_patch(patch: dict[str, Any]) -> dict[str, Any]:
    unknown = set(patch) - UPDATABLE_FIELDS
    if unknown:
        raise StockMutationError(
            "invalid_patch",
            f"Fields not updatable: {sorted(unknown)}",
            {"fields": sorted(unknown)},
        )
    values = dict(patch)
    if "state" in values:
        try:
            state = coerce_state(values["state"])
        except ValueError:
            raise StockMutationError("invalid_state", f"Unknown stock state: {values['state']}")
        if state is StockState.SOLD:
            raise StockMutationError("invalid_state", "Sale completion is not a state change")
        values["state"] = state.value
    return values


async def get_stock_item(item_id: str) -> StockItem | None:
    """Read a stock item by id."""
    async with get_session() as session:
        return await session.get(StockItem, item_id)


async def update_stock_item(
    item_id: str,
    patch: dict[str, Any],
    *,
    expected_version: int | None = None,
) -> StockItem:
    """Apply `patch` unless the unit is sold/linked or was modified meanwhile.

    Raises:
        StockMutationError: stock_not_found, stock_conflict, stock_promo_blocked,
            invalid_patch or invalid_state.
    """
    values = _clean_patch(patch)

    async with get_session() as session:
        stmt = (
            update(StockItem)
            .where(StockItem.id == item_id)
            .where(StockItem.state != StockState.SOLD.value)
            .where(StockItem.sale_id.is_(None))
        )
        if expected_version is not None:
            stmt = stmt.where(StockItem.version == expected_version)
        stmt = (
            stmt.values(**values, version=StockItem.version + 1)
            .returning(StockItem.id)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        updated_id = result.scalar_one_or_none()

        if updated_id is None:
            current = await session.get(StockItem, item_id)
            raise _rejection(item_id, current, values, expected_version)

        item = await session.get(StockItem, item_id, populate_existing=True)
        logger.info(f"Stock item {item_id} updated: {sorted(values)} (version {item.version})")
        return item


def _rejection(
    item_id: str,
    current: StockItem | None,
    values: dict[str, Any],
    expected_version: int | None,
) -> StockMutationError:
    if current is None:
        return StockMutationError(CODE_STOCK_NOT_FOUND, f"Stock item {item_id} not found", {"id": item_id})

    detail = {
        "id": item_id,
        "state": current.state,
        "sale_id": current.sale_id,
        "version": current.version,
        "expected_version": expected_version,
    }
    if "is_promo" in values and is_sold_or_linked(current):
        logger.warning(f"Promo toggle rejected for sold/linked stock item {item_id}")
        return StockMutationError(CODE_STOCK_PROMO_BLOCKED, STOCK_PROMO_BLOCKED_MESSAGE, detail)

    logger.warning(f"Stock conflict on {item_id}: state={current.state} version={current.version}")
    return StockMutationError(CODE_STOCK_CONFLICT, STOCK_CONFLICT_MESSAGE, detail)


async def mark_stock_item_sold(
    item_id: str,
    sale_id: str,
    *,
    expected_version: int | None = None,
) -> StockItem:
    """Privileged sale completion: set state=sold and sale_id together, once.

    Clears the promo flag. A second sale of the same unit raises stock_conflict.
    """
    async with get_session() as session:
        stmt = (
            update(StockItem)
            .where(StockItem.id == item_id)
            .where(StockItem.state != StockState.SOLD.value)
            .where(StockItem.sale_id.is_(None))
        )
        if expected_version is not None:
            stmt = stmt.where(StockItem.version == expected_version)
        stmt = (
            stmt.values(
                state=StockState.SOLD.value,
                sale_id=sale_id,
                is_promo=False,
                version=StockItem.version + 1,
            )
            .returning(StockItem.id)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        if result.scalar_one_or_none() is None:
            current = await session.get(StockItem, item_id)
            raise _rejection(item_id, current, {}, expected_version)

        item = await session.get(StockItem, item_id, populate_existing=True)
        logger.info(f"Stock item {item_id} sold (sale {sale_id})")
        return item


async def list_installment_rules(
    channel: str | None = None,
    card_brand: str | None = None,
) -> list[PricingRule]:
    """Installment rules, optionally filtered by channel and/or card brand."""
    async with get_session() as session:
        query = select(InstallmentRule)
        if channel:
            query = query.where(InstallmentRule.channel == channel)
        if card_brand:
            query = query.where(InstallmentRule.card_brand == card_brand)
        result = await session.execute(query)
        return [row.to_rule() for row in result.scalars().all()]


async def list_plan_canje_values(model: str | None = None) -> list[ValuationRule]:
    """Plan canje valuation rules, optionally for a single model."""
    async with get_session() as session:
        query = select(PlanCanjeValue)
        if model:
            query = query.where(PlanCanjeValue.model == model)
        result = await session.execute(query)
        return [row.to_rule() for row in result.scalars().all()]


async def save_installment_quote(
    *,
    card_brand: str,
    channel: str,
    currency: str,
    base_price: float,
    usd_rate: float | None,
    base_price_ars: float,
    rows: list[dict[str, float]],
) -> InstallmentQuote:
    """Persist a calculator snapshot."""
    async with get_session() as session:
        quote = InstallmentQuote(
            card_brand=card_brand,
            channel=channel,
            currency=currency,
            base_price=base_price,
            usd_rate=usd_rate,
            base_price_ars=base_price_ars,
            rows_json=json.dumps(rows),
        )
        session.add(quote)
        await session.flush()
        logger.info(f"Installment quote {quote.id} saved ({len(rows)} rows)")
        return quote
