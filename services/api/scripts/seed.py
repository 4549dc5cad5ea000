#!/usr/bin/env python3
"""Seed database with initial data.

Creates:
- Installment rules (card surcharges) for standard and Mercado Pago channels
- Plan canje values (trade-in bands) for common iPhone models
- A few sample stock units

Seed script is idempotent: rules are keyed by their natural key, stock units by IMEI.

Usage:
    cd services/api
    python -m scripts.seed
"""

import asyncio
import os
import sys
from datetime import datetime, timezone

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
from sqlalchemy import select

from app.models import InstallmentRule, PlanCanjeValue, StockItem
from app.services.lifecycle import StockState, state_from_legacy
from app.services.rules import Channel
from app.stores.postgres import close_db, create_tables, get_session, init_db
from app.stores.stock_repo import mark_stock_item_sold

load_dotenv()

# ============================================================
# Installment rules: (card_brand, installments) -> surcharge % per channel
# ============================================================

INSTALLMENT_SURCHARGES = {
    Channel.STANDARD: {
        "Visa": {1: 0, 3: 12, 6: 22, 9: 32, 12: 45},
        "Mastercard": {1: 0, 3: 12, 6: 22, 9: 32, 12: 45},
        "Naranja": {1: 0, 3: 15, 6: 25},
    },
    Channel.MERCADO_PAGO: {
        "Visa": {1: 6, 3: 18, 6: 30, 12: 55},
        "Mastercard": {1: 6, 3: 18, 6: 30, 12: 55},
    },
}

# ============================================================
# Plan canje: model -> list of bands
# ============================================================

PLAN_CANJE = [
    {"model": "iPhone 13", "battery_min": 80, "battery_max": 100, "pct_of_reference": 55},
    {"model": "iPhone 13", "battery_min": 0, "battery_max": 79, "pct_of_reference": 45},
    {"model": "iPhone 14 Pro", "storage_gb": 128, "battery_min": 85, "battery_max": 100, "value_ars": 650000},
    {"model": "iPhone 14 Pro", "battery_min": 0, "battery_max": 84, "pct_of_reference": 50},
    {"model": "iPhone 15", "battery_min": 90, "battery_max": 100, "pct_of_reference": 65},
]

SAMPLE_STOCK = [
    {
        "model": "iPhone 15 Pro",
        "brand": "Apple",
        "category": "new",
        "state": StockState.NEW.value,
        "storage_gb": 256,
        "color": "Natural",
        "condition": "new",
        "imei": "356789012345671",
        "battery_pct": 100,
        "purchase_usd": 950,
        "sale_price_usd": 1150,
        "warranty_days": 365,
        "is_sealed": True,
    },
    {
        "model": "iPhone 13",
        "brand": "Apple",
        "category": "used_premium",
        "state": StockState.USED_PREMIUM.value,
        "storage_gb": 128,
        "color": "Midnight",
        "condition": "used",
        "imei": "356789012345672",
        "battery_pct": 86,
        "purchase_usd": 320,
        "sale_price_usd": 430,
        "warranty_days": 90,
    },
    # Legacy exports only carry `status`; state is recovered from status/category
    {
        "model": "iPhone 14",
        "brand": "Apple",
        "category": "outlet",
        "status": "drawer",
        "storage_gb": 128,
        "color": "Blue",
        "condition": "outlet",
        "imei": "356789012345673",
        "battery_pct": 97,
        "purchase_usd": 520,
        "sale_price_usd": 650,
        "warranty_days": 180,
    },
    {
        "model": "iPhone 12",
        "brand": "Apple",
        "category": "used_premium",
        "status": "sold",
        "sale_id": "seed-sale-0001",
        "storage_gb": 64,
        "color": "White",
        "condition": "used",
        "imei": "356789012345674",
        "battery_pct": 81,
        "purchase_usd": 210,
        "sale_price_usd": 290,
        "warranty_days": 30,
    },
]


async def seed_installment_rules() -> None:
    """Seed installment rules."""
    async with get_session() as session:
        for channel, brands in INSTALLMENT_SURCHARGES.items():
            for brand, table in brands.items():
                for installments, pct in table.items():
                    result = await session.execute(
                        select(InstallmentRule)
                        .where(InstallmentRule.card_brand == brand)
                        .where(InstallmentRule.installments == installments)
                        .where(InstallmentRule.channel == channel.value)
                    )
                    existing = result.scalar_one_or_none()
                    if existing:
                        existing.surcharge_pct = pct
                        print(f"  ⏭️  {brand} x{installments} {channel.value} (updated)")
                    else:
                        session.add(
                            InstallmentRule(
                                card_brand=brand,
                                installments=installments,
                                channel=channel.value,
                                surcharge_pct=pct,
                            )
                        )
                        print(f"  ✅ {brand} x{installments} {channel.value} +{pct}%")


async def seed_plan_canje() -> None:
    """Seed plan canje bands."""
    async with get_session() as session:
        for band in PLAN_CANJE:
            result = await session.execute(
                select(PlanCanjeValue)
                .where(PlanCanjeValue.model == band["model"])
                .where(PlanCanjeValue.battery_min == band["battery_min"])
                .where(PlanCanjeValue.battery_max == band["battery_max"])
            )
            if result.scalar_one_or_none():
                print(f"  ⏭️  {band['model']} {band['battery_min']}-{band['battery_max']}% (exists)")
                continue
            session.add(PlanCanjeValue(**band))
            print(f"  ✅ {band['model']} {band['battery_min']}-{band['battery_max']}%")


async def seed_stock(fx_rate: float) -> None:
    """Seed sample stock units (ARS prices computed with `fx_rate`).

    Sold units are inserted unsold and then go through mark_stock_item_sold,
    the only path that sets state=sold together with sale_id.
    """
    to_sell: list[tuple[StockItem, str]] = []

    async with get_session() as session:
        for raw in SAMPLE_STOCK:
            unit = dict(raw)
            status = unit.pop("status", None)
            sale_id = unit.pop("sale_id", None)
            state = unit.pop("state", None) or state_from_legacy(status, unit["category"]).value
            if state == StockState.SOLD.value:
                state = state_from_legacy(None, unit["category"]).value

            result = await session.execute(select(StockItem).where(StockItem.imei == unit["imei"]))
            if result.scalar_one_or_none():
                print(f"  ⏭️  {unit['model']} {unit['imei']} (exists)")
                continue
            item = StockItem(
                **unit,
                state=state,
                fx_rate_used=fx_rate,
                purchase_ars=unit["purchase_usd"] * fx_rate,
                sale_price_ars=unit["sale_price_usd"] * fx_rate,
                received_at=datetime.now(timezone.utc),
            )
            session.add(item)
            if sale_id:
                to_sell.append((item, sale_id))
            print(f"  ✅ {unit['model']} {unit['imei']} ({state})")

    for item, sale_id in to_sell:
        await mark_stock_item_sold(item.id, sale_id)
        print(f"  💰 {item.model} {item.imei} sold ({sale_id})")


async def seed_database() -> None:
    """Create tables and seed all data."""
    await init_db()
    try:
        await create_tables()
        print("📇 Installment rules")
        await seed_installment_rules()
        print("🔁 Plan canje")
        await seed_plan_canje()
        print("📦 Stock")
        await seed_stock(fx_rate=float(os.getenv("SEED_FX_RATE", "1200")))
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(seed_database())
