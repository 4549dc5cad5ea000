"""Schemas for stock endpoints (/v1/stock)."""

from datetime import datetime

from pydantic import BaseModel, Field

from app.services.lifecycle import LegacyStatus, StockState
from app.services.stock import ReserveType


class StockItemOut(BaseModel):
    """Stock unit as returned by the API (includes the derived legacy status)."""

    id: str
    state: StockState
    status: LegacyStatus
    sale_id: str | None = Field(alias="saleId", default=None)
    is_promo: bool = Field(alias="isPromo", default=False)
    version: int
    category: str | None = None
    brand: str | None = None
    model: str
    storage_gb: int | None = Field(alias="storageGb", default=None)
    color: str | None = None
    condition: str | None = None
    imei: str | None = None
    battery_pct: float | None = Field(alias="batteryPct", default=None)
    purchase_usd: float | None = Field(alias="purchaseUsd", default=None)
    fx_rate_used: float | None = Field(alias="fxRateUsed", default=None)
    purchase_ars: float | None = Field(alias="purchaseArs", default=None)
    sale_price_usd: float | None = Field(alias="salePriceUsd", default=None)
    sale_price_ars: float | None = Field(alias="salePriceArs", default=None)
    warranty_days: int | None = Field(alias="warrantyDays", default=None)
    reserve_type: str | None = Field(alias="reserveType", default=None)
    reserve_amount_ars: float | None = Field(alias="reserveAmountArs", default=None)
    days_in_stock: int | None = Field(alias="daysInStock", default=None)
    updated_at: datetime | None = Field(alias="updatedAt", default=None)

    model_config = {"populate_by_name": True, "from_attributes": True}


class StateChangeRequest(BaseModel):
    """Body for PATCH /v1/stock/{id}/state."""

    state: StockState


class PromoRequest(BaseModel):
    """Body for PATCH /v1/stock/{id}/promo."""

    is_promo: bool = Field(alias="isPromo")

    model_config = {"populate_by_name": True}


class ReserveRequest(BaseModel):
    """Body for POST /v1/stock/{id}/reserve."""

    reserve_type: ReserveType = Field(alias="reserveType")
    reserve_amount_ars: float | None = Field(alias="reserveAmountArs", default=None, ge=0)
    reserve_notes: str | None = Field(alias="reserveNotes", default=None, max_length=2000)

    model_config = {"populate_by_name": True}
