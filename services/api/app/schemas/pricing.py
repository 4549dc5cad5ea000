"""Schemas for pricing endpoints (/v1/pricing)."""

from pydantic import BaseModel, Field

from app.services.rules import Channel


class InstallmentQuoteRequest(BaseModel):
    """Calculator input.

    USD prices need `usdRate`; when it is omitted the current dollar rate is used.
    """

    price: float = Field(ge=0)
    currency: str = Field(default="ARS", pattern="^(ARS|USD)$")
    usd_rate: float | None = Field(alias="usdRate", default=None, ge=0)
    card_brand: str | None = Field(alias="cardBrand", default=None)
    channel: Channel = Channel.STANDARD

    model_config = {"populate_by_name": True}


class InstallmentRowOut(BaseModel):
    installments: int
    surcharge_pct: float = Field(alias="surchargePct")
    total: float
    per_installment: float = Field(alias="perInstallment")

    model_config = {"populate_by_name": True}


class InstallmentQuoteResponse(BaseModel):
    base_price_ars: float = Field(alias="basePriceArs")
    usd_rate: float | None = Field(alias="usdRate", default=None)
    card_brand: str | None = Field(alias="cardBrand", default=None)
    channel: Channel
    rows: list[InstallmentRowOut]

    model_config = {"populate_by_name": True}


class SavedQuoteResponse(BaseModel):
    quote_id: str = Field(alias="quoteId")
    rows: list[dict[str, float]]

    model_config = {"populate_by_name": True}


class TradeInSuggestRequest(BaseModel):
    """Trade-in device description for a suggested value."""

    model: str = Field(min_length=1)
    battery_pct: float | None = Field(alias="batteryPct", default=None, ge=0, le=100)
    storage_gb: int | None = Field(alias="storageGb", default=None, gt=0)
    reference_price_ars: float | None = Field(alias="referencePriceArs", default=None, ge=0)
    reference_usd: float | None = Field(alias="referenceUsd", default=None, ge=0)
    fx_rate: float | None = Field(alias="fxRate", default=None, ge=0)

    model_config = {"populate_by_name": True}


class TradeInSuggestResponse(BaseModel):
    """`suggestedValueArs` is null when no value can be computed."""

    suggested_value_ars: float | None = Field(alias="suggestedValueArs", default=None)
    rule_id: str | None = Field(alias="ruleId", default=None)

    model_config = {"populate_by_name": True}


class FxRateResponse(BaseModel):
    currency: str
    usd_rate: float = Field(alias="usdRate")

    model_config = {"populate_by_name": True}
