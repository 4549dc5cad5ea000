"""Pydantic schemas for API request/response validation."""

from app.schemas.common import ErrorDetail, ErrorResponse, error_body
from app.schemas.pricing import (
    FxRateResponse,
    InstallmentQuoteRequest,
    InstallmentQuoteResponse,
    InstallmentRowOut,
    SavedQuoteResponse,
    TradeInSuggestRequest,
    TradeInSuggestResponse,
)
from app.schemas.stock import PromoRequest, ReserveRequest, StateChangeRequest, StockItemOut

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "error_body",
    "FxRateResponse",
    "InstallmentQuoteRequest",
    "InstallmentQuoteResponse",
    "InstallmentRowOut",
    "SavedQuoteResponse",
    "TradeInSuggestRequest",
    "TradeInSuggestResponse",
    "PromoRequest",
    "ReserveRequest",
    "StateChangeRequest",
    "StockItemOut",
]
