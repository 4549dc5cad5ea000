"""API routes."""

from fastapi import APIRouter

from app.routes import pricing, stock

api_router = APIRouter()

# Stock lifecycle (state, promo, reservations)
api_router.include_router(stock.router, prefix="/v1/stock", tags=["stock"])

# Calculator, quotes, trade-in valuation, dollar rate
api_router.include_router(pricing.router, prefix="/v1/pricing", tags=["pricing"])
