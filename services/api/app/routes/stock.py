"""Stock lifecycle endpoints.

GET    /v1/stock/{id}          - Read a unit (with derived legacy status)
PATCH  /v1/stock/{id}/state    - Change lifecycle state
PATCH  /v1/stock/{id}/promo    - Toggle promo highlight
POST   /v1/stock/{id}/reserve  - Reserve (reserva) or take a seña (deposit)
DELETE /v1/stock/{id}          - Always blocked

Routers are thin: legality lives in services, store rejections are turned
into ErrorResponse bodies by the StockMutationError handler in app.main.
"""

from typing import Any

from fastapi import APIRouter, Path
from fastapi.responses import JSONResponse

from app.schemas import PromoRequest, ReserveRequest, StateChangeRequest, StockItemOut, error_body
from app.services import stock as stock_service
from app.services.stock_errors import CODE_STOCK_LOCKED, STOCK_LOCKED_MESSAGE

router = APIRouter()


def to_stock_item_out(item: Any) -> StockItemOut:
    """Convert a StockItem row to its API schema."""
    return StockItemOut(
        id=item.id,
        state=item.state,
        status=item.status,
        sale_id=item.sale_id,
        is_promo=bool(item.is_promo),
        version=item.version,
        category=item.category,
        brand=item.brand,
        model=item.model,
        storage_gb=item.storage_gb,
        color=item.color,
        condition=item.condition,
        imei=item.imei,
        battery_pct=item.battery_pct,
        purchase_usd=item.purchase_usd,
        fx_rate_used=item.fx_rate_used,
        purchase_ars=item.purchase_ars,
        sale_price_usd=item.sale_price_usd,
        sale_price_ars=item.sale_price_ars,
        warranty_days=item.warranty_days,
        reserve_type=item.reserve_type,
        reserve_amount_ars=item.reserve_amount_ars,
        days_in_stock=item.days_in_stock,
        updated_at=item.updated_at,
    )


def _respond(result: stock_service.StockActionResult) -> StockItemOut | JSONResponse:
    if not result.allowed:
        return JSONResponse(
            status_code=409,
            content=error_body(
                CODE_STOCK_LOCKED,
                result.message or STOCK_LOCKED_MESSAGE,
                {"id": result.item.id, "state": result.item.state, "saleId": result.item.sale_id},
            ),
        )
    return to_stock_item_out(result.item)


@router.get("/{item_id}", response_model=StockItemOut)
async def get_stock_item(item_id: str = Path(min_length=1, max_length=64)) -> StockItemOut:
    """Get a single stock unit."""
    item = await stock_service.load_stock_item(item_id)
    return to_stock_item_out(item)


@router.patch("/{item_id}/state", response_model=StockItemOut)
async def change_state(
    request: StateChangeRequest,
    item_id: str = Path(min_length=1, max_length=64),
) -> StockItemOut | JSONResponse:
    """Change the lifecycle state of an unsold unit."""
    result = await stock_service.change_stock_state(item_id, request.state)
    return _respond(result)


@router.patch("/{item_id}/promo", response_model=StockItemOut)
async def toggle_promo(
    request: PromoRequest,
    item_id: str = Path(min_length=1, max_length=64),
) -> StockItemOut | JSONResponse:
    """Set or clear the promo flag of an unsold unit."""
    result = await stock_service.set_stock_promo(item_id, request.is_promo)
    return _respond(result)


@router.post("/{item_id}/reserve", response_model=StockItemOut)
async def reserve(
    request: ReserveRequest,
    item_id: str = Path(min_length=1, max_length=64),
) -> StockItemOut | JSONResponse:
    """Reserve a unit (reserva -> reserved, seña -> deposit)."""
    result = await stock_service.reserve_stock_item(
        item_id,
        request.reserve_type,
        reserve_amount_ars=request.reserve_amount_ars,
        reserve_notes=request.reserve_notes,
    )
    return _respond(result)


@router.delete("/{item_id}")
async def delete_stock_item(item_id: str = Path(min_length=1, max_length=64)) -> None:
    """Deleting stock units is not allowed."""
    await stock_service.delete_stock_item(item_id)
