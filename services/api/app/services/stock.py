"""Stock mutations: validate locally, then dispatch to the record store.

Each operation reads the current snapshot, runs the lifecycle guard and, only
when the guard allows it, awaits the store write. Store rejections
(StockMutationError) propagate to the caller unchanged; they are not retried.
"""

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Any

from app.services.lifecycle import StockState, coerce_state, run_promo_guard, run_transition_guard
from app.services.stock_errors import (
    CODE_STOCK_DELETE_BLOCKED,
    CODE_STOCK_NOT_FOUND,
    STOCK_DELETE_BLOCKED_MESSAGE,
    STOCK_LOCKED_MESSAGE,
    StockMutationError,
)
from app.stores import stock_repo

logger = logging.getLogger("uvicorn.error")


class ReserveType(str, Enum):
    """Reservation kind: plain hold (reserva) or hold with down payment (seña)."""

    RESERVA = "reserva"
    SENA = "sena"


_RESERVE_STATES = {
    ReserveType.RESERVA: StockState.RESERVED,
    ReserveType.SENA: StockState.DEPOSIT,
}

# Written when a unit leaves reserved/deposit
_CLEARED_RESERVATION = {"reserve_type": None, "reserve_amount_ars": None, "reserve_notes": None}


@dataclass
class StockActionResult:
    """Result of a guarded stock action.

    When `allowed` is False the store was not contacted and `item` is the
    unchanged snapshot.
    """

    allowed: bool
    item: Any
    message: str | None = None


async def load_stock_item(item_id: str) -> Any:
    item = await stock_repo.get_stock_item(item_id)
    if item is None:
        raise StockMutationError(CODE_STOCK_NOT_FOUND, f"Stock item {item_id} not found", {"id": item_id})
    return item


async def change_stock_state(
    item_id: str,
    target_state: StockState | str,
    extra: dict[str, Any] | None = None,
) -> StockActionResult:
    """Move a unit to another non-sold state.

    Args:
        item_id: Stock item id.
        target_state: Requested lifecycle state.
        extra: Additional fields written together with the state.
    """
    item = await load_stock_item(item_id)
    target = coerce_state(target_state)

    def dispatch(snapshot: Any, state: StockState):
        patch = {"state": state.value}
        if state not in (StockState.RESERVED, StockState.DEPOSIT):
            patch.update(_CLEARED_RESERVATION)
        patch.update(extra or {})
        return stock_repo.update_stock_item(snapshot.id, patch, expected_version=snapshot.version)

    guard = run_transition_guard(item, target, dispatch)
    if not guard.allowed:
        return StockActionResult(allowed=False, item=item, message=STOCK_LOCKED_MESSAGE)

    updated = await guard.pending
    logger.info(f"Stock item {item_id} moved {item.state} -> {target.value}")
    return StockActionResult(allowed=True, item=updated)


async def set_stock_promo(item_id: str, is_promo: bool) -> StockActionResult:
    """Toggle the promo highlight of an unsold unit."""
    item = await load_stock_item(item_id)

    def dispatch(snapshot: Any, flag: bool):
        return stock_repo.update_stock_item(snapshot.id, {"is_promo": flag}, expected_version=snapshot.version)

    guard = run_promo_guard(item, is_promo, dispatch)
    if not guard.allowed:
        return StockActionResult(allowed=False, item=item, message=STOCK_LOCKED_MESSAGE)

    return StockActionResult(allowed=True, item=await guard.pending)


async def reserve_stock_item(
    item_id: str,
    reserve_type: ReserveType | str,
    reserve_amount_ars: float | None = None,
    reserve_notes: str | None = None,
) -> StockActionResult:
    """Reserve a unit: reserva -> reserved, seña -> deposit."""
    kind = ReserveType(reserve_type)
    return await change_stock_state(
        item_id,
        _RESERVE_STATES[kind],
        extra={
            "reserve_type": kind.value,
            "reserve_amount_ars": reserve_amount_ars,
            "reserve_notes": reserve_notes,
        },
    )


async def delete_stock_item(item_id: str) -> None:
    """Stock units are never deleted through the back-office; the store is not contacted."""
    logger.warning(f"Delete blocked for stock item {item_id}")
    raise StockMutationError(CODE_STOCK_DELETE_BLOCKED, STOCK_DELETE_BLOCKED_MESSAGE, {"id": item_id})
