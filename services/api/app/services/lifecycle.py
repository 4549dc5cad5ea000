"""Stock item lifecycle guard.

Single authority on whether a requested mutation to a stock item is legal,
decided locally before any store round-trip:

- A unit that is sold, or already linked to a sale, is locked: no state change
  (not even re-asserting "sold") and no promo toggle go through this guard.
- Every other state is reachable from every other non-sold state.

Guards follow a validate-then-dispatch shape: the legality check is pure and
synchronous, the mutation is an injected callable that is invoked at most once
and never awaited here.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
import logging
from typing import Any

logger = logging.getLogger("uvicorn.error")


class StockState(str, Enum):
    """Authoritative lifecycle state of a stock unit."""

    NEW = "new"
    OUTLET = "outlet"
    USED_PREMIUM = "used_premium"
    RESERVED = "reserved"
    DEPOSIT = "deposit"  # reserved with a seña (down payment)
    DRAWER = "drawer"
    SERVICE_TECH = "service_tech"
    SOLD = "sold"


class LegacyStatus(str, Enum):
    """Coarse status read by older call sites. Always derived from StockState."""

    AVAILABLE = "available"
    RESERVED = "reserved"
    SOLD = "sold"
    DRAWER = "drawer"
    SERVICE_TECH = "service_tech"


_LEGACY_STATUS_BY_STATE = {
    StockState.SOLD: LegacyStatus.SOLD,
    StockState.RESERVED: LegacyStatus.RESERVED,
    StockState.DRAWER: LegacyStatus.DRAWER,
    StockState.SERVICE_TECH: LegacyStatus.SERVICE_TECH,
}

# Category values that double as intake states for legacy rows without `state`.
_CATEGORY_STATES = {
    "new": StockState.NEW,
    "outlet": StockState.OUTLET,
    "used_premium": StockState.USED_PREMIUM,
}

_LOCKING_STATUSES = {
    "sold": StockState.SOLD,
    "reserved": StockState.RESERVED,
    "drawer": StockState.DRAWER,
    "service_tech": StockState.SERVICE_TECH,
}


@dataclass(frozen=True)
class TransitionGuardResult:
    """Outcome of a guarded mutation.

    `pending` holds whatever the mutation returned (typically an un-awaited
    coroutine) when it was dispatched; it is None when the guard blocked it.
    """

    allowed: bool
    pending: Any = None


def coerce_state(value: StockState | str) -> StockState:
    """Convert a raw string to StockState (raises ValueError for unknown values)."""
    if isinstance(value, StockState):
        return value
    return StockState(str(value).strip().lower())


def derive_legacy_status(state: StockState | str) -> LegacyStatus:
    """Project a lifecycle state onto the legacy coarse status.

    sold and reserved map to themselves, drawer and service_tech keep their
    own status, and every other in-inventory state (deposit included) is
    "available".
    """
    return _LEGACY_STATUS_BY_STATE.get(coerce_state(state), LegacyStatus.AVAILABLE)


def state_from_legacy(status: str | None, category: str | None = None) -> StockState:
    """Recover a lifecycle state for legacy rows that only carry status/category."""
    if status and status in _LOCKING_STATUSES:
        return _LOCKING_STATUSES[status]
    if category and category in _CATEGORY_STATES:
        return _CATEGORY_STATES[category]
    return StockState.NEW


def is_sold_or_linked(item: Any) -> bool:
    """True when the unit is sold or already referenced by a sale.

    Also true when a concurrent sale set `sale_id` before the local state
    caught up.
    """
    if item.sale_id is not None:
        return True
    try:
        return coerce_state(item.state) is StockState.SOLD
    except ValueError:
        return False


def can_change_state(item: Any, target_state: StockState | str) -> bool:
    """Whether a manual state change is legal. Sale completion never goes through here."""
    return not is_sold_or_linked(item)


def can_toggle_promo(item: Any) -> bool:
    """Whether the promo flag may be toggled."""
    return not is_sold_or_linked(item)


def run_transition_guard(
    item: Any,
    target_state: StockState | str,
    perform_mutation: Callable[[Any, StockState | str], Any],
) -> TransitionGuardResult:
    """Dispatch `perform_mutation(item, target_state)` only if the change is legal.

    When blocked, the mutation is not called at all. When allowed, it is called
    exactly once and its return value is handed back un-awaited.
    """
    if not can_change_state(item, target_state):
        logger.warning(
            f"Blocked state change to {getattr(target_state, 'value', target_state)}: item is sold or sale-linked"
        )
        return TransitionGuardResult(allowed=False)
    return TransitionGuardResult(allowed=True, pending=perform_mutation(item, target_state))


def run_promo_guard(
    item: Any,
    is_promo: bool,
    perform_mutation: Callable[[Any, bool], Any],
) -> TransitionGuardResult:
    """Same contract as run_transition_guard, for the promo flag."""
    if not can_toggle_promo(item):
        logger.warning("Blocked promo toggle: item is sold or sale-linked")
        return TransitionGuardResult(allowed=False)
    return TransitionGuardResult(allowed=True, pending=perform_mutation(item, is_promo))
