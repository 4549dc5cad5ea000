"""Stock mutation errors and their user-facing messages.

The record store raises StockMutationError with a stable classification code.
Callers show `resolve_mutation_error_message(...)`, never the raw code.
"""

from collections.abc import Mapping
from typing import Any

# User-facing messages (stable text, asserted literally by tests/clients)
STOCK_CONFLICT_MESSAGE = "Ese equipo ya fue vendido o modificado por otro usuario."
STOCK_PROMO_BLOCKED_MESSAGE = "No se puede cambiar la promo de un equipo vendido o vinculado a una venta."
STOCK_DELETE_BLOCKED_MESSAGE = "No se permite eliminar equipos del stock."
STOCK_LOCKED_MESSAGE = "El equipo está vendido o vinculado a una venta y no admite cambios."

# Classification codes
CODE_STOCK_CONFLICT = "stock_conflict"
CODE_STOCK_PROMO_BLOCKED = "stock_promo_blocked"
CODE_STOCK_DELETE_BLOCKED = "stock_delete_blocked"
CODE_STOCK_NOT_FOUND = "stock_not_found"
CODE_STOCK_LOCKED = "stock_locked"

_PROMO_BLOCKED_CODES = {CODE_STOCK_PROMO_BLOCKED, "promo_blocked"}


class StockMutationError(RuntimeError):
    """Structured error raised by the stock record store.

    Attributes:
        code: Classification code (e.g. "stock_conflict").
        message: Human-readable message.
        detail: Additional context data.
    """

    def __init__(self, code: str, message: str = "", detail: dict[str, Any] | None = None):
        self.code = code
        self.message = message or code
        self.detail = detail or {}
        super().__init__(self.message)

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {"code": self.code, "message": self.message, "detail": self.detail}


def _error_code(error: object) -> str:
    if isinstance(error, Mapping):
        raw = error.get("code")
    else:
        raw = getattr(error, "code", None)
    if raw is None:
        return ""
    try:
        return str(raw).strip().lower()
    except Exception:
        return ""


def resolve_mutation_error_message(error: object, fallback_message: str) -> str:
    """Map a store error to the message shown to the user.

    Args:
        error: Exception (or `{code, message}` mapping) raised by the store.
        fallback_message: Message shown for unclassified errors.

    Returns:
        The conflict sentinel, the promo-blocked message, the delete-blocked
        message, or `fallback_message` unchanged.
    """
    code = _error_code(error)
    if code == CODE_STOCK_CONFLICT:
        return STOCK_CONFLICT_MESSAGE
    if code in _PROMO_BLOCKED_CODES:
        return STOCK_PROMO_BLOCKED_MESSAGE
    if code == CODE_STOCK_DELETE_BLOCKED:
        return STOCK_DELETE_BLOCKED_MESSAGE
    return fallback_message
