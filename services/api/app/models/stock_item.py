"""Stock item model.

One physical phone unit in inventory. `state` is the only persisted lifecycle
field; the legacy coarse `status` is derived from it.

`version` is bumped on every write and used for optimistic concurrency.
"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column

from app.services.lifecycle import LegacyStatus, StockState, derive_legacy_status
from app.stores.postgres import Base


def generate_stock_item_id() -> str:
    """Generate unique stock item ID."""
    return str(uuid4())


class StockItem(Base):
    """Physical stock unit."""

    __tablename__ = "stock_items"
    __table_args__ = (
        CheckConstraint("sale_id IS NULL OR state = 'sold'", name="ck_stock_items_sale_id_only_when_sold"),
        Index("uq_stock_items_sale_id", "sale_id", unique=True, postgresql_where=text("sale_id IS NOT NULL")),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=generate_stock_item_id)

    # Lifecycle
    state: Mapped[str] = mapped_column(String(20), index=True, default=StockState.NEW.value)
    sale_id: Mapped[str | None] = mapped_column(String(64))
    is_promo: Mapped[bool] = mapped_column(default=False)
    version: Mapped[int] = mapped_column(Integer, default=1)

    # Device
    category: Mapped[str | None] = mapped_column(String(30))  # new, outlet, used_premium, promotion
    brand: Mapped[str | None] = mapped_column(String(50))
    model: Mapped[str] = mapped_column(String(100), index=True)
    storage_gb: Mapped[int | None] = mapped_column()
    color: Mapped[str | None] = mapped_column(String(50))
    color_other: Mapped[str | None] = mapped_column(String(50))
    condition: Mapped[str | None] = mapped_column(String(30))
    imei: Mapped[str | None] = mapped_column(String(20), index=True)
    battery_pct: Mapped[float | None] = mapped_column()
    is_sealed: Mapped[bool] = mapped_column(default=False)

    # Pricing (informational, flows through unchanged)
    purchase_usd: Mapped[float | None] = mapped_column()
    fx_rate_used: Mapped[float | None] = mapped_column()
    purchase_ars: Mapped[float | None] = mapped_column()
    sale_price_usd: Mapped[float | None] = mapped_column()
    sale_price_ars: Mapped[float | None] = mapped_column()
    warranty_days: Mapped[int | None] = mapped_column()

    # Provenance
    provider_name: Mapped[str | None] = mapped_column(String(200))
    details: Mapped[str | None] = mapped_column(Text)
    received_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Reservation (reserva / seña)
    reserve_type: Mapped[str | None] = mapped_column(String(10))
    reserve_amount_ars: Mapped[float | None] = mapped_column()
    reserve_notes: Mapped[str | None] = mapped_column(Text)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    @property
    def status(self) -> LegacyStatus:
        """Legacy coarse status derived from state."""
        return derive_legacy_status(self.state)

    @property
    def days_in_stock(self) -> int | None:
        """Whole days since the unit was received (falls back to created_at)."""
        since = self.received_at or self.created_at
        if since is None:
            return None
        if since.tzinfo is None:
            since = since.replace(tzinfo=timezone.utc)
        now = datetime.now(timezone.utc)
        return max(0, (now.date() - since.astimezone(timezone.utc).date()).days)

    def __repr__(self) -> str:
        return f"<StockItem {self.id} {self.model} state={self.state}>"
