"""Plan canje (trade-in) value model.

Maps model + optional storage + battery band to either a fixed ARS value or a
percentage of the reference price.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import CheckConstraint, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.services.rules import ValuationRule
from app.stores.postgres import Base


class PlanCanjeValue(Base):
    """Trade-in valuation rule."""

    __tablename__ = "plan_canje_values"
    __table_args__ = (
        CheckConstraint("battery_min <= battery_max", name="ck_plan_canje_battery_range"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: str(uuid4()))

    model: Mapped[str] = mapped_column(String(100), index=True)  # e.g., "iPhone 13 Pro"
    storage_gb: Mapped[int | None] = mapped_column()  # None = any storage
    battery_min: Mapped[float] = mapped_column(default=0)
    battery_max: Mapped[float] = mapped_column(default=100)

    pct_of_reference: Mapped[float | None] = mapped_column()
    value_ars: Mapped[float | None] = mapped_column()  # fixed value wins over pct

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def to_rule(self) -> ValuationRule:
        return ValuationRule(
            id=self.id,
            model=self.model,
            storage_gb=self.storage_gb,
            battery_min=float(self.battery_min),
            battery_max=float(self.battery_max),
            pct_of_reference=self.pct_of_reference,
            value_ars=self.value_ars,
        )

    def __repr__(self) -> str:
        return f"<PlanCanjeValue {self.model} {self.battery_min}-{self.battery_max}%>"
