"""Installment rule model.

Card surcharge per (card_brand, installments, channel).
Channel is "standard" or "mercado_pago".
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from app.services.rules import Channel, PricingRule
from app.stores.postgres import Base


class InstallmentRule(Base):
    """Surcharge rule for paying in installments."""

    __tablename__ = "installment_rules"
    __table_args__ = (
        UniqueConstraint("card_brand", "installments", "channel", name="uq_installment_rules_brand_count_channel"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: str(uuid4()))

    card_brand: Mapped[str] = mapped_column(String(50), index=True)  # e.g., "Visa", "Naranja"
    installments: Mapped[int] = mapped_column()
    channel: Mapped[str] = mapped_column(String(20), default=Channel.STANDARD.value, index=True)
    surcharge_pct: Mapped[float] = mapped_column(default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def to_rule(self) -> PricingRule:
        return PricingRule(
            id=self.id,
            card_brand=self.card_brand,
            installments=self.installments,
            surcharge_pct=float(self.surcharge_pct or 0),
            channel=self.channel,
        )

    def __repr__(self) -> str:
        return f"<InstallmentRule {self.card_brand} x{self.installments} {self.channel} +{self.surcharge_pct}%>"
