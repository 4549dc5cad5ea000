"""Installment quote snapshot.

A saved calculator result so a seller can show the customer the same numbers later.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.stores.postgres import Base


class InstallmentQuote(Base):
    """Persisted installment table for a price."""

    __tablename__ = "installment_quotes"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: str(uuid4()))

    card_brand: Mapped[str] = mapped_column(String(50), default="General")
    channel: Mapped[str] = mapped_column(String(20))
    currency: Mapped[str] = mapped_column(String(3))
    base_price: Mapped[float] = mapped_column()
    usd_rate: Mapped[float | None] = mapped_column()
    base_price_ars: Mapped[float] = mapped_column()

    # Rows (JSON array of {installments, surcharge_pct, total_ars, installment_ars})
    rows_json: Mapped[str] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<InstallmentQuote {self.id} {self.card_brand} {self.base_price_ars:.2f} ARS>"
