"""Installment pricing engine.

Formula per row:
    total = base_price_ars * (1 + surcharge_pct / 100)
    per_installment = total / installments   (total when installments <= 0)

No rounding is applied here; rounding is a presentation concern
(see quote_snapshot_rows).
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from app.services.rules import Channel, PricingRule, resolve_surcharge_pct

DEFAULT_INSTALLMENT_PLAN: tuple[int, ...] = (1, 3, 6, 9, 12)


@dataclass(frozen=True)
class InstallmentRow:
    """One row of the installment table."""

    installments: int
    surcharge_pct: float
    total: float
    per_installment: float


def ars_base_price(price: float, currency: str = "ARS", usd_rate: float | None = None) -> float:
    """Base price in ARS.

    USD prices are multiplied by the dollar rate; a missing or non-positive
    rate gives 0.0 rather than an error.
    """
    if currency.upper() == "ARS":
        return float(price)
    if not usd_rate or usd_rate <= 0:
        return 0.0
    return float(price) * float(usd_rate)


def compute_installment_row(
    base_price_ars: float,
    installments: int,
    surcharge_pct: float,
) -> InstallmentRow:
    """Compute total and per-installment amount for one installment count."""
    total = base_price_ars * (1 + surcharge_pct / 100)
    per_installment = total / installments if installments > 0 else total
    return InstallmentRow(
        installments=installments,
        surcharge_pct=surcharge_pct,
        total=total,
        per_installment=per_installment,
    )


def build_installment_table(
    base_price_ars: float,
    rules: Iterable[PricingRule],
    *,
    card_brand: str | None = None,
    channel: Channel | str = Channel.STANDARD,
    plan: Sequence[int] = DEFAULT_INSTALLMENT_PLAN,
) -> list[InstallmentRow]:
    """Build one row per installment count in `plan`.

    Counts without a configured rule get a zero surcharge.
    """
    rules = list(rules)
    return [
        compute_installment_row(
            base_price_ars,
            installments,
            resolve_surcharge_pct(rules, card_brand=card_brand, installments=installments, channel=channel),
        )
        for installments in plan
    ]


def quote_snapshot_rows(rows: Iterable[InstallmentRow]) -> list[dict[str, float]]:
    """Rows as persisted in a quote snapshot (amounts rounded to cents)."""
    return [
        {
            "installments": row.installments,
            "surcharge_pct": row.surcharge_pct,
            "total_ars": round(row.total, 2),
            "installment_ars": round(row.per_installment, 2),
        }
        for row in rows
    ]
