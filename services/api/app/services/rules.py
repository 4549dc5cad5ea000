"""Rule matcher for installment surcharges and trade-in valuations.

Both matchers return at most one rule and are order-independent: the same rule
set in any iteration order yields the same result.

Pricing (installment rules):
1. Exact card_brand (case-sensitive); empty brand means no brand filter
2. Exact installments count
3. Prefer the requested channel, fall back to any channel
4. Remaining ties broken by (card_brand, channel, id)

Valuation (plan canje values):
1. Exact model
2. battery_min <= battery_pct <= battery_max
3. storage_gb must match when both device and rule carry one
4. Ties: fixed value_ars first, narrowest battery range, storage-specific
   over generic, higher battery_min, then id
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum


class Channel(str, Enum):
    """Payment channel an installment rule applies to."""

    STANDARD = "standard"
    MERCADO_PAGO = "mercado_pago"


@dataclass(frozen=True)
class PricingRule:
    """Installment surcharge rule."""

    id: str
    card_brand: str
    installments: int
    surcharge_pct: float
    channel: str = Channel.STANDARD.value


@dataclass(frozen=True)
class ValuationRule:
    """Plan canje entry: trade-in value for a model/storage/battery band."""

    id: str
    model: str
    battery_min: float
    battery_max: float
    storage_gb: int | None = None
    pct_of_reference: float | None = None
    value_ars: float | None = None

    @property
    def has_fixed_value(self) -> bool:
        return self.value_ars is not None and self.value_ars > 0

    @property
    def battery_span(self) -> float:
        return self.battery_max - self.battery_min


def _channel_value(channel: Channel | str | None) -> str:
    if channel is None:
        return ""
    return channel.value if isinstance(channel, Channel) else str(channel)


def match_pricing_rule(
    rules: Iterable[PricingRule],
    *,
    card_brand: str | None,
    installments: int,
    channel: Channel | str | None = Channel.STANDARD,
) -> PricingRule | None:
    """Find the installment rule for brand + installments + channel.

    Args:
        rules: Candidate rules (any order).
        card_brand: Card brand; empty/None matches any brand.
        installments: Installment count (exact match).
        channel: Preferred channel.

    Returns:
        Best matching rule, or None when nothing is configured.
    """
    wanted_channel = _channel_value(channel)
    candidates = [
        rule
        for rule in rules
        if rule.installments == installments
        and (not card_brand or rule.card_brand == card_brand)
    ]
    if not candidates:
        return None

    return min(
        candidates,
        key=lambda r: (
            0 if _channel_value(r.channel) == wanted_channel else 1,
            r.card_brand,
            _channel_value(r.channel),
            str(r.id),
        ),
    )


def resolve_surcharge_pct(
    rules: Iterable[PricingRule],
    *,
    card_brand: str | None,
    installments: int,
    channel: Channel | str | None = Channel.STANDARD,
) -> float:
    """Surcharge percentage for a lookup; 0.0 when no rule is configured."""
    rule = match_pricing_rule(rules, card_brand=card_brand, installments=installments, channel=channel)
    if rule is None:
        return 0.0
    return float(rule.surcharge_pct or 0)


def match_valuation_rule(
    rules: Iterable[ValuationRule],
    *,
    model: str,
    battery_pct: float | None,
    storage_gb: int | None = None,
) -> ValuationRule | None:
    """Find the plan canje entry for a trade-in device.

    Returns None when the battery percentage is unknown or no rule matches.
    """
    if battery_pct is None:
        return None

    candidates: list[ValuationRule] = []
    for rule in rules:
        if rule.model != model:
            continue
        if not (rule.battery_min <= battery_pct <= rule.battery_max):
            continue
        if storage_gb is not None and rule.storage_gb is not None and rule.storage_gb != storage_gb:
            continue
        candidates.append(rule)

    if not candidates:
        return None

    return min(
        candidates,
        key=lambda r: (
            0 if r.has_fixed_value else 1,
            r.battery_span,
            0 if r.storage_gb is not None else 1,
            -r.battery_min,
            str(r.id),
        ),
    )
