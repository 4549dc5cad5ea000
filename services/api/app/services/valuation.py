"""Trade-in valuation engine.

Precedence:
1. Fixed value_ars > 0 on the matched rule
2. pct_of_reference > 0 applied to the device reference value (ARS)
3. Otherwise None: the seller enters the value manually

None and 0.0 are different answers: 0.0 is a valid explicit valuation.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from app.services.rules import ValuationRule, match_valuation_rule


@dataclass(frozen=True)
class TradeInDevice:
    """Device offered as trade-in."""

    model: str
    battery_pct: float | None = None
    storage_gb: int | None = None
    reference_price_ars: float | None = None
    reference_usd: float | None = None
    fx_rate: float | None = None

    @property
    def reference_value_ars(self) -> float | None:
        """Reference value in ARS, or None when it cannot be determined."""
        if self.reference_price_ars is not None:
            return float(self.reference_price_ars)
        if self.reference_usd and self.fx_rate and self.reference_usd > 0 and self.fx_rate > 0:
            return float(self.reference_usd) * float(self.fx_rate)
        return None


@dataclass(frozen=True)
class TradeInSuggestion:
    value_ars: float | None
    rule_id: str | None = None


def compute_trade_in_value_ars(device: TradeInDevice, matched_rule: ValuationRule | None) -> float | None:
    """Suggested trade-in value for a device under its matched rule."""
    if matched_rule is None:
        return None

    if matched_rule.value_ars is not None and matched_rule.value_ars > 0:
        return float(matched_rule.value_ars)

    pct = matched_rule.pct_of_reference
    if pct is not None and pct > 0:
        reference = device.reference_value_ars
        if reference is None:
            return None
        return reference * pct / 100

    return None


def suggest_trade_in_value(device: TradeInDevice, rules: Iterable[ValuationRule]) -> TradeInSuggestion:
    """Match the device against plan canje rules and compute its value."""
    rule = match_valuation_rule(
        rules,
        model=device.model,
        battery_pct=device.battery_pct,
        storage_gb=device.storage_gb,
    )
    return TradeInSuggestion(
        value_ars=compute_trade_in_value_ars(device, rule),
        rule_id=rule.id if rule else None,
    )
