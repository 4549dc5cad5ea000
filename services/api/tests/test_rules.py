"""Tests for installment and plan canje rule matching."""

import random

import pytest

from app.services.rules import (
    Channel,
    PricingRule,
    ValuationRule,
    match_pricing_rule,
    match_valuation_rule,
    resolve_surcharge_pct,
)

PRICING_RULES = [
    PricingRule(id="r1", card_brand="Visa", installments=6, surcharge_pct=22, channel="standard"),
    PricingRule(id="r2", card_brand="Visa", installments=6, surcharge_pct=30, channel="mercado_pago"),
    PricingRule(id="r3", card_brand="Mastercard", installments=6, surcharge_pct=20, channel="standard"),
    PricingRule(id="r4", card_brand="Visa", installments=3, surcharge_pct=12, channel="standard"),
    PricingRule(id="r5", card_brand="Naranja", installments=12, surcharge_pct=40, channel="standard"),
]


def test_pricing_prefers_requested_channel() -> None:
    assert match_pricing_rule(PRICING_RULES, card_brand="Visa", installments=6, channel="standard").id == "r1"
    assert match_pricing_rule(PRICING_RULES, card_brand="Visa", installments=6, channel=Channel.MERCADO_PAGO).id == "r2"


def test_pricing_falls_back_to_any_channel() -> None:
    rule = match_pricing_rule(PRICING_RULES, card_brand="Naranja", installments=12, channel="mercado_pago")
    assert rule is not None
    assert rule.id == "r5"


def test_pricing_brand_is_case_sensitive() -> None:
    assert match_pricing_rule(PRICING_RULES, card_brand="visa", installments=6) is None


def test_pricing_installments_must_match_exactly() -> None:
    assert match_pricing_rule(PRICING_RULES, card_brand="Visa", installments=9) is None


@pytest.mark.parametrize("brand", ["", None])
def test_pricing_empty_brand_matches_any_brand(brand: str | None) -> None:
    rule = match_pricing_rule(PRICING_RULES, card_brand=brand, installments=6, channel="mercado_pago")
    # Channel tie-break still applies
    assert rule is not None
    assert rule.id == "r2"


def test_missing_rule_gives_zero_surcharge() -> None:
    assert resolve_surcharge_pct(PRICING_RULES, card_brand="Amex", installments=3) == 0.0
    assert resolve_surcharge_pct([], card_brand=None, installments=1) == 0.0


def test_resolve_surcharge_pct_uses_matched_rule() -> None:
    assert resolve_surcharge_pct(PRICING_RULES, card_brand="Visa", installments=3) == 12.0


@pytest.mark.parametrize("seed", range(10))
def test_pricing_match_is_order_independent(seed: int) -> None:
    shuffled = PRICING_RULES[:]
    random.Random(seed).shuffle(shuffled)
    for brand in ("", "Visa", "Mastercard"):
        for channel in ("standard", "mercado_pago"):
            expected = match_pricing_rule(PRICING_RULES, card_brand=brand, installments=6, channel=channel)
            assert match_pricing_rule(shuffled, card_brand=brand, installments=6, channel=channel) == expected


VALUATION_RULES = [
    ValuationRule(id="v1", model="iPhone 13", battery_min=0, battery_max=100, pct_of_reference=40),
    ValuationRule(id="v2", model="iPhone 13", battery_min=80, battery_max=100, pct_of_reference=55),
    ValuationRule(id="v3", model="iPhone 13", battery_min=85, battery_max=95, pct_of_reference=60, storage_gb=256),
    ValuationRule(id="v4", model="iPhone 14", battery_min=80, battery_max=100, pct_of_reference=50),
    ValuationRule(id="v5", model="iPhone 14", battery_min=90, battery_max=95, pct_of_reference=70),
    ValuationRule(id="v6", model="iPhone 14", battery_min=70, battery_max=100, value_ars=50000),
]


def test_valuation_battery_range_is_inclusive() -> None:
    assert match_valuation_rule(VALUATION_RULES, model="iPhone 13", battery_pct=80).id == "v2"
    assert match_valuation_rule(VALUATION_RULES, model="iPhone 13", battery_pct=100).id == "v2"
    assert match_valuation_rule(VALUATION_RULES, model="iPhone 13", battery_pct=79).id == "v1"


def test_valuation_prefers_narrowest_range() -> None:
    rule = match_valuation_rule(VALUATION_RULES, model="iPhone 13", battery_pct=90, storage_gb=256)
    assert rule.id == "v3"


def test_valuation_storage_must_match_when_both_present() -> None:
    rule = match_valuation_rule(VALUATION_RULES, model="iPhone 13", battery_pct=90, storage_gb=128)
    assert rule.id == "v2"


def test_valuation_rule_with_storage_matches_device_without_storage() -> None:
    rule = match_valuation_rule(VALUATION_RULES, model="iPhone 13", battery_pct=90, storage_gb=None)
    assert rule.id == "v3"


def test_valuation_fixed_value_rule_wins_over_narrower_pct_rule() -> None:
    rule = match_valuation_rule(VALUATION_RULES, model="iPhone 14", battery_pct=92)
    assert rule.id == "v6"


def test_valuation_model_is_exact() -> None:
    assert match_valuation_rule(VALUATION_RULES, model="iphone 13", battery_pct=90) is None
    assert match_valuation_rule(VALUATION_RULES, model="iPhone 15", battery_pct=90) is None


def test_valuation_without_battery_does_not_match() -> None:
    assert match_valuation_rule(VALUATION_RULES, model="iPhone 13", battery_pct=None) is None


@pytest.mark.parametrize("seed", range(10))
def test_valuation_match_is_order_independent(seed: int) -> None:
    shuffled = VALUATION_RULES[:]
    random.Random(seed).shuffle(shuffled)
    for model in ("iPhone 13", "iPhone 14"):
        for battery in (50, 75, 80, 85, 90, 95, 100):
            for storage in (None, 128, 256):
                expected = match_valuation_rule(VALUATION_RULES, model=model, battery_pct=battery, storage_gb=storage)
                assert match_valuation_rule(shuffled, model=model, battery_pct=battery, storage_gb=storage) == expected


def test_equal_width_overlapping_bands_resolve_deterministically() -> None:
    rules = [
        ValuationRule(id="b", model="iPhone 12", battery_min=70, battery_max=90, pct_of_reference=40),
        ValuationRule(id="a", model="iPhone 12", battery_min=80, battery_max=100, pct_of_reference=45),
    ]
    # Same width: the band with the higher floor wins
    assert match_valuation_rule(rules, model="iPhone 12", battery_pct=85).id == "a"
    assert match_valuation_rule(list(reversed(rules)), model="iPhone 12", battery_pct=85).id == "a"
