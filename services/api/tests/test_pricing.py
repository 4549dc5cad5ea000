import pytest

from app.services.pricing import (
    DEFAULT_INSTALLMENT_PLAN,
    ars_base_price,
    build_installment_table,
    compute_installment_row,
    quote_snapshot_rows,
)
from app.services.rules import PricingRule


def test_compute_installment_row_applies_surcharge() -> None:
    row = compute_installment_row(100000, 6, 10)
    assert row.total == pytest.approx(110000)
    assert row.per_installment == pytest.approx(18333.333333, rel=1e-9)
    assert row.installments == 6
    assert row.surcharge_pct == 10


def test_compute_installment_row_zero_installments_guard() -> None:
    row = compute_installment_row(100000, 0, 0)
    assert row.total == 100000
    assert row.per_installment == row.total


def test_compute_installment_row_is_not_rounded() -> None:
    row = compute_installment_row(1000, 3, 0)
    assert row.per_installment == 1000 / 3


def test_ars_base_price() -> None:
    assert ars_base_price(150000, "ARS") == 150000
    assert ars_base_price(100, "USD", 1200) == 120000
    assert ars_base_price(100, "usd", 1200.5) == pytest.approx(120050)


@pytest.mark.parametrize("rate", [None, 0, -5])
def test_ars_base_price_without_usable_rate_is_zero(rate: float | None) -> None:
    assert ars_base_price(100, "USD", rate) == 0.0


def test_zero_base_is_an_ordinary_input() -> None:
    row = compute_installment_row(ars_base_price(100, "USD", 0), 3, 12)
    assert row.total == 0
    assert row.per_installment == 0


def test_build_installment_table_uses_matched_surcharges() -> None:
    rules = [
        PricingRule(id="1", card_brand="Visa", installments=3, surcharge_pct=12),
        PricingRule(id="2", card_brand="Visa", installments=6, surcharge_pct=22),
        PricingRule(id="3", card_brand="Visa", installments=6, surcharge_pct=30, channel="mercado_pago"),
    ]
    rows = build_installment_table(100000, rules, card_brand="Visa", channel="standard")

    assert [r.installments for r in rows] == list(DEFAULT_INSTALLMENT_PLAN)
    by_count = {r.installments: r for r in rows}
    assert by_count[1].surcharge_pct == 0.0
    assert by_count[1].total == 100000
    assert by_count[3].total == pytest.approx(112000)
    assert by_count[6].total == pytest.approx(122000)
    assert by_count[12].surcharge_pct == 0.0

    mp_rows = build_installment_table(100000, rules, card_brand="Visa", channel="mercado_pago", plan=[6])
    assert mp_rows[0].total == pytest.approx(130000)


def test_quote_snapshot_rows_round_to_cents() -> None:
    rows = [compute_installment_row(100000, 6, 10)]
    assert quote_snapshot_rows(rows) == [
        {"installments": 6, "surcharge_pct": 10, "total_ars": 110000.0, "installment_ars": 18333.33}
    ]
