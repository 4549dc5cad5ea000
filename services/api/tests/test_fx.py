import pytest

from app.services import fx
from app.services.fx import FxError, FxRates, _parse_openexchangerates_latest, convert_usd, get_usd_rate, usd_rate_for


def test_parse_openexchangerates_latest_ok():
    rates = _parse_openexchangerates_latest(
        {"base": "USD", "timestamp": 1700000000, "rates": {"ARS": 1180.5, "EUR": 0.9}}
    )
    assert rates.base == "USD"
    assert rates.timestamp == 1700000000
    assert rates.rates["ARS"] == 1180.5
    assert rates.rates["USD"] == 1.0


def test_parse_openexchangerates_latest_rejects_non_usd_base():
    with pytest.raises(FxError):
        _parse_openexchangerates_latest({"base": "EUR", "timestamp": 1, "rates": {"USD": 1.2}})


def test_parse_openexchangerates_latest_skips_bad_values():
    rates = _parse_openexchangerates_latest({"base": "USD", "rates": {"ARS": "1200", "XXX": "n/a"}})
    assert rates.rates["ARS"] == 1200.0
    assert "XXX" not in rates.rates


def test_usd_rate_for_and_convert():
    rates = FxRates(base="USD", timestamp=1, rates={"ARS": 1200.0, "USD": 1.0})
    assert usd_rate_for("ars", rates) == 1200.0
    assert usd_rate_for("USD", rates) == 1.0
    assert convert_usd(100, "ARS", rates=rates) == 120000.0


def test_usd_rate_for_missing_currency_raises():
    rates = FxRates(base="USD", timestamp=1, rates={"USD": 1.0})
    with pytest.raises(FxError):
        usd_rate_for("ARS", rates)


@pytest.mark.asyncio
async def test_get_usd_rate_refreshes_once_when_cached_rates_lack_currency(monkeypatch: pytest.MonkeyPatch):
    calls: list[bool] = []

    async def fake_latest(base: str = "USD", *, force_refresh: bool = False) -> FxRates:
        calls.append(force_refresh)
        if force_refresh:
            return FxRates(base="USD", timestamp=2, rates={"USD": 1.0, "ARS": 1250.0})
        return FxRates(base="USD", timestamp=1, rates={"USD": 1.0})

    monkeypatch.setattr(fx, "get_latest_fx_rates", fake_latest)

    assert await get_usd_rate("ARS") == 1250.0
    assert calls == [False, True]


@pytest.mark.asyncio
async def test_get_latest_fx_rates_works_without_redis(monkeypatch: pytest.MonkeyPatch):
    async def fake_fetch():
        return {"base": "USD", "timestamp": 1700000000, "rates": {"ARS": 1190.0}}

    monkeypatch.setattr(fx, "_fetch_openexchangerates_latest", fake_fetch)

    # Redis is not initialized in tests: cache read/write are skipped
    rates = await fx.get_latest_fx_rates()
    assert rates.rates["ARS"] == 1190.0
