# tests/test_currency.py
import pytest
import requests

from villacalc.adapters.currency import (
    FALLBACK_IDR_RATES,
    CurrencyConverter,
    FrankfurterRateProvider,
    StaticRateProvider,
    UnknownCurrencyError,
    abbreviate,
)


class _FakeResponse:
    def __init__(self, payload, status_error=None):
        self._payload = payload
        self._status_error = status_error

    def raise_for_status(self):
        if self._status_error:
            raise self._status_error

    def json(self):
        return self._payload


def test_static_conversion_is_linear():
    conv = CurrencyConverter(StaticRateProvider())

    assert conv.convert(16_000, "IDR", "USD") == pytest.approx(1.0)
    assert conv.convert(2, "usd", "idr") == pytest.approx(32_000)
    assert conv.convert(1, "USD", "EUR") == pytest.approx(16_000 / 17_500)
    assert conv.convert(123.0, "AUD", "AUD") == 123.0


def test_unknown_currency_raises():
    conv = CurrencyConverter()
    with pytest.raises(UnknownCurrencyError):
        conv.convert(1, "IDR", "XYZ")


def test_format_uses_symbol_and_precision():
    conv = CurrencyConverter()

    assert conv.format(3_500_000_000, "IDR") == "Rp 3,500,000,000"
    assert conv.format(1_234.4, "USD") == "$ 1,234"
    assert conv.format(12.5, "USD") == "$ 12.50"


def test_abbreviate():
    assert abbreviate(3_500_000_000) == "3.5B"
    assert abbreviate(-2_400_000) == "-2.4M"
    assert abbreviate(950) == "950"


def test_frankfurter_refresh_merges_live_rates(monkeypatch):
    calls = {}

    def fake_get(url, params=None, headers=None, timeout=None):
        calls["url"] = url
        calls["params"] = params
        return _FakeResponse({"base": "USD", "rates": {"IDR": 16_200.0, "AUD": 1.5, "EUR": 0.9}})

    monkeypatch.setattr(requests, "get", fake_get)
    provider = FrankfurterRateProvider(base_url="https://rates.example/v1/")

    assert provider.refresh() is True
    assert calls["url"] == "https://rates.example/v1/latest"
    assert calls["params"] == {"from": "USD", "to": "IDR,AUD,EUR"}

    rates = provider.units_per_currency()
    assert rates["USD"] == pytest.approx(16_200.0)
    assert rates["AUD"] == pytest.approx(10_800.0)
    assert rates["EUR"] == pytest.approx(18_000.0)
    assert rates["GBP"] == FALLBACK_IDR_RATES["GBP"]
    assert provider.last_updated is not None
    assert provider.error is None


def test_frankfurter_keeps_fallback_on_http_error(monkeypatch):
    def fake_get(url, params=None, headers=None, timeout=None):
        return _FakeResponse({}, status_error=requests.HTTPError("503"))

    monkeypatch.setattr(requests, "get", fake_get)
    provider = FrankfurterRateProvider(base_url="https://rates.example")

    assert provider.refresh() is False
    assert provider.units_per_currency() == FALLBACK_IDR_RATES
    assert provider.error == "Using offline rates"


def test_frankfurter_keeps_fallback_on_bad_payload(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda *a, **kw: _FakeResponse({"rates": {"AUD": 1.5}}))
    provider = FrankfurterRateProvider(base_url="https://rates.example")

    assert provider.refresh() is False
    assert provider.units_per_currency()["USD"] == FALLBACK_IDR_RATES["USD"]
