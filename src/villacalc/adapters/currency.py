# src/villacalc/adapters/currency.py
"""
Currency conversion for display only. Engine math always stays in the base
unit (IDR by default); these helpers run at the presentation boundary.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any

import requests

from villacalc.adapters.config import config
from villacalc.adapters.logging_utils import get_logger
from villacalc.domain.ports import RateProvider

logger = get_logger(__name__)


class UnknownCurrencyError(ValueError):
    pass


# IDR per one unit of each currency
FALLBACK_IDR_RATES: dict[str, float] = {
    "IDR": 1.0,
    "USD": 16_000.0,
    "EUR": 17_500.0,
    "AUD": 10_500.0,
    "INR": 190.0,
    "CNY": 2_200.0,
    "AED": 4_350.0,
    "GBP": 20_500.0,
    "RUB": 175.0,
}

SYMBOLS: dict[str, str] = {
    "IDR": "Rp",
    "USD": "$",
    "EUR": "€",
    "AUD": "A$",
    "INR": "₹",
    "CNY": "¥",
    "AED": "د.إ",
    "GBP": "£",
    "RUB": "₽",
}


@dataclass
class StaticRateProvider:
    rates: dict[str, float] = field(default_factory=lambda: dict(FALLBACK_IDR_RATES))
    base: str = "IDR"

    def base_currency(self) -> str:
        return self.base

    def units_per_currency(self) -> dict[str, float]:
        return dict(self.rates)


@dataclass
class FrankfurterRateProvider:
    """
    Live USD/AUD/EUR rates from the Frankfurter API (no key needed), merged
    over the static IDR table. Any HTTP or payload problem keeps the fallback.
    """
    base_url: str = field(default_factory=lambda: config.RATES_API_URL)
    timeout_s: float = field(default_factory=lambda: config.RATES_TIMEOUT_S)
    rates: dict[str, float] = field(default_factory=lambda: dict(FALLBACK_IDR_RATES))
    last_updated: dt.datetime | None = None
    error: str | None = None

    def base_currency(self) -> str:
        return "IDR"

    def units_per_currency(self) -> dict[str, float]:
        return dict(self.rates)

    def _fetch(self) -> dict[str, Any]:
        url = self.base_url.rstrip("/") + "/latest"
        resp = requests.get(
            url,
            params={"from": "USD", "to": "IDR,AUD,EUR"},
            headers={"Accept": "application/json"},
            timeout=self.timeout_s,
        )
        resp.raise_for_status()
        return resp.json()

    def refresh(self) -> bool:
        try:
            payload = self._fetch()
            quoted = payload["rates"]
            usd_to_idr = float(quoted["IDR"])
            fresh = {
                "USD": usd_to_idr,
                "AUD": usd_to_idr / float(quoted["AUD"]),
                "EUR": usd_to_idr / float(quoted["EUR"]),
            }
        except (requests.RequestException, KeyError, TypeError, ValueError, ZeroDivisionError) as e:
            self.error = "Using offline rates"
            logger.warning("exchange_rates_fallback", extra={"context": {"error": str(e)}})
            return False

        self.rates.update(fresh)
        self.last_updated = dt.datetime.now(dt.timezone.utc)
        self.error = None
        logger.info("exchange_rates_refreshed", extra={"context": {"usd_idr": usd_to_idr}})
        return True


class CurrencyConverter:
    """Linear multiply/divide conversion over a RateProvider's table."""

    def __init__(self, provider: RateProvider | None = None) -> None:
        self.provider = provider or StaticRateProvider()

    def _units(self, code: str) -> float:
        table = self.provider.units_per_currency()
        key = code.strip().upper()
        if key not in table or table[key] <= 0:
            raise UnknownCurrencyError(f"Unsupported currency: {code}")
        return table[key]

    def rate(self, from_code: str, to_code: str) -> float:
        """How many `to_code` units one `from_code` unit buys."""
        return self._units(from_code) / self._units(to_code)

    def convert(self, amount: float, from_code: str, to_code: str) -> float:
        if from_code.strip().upper() == to_code.strip().upper():
            return amount
        return amount * self.rate(from_code, to_code)

    def units_per(self, code: str) -> float:
        """Base-currency units in one unit of `code` (divide base amounts by this to display)."""
        return self._units(code)

    def format(self, amount: float, code: str) -> str:
        key = code.strip().upper()
        self._units(key)
        digits = 0 if key == "IDR" or abs(amount) > 1000 else 2
        return f"{SYMBOLS.get(key, key)} {amount:,.{digits}f}"


def abbreviate(amount: float) -> str:
    """3_500_000_000 -> "3.5B"."""
    magnitude = abs(amount)
    for threshold, suffix in ((1e12, "T"), (1e9, "B"), (1e6, "M"), (1e3, "K")):
        if magnitude >= threshold:
            return f"{amount / threshold:.1f}{suffix}"
    return f"{amount:.0f}"
