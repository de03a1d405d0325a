# src/villacalc/domain/ports.py
from __future__ import annotations

from typing import Protocol


# ----------------------------
# Exchange rates
# ----------------------------

class RateProvider(Protocol):
    """
    Source of exchange rates expressed as base-currency units per one unit of
    each currency (e.g. {"IDR": 1.0, "USD": 16_000.0}).
    """

    def base_currency(self) -> str:
        ...

    def units_per_currency(self) -> dict[str, float]:
        ...
