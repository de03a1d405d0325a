# src/villacalc/analysis/phases.py
from __future__ import annotations

import re
from dataclasses import dataclass

from villacalc.domain.assumptions import RentalAssumptions
from villacalc.domain.errors import InvalidAssumptionsError
from villacalc.domain.projection import OperationalPhase

_YEAR_MONTH = re.compile(r"^\s*(\d{4})-(\d{1,2})(?:-\d{1,2})?\s*$")


@dataclass(frozen=True)
class YearMonth:
    year: int
    month: int


def parse_year_month(value: str, field: str) -> YearMonth:
    """Parse "YYYY-MM" (or "YYYY-MM-DD"); anything else is an InvalidAssumptionsError."""
    m = _YEAR_MONTH.match(str(value or ""))
    if not m:
        raise InvalidAssumptionsError(f"{field} must look like YYYY-MM, got {value!r}", field=field)
    year, month = int(m.group(1)), int(m.group(2))
    if not 1 <= month <= 12:
        raise InvalidAssumptionsError(f"{field} has an invalid month: {value!r}", field=field)
    return YearMonth(year, month)


def months_remaining_factor(month: int) -> float:
    """Share of the year left when operations start in `month` (July -> 6/12)."""
    return (13 - month) / 12.0


def purchase_year_factor(calendar_year: int, purchase: YearMonth) -> float:
    if calendar_year < purchase.year:
        return 0.0
    if calendar_year == purchase.year:
        return months_remaining_factor(purchase.month)
    return 1.0


@dataclass(frozen=True)
class OperatingCalendar:
    """
    Proration factors for one assumption set.

    The factor is the fraction of a calendar year the property operates:
    0 before purchase (or before it is ready), prorated by months remaining in
    the purchase or ready year, 1.0 afterwards.
    """
    purchase: YearMonth
    ready: YearMonth | None

    @classmethod
    def from_assumptions(cls, assumptions: RentalAssumptions) -> "OperatingCalendar":
        purchase = parse_year_month(assumptions.purchase_date, "purchase_date")
        ready = None
        if not assumptions.is_property_ready and assumptions.property_ready_date:
            ready = parse_year_month(assumptions.property_ready_date, "property_ready_date")
        return cls(purchase=purchase, ready=ready)

    @property
    def base_year(self) -> int:
        return self.purchase.year

    def purchase_factor(self, calendar_year: int) -> float:
        return purchase_year_factor(calendar_year, self.purchase)

    def factor(self, calendar_year: int) -> float:
        if calendar_year < self.purchase.year:
            return 0.0
        # ready at purchase (or no ready date given)
        if self.ready is None:
            return self.purchase_factor(calendar_year)
        if self.ready.year < calendar_year:
            return self.purchase_factor(calendar_year)
        if self.ready.year > calendar_year:
            return 0.0
        # a ready month earlier in the purchase year cannot add months before ownership
        return min(months_remaining_factor(self.ready.month), self.purchase_factor(calendar_year))

    def phase(self, calendar_year: int) -> OperationalPhase:
        if self.factor(calendar_year) <= 0:
            return OperationalPhase.PRE_OPERATIONAL
        if self.factor(calendar_year - 1) <= 0:
            return OperationalPhase.FIRST_OPERATIONAL
        return OperationalPhase.STEADY_STATE

    def first_operational_index(self, horizon: int) -> int | None:
        for i in range(horizon):
            if self.factor(self.base_year + i) > 0:
                return i
        return None
