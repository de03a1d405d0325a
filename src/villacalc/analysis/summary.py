# src/villacalc/analysis/summary.py
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from villacalc.analysis.schedule import months_between
from villacalc.domain.cashflow import CashFlowEvent
from villacalc.domain.errors import EmptyScheduleError
from villacalc.domain.projection import RentalSummary, YearlyProjection

# cap used for year-1 -> year-10 profit growth
_GROWTH_CAP_PCT = 999.0


@dataclass(frozen=True)
class CashFlowTotals:
    total_invested: float
    net_profit: float
    hold_period_months: int


def summarize_cash_flows(events: Sequence[CashFlowEvent]) -> CashFlowTotals:
    """
    Aggregate a dated schedule.

    - total_invested: magnitude of all outflows
    - net_profit: signed sum of every flow
    - hold_period_months: whole calendar months between the earliest and
      latest event (see schedule.months_between)
    """
    if not events:
        raise EmptyScheduleError("Cannot summarize an empty cash-flow schedule")

    total_invested = sum(-e.amount for e in events if e.amount < 0)
    net_profit = sum(e.amount for e in events)

    first = min(e.date for e in events)
    last = max(e.date for e in events)

    return CashFlowTotals(
        total_invested=total_invested,
        net_profit=net_profit,
        hold_period_months=months_between(first, last),
    )


def _column(years: Sequence[YearlyProjection], name: str) -> np.ndarray:
    return np.asarray([getattr(y, name) for y in years], dtype=float)


def growth_pct(first: float, last: float) -> float:
    if first == 0 or not np.isfinite(first) or not np.isfinite(last):
        return 0.0
    growth = (last - first) / abs(first) * 100.0
    return float(max(-_GROWTH_CAP_PCT, min(_GROWTH_CAP_PCT, growth)))


def payback_years(initial_investment: float, total_profit: float, years: int) -> float | None:
    """
    Years needed to recover the investment at the average annual profit.
    None means the investment is not recoverable (total profit <= 0).
    """
    if total_profit <= 0 or years <= 0:
        return None
    return initial_investment / (total_profit / years)


def summarize_projection(years: Sequence[YearlyProjection], initial_investment: float) -> RentalSummary:
    """
    Reduction step: collapse the per-year records into decade-level averages
    and totals used for scoring and reporting.
    """
    if not years:
        raise EmptyScheduleError("Cannot summarize an empty projection")

    n = len(years)
    profit = _column(years, "take_home_profit")
    revenue = _column(years, "total_revenue")
    total_profit = float(profit.sum())

    return RentalSummary(
        years=n,
        avg_occupancy=float(_column(years, "occupancy").mean()),
        avg_adr=float(_column(years, "adr").mean()),
        avg_revpar=float(_column(years, "revpar").mean()),
        avg_trevpar=float(_column(years, "trevpar").mean()),
        avg_gop_margin=float(_column(years, "gop_margin").mean()),
        avg_profit_margin=float(_column(years, "profit_margin").mean()),
        avg_roi_before_management=float(_column(years, "roi_before_management").mean()),
        avg_roi_after_management=float(_column(years, "roi_after_management").mean()),
        avg_take_home_profit=float(profit.mean()),
        total_revenue=float(revenue.sum()),
        total_profit=total_profit,
        take_home_growth_pct=growth_pct(float(profit[0]), float(profit[-1])),
        payback_years=payback_years(initial_investment, total_profit, n),
    )
