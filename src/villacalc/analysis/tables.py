# src/villacalc/analysis/tables.py
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict

import pandas as pd

from villacalc.domain.cashflow import CashFlowEvent
from villacalc.domain.projection import YearlyProjection

# money columns converted when a display rate is applied
MONEY_COLUMNS = [
    "adr",
    "revpar",
    "trevpar",
    "revenue_rooms",
    "revenue_fb",
    "revenue_spa",
    "revenue_other",
    "revenue_misc",
    "total_revenue",
    "cost_rooms",
    "cost_fb",
    "cost_spa",
    "cost_other",
    "cost_misc",
    "cost_utilities",
    "total_operating_cost",
    "undistributed_admin",
    "undistributed_sales",
    "undistributed_maintenance",
    "total_undistributed_cost",
    "gop",
    "fee_cam",
    "fee_base",
    "fee_tech",
    "fee_incentive",
    "total_management_fees",
    "take_home_profit",
]


def projection_frame(years: Sequence[YearlyProjection], units_per_display: float = 1.0) -> pd.DataFrame:
    """
    One row per projection year, indexed by calendar year.

    units_per_display divides money columns (e.g. 16_000 to show IDR values in
    USD); percentages and counts are left alone.
    """
    df = pd.DataFrame([asdict(y) for y in years])
    if df.empty:
        return df
    if units_per_display != 1.0:
        df[MONEY_COLUMNS] = df[MONEY_COLUMNS] / units_per_display
    return df.set_index("calendar_year")


def schedule_frame(events: Sequence[CashFlowEvent], units_per_display: float = 1.0) -> pd.DataFrame:
    df = pd.DataFrame([asdict(e) for e in events], columns=["date", "amount", "description"])
    if df.empty:
        return df
    df["amount"] = df["amount"] / units_per_display
    df["cumulative"] = df["amount"].cumsum()
    return df
