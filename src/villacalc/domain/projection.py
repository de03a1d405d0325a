# src/villacalc/domain/projection.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

PROJECTION_YEARS = 10


class OperationalPhase(str, Enum):
    PRE_OPERATIONAL = "pre_operational"
    FIRST_OPERATIONAL = "first_operational"
    STEADY_STATE = "steady_state"


@dataclass(frozen=True)
class YearlyProjection:
    year: int               # 1-based projection year
    calendar_year: int
    keys: int

    occupancy: float        # %
    occupancy_increase: float
    adr: float
    adr_growth: float       # %
    revpar: float
    trevpar: float

    revenue_rooms: float
    revenue_rooms_percent: float
    revenue_fb: float
    revenue_fb_percent: float
    revenue_spa: float
    revenue_spa_percent: float
    revenue_other: float
    revenue_other_percent: float
    revenue_misc: float
    revenue_misc_percent: float
    total_revenue: float
    revenue_growth: float   # % vs previous year, 0 when previous revenue is 0

    cost_rooms: float
    cost_fb: float
    cost_spa: float
    cost_other: float
    cost_misc: float
    cost_utilities: float
    total_operating_cost: float
    operating_cost_percent: float

    undistributed_admin: float
    undistributed_sales: float
    undistributed_maintenance: float
    total_undistributed_cost: float
    undistributed_cost_percent: float

    gop: float
    gop_margin: float       # %

    fee_cam: float
    fee_cam_percent: float
    fee_base: float
    fee_base_percent: float
    fee_tech: float
    fee_tech_percent: float
    fee_incentive: float
    total_management_fees: float
    management_fees_percent: float

    take_home_profit: float
    profit_margin: float            # %
    roi_before_management: float    # % of initial investment
    roi_after_management: float     # % of initial investment


@dataclass(frozen=True)
class RentalSummary:
    """Decade-level view of a projection. payback_years is None when profit never recovers the investment."""
    years: int
    avg_occupancy: float
    avg_adr: float
    avg_revpar: float
    avg_trevpar: float
    avg_gop_margin: float
    avg_profit_margin: float
    avg_roi_before_management: float
    avg_roi_after_management: float
    avg_take_home_profit: float
    total_revenue: float
    total_profit: float
    take_home_growth_pct: float
    payback_years: float | None

    @property
    def is_payback_recoverable(self) -> bool:
        return self.payback_years is not None
