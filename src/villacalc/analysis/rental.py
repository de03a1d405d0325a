# src/villacalc/analysis/rental.py
"""
Ten-year rental pro forma (revenue -> costs -> GOP -> fees -> take-home).

Each year depends on the previous one: occupancy, F&B/spa/other/misc bases and
the CAM fee grow from the prior year's *un-prorated* value (prior value divided
by the prior year's operational factor), so a partial first year does not
depress every later year.
"""
from __future__ import annotations

import math
from collections.abc import Sequence

from villacalc.analysis.phases import OperatingCalendar
from villacalc.domain.assumptions import RentalAssumptions
from villacalc.domain.errors import InvalidAssumptionsError
from villacalc.domain.projection import PROJECTION_YEARS, OperationalPhase, YearlyProjection

DAYS_PER_YEAR = 365

_NON_NEGATIVE_AMOUNTS = (
    "initial_investment",
    "y1_adr",
    "y1_fb",
    "y1_spa",
    "y1_other",
    "y1_misc",
    "cam_fee_per_unit",
    "tech_fee_per_unit",
)


def validate_rental_assumptions(a: RentalAssumptions) -> OperatingCalendar:
    """Reject structurally invalid inputs before any arithmetic happens."""
    if a.keys <= 0:
        raise InvalidAssumptionsError(f"keys must be a positive integer, got {a.keys}", field="keys")

    for name in a.PERCENT_FIELDS + _NON_NEGATIVE_AMOUNTS:
        value = getattr(a, name)
        if not math.isfinite(value):
            raise InvalidAssumptionsError(f"{name} must be a finite number", field=name)
        if value < 0:
            raise InvalidAssumptionsError(f"{name} must be non-negative, got {value}", field=name)

    for inc in a.occupancy_increases:
        if not math.isfinite(inc):
            raise InvalidAssumptionsError("occupancy_increases must be finite numbers", field="occupancy_increases")

    return OperatingCalendar.from_assumptions(a)


def occupancy_increase_for(increases: Sequence[float], operational_year_number: int) -> float:
    """
    Occupancy points added in operational year N+1 (N = years since the first
    operational year). Past the end of the list the last entry is reused;
    an empty list adds nothing.
    """
    if operational_year_number <= 0 or not increases:
        return 0.0
    idx = min(operational_year_number - 1, len(increases) - 1)
    return float(increases[idx])


def _unprorate(value: float, factor: float, default: float) -> float:
    return value / factor if factor > 0 else default


def _share(part: float, total: float) -> float:
    return part / total * 100.0 if total else 0.0


def project_rental(a: RentalAssumptions) -> list[YearlyProjection]:
    cal = validate_rental_assumptions(a)
    first_idx = cal.first_operational_index(PROJECTION_YEARS)

    keys = a.keys
    room_nights = keys * DAYS_PER_YEAR
    base_tech_fee = a.tech_fee_per_unit * 12 * keys
    base_cam_fee = a.cam_fee_per_unit * 12 * keys

    years: list[YearlyProjection] = []
    prev: YearlyProjection | None = None

    for i in range(PROJECTION_YEARS):
        calendar_year = cal.base_year + i
        factor = cal.factor(calendar_year)
        prev_factor = cal.factor(calendar_year - 1)
        phase = cal.phase(calendar_year)
        operational = phase is not OperationalPhase.PRE_OPERATIONAL

        # --- occupancy & ADR ---
        if phase is OperationalPhase.PRE_OPERATIONAL:
            occupancy, occupancy_increase = 0.0, 0.0
            adr, adr_growth = 0.0, 0.0
        elif phase is OperationalPhase.FIRST_OPERATIONAL or prev is None:
            occupancy = a.y1_occupancy * factor
            occupancy_increase = a.y1_occupancy  # shown as the jump from 0
            adr, adr_growth = a.y1_adr, 0.0
        else:
            operational_year_number = i - (first_idx or 0)
            occupancy_increase = occupancy_increase_for(a.occupancy_increases, operational_year_number)
            occupancy = _unprorate(prev.occupancy, prev_factor, a.y1_occupancy) + occupancy_increase
            adr_growth = a.adr_growth
            adr = (prev.adr or a.y1_adr) * (1 + adr_growth / 100.0)

        revpar = adr * occupancy / 100.0
        revenue_rooms = room_nights * (occupancy / 100.0) * adr

        # --- ancillary run-rate bases, frozen until operations begin ---
        if phase is OperationalPhase.STEADY_STATE and prev is not None:
            base_fb = _unprorate(prev.revenue_fb, prev_factor, a.y1_fb) * (1 + a.fb_growth / 100.0)
            base_spa = _unprorate(prev.revenue_spa, prev_factor, a.y1_spa) * (1 + a.spa_growth / 100.0)
            base_other = _unprorate(prev.revenue_other, prev_factor, a.y1_other)
            base_misc = _unprorate(prev.revenue_misc, prev_factor, a.y1_misc)
        else:
            base_fb, base_spa, base_other, base_misc = a.y1_fb, a.y1_spa, a.y1_other, a.y1_misc

        revenue_fb = base_fb * factor
        revenue_spa = base_spa * factor
        revenue_other = base_other * factor
        revenue_misc = base_misc * factor

        total_revenue = revenue_rooms + revenue_fb + revenue_spa + revenue_other + revenue_misc
        revenue_growth = 0.0
        if prev is not None and prev.total_revenue:
            revenue_growth = (total_revenue / prev.total_revenue - 1) * 100.0

        # --- direct costs ---
        cost_rooms = revenue_rooms * a.rooms_cost_pct / 100.0
        cost_fb = revenue_fb * a.fb_cost_pct / 100.0
        cost_spa = revenue_spa * a.spa_cost_pct / 100.0
        cost_other = revenue_other * a.other_cost_pct / 100.0
        cost_misc = revenue_misc * a.misc_cost_pct / 100.0
        cost_utilities = total_revenue * a.utilities_pct / 100.0
        total_operating_cost = cost_rooms + cost_fb + cost_spa + cost_other + cost_misc + cost_utilities

        # --- undistributed ---
        undistributed_admin = total_revenue * a.admin_pct / 100.0
        undistributed_sales = total_revenue * a.sales_pct / 100.0
        undistributed_maintenance = total_revenue * a.maint_pct / 100.0
        total_undistributed_cost = undistributed_admin + undistributed_sales + undistributed_maintenance

        gop = total_revenue - total_operating_cost - total_undistributed_cost

        # --- management fees ---
        # tech fee accrues from year 0 even before operations; growth counts
        # from the first operational year
        if i == 0:
            fee_tech = base_tech_fee * cal.purchase_factor(calendar_year)
        elif first_idx is None or i <= first_idx:
            fee_tech = base_tech_fee
        else:
            fee_tech = base_tech_fee * (1 + a.tech_fee_growth / 100.0) ** (i - first_idx)

        if phase is OperationalPhase.PRE_OPERATIONAL:
            fee_cam = 0.0
        elif phase is OperationalPhase.FIRST_OPERATIONAL or prev is None:
            fee_cam = base_cam_fee * factor
        else:
            prev_cam = _unprorate(prev.fee_cam, prev_factor, base_cam_fee)
            fee_cam = prev_cam * (1 + a.cam_growth / 100.0) * factor

        # grows from last year's fee, not recomputed from revenue
        if not operational or total_revenue == 0:
            fee_base = 0.0
        elif phase is OperationalPhase.FIRST_OPERATIONAL or prev is None:
            fee_base = total_revenue * a.base_fee_percent / 100.0
        else:
            fee_base = prev.fee_base * (1 + a.base_fee_growth / 100.0)

        fee_incentive = gop * a.incentive_fee_pct / 100.0 if operational else 0.0
        total_management_fees = fee_cam + fee_base + fee_tech + fee_incentive

        take_home_profit = gop - total_management_fees
        investment = a.initial_investment

        record = YearlyProjection(
            year=i + 1,
            calendar_year=calendar_year,
            keys=keys,
            occupancy=occupancy,
            occupancy_increase=occupancy_increase,
            adr=adr,
            adr_growth=adr_growth,
            revpar=revpar,
            trevpar=total_revenue / room_nights,
            revenue_rooms=revenue_rooms,
            revenue_rooms_percent=_share(revenue_rooms, total_revenue),
            revenue_fb=revenue_fb,
            revenue_fb_percent=_share(revenue_fb, total_revenue),
            revenue_spa=revenue_spa,
            revenue_spa_percent=_share(revenue_spa, total_revenue),
            revenue_other=revenue_other,
            revenue_other_percent=_share(revenue_other, total_revenue),
            revenue_misc=revenue_misc,
            revenue_misc_percent=_share(revenue_misc, total_revenue),
            total_revenue=total_revenue,
            revenue_growth=revenue_growth,
            cost_rooms=cost_rooms,
            cost_fb=cost_fb,
            cost_spa=cost_spa,
            cost_other=cost_other,
            cost_misc=cost_misc,
            cost_utilities=cost_utilities,
            total_operating_cost=total_operating_cost,
            operating_cost_percent=_share(total_operating_cost, total_revenue),
            undistributed_admin=undistributed_admin,
            undistributed_sales=undistributed_sales,
            undistributed_maintenance=undistributed_maintenance,
            total_undistributed_cost=total_undistributed_cost,
            undistributed_cost_percent=_share(total_undistributed_cost, total_revenue),
            gop=gop,
            gop_margin=_share(gop, total_revenue),
            fee_cam=fee_cam,
            fee_cam_percent=_share(fee_cam, total_revenue),
            fee_base=fee_base,
            fee_base_percent=_share(fee_base, total_revenue),
            fee_tech=fee_tech,
            fee_tech_percent=_share(fee_tech, total_revenue),
            fee_incentive=fee_incentive,
            total_management_fees=total_management_fees,
            management_fees_percent=_share(total_management_fees, total_revenue),
            take_home_profit=take_home_profit,
            profit_margin=_share(take_home_profit, total_revenue),
            roi_before_management=_share(gop, investment),
            roi_after_management=_share(take_home_profit, investment),
        )
        years.append(record)
        prev = record

    return years
