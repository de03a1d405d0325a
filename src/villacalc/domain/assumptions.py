# src/villacalc/domain/assumptions.py
from __future__ import annotations

import datetime as dt
from typing import ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field

FlowType = Literal["outflow", "inflow"]


class AdditionalCashFlow(BaseModel):
    """Ad-hoc cash flow attached to an investment (furniture package, rental income, ...)."""
    model_config = ConfigDict(frozen=True)

    date: dt.date
    amount: float = Field(..., description="Magnitude; the sign comes from flow_type")
    description: str = ""
    flow_type: FlowType = "outflow"

    @property
    def signed_amount(self) -> float:
        magnitude = abs(self.amount)
        return -magnitude if self.flow_type == "outflow" else magnitude


class InvestmentAssumptions(BaseModel):
    """
    Inputs of the buy/flip (XIRR) calculator.

    All money is in one base unit (IDR by default). Currency conversion is a
    presentation concern and never happens here.
    """
    model_config = ConfigDict(frozen=True)

    project_name: str = ""
    location: str = ""

    total_price: float = Field(..., description="Total purchase price")
    purchase_date: dt.date
    handover_date: dt.date

    down_payment_percent: float = Field(50.0, description="50 means 50% paid at purchase")
    installment_months: int = Field(0, description="Monthly installments covering the remainder")

    projected_sales_price: float = Field(..., description="Gross exit price")
    closing_cost_percent: float = Field(0.0, description="Selling costs as % of exit price")
    exit_date: dt.date | None = Field(None, description="Defaults to the handover date")

    additional_cash_flows: tuple[AdditionalCashFlow, ...] = ()

    @property
    def effective_exit_date(self) -> dt.date:
        return self.exit_date or self.handover_date


class RentalAssumptions(BaseModel):
    """
    Inputs of the ten-year rental pro forma.

    Dates are "YYYY-MM" strings (a trailing "-DD" is tolerated and ignored).
    Every *_pct / *_growth / *_percent field is in percentage points.
    """
    model_config = ConfigDict(frozen=True)

    # percentage fields that must never be negative
    PERCENT_FIELDS: ClassVar[tuple[str, ...]] = (
        "y1_occupancy",
        "adr_growth",
        "fb_growth",
        "spa_growth",
        "cam_growth",
        "base_fee_growth",
        "tech_fee_growth",
        "rooms_cost_pct",
        "fb_cost_pct",
        "spa_cost_pct",
        "other_cost_pct",
        "misc_cost_pct",
        "utilities_pct",
        "admin_pct",
        "sales_pct",
        "maint_pct",
        "base_fee_percent",
        "incentive_fee_pct",
    )

    initial_investment: float
    purchase_date: str
    keys: int = 1

    is_property_ready: bool = True
    property_ready_date: str | None = None

    # first operational year
    y1_occupancy: float = 70.0
    y1_adr: float = 1_600_000.0
    y1_fb: float = 0.0
    y1_spa: float = 0.0
    y1_other: float = 0.0
    y1_misc: float = 0.0

    # occupancy point increases for operational years 2..10
    occupancy_increases: tuple[float, ...] = (4.0, 3.0, 2.0, 1.5, 1.5, 1.0, 1.0, 1.0, 1.0)

    adr_growth: float = 4.0
    fb_growth: float = 3.0
    spa_growth: float = 0.0
    cam_growth: float = 2.0
    base_fee_growth: float = 3.0
    tech_fee_growth: float = 3.0

    # direct costs, % of the matching revenue line (utilities: % of total revenue)
    rooms_cost_pct: float = 20.0
    fb_cost_pct: float = 85.0
    spa_cost_pct: float = 0.0
    other_cost_pct: float = 0.0
    misc_cost_pct: float = 0.0
    utilities_pct: float = 7.0

    # undistributed, % of total revenue
    admin_pct: float = 1.0
    sales_pct: float = 5.0
    maint_pct: float = 3.0

    # management fees
    cam_fee_per_unit: float = Field(1_250_000.0, description="Per unit per month")
    base_fee_percent: float = Field(2.0, description="% of total revenue in the first operational year")
    tech_fee_per_unit: float = Field(1_000_000.0, description="Per unit per month")
    incentive_fee_pct: float = Field(0.0, description="% of GOP")
