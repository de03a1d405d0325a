# src/villacalc/api/schemas.py
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

# Numbers may arrive as localized strings ("3,500,000,000", "2.5%");
# services.validation normalizes them.
Number = float | str


# --------------------------------------------
# XIRR (buy / flip)
# --------------------------------------------

class CashFlowEntryIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    date: str
    amount: Number
    description: str = ""
    flow_type: Literal["outflow", "inflow"] | None = None


class XIRRRequest(BaseModel):
    """
    Typed request for /xirr.

    Permissive: camelCase drafts from the web app pass straight through.
    """
    model_config = ConfigDict(extra="allow")

    project_name: str = ""
    location: str = ""

    total_price: Number | None = None
    purchase_date: str | None = None
    handover_date: str | None = None
    down_payment_percent: Number = 50.0
    installment_months: Number = 0.0
    projected_sales_price: Number | None = None
    closing_cost_percent: Number = 0.0
    exit_date: str | None = None
    additional_cash_flows: list[CashFlowEntryIn] = []


class CashFlowOut(BaseModel):
    date: str
    amount: float
    description: str


class XIRRResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    rate: float
    rate_pct: float
    total_invested: float
    net_profit: float
    hold_period_months: int
    hold_period_years: float
    net_sale_proceeds: float
    total_roi_pct: float
    cash_flows: list[CashFlowOut]

    display_currency: str
    formatted: dict[str, str]


# --------------------------------------------
# Rental pro forma
# --------------------------------------------

class RentalRequest(BaseModel):
    """Typed request for /rental/projection. Unknown keys pass through to validation."""
    model_config = ConfigDict(extra="allow")

    initial_investment: Number | None = None
    purchase_date: str | None = None
    keys: Number = 1.0
    is_property_ready: bool = True
    property_ready_date: str | None = None


class RentalResponse(BaseModel):
    """
    years: one dict per projection year (YearlyProjection fields)
    summary: RentalSummary fields plus formatted display strings
    """
    model_config = ConfigDict(extra="allow")

    years: list[dict[str, Any]]
    summary: dict[str, Any]
    display_currency: str


# --------------------------------------------
# Currency
# --------------------------------------------

class ConversionResponse(BaseModel):
    amount: float
    from_code: str
    to_code: str
    rate: float
    converted: float
    formatted: str
