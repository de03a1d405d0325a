# tests/conftest.py
import datetime as dt

import pytest
from fastapi.testclient import TestClient

from villacalc.api.http import app  # ensures imports resolve; run tests from repo root
from villacalc.domain.assumptions import InvestmentAssumptions, RentalAssumptions


@pytest.fixture(scope="session")
def client():
    return TestClient(app)


@pytest.fixture
def spreadsheet_assumptions() -> RentalAssumptions:
    """
    18-key apartment bought 2026-01, ready 2028-01 (two development years).
    Values from the reference spreadsheet.
    """
    return RentalAssumptions(
        initial_investment=15_087_472_000,
        purchase_date="2026-01",
        keys=18,
        is_property_ready=False,
        property_ready_date="2028-01",
        y1_occupancy=70,
        y1_adr=1_900_000,
        y1_fb=216_000_000,
        y1_spa=64_800_000,
        y1_other=0,
        y1_misc=0,
        occupancy_increases=(5.5, 5.25, 4.5, 3, 1, 0.5, 0.25, 0, 0),
        adr_growth=5,
        fb_growth=3,
        spa_growth=4,
        cam_growth=2,
        base_fee_growth=3,
        tech_fee_growth=3,
        rooms_cost_pct=20,
        fb_cost_pct=80,
        spa_cost_pct=80,
        other_cost_pct=80,
        misc_cost_pct=80,
        utilities_pct=7,
        admin_pct=1,
        sales_pct=2.5,
        maint_pct=2,
        cam_fee_per_unit=1_250_000,
        base_fee_percent=2,
        tech_fee_per_unit=1_200_000,
        incentive_fee_pct=0,
    )


@pytest.fixture
def villa_investment() -> InvestmentAssumptions:
    """3.5B villa, 50% down + 5 monthly installments, sold a year later at 4.2B less 2.5%."""
    return InvestmentAssumptions(
        project_name="Villa Matahari Phase 1",
        location="Canggu, Bali",
        total_price=3_500_000_000,
        purchase_date=dt.date(2025, 1, 15),
        handover_date=dt.date(2026, 1, 15),
        down_payment_percent=50,
        installment_months=5,
        projected_sales_price=4_200_000_000,
        closing_cost_percent=2.5,
    )
