# tests/test_rental_projection.py
import math

import pytest
from hypothesis import given, settings, strategies as st

from villacalc.analysis.rental import occupancy_increase_for, project_rental
from villacalc.domain.assumptions import RentalAssumptions
from villacalc.domain.errors import InvalidAssumptionsError
from villacalc.domain.projection import PROJECTION_YEARS
from villacalc.services.rental_analyzer import compute_rental_projection

# Reference spreadsheet, keyed by calendar year
EXPECTED = {
    2029: {
        "occupancy": 75.5,
        "adr": 1_995_000,
        "revenue_rooms": 9_895_898_250,
        "revenue_fb": 222_480_000,
        "revenue_spa": 67_392_000,
        "total_revenue": 10_185_770_250,
        "gop": 6_701_471_719,
        "fee_cam": 275_400_000,
        "fee_base": 185_789_340,
        "fee_tech": 266_976_000,
        "take_home_profit": 5_973_306_379,
    },
    2030: {
        "total_revenue": 11_412_466_886,
        "gop": 7_523_869_900,
        "take_home_profit": 6_776_613_600,
    },
    2031: {"occupancy": 85.25, "total_revenue": 12_628_084_745, "take_home_profit": 7_571_740_162},
    2032: {"total_revenue": 13_709_234_425, "take_home_profit": 8_275_377_600},
    2033: {"total_revenue": 14_548_394_108, "take_home_profit": 8_814_927_442},
    2034: {"total_revenue": 15_353_659_427, "take_home_profit": 9_330_832_359},
    2035: {
        "occupancy": 90,
        "adr": 2_673_491,
        "total_revenue": 16_159_276_253,
        "gop": 10_696_956_390,
        "fee_cam": 310_145_130,
        "fee_base": 221_842_188,
        "fee_tech": 318_783_306,
        "take_home_profit": 9_846_185_766,
    },
}


def _by_year(years):
    return {y.calendar_year: y for y in years}


def test_development_years_only_carry_the_tech_fee(spreadsheet_assumptions):
    years = _by_year(project_rental(spreadsheet_assumptions))

    for cy in (2026, 2027):
        y = years[cy]
        assert y.occupancy == 0
        assert y.adr == 0
        assert y.total_revenue == 0
        assert y.gop == 0
        assert y.fee_cam == 0
        assert y.fee_base == 0
        assert y.fee_incentive == 0
        assert y.fee_tech == pytest.approx(259_200_000)
        assert y.take_home_profit == pytest.approx(-259_200_000)


def test_first_operational_year_matches_spreadsheet(spreadsheet_assumptions):
    y = _by_year(project_rental(spreadsheet_assumptions))[2028]

    assert y.occupancy == pytest.approx(70)
    assert y.adr == pytest.approx(1_900_000)
    assert y.revenue_rooms == pytest.approx(8_738_100_000, abs=1)
    assert y.revenue_fb == pytest.approx(216_000_000, abs=1)
    assert y.revenue_spa == pytest.approx(64_800_000, abs=1)
    assert y.total_revenue == pytest.approx(9_018_900_000, abs=1)
    assert y.cost_rooms == pytest.approx(1_747_620_000, abs=1)
    assert y.cost_fb == pytest.approx(172_800_000, abs=1)
    assert y.cost_spa == pytest.approx(51_840_000, abs=1)
    assert y.cost_utilities == pytest.approx(631_323_000, abs=1)
    assert y.total_undistributed_cost == pytest.approx(496_039_500, abs=1)
    assert y.gop == pytest.approx(5_919_277_500, abs=1)
    assert y.fee_cam == pytest.approx(270_000_000, abs=1)
    assert y.fee_base == pytest.approx(180_378_000, abs=1)
    assert y.fee_tech == pytest.approx(259_200_000, abs=1)
    assert y.take_home_profit == pytest.approx(5_209_699_500, abs=1)


@pytest.mark.parametrize("calendar_year", sorted(EXPECTED))
def test_later_years_match_spreadsheet(spreadsheet_assumptions, calendar_year):
    y = _by_year(project_rental(spreadsheet_assumptions))[calendar_year]
    for name, expected in EXPECTED[calendar_year].items():
        assert getattr(y, name) == pytest.approx(expected, rel=1e-4), name


def test_ten_year_profit(spreadsheet_assumptions):
    years = project_rental(spreadsheet_assumptions)
    assert len(years) == PROJECTION_YEARS
    assert sum(y.take_home_profit for y in years) == pytest.approx(61_280_282_807, rel=1e-4)


def test_projection_is_deterministic(spreadsheet_assumptions):
    assert project_rental(spreadsheet_assumptions) == project_rental(spreadsheet_assumptions)


def test_mid_year_purchase_prorates_the_first_year():
    a = RentalAssumptions(
        initial_investment=5_000_000_000,
        purchase_date="2026-07",
        keys=2,
        y1_occupancy=60,
        y1_adr=2_000_000,
        y1_fb=100_000_000,
        occupancy_increases=(4,),
        adr_growth=0,
        fb_growth=10,
        cam_growth=0,
        base_fee_growth=5,
        tech_fee_growth=10,
        cam_fee_per_unit=1_000_000,
        tech_fee_per_unit=500_000,
    )
    first, second = project_rental(a)[:2]

    assert first.occupancy == pytest.approx(30)
    assert first.revenue_fb == pytest.approx(50_000_000)
    assert first.fee_cam == pytest.approx(12_000_000)
    assert first.fee_tech == pytest.approx(6_000_000)

    # growth continues from the full-year run rate, not the half year
    assert second.occupancy == pytest.approx(64)
    assert second.revenue_fb == pytest.approx(110_000_000)
    assert second.fee_cam == pytest.approx(24_000_000)
    assert second.fee_tech == pytest.approx(13_200_000)
    assert second.fee_base == pytest.approx(first.fee_base * 1.05)


def test_ready_date_mid_year_prorates_first_operational_year():
    a = RentalAssumptions(
        initial_investment=1_000_000_000,
        purchase_date="2026-01",
        is_property_ready=False,
        property_ready_date="2027-04",
        tech_fee_per_unit=1_000_000,
    )
    years = project_rental(a)

    assert years[0].occupancy == 0
    assert years[0].fee_tech == pytest.approx(12_000_000)
    assert years[1].occupancy == pytest.approx(70 * 0.75)
    assert years[1].fee_tech == pytest.approx(12_000_000)
    assert years[2].occupancy == pytest.approx(70 + 4)
    assert years[2].fee_tech == pytest.approx(12_000_000 * 1.03)


def test_ready_flag_ignores_ready_date():
    a = RentalAssumptions(
        initial_investment=1_000_000_000,
        purchase_date="2026-01",
        is_property_ready=True,
        property_ready_date="2029-01",
    )
    assert project_rental(a)[0].occupancy == pytest.approx(70)


def test_occupancy_increases_reuse_last_entry():
    a = RentalAssumptions(initial_investment=1, purchase_date="2026-01", occupancy_increases=(5, 2))
    occupancy = [y.occupancy for y in project_rental(a)]
    assert occupancy[:5] == pytest.approx([70, 75, 77, 79, 81])


def test_empty_occupancy_increases_hold_occupancy_flat():
    a = RentalAssumptions(initial_investment=1, purchase_date="2026-01", occupancy_increases=())
    assert {y.occupancy for y in project_rental(a)} == {70}


def test_occupancy_increase_lookup():
    assert occupancy_increase_for((5, 3, 1), 0) == 0
    assert occupancy_increase_for((5, 3, 1), 1) == 5
    assert occupancy_increase_for((5, 3, 1), 3) == 1
    assert occupancy_increase_for((5, 3, 1), 8) == 1
    assert occupancy_increase_for((), 4) == 0


def test_incentive_fee_is_share_of_gop():
    a = RentalAssumptions(initial_investment=1, purchase_date="2026-01", incentive_fee_pct=10)
    for y in project_rental(a):
        assert y.fee_incentive == pytest.approx(y.gop * 0.10)


@pytest.mark.parametrize(
    "overrides,field",
    [
        ({"keys": 0}, "keys"),
        ({"utilities_pct": -1}, "utilities_pct"),
        ({"y1_adr": float("nan")}, "y1_adr"),
        ({"purchase_date": "January 2026"}, "purchase_date"),
        ({"purchase_date": "2026-13"}, "purchase_date"),
        ({"is_property_ready": False, "property_ready_date": "soon"}, "property_ready_date"),
    ],
)
def test_invalid_assumptions_are_rejected(overrides, field):
    a = RentalAssumptions(initial_investment=1_000_000_000, purchase_date="2026-01", **overrides)
    with pytest.raises(InvalidAssumptionsError) as exc:
        project_rental(a)
    assert exc.value.field == field


def test_service_accepts_camel_case_drafts():
    years = compute_rental_projection(
        {
            "initialInvestment": "15,087,472,000",
            "purchaseDate": "2026-01",
            "keys": "18",
            "y1Occupancy": "70",
            "y1Adr": "1,900,000",
            "occupancyIncreases": ["5,5", "5,25", "4,5"],
        }
    )
    assert years[0].keys == 18
    assert years[1].occupancy == pytest.approx(75.5)


def test_service_rejects_non_numeric_keys():
    with pytest.raises(InvalidAssumptionsError):
        compute_rental_projection({"initial_investment": 1, "purchase_date": "2026-01", "keys": "many"})


@settings(max_examples=50, deadline=None)
@given(
    keys=st.integers(min_value=1, max_value=40),
    occupancy=st.floats(min_value=0, max_value=90),
    adr=st.floats(min_value=100_000, max_value=10_000_000),
    fb=st.floats(min_value=0, max_value=1e9),
    growth=st.floats(min_value=0, max_value=10),
    purchase_month=st.integers(min_value=1, max_value=12),
    ready_offset_years=st.integers(min_value=0, max_value=3),
    ready_month=st.integers(min_value=1, max_value=12),
    incentive=st.floats(min_value=0, max_value=20),
)
def test_projection_identities_hold(
    keys, occupancy, adr, fb, growth, purchase_month, ready_offset_years, ready_month, incentive
):
    a = RentalAssumptions(
        initial_investment=10_000_000_000,
        purchase_date=f"2026-{purchase_month:02d}",
        keys=keys,
        is_property_ready=ready_offset_years == 0,
        property_ready_date=f"{2026 + ready_offset_years}-{ready_month:02d}",
        y1_occupancy=occupancy,
        y1_adr=adr,
        y1_fb=fb,
        adr_growth=growth,
        fb_growth=growth,
        cam_growth=growth,
        base_fee_growth=growth,
        tech_fee_growth=growth,
        incentive_fee_pct=incentive,
    )
    years = project_rental(a)

    assert len(years) == PROJECTION_YEARS
    assert [y.calendar_year for y in years] == list(range(2026, 2036))
    for y in years:
        revenue = y.revenue_rooms + y.revenue_fb + y.revenue_spa + y.revenue_other + y.revenue_misc
        assert y.total_revenue == pytest.approx(revenue, rel=1e-9, abs=1e-3)
        assert y.gop == pytest.approx(
            y.total_revenue - y.total_operating_cost - y.total_undistributed_cost, rel=1e-9, abs=1e-3
        )
        fees = y.fee_cam + y.fee_base + y.fee_tech + y.fee_incentive
        assert y.total_management_fees == pytest.approx(fees, rel=1e-9, abs=1e-3)
        assert y.take_home_profit == pytest.approx(y.gop - y.total_management_fees, rel=1e-9, abs=1e-3)
        assert all(math.isfinite(v) for v in (y.occupancy, y.total_revenue, y.take_home_profit))
        if y.occupancy == 0 and y.adr == 0:
            assert y.total_revenue == 0
            assert y.fee_cam == 0
            assert y.fee_base == 0


def test_early_ready_date_does_not_prorate_beyond_purchase():
    a = RentalAssumptions(
        initial_investment=1_000_000_000,
        purchase_date="2026-10",
        is_property_ready=False,
        property_ready_date="2026-02",
        occupancy_increases=(4,),
    )
    first, second = project_rental(a)[:2]

    assert first.occupancy == pytest.approx(70 * 3 / 12)
    assert second.occupancy == pytest.approx(74)
