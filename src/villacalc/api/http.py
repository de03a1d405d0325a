# src/villacalc/api/http.py
from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import FastAPI, HTTPException, Query

from villacalc.adapters.config import config
from villacalc.adapters.currency import (
    CurrencyConverter,
    FrankfurterRateProvider,
    StaticRateProvider,
    UnknownCurrencyError,
)
from villacalc.adapters.logging_utils import get_logger
from villacalc.domain.errors import VillaCalcError
from villacalc.services.investment_analyzer import compute_xirr
from villacalc.services.rental_analyzer import analyze_rental
from .schemas import (
    CashFlowOut,
    ConversionResponse,
    RentalRequest,
    RentalResponse,
    XIRRRequest,
    XIRRResponse,
)

logger = get_logger(__name__)

app = FastAPI(title="VillaCalc")

# -------------------------------------------------------------------
# Rate provider selection (single init at startup)
# -------------------------------------------------------------------
if config.USE_LIVE_RATES:
    _live = FrankfurterRateProvider()
    _live.refresh()
    _converter = CurrencyConverter(_live)
else:
    _converter = CurrencyConverter(StaticRateProvider())


def _error_detail(e: VillaCalcError) -> dict[str, Any]:
    detail: dict[str, Any] = {"error": type(e).__name__, "message": str(e)}
    field = getattr(e, "field", None)
    if field:
        detail["field"] = field
    return detail


def _display(amount: float, currency: str) -> str:
    return _converter.format(_converter.convert(amount, config.BASE_CURRENCY, currency), currency)


def _check_currency(currency: str) -> str:
    code = currency.strip().upper()
    try:
        _converter.units_per(code)
    except UnknownCurrencyError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return code


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "env": config.ENV}


@app.post("/xirr", response_model=XIRRResponse)
def xirr_endpoint(
    payload: XIRRRequest,
    currency: str = Query(config.DISPLAY_CURRENCY, description="Display currency for formatted values"),
) -> XIRRResponse:
    """
    Buy/flip analysis. Engine failures (bad inputs, no rate of return) are 422
    with a user-facing message; anything else is 400.
    """
    code = _check_currency(currency)
    try:
        result = compute_xirr(payload.model_dump(mode="json", exclude_none=True))
    except VillaCalcError as e:
        raise HTTPException(status_code=422, detail=_error_detail(e)) from e
    except Exception as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    return XIRRResponse(
        rate=result.rate,
        rate_pct=result.rate * 100.0,
        total_invested=result.total_invested,
        net_profit=result.net_profit,
        hold_period_months=result.hold_period_months,
        hold_period_years=result.hold_period_years,
        net_sale_proceeds=result.net_sale_proceeds,
        total_roi_pct=result.total_roi_pct,
        cash_flows=[
            CashFlowOut(date=e.date.isoformat(), amount=e.amount, description=e.description)
            for e in result.cash_flows
        ],
        display_currency=code,
        formatted={
            "total_invested": _display(result.total_invested, code),
            "net_profit": _display(result.net_profit, code),
            "net_sale_proceeds": _display(result.net_sale_proceeds, code),
        },
    )


@app.post("/rental/projection", response_model=RentalResponse)
def rental_projection_endpoint(
    payload: RentalRequest,
    currency: str = Query(config.DISPLAY_CURRENCY, description="Display currency for formatted values"),
) -> RentalResponse:
    code = _check_currency(currency)
    try:
        analysis = analyze_rental(payload.model_dump(mode="json", exclude_none=True))
    except VillaCalcError as e:
        raise HTTPException(status_code=422, detail=_error_detail(e)) from e
    except Exception as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    summary = asdict(analysis.summary)
    summary["payback_recoverable"] = analysis.summary.is_payback_recoverable
    summary["formatted"] = {
        "total_revenue": _display(analysis.summary.total_revenue, code),
        "total_profit": _display(analysis.summary.total_profit, code),
        "avg_take_home_profit": _display(analysis.summary.avg_take_home_profit, code),
    }

    return RentalResponse(
        years=[asdict(y) for y in analysis.years],
        summary=summary,
        display_currency=code,
    )


@app.get("/currency/convert", response_model=ConversionResponse)
def convert_endpoint(
    amount: float,
    from_code: str = Query(config.BASE_CURRENCY),
    to_code: str = Query(config.DISPLAY_CURRENCY),
) -> ConversionResponse:
    try:
        converted = _converter.convert(amount, from_code, to_code)
        rate = _converter.rate(from_code, to_code)
        formatted = _converter.format(converted, to_code)
    except UnknownCurrencyError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    return ConversionResponse(
        amount=amount,
        from_code=from_code.upper(),
        to_code=to_code.upper(),
        rate=rate,
        converted=converted,
        formatted=formatted,
    )
