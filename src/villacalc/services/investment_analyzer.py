# src/villacalc/services/investment_analyzer.py
from __future__ import annotations

import math
from typing import Any

from pydantic import ValidationError

from villacalc.adapters.logging_utils import get_logger
from villacalc.analysis.schedule import build_payment_schedule, net_sale_proceeds
from villacalc.analysis.summary import summarize_cash_flows
from villacalc.analysis.xirr import SolverSettings, XIRRSolver
from villacalc.domain.assumptions import InvestmentAssumptions
from villacalc.domain.cashflow import XIRRResult
from villacalc.domain.errors import InvalidAssumptionsError, VillaCalcError
from villacalc.services.validation import prepare_investment_payload

logger = get_logger(__name__)


def _coerce(assumptions: InvestmentAssumptions | dict[str, Any]) -> InvestmentAssumptions:
    if isinstance(assumptions, InvestmentAssumptions):
        return assumptions
    payload = prepare_investment_payload(assumptions)
    try:
        return InvestmentAssumptions(**payload)
    except ValidationError as e:
        raise InvalidAssumptionsError(str(e)) from e


def validate_investment_assumptions(a: InvestmentAssumptions) -> None:
    for name in ("total_price", "projected_sales_price", "down_payment_percent", "closing_cost_percent"):
        value = getattr(a, name)
        if not math.isfinite(value) or value < 0:
            raise InvalidAssumptionsError(f"{name} must be a non-negative number, got {value}", field=name)

    if a.down_payment_percent > 100:
        raise InvalidAssumptionsError("down_payment_percent must be between 0 and 100", field="down_payment_percent")
    if a.closing_cost_percent > 100:
        raise InvalidAssumptionsError("closing_cost_percent must be between 0 and 100", field="closing_cost_percent")
    if a.installment_months < 0:
        raise InvalidAssumptionsError("installment_months must be >= 0", field="installment_months")

    if a.purchase_date > a.handover_date:
        raise InvalidAssumptionsError("purchase_date must not be after handover_date", field="handover_date")
    if a.purchase_date > a.effective_exit_date:
        raise InvalidAssumptionsError("purchase_date must not be after exit_date", field="exit_date")

    for i, extra in enumerate(a.additional_cash_flows):
        if not math.isfinite(extra.amount):
            raise InvalidAssumptionsError(
                f"additional_cash_flows[{i}].amount must be finite", field="additional_cash_flows"
            )


def compute_xirr(
    assumptions: InvestmentAssumptions | dict[str, Any],
    settings: SolverSettings | None = None,
) -> XIRRResult:
    """
    Buy/flip analysis: build the payment schedule, solve XIRR, summarize.

    Raises InvalidAssumptionsError, InvalidCashFlowError, NoConvergenceError
    or EmptyScheduleError; never returns a fabricated rate.
    """
    try:
        a = _coerce(assumptions)
        validate_investment_assumptions(a)

        events = build_payment_schedule(a)
        totals = summarize_cash_flows(events)
        outcome = XIRRSolver(settings).solve(events)
    except VillaCalcError as e:
        logger.warning(
            "xirr_failed",
            extra={"context": {"error": type(e).__name__, "detail": str(e)}},
        )
        raise

    total_roi_pct = totals.net_profit / totals.total_invested * 100.0 if totals.total_invested else 0.0

    result = XIRRResult(
        rate=outcome.rate,
        total_invested=totals.total_invested,
        net_profit=totals.net_profit,
        hold_period_months=totals.hold_period_months,
        net_sale_proceeds=net_sale_proceeds(a),
        total_roi_pct=total_roi_pct,
        cash_flows=tuple(events),
    )

    logger.info(
        "xirr_computed",
        extra={
            "context": {
                "rate": result.rate,
                "iterations": outcome.iterations,
                "solver_path": [s.value for s in outcome.transitions],
                "total_invested": result.total_invested,
                "hold_period_months": result.hold_period_months,
            }
        },
    )
    return result
