# src/villacalc/services/rental_analyzer.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from villacalc.adapters.logging_utils import get_logger
from villacalc.analysis.rental import project_rental
from villacalc.analysis.summary import summarize_projection
from villacalc.domain.assumptions import RentalAssumptions
from villacalc.domain.errors import InvalidAssumptionsError, VillaCalcError
from villacalc.domain.projection import RentalSummary, YearlyProjection
from villacalc.services.validation import prepare_rental_payload

logger = get_logger(__name__)


@dataclass(frozen=True)
class RentalAnalysis:
    assumptions: RentalAssumptions
    years: list[YearlyProjection]
    summary: RentalSummary


def _coerce(assumptions: RentalAssumptions | dict[str, Any]) -> RentalAssumptions:
    if isinstance(assumptions, RentalAssumptions):
        return assumptions
    payload = prepare_rental_payload(assumptions)
    try:
        return RentalAssumptions(**payload)
    except ValidationError as e:
        raise InvalidAssumptionsError(str(e)) from e


def compute_rental_projection(assumptions: RentalAssumptions | dict[str, Any]) -> list[YearlyProjection]:
    """Ten YearlyProjection records, or InvalidAssumptionsError."""
    try:
        a = _coerce(assumptions)
        years = project_rental(a)
    except VillaCalcError as e:
        logger.warning(
            "rental_projection_failed",
            extra={"context": {"error": type(e).__name__, "detail": str(e), "field": getattr(e, "field", None)}},
        )
        raise

    logger.info(
        "rental_projection_computed",
        extra={
            "context": {
                "keys": a.keys,
                "first_year": years[0].calendar_year,
                "total_revenue": sum(y.total_revenue for y in years),
            }
        },
    )
    return years


def analyze_rental(assumptions: RentalAssumptions | dict[str, Any]) -> RentalAnalysis:
    """Projection plus decade-level summary, as the report and API consume it."""
    a = _coerce(assumptions)
    years = compute_rental_projection(a)
    summary = summarize_projection(years, a.initial_investment)
    return RentalAnalysis(assumptions=a, years=years, summary=summary)
