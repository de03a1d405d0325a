# src/villacalc/analysis/xirr.py
"""
XIRR root finding.

The solver is a small state machine:

    NEWTON_STEP --(converged)--------------------------> CONVERGED
    NEWTON_STEP --(flat/non-finite derivative,
                   step leaves the domain, oscillation,
                   budget exhausted)-------------------> BISECTION_STEP
    BISECTION_STEP --(|NPV| small or bracket tiny)-----> CONVERGED
    BISECTION_STEP --(no sign change, non-finite NPV,
                      budget exhausted)----------------> FAILED

Periods use actual/365 day counts from the first event; the rate compounds
annually.
"""
from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from villacalc.adapters.config import AppConfig, config
from villacalc.adapters.logging_utils import get_logger
from villacalc.domain.cashflow import CashFlowEvent
from villacalc.domain.errors import InvalidCashFlowError, NoConvergenceError

logger = get_logger(__name__)

DAYS_PER_YEAR = 365.0

# |NPV| accepted when Newton stalls on a step smaller than the rate tolerance
_STALL_NPV_TOLERANCE = 1e-6
# how far Newton may wander past the bisection bracket before it counts as diverging
_RUNAWAY_FACTOR = 1000.0
# extra widening of the upper bracket when the first one has no sign change
_BRACKET_EXPANSIONS = (1.0, 10.0, 100.0)


class SolverState(str, Enum):
    NEWTON_STEP = "newton_step"
    BISECTION_STEP = "bisection_step"
    CONVERGED = "converged"
    FAILED = "failed"


@dataclass(frozen=True)
class SolverSettings:
    initial_guess: float = 0.1
    max_iterations: int = 100
    npv_tolerance: float = 1e-10
    rate_tolerance: float = 1e-12
    bracket_low: float = -0.999
    bracket_high: float = 10.0

    @classmethod
    def from_config(cls, cfg: AppConfig = config) -> "SolverSettings":
        return cls(
            initial_guess=cfg.XIRR_INITIAL_GUESS,
            max_iterations=cfg.XIRR_MAX_ITERATIONS,
            npv_tolerance=cfg.XIRR_NPV_TOLERANCE,
            rate_tolerance=cfg.XIRR_RATE_TOLERANCE,
            bracket_low=cfg.XIRR_BRACKET_LOW,
            bracket_high=cfg.XIRR_BRACKET_HIGH,
        )


@dataclass
class SolverOutcome:
    state: SolverState
    rate: float | None
    iterations: int = 0
    npv: float | None = None
    transitions: list[SolverState] = field(default_factory=list)
    fallback_reason: str | None = None


@dataclass
class _StepResult:
    state: SolverState
    rate: float | None
    iterations: int
    npv: float | None = None
    reason: str | None = None


def validate_cash_flows(events: Sequence[CashFlowEvent]) -> None:
    if len(events) < 2:
        raise InvalidCashFlowError("At least two cash flows are required to compute a rate of return")
    has_outflow = any(e.amount < 0 for e in events)
    has_inflow = any(e.amount > 0 for e in events)
    if not (has_outflow and has_inflow):
        raise InvalidCashFlowError(
            "Cannot compute a rate of return: cash flows need at least one outflow and one inflow"
        )


def year_fractions(events: Sequence[CashFlowEvent]) -> list[float]:
    """Actual/365 offsets from the first event's date."""
    origin = events[0].date
    return [(e.date - origin).days / DAYS_PER_YEAR for e in events]


def xnpv(rate: float, amounts: Sequence[float], times: Sequence[float]) -> float:
    base = 1.0 + rate
    return sum(a * base ** (-t) for a, t in zip(amounts, times))


def xnpv_derivative(rate: float, amounts: Sequence[float], times: Sequence[float]) -> float:
    base = 1.0 + rate
    return sum(-t * a * base ** (-t - 1.0) for a, t in zip(amounts, times))


def _safe(fn, rate: float, amounts: Sequence[float], times: Sequence[float]) -> float:
    # rates near -1 with long horizons overflow float pow
    if rate <= -1.0:
        return math.nan
    try:
        return fn(rate, amounts, times)
    except (OverflowError, ZeroDivisionError):
        return math.nan


class XIRRSolver:
    """Newton-Raphson with a bisection fallback. Raises NoConvergenceError instead of guessing."""

    def __init__(self, settings: SolverSettings | None = None) -> None:
        self.settings = settings or SolverSettings.from_config()

    def solve(self, events: Sequence[CashFlowEvent]) -> SolverOutcome:
        validate_cash_flows(events)

        amounts = [float(e.amount) for e in events]
        times = year_fractions(events)
        scale = max(abs(a) for a in amounts)
        npv_tol = self.settings.npv_tolerance * scale

        transitions = [SolverState.NEWTON_STEP]
        newton = self._newton(amounts, times, npv_tol, scale)
        iterations = newton.iterations

        if newton.state is SolverState.CONVERGED:
            transitions.append(SolverState.CONVERGED)
            return SolverOutcome(
                state=SolverState.CONVERGED,
                rate=newton.rate,
                iterations=iterations,
                npv=newton.npv,
                transitions=transitions,
            )

        logger.debug(
            "xirr_newton_fallback",
            extra={"context": {"reason": newton.reason, "iterations": newton.iterations}},
        )
        transitions.append(SolverState.BISECTION_STEP)
        bisection = self._bisection(amounts, times, npv_tol)
        iterations += bisection.iterations
        transitions.append(bisection.state)

        outcome = SolverOutcome(
            state=bisection.state,
            rate=bisection.rate,
            iterations=iterations,
            npv=bisection.npv,
            transitions=transitions,
            fallback_reason=newton.reason,
        )
        if bisection.state is SolverState.FAILED:
            raise NoConvergenceError(
                f"Cannot compute a rate of return for this cash-flow pattern ({bisection.reason})",
                iterations=iterations,
                last_rate=newton.rate,
            )
        return outcome

    # -----------------------------
    # states
    # -----------------------------
    def _newton(
        self,
        amounts: Sequence[float],
        times: Sequence[float],
        npv_tol: float,
        scale: float,
    ) -> _StepResult:
        s = self.settings
        rate = s.initial_guess
        visited: list[float] = []
        runaway = max(abs(s.bracket_high), 1.0) * _RUNAWAY_FACTOR

        for i in range(1, s.max_iterations + 1):
            f = _safe(xnpv, rate, amounts, times)
            if not math.isfinite(f):
                return _StepResult(SolverState.BISECTION_STEP, rate, i, reason="non-finite NPV")
            if abs(f) <= npv_tol:
                return _StepResult(SolverState.CONVERGED, rate, i, npv=f)

            df = _safe(xnpv_derivative, rate, amounts, times)
            if not math.isfinite(df) or abs(df) <= 1e-12 * scale:
                return _StepResult(SolverState.BISECTION_STEP, rate, i, reason="derivative near zero")

            next_rate = rate - f / df
            if not math.isfinite(next_rate) or next_rate <= -1.0 or abs(next_rate) > runaway:
                return _StepResult(SolverState.BISECTION_STEP, rate, i, reason="divergence")

            if abs(next_rate - rate) <= s.rate_tolerance:
                f_next = _safe(xnpv, next_rate, amounts, times)
                if math.isfinite(f_next) and abs(f_next) <= _STALL_NPV_TOLERANCE * scale:
                    return _StepResult(SolverState.CONVERGED, next_rate, i, npv=f_next)
                return _StepResult(SolverState.BISECTION_STEP, rate, i, reason="stalled")

            if len(visited) >= 1 and abs(next_rate - visited[-1]) <= s.rate_tolerance:
                return _StepResult(SolverState.BISECTION_STEP, rate, i, reason="oscillation")

            visited.append(rate)
            rate = next_rate

        return _StepResult(SolverState.BISECTION_STEP, rate, s.max_iterations, reason="iteration budget exhausted")

    def _bisection(
        self,
        amounts: Sequence[float],
        times: Sequence[float],
        npv_tol: float,
    ) -> _StepResult:
        s = self.settings
        lo = s.bracket_low
        f_lo = _safe(xnpv, lo, amounts, times)
        if not math.isfinite(f_lo):
            return _StepResult(SolverState.FAILED, None, 0, reason="non-finite NPV at bracket low")
        if f_lo == 0.0:
            return _StepResult(SolverState.CONVERGED, lo, 0, npv=0.0)

        hi = None
        f_hi = math.nan
        for factor in _BRACKET_EXPANSIONS:
            candidate = s.bracket_high * factor
            f_candidate = _safe(xnpv, candidate, amounts, times)
            if math.isfinite(f_candidate) and (f_candidate == 0.0 or (f_candidate > 0) != (f_lo > 0)):
                hi, f_hi = candidate, f_candidate
                break
        if hi is None:
            return _StepResult(SolverState.FAILED, None, 0, reason="root not bracketed")
        if f_hi == 0.0:
            return _StepResult(SolverState.CONVERGED, hi, 0, npv=0.0)

        for i in range(1, s.max_iterations + 1):
            mid = (lo + hi) / 2.0
            f_mid = _safe(xnpv, mid, amounts, times)
            if not math.isfinite(f_mid):
                return _StepResult(SolverState.FAILED, None, i, reason="non-finite NPV")
            if abs(f_mid) <= npv_tol or (hi - lo) / 2.0 <= s.rate_tolerance:
                return _StepResult(SolverState.CONVERGED, mid, i, npv=f_mid)
            if (f_mid > 0) == (f_lo > 0):
                lo, f_lo = mid, f_mid
            else:
                hi = mid

        return _StepResult(SolverState.FAILED, None, s.max_iterations, reason="iteration budget exhausted")


def solve_xirr(events: Sequence[CashFlowEvent], settings: SolverSettings | None = None) -> float:
    """Annualized rate only. solve() raises rather than return an outcome without one."""
    return XIRRSolver(settings).solve(events).rate
