# src/villacalc/domain/errors.py
from __future__ import annotations


class VillaCalcError(ValueError):
    """Base class for every recoverable engine failure."""


class InvalidCashFlowError(VillaCalcError):
    """Cash-flow sequence has fewer than two events or no sign change."""


class NoConvergenceError(VillaCalcError):
    def __init__(self, message: str, *, iterations: int = 0, last_rate: float | None = None) -> None:
        super().__init__(message)
        self.iterations = iterations
        self.last_rate = last_rate


class EmptyScheduleError(VillaCalcError):
    """Nothing to summarize."""


class InvalidAssumptionsError(VillaCalcError):
    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field
