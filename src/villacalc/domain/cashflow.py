# src/villacalc/domain/cashflow.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field


@dataclass(frozen=True)
class CashFlowEvent:
    date: dt.date
    amount: float           # negative = outflow, positive = inflow
    description: str = ""


@dataclass(frozen=True)
class XIRRResult:
    rate: float                 # annualized, 0.18 = 18%
    total_invested: float       # sum of outflows, positive magnitude
    net_profit: float           # sum of all signed flows
    hold_period_months: int     # whole calendar months, first to last flow

    net_sale_proceeds: float = 0.0   # exit price net of closing costs
    total_roi_pct: float = 0.0       # net_profit / total_invested * 100
    cash_flows: tuple[CashFlowEvent, ...] = field(default_factory=tuple)

    @property
    def hold_period_years(self) -> float:
        return self.hold_period_months / 12.0
