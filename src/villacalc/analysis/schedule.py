# src/villacalc/analysis/schedule.py
from __future__ import annotations

import calendar
import datetime as dt

from villacalc.domain.assumptions import InvestmentAssumptions
from villacalc.domain.cashflow import CashFlowEvent


def add_months(start: dt.date, months: int) -> dt.date:
    """Shift a date by whole calendar months, clamping the day to the target month's end."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return dt.date(year, month, day)


def months_between(start: dt.date, end: dt.date) -> int:
    """
    Whole calendar months from start to end.

    2024-01-15 -> 2024-03-15 is 2 months, 2024-01-15 -> 2024-03-14 is 1.
    Negative when end precedes start.
    """
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if months > 0 and end.day < start.day:
        months -= 1
    elif months < 0 and end.day > start.day:
        months += 1
    return months


def down_payment_amount(assumptions: InvestmentAssumptions) -> float:
    return assumptions.total_price * assumptions.down_payment_percent / 100.0


def net_sale_proceeds(assumptions: InvestmentAssumptions) -> float:
    """Exit price net of closing costs."""
    return assumptions.projected_sales_price * (1.0 - assumptions.closing_cost_percent / 100.0)


def _installment_events(assumptions: InvestmentAssumptions, remainder: float) -> list[CashFlowEvent]:
    """
    Split the balance into equal monthly outflows starting the month after
    purchase. Installments that would land after handover are dated at
    handover.
    """
    n = assumptions.installment_months
    per_installment = remainder / n
    events: list[CashFlowEvent] = []
    for k in range(1, n + 1):
        due = min(add_months(assumptions.purchase_date, k), assumptions.handover_date)
        events.append(
            CashFlowEvent(date=due, amount=-per_installment, description=f"Installment {k}/{n}")
        )
    return events


def build_payment_schedule(assumptions: InvestmentAssumptions) -> list[CashFlowEvent]:
    """
    Turn acquisition, payment plan and exit terms into a dated, signed cash-flow
    sequence sorted by date. Same-date events keep insertion order:
    down payment, installments, additional flows, exit.
    """
    down_payment = down_payment_amount(assumptions)
    remainder = assumptions.total_price - down_payment

    events: list[CashFlowEvent] = []

    if assumptions.installment_months > 0:
        events.append(
            CashFlowEvent(date=assumptions.purchase_date, amount=-down_payment, description="Down payment")
        )
        events.extend(_installment_events(assumptions, remainder))
    else:
        # no plan: the whole price is paid at purchase
        events.append(
            CashFlowEvent(
                date=assumptions.purchase_date,
                amount=-(down_payment + remainder),
                description="Down payment",
            )
        )

    for extra in assumptions.additional_cash_flows:
        events.append(
            CashFlowEvent(date=extra.date, amount=extra.signed_amount, description=extra.description)
        )

    events.append(
        CashFlowEvent(
            date=assumptions.effective_exit_date,
            amount=net_sale_proceeds(assumptions),
            description="Exit sale (net of closing costs)",
        )
    )

    # sorted() is stable, so same-day events stay in insertion order
    return sorted(events, key=lambda e: e.date)
