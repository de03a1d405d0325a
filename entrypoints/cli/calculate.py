from __future__ import annotations

from typing import Optional

import typer
from loguru import logger

from villacalc.adapters.config import config
from villacalc.adapters.currency import CurrencyConverter, UnknownCurrencyError, abbreviate
from villacalc.adapters.storage import read_json, write_df
from villacalc.analysis.tables import projection_frame, schedule_frame
from villacalc.domain.errors import VillaCalcError
from villacalc.services.investment_analyzer import compute_xirr
from villacalc.services.rental_analyzer import analyze_rental

app = typer.Typer(help="Villa investment calculators (XIRR buy/flip, 10-year rental pro forma).")

_converter = CurrencyConverter()


def _units_per(currency: str) -> float:
    try:
        return _converter.units_per(currency)
    except UnknownCurrencyError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1) from e


@app.command()
def xirr(
    assumptions_json: str = typer.Argument(..., help="Path to InvestmentAssumptions JSON"),
    currency: str = typer.Option(config.DISPLAY_CURRENCY, help="Display currency"),
    output: Optional[str] = typer.Option(None, help="Write the cash-flow schedule to .csv or .parquet"),
) -> None:
    """
    Compute XIRR, total invested, net profit and hold period for a buy/flip plan.
    """
    units = _units_per(currency)
    logger.info("Computing XIRR", path=assumptions_json, currency=currency)

    try:
        result = compute_xirr(read_json(assumptions_json))
    except VillaCalcError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    df = schedule_frame(result.cash_flows, units_per_display=units)
    typer.echo(df.to_string(index=False))
    typer.echo("")
    typer.echo(f"XIRR:            {result.rate * 100:.2f}%")
    typer.echo(f"Total invested:  {_converter.format(result.total_invested / units, currency)}")
    typer.echo(f"Net profit:      {_converter.format(result.net_profit / units, currency)}")
    typer.echo(f"Total ROI:       {result.total_roi_pct:.2f}%")
    typer.echo(f"Hold period:     {result.hold_period_months} months ({result.hold_period_years:.1f} years)")

    if output:
        write_df(df, output, index=False)
        logger.info("Wrote cash-flow schedule", output=output)


@app.command()
def rental(
    assumptions_json: str = typer.Argument(..., help="Path to RentalAssumptions JSON"),
    currency: str = typer.Option(config.DISPLAY_CURRENCY, help="Display currency"),
    output: Optional[str] = typer.Option(None, help="Write the yearly projection to .csv or .parquet"),
) -> None:
    """
    Project ten years of rental operations and print the decade summary.
    """
    units = _units_per(currency)
    logger.info("Projecting rental operations", path=assumptions_json, currency=currency)

    try:
        analysis = analyze_rental(read_json(assumptions_json))
    except VillaCalcError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    df = projection_frame(analysis.years, units_per_display=units)
    view = df[["occupancy", "adr", "total_revenue", "gop", "total_management_fees", "take_home_profit", "roi_after_management"]]
    typer.echo(view.round(2).to_string())

    s = analysis.summary
    payback = f"{s.payback_years:.1f} years" if s.payback_years is not None else "not recoverable"
    typer.echo("")
    typer.echo(f"Avg occupancy:         {s.avg_occupancy:.2f}%")
    typer.echo(f"Avg GOP margin:        {s.avg_gop_margin:.2f}%")
    typer.echo(f"Avg net ROI:           {s.avg_roi_after_management:.2f}%")
    typer.echo(f"Total 10y revenue:     {abbreviate(s.total_revenue / units)} {currency.upper()}")
    typer.echo(f"Total 10y profit:      {_converter.format(s.total_profit / units, currency)}")
    typer.echo(f"Payback:               {payback}")

    if output:
        write_df(df, output)
        logger.info("Wrote projection", output=output, rows=len(df))


if __name__ == "__main__":
    app()
