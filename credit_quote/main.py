"""Command-line interface for the credit quote engine.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute a full quote with its amortization schedule,
view only the summary, or compute the plans matrix across rate tiers and
terms. Results can be printed to the terminal or exported to JSON/CSV files.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

import click

from . import config
from .contract import result_to_dict, row_to_dict, summary_to_dict
from .data_models import (
    FIRST_PAYMENT_RULES,
    INSURANCE_FINANCE_MODES,
    PAYMENT_MODES,
    CommissionChoice,
    InsuranceChoice,
    QuoteInputs,
    QuoteResult,
    Settings,
)
from .dates import DAY_COUNT_ALIASES
from .engine import compute_quote
from .exceptions import InvalidQuoteInput
from .formatter import print_matrix, print_schedule, print_summary
from .matrix import compute_matrix
from .utils import decimal_from_str, parse_iso_date


def parse_amount(value: str) -> float:
    """Parse a numeric string with optional suffixes.

    Accepts plain floats ("405900") and shorthand with ``k``/``m`` suffixes
    (e.g., "405.9k" meaning 405_900). Returns a float.
    """
    value = value.strip().lower()
    value = value.replace(",", "")
    factor = 1.0
    if value.endswith("k"):
        factor = 1_000.0
        value = value[:-1]
    elif value.endswith("m"):
        factor = 1_000_000.0
        value = value[:-1]
    try:
        return float(value) * factor
    except ValueError:
        raise click.BadParameter(f"Invalid amount: {value}")


def parse_rate(value: str) -> float:
    """Parse a rate string (e.g. "45", "45%" or "0.45") into a fraction."""
    value = value.strip()
    if value.endswith("%"):
        value = value[:-1]
    try:
        r = float(value)
    except ValueError:
        raise click.BadParameter(f"Invalid rate: {value}")
    # A number like 45 means 45%
    if r > 1:
        r = r / 100
    return r


def build_quote_from_options(
    price: str,
    down_payment: str,
    term: int,
    as_of: str,
    tier: Optional[str] = None,
    rate: Optional[str] = None,
    insurance: Optional[str] = None,
    insurance_mode: str = "cash",
    commission_mode: str = "cash",
    iva: Optional[str] = None,
    opening_fee_rate: Optional[str] = None,
    gps_initial: Optional[str] = None,
    gps_monthly: Optional[str] = None,
    day_count: str = config.DEFAULT_DAY_COUNT,
    first_payment_rule: str = "next_quincena",
    finance_insurance_mode: str = "add_to_principal",
) -> Tuple[QuoteInputs, Settings]:
    # Resolve the annual rate from an explicit rate or a tier (default: C)
    if rate:
        annual_rate = decimal_from_str(str(parse_rate(rate)))
    else:
        try:
            annual_rate = config.resolve_tier_rate(tier or "C")
        except InvalidQuoteInput as exc:
            raise click.BadParameter(str(exc))
    try:
        as_of_date = parse_iso_date(as_of)
    except ValueError as exc:
        raise click.BadParameter(str(exc))

    def amount_or(value: Optional[str], default):
        if not value:
            return default
        return decimal_from_str(str(parse_amount(value)))

    settings = Settings(
        annual_nominal_rate=annual_rate,
        iva_rate=decimal_from_str(str(parse_rate(iva))) if iva else config.DEFAULT_IVA_RATE,
        opening_fee_rate=(
            decimal_from_str(str(parse_rate(opening_fee_rate)))
            if opening_fee_rate
            else config.DEFAULT_OPENING_FEE_RATE
        ),
        gps_initial_fee=amount_or(gps_initial, config.DEFAULT_GPS_INITIAL),
        gps_monthly_fee=amount_or(gps_monthly, config.DEFAULT_GPS_MONTHLY),
        first_payment_rule=first_payment_rule,
        day_count=day_count,
        finance_insurance_mode=finance_insurance_mode,
    )
    inputs = QuoteInputs(
        vehicle_price=decimal_from_str(str(parse_amount(price))),
        down_payment=amount_or(down_payment, decimal_from_str("0")),
        term_months=term,
        as_of=as_of_date,
        insurance=InsuranceChoice(
            mode=insurance_mode, amount=amount_or(insurance, decimal_from_str("0"))
        ),
        commission=CommissionChoice(mode=commission_mode),
        rate_tier=None if rate else (tier or "C").upper(),
    )
    return inputs, settings


def _run_quote(inputs: QuoteInputs, settings: Settings) -> QuoteResult:
    try:
        return compute_quote(inputs, settings)
    except InvalidQuoteInput as exc:
        raise click.BadParameter(str(exc))


def export_to_json(path: Path, result: QuoteResult) -> None:
    """Export summary and schedule to a JSON file in the contract shape."""
    with path.open("w", encoding="utf-8") as f:
        json.dump(result_to_dict(result), f, indent=2)


def export_to_csv(path: Path, result: QuoteResult) -> None:
    """Export the schedule to a CSV file."""
    rows = [row_to_dict(row) for row in result.schedule]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=list(rows[0]))
        writer.writeheader()
        writer.writerows(rows)


def quote_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options shared by every command that builds a quote."""
    options = [
        click.option("--price", "-p", "price", required=True, help="Vehicle price"),
        click.option("--down-payment", "-d", "down_payment", default="0", help="Down payment amount"),
        click.option("--as-of", "-s", "as_of", required=True, help="Disbursement date (YYYY-MM-DD)"),
        click.option("--rate", "-r", "rate", help="Annual nominal rate (percent or fraction); overrides --tier"),
        click.option("--insurance", "insurance", help="Vehicle insurance premium"),
        click.option("--insurance-mode", type=click.Choice(PAYMENT_MODES), default="cash", help="Pay the premium in cash or finance it"),
        click.option("--commission-mode", type=click.Choice(PAYMENT_MODES), default="cash", help="Pay the opening fee in cash or finance it"),
        click.option("--iva", "iva", help="Tax rate (default 16%)"),
        click.option("--opening-fee-rate", "opening_fee_rate", help="Opening fee rate (default 3%)"),
        click.option("--gps-initial", "gps_initial", help="GPS installation fee, billed in period 1"),
        click.option("--gps-monthly", "gps_monthly", help="GPS monthly rent"),
        click.option("--day-count", type=click.Choice(sorted(DAY_COUNT_ALIASES)), default=config.DEFAULT_DAY_COUNT, help="Day-count convention"),
        click.option("--first-payment-rule", type=click.Choice(FIRST_PAYMENT_RULES), default="next_quincena", help="How the first payment date is derived"),
        click.option("--finance-insurance-mode", type=click.Choice(INSURANCE_FINANCE_MODES), default="add_to_principal", help="How a financed premium is carried"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log engine details to stderr")
def cli(verbose: bool) -> None:
    """A command-line vehicle credit quote calculator."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@quote_options
@click.option("--term", "-t", "term", required=True, type=int, help="Term in months")
@click.option("--tier", "tier", default="C", help="Rate tier (A, B or C)")
@click.option("--show-insurance", is_flag=True, help="Include the insurance columns")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def quote(term: int, tier: str, show_insurance: bool, output: Optional[str], **options: Any) -> None:
    """Compute and print a quote with its full amortization schedule."""
    inputs, settings = build_quote_from_options(term=term, tier=tier, **options)
    result = _run_quote(inputs, settings)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, result)
            click.echo(f"Quote exported to {path}")
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, result)
            click.echo(f"Schedule exported to {path}")
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
    else:
        print_summary(result.summary)
        print_schedule(result.schedule, show_insurance=show_insurance)


@cli.command()
@quote_options
@click.option("--term", "-t", "term", required=True, type=int, help="Term in months")
@click.option("--tier", "tier", default="C", help="Rate tier (A, B or C)")
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(term: int, tier: str, output: Optional[str], **options: Any) -> None:
    """Compute and print only the summary of a quote."""
    inputs, settings = build_quote_from_options(term=term, tier=tier, **options)
    result = _run_quote(inputs, settings)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension")
        with path.open("w", encoding="utf-8") as f:
            json.dump({"summary": summary_to_dict(result.summary)}, f, indent=2)
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(result.summary)


@cli.command()
@quote_options
@click.option("--tier", "tiers", multiple=True, help="Rate tier to include (repeatable; default all)")
@click.option("--term", "-t", "terms", multiple=True, type=int, help="Term to include (repeatable; default 24/36/48/60)")
@click.option("--output", "output", type=str, help="Output file path (.json)")
def matrix(tiers: Sequence[str], terms: Sequence[int], output: Optional[str], **options: Any) -> None:
    """Compute the plans matrix across rate tiers and terms.

    Example:

        credit-quote matrix -p 405900 -d 121770 -s 2025-08-11 --term 36 --term 48
    """
    if options.get("rate"):
        raise click.UsageError("--rate cannot be combined with matrix; rates come from the tiers")
    selected_terms = list(terms) or list(config.SUPPORTED_TERMS)
    inputs, settings = build_quote_from_options(term=selected_terms[0], **options)
    try:
        plans = compute_matrix(inputs, settings, tiers=list(tiers) or None, terms=selected_terms)
    except InvalidQuoteInput as exc:
        raise click.BadParameter(str(exc))
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Matrix export must use .json extension")
        data: Dict[str, Dict[str, Any]] = {
            tier: {str(term): summary_to_dict(result.summary) for term, result in by_term.items()}
            for tier, by_term in plans.items()
        }
        with path.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        click.echo(f"Matrix exported to {path}")
    else:
        print_matrix(plans, selected_terms)


if __name__ == "__main__":
    cli()
