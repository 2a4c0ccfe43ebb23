"""Translation between the JSON quote contract and the engine's data models.

Document rendering, export and persistence index the output fields by exact
name, so the shapes produced here are a stable boundary. Decimals leave as
floats and dates as ISO strings.
"""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Tuple

from . import config
from .data_models import (
    CASH,
    AmortizationRow,
    CommissionChoice,
    InsuranceChoice,
    QuoteInputs,
    QuoteResult,
    Settings,
    Summary,
)
from .exceptions import InvalidQuoteInput
from .utils import decimal_from_str, parse_iso_date

# JSON setting name -> (Settings attribute, kind)
_SETTING_FIELDS = {
    "iva": ("iva_rate", "decimal"),
    "opening_fee_rate": ("opening_fee_rate", "decimal"),
    "gps_initial": ("gps_initial_fee", "decimal"),
    "gps_monthly": ("gps_monthly_fee", "decimal"),
    "first_payment_rule": ("first_payment_rule", "str"),
    "day_count": ("day_count", "str"),
    "finance_insurance_mode": ("finance_insurance_mode", "str"),
    "life_insurance_monthly": ("life_insurance_monthly", "decimal"),
    "insurance_financing_factor": ("insurance_financing_factor", "decimal"),
    "insurance_coverage_months": ("insurance_coverage_months", "int"),
    "affordability_ratio": ("affordability_ratio", "decimal"),
    "min_grace_days": ("min_grace_days", "int"),
}


def _decimal(errors: Dict[str, str], name: str, value: Any) -> Optional[Decimal]:
    if value is None:
        errors[name] = "is required"
        return None
    try:
        return decimal_from_str(value)
    except ValueError:
        errors[name] = f"must be a number, got {value!r}"
        return None


def _integer(errors: Dict[str, str], name: str, value: Any) -> Optional[int]:
    if value is None:
        errors[name] = "is required"
        return None
    if isinstance(value, bool):
        errors[name] = f"must be an integer, got {value!r}"
        return None
    try:
        number = decimal_from_str(value)
    except ValueError:
        errors[name] = f"must be an integer, got {value!r}"
        return None
    if number != number.to_integral_value():
        errors[name] = f"must be an integer, got {value!r}"
        return None
    return int(number)


def _mapping(errors: Dict[str, str], name: str, value: Any) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        errors[name] = "must be an object"
        return {}
    return value


def parse_quote_request(
    payload: Mapping[str, Any],
    defaults: Optional[Settings] = None,
    tier_rates: Optional[Mapping[str, Decimal]] = None,
    term_months: Optional[int] = None,
) -> Tuple[QuoteInputs, Settings]:
    """Map a quote request body to ``(QuoteInputs, Settings)``.

    Parameters
    ----------
    payload: Mapping
        The request body: ``vehicle_value``, ``down_payment_amount``,
        ``term_months``, ``insurance``, optional ``commission`` (cash by
        default), ``settings``, ``as_of`` and optional ``rate_tier``.
    defaults: Settings, optional
        Settings used for every key the request omits.
    tier_rates: Mapping, optional
        Tier table used when the request names a ``rate_tier`` but no
        ``settings.annual_nominal_rate``.
    term_months: int, optional
        Overrides the body's term (used when fanning out over terms).

    Raises
    ------
    InvalidQuoteInput
        Listing every field that is missing or malformed. Range checks are
        left to :func:`credit_quote.validation.validate_quote`.
    """
    errors: Dict[str, str] = {}
    if not isinstance(payload, Mapping):
        raise InvalidQuoteInput({"body": "must be a JSON object"})

    vehicle_price = _decimal(errors, "vehicle_value", payload.get("vehicle_value"))
    down_payment = _decimal(errors, "down_payment_amount", payload.get("down_payment_amount", 0))
    if term_months is None:
        term_months = _integer(errors, "term_months", payload.get("term_months"))

    as_of = None
    if payload.get("as_of") is None:
        errors["as_of"] = "is required"
    else:
        try:
            as_of = parse_iso_date(payload["as_of"])
        except ValueError:
            errors["as_of"] = f"must be an ISO date, got {payload['as_of']!r}"

    insurance_raw = _mapping(errors, "insurance", payload.get("insurance"))
    insurance_amount = _decimal(errors, "insurance.amount", insurance_raw.get("amount", 0))
    insurance = InsuranceChoice(
        mode=str(insurance_raw.get("mode", CASH)),
        amount=insurance_amount if insurance_amount is not None else Decimal("0"),
    )
    commission_raw = _mapping(errors, "commission", payload.get("commission"))
    commission = CommissionChoice(mode=str(commission_raw.get("mode", CASH)))

    settings_raw = _mapping(errors, "settings", payload.get("settings"))
    rate_tier = payload.get("rate_tier")
    settings = _parse_settings(errors, settings_raw, rate_tier, defaults, tier_rates)

    if errors:
        raise InvalidQuoteInput(errors)

    inputs = QuoteInputs(
        vehicle_price=vehicle_price,
        down_payment=down_payment,
        term_months=term_months,
        as_of=as_of,
        insurance=insurance,
        commission=commission,
        rate_tier=rate_tier,
    )
    return inputs, settings


def _parse_settings(
    errors: Dict[str, str],
    raw: Mapping[str, Any],
    rate_tier: Optional[str],
    defaults: Optional[Settings],
    tier_rates: Optional[Mapping[str, Decimal]],
) -> Optional[Settings]:
    if "annual_nominal_rate" in raw:
        rate = _decimal(errors, "settings.annual_nominal_rate", raw["annual_nominal_rate"])
    elif rate_tier is not None:
        try:
            rate = config.resolve_tier_rate(str(rate_tier), tier_rates)
        except InvalidQuoteInput as exc:
            errors.update(exc.errors)
            rate = None
    elif defaults is not None:
        rate = defaults.annual_nominal_rate
    else:
        errors["settings.annual_nominal_rate"] = "is required when no rate_tier is given"
        rate = None

    overrides: Dict[str, Any] = {}
    for key, (attribute, kind) in _SETTING_FIELDS.items():
        if key not in raw:
            continue
        name = f"settings.{key}"
        value = raw[key]
        if kind == "decimal":
            overrides[attribute] = _decimal(errors, name, value)
        elif kind == "int":
            overrides[attribute] = None if value is None else _integer(errors, name, value)
        else:
            overrides[attribute] = str(value)

    if rate is None:
        return None
    base = defaults if defaults is not None else Settings(annual_nominal_rate=rate)
    return replace(base, annual_nominal_rate=rate, **overrides)


def _money(value: Decimal) -> float:
    return float(value)


def row_to_dict(row: AmortizationRow) -> Dict[str, Any]:
    return {
        "k": row.k,
        "date": row.date.isoformat(),
        "saldo_ini": _money(row.saldo_ini),
        "interes": _money(row.interes),
        "iva_interes": _money(row.iva_interes),
        "capital": _money(row.capital),
        "pmt": _money(row.pmt),
        "gps_rent": _money(row.gps_rent),
        "gps_rent_iva": _money(row.gps_rent_iva),
        "insurance_monthly": _money(row.insurance_monthly),
        "life_insurance_monthly": _money(row.life_insurance_monthly),
        "pago_total": _money(row.pago_total),
        "saldo_fin": _money(row.saldo_fin),
    }


def summary_to_dict(summary: Summary) -> Dict[str, Any]:
    return {
        "pmt_total_month2": _money(summary.pmt_total_month2),
        "principal_total": _money(summary.principal_total),
        "initial_outlay": _money(summary.initial_outlay),
        "first_payment_date": summary.first_payment_date.isoformat(),
        "last_payment_date": summary.last_payment_date.isoformat(),
        "pmt_base": _money(summary.pmt_base),
        "opening_fee": _money(summary.opening_fee),
        "opening_fee_iva": _money(summary.opening_fee_iva),
        "gps": _money(summary.gps),
        "gps_iva": _money(summary.gps_iva),
        "principal_financed": _money(summary.principal_financed),
        "minimum_income": _money(summary.minimum_income),
        "total_interest": _money(summary.total_interest),
        "total_iva_interes": _money(summary.total_iva_interes),
        "total_capital": _money(summary.total_capital),
        "total_paid": _money(summary.total_paid),
        "cat": summary.cat,
    }


def result_to_dict(result: QuoteResult) -> Dict[str, Any]:
    """Render a quote result in the output contract shape."""
    return {
        "summary": summary_to_dict(result.summary),
        "schedule": [row_to_dict(row) for row in result.schedule],
    }
