"""Business constants and configuration loading for the credit quote engine.

Every numeric assumption the engine relies on lives here under a name, so that
a change in commercial policy (a new tax rate, a different GPS provider, a new
insurance financing factor) is a configuration change rather than a code
change. ``settings_from_env`` builds the default engine settings from
``CREDIT_QUOTE_*`` environment variables, falling back to these constants.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Dict, Mapping, Optional

from .exceptions import InvalidQuoteInput
from .utils import decimal_from_str

if TYPE_CHECKING:
    from .data_models import Settings

DEFAULT_IVA_RATE = Decimal("0.16")
DEFAULT_OPENING_FEE_RATE = Decimal("0.03")
DEFAULT_GPS_INITIAL = Decimal("0")
DEFAULT_GPS_MONTHLY = Decimal("400")
DEFAULT_DAY_COUNT = "A360"

# The financed premium is grossed up by this factor before being spread over
# the coverage months, to account for the cost of money over the policy term.
INSURANCE_FINANCING_FACTOR = Decimal("1.3047")
INSURANCE_COVERAGE_MONTHS = 12

LIFE_INSURANCE_MONTHLY = Decimal("300")

# Share of monthly income a client may commit to the total payment.
AFFORDABILITY_RATIO = Decimal("0.265")

SUPPORTED_TERMS = (24, 36, 48, 60)

TIER_RATES: Dict[str, Decimal] = {
    "A": Decimal("0.36"),
    "B": Decimal("0.40"),
    "C": Decimal("0.45"),
}

# Tiers offered to clients and agencies; advisors see every tier.
PUBLIC_TIERS = ("C",)

ENV_PREFIX = "CREDIT_QUOTE_"


def resolve_tier_rate(tier: str, rates: Optional[Mapping[str, Decimal]] = None) -> Decimal:
    """Return the annual nominal rate of a tier code such as ``"A"``.

    Raises
    ------
    InvalidQuoteInput
        If the tier is not configured.
    """
    table = TIER_RATES if rates is None else rates
    code = (tier or "").strip().upper()
    if code not in table:
        raise InvalidQuoteInput(
            {"rate_tier": f"unknown tier {tier!r}; expected one of {sorted(table)}"}
        )
    return table[code]


def _env_decimal(environ: Mapping[str, str], name: str, default: Decimal) -> Decimal:
    raw = environ.get(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    return decimal_from_str(raw)


def tier_rates_from_env(environ: Mapping[str, str]) -> Dict[str, Decimal]:
    """Return the tier table, overriding rates with ``CREDIT_QUOTE_TIER_<X>``."""
    rates = dict(TIER_RATES)
    for code in list(rates):
        rates[code] = _env_decimal(environ, f"TIER_{code}", rates[code])
    return rates


def settings_from_env(
    environ: Mapping[str, str], annual_nominal_rate: Optional[Decimal] = None
) -> Settings:
    """Build default ``Settings`` from environment variables.

    Recognized variables (all optional): ``CREDIT_QUOTE_IVA``,
    ``CREDIT_QUOTE_OPENING_FEE_RATE``, ``CREDIT_QUOTE_GPS_INITIAL``,
    ``CREDIT_QUOTE_GPS_MONTHLY``, ``CREDIT_QUOTE_DAY_COUNT``,
    ``CREDIT_QUOTE_LIFE_INSURANCE``, ``CREDIT_QUOTE_INSURANCE_FACTOR``,
    ``CREDIT_QUOTE_AFFORDABILITY_RATIO``. When ``annual_nominal_rate`` is not
    given, the rate of tier C is used.
    """
    # data_models reads its defaults from this module.
    from .data_models import Settings

    if annual_nominal_rate is None:
        annual_nominal_rate = tier_rates_from_env(environ)["C"]
    return Settings(
        annual_nominal_rate=annual_nominal_rate,
        iva_rate=_env_decimal(environ, "IVA", DEFAULT_IVA_RATE),
        opening_fee_rate=_env_decimal(environ, "OPENING_FEE_RATE", DEFAULT_OPENING_FEE_RATE),
        gps_initial_fee=_env_decimal(environ, "GPS_INITIAL", DEFAULT_GPS_INITIAL),
        gps_monthly_fee=_env_decimal(environ, "GPS_MONTHLY", DEFAULT_GPS_MONTHLY),
        day_count=environ.get(ENV_PREFIX + "DAY_COUNT", DEFAULT_DAY_COUNT),
        life_insurance_monthly=_env_decimal(environ, "LIFE_INSURANCE", LIFE_INSURANCE_MONTHLY),
        insurance_financing_factor=_env_decimal(
            environ, "INSURANCE_FACTOR", INSURANCE_FINANCING_FACTOR
        ),
        affordability_ratio=_env_decimal(environ, "AFFORDABILITY_RATIO", AFFORDABILITY_RATIO),
    )
