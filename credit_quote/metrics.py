"""Cost metrics of a quote.

The CAT (Costo Anual Total) annualizes the internal rate of return of the
client's cash flows: the net amount actually lent, against every financing
payment plus the GPS charges billed with it. Insurance premiums are services,
not financing costs, and are left out: a premium added to the principal
counts as lent, and its monthly charge is not a flow.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence

import numpy_financial as npf

from .data_models import CASH, AmortizationRow, FinancingStructure


def cash_flows(
    financing: FinancingStructure,
    schedule: Sequence[AmortizationRow],
    commission_mode: str = CASH,
) -> List[float]:
    """Return the client's cash flows, disbursement first (negative)."""
    # Premium carried in the principal, if any.
    financed_premium = financing.principal_total - financing.credit_amount
    disbursed = financing.principal_financed + financed_premium
    if commission_mode == CASH:
        disbursed -= financing.opening_fee + financing.opening_fee_iva
    flows = [-float(disbursed)]
    flows.extend(float(row.pmt + row.gps_rent + row.gps_rent_iva) for row in schedule)
    return flows


def compute_cat(
    financing: FinancingStructure,
    schedule: Sequence[AmortizationRow],
    commission_mode: str = CASH,
) -> Optional[float]:
    """Annualized total cost, ``(1 + irr)^12 - 1``, or None if the IRR diverges."""
    irr = npf.irr(cash_flows(financing, schedule, commission_mode))
    if irr is None or math.isnan(irr):
        return None
    return round(float((1 + irr) ** 12 - 1), 6)
