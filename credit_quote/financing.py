"""Financing structure: from commercial inputs to the principal to amortize.

The vehicle balance after the down payment is always financed. The opening
fee (commission) is either added to the credit or paid at signing together
with its tax, and the insurance premium is either added to the principal or
paid at signing.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from .data_models import (
    ADD_TO_PRINCIPAL,
    CASH,
    FINANCED,
    FinancingStructure,
    QuoteInputs,
    Settings,
)
from .utils import round_currency

logger = logging.getLogger(__name__)


def build_financing_structure(inputs: QuoteInputs, settings: Settings) -> FinancingStructure:
    """Compute the principal to amortize and the cash due at signing.

    Parameters
    ----------
    inputs: QuoteInputs
        Validated commercial inputs.
    settings: Settings
        Engine settings; ``opening_fee_rate``, ``iva_rate`` and
        ``finance_insurance_mode`` are used here.

    Returns
    -------
    FinancingStructure
        ``principal_total`` is the vehicle balance, plus the opening fee when
        the commission is financed, plus the premium when the insurance is
        financed and added to the principal. ``initial_outlay`` is the down
        payment plus every cash-mode charge.
    """
    principal_financed = round_currency(inputs.vehicle_price - inputs.down_payment)

    # The fee is computed net of tax; its tax is only collected when paid in cash.
    opening_fee = round_currency(principal_financed * settings.opening_fee_rate)
    opening_fee_iva = round_currency(opening_fee * settings.iva_rate)

    if inputs.commission.mode == FINANCED:
        credit_amount = principal_financed + opening_fee
    else:
        credit_amount = principal_financed

    financed_insurance_amount = Decimal("0.00")
    if inputs.insurance.mode == FINANCED:
        financed_insurance_amount = round_currency(inputs.insurance.amount)
    principal_total = credit_amount
    if settings.finance_insurance_mode == ADD_TO_PRINCIPAL:
        principal_total += financed_insurance_amount

    initial_outlay = inputs.down_payment
    if inputs.commission.mode == CASH:
        initial_outlay += opening_fee + opening_fee_iva
    if inputs.insurance.mode == CASH:
        initial_outlay += inputs.insurance.amount

    structure = FinancingStructure(
        principal_financed=principal_financed,
        opening_fee=opening_fee,
        opening_fee_iva=opening_fee_iva,
        credit_amount=round_currency(credit_amount),
        principal_total=round_currency(principal_total),
        initial_outlay=round_currency(initial_outlay),
        financed_insurance_amount=financed_insurance_amount,
    )
    logger.debug(
        f"Financing structure: principal_total={structure.principal_total} "
        f"initial_outlay={structure.initial_outlay} commission={inputs.commission.mode} "
        f"insurance={inputs.insurance.mode}"
    )
    return structure
