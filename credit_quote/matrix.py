"""Plans matrix: one quote per (rate tier, term) pair, computed concurrently.

Each branch is an independent call to :func:`compute_quote`; results are
keyed by tier and term, so branches may finish in any order.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from decimal import Decimal
from typing import Dict, Iterable, Mapping, Optional, Sequence, Tuple

from . import config
from .data_models import QuoteInputs, QuoteResult, Settings
from .engine import compute_quote

logger = logging.getLogger(__name__)

Matrix = Dict[str, Dict[int, QuoteResult]]


def _branches(
    inputs: QuoteInputs,
    settings: Settings,
    tiers: Iterable[str],
    terms: Iterable[int],
    tier_rates: Mapping[str, Decimal],
) -> Sequence[Tuple[str, int, QuoteInputs, Settings]]:
    branches = []
    terms = list(terms)
    for tier in tiers:
        code = str(tier).strip().upper()
        tier_settings = replace(
            settings, annual_nominal_rate=config.resolve_tier_rate(code, tier_rates)
        )
        for term in terms:
            branch_inputs = replace(inputs, term_months=term, rate_tier=code)
            branches.append((code, term, branch_inputs, tier_settings))
    return branches


def compute_matrix(
    inputs: QuoteInputs,
    settings: Settings,
    tiers: Optional[Iterable[str]] = None,
    terms: Optional[Iterable[int]] = None,
    tier_rates: Optional[Mapping[str, Decimal]] = None,
    max_workers: Optional[int] = None,
    strict_terms: bool = False,
) -> Matrix:
    """Compute every (tier, term) quote of ``inputs``.

    Parameters
    ----------
    inputs: QuoteInputs
        Commercial inputs; ``term_months`` and ``rate_tier`` are replaced per
        branch.
    settings: Settings
        Base settings; ``annual_nominal_rate`` is replaced by each tier's rate.
    tiers, terms: iterables, optional
        Defaults to every configured tier and every offered term.
    tier_rates: Mapping, optional
        Tier table; defaults to ``config.TIER_RATES``.
    max_workers: int, optional
        Thread pool size; defaults to one worker per branch.
    strict_terms: bool
        When True, only the commercially offered terms are accepted.

    Returns
    -------
    dict
        ``{tier: {term: QuoteResult}}``.

    Raises
    ------
    InvalidQuoteInput
        For an unknown tier before anything runs, or the first branch error
        once every branch has finished.
    """
    table = config.TIER_RATES if tier_rates is None else tier_rates
    tiers = list(table) if tiers is None else list(tiers)
    terms = list(config.SUPPORTED_TERMS) if terms is None else list(terms)
    branches = _branches(inputs, settings, tiers, terms, table)
    if not branches:
        return {}

    workers = max_workers or len(branches)
    logger.debug(f"Computing plans matrix: {len(branches)} quotes on {workers} workers")
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [
            ((tier, term), pool.submit(compute_quote, branch_inputs, branch_settings, strict_terms))
            for tier, term, branch_inputs, branch_settings in branches
        ]
        # Wait for all branches before surfacing an error.
        outcomes = [(key, future.exception(), future) for key, future in futures]

    matrix: Matrix = {}
    for (tier, term), error, future in outcomes:
        if error is not None:
            raise error
        matrix.setdefault(tier, {})[term] = future.result()
    return matrix
