from decimal import Decimal

import pytest

from credit_quote.exceptions import InvalidQuoteInput
from credit_quote.matrix import compute_matrix


def test_full_matrix(scenario_a, settings):
    matrix = compute_matrix(scenario_a, settings)
    assert set(matrix) == {"A", "B", "C"}
    for tier, by_term in matrix.items():
        assert set(by_term) == {24, 36, 48, 60}
        for term, result in by_term.items():
            assert len(result.schedule) == term
            assert result.schedule[-1].saldo_fin == 0
            assert result.inputs.rate_tier == tier


def test_cheaper_tiers_pay_less(scenario_a, settings):
    matrix = compute_matrix(scenario_a, settings, terms=[48])
    payments = [matrix[tier][48].summary.pmt_base for tier in ("A", "B", "C")]
    assert payments == sorted(payments)
    assert payments[0] < payments[2]


def test_branch_uses_tier_rate(scenario_a, settings):
    matrix = compute_matrix(scenario_a, settings, tiers=["b"], terms=[24])
    assert matrix["B"][24].settings.annual_nominal_rate == Decimal("0.40")


def test_custom_tier_table(scenario_a, settings):
    matrix = compute_matrix(scenario_a, settings, tier_rates={"X": Decimal("0.20")}, terms=[12])
    assert list(matrix) == ["X"]
    assert matrix["X"][12].settings.annual_nominal_rate == Decimal("0.20")


def test_unknown_tier(scenario_a, settings):
    with pytest.raises(InvalidQuoteInput):
        compute_matrix(scenario_a, settings, tiers=["A", "Z"])


def test_branch_error_surfaces(scenario_a, settings):
    with pytest.raises(InvalidQuoteInput):
        compute_matrix(scenario_a, settings, tiers=["A"], terms=[24, 0])


def test_empty_matrix(scenario_a, settings):
    assert compute_matrix(scenario_a, settings, terms=[]) == {}


def test_strict_terms(scenario_a, settings):
    with pytest.raises(InvalidQuoteInput) as excinfo:
        compute_matrix(scenario_a, settings, tiers=["C"], terms=[30], strict_terms=True)
    assert "term_months" in excinfo.value.errors
    assert 30 in compute_matrix(scenario_a, settings, tiers=["C"], terms=[30])["C"]
