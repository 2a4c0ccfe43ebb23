import json
from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from credit_quote.contract import result_to_dict
from credit_quote.data_models import CommissionChoice, InsuranceChoice
from credit_quote.dates import daily_rate
from credit_quote.engine import _calculate_annuity_payment, compute_quote, generate_schedule
from credit_quote.exceptions import InvalidQuoteInput


def _round(value):
    return value.quantize(Decimal("0.01"))


class TestAnnuityPayment:
    def test_base_case(self):
        pmt = _calculate_annuity_payment(Decimal("284130"), Decimal("0.45") / 12, 48)
        assert abs(pmt - Decimal("12850.09")) <= Decimal("0.01")

    def test_zero_rate_is_straight_line(self):
        assert _calculate_annuity_payment(Decimal("1200"), Decimal("0"), 12) == Decimal("100")

    def test_non_positive_term(self):
        with pytest.raises(ValueError):
            _calculate_annuity_payment(Decimal("1200"), Decimal("0.01"), 0)


class TestGenerateSchedule:
    def _schedule(self, **overrides):
        params = dict(
            principal=Decimal("284130"),
            annual_nominal_rate=Decimal("0.45"),
            term_months=48,
            as_of=date(2025, 8, 11),
            first_date=date(2025, 8, 15),
            iva_rate=Decimal("0.16"),
        )
        params.update(overrides)
        return generate_schedule(**params)

    def test_first_period_interest_uses_elapsed_days(self):
        _, rows = self._schedule()
        first = rows[0]
        assert first.days == 4
        assert first.interes == _round(Decimal("284130") * (Decimal("0.45") / 360) * 4)
        assert first.interes == Decimal("1420.65")
        assert first.iva_interes == Decimal("227.30")

    def test_later_periods_accrue_actual_days(self):
        _, rows = self._schedule()
        second = rows[1]
        assert second.days == 31
        assert second.interes == _round(second.saldo_ini * daily_rate(Decimal("0.45"), "A360") * 31)

    def test_actual_365_interest(self):
        _, rows = self._schedule(day_count="A365")
        assert rows[0].interes == _round(Decimal("284130") * daily_rate(Decimal("0.45"), "A365") * 4)
        assert rows[0].interes == Decimal("1401.19")

    def test_payment_carries_tax_on_interest(self):
        pmt_base, rows = self._schedule()
        first = rows[0]
        assert first.capital == pmt_base - first.interes
        assert first.pmt == pmt_base + first.iva_interes

    def test_zero_balance_and_continuity(self):
        _, rows = self._schedule()
        assert len(rows) == 48
        assert rows[-1].saldo_fin == 0
        for previous, current in zip(rows, rows[1:]):
            assert current.saldo_ini == previous.saldo_fin
            assert current.saldo_ini <= previous.saldo_ini
        assert all(row.saldo_fin >= 0 for row in rows)

    def test_capital_conservation(self):
        _, rows = self._schedule()
        assert sum(row.capital for row in rows) == Decimal("284130")

    def test_rows_are_consistent(self):
        _, rows = self._schedule()
        for row in rows:
            assert row.saldo_fin == row.saldo_ini - row.capital
            assert row.pmt == row.capital + row.interes + row.iva_interes

    def test_last_period_closes_the_balance(self):
        _, rows = self._schedule(term_months=24, principal=Decimal("100000"))
        last = rows[-1]
        assert last.capital == last.saldo_ini
        assert last.pmt == last.capital + last.interes + last.iva_interes

    def test_dates_follow_first_payment(self):
        _, rows = self._schedule(term_months=3)
        assert [row.date for row in rows] == [date(2025, 8, 15), date(2025, 9, 15), date(2025, 10, 15)]

    def test_zero_rate_falls_back_to_straight_line(self):
        pmt_base, rows = self._schedule(principal=Decimal("1200"), annual_nominal_rate=Decimal("0"), term_months=12)
        assert pmt_base == Decimal("100.00")
        assert all(row.interes == 0 and row.capital == Decimal("100.00") for row in rows)
        assert rows[-1].saldo_fin == 0

    def test_negative_rate_falls_back_to_straight_line(self):
        pmt_base, rows = self._schedule(principal=Decimal("1000"), annual_nominal_rate=Decimal("-0.1"), term_months=3)
        assert pmt_base == Decimal("333.33")
        assert [row.capital for row in rows] == [Decimal("333.33"), Decimal("333.33"), Decimal("333.34")]

    def test_non_positive_term_is_invalid_input(self):
        with pytest.raises(InvalidQuoteInput) as excinfo:
            self._schedule(term_months=0)
        assert "term_months" in excinfo.value.errors


class TestComputeQuote:
    def test_scenario_a(self, scenario_a, settings):
        result = compute_quote(scenario_a, settings)
        assert result.summary.principal_total == Decimal("284130")
        assert len(result.schedule) == 48
        assert result.schedule[-1].saldo_fin == 0
        assert result.summary.first_payment_date == date(2025, 8, 15)
        assert result.summary.last_payment_date == date(2029, 7, 15)

    @pytest.mark.parametrize("rate", ["0.36", "0.40", "0.45"])
    @pytest.mark.parametrize("term", [24, 36, 48, 60])
    def test_every_tier_and_term_closes_at_zero(self, scenario_a, settings, rate, term):
        result = compute_quote(
            replace(scenario_a, term_months=term),
            replace(settings, annual_nominal_rate=Decimal(rate)),
        )
        rows = result.schedule
        assert len(rows) == term
        assert rows[-1].saldo_fin == 0
        assert sum(row.capital for row in rows) == result.summary.principal_total

    def test_short_first_period_pays_off_early(self, scenario_a, settings):
        rows = compute_quote(scenario_a, settings).schedule
        paid_off = [row for row in rows if row.saldo_ini == 0]
        assert paid_off, "a four-day first period repays the loan ahead of the term"
        assert rows[-1] in paid_off
        for row in paid_off:
            assert row.interes == 0 and row.iva_interes == 0 and row.capital == 0
            assert row.pmt == 0
            assert row.pago_total == Decimal("764.00")  # GPS 400 + IVA 64 + life insurance 300

    def test_late_month_disbursement(self, scenario_a, settings):
        result = compute_quote(replace(scenario_a, as_of=date(2025, 1, 20)), settings)
        dates = [row.date for row in result.schedule[:3]]
        assert dates == [date(2025, 1, 31), date(2025, 2, 28), date(2025, 3, 31)]
        assert result.schedule[-1].saldo_fin == 0

    def test_deterministic(self, scenario_a, settings):
        first = json.dumps(result_to_dict(compute_quote(scenario_a, settings)), sort_keys=True)
        second = json.dumps(result_to_dict(compute_quote(scenario_a, settings)), sort_keys=True)
        assert first == second

    def test_commission_mode_changes_principal_and_outlay(self, scenario_a, settings):
        cash = compute_quote(scenario_a, settings)
        financed = compute_quote(replace(scenario_a, commission=CommissionChoice(mode="financed")), settings)
        assert financed.summary.principal_total != cash.summary.principal_total
        assert cash.summary.initial_outlay - financed.summary.initial_outlay == (
            cash.summary.opening_fee + cash.summary.opening_fee_iva
        )

    def test_financed_insurance_moves_premium_into_principal(self, scenario_a, settings):
        cash = compute_quote(scenario_a, settings)
        financed = compute_quote(
            replace(scenario_a, insurance=InsuranceChoice(mode="financed", amount=Decimal("19000"))),
            settings,
        )
        assert cash.summary.initial_outlay - financed.summary.initial_outlay == Decimal("19000")
        assert financed.summary.principal_total - cash.summary.principal_total == Decimal("19000")
        assert all(row.insurance_monthly == 0 for row in cash.schedule)
        assert all(row.insurance_monthly > 0 for row in financed.schedule)

    def test_invalid_inputs_rejected_before_computation(self, scenario_a, settings):
        inputs = replace(scenario_a, down_payment=Decimal("405900"), term_months=0)
        with pytest.raises(InvalidQuoteInput) as excinfo:
            compute_quote(inputs, settings)
        assert set(excinfo.value.errors) == {"down_payment_amount", "term_months"}

    def test_strict_terms(self, scenario_a, settings):
        with pytest.raises(InvalidQuoteInput):
            compute_quote(replace(scenario_a, term_months=30), settings, strict_terms=True)
        assert len(compute_quote(replace(scenario_a, term_months=30), settings).schedule) == 30
