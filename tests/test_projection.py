"""
Tests for end-to-end scenario projection.

These tests run ``project`` on buy, rent and investment strategies and check
the headline metrics against values derived independently from the
amortization, investment and settlement formulas.
"""

from datetime import date

import pytest

from homeplanner.models.investment_engine import normalize_contribution
from homeplanner.models.mortgage_amortization import (
    calculate_current_balance,
    calculate_monthly_payment,
)
from homeplanner.models.projection import project, project_with
from homeplanner.models.scenario import AdditionalLoan, ProjectionAssumptions, Scenario

AS_OF = date(2025, 1, 1)


def assumptions_for(months, **overrides):
    values = dict(
        horizon_months=months,
        appreciation_rate=0.0,
        investment_return_rate=0.0,
        as_of=AS_OF,
    )
    values.update(overrides)
    return ProjectionAssumptions(**values)


class TestBuyProjection:
    """Test cases for buy-mode projections."""

    def test_first_month_of_new_loan(self):
        scenario = Scenario(
            id="buy", home_value=572_500, loan_amount=458_000, interest_rate=5.75,
            down_payment=114_500,
        )
        result = project(scenario, assumptions_for(12))

        first = result.amortization_schedule[0]
        payment = calculate_monthly_payment(458_000, 5.75, 360)
        assert abs(first.interest - 2194.58) < 0.01
        assert first.principal == pytest.approx(payment - first.interest)
        assert result.monthly_principal_and_interest == pytest.approx(payment)
        assert result.monthly_first_pi == pytest.approx(payment)
        assert len(result.amortization_schedule) == 12

    def test_remaining_balance_matches_closed_form(self):
        scenario = Scenario(
            id="buy", home_value=500_000, loan_amount=400_000, interest_rate=6.0,
            start_date=date(2022, 1, 1),
        )
        result = project(scenario, assumptions_for(24))

        assert result.starting_balance == pytest.approx(
            calculate_current_balance(400_000, 6.0, 360, 36)
        )
        expected = calculate_current_balance(400_000, 6.0, 360, 60)
        assert abs(result.remaining_balance - expected) < 1.0

    def test_projection_is_idempotent(self, buy_scenario, assumptions):
        first = project(buy_scenario, assumptions)
        second = project(buy_scenario, assumptions)
        assert first.model_dump_json() == second.model_dump_json()

    @pytest.mark.parametrize("low,high", [(0, 200), (200, 1_000)])
    def test_extra_payments_never_increase_interest(self, buy_scenario, low, high):
        assumptions = assumptions_for(360)
        lower = project(buy_scenario.model_copy(update={"monthly_extra_payment": low}), assumptions)
        higher = project(buy_scenario.model_copy(update={"monthly_extra_payment": high}), assumptions)

        assert higher.total_interest <= lower.total_interest
        assert higher.payoff_month <= lower.payoff_month

    def test_manual_override_zeroes_one_month(self, buy_scenario):
        scenario = buy_scenario.model_copy(
            update={"monthly_extra_payment": 300, "manual_extra_payments": {5: 0}}
        )
        result = project(scenario, assumptions_for(12))

        extras = [point.extra_payment for point in result.amortization_schedule]
        assert extras[4] == 0
        assert all(extra == pytest.approx(300) for i, extra in enumerate(extras) if i != 4)
        assert result.total_extra_principal == pytest.approx(11 * 300)

    def test_extra_payment_savings(self, buy_scenario):
        scenario = buy_scenario.model_copy(update={"monthly_extra_payment": 500})
        result = project(scenario, assumptions_for(60))

        assert result.payoff_month < 360
        assert result.baseline_payoff_month == 360
        assert result.months_saved == 360 - result.payoff_month
        assert result.lifetime_interest_saved > 0
        assert result.payoff_date is not None

    def test_settlement_at_horizon(self):
        scenario = Scenario(
            id="buy", home_value=400_000, loan_amount=0, down_payment=400_000,
            selling_cost_rate=6, capital_gains_tax_rate=20,
        )
        result = project(scenario, assumptions_for(120, appreciation_rate=4.0))

        assert result.selling_costs == pytest.approx(result.future_home_value * 0.06)
        gain = result.future_home_value * 0.94 - 400_000
        assert result.taxable_capital_gains == pytest.approx(gain)
        assert result.capital_gains_tax == pytest.approx(gain * 0.2)
        assert result.net_worth == pytest.approx(
            result.future_home_value * 0.94 - result.capital_gains_tax
        )

    def test_selling_disabled(self, buy_scenario):
        scenario = buy_scenario.model_copy(update={"enable_selling": False})
        result = project(scenario, assumptions_for(60, appreciation_rate=3.0))

        assert result.selling_costs == 0.0
        assert result.capital_gains_tax == 0.0
        assert result.net_worth == pytest.approx(result.future_home_value - result.remaining_balance)

    def test_equity_built_and_totals(self, buy_scenario):
        result = project(buy_scenario, assumptions_for(60, appreciation_rate=3.0))

        assert result.principal_paid == pytest.approx(result.starting_balance - result.remaining_balance)
        assert result.total_equity_built == pytest.approx(result.principal_paid + result.total_appreciation)
        assert result.total_property_costs == pytest.approx(60 * (6_000 + 1_800) / 12)
        assert result.total_paid == pytest.approx(
            result.total_interest + result.principal_paid + result.total_property_costs
        )
        assert result.out_of_pocket == pytest.approx(110_000 + result.total_paid)

    def test_total_monthly_payment(self, buy_scenario):
        result = project(buy_scenario, assumptions_for(12))
        assert result.total_monthly_payment == pytest.approx(
            calculate_monthly_payment(400_000, 6.0, 360) + (6_000 + 1_800) / 12
        )

    def test_instant_equity(self):
        scenario = Scenario(
            id="buy", home_value=400_000, original_fmv=450_000, loan_amount=320_000,
            down_payment=80_000, interest_rate=6.0,
        )
        result = project(scenario, assumptions_for(12))
        assert result.instant_equity == pytest.approx(50_000)
        assert result.future_home_value == pytest.approx(450_000)

    def test_additional_loan_breakdown(self, buy_scenario):
        scenario = buy_scenario.model_copy(
            update={"additional_loans": [AdditionalLoan(id="heloc", name="HELOC", balance=50_000, rate=8.0, years=10)]}
        )
        result = project(scenario, assumptions_for(24))

        assert [b.id for b in result.loan_breakdown] == ["primary", "heloc"]
        assert set(result.sub_schedules) == {"primary", "heloc"}
        assert result.starting_balance == pytest.approx(450_000)

    def test_annual_snapshots(self, buy_scenario):
        result = project(buy_scenario, assumptions_for(30))

        assert [p.month_index for p in result.annual_data] == [12, 24, 30]
        assert result.get_annual_point(2).label == "Yr 2"
        assert result.get_annual_point(3) is None
        assert result.net_cost == pytest.approx(
            result.annual_data[-1].true_cost + result.capital_gains_tax
        )

    def test_home_excluded(self, buy_scenario):
        scenario = buy_scenario.model_copy(update={"include_home": False})
        result = project(scenario, assumptions_for(12))

        assert result.total_interest == 0.0
        assert result.remaining_balance == 0.0
        assert result.future_home_value == 0.0
        assert result.loan_breakdown == []


class TestInvestmentInteraction:
    """Test cases for the side portfolio within projections."""

    def test_capital_reduced_by_cash_to_close(self, buy_scenario):
        result = project(
            buy_scenario,
            assumptions_for(12, global_investment_capital=150_000),
        )
        assert result.amortization_schedule[0].investment_balance == pytest.approx(40_000)

    def test_contributions_reduced_by_extra_payments(self, buy_scenario):
        scenario = buy_scenario.model_copy(update={"monthly_extra_payment": 200})
        result = project(scenario, assumptions_for(12, global_contribution=500))
        assert result.total_investment_contribution == pytest.approx(12 * 300)

    def test_investment_only(self, investment_scenario):
        result = project(
            investment_scenario,
            assumptions_for(120, global_investment_capital=100_000, investment_return_rate=5.0),
        )

        assert result.investment_portfolio == pytest.approx(100_000 * (1 + 0.05 / 12) ** 120)
        assert result.profit == pytest.approx(result.investment_portfolio - 100_000)
        assert result.net_worth == pytest.approx(result.investment_portfolio)
        assert result.total_interest == 0.0

    def test_investment_only_monthly_payment(self, investment_scenario):
        result = project(
            investment_scenario,
            assumptions_for(12, global_contribution=1_000, global_contribution_frequency="weekly"),
        )
        assert result.total_monthly_payment == pytest.approx(normalize_contribution(1_000, "weekly"))


class TestRentProjection:
    """Test cases for rent-mode projections."""

    def test_rent_paid_and_growth(self, rent_scenario):
        result = project(rent_scenario, assumptions_for(24))

        assert result.total_rent_paid == pytest.approx(12 * 2_500 + 12 * 2_575)
        assert result.total_interest == 0.0
        assert result.total_monthly_payment == pytest.approx(2_500)

    def test_savings_invested_against_baseline(self, rent_scenario):
        result = project(rent_scenario, assumptions_for(12, baseline_payment=3_000))
        assert result.total_investment_contribution == pytest.approx(12 * 500)

    def test_savings_not_invested_when_disabled(self, rent_scenario):
        scenario = rent_scenario.model_copy(update={"invest_monthly_savings": False})
        result = project(scenario, assumptions_for(12, baseline_payment=3_000))
        assert result.total_investment_contribution == 0.0

    def test_out_of_pocket_is_rent(self, rent_scenario):
        result = project(rent_scenario, assumptions_for(12))
        assert result.out_of_pocket == pytest.approx(12 * 2_500)
        assert result.net_cost == pytest.approx(12 * 2_500)


class TestEdgeCases:
    """Test cases for configuration edge cases."""

    @pytest.mark.parametrize("months", [0, -12])
    def test_non_positive_horizon(self, buy_scenario, months):
        result = project(buy_scenario, assumptions_for(months))

        assert result.horizon_months == 0
        assert result.amortization_schedule == []
        assert result.annual_data == []
        assert result.net_worth == 0.0

    def test_zero_term_loan_is_inert(self):
        scenario = Scenario(
            id="buy", home_value=300_000, loan_amount=200_000, loan_term_years=0,
            interest_rate=6.0, down_payment=100_000,
        )
        result = project(scenario, assumptions_for(12))

        assert result.total_interest == 0.0
        assert result.remaining_balance == 0.0
        assert result.monthly_principal_and_interest == 0.0

    def test_zero_rate_loan(self):
        scenario = Scenario(
            id="buy", home_value=150_000, loan_amount=120_000, loan_term_years=10,
            interest_rate=0.0, down_payment=30_000,
        )
        result = project(scenario, assumptions_for(30))
        assert result.remaining_balance == pytest.approx(90_000)

    def test_project_with_positional_form(self, buy_scenario):
        result = project_with(buy_scenario, 60, 3.0, 6.0, 150_000, 500, as_of=AS_OF)
        expected = project(
            buy_scenario,
            ProjectionAssumptions(
                horizon_months=60,
                appreciation_rate=3.0,
                investment_return_rate=6.0,
                global_investment_capital=150_000,
                global_contribution=500,
                as_of=AS_OF,
            ),
        )
        assert result.model_dump_json() == expected.model_dump_json()

    def test_pinned_balance_without_original_amount(self):
        scenario = Scenario(
            id="buy", home_value=400_000, loan_amount=0, interest_rate=6.0,
            existing_equity=100_000, primary_balance_locked=True, manual_current_balance=300_000,
        )
        result = project(scenario, assumptions_for(24))

        assert result.monthly_principal_and_interest == pytest.approx(
            calculate_monthly_payment(300_000, 6.0, 360)
        )
        assert result.remaining_balance < 300_000
        assert result.principal_paid == pytest.approx(300_000 - result.remaining_balance)


class TestSupplementalCosts:
    """Test cases for rate-based property costs and the rent tax benefit."""

    def test_rate_based_property_tax_follows_global_home_value(self):
        scenario = Scenario(
            id="buy", home_value=500_000, loan_amount=400_000, interest_rate=6.0,
            down_payment=100_000, property_tax_rate=1.2, use_property_tax_rate=True,
        )
        result = project(scenario, assumptions_for(12, global_home_value=600_000))

        assert result.monthly_tax == pytest.approx(600)
        assert result.total_property_costs == pytest.approx(12 * 600)

    def test_rent_tax_benefit_reduces_rent_paid(self, rent_scenario):
        scenario = rent_scenario.model_copy(update={"rent_include_tax": True, "rent_tax_rate": 25})
        result = project(scenario, assumptions_for(12))

        assert result.total_rent_paid == pytest.approx(12 * 2_500 * 0.75)
        assert result.total_monthly_payment == pytest.approx(2_500 * 0.75)


class TestResultSummary:
    """Test cases for investment growth and the headline summary."""

    def test_investment_growth_is_reported(self, investment_scenario):
        result = project(
            investment_scenario,
            assumptions_for(
                60,
                global_investment_capital=100_000,
                investment_return_rate=5.0,
                global_investment_tax_rate=20.0,
            ),
        )

        assert result.total_investment_growth > 0
        assert result.total_investment_growth - result.total_investment_tax == pytest.approx(
            result.investment_portfolio - 100_000
        )

    def test_summary_matches_result_fields(self, buy_scenario):
        result = project(buy_scenario, assumptions_for(60, global_investment_capital=150_000))
        summary = result.to_summary()

        assert summary["net_worth"] == result.net_worth
        assert summary["net_cost"] == result.net_cost
        assert summary["total_investment_growth"] == result.total_investment_growth
