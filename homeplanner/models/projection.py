"""
Month-by-month projection of a single home-finance scenario.

``project`` is a pure function of a scenario and the projection assumptions:
it resolves global values, seeds loan balances at the valuation date, then
advances loans, housing cash flows and the side portfolio in lockstep from
month 1 to the horizon. Nothing is cached between calls.
"""

import logging
from typing import List, Optional

from .calendar import ProjectionHorizon, add_months
from .cash_flow import CashFlowAggregator, after_tax_rent
from .investment_engine import InvestmentAccount, normalize_contribution
from .mortgage_amortization import (
    ExtraPaymentPlan,
    LoanAmortizer,
    build_loans,
    compare_to_baseline,
    summarize_loans,
)
from .projection_result import AmortizationPoint, AnnualDataPoint, CalculatedResult
from .scenario import (
    ContributionFrequency,
    EffectiveInputs,
    ProjectionAssumptions,
    Scenario,
    resolve,
)
from .settlement import SettlementCalculator

logger = logging.getLogger(__name__)


def _monthly_rent(scenario: Scenario, effective: EffectiveInputs) -> float:
    if scenario.mode == "investment":
        return 0.0
    if scenario.effective_rent_flow == "outflow":
        return effective.rent_monthly
    return effective.rental_income


def _build_investment_account(
    scenario: Scenario,
    effective: EffectiveInputs,
    initial_cash: float,
    extra_plan: ExtraPaymentPlan,
) -> Optional[InvestmentAccount]:
    """Side portfolio funded by whatever capital the strategy does not use."""
    if not scenario.include_investment:
        return None

    principal = effective.investment_capital
    monthly = normalize_contribution(
        effective.investment_monthly, effective.investment_contribution_frequency
    )
    if scenario.models_home:
        principal = max(0.0, principal - initial_cash)
        monthly = max(0.0, monthly - extra_plan.recurring_monthly_equivalent)

    return InvestmentAccount(
        principal=principal,
        monthly_contribution=monthly,
        annual_rate=effective.investment_rate,
        tax_rate=effective.investment_tax_rate,
    )


def project(scenario: Scenario, assumptions: ProjectionAssumptions) -> CalculatedResult:
    """
    Project one scenario over the horizon.

    Args:
        scenario: Strategy to project
        assumptions: Horizon, growth rates, global values and valuation date

    Returns:
        CalculatedResult; a non-positive horizon yields empty sequences and
        zero totals
    """
    horizon = ProjectionHorizon(months=assumptions.horizon_months)
    if horizon.is_empty:
        return CalculatedResult(id=scenario.id, mode=scenario.mode, horizon_months=0)

    logger.debug(f"Projecting scenario {scenario.id} over {horizon.months} months")

    as_of = assumptions.as_of
    effective = resolve(scenario, assumptions)
    models_home = scenario.models_home

    extra_plan = ExtraPaymentPlan.from_scenario(scenario)
    loans = build_loans(scenario, effective.loan_amount, as_of) if models_home else []
    amortizer = LoanAmortizer(loans, extra_plan)
    run = amortizer.run(horizon.months, as_of)
    baseline = compare_to_baseline(loans, extra_plan, horizon.months, as_of)

    purchase_price = effective.home_value
    starting_fmv = (
        purchase_price if scenario.original_fmv is None else scenario.original_fmv
    )
    upfront_costs = scenario.upfront_costs if models_home else 0.0
    initial_cash = scenario.down_payment + upfront_costs if models_home else 0.0

    monthly_rent = _monthly_rent(scenario, effective)
    aggregator = CashFlowAggregator(
        scenario=scenario,
        horizon=horizon,
        starting_home_value=starting_fmv,
        appreciation_rate=assumptions.appreciation_rate,
        monthly_rent=monthly_rent,
        initial_cash=initial_cash,
        purchase_price=purchase_price,
    )
    account = _build_investment_account(scenario, effective, initial_cash, extra_plan)

    savings_baseline = None
    if scenario.mode == "rent" and scenario.invest_monthly_savings:
        savings_baseline = assumptions.baseline_payment

    schedule: List[AmortizationPoint] = []
    annual_data: List[AnnualDataPoint] = []
    accumulated_interest = 0.0
    accumulated_principal = 0.0

    for loan_month in run.months:
        month = loan_month.month_index
        flow = aggregator.record_month(
            month, loan_month.interest, loan_month.principal, loan_month.extra_payment
        )

        investment_balance = investment_tax = investment_contributed = 0.0
        if account is not None:
            savings = 0.0
            if savings_baseline is not None:
                savings = max(0.0, savings_baseline - flow.rent_paid)
            step = account.step(savings)
            investment_balance = step.balance
            investment_tax = step.tax
            investment_contributed = account.total_contributed

        accumulated_interest += loan_month.interest
        accumulated_principal += loan_month.principal + loan_month.extra_payment

        schedule.append(
            AmortizationPoint(
                month_index=month,
                date=loan_month.date,
                balance=loan_month.balance,
                interest=loan_month.interest,
                principal=loan_month.principal + loan_month.extra_payment,
                extra_payment=loan_month.extra_payment,
                total_payment=flow.housing_payment,
                total_interest=accumulated_interest,
                total_tax_refund=aggregator.total_tax_refund,
                total_paid_to_date=aggregator.total_housing_paid,
                equity=accumulated_principal,
                home_value=flow.home_value,
                accumulated_rental_income=aggregator.total_rental_income,
                accumulated_rental_tax=aggregator.total_rental_tax,
                accumulated_property_costs=aggregator.total_property_costs,
                custom_expenses=flow.custom_expenses,
                rent_paid=flow.rent_paid,
                investment_balance=investment_balance,
                investment_tax=investment_tax,
            )
        )

        if horizon.is_snapshot_month(month):
            annual_data.append(
                aggregator.snapshot(
                    month,
                    loan_month.balance,
                    investment_balance,
                    investment_contributed,
                )
            )

    remaining_balance = run.remaining_balance
    future_home_value = aggregator.home_value
    investment_balance = account.balance if account is not None else 0.0
    investment_contributed = account.total_contributed if account is not None else 0.0
    investment_gain = account.gain if account is not None else 0.0

    settlement = None
    if models_home and scenario.enable_selling:
        settlement = SettlementCalculator.settle(
            final_fmv=future_home_value,
            purchase_price=purchase_price,
            remaining_debt=remaining_balance,
            investment_balance=investment_balance,
            selling_cost_rate=scenario.selling_cost_rate,
            capital_gains_tax_rate=scenario.capital_gains_tax_rate,
            primary_residence_exclusion=scenario.primary_residence_exclusion,
        )

    equity = future_home_value - remaining_balance if models_home else 0.0
    if settlement is not None:
        net_worth = settlement.liquid_net_worth
        exit_equity = settlement.net_proceeds
    else:
        net_worth = equity + investment_balance
        exit_equity = equity

    if models_home:
        starting_equity = scenario.down_payment + scenario.existing_equity
        profit = exit_equity - starting_equity + investment_gain
    else:
        profit = investment_gain

    total_cash_invested = initial_cash + run.total_extra + investment_contributed
    effective_annual_return = 0.0
    if total_cash_invested > 0 and horizon.years > 0:
        effective_annual_return = (profit / total_cash_invested) * 100 / horizon.years

    net_cost = annual_data[-1].true_cost if annual_data else 0.0
    if settlement is not None:
        net_cost += settlement.capital_gains_tax

    costs = aggregator.costs
    custom_monthly = aggregator.custom_monthly
    level_payments = [s.loan.level_payment for s in run.schedules]
    monthly_pi = sum(level_payments)
    if models_home:
        total_monthly_payment = monthly_pi + costs.total + custom_monthly
    elif scenario.mode == "rent":
        total_monthly_payment = (
            after_tax_rent(scenario, monthly_rent)
            if scenario.effective_rent_flow == "outflow"
            else 0.0
        ) + custom_monthly
    else:
        total_monthly_payment = normalize_contribution(
            effective.investment_monthly, effective.investment_contribution_frequency
        )
    rent_income_now = monthly_rent if scenario.effective_rent_flow == "inflow" else 0.0

    primary_fees = sum(e.amount for e in scenario.primary_loan_expenses)
    additional_fees = sum(
        e.amount for loan in scenario.additional_loans for e in loan.one_time_expenses
    )

    payoff_month = baseline.payoff_month
    result = CalculatedResult(
        id=scenario.id,
        mode=scenario.mode,
        horizon_months=horizon.months,
        monthly_principal_and_interest=monthly_pi,
        monthly_first_pi=(
            level_payments[0]
            if run.schedules and run.schedules[0].loan.loan_id == "primary"
            else 0.0
        ),
        monthly_tax=costs.tax,
        monthly_insurance=costs.insurance,
        monthly_hoa=costs.hoa,
        monthly_pmi=costs.pmi,
        monthly_repair=costs.repair,
        monthly_custom_expenses=custom_monthly,
        total_monthly_payment=total_monthly_payment,
        net_monthly_payment=total_monthly_payment - rent_income_now,
        average_monthly_principal_and_interest=(
            run.total_interest + run.total_principal - run.total_extra
        )
        / horizon.months,
        total_paid=aggregator.total_housing_paid,
        total_rent_paid=aggregator.total_rent_paid,
        total_interest=run.total_interest,
        principal_paid=run.total_principal,
        total_extra_principal=run.total_extra,
        total_equity_built=run.total_principal + aggregator.total_appreciation,
        total_appreciation=aggregator.total_appreciation,
        tax_refund=aggregator.total_tax_refund,
        accumulated_rental_income=aggregator.total_rental_income,
        total_rental_tax=aggregator.total_rental_tax,
        total_property_costs=aggregator.total_property_costs,
        total_custom_expenses=aggregator.total_custom_expenses,
        total_loan_fees=(primary_fees + additional_fees) if models_home else 0.0,
        total_investment_contribution=investment_contributed,
        total_investment_tax=account.total_tax if account is not None else 0.0,
        total_investment_growth=(
            account.total_growth if account is not None else 0.0
        ),
        future_home_value=future_home_value,
        starting_balance=run.starting_balance,
        remaining_balance=remaining_balance,
        equity=equity,
        instant_equity=(starting_fmv - purchase_price) if models_home else 0.0,
        investment_portfolio=investment_balance,
        net_worth=net_worth,
        profit=profit,
        net_cost=net_cost,
        out_of_pocket=aggregator.out_of_pocket,
        total_cash_invested=total_cash_invested,
        average_equity_per_month=profit / horizon.months,
        effective_annual_return=effective_annual_return,
        selling_costs=settlement.selling_costs if settlement else 0.0,
        capital_gains_tax=settlement.capital_gains_tax if settlement else 0.0,
        taxable_capital_gains=settlement.taxable_capital_gains if settlement else 0.0,
        capital_gains_exclusion=(
            settlement.capital_gains_exclusion if settlement else 0.0
        ),
        payoff_month=payoff_month,
        payoff_date=add_months(as_of, payoff_month) if payoff_month else None,
        baseline_total_interest=baseline.baseline_total_interest,
        baseline_payoff_month=baseline.baseline_payoff_month,
        lifetime_interest_saved=baseline.lifetime_interest_saved,
        months_saved=baseline.months_saved,
        interest_saved_at_horizon=baseline.interest_saved_at_horizon,
        loan_breakdown=summarize_loans(run),
        amortization_schedule=schedule,
        sub_schedules={s.loan.loan_id: s.months for s in run.schedules},
        annual_data=annual_data,
    )

    logger.debug(
        f"Projected scenario {scenario.id}: net worth {net_worth:.2f}, "
        f"profit {profit:.2f}"
    )
    return result


def project_with(
    scenario: Scenario,
    horizon_months: int,
    appreciation_rate: float,
    investment_return_rate: float,
    global_investment_capital: float,
    global_contribution: float,
    global_contribution_frequency: ContributionFrequency = "monthly",
    baseline_payment: Optional[float] = None,
    global_rent: Optional[float] = None,
    use_global_rent: bool = False,
    global_investment_tax_rate: float = 0.0,
    **kwargs,
) -> CalculatedResult:
    """Positional form of ``project``; extra keyword arguments go to the assumptions."""
    assumptions = ProjectionAssumptions(
        horizon_months=horizon_months,
        appreciation_rate=appreciation_rate,
        investment_return_rate=investment_return_rate,
        global_investment_capital=global_investment_capital,
        global_contribution=global_contribution,
        global_contribution_frequency=global_contribution_frequency,
        baseline_payment=baseline_payment,
        global_rent=global_rent,
        use_global_rent=use_global_rent,
        global_investment_tax_rate=global_investment_tax_rate,
        **kwargs,
    )
    return project(scenario, assumptions)
