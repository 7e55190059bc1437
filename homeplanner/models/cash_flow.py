"""
Monthly cash-flow aggregation for home-finance projections.

The aggregator turns one month of loan activity into housing cash flows
(property costs, custom expenses, rent paid or received, rental income tax and
the mortgage-interest tax refund), grows the home's fair market value, and
produces the annual snapshots used for charts.

Rental income tax is modelled on ``rent - (property tax + insurance + HOA +
mortgage interest)`` for the month; depreciation and principal are not
deducted. This is a fixed modelling choice, not a general tax computation.
Rent paid can likewise be reduced by a flat tax benefit (``rent_tax_rate``).
"""

from typing import Optional

from pydantic import BaseModel

from .calendar import ProjectionHorizon
from .projection_result import AnnualDataPoint
from .scenario import Scenario
from .settlement import SettlementCalculator


def after_tax_rent(scenario: Scenario, rent: float) -> float:
    """Rent paid net of the scenario's rent tax benefit, if any."""
    if scenario.rent_include_tax:
        return rent * (1 - scenario.rent_tax_rate / 100)
    return rent


class PropertyCosts(BaseModel):
    """Monthly recurring property costs."""

    tax: float = 0.0
    insurance: float = 0.0
    hoa: float = 0.0
    pmi: float = 0.0
    repair: float = 0.0

    @property
    def total(self) -> float:
        return self.tax + self.insurance + self.hoa + self.pmi + self.repair

    @classmethod
    def for_scenario(
        cls, scenario: Scenario, purchase_price: Optional[float] = None
    ) -> "PropertyCosts":
        """
        Monthly costs; all zero unless the home is modelled with costs on.

        A cost whose ``use_*_rate`` flag is set is its rate applied to the
        purchase price (the scenario's own home value unless one is given).
        """
        if not (scenario.models_home and scenario.include_property_costs):
            return cls()
        price = scenario.home_value if purchase_price is None else purchase_price

        def annual(amount: float, rate: float, use_rate: bool) -> float:
            return price * rate / 100 if use_rate else amount

        return cls(
            tax=annual(
                scenario.property_tax,
                scenario.property_tax_rate,
                scenario.use_property_tax_rate,
            ) / 12,
            insurance=annual(
                scenario.home_insurance,
                scenario.home_insurance_rate,
                scenario.use_home_insurance_rate,
            ) / 12,
            hoa=annual(scenario.hoa, scenario.hoa_rate, scenario.use_hoa_rate) / 12,
            pmi=annual(scenario.pmi, scenario.pmi_rate, scenario.use_pmi_rate) / 12,
            repair=annual(
                scenario.repair, scenario.repair_rate, scenario.use_repair_rate
            ) / 12,
        )


class MonthlyCashFlow(BaseModel):
    """Housing cash flows for one month."""

    month_index: int
    property_costs: float
    custom_expenses: float
    rent_paid: float
    rental_income: float
    rental_tax: float
    tax_refund: float
    housing_payment: float
    net_outflow: float
    home_value: float


class CashFlowAggregator:
    """Accumulates monthly cash flows and home appreciation for one scenario."""

    def __init__(
        self,
        scenario: Scenario,
        horizon: ProjectionHorizon,
        starting_home_value: float,
        appreciation_rate: float,
        monthly_rent: float,
        initial_cash: float = 0.0,
        purchase_price: Optional[float] = None,
    ):
        """Initialize the aggregator.

        Args:
            scenario: Scenario being projected
            horizon: Projection horizon
            starting_home_value: Fair market value at time zero
            appreciation_rate: Annual appreciation in percent
            monthly_rent: First-year monthly rent (paid or received)
            initial_cash: Cash paid at time zero (down payment and fees)
            purchase_price: Price that rate-based property costs apply to
        """
        self.scenario = scenario
        self.horizon = horizon
        self.models_home = scenario.models_home
        self.costs = PropertyCosts.for_scenario(scenario, purchase_price)
        self.custom_monthly = sum(e.amount for e in scenario.custom_expenses)
        self.rent_flow = scenario.effective_rent_flow
        self.current_rent = monthly_rent if scenario.include_rent else 0.0
        self.monthly_appreciation = appreciation_rate / 100 / 12
        self.home_value = starting_home_value if self.models_home else 0.0
        self.starting_home_value = self.home_value
        self.initial_cash = initial_cash

        self.total_property_costs = 0.0
        self.total_custom_expenses = 0.0
        self.total_rent_paid = 0.0
        self.total_rental_income = 0.0
        self.total_rental_tax = 0.0
        self.total_tax_refund = 0.0
        self.total_housing_paid = 0.0
        self.cumulative_outflow = initial_cash
        self.cumulative_inflow = 0.0

    def record_month(
        self, month: int, interest: float, principal: float, extra: float
    ) -> MonthlyCashFlow:
        """
        Record one month of housing cash flow.

        Args:
            month: 1-based month index
            interest: Interest charged on all loans this month
            principal: Scheduled principal paid this month
            extra: Extra principal paid this month

        Returns:
            MonthlyCashFlow for the month
        """
        rent_paid = rental_income = rental_tax = 0.0
        if self.rent_flow == "outflow":
            rent_paid = after_tax_rent(self.scenario, self.current_rent)
        else:
            rental_income = self.current_rent
            if self.scenario.rental_income_tax_enabled and rental_income > 0:
                taxable = rental_income - (
                    self.costs.tax + self.costs.insurance + self.costs.hoa + interest
                )
                if taxable > 0:
                    rental_tax = taxable * self.scenario.rental_income_tax_rate / 100

        tax_refund = 0.0
        if self.models_home:
            tax_refund = (interest + self.costs.tax) * self.scenario.tax_refund_rate / 100

        property_costs = self.costs.total
        housing_payment = (
            interest + principal + extra + property_costs + self.custom_monthly + rent_paid
        )
        outflow = housing_payment + rental_tax
        inflow = rental_income + tax_refund

        self.total_property_costs += property_costs
        self.total_custom_expenses += self.custom_monthly
        self.total_rent_paid += rent_paid
        self.total_rental_income += rental_income
        self.total_rental_tax += rental_tax
        self.total_tax_refund += tax_refund
        self.total_housing_paid += housing_payment
        self.cumulative_outflow += outflow
        self.cumulative_inflow += inflow

        self.home_value *= 1 + self.monthly_appreciation

        if month % 12 == 0:
            self.current_rent *= 1 + self.scenario.rent_increase_per_year / 100

        return MonthlyCashFlow(
            month_index=month,
            property_costs=property_costs,
            custom_expenses=self.custom_monthly,
            rent_paid=rent_paid,
            rental_income=rental_income,
            rental_tax=rental_tax,
            tax_refund=tax_refund,
            housing_payment=housing_payment,
            net_outflow=outflow - inflow,
            home_value=self.home_value,
        )

    @property
    def out_of_pocket(self) -> float:
        """Cumulative cash paid net of rent received and tax refunds."""
        return self.cumulative_outflow - self.cumulative_inflow

    @property
    def total_appreciation(self) -> float:
        return self.home_value - self.starting_home_value

    def recoverable_equity(self, debt: float) -> float:
        """Equity left after projected selling costs and debt."""
        if not self.models_home:
            return 0.0
        selling_costs = 0.0
        if self.scenario.enable_selling:
            selling_costs = SettlementCalculator.projected_selling_costs(
                self.home_value, self.scenario.selling_cost_rate
            )
        return self.home_value - selling_costs - debt

    def true_cost(
        self,
        debt: float,
        investment_balance: float,
        investment_contributed: float,
    ) -> float:
        """
        Net cash committed minus everything recoverable.

        Existing equity counts as committed capital even though it is not
        out of pocket.
        """
        committed = (
            self.out_of_pocket
            + (self.scenario.existing_equity if self.models_home else 0.0)
            + investment_contributed
        )
        return committed - self.recoverable_equity(debt) - investment_balance

    def snapshot(
        self,
        month: int,
        debt: float,
        investment_balance: float,
        investment_contributed: float,
    ) -> AnnualDataPoint:
        """Annual data point at the end of ``month``."""
        home_equity = self.home_value - debt if self.models_home else 0.0
        return AnnualDataPoint(
            label=self.horizon.label_for(month),
            year=month / 12,
            month_index=month,
            home_value=self.home_value,
            home_equity=home_equity,
            investment_value=investment_balance,
            net_worth=home_equity + investment_balance,
            out_of_pocket=self.out_of_pocket,
            true_cost=self.true_cost(debt, investment_balance, investment_contributed),
            cumulative_inflow=self.cumulative_inflow,
            cumulative_outflow=self.cumulative_outflow,
        )
