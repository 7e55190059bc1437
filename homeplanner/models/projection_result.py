"""
Projection result model.

This module provides the result types produced by ``project``:

1. ``AmortizationPoint`` - one row per projected month (loans, cash flow and
   side portfolio combined)
2. ``AnnualDataPoint`` - one row per year plus the final partial period, used
   for charts
3. ``CalculatedResult`` - averages, horizon totals, the terminal snapshot and
   both sequences above

Results are recomputed wholesale on every run and are never mutated in place.
"""

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .mortgage_amortization import LoanBreakdown, LoanMonth
from .scenario import ScenarioMode


class AmortizationPoint(BaseModel):
    """Combined state of a scenario at the end of one month."""

    model_config = ConfigDict(frozen=True)

    month_index: int = Field(..., ge=1)
    date: date
    balance: float = Field(..., description="Total debt after this month")
    interest: float
    principal: float = Field(..., description="Scheduled plus extra principal")
    extra_payment: float
    total_payment: float = Field(..., description="Housing cash paid this month")
    total_interest: float
    total_tax_refund: float
    total_paid_to_date: float
    equity: float = Field(..., description="Accumulated principal paid")
    home_value: float = Field(..., description="Fair market value after this month")
    accumulated_rental_income: float
    accumulated_rental_tax: float
    accumulated_property_costs: float
    custom_expenses: float = Field(..., description="Custom expenses this month")
    rent_paid: float
    investment_balance: float
    investment_tax: float = Field(..., description="Investment tax this month")


class AnnualDataPoint(BaseModel):
    """Snapshot at a year boundary (or the final partial period)."""

    model_config = ConfigDict(frozen=True)

    label: str
    year: float
    month_index: int
    home_value: float
    home_equity: float = Field(..., description="Fair market value minus debt")
    investment_value: float
    net_worth: float = Field(..., description="Home equity plus investments")
    out_of_pocket: float = Field(..., description="Cumulative net cash paid")
    true_cost: float = Field(
        ..., description="Net cash committed minus recoverable value"
    )
    cumulative_inflow: float
    cumulative_outflow: float


class CalculatedResult(BaseModel):
    """
    Everything derived from one scenario over one horizon.

    Example:
        ```python
        result = project(scenario, assumptions)
        result.net_worth
        result.amortization_schedule[0].interest
        ```
    """

    model_config = ConfigDict(frozen=True)

    id: str
    mode: ScenarioMode
    horizon_months: int

    # Monthly figures
    monthly_principal_and_interest: float = 0.0
    monthly_first_pi: float = Field(default=0.0, description="Primary loan P&I")
    monthly_tax: float = 0.0
    monthly_insurance: float = 0.0
    monthly_hoa: float = 0.0
    monthly_pmi: float = 0.0
    monthly_repair: float = 0.0
    monthly_custom_expenses: float = 0.0
    total_monthly_payment: float = Field(
        default=0.0, description="PITI plus HOA, PMI, repair and custom expenses"
    )
    net_monthly_payment: float = Field(
        default=0.0, description="Total monthly payment less first-month rent income"
    )
    average_monthly_principal_and_interest: float = 0.0

    # Totals over the horizon
    total_paid: float = 0.0
    total_rent_paid: float = 0.0
    total_interest: float = 0.0
    principal_paid: float = 0.0
    total_extra_principal: float = 0.0
    total_equity_built: float = Field(
        default=0.0, description="Principal paid plus appreciation"
    )
    total_appreciation: float = 0.0
    tax_refund: float = 0.0
    accumulated_rental_income: float = 0.0
    total_rental_tax: float = 0.0
    total_property_costs: float = 0.0
    total_custom_expenses: float = 0.0
    total_loan_fees: float = 0.0
    total_investment_contribution: float = 0.0
    total_investment_tax: float = 0.0
    total_investment_growth: float = Field(
        default=0.0, description="Investment returns before tax"
    )

    # Snapshot at the horizon
    future_home_value: float = 0.0
    starting_balance: float = 0.0
    remaining_balance: float = 0.0
    equity: float = Field(default=0.0, description="Future home value minus debt")
    instant_equity: float = 0.0
    investment_portfolio: float = 0.0
    net_worth: float = 0.0
    profit: float = 0.0
    net_cost: float = 0.0
    out_of_pocket: float = 0.0
    total_cash_invested: float = 0.0
    average_equity_per_month: float = 0.0
    effective_annual_return: float = 0.0

    # Settlement
    selling_costs: float = 0.0
    capital_gains_tax: float = 0.0
    taxable_capital_gains: float = 0.0
    capital_gains_exclusion: float = 0.0

    # Extra payment analysis
    payoff_month: Optional[int] = None
    payoff_date: Optional[date] = None
    baseline_total_interest: float = 0.0
    baseline_payoff_month: Optional[int] = None
    lifetime_interest_saved: float = 0.0
    months_saved: int = 0
    interest_saved_at_horizon: float = 0.0

    loan_breakdown: List[LoanBreakdown] = Field(default_factory=list)
    amortization_schedule: List[AmortizationPoint] = Field(default_factory=list)
    sub_schedules: Dict[str, List[LoanMonth]] = Field(default_factory=dict)
    annual_data: List[AnnualDataPoint] = Field(default_factory=list)

    def get_annual_point(self, year: int) -> Optional[AnnualDataPoint]:
        """Annual data point at the end of ``year`` (1-based), if projected."""
        for point in self.annual_data:
            if point.month_index == year * 12:
                return point
        return None

    def to_summary(self) -> Dict[str, float]:
        """Headline metrics used for comparisons and narrative prompts."""
        return {
            "profit": self.profit,
            "net_worth": self.net_worth,
            "net_cost": self.net_cost,
            "out_of_pocket": self.out_of_pocket,
            "effective_annual_return": self.effective_annual_return,
            "remaining_balance": self.remaining_balance,
            "investment_portfolio": self.investment_portfolio,
            "total_equity_built": self.total_equity_built,
            "total_investment_growth": self.total_investment_growth,
        }
