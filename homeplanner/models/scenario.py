"""
Pydantic models for home-finance strategy scenarios.

This module defines the input record for one strategy under comparison (buy,
refinance, rent or pure investment), the projection-wide assumptions shared by
all scenarios, and the explicit resolution of "global" values against the
per-scenario lock flags.

All rates on these models are annual percentages (5.75 means 5.75%). All money
amounts are dollars; property costs are annual, custom expenses and rent are
monthly. Each property cost can instead be given as an annual percentage of
the purchase price by setting its ``use_*_rate`` flag.
"""

from datetime import date
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

ContributionFrequency = Literal[
    "weekly", "biweekly", "monthly", "semiannually", "annually"
]
ExtraPaymentFrequency = Literal["monthly", "annually"]
RentFlowType = Literal["inflow", "outflow"]
ScenarioMode = Literal["buy", "rent", "investment"]

DEFAULT_COLOR = "#2563eb"


class CustomExpense(BaseModel):
    """A named expense line (monthly for recurring costs, one-time for fees)."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default="", description="Client-side identifier")
    name: str = Field(default="Expense", description="Display name")
    amount: float = Field(default=0, ge=0, description="Amount in dollars")


class AdditionalLoan(BaseModel):
    """A secondary loan (HELOC, solar, second mortgage) amortized on its own."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Loan identifier")
    name: str = Field(default="Additional Loan", description="Display name")
    balance: float = Field(..., ge=0, description="Original principal")
    rate: float = Field(default=0, ge=0, le=100, description="Annual rate (%)")
    years: int = Field(default=30, ge=0, le=50, description="Term in years")
    start_date: Optional[date] = Field(
        default=None, description="Origination date (None means starts today)"
    )
    locked: bool = Field(
        default=False, description="Excluded from equity synchronization edits"
    )
    one_time_expenses: List[CustomExpense] = Field(
        default_factory=list, description="Fees paid once at origination"
    )


class Scenario(BaseModel):
    """One home-finance strategy under comparison.

    A scenario is immutable for the duration of a projection run; edits produce
    a new instance (see ``homeplanner.models.equity_sync``).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Identity
    id: str = Field(..., min_length=1, description="Scenario identifier")
    name: str = Field(default="Scenario", description="Display name")
    color: str = Field(default=DEFAULT_COLOR, description="Display color")
    is_rent_only: bool = Field(default=False, description="Rent mode")
    is_investment_only: bool = Field(default=False, description="Investment mode")
    include_home: bool = Field(
        default=True, description="Model the house and its loans in buy mode"
    )

    # Asset
    home_value: float = Field(default=0, ge=0, description="Purchase price")
    original_fmv: Optional[float] = Field(
        default=None, ge=0, description="Fair market value at time zero"
    )
    lock_fmv: bool = Field(default=False, description="Ignore global home value")

    # Primary loan
    loan_amount: float = Field(default=0, ge=0, description="Original principal")
    interest_rate: float = Field(default=0, ge=0, le=100, description="Annual rate (%)")
    loan_term_years: int = Field(default=30, ge=0, le=50, description="Term in years")
    start_date: Optional[date] = Field(
        default=None, description="Origination date (None means starts today)"
    )
    lock_loan: bool = Field(default=False, description="Ignore global loan amount")
    manual_current_balance: Optional[float] = Field(
        default=None, ge=0, description="Pinned current balance of the primary loan"
    )
    primary_balance_locked: bool = Field(
        default=False, description="Use manual_current_balance instead of amortizing"
    )
    primary_loan_expenses: List[CustomExpense] = Field(
        default_factory=list, description="One-time primary loan fees"
    )
    additional_loans: List[AdditionalLoan] = Field(default_factory=list)

    # Equity / cash
    down_payment: float = Field(default=0, ge=0, description="Cash down payment")
    existing_equity: float = Field(
        default=0, ge=0, description="Equity already in the house (not out of pocket)"
    )
    lock_existing_equity: bool = Field(default=False)

    # Extra payments (primary loan only)
    monthly_extra_payment: float = Field(default=0, ge=0)
    extra_payment_delay_months: int = Field(default=0, ge=0)
    monthly_extra_payment_frequency: ExtraPaymentFrequency = Field(default="monthly")
    annual_lump_sum_payment: float = Field(default=0, ge=0)
    annual_lump_sum_month: int = Field(
        default=0, ge=0, le=11, description="Month of year for the lump sum (0=Jan)"
    )
    one_time_extra_payment: float = Field(default=0, ge=0)
    one_time_extra_payment_month: int = Field(default=1, ge=0)
    manual_extra_payments: Dict[int, float] = Field(
        default_factory=dict,
        description="Month index -> extra payment, overriding every other rule",
    )

    # Recurring property costs (annual)
    include_property_costs: bool = Field(default=True)
    property_tax: float = Field(default=0, ge=0)
    home_insurance: float = Field(default=0, ge=0)
    hoa: float = Field(default=0, ge=0)
    pmi: float = Field(default=0, ge=0)
    repair: float = Field(default=0, ge=0, description="Annual maintenance budget")
    # Rates are annual percentages of the purchase price
    property_tax_rate: float = Field(default=0, ge=0, le=100)
    use_property_tax_rate: bool = Field(default=False)
    home_insurance_rate: float = Field(default=0, ge=0, le=100)
    use_home_insurance_rate: bool = Field(default=False)
    hoa_rate: float = Field(default=0, ge=0, le=100)
    use_hoa_rate: bool = Field(default=False)
    pmi_rate: float = Field(default=0, ge=0, le=100)
    use_pmi_rate: bool = Field(default=False)
    repair_rate: float = Field(default=0, ge=0, le=100)
    use_repair_rate: bool = Field(default=False)
    custom_expenses: List[CustomExpense] = Field(
        default_factory=list, description="Recurring monthly expenses"
    )
    tax_refund_rate: float = Field(
        default=0, ge=0, le=100, description="Marginal rate for interest deduction (%)"
    )

    # Rent
    include_rent: bool = Field(default=True)
    rent_flow_type: Optional[RentFlowType] = Field(
        default=None, description="Defaults to outflow in rent mode, inflow otherwise"
    )
    rent_monthly: float = Field(default=0, ge=0, description="Rent paid per month")
    rental_income: float = Field(default=0, ge=0, description="Rent received per month")
    rent_increase_per_year: float = Field(default=0, ge=-100, le=100)
    rent_include_tax: bool = Field(
        default=False, description="Rent paid is reduced by a tax benefit"
    )
    rent_tax_rate: float = Field(default=0, ge=0, le=100)
    rental_income_tax_enabled: bool = Field(default=False)
    rental_income_tax_rate: float = Field(default=0, ge=0, le=100)
    lock_rent: bool = Field(default=False)
    lock_rent_income: bool = Field(default=False)

    # Side investment
    include_investment: bool = Field(default=True)
    investment_capital: Optional[float] = Field(default=None, ge=0)
    investment_monthly: Optional[float] = Field(default=None, ge=0)
    investment_contribution_frequency: ContributionFrequency = Field(default="monthly")
    investment_rate: Optional[float] = Field(default=None, ge=-100, le=100)
    investment_tax_rate: Optional[float] = Field(default=None, ge=0, le=100)
    lock_investment: bool = Field(default=False)
    invest_monthly_savings: bool = Field(
        default=True, description="Rent mode: invest savings versus baseline PITI"
    )

    # Settlement
    enable_selling: bool = Field(default=True)
    selling_cost_rate: float = Field(default=6, ge=0, le=100)
    closing_costs: float = Field(default=0, ge=0)
    custom_closing_costs: List[CustomExpense] = Field(default_factory=list)
    capital_gains_tax_rate: float = Field(default=20, ge=0, le=100)
    primary_residence_exclusion: bool = Field(default=False)

    @field_validator("manual_extra_payments")
    @classmethod
    def validate_manual_extra_payments(cls, v: Dict[int, float]) -> Dict[int, float]:
        for month in v:
            if month < 1:
                raise ValueError("Manual extra payment months start at 1")
        return v

    @model_validator(mode="after")
    def validate_mode_flags(self):
        if self.is_rent_only and self.is_investment_only:
            raise ValueError("A scenario cannot be both rent-only and investment-only")
        return self

    @property
    def mode(self) -> ScenarioMode:
        if self.is_investment_only:
            return "investment"
        if self.is_rent_only:
            return "rent"
        return "buy"

    @property
    def models_home(self) -> bool:
        """True when the house, its loans and its costs take part in the run."""
        return self.mode == "buy" and self.include_home

    @property
    def fair_market_value(self) -> float:
        """FMV at time zero; falls back to the purchase price."""
        return self.home_value if self.original_fmv is None else self.original_fmv

    @property
    def instant_equity(self) -> float:
        return self.fair_market_value - self.home_value

    @property
    def effective_rent_flow(self) -> RentFlowType:
        if self.rent_flow_type is not None:
            return self.rent_flow_type
        return "outflow" if self.mode == "rent" else "inflow"

    @property
    def upfront_costs(self) -> float:
        """Buying closing costs plus every one-time loan fee."""
        return (
            self.closing_costs
            + sum(c.amount for c in self.custom_closing_costs)
            + sum(e.amount for e in self.primary_loan_expenses)
            + sum(e.amount for loan in self.additional_loans for e in loan.one_time_expenses)
        )


class ProjectionAssumptions(BaseModel):
    """Projection-wide inputs shared by every scenario in a comparison."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    horizon_months: int = Field(default=60, description="Months to project")
    appreciation_rate: float = Field(default=2.0, ge=-100, le=100)
    investment_return_rate: float = Field(default=5.0, ge=-100, le=100)
    global_investment_capital: float = Field(default=0, ge=0)
    global_contribution: float = Field(default=0, ge=0)
    global_contribution_frequency: ContributionFrequency = Field(default="monthly")
    baseline_payment: Optional[float] = Field(
        default=None, ge=0, description="Monthly PITI used for rent-mode savings"
    )
    global_rent: Optional[float] = Field(default=None, ge=0)
    use_global_rent: bool = Field(default=False)
    global_investment_tax_rate: float = Field(default=0, ge=0, le=100)
    global_home_value: Optional[float] = Field(default=None, ge=0)
    global_loan_amount: Optional[float] = Field(default=None, ge=0)
    as_of: date = Field(
        default_factory=date.today, description="Valuation date ('now') of the run"
    )


class EffectiveInputs(BaseModel):
    """Values a projection actually uses after global/local resolution."""

    model_config = ConfigDict(frozen=True)

    home_value: float
    loan_amount: float
    rent_monthly: float
    rental_income: float
    investment_capital: float
    investment_monthly: float
    investment_contribution_frequency: ContributionFrequency
    investment_rate: float
    investment_tax_rate: float


def resolve(scenario: Scenario, assumptions: ProjectionAssumptions) -> EffectiveInputs:
    """
    Resolve broadcast ("global") values against a scenario's lock flags.

    An unlocked field follows the global value when one is supplied; a locked
    field keeps the scenario's own value. Home value and loan amount are only
    broadcast to buy-mode scenarios. Nothing is mutated.

    Args:
        scenario: Scenario being projected
        assumptions: Projection-wide values

    Returns:
        EffectiveInputs for this run
    """
    is_buy = scenario.mode == "buy"

    home_value = scenario.home_value
    if is_buy and not scenario.lock_fmv and assumptions.global_home_value is not None:
        home_value = assumptions.global_home_value

    loan_amount = scenario.loan_amount
    if is_buy and not scenario.lock_loan and assumptions.global_loan_amount is not None:
        loan_amount = assumptions.global_loan_amount

    use_global_rent = assumptions.use_global_rent and assumptions.global_rent is not None
    rent_monthly = scenario.rent_monthly
    if use_global_rent and not scenario.lock_rent:
        rent_monthly = assumptions.global_rent
    rental_income = scenario.rental_income
    if use_global_rent and is_buy and not scenario.lock_rent_income:
        rental_income = assumptions.global_rent

    if scenario.lock_investment:
        capital = _first_set(scenario.investment_capital, assumptions.global_investment_capital)
        monthly = _first_set(scenario.investment_monthly, assumptions.global_contribution)
        frequency = scenario.investment_contribution_frequency
        rate = _first_set(scenario.investment_rate, assumptions.investment_return_rate)
        tax_rate = _first_set(
            scenario.investment_tax_rate, assumptions.global_investment_tax_rate
        )
    else:
        capital = assumptions.global_investment_capital
        monthly = assumptions.global_contribution
        frequency = assumptions.global_contribution_frequency
        rate = assumptions.investment_return_rate
        tax_rate = assumptions.global_investment_tax_rate

    return EffectiveInputs(
        home_value=home_value,
        loan_amount=loan_amount,
        rent_monthly=rent_monthly,
        rental_income=rental_income,
        investment_capital=capital,
        investment_monthly=monthly,
        investment_contribution_frequency=frequency,
        investment_rate=rate,
        investment_tax_rate=tax_rate,
    )


def _first_set(value: Optional[float], fallback: float) -> float:
    return fallback if value is None else value
