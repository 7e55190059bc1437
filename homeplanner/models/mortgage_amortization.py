"""
Mortgage amortization calculations for home-finance projections.

This module advances one primary loan and any number of additional loans month
by month. Every loan is an ``AmortizableLoan``; only loans flagged with
``accepts_extra_payments`` (the primary loan) receive scheduled, lump-sum,
one-time and manually overridden extra principal payments.

Rates are annual percentages. Terms are expressed in months.
"""

import logging
from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .calendar import add_months, months_between
from .scenario import ExtraPaymentFrequency, Scenario

logger = logging.getLogger(__name__)

# Balances below this are treated as paid off.
PAID_OFF_THRESHOLD = 0.01


def calculate_monthly_payment(
    principal: float, annual_rate: float, term_months: int
) -> float:
    """
    Calculate the level monthly payment using the standard annuity formula.

    Args:
        principal: Original loan principal
        annual_rate: Annual interest rate in percent (5.75 for 5.75%)
        term_months: Loan term in months

    Returns:
        Monthly principal-and-interest payment; zero for a non-positive
        principal or term
    """
    if principal <= 0 or term_months <= 0:
        return 0.0

    monthly_rate = annual_rate / 100 / 12
    if monthly_rate == 0:
        return principal / term_months

    growth = (1 + monthly_rate) ** term_months
    return principal * monthly_rate * growth / (growth - 1)


def calculate_current_balance(
    original_balance: float,
    annual_rate: float,
    term_months: int,
    elapsed_months: int,
) -> float:
    """
    Remaining balance after ``elapsed_months`` level payments (closed form).

    ``B_k = L * ((1+i)^n - (1+i)^k) / ((1+i)^n - 1)``, with a zero rate
    reducing in a straight line.

    Args:
        original_balance: Original principal ``L``
        annual_rate: Annual interest rate in percent
        term_months: Term ``n`` in months
        elapsed_months: Payments already made ``k``

    Returns:
        Remaining balance, never negative
    """
    if original_balance <= 0 or term_months <= 0:
        return 0.0

    k = min(max(elapsed_months, 0), term_months)
    monthly_rate = annual_rate / 100 / 12
    if monthly_rate == 0:
        return max(0.0, original_balance * (1 - k / term_months))

    growth_n = (1 + monthly_rate) ** term_months
    growth_k = (1 + monthly_rate) ** k
    return max(0.0, original_balance * (growth_n - growth_k) / (growth_n - 1))


def elapsed_months(start_date: Optional[date], as_of: date) -> int:
    """Whole months between a loan's start date and the valuation date."""
    if start_date is None:
        return 0
    return max(0, months_between(start_date, as_of))


class ExtraPaymentPlan(BaseModel):
    """Extra principal rules for a loan that accepts extra payments."""

    model_config = ConfigDict(frozen=True)

    monthly_amount: float = Field(default=0, ge=0)
    delay_months: int = Field(default=0, ge=0)
    frequency: ExtraPaymentFrequency = Field(default="monthly")
    one_time_amount: float = Field(default=0, ge=0)
    one_time_month: int = Field(default=1, ge=0)
    annual_lump_sum: float = Field(default=0, ge=0)
    annual_lump_sum_month: int = Field(default=0, ge=0, le=11)
    manual_overrides: Dict[int, float] = Field(default_factory=dict)

    @classmethod
    def from_scenario(cls, scenario: Scenario) -> "ExtraPaymentPlan":
        return cls(
            monthly_amount=scenario.monthly_extra_payment,
            delay_months=scenario.extra_payment_delay_months,
            frequency=scenario.monthly_extra_payment_frequency,
            one_time_amount=scenario.one_time_extra_payment,
            one_time_month=scenario.one_time_extra_payment_month,
            annual_lump_sum=scenario.annual_lump_sum_payment,
            annual_lump_sum_month=scenario.annual_lump_sum_month,
            manual_overrides=dict(scenario.manual_extra_payments),
        )

    @property
    def recurring_monthly_equivalent(self) -> float:
        """Average monthly cash committed by the recurring extra payment."""
        if self.frequency == "annually":
            return self.monthly_amount / 12
        return self.monthly_amount

    def amount_for_month(self, month: int) -> float:
        """
        Requested (unclamped) extra payment for a 1-based month index.

        A manual override for the month wins outright, including an override
        of zero. Otherwise the recurring, one-time and annual lump-sum rules
        are summed.
        """
        if month in self.manual_overrides:
            return max(0.0, self.manual_overrides[month])

        extra = 0.0
        if self.monthly_amount > 0 and month >= self.delay_months + 1:
            if self.frequency == "monthly" or month % 12 == 0:
                extra += self.monthly_amount
        if self.one_time_amount > 0 and month == self.one_time_month:
            extra += self.one_time_amount
        if self.annual_lump_sum > 0 and (month - 1) % 12 == self.annual_lump_sum_month:
            extra += self.annual_lump_sum
        return extra


class AmortizableLoan(BaseModel):
    """A fixed-rate, level-payment loan."""

    model_config = ConfigDict(frozen=True)

    loan_id: str = Field(..., description="Loan identifier")
    name: str = Field(..., description="Display name")
    original_balance: float = Field(..., ge=0, description="Original principal")
    current_balance: float = Field(..., ge=0, description="Balance at month 0")
    annual_rate: float = Field(..., ge=0, description="Annual rate (%)")
    term_months: int = Field(..., description="Original term in months")
    elapsed_months: int = Field(default=0, ge=0, description="Payments already made")
    accepts_extra_payments: bool = Field(default=False)
    balance_pinned: bool = Field(
        default=False, description="Current balance was entered, not derived"
    )

    @property
    def level_payment(self) -> float:
        """
        Scheduled payment.

        Derived from the original principal and term. A pinned balance is
        re-amortized over the months left on the term (the full term once it
        has run out) so the payment always retires the entered balance.
        """
        if self.balance_pinned:
            months = self.remaining_months or self.term_months
            return calculate_monthly_payment(
                self.current_balance, self.annual_rate, months
            )
        return calculate_monthly_payment(
            self.original_balance, self.annual_rate, self.term_months
        )

    @property
    def remaining_months(self) -> int:
        return max(0, self.term_months - self.elapsed_months)

    @property
    def is_active(self) -> bool:
        """Loans with no term or no balance are inert."""
        return self.term_months > 0 and self.current_balance > PAID_OFF_THRESHOLD


class LoanMonth(BaseModel):
    """One month of one loan's amortization."""

    month_index: int = Field(..., ge=1)
    date: date
    beginning_balance: float
    interest: float
    principal: float
    extra_payment: float
    ending_balance: float
    cumulative_interest: float
    cumulative_principal: float
    cumulative_extra: float


class LoanSchedule(BaseModel):
    """Month-by-month schedule for a single loan."""

    loan: AmortizableLoan
    months: List[LoanMonth] = Field(default_factory=list)

    @property
    def total_interest(self) -> float:
        return self.months[-1].cumulative_interest if self.months else 0.0

    @property
    def total_principal(self) -> float:
        """Scheduled plus extra principal."""
        if not self.months:
            return 0.0
        last = self.months[-1]
        return last.cumulative_principal + last.cumulative_extra

    @property
    def total_extra(self) -> float:
        return self.months[-1].cumulative_extra if self.months else 0.0

    @property
    def remaining_balance(self) -> float:
        if not self.months:
            return self.loan.current_balance if self.loan.is_active else 0.0
        return self.months[-1].ending_balance


class AmortizationMonth(BaseModel):
    """All loans combined for one month."""

    month_index: int
    date: date
    interest: float
    principal: float
    extra_payment: float
    balance: float


class AmortizationRun(BaseModel):
    """Output of ``LoanAmortizer.run``."""

    schedules: List[LoanSchedule]
    months: List[AmortizationMonth]
    starting_balance: float
    payoff_month: Optional[int] = Field(
        default=None, description="First month with no debt left, if reached"
    )

    @property
    def total_interest(self) -> float:
        return sum(s.total_interest for s in self.schedules)

    @property
    def total_principal(self) -> float:
        return sum(s.total_principal for s in self.schedules)

    @property
    def total_extra(self) -> float:
        return sum(s.total_extra for s in self.schedules)

    @property
    def remaining_balance(self) -> float:
        if self.months:
            return self.months[-1].balance
        return self.starting_balance


class LoanBreakdown(BaseModel):
    """Per-loan totals over the horizon."""

    id: str
    name: str
    principal_paid: float
    extra_principal_paid: float
    interest_paid: float
    total_paid: float
    remaining_balance: float


class BaselineComparison(BaseModel):
    """Effect of the extra payment plan versus paying only the level payment."""

    baseline_total_interest: float
    baseline_payoff_month: Optional[int]
    total_interest: float
    payoff_month: Optional[int]
    lifetime_interest_saved: float
    months_saved: int
    interest_saved_at_horizon: float


class LoanAmortizer:
    """Advances a set of loans in lockstep."""

    def __init__(
        self,
        loans: List[AmortizableLoan],
        extra_plan: Optional[ExtraPaymentPlan] = None,
    ):
        """Initialize the amortizer.

        Args:
            loans: Loans to amortize; inert loans are skipped
            extra_plan: Extra payment rules for loans that accept them
        """
        self.loans = [loan for loan in loans if loan.is_active]
        self.extra_plan = extra_plan or ExtraPaymentPlan()

    def run(self, months: int, start: Optional[date] = None) -> AmortizationRun:
        """
        Amortize every loan for ``months`` months.

        Args:
            months: Number of months to simulate; non-positive yields an
                empty run
            start: Valuation date; month ``m`` is dated ``m`` months later

        Returns:
            AmortizationRun with per-loan schedules and combined months
        """
        start = start or date.today()
        balances = [loan.current_balance for loan in self.loans]
        payments = [loan.level_payment for loan in self.loans]
        schedules = [LoanSchedule(loan=loan) for loan in self.loans]
        cumulative = [[0.0, 0.0, 0.0] for _ in self.loans]
        starting_balance = sum(balances)

        combined: List[AmortizationMonth] = []
        payoff_month: Optional[int] = None

        for month in range(1, max(months, 0) + 1):
            month_date = add_months(start, month)
            month_interest = month_principal = month_extra = 0.0

            for idx, loan in enumerate(self.loans):
                beginning = balances[idx]
                interest, principal, extra = self._step(
                    beginning, loan, payments[idx], month
                )
                ending = beginning - principal - extra
                if ending < PAID_OFF_THRESHOLD:
                    ending = 0.0
                balances[idx] = ending

                totals = cumulative[idx]
                totals[0] += interest
                totals[1] += principal
                totals[2] += extra
                schedules[idx].months.append(
                    LoanMonth(
                        month_index=month,
                        date=month_date,
                        beginning_balance=beginning,
                        interest=interest,
                        principal=principal,
                        extra_payment=extra,
                        ending_balance=ending,
                        cumulative_interest=totals[0],
                        cumulative_principal=totals[1],
                        cumulative_extra=totals[2],
                    )
                )
                month_interest += interest
                month_principal += principal
                month_extra += extra

            total_balance = sum(balances)
            combined.append(
                AmortizationMonth(
                    month_index=month,
                    date=month_date,
                    interest=month_interest,
                    principal=month_principal,
                    extra_payment=month_extra,
                    balance=total_balance,
                )
            )
            if payoff_month is None and self.loans and total_balance == 0:
                payoff_month = month

        if payoff_month is not None:
            logger.debug(f"Loans paid off in month {payoff_month}")

        return AmortizationRun(
            schedules=schedules,
            months=combined,
            starting_balance=starting_balance,
            payoff_month=payoff_month,
        )

    def _step(
        self, balance: float, loan: AmortizableLoan, level_payment: float, month: int
    ):
        """Interest, scheduled principal and extra principal for one month."""
        if balance <= 0:
            return 0.0, 0.0, 0.0

        interest = balance * loan.annual_rate / 100 / 12
        payment = min(level_payment, balance + interest)
        principal = min(max(0.0, payment - interest), balance)

        extra = 0.0
        if loan.accepts_extra_payments:
            requested = self.extra_plan.amount_for_month(month)
            extra = min(max(0.0, requested), balance - principal)

        return interest, principal, extra

    @property
    def full_term_months(self) -> int:
        """Months until every loan reaches the end of its term."""
        return max((loan.remaining_months for loan in self.loans), default=0)


def build_loans(
    scenario: Scenario, loan_amount: float, as_of: date
) -> List[AmortizableLoan]:
    """
    Build the primary and additional loans of a scenario, seeded at ``as_of``.

    The primary loan's current balance is the pinned manual balance when the
    scenario locks it, otherwise the closed-form balance after the months
    elapsed since its start date. A pinned primary loan pays down its pinned
    balance over the rest of its term.

    Args:
        scenario: Scenario holding the loan parameters
        loan_amount: Effective original primary principal
        as_of: Valuation date

    Returns:
        Primary loan followed by additional loans in order
    """
    primary_term = scenario.loan_term_years * 12
    primary_elapsed = elapsed_months(scenario.start_date, as_of)
    pinned = (
        scenario.primary_balance_locked and scenario.manual_current_balance is not None
    )
    if pinned:
        primary_current = scenario.manual_current_balance
    else:
        primary_current = calculate_current_balance(
            loan_amount, scenario.interest_rate, primary_term, primary_elapsed
        )

    loans = [
        AmortizableLoan(
            loan_id="primary",
            name="Primary Loan",
            original_balance=loan_amount,
            current_balance=primary_current,
            annual_rate=scenario.interest_rate,
            term_months=primary_term,
            elapsed_months=primary_elapsed,
            accepts_extra_payments=True,
            balance_pinned=pinned,
        )
    ]

    for extra_loan in scenario.additional_loans:
        term = extra_loan.years * 12
        elapsed = elapsed_months(extra_loan.start_date, as_of)
        loans.append(
            AmortizableLoan(
                loan_id=extra_loan.id,
                name=extra_loan.name,
                original_balance=extra_loan.balance,
                current_balance=calculate_current_balance(
                    extra_loan.balance, extra_loan.rate, term, elapsed
                ),
                annual_rate=extra_loan.rate,
                term_months=term,
                elapsed_months=elapsed,
                accepts_extra_payments=False,
            )
        )
    return loans


def summarize_loans(run: AmortizationRun) -> List[LoanBreakdown]:
    """Per-loan breakdown of an amortization run."""
    breakdown = []
    for schedule in run.schedules:
        breakdown.append(
            LoanBreakdown(
                id=schedule.loan.loan_id,
                name=schedule.loan.name,
                principal_paid=schedule.total_principal,
                extra_principal_paid=schedule.total_extra,
                interest_paid=schedule.total_interest,
                total_paid=schedule.total_principal + schedule.total_interest,
                remaining_balance=schedule.remaining_balance,
            )
        )
    return breakdown


def compare_to_baseline(
    loans: List[AmortizableLoan],
    extra_plan: ExtraPaymentPlan,
    horizon_months: int,
    start: Optional[date] = None,
) -> BaselineComparison:
    """
    Compare the extra payment plan with level payments only.

    Both variants are run to the end of the longest remaining term so that
    lifetime interest and payoff month can be compared.

    Args:
        loans: Loans as seeded at the valuation date
        extra_plan: Extra payment rules under evaluation
        horizon_months: Projection horizon for the at-horizon comparison
        start: Valuation date

    Returns:
        BaselineComparison
    """
    with_extras = LoanAmortizer(loans, extra_plan)
    baseline = LoanAmortizer(loans, ExtraPaymentPlan())
    full_term = with_extras.full_term_months

    run = with_extras.run(full_term, start)
    base_run = baseline.run(full_term, start)

    def interest_through(result: AmortizationRun, months: int) -> float:
        return sum(m.interest for m in result.months[: max(months, 0)])

    months_saved = 0
    if run.payoff_month is not None and base_run.payoff_month is not None:
        months_saved = base_run.payoff_month - run.payoff_month

    return BaselineComparison(
        baseline_total_interest=base_run.total_interest,
        baseline_payoff_month=base_run.payoff_month,
        total_interest=run.total_interest,
        payoff_month=run.payoff_month,
        lifetime_interest_saved=base_run.total_interest - run.total_interest,
        months_saved=months_saved,
        interest_saved_at_horizon=interest_through(base_run, horizon_months)
        - interest_through(run, horizon_months),
    )
