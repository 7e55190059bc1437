"""
Side investment portfolio for home-finance projections.

The portfolio compounds monthly whatever the contribution frequency; weekly,
bi-weekly, semi-annual and annual contributions are first converted to an
equivalent monthly amount. Growth is taxed as it is earned (a monthly tax
drag), principal and contributions are not.
"""

from typing import Dict

from pydantic import BaseModel, Field

from .scenario import ContributionFrequency

PERIODS_PER_YEAR: Dict[str, int] = {
    "weekly": 52,
    "biweekly": 26,
    "monthly": 12,
    "semiannually": 2,
    "annually": 1,
}


def normalize_contribution(amount: float, frequency: ContributionFrequency) -> float:
    """
    Convert a per-period contribution to its monthly equivalent.

    Args:
        amount: Contribution per period
        frequency: Contribution period

    Returns:
        Equivalent monthly contribution (e.g. weekly * 52 / 12)
    """
    return amount * PERIODS_PER_YEAR[frequency] / 12


def future_value(
    principal: float, monthly_contribution: float, annual_rate: float, months: int
) -> float:
    """
    Closed-form future value with monthly compounding and no tax drag.

    Args:
        principal: Starting balance
        monthly_contribution: Contribution added at the end of each month
        annual_rate: Annual return in percent
        months: Number of months

    Returns:
        Terminal balance
    """
    if months <= 0:
        return principal
    r = annual_rate / 100 / 12
    if r == 0:
        return principal + max(monthly_contribution, 0) * months
    growth = (1 + r) ** months
    series = max(monthly_contribution, 0) * (growth - 1) / r
    return principal * growth + series


class InvestmentMonth(BaseModel):
    """One month of portfolio activity."""

    growth: float
    tax: float
    contribution: float
    balance: float


class InvestmentAccount:
    """Single side cash position compounding monthly."""

    def __init__(
        self,
        principal: float,
        monthly_contribution: float,
        annual_rate: float,
        tax_rate: float = 0.0,
    ):
        """Initialize the account.

        Args:
            principal: Starting balance
            monthly_contribution: Recurring monthly contribution (already
                normalized to a monthly amount)
            annual_rate: Annual return in percent
            tax_rate: Tax on growth in percent
        """
        self.principal = max(principal, 0.0)
        self.balance = self.principal
        self.monthly_contribution = monthly_contribution
        self.annual_rate = annual_rate
        self.tax_rate = tax_rate
        self.total_contributed = self.principal
        self.total_tax = 0.0
        self.total_growth = 0.0

    def step(self, extra_contribution: float = 0.0) -> InvestmentMonth:
        """
        Advance the account by one month.

        Args:
            extra_contribution: Additional cash routed in this month (for
                example rent-mode savings)

        Returns:
            InvestmentMonth with this month's activity
        """
        growth = self.balance * self.annual_rate / 100 / 12
        tax = growth * self.tax_rate / 100 if growth > 0 else 0.0
        contribution = max(self.monthly_contribution, 0.0) + max(extra_contribution, 0.0)

        self.balance += growth - tax + contribution
        self.total_contributed += contribution
        self.total_tax += tax
        self.total_growth += growth

        return InvestmentMonth(
            growth=growth, tax=tax, contribution=contribution, balance=self.balance
        )

    @property
    def gain(self) -> float:
        """Balance above everything contributed."""
        return self.balance - self.total_contributed
