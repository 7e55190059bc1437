"""Data models and calculators for home-finance scenario projections."""

from .scenario import (
    AdditionalLoan,
    CustomExpense,
    EffectiveInputs,
    ProjectionAssumptions,
    Scenario,
    resolve,
)
from .mortgage_amortization import (
    AmortizableLoan,
    AmortizationRun,
    ExtraPaymentPlan,
    LoanAmortizer,
    LoanBreakdown,
    calculate_current_balance,
    calculate_monthly_payment,
)
from .investment_engine import InvestmentAccount, normalize_contribution
from .cash_flow import CashFlowAggregator
from .settlement import SettlementCalculator, SettlementResult
from .equity_sync import (
    EquityBalanceCheck,
    EquitySyncResult,
    apply_edit,
    check_equity_equation,
)
from .projection_result import AmortizationPoint, AnnualDataPoint, CalculatedResult
from .projection import project, project_with

__all__ = [
    "Scenario",
    "AdditionalLoan",
    "CustomExpense",
    "ProjectionAssumptions",
    "EffectiveInputs",
    "resolve",
    "AmortizableLoan",
    "AmortizationRun",
    "ExtraPaymentPlan",
    "LoanAmortizer",
    "LoanBreakdown",
    "calculate_current_balance",
    "calculate_monthly_payment",
    "InvestmentAccount",
    "normalize_contribution",
    "CashFlowAggregator",
    "SettlementCalculator",
    "SettlementResult",
    "EquityBalanceCheck",
    "EquitySyncResult",
    "apply_edit",
    "check_equity_equation",
    "AmortizationPoint",
    "AnnualDataPoint",
    "CalculatedResult",
    "project",
    "project_with",
]
