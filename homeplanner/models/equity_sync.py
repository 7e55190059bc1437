"""
Equity synchronization for buy-mode scenarios.

A scenario's purchase price, debt and cash equity must satisfy

    home_value = current primary balance + current additional balances
                 + down_payment + existing_equity

within ``EQUITY_TOLERANCE`` dollars. Each edit to one of the four correlated
fields is handled by its own pure transition function that re-derives the
dependent field(s) in a single pass and returns a new scenario. A transition
never recomputes the field that was edited. When the result still does not
balance (for example because a derived amount would have to be negative) the
returned ``equation_broken`` flag is set for the caller to surface.
"""

from datetime import date
from typing import Any, Callable, Dict, Literal

import numpy as np
from pydantic import BaseModel, Field

from .mortgage_amortization import calculate_current_balance, elapsed_months
from .scenario import Scenario

EQUITY_TOLERANCE = 500.0

EditableField = Literal["home_value", "loan_amount", "down_payment", "existing_equity"]


class EquityBalanceCheck(BaseModel):
    """Both sides of the equity equation."""

    home_value: float
    primary_debt: float
    additional_debt: float
    down_payment: float
    existing_equity: float
    difference: float = Field(..., description="home_value minus the other terms")
    is_balanced: bool


class EquitySyncResult(BaseModel):
    """Scenario after one synchronization transition."""

    scenario: Scenario
    edited_field: EditableField
    check: EquityBalanceCheck
    equation_broken: bool


def current_primary_debt(scenario: Scenario, as_of: date) -> float:
    """Primary loan balance at ``as_of`` (pinned or amortized)."""
    if scenario.primary_balance_locked and scenario.manual_current_balance is not None:
        return scenario.manual_current_balance
    return calculate_current_balance(
        scenario.loan_amount,
        scenario.interest_rate,
        scenario.loan_term_years * 12,
        elapsed_months(scenario.start_date, as_of),
    )


def current_additional_debt(scenario: Scenario, as_of: date) -> float:
    """Sum of additional loan balances at ``as_of``."""
    return sum(
        calculate_current_balance(
            loan.balance,
            loan.rate,
            loan.years * 12,
            elapsed_months(loan.start_date, as_of),
        )
        for loan in scenario.additional_loans
    )


def check_equity_equation(scenario: Scenario, as_of: date) -> EquityBalanceCheck:
    """
    Evaluate the equity equation for a scenario.

    Scenarios that do not model a home are always balanced.
    """
    primary = current_primary_debt(scenario, as_of)
    additional = current_additional_debt(scenario, as_of)
    rhs = primary + additional + scenario.down_payment + scenario.existing_equity
    difference = scenario.home_value - rhs

    balanced = True
    if scenario.models_home:
        balanced = bool(
            np.isclose(scenario.home_value, rhs, rtol=0, atol=EQUITY_TOLERANCE)
        )

    return EquityBalanceCheck(
        home_value=scenario.home_value,
        primary_debt=primary,
        additional_debt=additional,
        down_payment=scenario.down_payment,
        existing_equity=scenario.existing_equity,
        difference=difference,
        is_balanced=balanced,
    )


def _result(scenario: Scenario, edited: EditableField, as_of: date) -> EquitySyncResult:
    check = check_equity_equation(scenario, as_of)
    return EquitySyncResult(
        scenario=scenario,
        edited_field=edited,
        check=check,
        equation_broken=not check.is_balanced,
    )


def _route_equity_gap(scenario: Scenario, gap: float) -> Dict[str, float]:
    """
    Place the equity implied by price minus debt into the right field.

    With no down payment and unlocked existing equity, the gap becomes
    existing equity. Otherwise existing equity is held and the down payment
    takes the gap, including when existing equity is locked.
    """
    if scenario.down_payment == 0 and not scenario.lock_existing_equity:
        return {"existing_equity": max(0.0, gap)}
    return {"down_payment": max(0.0, gap - scenario.existing_equity)}


def on_home_value_changed(
    scenario: Scenario, new_home_value: float, as_of: date
) -> EquitySyncResult:
    """
    Home value edited: debt is held, cash equity absorbs the difference.

    Args:
        scenario: Scenario before the edit
        new_home_value: Edited purchase price
        as_of: Valuation date for current balances

    Returns:
        EquitySyncResult
    """
    updated = scenario.model_copy(update={"home_value": new_home_value})
    if not scenario.models_home:
        return _result(updated, "home_value", as_of)

    gap = (
        new_home_value
        - current_primary_debt(scenario, as_of)
        - current_additional_debt(scenario, as_of)
    )
    updated = updated.model_copy(update=_route_equity_gap(scenario, gap))
    return _result(updated, "home_value", as_of)


def on_loan_amount_changed(
    scenario: Scenario, new_loan_amount: float, as_of: date
) -> EquitySyncResult:
    """
    Primary loan amount edited: the current balance is re-derived from the new
    original amount, then cash equity absorbs the difference.

    Args:
        scenario: Scenario before the edit
        new_loan_amount: Edited original principal
        as_of: Valuation date for current balances

    Returns:
        EquitySyncResult
    """
    updated = scenario.model_copy(update={"loan_amount": new_loan_amount})
    if not scenario.models_home:
        return _result(updated, "loan_amount", as_of)

    gap = (
        scenario.home_value
        - current_primary_debt(updated, as_of)
        - current_additional_debt(scenario, as_of)
    )
    updated = updated.model_copy(update=_route_equity_gap(scenario, gap))
    return _result(updated, "loan_amount", as_of)


def _solve_primary_loan(
    scenario: Scenario, target_total_debt: float, as_of: date
) -> Dict[str, Any]:
    """
    Back-solve the original primary loan amount that yields a target debt.

    The ratio of current to original balance observed before the edit is
    reused, so the closed-form balance of the new amount hits the target.
    Without an original amount to observe, the ratio is the closed-form
    balance of one dollar after the months elapsed since the start date.
    """
    target_primary = max(
        0.0, target_total_debt - current_additional_debt(scenario, as_of)
    )
    current_before = current_primary_debt(scenario, as_of)
    ratio = 1.0
    if scenario.loan_amount > 0 and current_before > 0:
        ratio = current_before / scenario.loan_amount
    else:
        unit_balance = calculate_current_balance(
            1.0,
            scenario.interest_rate,
            scenario.loan_term_years * 12,
            elapsed_months(scenario.start_date, as_of),
        )
        if unit_balance > 0:
            ratio = unit_balance

    updates: Dict[str, Any] = {"loan_amount": target_primary / ratio}
    if scenario.primary_balance_locked and scenario.manual_current_balance is not None:
        updates["manual_current_balance"] = target_primary
    return updates


def on_down_payment_changed(
    scenario: Scenario, new_down_payment: float, as_of: date
) -> EquitySyncResult:
    """
    Down payment edited: home value and existing equity are held, the primary
    loan absorbs the difference.

    Args:
        scenario: Scenario before the edit
        new_down_payment: Edited down payment
        as_of: Valuation date for current balances

    Returns:
        EquitySyncResult
    """
    updated = scenario.model_copy(update={"down_payment": new_down_payment})
    if not scenario.models_home:
        return _result(updated, "down_payment", as_of)

    target = scenario.home_value - new_down_payment - scenario.existing_equity
    updated = updated.model_copy(update=_solve_primary_loan(scenario, target, as_of))
    return _result(updated, "down_payment", as_of)


def on_existing_equity_changed(
    scenario: Scenario, new_existing_equity: float, as_of: date
) -> EquitySyncResult:
    """
    Existing equity edited: home value and down payment are held, the primary
    loan absorbs the difference.

    Args:
        scenario: Scenario before the edit
        new_existing_equity: Edited existing equity
        as_of: Valuation date for current balances

    Returns:
        EquitySyncResult
    """
    updated = scenario.model_copy(update={"existing_equity": new_existing_equity})
    if not scenario.models_home:
        return _result(updated, "existing_equity", as_of)

    target = scenario.home_value - scenario.down_payment - new_existing_equity
    updated = updated.model_copy(update=_solve_primary_loan(scenario, target, as_of))
    return _result(updated, "existing_equity", as_of)


TRANSITIONS: Dict[str, Callable[[Scenario, float, date], EquitySyncResult]] = {
    "home_value": on_home_value_changed,
    "loan_amount": on_loan_amount_changed,
    "down_payment": on_down_payment_changed,
    "existing_equity": on_existing_equity_changed,
}


def apply_edit(
    scenario: Scenario, field: str, value: float, as_of: date
) -> EquitySyncResult:
    """
    Apply a single-field edit through its transition.

    Raises:
        ValueError: If the field is not one of the synchronized fields or the
            value is negative
    """
    if field not in TRANSITIONS:
        raise ValueError(
            f"Field must be one of {sorted(TRANSITIONS)}, got {field!r}"
        )
    if value < 0:
        raise ValueError(f"{field} cannot be negative")
    return TRANSITIONS[field](scenario, value, as_of)
