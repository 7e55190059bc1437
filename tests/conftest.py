"""
Pytest configuration and shared fixtures for the home finance planner tests.
"""

import os
from datetime import date

import pytest

os.environ.setdefault("SECRET_KEY", "test-secret-key-123")

from homeplanner import create_app  # noqa: E402
from homeplanner.config import Settings  # noqa: E402
from homeplanner.models.scenario import ProjectionAssumptions, Scenario  # noqa: E402

AS_OF = date(2025, 1, 1)


@pytest.fixture
def as_of():
    return AS_OF


@pytest.fixture
def settings():
    """Settings for the testing environment, independent of any .env file."""
    return Settings(_env_file=None, SECRET_KEY="test-secret-key-123", APP_ENV="testing")


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def buy_scenario():
    """New purchase: $500k home, $400k loan at 6% for 30 years, $100k down."""
    return Scenario(
        id="buy",
        name="Buy with 20% down",
        home_value=500_000,
        loan_amount=400_000,
        interest_rate=6.0,
        loan_term_years=30,
        down_payment=100_000,
        property_tax=6_000,
        home_insurance=1_800,
        closing_costs=10_000,
    )


@pytest.fixture
def rent_scenario():
    return Scenario(
        id="rent",
        name="Keep renting",
        is_rent_only=True,
        rent_monthly=2_500,
        rent_increase_per_year=3.0,
    )


@pytest.fixture
def investment_scenario():
    return Scenario(
        id="invest",
        name="Invest everything",
        is_investment_only=True,
    )


@pytest.fixture
def assumptions():
    return ProjectionAssumptions(
        horizon_months=60,
        appreciation_rate=3.0,
        investment_return_rate=6.0,
        global_investment_capital=150_000,
        global_contribution=500,
        as_of=AS_OF,
    )
