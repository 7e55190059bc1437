"""Tests for terminal sale economics."""

import pytest

from homeplanner.models.settlement import PRIMARY_RESIDENCE_EXCLUSION, SettlementCalculator


class TestSettlementCalculator:
    """Test cases for SettlementCalculator."""

    def test_capital_gains_without_exclusion(self):
        result = SettlementCalculator.settle(
            final_fmv=600_000,
            purchase_price=400_000,
            remaining_debt=250_000,
            investment_balance=20_000,
            selling_cost_rate=6,
            capital_gains_tax_rate=20,
        )

        assert result.selling_costs == pytest.approx(36_000)
        assert result.capital_gain == pytest.approx(164_000)
        assert result.taxable_capital_gains == pytest.approx(164_000)
        assert result.capital_gains_tax == pytest.approx(32_800)
        assert result.net_proceeds == pytest.approx(600_000 - 36_000 - 32_800 - 250_000)
        assert result.liquid_net_worth == pytest.approx(result.net_proceeds + 20_000)

    def test_primary_residence_exclusion_covers_small_gain(self):
        result = SettlementCalculator.settle(
            final_fmv=600_000,
            purchase_price=400_000,
            remaining_debt=0,
            investment_balance=0,
            selling_cost_rate=6,
            capital_gains_tax_rate=20,
            primary_residence_exclusion=True,
        )
        assert result.capital_gains_exclusion == pytest.approx(164_000)
        assert result.capital_gains_tax == 0.0

    def test_primary_residence_exclusion_is_capped(self):
        result = SettlementCalculator.settle(
            final_fmv=1_000_000,
            purchase_price=400_000,
            remaining_debt=0,
            investment_balance=0,
            selling_cost_rate=0,
            capital_gains_tax_rate=20,
            primary_residence_exclusion=True,
        )
        assert result.capital_gains_exclusion == PRIMARY_RESIDENCE_EXCLUSION
        assert result.taxable_capital_gains == pytest.approx(350_000)
        assert result.capital_gains_tax == pytest.approx(70_000)

    def test_loss_is_never_taxed(self):
        result = SettlementCalculator.settle(
            final_fmv=380_000,
            purchase_price=400_000,
            remaining_debt=0,
            investment_balance=0,
            selling_cost_rate=6,
            capital_gains_tax_rate=20,
        )
        assert result.capital_gain < 0
        assert result.taxable_capital_gains == 0.0
        assert result.capital_gains_tax == 0.0

    def test_underwater_sale_floors_proceeds(self):
        result = SettlementCalculator.settle(
            final_fmv=300_000,
            purchase_price=400_000,
            remaining_debt=350_000,
            investment_balance=10_000,
            selling_cost_rate=6,
            capital_gains_tax_rate=20,
        )
        assert result.net_proceeds == 0.0
        assert result.liquid_net_worth == pytest.approx(10_000)
