"""Terminal sale economics at the end of the projection horizon."""

from pydantic import BaseModel, Field

PRIMARY_RESIDENCE_EXCLUSION = 250_000.0


class SettlementResult(BaseModel):
    """Outcome of selling the home at the horizon."""

    sale_price: float = Field(..., description="Final fair market value")
    selling_costs: float
    capital_gain: float = Field(..., description="Gain before any exclusion")
    capital_gains_exclusion: float
    taxable_capital_gains: float
    capital_gains_tax: float
    remaining_debt: float
    net_proceeds: float = Field(..., description="Cash left after costs, tax and debt")
    liquid_net_worth: float


class SettlementCalculator:
    """Calculator for selling costs and capital gains tax."""

    @staticmethod
    def projected_selling_costs(fair_market_value: float, selling_cost_rate: float) -> float:
        """Selling costs as a percentage of the sale price."""
        return max(fair_market_value, 0.0) * selling_cost_rate / 100

    @staticmethod
    def settle(
        final_fmv: float,
        purchase_price: float,
        remaining_debt: float,
        investment_balance: float,
        selling_cost_rate: float,
        capital_gains_tax_rate: float,
        primary_residence_exclusion: bool = False,
    ) -> SettlementResult:
        """
        Compute the economics of selling at the horizon.

        The cost basis is the original purchase price, not the fair market
        value at time zero. Non-positive gains are never taxed.

        Args:
            final_fmv: Appreciated fair market value at the horizon
            purchase_price: Original transaction price
            remaining_debt: Loan balances outstanding at the horizon
            investment_balance: Side portfolio value at the horizon
            selling_cost_rate: Selling costs in percent of sale price
            capital_gains_tax_rate: Tax rate on the taxable gain in percent
            primary_residence_exclusion: Apply the fixed $250,000 exclusion

        Returns:
            SettlementResult
        """
        selling_costs = SettlementCalculator.projected_selling_costs(
            final_fmv, selling_cost_rate
        )
        gain = final_fmv - selling_costs - purchase_price

        exclusion = 0.0
        taxable = 0.0
        if gain > 0:
            if primary_residence_exclusion:
                exclusion = min(gain, PRIMARY_RESIDENCE_EXCLUSION)
            taxable = max(0.0, gain - exclusion)
        tax = taxable * capital_gains_tax_rate / 100

        net_proceeds = max(0.0, final_fmv - selling_costs - tax - remaining_debt)

        return SettlementResult(
            sale_price=final_fmv,
            selling_costs=selling_costs,
            capital_gain=gain,
            capital_gains_exclusion=exclusion,
            taxable_capital_gains=taxable,
            capital_gains_tax=tax,
            remaining_debt=remaining_debt,
            net_proceeds=net_proceeds,
            liquid_net_worth=net_proceeds + investment_balance,
        )
