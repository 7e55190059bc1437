"""Narrative comparison of projected scenarios by the language service."""

import logging
from typing import List, Optional

from homeplanner.models.calendar import CurrencyFormatter
from homeplanner.models.projection_result import CalculatedResult
from homeplanner.models.scenario import Scenario
from homeplanner.services.language_client import CollaboratorError, LanguageClient

logger = logging.getLogger(__name__)

ANALYSIS_PROMPT = """
You are a helpful mortgage financial advisor.
Analyze the following mortgage scenarios.

{scenario_data}

Please provide:
1. A recommendation on which loan is best for maximizing NET WORTH at year {years}.
2. Compare the strategy of investing the deposit vs putting it into the house (look at Side Investment Portfolio vs Equity Gain).
3. A comparison of NET COST.
4. Highlight any risks with adjustable or high-rate options if apparent.

Keep the tone professional yet accessible. Use Markdown.
"""


class NarrativeAnalysisError(CollaboratorError):
    """The narrative analysis could not be generated."""


class NarrativeAnalysisService:
    """Asks the language service for a written comparison of scenarios."""

    def __init__(self, client: LanguageClient, formatter: Optional[CurrencyFormatter] = None):
        self.client = client
        self.formatter = formatter or CurrencyFormatter()

    def analyze(
        self,
        scenarios: List[Scenario],
        results: List[CalculatedResult],
        horizon_years: int,
    ) -> str:
        """
        Generate a markdown narrative comparing the scenarios.

        Args:
            scenarios: Scenarios in display order
            results: Projection results; matched to scenarios by id
            horizon_years: Projection horizon used for the snapshot

        Returns:
            Markdown text

        Raises:
            NarrativeAnalysisError: If there is nothing to analyze or the
                language service fails
        """
        scenario_data = self.build_scenario_data(scenarios, results, horizon_years)
        if not scenario_data:
            raise NarrativeAnalysisError("No projected scenarios to analyze")

        prompt = ANALYSIS_PROMPT.format(scenario_data=scenario_data, years=horizon_years)
        try:
            return self.client.generate(prompt)
        except CollaboratorError as e:
            logger.error(f"Narrative analysis failed: {e}")
            raise NarrativeAnalysisError(str(e))

    def build_scenario_data(
        self,
        scenarios: List[Scenario],
        results: List[CalculatedResult],
        horizon_years: int,
    ) -> str:
        """Describe each projected scenario and its horizon snapshot as prompt text."""
        by_id = {r.id: r for r in results}
        fmt = self.formatter.format_currency
        lines: List[str] = []

        for index, scenario in enumerate(scenarios, start=1):
            result = by_id.get(scenario.id)
            if result is None:
                continue

            price = scenario.home_value
            down_pct = scenario.down_payment / price * 100 if price > 0 else 0.0

            lines.append(f"Scenario {index}: {scenario.name} ({scenario.mode})")
            if scenario.models_home:
                lines.append(f"- Home Price: {fmt(price)}")
                lines.append(
                    f"- Down Payment: {self.formatter.format_percentage(down_pct)} "
                    f"({fmt(scenario.down_payment)})"
                )
                lines.append(f"- Interest Rate: {scenario.interest_rate}%")
            lines.append(f"- Monthly Total Payment: {fmt(result.total_monthly_payment)}")
            if scenario.monthly_extra_payment > 0:
                lines.append(f"- Extra Monthly Payment: {fmt(scenario.monthly_extra_payment)}")

            summary = result.to_summary()
            lines.append("")
            lines.append(f"SNAPSHOT at Year {horizon_years}:")
            lines.append(f"- Total PROFIT (Equity Gain): {fmt(summary['profit'])}")
            lines.append(f"- Side Investment Portfolio: {fmt(summary['investment_portfolio'])}")
            lines.append(f"- NET WORTH (Total Equity + Investment): {fmt(summary['net_worth'])}")
            lines.append(f"- NET COST (Total Paid - Recovered): {fmt(summary['net_cost'])}")
            lines.append(f"- Remaining Balance: {fmt(summary['remaining_balance'])}")
            lines.append(f"- Total Equity Built: {fmt(summary['total_equity_built'])}")
            lines.append("")

        return "\n".join(lines).strip()
