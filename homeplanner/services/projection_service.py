"""
Projection service for comparing home-finance strategies.

This service projects every scenario of a comparison independently, derives
the shared baseline payment used by rent-mode savings, isolates per-scenario
failures, and picks the winning scenario for each headline metric.
"""

import logging
from typing import Dict, List, Literal, Optional

import numpy as np
from pydantic import BaseModel, Field

from homeplanner.models.equity_sync import EquityBalanceCheck, check_equity_equation
from homeplanner.models.projection import project
from homeplanner.models.projection_result import CalculatedResult
from homeplanner.models.scenario import ProjectionAssumptions, Scenario

logger = logging.getLogger(__name__)

# metric -> whether a larger value wins
WINNING_DIRECTION: Dict[str, Literal["max", "min"]] = {
    "profit": "max",
    "net_worth": "max",
    "net_cost": "min",
    "effective_annual_return": "max",
    "out_of_pocket": "min",
}


class ScenarioOutcome(BaseModel):
    """Projection outcome for one scenario of a comparison."""

    scenario_id: str
    name: str
    result: Optional[CalculatedResult] = None
    equity_check: Optional[EquityBalanceCheck] = None
    equation_broken: bool = False
    error: Optional[str] = None


class ComparisonReport(BaseModel):
    """All scenario outcomes plus the winner for each metric."""

    horizon_months: int
    baseline_payment: Optional[float] = None
    outcomes: List[ScenarioOutcome] = Field(default_factory=list)
    winners: Dict[str, Optional[str]] = Field(default_factory=dict)

    def get_result(self, scenario_id: str) -> Optional[CalculatedResult]:
        for outcome in self.outcomes:
            if outcome.scenario_id == scenario_id:
                return outcome.result
        return None


class ProjectionService:
    """Service for projecting and comparing scenarios."""

    def __init__(self, max_scenarios: int = 10) -> None:
        """Initialize the projection service.

        Args:
            max_scenarios: Maximum number of scenarios per comparison
        """
        self.max_scenarios = max_scenarios
        self.logger = logging.getLogger(__name__)

    def compare(
        self, scenarios: List[Scenario], assumptions: ProjectionAssumptions
    ) -> ComparisonReport:
        """
        Project every scenario and rank them.

        When the assumptions carry no baseline payment, the first scenario's
        total monthly payment is used as the baseline for rent-mode savings.

        Args:
            scenarios: Scenarios to compare, in display order
            assumptions: Shared projection assumptions

        Returns:
            ComparisonReport

        Raises:
            ValueError: If more than ``max_scenarios`` scenarios are given
        """
        if len(scenarios) > self.max_scenarios:
            raise ValueError(
                f"At most {self.max_scenarios} scenarios can be compared, "
                f"got {len(scenarios)}"
            )

        assumptions = self._with_baseline_payment(scenarios, assumptions)
        self.logger.info(
            f"Comparing {len(scenarios)} scenarios over "
            f"{assumptions.horizon_months} months"
        )

        outcomes = [self._project_one(s, assumptions) for s in scenarios]
        return ComparisonReport(
            horizon_months=max(assumptions.horizon_months, 0),
            baseline_payment=assumptions.baseline_payment,
            outcomes=outcomes,
            winners=self.pick_winners(outcomes),
        )

    def _with_baseline_payment(
        self, scenarios: List[Scenario], assumptions: ProjectionAssumptions
    ) -> ProjectionAssumptions:
        if assumptions.baseline_payment is not None or not scenarios:
            return assumptions
        try:
            first = project(scenarios[0], assumptions)
        except Exception as e:
            self.logger.warning(f"Could not derive baseline payment: {str(e)}")
            return assumptions
        return assumptions.model_copy(
            update={"baseline_payment": first.total_monthly_payment}
        )

    def _project_one(
        self, scenario: Scenario, assumptions: ProjectionAssumptions
    ) -> ScenarioOutcome:
        try:
            result = project(scenario, assumptions)
            check = check_equity_equation(scenario, assumptions.as_of)
        except Exception as e:
            self.logger.error(f"Projection of scenario {scenario.id} failed: {str(e)}")
            return ScenarioOutcome(
                scenario_id=scenario.id, name=scenario.name, error=str(e)
            )

        return ScenarioOutcome(
            scenario_id=scenario.id,
            name=scenario.name,
            result=result,
            equity_check=check,
            equation_broken=not check.is_balanced,
        )

    @staticmethod
    def pick_winners(outcomes: List[ScenarioOutcome]) -> Dict[str, Optional[str]]:
        """
        Scenario id that wins each metric; ties go to the earliest scenario.

        Args:
            outcomes: Outcomes in display order

        Returns:
            Mapping of metric name to winning scenario id (None if no
            scenario projected successfully)
        """
        succeeded = [o for o in outcomes if o.result is not None]
        winners: Dict[str, Optional[str]] = {}
        for metric, direction in WINNING_DIRECTION.items():
            if not succeeded:
                winners[metric] = None
                continue
            values = np.array([o.result.to_summary()[metric] for o in succeeded])
            index = np.argmax(values) if direction == "max" else np.argmin(values)
            winners[metric] = succeeded[int(index)].scenario_id
        return winners
