"""
Planning Engine Protocol

Turns an understood goal plus the available skills into an ordered plan and
identifies capability gaps.
"""

from collections.abc import Sequence
from typing import Any, Protocol

from skillforce.core.domain.models import AgentGoal, ExecutionPlan, PlanValidation, Skill


class PlanningEngineProtocol(Protocol):
    """Protocol for plan creation and structural validation."""

    async def create_plan(
        self,
        *,
        goal: AgentGoal,
        available_skills: Sequence[Skill],
        context: dict[str, Any],
    ) -> ExecutionPlan:
        """
        Create an execution plan.

        Args:
            goal: Understood goal
            available_skills: Full catalog entries
            context: Accumulated session context

        Returns:
            ExecutionPlan whose ``steps[i].order == i``
        """
        ...

    def validate_plan(self, plan: ExecutionPlan) -> PlanValidation:
        """Check a plan for structural issues. Issues are advisory only."""
        ...
