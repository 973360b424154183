"""
Understanding Engine Protocol

The engine decides whether a user's goal is clear enough to plan, extracts
structured context from free text, proposes clarifying questions and owns the
question budget.
"""

from collections.abc import Sequence
from typing import Any, Protocol

from skillforce.core.domain.models import (
    AgentGoal,
    AgentMessage,
    Assessment,
    SkillSummary,
)


class UnderstandingEngineProtocol(Protocol):
    """
    Protocol for goal understanding.

    The orchestrator has no question limit of its own: it keeps suspending
    until ``assess`` reports ``understood=True``. Enforcing ``max_questions``
    is the engine's job.
    """

    async def assess(
        self,
        *,
        message: str,
        context: dict[str, Any],
        history: Sequence[AgentMessage],
        available_skills: Sequence[SkillSummary],
    ) -> Assessment:
        """
        Assess whether the goal is understood.

        Args:
            message: Latest message text
            context: Accumulated session context
            history: Full conversation history
            available_skills: Summarized catalog

        Returns:
            Assessment with verdict, extracted context and optional question
        """
        ...

    async def extract_from_response(
        self,
        question_message: AgentMessage,
        answer_text: str,
        context: dict[str, Any],
    ) -> dict[str, Any]:
        """Extract structured context from an answer to ``question_message``."""
        ...

    def build_goal(
        self,
        first_message_text: str,
        assessments: Sequence[Assessment],
        context: dict[str, Any],
    ) -> AgentGoal:
        """Build the goal statement once the request is understood."""
        ...

    def create_question_message(self, assessment: Assessment) -> AgentMessage:
        """Render a ``question`` message from a non-converged assessment."""
        ...

    def reset(self) -> None:
        """Reset internal counters (question budget) for a new session."""
        ...
