"""
Skill Gateway Protocols

Protocols for the two skill-facing collaborators of the orchestrator: the
catalog that lists callable skills and the runtime that executes one.
"""

from typing import Any, Protocol

from skillforce.core.domain.models import Skill, SkillResult


class SkillCatalogProtocol(Protocol):
    """
    Source of callable skills for an organization.

    Implementations may raise on unavailability; the orchestrator catches
    such errors and continues with an empty catalog.
    """

    async def list_skills(
        self, organization_id: str, include_inactive: bool = False
    ) -> list[Skill]:
        """
        List skills visible to an organization.

        Args:
            organization_id: Organization whose catalog is listed
            include_inactive: Also return skills flagged inactive

        Returns:
            Skills in catalog order
        """
        ...

    async def get_skill(self, skill_key: str) -> Skill | None:
        """Return a single skill by key, or None when unknown."""
        ...


class SkillExecutorProtocol(Protocol):
    """Runtime that executes one skill against a context map."""

    async def execute_skill(self, skill_key: str, context: dict[str, Any]) -> SkillResult:
        """
        Execute a skill.

        Args:
            skill_key: Catalog identifier of the skill
            context: Execution context (accumulated context plus step overrides)

        Returns:
            SkillResult with success flag, output or error. Implementations
            may also raise; callers treat both as a failed step.
        """
        ...
