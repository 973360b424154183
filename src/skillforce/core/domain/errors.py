"""
Domain Errors

Exception hierarchy for the orchestrator and its default collaborators.

Step-level failures never surface as exceptions to callers: they are
recorded on the step and reported. The errors below are the fatal tier
(phase errors) plus the errors raised by infrastructure adapters.
"""


class SkillforceError(Exception):
    """Base class for all Skillforce errors."""


class AgentPhaseError(SkillforceError):
    """Raised when a phase is entered without its prerequisites (goal, plan)."""


class SkillNotFoundError(SkillforceError):
    """Raised when a skill key cannot be resolved in the catalog."""

    def __init__(self, skill_key: str):
        super().__init__(f"Skill not found: {skill_key}")
        self.skill_key = skill_key


class MissingContextError(SkillforceError):
    """Raised when a skill requires context keys that are not present."""

    def __init__(self, skill_key: str, missing: list[str]):
        super().__init__(
            f"Skill {skill_key} is missing required context: {', '.join(missing)}"
        )
        self.skill_key = skill_key
        self.missing = missing


class ConfigurationError(SkillforceError):
    """Raised for invalid profile or catalog configuration."""


class SessionNotFoundError(SkillforceError):
    """Raised when an agent session id is unknown."""

    def __init__(self, session_id: str):
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id
