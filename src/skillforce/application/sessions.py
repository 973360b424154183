"""
Application Layer - Agent Sessions

Keeps live ``AutonomousAgent`` instances addressable by session id so that a
suspended conversation can be resumed by a later request (API) or prompt
(CLI). Sessions live in process memory only.
"""

from typing import Any, Optional

import structlog

from skillforce.application.factory import AgentFactory
from skillforce.core.domain.agent import AutonomousAgent
from skillforce.core.domain.errors import SessionNotFoundError


class AgentSessionManager:
    """
    Registry of agents keyed by their current session id.

    Example:
        >>> sessions = AgentSessionManager(AgentFactory("configs"))
        >>> agent = sessions.create(profile="dev")
        >>> sessions.get(agent.state.session_id) is agent
        True
    """

    def __init__(self, factory: Optional[AgentFactory] = None):
        self.factory = factory or AgentFactory()
        self._agents: dict[str, AutonomousAgent] = {}
        self.logger = structlog.get_logger().bind(component="session_manager")

    def create(
        self,
        profile: str = "dev",
        organization_id: Optional[str] = None,
        user_id: Optional[str] = None,
        overrides: Optional[dict[str, Any]] = None,
    ) -> AutonomousAgent:
        """Create an agent from a profile and register it under its session id."""
        agent = self.factory.create_agent(
            profile=profile,
            organization_id=organization_id,
            user_id=user_id,
            overrides=overrides,
        )
        self._agents[agent.state.session_id] = agent
        self.logger.info("session_created", session_id=agent.state.session_id, profile=profile)
        return agent

    def get(self, session_id: str) -> AutonomousAgent:
        """
        Look up a live agent.

        Raises:
            SessionNotFoundError: If no agent is registered under the id
        """
        agent = self._agents.get(session_id)
        if agent is None:
            raise SessionNotFoundError(session_id)
        return agent

    def reset(self, session_id: str) -> AutonomousAgent:
        """Reset an agent; it is re-registered under its new session id."""
        agent = self._agents.pop(session_id, None)
        if agent is None:
            raise SessionNotFoundError(session_id)
        agent.reset()
        self._agents[agent.state.session_id] = agent
        self.logger.info(
            "session_reset", previous_session_id=session_id, session_id=agent.state.session_id
        )
        return agent

    def remove(self, session_id: str) -> None:
        if self._agents.pop(session_id, None) is None:
            raise SessionNotFoundError(session_id)
        self.logger.info("session_removed", session_id=session_id)

    def list_sessions(self) -> list[str]:
        return list(self._agents)
