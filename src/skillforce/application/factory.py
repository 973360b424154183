"""
Application Layer - Agent Factory

Dependency injection factory creating ``AutonomousAgent`` instances wired
with infrastructure adapters chosen by a configuration profile.

Key Responsibilities:
- Load configuration profiles (``configs/<profile>.yaml``)
- Build the immutable ``AgentConfig`` (profile values, then explicit overrides)
- Instantiate the skill catalog, executor (optionally timeout-wrapped),
  understanding engine and planning engine
- Wire everything into the core domain agent
"""

from pathlib import Path
from typing import Any, Optional

import structlog
import yaml

from skillforce.core.domain.agent import AutonomousAgent
from skillforce.core.domain.errors import ConfigurationError
from skillforce.core.domain.models import AgentConfig
from skillforce.core.interfaces.planning import PlanningEngineProtocol
from skillforce.core.interfaces.skills import SkillCatalogProtocol, SkillExecutorProtocol
from skillforce.core.interfaces.understanding import UnderstandingEngineProtocol
from skillforce.infrastructure.planning.keyword_planner import KeywordPlanningEngine
from skillforce.infrastructure.skills.catalog import (
    InMemorySkillCatalog,
    YamlSkillCatalog,
    skill_from_dict,
)
from skillforce.infrastructure.skills.executor import LocalSkillExecutor, TimeoutSkillExecutor
from skillforce.infrastructure.understanding.heuristic import HeuristicUnderstandingEngine

_AGENT_CONFIG_KEYS = (
    "organization_id",
    "user_id",
    "max_questions",
    "confidence_threshold",
    "auto_execute",
    "show_progress",
    "initial_context",
)


class AgentFactory:
    """
    Factory for creating agents with dependency injection.

    Example:
        >>> factory = AgentFactory(config_dir="configs")
        >>> agent = factory.create_agent(profile="dev", user_id="u-42")
    """

    def __init__(self, config_dir: str | Path = "configs"):
        """
        Initialize AgentFactory with configuration directory.

        Args:
            config_dir: Path to directory containing profile YAML files
        """
        self.config_dir = Path(config_dir)
        self.logger = structlog.get_logger().bind(component="agent_factory")

    def create_agent(
        self,
        profile: str = "dev",
        organization_id: Optional[str] = None,
        user_id: Optional[str] = None,
        overrides: Optional[dict[str, Any]] = None,
    ) -> AutonomousAgent:
        """
        Create an agent from a profile.

        Args:
            profile: Configuration profile name (dev/prod/...)
            organization_id: Overrides ``agent.organization_id``
            user_id: Overrides ``agent.user_id``
            overrides: Further ``agent`` section overrides (e.g. auto_execute)

        Returns:
            AutonomousAgent with injected collaborators

        Raises:
            FileNotFoundError: If the profile YAML is not found
            ConfigurationError: If the profile is invalid
        """
        config = self._load_profile(profile)
        agent_config = self._create_agent_config(
            config, organization_id=organization_id, user_id=user_id, overrides=overrides
        )

        self.logger.info(
            "creating_agent",
            profile=profile,
            organization_id=agent_config.organization_id,
            auto_execute=agent_config.auto_execute,
        )

        catalog = self._create_catalog(config)
        return AutonomousAgent(
            config=agent_config,
            skill_catalog=catalog,
            skill_executor=self._create_executor(config, catalog),
            understanding_engine=self._create_understanding_engine(config, agent_config),
            planning_engine=self._create_planning_engine(config),
        )

    def profile_json_logs(self, profile: str) -> bool:
        """
        Whether the profile asks for JSON logs (``logging.json``).

        Raises:
            FileNotFoundError: If the profile YAML is not found
        """
        logging_config = self._load_profile(profile).get("logging") or {}
        return bool(logging_config.get("json", False))

    def _load_profile(self, profile: str) -> dict:
        """
        Load configuration profile from YAML file.

        Raises:
            FileNotFoundError: If profile YAML not found
        """
        profile_path = self.config_dir / f"{profile}.yaml"

        if not profile_path.exists():
            self.logger.error(
                "profile_not_found",
                profile=profile,
                path=str(profile_path),
                hint="Ensure profile YAML exists in configs directory",
            )
            raise FileNotFoundError(f"Profile not found: {profile_path}")

        with open(profile_path, encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}

        if not isinstance(config, dict):
            raise ConfigurationError(f"Profile {profile_path} must be a mapping")

        self.logger.debug("profile_loaded", profile=profile, path=str(profile_path))
        return config

    def _create_agent_config(
        self,
        config: dict,
        organization_id: Optional[str] = None,
        user_id: Optional[str] = None,
        overrides: Optional[dict[str, Any]] = None,
    ) -> AgentConfig:
        values = {key: value for key, value in (config.get("agent") or {}).items() if key in _AGENT_CONFIG_KEYS}
        values.update({k: v for k, v in (overrides or {}).items() if k in _AGENT_CONFIG_KEYS and v is not None})
        if organization_id:
            values["organization_id"] = organization_id
        if user_id:
            values["user_id"] = user_id

        missing = [key for key in ("organization_id", "user_id") if not values.get(key)]
        if missing:
            raise ConfigurationError(f"Agent config is missing: {', '.join(missing)}")

        return AgentConfig(**values)

    def _create_catalog(self, config: dict) -> SkillCatalogProtocol:
        catalog_config = config.get("catalog") or {}
        catalog_type = catalog_config.get("type", "yaml")

        if catalog_type == "yaml":
            path = Path(catalog_config.get("path", "skills.yaml"))
            if not path.is_absolute():
                path = self.config_dir / path
            return YamlSkillCatalog(path)

        if catalog_type == "memory":
            return InMemorySkillCatalog(
                skill_from_dict(entry) for entry in catalog_config.get("skills", [])
            )

        raise ConfigurationError(f"Unknown catalog type: {catalog_type}")

    def _create_executor(
        self, config: dict, catalog: SkillCatalogProtocol
    ) -> SkillExecutorProtocol:
        executor_config = config.get("executor") or {}
        executor: SkillExecutorProtocol = LocalSkillExecutor(catalog)

        timeout = executor_config.get("timeout_seconds")
        if timeout:
            executor = TimeoutSkillExecutor(executor, float(timeout))
        return executor

    def _create_understanding_engine(
        self, config: dict, agent_config: AgentConfig
    ) -> UnderstandingEngineProtocol:
        engine_type = (config.get("understanding") or {}).get("type", "heuristic")
        if engine_type != "heuristic":
            raise ConfigurationError(f"Unknown understanding engine: {engine_type}")
        return HeuristicUnderstandingEngine(
            max_questions=agent_config.max_questions,
            confidence_threshold=agent_config.confidence_threshold,
        )

    def _create_planning_engine(self, config: dict) -> PlanningEngineProtocol:
        planning_config = config.get("planning") or {}
        engine_type = planning_config.get("type", "keyword")
        if engine_type != "keyword":
            raise ConfigurationError(f"Unknown planning engine: {engine_type}")
        return KeywordPlanningEngine(max_steps=int(planning_config.get("max_steps", 5)))
