"""
Unit Tests for AgentFactory

Tests profile loading and the wiring of catalog, executor and engines.
"""

from pathlib import Path

import pytest
import yaml

from skillforce.application.factory import AgentFactory
from skillforce.core.domain.agent import AutonomousAgent
from skillforce.core.domain.errors import ConfigurationError
from skillforce.infrastructure.planning.keyword_planner import KeywordPlanningEngine
from skillforce.infrastructure.skills.catalog import InMemorySkillCatalog, YamlSkillCatalog
from skillforce.infrastructure.skills.executor import LocalSkillExecutor, TimeoutSkillExecutor
from skillforce.infrastructure.understanding.heuristic import HeuristicUnderstandingEngine

REPO_CONFIGS = Path(__file__).resolve().parents[3] / "configs"


def write_profile(config_dir: Path, name: str, data: dict) -> None:
    (config_dir / f"{name}.yaml").write_text(yaml.safe_dump(data))


@pytest.fixture
def memory_profile(tmp_path):
    write_profile(
        tmp_path,
        "test",
        {
            "agent": {
                "organization_id": "org-test",
                "user_id": "user-test",
                "max_questions": 2,
                "auto_execute": False,
                "initial_context": {"brand_tone": "formal"},
                "unknown_key": "ignored",
            },
            "catalog": {
                "type": "memory",
                "skills": [
                    {
                        "skill_key": "echo",
                        "handler": "skillforce.infrastructure.skills.builtin:echo",
                        "frontmatter": {"name": "Echo", "keywords": ["echo"]},
                    }
                ],
            },
            "planning": {"type": "keyword", "max_steps": 3},
        },
    )
    return tmp_path


class TestAgentFactoryProfiles:
    def test_creates_agent_from_dev_profile(self):
        agent = AgentFactory(config_dir=REPO_CONFIGS).create_agent(profile="dev")

        assert isinstance(agent, AutonomousAgent)
        assert agent.config.organization_id == "demo-org"
        assert agent.config.max_questions == 3
        assert isinstance(agent.skill_catalog, YamlSkillCatalog)
        assert agent.skill_catalog.path == REPO_CONFIGS / "skills.yaml"
        assert isinstance(agent.skill_executor, TimeoutSkillExecutor)
        assert agent.skill_executor.timeout_seconds == 30
        assert isinstance(agent.skill_executor.inner, LocalSkillExecutor)

    def test_prod_profile_disables_auto_execute(self):
        agent = AgentFactory(config_dir=REPO_CONFIGS).create_agent(profile="prod")
        assert agent.config.auto_execute is False

    @pytest.mark.parametrize("profile, expected", [("dev", False), ("prod", True)])
    def test_profile_json_logs(self, profile, expected):
        assert AgentFactory(config_dir=REPO_CONFIGS).profile_json_logs(profile) is expected

    def test_profile_without_logging_section(self, memory_profile):
        assert AgentFactory(config_dir=memory_profile).profile_json_logs("test") is False

    def test_missing_profile(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Profile not found"):
            AgentFactory(config_dir=tmp_path).create_agent(profile="nope")

    def test_profile_must_be_a_mapping(self, tmp_path):
        (tmp_path / "bad.yaml").write_text("- just\n- a list\n")
        with pytest.raises(ConfigurationError):
            AgentFactory(config_dir=tmp_path).create_agent(profile="bad")


class TestAgentFactoryWiring:
    def test_memory_catalog_and_engines(self, memory_profile):
        agent = AgentFactory(config_dir=memory_profile).create_agent(profile="test")

        assert isinstance(agent.skill_catalog, InMemorySkillCatalog)
        assert isinstance(agent.skill_executor, LocalSkillExecutor)
        assert isinstance(agent.understanding_engine, HeuristicUnderstandingEngine)
        assert agent.understanding_engine.max_questions == 2
        assert isinstance(agent.planning_engine, KeywordPlanningEngine)
        assert agent.planning_engine.max_steps == 3
        assert agent.config.auto_execute is False
        assert dict(agent.config.initial_context) == {"brand_tone": "formal"}

    def test_explicit_ids_and_overrides_win(self, memory_profile):
        agent = AgentFactory(config_dir=memory_profile).create_agent(
            profile="test",
            organization_id="org-x",
            user_id="user-x",
            overrides={"auto_execute": True, "show_progress": None},
        )

        assert agent.config.organization_id == "org-x"
        assert agent.config.user_id == "user-x"
        assert agent.config.auto_execute is True
        assert agent.config.show_progress is True
        assert agent.state.context["user_id"] == "user-x"

    def test_missing_identity_is_rejected(self, tmp_path):
        write_profile(tmp_path, "anon", {"catalog": {"type": "memory"}})
        with pytest.raises(ConfigurationError, match="organization_id, user_id"):
            AgentFactory(config_dir=tmp_path).create_agent(profile="anon")

    @pytest.mark.parametrize(
        "section, value",
        [
            ("catalog", {"type": "postgres"}),
            ("understanding", {"type": "llm"}),
            ("planning", {"type": "llm"}),
        ],
    )
    def test_unknown_component_types(self, tmp_path, section, value):
        write_profile(
            tmp_path,
            "odd",
            {"agent": {"organization_id": "o", "user_id": "u"}, section: value},
        )
        with pytest.raises(ConfigurationError):
            AgentFactory(config_dir=tmp_path).create_agent(profile="odd")

    @pytest.mark.asyncio
    async def test_created_agent_runs_end_to_end(self, memory_profile):
        agent = AgentFactory(config_dir=memory_profile).create_agent(
            profile="test", overrides={"auto_execute": True}
        )

        events = [event async for event in agent.run("Please echo this to the team")]

        assert events[-1].type.value == "complete"
        assert [s.skill_key for s in agent.state.executed_steps] == ["echo"]
        assert "echo" in agent.state.context
