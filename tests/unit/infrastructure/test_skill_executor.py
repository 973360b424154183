"""
Unit Tests for Skill Executors

Covers LocalSkillExecutor (handler lookup, required context, failure
results), the handler path resolver and the timeout wrapper.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from skillforce.core.domain.errors import ConfigurationError
from skillforce.core.domain.models import Skill, SkillResult
from skillforce.infrastructure.skills import builtin
from skillforce.infrastructure.skills.catalog import InMemorySkillCatalog
from skillforce.infrastructure.skills.executor import (
    LocalSkillExecutor,
    TimeoutSkillExecutor,
    resolve_handler,
)


@pytest.fixture
def catalog():
    return InMemorySkillCatalog(
        [
            Skill(skill_key="greet", category="demo", version=3),
            Skill(
                skill_key="leads.find",
                frontmatter={"requires_context": ["target"]},
                handler="skillforce.infrastructure.skills.builtin:find_leads",
            ),
            Skill(skill_key="orphan"),
        ]
    )


@pytest.fixture
def executor(catalog):
    return LocalSkillExecutor(catalog, handlers={"greet": lambda ctx: {"greeting": f"hi {ctx['name']}"}})


class TestLocalSkillExecutor:
    @pytest.mark.asyncio
    async def test_successful_execution(self, executor):
        result = await executor.execute_skill("greet", {"name": "Ada"})

        assert result.success is True
        assert result.output == {"greeting": "hi Ada"}
        assert result.error is None
        assert result.execution_id.startswith("skill-")
        assert result.completed_at >= result.started_at
        assert result.duration_ms >= 0
        assert result.metadata == {"skill_version": 3, "category": "demo"}

    @pytest.mark.asyncio
    async def test_async_handler(self, executor):
        async def handler(context):
            await asyncio.sleep(0)
            return {"async": True}

        executor.register("greet", handler)

        result = await executor.execute_skill("greet", {})
        assert result.output == {"async": True}

    @pytest.mark.asyncio
    async def test_handler_gets_a_copy_of_context(self, executor):
        def handler(context):
            context["leaked"] = True
            return None

        executor.register("greet", handler)
        context = {"name": "Ada"}

        await executor.execute_skill("greet", context)
        assert "leaked" not in context

    @pytest.mark.asyncio
    async def test_handler_resolved_from_catalog_path(self, executor):
        result = await executor.execute_skill("leads.find", {"target": "CFOs", "count": 2})

        assert result.success is True
        assert result.output["lead_count"] == 2

    @pytest.mark.asyncio
    async def test_missing_required_context(self, executor):
        result = await executor.execute_skill("leads.find", {"target": ""})

        assert result.success is False
        assert result.error == "Skill leads.find is missing required context: target"

    @pytest.mark.asyncio
    async def test_unknown_skill(self, executor):
        result = await executor.execute_skill("nope", {})

        assert result.success is False
        assert result.error == "Skill not found: nope"
        assert result.completed_at is not None

    @pytest.mark.asyncio
    async def test_skill_without_handler(self, executor):
        result = await executor.execute_skill("orphan", {})

        assert result.success is False
        assert result.error == "No handler registered for skill: orphan"

    @pytest.mark.asyncio
    async def test_handler_exception_becomes_failed_result(self, executor):
        def handler(context):
            raise ValueError("bad input")

        executor.register("greet", handler)

        result = await executor.execute_skill("greet", {})
        assert result.success is False
        assert result.error == "bad input"


class TestResolveHandler:
    def test_colon_path(self):
        assert resolve_handler("skillforce.infrastructure.skills.builtin:echo") is builtin.echo

    def test_dotted_path(self):
        assert resolve_handler("skillforce.infrastructure.skills.builtin.echo") is builtin.echo

    @pytest.mark.parametrize(
        "path",
        ["echo", "skillforce.missing_module:echo", "skillforce.infrastructure.skills.builtin:nope"],
    )
    def test_invalid_paths(self, path):
        with pytest.raises(ConfigurationError):
            resolve_handler(path)


class TestTimeoutSkillExecutor:
    @pytest.mark.asyncio
    async def test_passes_results_through(self):
        inner = AsyncMock()
        inner.execute_skill.return_value = SkillResult(success=True, skill_key="a", output=1)

        result = await TimeoutSkillExecutor(inner, 1).execute_skill("a", {"x": 1})

        assert result.output == 1
        inner.execute_skill.assert_awaited_once_with("a", {"x": 1})

    @pytest.mark.asyncio
    async def test_slow_skill_fails(self):
        async def slow(skill_key, context):
            await asyncio.sleep(1)

        inner = AsyncMock()
        inner.execute_skill.side_effect = slow

        result = await TimeoutSkillExecutor(inner, 0.01).execute_skill("slow", {})

        assert result.success is False
        assert result.skill_key == "slow"
        assert result.error == "Skill timed out after 0.01s"

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ConfigurationError):
            TimeoutSkillExecutor(AsyncMock(), 0)


class TestBuiltinHandlers:
    def test_find_leads_uses_count_and_industry(self):
        output = builtin.find_leads({"target": "CFOs", "count": 3, "industry": "saas"})

        assert output["lead_count"] == 3
        assert output["leads"][0] == {"name": "Lead 1", "segment": "saas CFOs"}

    def test_draft_outreach(self):
        output = builtin.draft_outreach({"target": "CFOs", "lead_count": 3})

        assert output["email_draft"]["subject"] == "Quick idea for CFOs"
        assert output["email_draft"]["tone"] == "friendly"
        assert output["email_draft"]["recipients"] == 3

    def test_summarize_context_skips_noise(self):
        output = builtin.summarize_context({"user_id": "u", "target": "CFOs", "count": 2, "leads": []})
        assert output == {"summary": "count=2; target=CFOs"}

    def test_echo(self):
        assert builtin.echo({"message": "ping"}) == {"echo": "ping"}
