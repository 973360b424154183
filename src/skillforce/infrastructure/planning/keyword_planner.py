"""
Keyword Planning Engine

Rule-based implementation of ``PlanningEngineProtocol``.

A skill joins the plan when its terms (key parts, display name, keywords)
overlap the goal terms (goal statement plus ``action``/``target`` context).
Selected skills run in pipeline order: ``frontmatter.stage`` ascending, then
catalog order. Steps are numbered after sorting, so ``steps[i].order == i``
whatever order the catalog returned.

Capability gaps come from two sources:
- matching skills that exist but are inactive
- ``context["required_capabilities"]`` entries no active skill covers
"""

import re
from collections.abc import Iterable, Sequence
from typing import Any

import structlog

from skillforce.core.domain.models import (
    AgentGoal,
    ExecutionPlan,
    PlannedStep,
    PlanValidation,
    Skill,
    SkillGap,
)

_WORD = re.compile(r"[a-z][a-z0-9]+")
_STOPWORDS = {
    "the", "and", "for", "with", "about", "help", "please", "want", "need",
    "can", "you", "our", "my", "me", "some", "this", "that", "into", "from",
}
DEFAULT_STAGE = 100


def terms(text: str) -> set[str]:
    """Lowercase words of three or more characters, minus stopwords."""
    return {
        _stem(word)
        for word in _WORD.findall(text.lower())
        if len(word) >= 3 and word not in _STOPWORDS
    }


def _stem(word: str) -> str:
    # crude plural folding: leads -> lead, emails -> email
    if len(word) > 4 and word.endswith("s") and not word.endswith("ss"):
        return word[:-1]
    return word


def skill_terms(skill: Skill) -> set[str]:
    parts: list[str] = [skill.skill_key.replace(".", " ").replace("_", " "), skill.display_name]
    parts.extend(str(keyword) for keyword in skill.keywords)
    return terms(" ".join(parts))


class KeywordPlanningEngine:
    """Keyword-overlap planner with pipeline ordering and gap detection."""

    def __init__(self, max_steps: int = 5, min_score: int = 1):
        self.max_steps = max_steps
        self.min_score = min_score
        self.logger = structlog.get_logger().bind(component="keyword_planner")

    async def create_plan(
        self,
        *,
        goal: AgentGoal,
        available_skills: Sequence[Skill],
        context: dict[str, Any],
    ) -> ExecutionPlan:
        goal_terms = terms(
            " ".join(
                [goal.goal_statement]
                + [str(context[key]) for key in ("action", "target") if context.get(key)]
            )
        )

        matched: list[tuple[int, Skill]] = []
        gaps: list[SkillGap] = []
        for index, skill in enumerate(available_skills):
            score = len(goal_terms & skill_terms(skill))
            if score < self.min_score:
                continue
            if skill.is_active:
                matched.append((index, skill))
            else:
                gaps.append(
                    SkillGap(
                        capability=skill.display_name,
                        suggestion=f"Activate the {skill.display_name} skill",
                    )
                )

        matched.sort(key=lambda item: (self._stage(item[1]), item[0]))
        selected = [skill for _, skill in matched[: self.max_steps]]

        steps = [
            PlannedStep(
                skill_key=skill.skill_key,
                skill=skill,
                purpose=skill.description or f"Run {skill.display_name}",
                order=order,
                input_context=dict(skill.frontmatter.get("defaults") or {}),
            )
            for order, skill in enumerate(selected)
        ]

        gaps.extend(
            self._capability_gaps(context.get("required_capabilities") or [], available_skills, gaps)
        )

        plan = ExecutionPlan(
            steps=steps,
            gaps=gaps,
            can_accomplish=self._can_accomplish(steps, gaps),
        )
        self.logger.debug(
            "plan_built",
            goal_terms=sorted(goal_terms),
            steps=[step.skill_key for step in steps],
            gaps=[gap.capability for gap in gaps],
        )
        return plan

    def validate_plan(self, plan: ExecutionPlan) -> PlanValidation:
        issues: list[str] = []

        for index, step in enumerate(plan.steps):
            if step.order != index:
                issues.append(f"Step {step.skill_key} has order {step.order}, expected {index}")
            if not step.purpose.strip():
                issues.append(f"Step {step.skill_key} has no purpose")
            if not step.skill.is_active:
                issues.append(f"Step {step.skill_key} uses an inactive skill")

        seen: set[str] = set()
        for step in plan.steps:
            if step.skill_key in seen:
                issues.append(f"Duplicate step for skill {step.skill_key}")
            seen.add(step.skill_key)

        if not plan.steps and not plan.gaps:
            issues.append("Plan has no steps and no identified gaps")

        return PlanValidation(valid=not issues, issues=issues)

    def _capability_gaps(
        self,
        capabilities: Iterable[str],
        available_skills: Sequence[Skill],
        existing: Sequence[SkillGap],
    ) -> list[SkillGap]:
        known = {gap.capability.lower() for gap in existing}
        gaps: list[SkillGap] = []
        for capability in capabilities:
            if capability.lower() in known:
                continue
            wanted = terms(capability)
            providers = [
                skill
                for skill in available_skills
                if skill.category.lower() == capability.lower() or wanted & skill_terms(skill)
            ]
            if any(skill.is_active for skill in providers):
                continue
            if providers:
                suggestion = f"Activate the {providers[0].display_name} skill"
            else:
                suggestion = f"Add a skill that provides {capability}"
            gaps.append(SkillGap(capability=capability, suggestion=suggestion))
            known.add(capability.lower())
        return gaps

    @staticmethod
    def _stage(skill: Skill) -> int:
        try:
            return int(skill.frontmatter.get("stage", DEFAULT_STAGE))
        except (TypeError, ValueError):
            return DEFAULT_STAGE

    @staticmethod
    def _can_accomplish(steps: Sequence[PlannedStep], gaps: Sequence[SkillGap]) -> str:
        if not steps:
            return "Nothing yet with the skills currently available."
        names = ", ".join(step.display_name for step in steps)
        if gaps:
            return f"{names} ({len(gaps)} capability gap(s) remain)"
        return names
