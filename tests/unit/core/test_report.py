"""Unit tests for execution report generation."""

from skillforce.core.domain.models import (
    ExecutionPlan,
    PlannedStep,
    Skill,
    SkillGap,
    SkillResult,
    StepStatus,
)
from skillforce.core.domain.report import build_next_steps, generate_report, summarize


def _step(key: str, order: int, status: StepStatus, output=None) -> PlannedStep:
    step = PlannedStep(
        skill_key=key,
        skill=Skill(skill_key=key, frontmatter={"name": key.title()}),
        purpose=f"Do {key}",
        order=order,
        status=status,
    )
    if status == StepStatus.COMPLETED:
        step.result = SkillResult(success=True, skill_key=key, output=output)
    return step


class TestSummarize:
    """The four summary branches."""

    def test_success_without_gaps(self):
        assert summarize(2, []) == "Completed successfully! 2 action(s) executed."

    def test_success_with_gaps(self):
        gaps = [SkillGap(capability="Calendar")]
        assert summarize(3, gaps) == (
            "Partially complete. 3 action(s) done. 1 capability gap(s) identified."
        )

    def test_no_success_with_gaps(self):
        gaps = [SkillGap(capability="Calendar"), SkillGap(capability="CRM")]
        assert summarize(0, gaps) == (
            "Could not complete the request. Missing capabilities: Calendar, CRM"
        )

    def test_nothing_done(self):
        assert summarize(0, []) == "No actions were executed. Please try a different request."


class TestNextSteps:
    def test_gap_suggestion_or_default(self):
        gaps = [
            SkillGap(capability="Calendar", suggestion="Connect your calendar"),
            SkillGap(capability="CRM"),
        ]
        assert build_next_steps(gaps, []) == [
            "Connect your calendar",
            "Set up CRM to unlock this capability",
        ]

    def test_single_retry_hint_after_gaps(self):
        failed = [
            _step("a", 0, StepStatus.FAILED),
            _step("b", 1, StepStatus.FAILED),
        ]
        assert build_next_steps([SkillGap(capability="CRM")], failed) == [
            "Set up CRM to unlock this capability",
            "Retry failed steps: a, b",
        ]


class TestGenerateReport:
    def test_report_from_mixed_plan(self):
        done = _step("find", 0, StepStatus.COMPLETED, output={"leads": 3})
        failed = _step("email", 1, StepStatus.FAILED)
        quiet = _step("log", 2, StepStatus.COMPLETED, output=None)
        plan = ExecutionPlan(steps=[done, failed, quiet])

        report = generate_report([done, quiet], plan, [])

        assert report.accomplished == ["Find", "Log"]
        assert report.outputs == {"find": {"leads": 3}}
        assert report.next_steps == ["Retry failed steps: email"]
        assert report.success is True
        assert report.summary == "Completed successfully! 2 action(s) executed."

    def test_report_without_plan(self):
        report = generate_report([], None, [])

        assert report.accomplished == []
        assert report.next_steps == []
        assert report.success is False
        assert report.summary == "No actions were executed. Please try a different request."

    def test_report_keeps_gaps(self):
        gaps = [SkillGap(capability="Calendar")]
        report = generate_report([], ExecutionPlan(gaps=gaps), gaps)

        assert report.gaps == gaps
        assert report.summary == "Could not complete the request. Missing capabilities: Calendar"
