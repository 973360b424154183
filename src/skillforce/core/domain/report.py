"""
Execution Report

Builds the terminal report of a turn from the executed steps, the plan and
the capability gaps.
"""

from collections.abc import Sequence
from typing import Any

from skillforce.core.domain.models import (
    ExecutionPlan,
    ExecutionReport,
    PlannedStep,
    SkillGap,
    StepStatus,
)


def build_next_steps(gaps: Sequence[SkillGap], failed_steps: Sequence[PlannedStep]) -> list[str]:
    """One suggestion per gap, then a single retry hint if any step failed."""
    next_steps = [
        gap.suggestion or f"Set up {gap.capability} to unlock this capability" for gap in gaps
    ]
    if failed_steps:
        next_steps.append(
            f"Retry failed steps: {', '.join(step.skill_key for step in failed_steps)}"
        )
    return next_steps


def summarize(completed_count: int, gaps: Sequence[SkillGap]) -> str:
    success = completed_count > 0
    if success and not gaps:
        return f"Completed successfully! {completed_count} action(s) executed."
    if success:
        return (
            f"Partially complete. {completed_count} action(s) done. "
            f"{len(gaps)} capability gap(s) identified."
        )
    if gaps:
        return (
            "Could not complete the request. Missing capabilities: "
            f"{', '.join(gap.capability for gap in gaps)}"
        )
    return "No actions were executed. Please try a different request."


def generate_report(
    executed_steps: Sequence[PlannedStep],
    plan: ExecutionPlan | None,
    gaps: Sequence[SkillGap],
) -> ExecutionReport:
    """
    Generate the execution report.

    Works with an empty or missing plan, which counts as zero completed and
    zero failed steps.

    Args:
        executed_steps: Steps that reached a terminal success, in order
        plan: Current plan, if one was created
        gaps: Capability gaps identified while planning

    Returns:
        ExecutionReport with accomplished names, outputs, next steps and summary
    """
    completed_steps = [s for s in executed_steps if s.status == StepStatus.COMPLETED]
    failed_steps = [s for s in plan.steps if s.status == StepStatus.FAILED] if plan else []

    outputs: dict[str, Any] = {}
    for step in completed_steps:
        if step.result is not None and step.result.output:
            outputs[step.skill_key] = step.result.output

    return ExecutionReport(
        accomplished=[step.display_name for step in completed_steps],
        outputs=outputs,
        gaps=list(gaps),
        next_steps=build_next_steps(gaps, failed_steps),
        success=len(completed_steps) > 0,
        summary=summarize(len(completed_steps), gaps),
    )
