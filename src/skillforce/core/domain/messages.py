"""
Conversation Message Builders

Factories for the messages the orchestrator appends to conversation history,
plus ``describe_payload`` which consumes the payload union exhaustively.
"""

from typing import Any

from skillforce.core.domain.models import (
    AgentMessage,
    ExecutionPlan,
    ExecutionReport,
    MessageType,
    PlannedStep,
    PlanPayload,
    ProgressPayload,
    QuestionPayload,
    ReportPayload,
    StepStatus,
    new_id,
)


def create_message(message_type: MessageType, content: str) -> AgentMessage:
    return AgentMessage(id=new_id(message_type.value), type=message_type, content=content)


def create_user_message(content: str) -> AgentMessage:
    return AgentMessage(id=new_id("user"), type=MessageType.INFO, content=content)


def create_plan_message(plan: ExecutionPlan) -> AgentMessage:
    """
    Render a plan as a ``plan`` message.

    Lists every step as ``N. <name>: <purpose>``, notes unavailable
    capabilities and closes with what the plan can accomplish.
    """
    steps_text = "\n".join(
        f"{index}. {step.display_name}: {step.purpose}"
        for index, step in enumerate(plan.steps, start=1)
    )
    gaps_text = ""
    if plan.gaps:
        capabilities = ", ".join(gap.capability for gap in plan.gaps)
        gaps_text = f"\n\n**Note:** {capabilities} not available yet."

    return AgentMessage(
        id=new_id("plan"),
        type=MessageType.PLAN,
        content=(
            f"Here's my plan:\n\n{steps_text}{gaps_text}"
            f"\n\n**I can accomplish:** {plan.can_accomplish}"
        ),
        payload=PlanPayload(plan=plan, gaps=tuple(plan.gaps)),
    )


def create_progress_message(step: PlannedStep, total_steps: int) -> AgentMessage:
    return AgentMessage(
        id=new_id("progress"),
        type=MessageType.PROGRESS,
        content=f"Running: {step.display_name}...",
        payload=ProgressPayload(
            skill_key=step.skill_key,
            skill_name=step.display_name,
            status=StepStatus.RUNNING,
            step_index=step.order,
            total_steps=total_steps,
        ),
    )


def create_report_message(report: ExecutionReport) -> AgentMessage:
    sections: list[str] = []
    if report.accomplished:
        sections.append("**Done:**\n" + "\n".join(f"✓ {item}" for item in report.accomplished))
    if report.gaps:
        sections.append(
            "**Needs setup:**\n" + "\n".join(f"⚠ {gap.capability}" for gap in report.gaps)
        )
    if report.next_steps:
        sections.append("**Next steps:**\n" + "\n".join(f"→ {s}" for s in report.next_steps))
    sections.append(report.summary)

    return AgentMessage(
        id=new_id("report"),
        type=MessageType.REPORT,
        content="\n\n".join(sections),
        payload=ReportPayload(report=report, gaps=tuple(report.gaps)),
    )


def create_question_message(
    text: str, question_field: str, options: tuple[str, ...] = ()
) -> AgentMessage:
    return AgentMessage(
        id=new_id("question"),
        type=MessageType.QUESTION,
        content=text,
        payload=QuestionPayload(question_field=question_field, options=options),
    )


def describe_payload(message: AgentMessage) -> dict[str, Any]:
    """
    Summarize a message payload for display or logging.

    Returns:
        A small dict whose keys depend on the payload variant
    """
    match message.payload:
        case QuestionPayload(question_field=question_field, options=options):
            return {"field": question_field, "options": list(options)}
        case PlanPayload(plan=plan, gaps=gaps):
            return {"steps": len(plan.steps), "gaps": [g.capability for g in gaps]}
        case ProgressPayload() as progress:
            return {
                "skill_key": progress.skill_key,
                "step": progress.step_index + 1,
                "total": progress.total_steps,
            }
        case ReportPayload(report=report):
            return {"success": report.success, "accomplished": len(report.accomplished)}
        case None:
            return {}
