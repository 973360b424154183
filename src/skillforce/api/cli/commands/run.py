"""Run command - Drive the agent for a goal, answering its questions interactively."""

import asyncio
from collections.abc import AsyncIterator
from typing import Optional

import typer

from skillforce.api.cli.output_formatter import SkillforceConsole
from skillforce.application.factory import AgentFactory
from skillforce.core.domain.agent import AutonomousAgent
from skillforce.core.domain.errors import ConfigurationError
from skillforce.core.domain.events import AgentEvent, EventType
from skillforce.core.domain.models import AgentMessage, MessageType, QuestionPayload, StepStatus
from skillforce.infrastructure.logging import configure_logging


def run_goal(
    ctx: typer.Context,
    goal: str = typer.Argument(..., help="What you want to accomplish"),
    auto_execute: Optional[bool] = typer.Option(
        None,
        "--auto-execute/--no-auto-execute",
        help="Execute the plan right away (default from profile)",
    ),
    user_id: Optional[str] = typer.Option(None, "--user-id", help="Acting user"),
    org_id: Optional[str] = typer.Option(None, "--org-id", help="Organization whose skills are used"),
):
    """Run the agent for a goal.

    Examples:
        # Plan and execute right away
        skillforce run "Help me reach out to 50 SaaS leads"

        # Review the plan before executing
        skillforce --profile prod run "Find fintech leads" --no-auto-execute
    """
    opts = ctx.obj or {}
    profile = opts.get("profile", "dev")
    debug = opts.get("debug", False)

    sf_console = SkillforceConsole(debug=debug)
    sf_console.print_banner(profile)

    overrides = {"auto_execute": auto_execute} if auto_execute is not None else None
    factory = AgentFactory(config_dir=opts.get("config_dir", "configs"))
    try:
        configure_logging(
            debug=debug,
            json_logs=opts.get("json_logs", False) or factory.profile_json_logs(profile),
        )
        agent = factory.create_agent(
            profile=profile,
            organization_id=org_id or opts.get("organization_id"),
            user_id=user_id or opts.get("user_id"),
            overrides=overrides,
        )
    except (FileNotFoundError, ConfigurationError) as e:
        sf_console.print_error(str(e))
        raise typer.Exit(1)

    asyncio.run(_drive(agent, goal, sf_console))

    if agent.get_state().error:
        raise typer.Exit(1)


async def _drive(agent: AutonomousAgent, goal: str, sf_console: SkillforceConsole) -> None:
    question = await _consume(agent.run(goal), sf_console)
    while question is not None:
        answer = _ask(question, sf_console)
        question = await _consume(agent.respond(question.id, answer), sf_console)

    state = agent.get_state()
    pending = (
        state.plan is not None
        and any(step.status == StepStatus.PENDING for step in state.plan.steps)
    )
    if state.error or not pending:
        return

    if typer.confirm("Execute this plan?", default=True):
        await _consume(agent.execute(), sf_console)
    else:
        sf_console.print_warning("Plan not executed.")


async def _consume(
    events: AsyncIterator[AgentEvent], sf_console: SkillforceConsole
) -> AgentMessage | None:
    """Print a stream of events; return the question it ended on, if any."""
    question = None
    async for event in events:
        sf_console.print_event(event)
        if (
            event.type == EventType.MESSAGE
            and event.message is not None
            and event.message.type == MessageType.QUESTION
        ):
            question = event.message
        elif event.type == EventType.COMPLETE:
            question = None
    return question


def _ask(question: AgentMessage, sf_console: SkillforceConsole) -> str:
    options: tuple[str, ...] = ()
    if isinstance(question.payload, QuestionPayload):
        options = question.payload.options
    if options:
        sf_console.print_options(options)

    answer = typer.prompt("Your answer").strip()
    # A bare number picks the listed option
    if answer.isdigit() and 1 <= int(answer) <= len(options):
        return options[int(answer) - 1]
    return answer
