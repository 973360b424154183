"""Skills command - Inspect the skill catalog of a profile."""

import asyncio

import typer

from skillforce.api.cli.output_formatter import SkillforceConsole
from skillforce.application.factory import AgentFactory
from skillforce.core.domain.errors import ConfigurationError
from skillforce.infrastructure.logging import configure_logging

app = typer.Typer(help="Skill catalog")


@app.command("list")
def list_skills(
    ctx: typer.Context,
    include_inactive: bool = typer.Option(
        True, "--all/--active-only", help="Include inactive skills"
    ),
):
    """List the skills available to the profile's organization."""
    opts = ctx.obj or {}
    profile = opts.get("profile", "dev")
    sf_console = SkillforceConsole(debug=opts.get("debug", False))

    factory = AgentFactory(config_dir=opts.get("config_dir", "configs"))
    try:
        configure_logging(
            debug=opts.get("debug", False),
            json_logs=opts.get("json_logs", False) or factory.profile_json_logs(profile),
        )
        agent = factory.create_agent(
            profile=profile,
            organization_id=opts.get("organization_id"),
            user_id=opts.get("user_id"),
        )
        skills = asyncio.run(
            agent.skill_catalog.list_skills(agent.config.organization_id, include_inactive)
        )
    except (FileNotFoundError, ConfigurationError) as e:
        sf_console.print_error(str(e))
        raise typer.Exit(1)

    sf_console.print_skills(skills)
