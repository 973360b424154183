"""Skillforce CLI entry point."""

from typing import Optional

import typer
from rich.console import Console

from skillforce.api.cli.commands import run, skills
from skillforce.application.settings import get_settings

app = typer.Typer(
    name="skillforce",
    help="Skillforce - goal-driven skill orchestrator",
    add_completion=True,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

app.command("run", help="Run the agent for a goal")(run.run_goal)
app.add_typer(skills.app, name="skills", help="Skill catalog")


@app.callback()
def main(
    ctx: typer.Context,
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="Configuration profile"),
    config_dir: Optional[str] = typer.Option(
        None, "--config-dir", help="Directory holding profile YAML files"
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug output"),
):
    """Skillforce Agent CLI."""
    settings = get_settings()
    ctx.obj = {
        "profile": profile or settings.profile,
        "config_dir": config_dir or settings.config_dir,
        "debug": debug or settings.debug,
        "json_logs": settings.json_logs,
        "organization_id": settings.organization_id,
        "user_id": settings.user_id,
    }


@app.command()
def version():
    """Show Skillforce version."""
    from skillforce import __version__

    console.print(f"[bold blue]Skillforce[/bold blue] version [cyan]{__version__}[/cyan]")


if __name__ == "__main__":
    app()
