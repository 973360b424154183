"""
Console output for the Skillforce CLI.

Renders agent events, messages and skill listings with rich.
"""

from collections.abc import Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from skillforce.core.domain.events import AgentEvent, EventType
from skillforce.core.domain.messages import describe_payload
from skillforce.core.domain.models import AgentMessage, MessageType, Skill

_MESSAGE_STYLES = {
    MessageType.INFO: ("Agent", "blue"),
    MessageType.QUESTION: ("Question", "yellow"),
    MessageType.PLAN: ("Plan", "cyan"),
    MessageType.PROGRESS: ("Progress", "white"),
    MessageType.REPORT: ("Report", "green"),
}


class SkillforceConsole:
    """Rich console wrapper used by the CLI commands."""

    def __init__(self, debug: bool = False, console: Console | None = None):
        self.debug = debug
        self.console = console or Console()

    def print_banner(self, profile: str) -> None:
        self.console.print(
            Text.assemble(("Skillforce", "bold blue"), "  profile: ", (profile, "cyan"))
        )

    def print_event(self, event: AgentEvent) -> None:
        """Print one streamed event; structural events only show in debug mode."""
        match event.type:
            case EventType.MESSAGE if event.message is not None:
                self.print_message(event.message)
                self.print_debug(f"payload: {describe_payload(event.message)}")
            case EventType.STEP_FAILED if event.step is not None:
                self.print_warning(f"{event.step.display_name} failed: {event.error}")
            case EventType.ERROR:
                self.print_error(event.error or "Unknown error")
            case EventType.PHASE_CHANGE if self.debug and event.phase is not None:
                self.print_debug(f"phase -> {event.phase.value}")
            case EventType.STEP_COMPLETE if self.debug and event.step is not None:
                self.print_debug(f"{event.step.skill_key} completed")
            case _:
                pass

    def print_message(self, message: AgentMessage) -> None:
        if message.type == MessageType.PROGRESS:
            self.console.print(Text(message.content, style="dim"))
            return
        title, style = _MESSAGE_STYLES[message.type]
        self.console.print(
            Panel(Text(message.content), title=title, border_style=style, title_align="left")
        )

    def print_options(self, options: Sequence[str]) -> None:
        for index, option in enumerate(options, start=1):
            self.console.print(f"  [cyan]{index}.[/cyan] {option}")

    def print_skills(self, skills: Sequence[Skill]) -> None:
        table = Table(title="Available Skills")
        table.add_column("Key", style="cyan", no_wrap=True)
        table.add_column("Name", style="white")
        table.add_column("Category", style="magenta")
        table.add_column("Active", justify="center")
        table.add_column("Description", style="white")

        for skill in skills:
            table.add_row(
                skill.skill_key,
                skill.display_name,
                skill.category,
                "yes" if skill.is_active else "no",
                skill.description,
            )

        self.console.print(table)

    def print_warning(self, text: str) -> None:
        self.console.print(Text(text, style="yellow"))

    def print_error(self, text: str) -> None:
        self.console.print(Text(f"Error: {text}", style="bold red"))

    def print_debug(self, text: str) -> None:
        if self.debug:
            self.console.print(Text(text, style="dim"))
