"""
Display utilities for CLI using Rich library.

Provides:
- Themed console output
- Proposed action tables
- Suggestion lists and history
"""

from typing import List, Optional

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

from lifesync.conversation.actions import CandidateAction
from lifesync.conversation.context import ConversationTurn

LIFESYNC_THEME = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "red bold",
        "success": "green bold",
        "agent": "blue bold",
        "user": "magenta bold",
        "emotional": "magenta",
        "neutral": "dim",
        "action": "cyan",
    }
)

ACTION_ICONS = {
    "task": "📝",
    "calendar": "📅",
    "goal": "🎯",
    "mood": "💭",
}


class LifeSyncDisplay:
    """Rich-based display manager for the LifeSync CLI."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(theme=LIFESYNC_THEME)

    def clear(self):
        self.console.clear()

    def print_banner(self):
        banner = """
╔══════════════════════════════════════════════════════════════════╗
║                       🌱 LIFESYNC                                ║
║              Your tasks, calendar, goals and mood                ║
╚══════════════════════════════════════════════════════════════════╝
        """
        self.console.print(
            Panel(
                Text(banner.strip(), justify="center"),
                style="bold green",
                border_style="green",
            )
        )

    def print_help(self):
        help_text = """
[bold]Talk to LifeSync:[/bold]
  • Just type how your day is going or what you need to do
  • [cyan]yes[/cyan] / [cyan]ok[/cyan] - Save the proposed action
  • [cyan]no[/cyan] / [cyan]skip[/cyan] - Skip the proposed action

[bold]General:[/bold]
  • [cyan]history[/cyan] - Show this conversation
  • [cyan]reset[/cyan] - Forget the conversation and pending actions
  • [cyan]help[/cyan] - Show this help
  • [cyan]quit[/cyan] / [cyan]exit[/cyan] - Exit the application
        """
        self.console.print(Panel(help_text.strip(), title="Help", border_style="dim"))

    def print_agent(self, message: str, mode: Optional[str] = None):
        """Print agent message, titled with the conversation mode when known."""
        title = "🤖 LifeSync"
        if mode:
            title += f" [{mode}]({mode})[/{mode}]"
        self.console.print()
        self.console.print(
            Panel(
                Markdown(message),
                title=title,
                title_align="left",
                border_style="blue",
                padding=(1, 2),
            )
        )

    def print_user_prompt(self) -> str:
        self.console.print()
        return self.console.input("[magenta bold]You:[/magenta bold] ")

    def print_actions(self, actions: List[CandidateAction]):
        """Table of the actions proposed this turn."""
        if not actions:
            return

        table = Table(title="Proposed actions", show_header=True, header_style="bold")
        table.add_column("", width=2)
        table.add_column("Type", style="action")
        table.add_column("Title")
        table.add_column("When", style="dim")

        for action in actions:
            payload = action.payload
            title = getattr(payload, "title", None) or getattr(payload, "mood", "")
            when = ""
            if hasattr(payload, "start_time"):
                when = f"{payload.date.isoformat()} {payload.start_time}-{payload.end_time}"
            elif getattr(payload, "time", None):
                when = payload.time
            elif hasattr(payload, "target_date"):
                when = f"by {payload.target_date.isoformat()}"
            table.add_row(ACTION_ICONS.get(action.type, "•"), action.type, str(title), when)

        self.console.print(table)

    def print_suggestions(self, suggestions: List[str]):
        if not suggestions:
            return
        lines = "\n".join(f"  • {s}" for s in suggestions)
        self.console.print(Panel(lines, title="💡 Suggestions", border_style="dim"))

    def print_history(self, turns: List[ConversationTurn]):
        if not turns:
            self.print_info("No conversation yet")
            return

        table = Table(title="Conversation history", show_header=True, header_style="bold")
        table.add_column("Time", style="dim", width=8)
        table.add_column("Mode")
        table.add_column("You", style="user")
        table.add_column("LifeSync")

        for turn in turns:
            reply = turn.reply or ""
            if len(reply) > 60:
                reply = reply[:57] + "..."
            table.add_row(
                turn.timestamp.strftime("%H:%M:%S"),
                f"[{turn.mode.value}]{turn.mode.value}[/{turn.mode.value}]",
                turn.input_text,
                reply,
            )
        self.console.print(table)

    def print_error(self, message: str):
        self.console.print(
            Panel(f"[error]{message}[/error]", title="❌ Error", border_style="red")
        )

    def print_warning(self, message: str):
        self.console.print(f"[warning]⚠️ {message}[/warning]")

    def print_success(self, message: str):
        self.console.print(f"[success]✅ {message}[/success]")

    def print_info(self, message: str):
        self.console.print(f"[info]ℹ️ {message}[/info]")
