"""Text formatting utilities for the console.

Hides the details of markdown rendering and table layout.
"""

from collections.abc import Sequence

from rich.markdown import Markdown
from rich.table import Table

from ..config import AppConfig
from .config import COMMAND_COLUMN_WIDTH, COMMAND_HELP, CONFIG_KEY_COLUMN_WIDTH


def render_markdown(text: str) -> Markdown:
    """Render a reply as markdown."""
    return Markdown(text)


def help_table(version: str) -> Table:
    """Build the /help command table."""
    table = Table(show_header=True, header_style="bold cyan", title=f"seekchat {version}")
    table.add_column("Command", style="green", width=COMMAND_COLUMN_WIDTH)
    table.add_column("Description")
    for command, description in COMMAND_HELP:
        table.add_row(command, description)
    return table


def config_table(config: AppConfig) -> Table:
    """Build a two-column table of the current settings."""
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="blue", width=CONFIG_KEY_COLUMN_WIDTH)
    table.add_column("Value", style="green")
    for key, value in config.model_dump().items():
        table.add_row(key, str(value))
    return table


def summaries_table(files: Sequence[str]) -> Table:
    """Build the numbered list of summary files."""
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("File", style="cyan")
    for i, name in enumerate(files, 1):
        table.add_row(str(i), name)
    return table
