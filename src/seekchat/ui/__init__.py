from .formatting import config_table, help_table, render_markdown, summaries_table

__all__ = [
    "config_table",
    "help_table",
    "render_markdown",
    "summaries_table",
]
