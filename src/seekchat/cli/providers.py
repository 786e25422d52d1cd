"""Factory and process helpers for the CLI.

Centralizes creation of the transport and the process-level side effects
(logging setup, restart) so command implementations stay testable.
"""

import logging
import os
import sys

from rich.console import Console
from rich.logging import RichHandler

from ..chat import SessionContext
from ..config import get_api_key
from ..llm import ChatTransport, create_transport
from ..ui.config import LogLevel


def get_transport(context: SessionContext) -> ChatTransport:
    """Create the chat transport from the environment and current settings.

    Environment variables:
        DEEPSEEK_API_KEY: DeepSeek API key (loaded from .env at startup)
    """
    return create_transport(
        "deepseek",
        api_key=get_api_key(),
        endpoint=context.config.api_endpoint,
    )


def configure_logging(level: str, console: Console) -> None:
    """Route library logging through Rich at the requested level."""
    logging.basicConfig(
        level=LogLevel.from_string(level),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, rich_tracebacks=True)],
        force=True,
    )
    # Keep SDK request chatter out of the conversation unless asked for
    for name in ("httpx", "openai"):
        logging.getLogger(name).setLevel(max(LogLevel.from_string(level), logging.WARNING))


def restart_process() -> None:
    """Replace the current process with a fresh run of the same command."""
    sys.stdout.flush()
    os.execv(sys.executable, sys.orig_argv)
