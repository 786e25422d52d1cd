"""Main CLI application using Typer."""
import asyncio
import os
from pathlib import Path

import typer
from rich.console import Console

from ..chat import ChatSession, SessionContext
from ..config import ConfigStore, get_api_key, load_secrets
from ..errors import SeekChatError
from ..ui import config_table, summaries_table
from ..ui.config import LogLevel
from .providers import configure_logging, get_transport, restart_process
from .repl import CommandInterpreter, setup_completion

# Create Typer app
app = typer.Typer(
    name="seekchat",
    help="Interactive terminal chat for DeepSeek-compatible APIs",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()

CONFIG_ENV = "SEEKCHAT_CONFIG"


def _config_option() -> Path:
    return typer.Option(
        Path(os.getenv(CONFIG_ENV, "config.json")),
        "--config",
        "-c",
        help=f"Configuration file (default: ${CONFIG_ENV} or ./config.json)",
    )


def _load_store(path: Path) -> ConfigStore:
    store = ConfigStore(path)
    store.load()
    if store.created:
        console.print(f"[green]Created configuration file {path}[/green]")
    return store


@app.command()
def chat(
    config_path: Path = _config_option(),
    log_level: str = typer.Option(
        "warning",
        "--log-level",
        "-l",
        help=f"Log level: {', '.join(LogLevel.names())}",
    ),
    resume: int | None = typer.Option(
        None,
        "--resume",
        "-r",
        help="Start from a saved summary (index as shown by `seekchat summaries`)",
    ),
):
    """Start an interactive chat session."""
    load_secrets()
    configure_logging(log_level, console)
    store = _load_store(config_path)
    Path(store.config.summary_dir).expanduser().mkdir(parents=True, exist_ok=True)

    context = SessionContext(config_store=store, console=console)
    session = ChatSession(context, transport_factory=get_transport)
    interpreter = CommandInterpreter(session, restart=restart_process)

    if resume is not None:
        try:
            loaded = context.summary_store().load(resume)
        except SeekChatError as e:
            console.print(f"Error: {e}", style="red", markup=False)
            raise typer.Exit(code=1)
        context.history.replace(loaded.turns)
        console.print(f"Resumed '{loaded.title}' with {len(loaded.turns)} turns", style="blue", markup=False)

    initial = None
    if get_api_key() is None:
        console.print("[yellow]No API key found in the environment or .env[/yellow]")
        initial = interpreter.api_key_prompt(restart=False)

    async def _chat():
        try:
            await interpreter.run(initial)
        finally:
            await session.close()

    setup_completion()
    console.print(f"[bold cyan]{store.config.app_name} chat started[/bold cyan]", highlight=False)
    console.print("[dim]Type /help for commands, /exit to leave[/dim]\n")
    try:
        asyncio.run(_chat())
    except KeyboardInterrupt:
        console.print("\n[dim]Goodbye![/dim]")


@app.command()
def config(config_path: Path = _config_option()):
    """Show the current configuration."""
    store = _load_store(config_path)
    console.print(config_table(store.config))


@app.command()
def summaries(config_path: Path = _config_option()):
    """List saved conversation summaries."""
    store = _load_store(config_path)
    context = SessionContext(config_store=store, console=console)
    files = context.summary_store().list_files()
    if not files:
        console.print("[yellow]No summary files found[/yellow]")
        return
    console.print(summaries_table(files))


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
