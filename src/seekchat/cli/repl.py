"""Interactive command loop.

The loop is an explicit state machine: the state is the Prompt currently
waiting for a line. Handlers return the next Prompt (a confirmation, a
parameter entry, a retry of themselves) or None to go back to the main
prompt. Any prompt accepts a slash command, which abandons the pending flow
and dispatches the command instead.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from functools import partial
from pathlib import Path

from .. import __version__
from ..chat import ChatSession
from ..config import MODEL_VARIANTS, TEMPERATURE_RANGE, is_valid_api_key, is_valid_endpoint, save_api_key
from ..errors import MissingFileError, SeekChatError, StorageError, TransportError, ValidationError
from ..prompts import upload_prompt
from ..ui import config_table, help_table, summaries_table
from ..ui.config import COMPLETIONS, UPLOAD_PREVIEW_LENGTH

try:
    import readline
except ImportError:
    readline = None  # type: ignore[assignment]  # Windows fallback

logger = logging.getLogger(__name__)

COMMAND_MARKER = "/"
CONFIRM_WORD = "yes"

InputFn = Callable[[str], str]


@dataclass
class Prompt:
    """A pending request for one line of input."""

    message: str
    handler: Callable[[str], Awaitable["Prompt | None"]]


def setup_completion() -> None:
    """Set up tab completion for slash commands."""
    if readline is None:
        return

    def completer(text: str, state: int) -> str | None:
        buffer = readline.get_line_buffer()
        matches = [cmd for cmd in COMPLETIONS if cmd.startswith(buffer)] if buffer.startswith("/") else []
        # Completion replaces only the word under the cursor
        offset = len(buffer) - len(text)
        candidates = [m[offset:] for m in matches]
        return candidates[state] if state < len(candidates) else None

    readline.set_completer(completer)
    readline.set_completer_delims(" \t\n")
    readline.parse_and_bind("tab: complete")


class CommandInterpreter:
    """Read lines, dispatch slash commands and forward everything else to chat.

    Example:
        interpreter = CommandInterpreter(session)
        await interpreter.run()

    Errors from commands and round-trips are reported on the console and the
    loop continues; only /exit (or end of input) stops it.
    """

    def __init__(
        self,
        session: ChatSession,
        input_fn: InputFn | None = None,
        store_api_key: Callable[[str], None] = save_api_key,
        restart: Callable[[], None] | None = None,
    ):
        self.session = session
        self.context = session.context
        self.console = session.context.console
        self._input = input_fn or self._console_input
        self._store_api_key = store_api_key
        self._restart = restart
        self.exited = False
        self._commands: dict[str, Callable[[str], Awaitable[Prompt | None]]] = {
            "help": self._cmd_help,
            "exit": self._cmd_exit,
            "save": self._cmd_save,
            "load": self._cmd_load,
            "r": self._cmd_return,
            "m": self._cmd_model,
            "update": self._cmd_update,
            "set": self._cmd_set,
            "reset": self._cmd_reset,
            "del": self._cmd_delete,
            "config": self._cmd_config,
            "upload": self._cmd_upload,
        }

    def _console_input(self, message: str) -> str:
        return self.console.input(f"[cyan]{message}[/cyan] ")

    # -- state machine -------------------------------------------------

    def main_prompt(self) -> Prompt:
        return Prompt("Ask a question or enter a command (/help for commands):", self._handle_chat)

    async def run(self, initial: Prompt | None = None) -> None:
        """Drive prompts until /exit or end of input."""
        prompt = initial
        while not self.exited:
            current = prompt or self.main_prompt()
            try:
                line = self._input(current.message)
            except (EOFError, KeyboardInterrupt):
                self.console.print("\n[dim]Goodbye![/dim]")
                break
            prompt = await self.feed(current, line)

    async def feed(self, prompt: Prompt, line: str) -> Prompt | None:
        """Handle one line for the given prompt and return the next prompt."""
        line = line.strip()
        try:
            if line.startswith(COMMAND_MARKER):
                return await self.dispatch(line)
            return await prompt.handler(line)
        except SeekChatError as exc:
            self._report(exc)
            return None

    async def dispatch(self, line: str) -> Prompt | None:
        """Run a slash command; the command name is case-insensitive."""
        name, _, args = line[len(COMMAND_MARKER):].strip().partition(" ")
        handler = self._commands.get(name.lower())
        if handler is None:
            self._warn(f"Unknown command {COMMAND_MARKER}{name}; type /help for available commands")
            return None
        logger.debug("Dispatching /%s", name.lower())
        return await handler(args.strip())

    # -- output helpers ------------------------------------------------

    def _report(self, exc: SeekChatError) -> None:
        self.console.print(f"Error: {exc}", style="red", markup=False)
        if isinstance(exc, TransportError) and exc.is_auth:
            self.console.print("Type /update api to replace the API key.", style="yellow")

    def _warn(self, message: str) -> None:
        self.console.print(message, style="yellow", markup=False)

    def _ok(self, message: str) -> None:
        self.console.print(message, style="green", markup=False)

    # -- chat ----------------------------------------------------------

    async def _handle_chat(self, line: str) -> Prompt | None:
        if not line:
            self._warn("Input cannot be empty.")
            return None
        await self.session.send_turn(line)
        return None

    # -- commands ------------------------------------------------------

    async def _cmd_help(self, args: str) -> Prompt | None:
        self.console.print(help_table(__version__))
        return None

    async def _cmd_exit(self, args: str) -> Prompt | None:
        self.exited = True
        self.console.print("[dim]Goodbye![/dim]")
        return None

    async def _cmd_return(self, args: str) -> Prompt | None:
        return None

    async def _cmd_config(self, args: str) -> Prompt | None:
        self.console.print(config_table(self.context.config))
        return None

    async def _cmd_save(self, args: str) -> Prompt | None:
        history = self.context.history
        if not len(history):
            self._warn("Nothing to save: the conversation is empty.")
            return None

        self.console.print("Generating conversation summary...", style="yellow")
        summary_text = await self.session.summarize()
        path = self.context.summary_store().save(history, summary_text)
        self.console.print(f"Summary saved to {path}", style="blue", markup=False)
        return Prompt(
            "Clear the conversation history? (type 'yes' to confirm, anything else keeps it):",
            self._confirm_clear_history,
        )

    async def _confirm_clear_history(self, answer: str) -> Prompt | None:
        if answer.lower() == CONFIRM_WORD:
            self.context.history.clear()
            self._ok("Conversation history cleared.")
        else:
            self.console.print("Conversation history kept.", style="dim")
        return None

    async def _cmd_load(self, args: str) -> Prompt | None:
        files = self.context.summary_store().list_files()
        if not files:
            self._warn("No summary files found.")
            return None
        self.console.print(summaries_table(files))
        return Prompt(
            "Enter the number of the summary to load (/del <n> to delete, /r to return):",
            self._load_selected,
        )

    async def _load_selected(self, answer: str) -> Prompt | None:
        loaded = self.context.summary_store().load(_parse_index(answer))
        self.context.history.replace(loaded.turns)
        self.console.print(f"Loaded '{loaded.title}': {loaded.synopsis}", style="blue", markup=False)
        self.console.print(f"Restored the latest {len(loaded.turns)} turns.", style="yellow")
        return None

    async def _cmd_delete(self, args: str) -> Prompt | None:
        path = self.context.summary_store().delete(_parse_index(args))
        self._ok(f"Deleted {path}")
        return None

    async def _cmd_model(self, args: str) -> Prompt | None:
        variant = args.lower()
        model = MODEL_VARIANTS.get(variant)
        if model is None and variant in MODEL_VARIANTS.values():
            model = variant
        if model is None:
            self._warn("Unknown model; use /m v3 or /m r1.")
            return None
        self.context.model = model
        self._ok(f"Switched to the {model} model.")
        return None

    async def _cmd_set(self, args: str) -> Prompt | None:
        parts = args.split(maxsplit=1)
        if len(parts) < 2:
            raise ValidationError("Missing value; usage: /set <key> <value>")
        name, value = self.context.config_store.set_value(parts[0].lower(), parts[1])
        self._ok(f"{name} set to {value}")

        low, high = TEMPERATURE_RANGE
        if name == "temperature" and not low <= value <= high:
            self._warn(f"Temperature is usually between {low} and {high}.")
        return None

    async def _cmd_reset(self, args: str) -> Prompt | None:
        key = args.lower() or "all"
        names = self.context.config_store.reset(key)
        if "current_model" in names:
            self.context.sync_model()
        if "api_endpoint" in names:
            await self.session.reset_transport()

        if key == "all":
            self._ok("All settings reset to their defaults.")
        else:
            name = names[0]
            self._ok(f"{name} reset to {getattr(self.context.config, name)}")
        return None

    async def _cmd_update(self, args: str) -> Prompt | None:
        target = args.lower()
        if target == "api":
            return self.api_key_prompt(restart=True)
        if target == "web":
            return self.endpoint_prompt()
        self._warn("Unknown update target; use /update api or /update web.")
        return None

    async def _cmd_upload(self, args: str) -> Prompt | None:
        if not args:
            raise ValidationError("Missing path; usage: /upload <path>")
        path = Path(args).expanduser()
        if not path.is_file():
            raise MissingFileError(path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError("read", path, exc) from exc

        preview = text if len(text) <= UPLOAD_PREVIEW_LENGTH else text[:UPLOAD_PREVIEW_LENGTH] + "..."
        self.console.print(f"Read {len(text)} characters from {path}:", style="blue", markup=False)
        self.console.print(preview, style="dim", markup=False, highlight=False)
        self.console.print(f"{self.context.config.app_name} is analysing the file...", style="yellow", markup=False)
        await self.session.send_turn(upload_prompt(text))
        return None

    # -- nested prompts --------------------------------------------------

    def api_key_prompt(self, restart: bool) -> Prompt:
        """Prompt for an API key; with restart, confirm and restart after saving."""
        message = "Enter the new API key:" if restart else "Enter your API key:"
        prompt = Prompt(message, lambda answer: self._receive_api_key(prompt, restart, answer))
        return prompt

    async def _receive_api_key(self, prompt: Prompt, restart: bool, api_key: str) -> Prompt | None:
        if not is_valid_api_key(api_key):
            self.console.print("Invalid API key: expected at least 20 characters.", style="red")
            return prompt

        if not restart:
            self._store_api_key(api_key)
            await self.session.reset_transport()
            self._ok("API key saved to .env.")
            return None

        return Prompt(
            "Save the new key and restart now? (type 'yes' to confirm, anything else cancels):",
            partial(self._confirm_api_key, api_key),
        )

    async def _confirm_api_key(self, api_key: str, answer: str) -> Prompt | None:
        if answer.lower() != CONFIRM_WORD:
            self.console.print("API key unchanged.", style="dim")
            return None

        self._store_api_key(api_key)
        self._ok("API key updated, restarting...")
        await self.session.close()
        self.exited = True
        if self._restart is not None:
            self._restart()
        return None

    def endpoint_prompt(self) -> Prompt:
        prompt = Prompt(
            "Enter the new API endpoint (e.g. https://api.deepseek.com/v1/chat/completions):",
            lambda answer: self._receive_endpoint(prompt, answer),
        )
        return prompt

    async def _receive_endpoint(self, prompt: Prompt, endpoint: str) -> Prompt | None:
        if not is_valid_endpoint(endpoint):
            self.console.print("Invalid API endpoint: expected a URL.", style="red")
            return prompt
        self.context.config_store.update(api_endpoint=endpoint)
        await self.session.reset_transport()
        self._ok(f"API endpoint set to {self.context.config.api_endpoint}")
        return None


def _parse_index(text: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        raise ValidationError(f"Invalid index {text!r}: expected a number") from None
