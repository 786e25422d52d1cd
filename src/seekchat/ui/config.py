"""UI configuration constants.

Centralizes magic numbers and display strings for console output.
"""

import logging


class LogLevel:
    """Log level names accepted on the command line.

    Standard logging hierarchy: DEBUG < INFO < WARNING < ERROR
    Lower numeric value = more verbose (shows more messages).
    """

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR

    _from_string = {
        "debug": DEBUG,
        "info": INFO,
        "warning": WARNING,
        "error": ERROR,
    }

    @classmethod
    def names(cls) -> list[str]:
        return list(cls._from_string)

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Convert string to log level. Returns WARNING if invalid."""
        return cls._from_string.get(level_str.lower(), cls.WARNING)


# Spinner shown until the first response chunk arrives
THINKING_SPINNER = "dots"
THINKING_MESSAGE = "{app_name} is thinking..."

# Characters of an uploaded file echoed back before sending
UPLOAD_PREVIEW_LENGTH = 500

# Table column widths
COMMAND_COLUMN_WIDTH = 28
CONFIG_KEY_COLUMN_WIDTH = 20

# Marker printed after partial output of a failed stream
INCOMPLETE_MARKER = "[response incomplete]"

# Slash commands and their descriptions, in help order
COMMAND_HELP = [
    ("/help", "Show available commands"),
    ("/exit", "Exit the program"),
    ("/save", "Summarize and save the current conversation"),
    ("/load", "Load a saved conversation summary"),
    ("/del <index>", "Delete a saved summary file"),
    ("/m <v3|r1>", "Switch model (v3: deepseek-chat, r1: deepseek-reasoner)"),
    ("/config", "Show the current configuration"),
    ("/update api", "Update the API key (restarts the program)"),
    ("/update web", "Update the API endpoint"),
    ("/set name <value>", "Set the application name"),
    ("/set temperature <value>", "Set temperature (0.0 to 2.0)"),
    ("/set max_tokens <value>", "Set the maximum tokens per reply"),
    ("/set stream <true|false>", "Enable or disable streaming output"),
    ("/set timeout <ms>", "Set how long to wait for a reply to begin"),
    ("/set summary_dir <path>", "Set the summary file directory"),
    ("/set truncate_length <n>", "Save turns longer than n characters as [**]"),
    ("/reset all", "Reset every setting to its default"),
    ("/reset <key>", "Reset one setting to its default"),
    ("/upload <path>", "Send a file's contents to the model for analysis"),
    ("/r", "Return to the main prompt"),
]

# Tab completion candidates
COMPLETIONS = [
    "/help", "/exit", "/save", "/load", "/del ", "/m v3", "/m r1", "/config",
    "/update api", "/update web", "/set temperature ", "/set max_tokens ",
    "/set stream true", "/set stream false", "/set timeout ", "/set summary_dir ",
    "/set truncate_length ", "/set name ", "/reset all", "/reset ", "/upload ", "/r",
]
