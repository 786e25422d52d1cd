"""Error taxonomy for seekchat.

Every error raised by the library derives from SeekChatError so the
interactive loop can recover from all of them at a single boundary.
"""

from pathlib import Path


class SeekChatError(Exception):
    """Base class for recoverable seekchat errors."""


class ValidationError(SeekChatError):
    """A user-supplied parameter was rejected; nothing was changed."""

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message)
        self.key = key


class TransportError(SeekChatError):
    """The chat round-trip failed (network, timeout or non-2xx status)."""

    def __init__(self, message: str, status_code: int | None = None):
        if status_code is not None:
            message = f"{message} (status {status_code})"
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_auth(self) -> bool:
        """True when the remote service rejected the API key."""
        return self.status_code == 401


class MalformedSummaryError(SeekChatError):
    """Title or synopsis could not be extracted from a summary reply."""

    def __init__(self, message: str):
        super().__init__(f"Malformed summary: {message}")


class IndexOutOfRangeError(SeekChatError):
    """A 1-based summary index does not name an existing file."""

    def __init__(self, index: int, count: int):
        if count == 0:
            message = f"Invalid index {index}: no summary files found"
        else:
            message = f"Invalid index {index}: expected a number between 1 and {count}"
        super().__init__(message)
        self.index = index
        self.count = count


class MissingFileError(SeekChatError):
    """A file named by the user does not exist."""

    def __init__(self, path: Path | str):
        super().__init__(f"File not found: {path}")
        self.path = Path(path)


class StorageError(SeekChatError):
    """A summary or configuration file could not be read or written."""

    def __init__(self, action: str, path: Path | str, reason: Exception):
        super().__init__(f"Could not {action} {path}: {reason}")
        self.path = Path(path)
