"""
seekchat: an interactive terminal client for DeepSeek-compatible chat APIs.

Streams replies as they arrive, keeps a bounded conversation window for
requests and saves conversations as human-readable summary files that can be
resumed later.
"""

__version__ = "0.1.0"

from .errors import (
    IndexOutOfRangeError,
    MalformedSummaryError,
    MissingFileError,
    SeekChatError,
    StorageError,
    TransportError,
    ValidationError,
)

__all__ = [
    "IndexOutOfRangeError",
    "MalformedSummaryError",
    "MissingFileError",
    "SeekChatError",
    "StorageError",
    "TransportError",
    "ValidationError",
]
