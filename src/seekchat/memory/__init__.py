"""Conversation memory module for seekchat.

Provides the live conversation history and the summary files that let a
trimmed history be resumed in a later session.
"""

from .models import OUTBOUND_HISTORY_LIMIT, ConversationHistory, ConversationTurn, LoadedSummary, Role
from .summary_store import LOADED_HISTORY_LIMIT, PLACEHOLDER, SummaryStore, extract_title_and_synopsis, sanitize_title

__all__ = [
    "ConversationHistory",
    "ConversationTurn",
    "LOADED_HISTORY_LIMIT",
    "LoadedSummary",
    "OUTBOUND_HISTORY_LIMIT",
    "PLACEHOLDER",
    "Role",
    "SummaryStore",
    "extract_title_and_synopsis",
    "sanitize_title",
]
