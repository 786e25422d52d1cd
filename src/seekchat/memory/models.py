"""Data models for conversation memory.

These models define the structure of a conversation and of a restored
summary, independent of how either is persisted.
"""

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from ..llm.models import ChatMessage

# Turns sent with each request; older turns stay in memory but are not sent
OUTBOUND_HISTORY_LIMIT = 10


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ConversationTurn(BaseModel):
    """One user or assistant message. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str
    timestamp: datetime = Field(default_factory=datetime.now)

    def to_message(self) -> ChatMessage:
        return ChatMessage(role=self.role.value, content=self.content)


class ConversationHistory(BaseModel):
    """Chronological list of turns for the live session.

    Turns are only ever appended or the whole list replaced; no turn is
    edited in place.
    """

    turns: list[ConversationTurn] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.turns)

    def append(self, turn: ConversationTurn) -> None:
        self.turns.append(turn)

    def add(self, role: Role, content: str) -> ConversationTurn:
        """Create a turn stamped with the current time and append it."""
        turn = ConversationTurn(role=role, content=content)
        self.append(turn)
        return turn

    def replace(self, turns: list[ConversationTurn]) -> None:
        self.turns = list(turns)

    def clear(self) -> None:
        self.turns = []

    def recent(self, limit: int = OUTBOUND_HISTORY_LIMIT) -> list[ConversationTurn]:
        """Get the most recent turns, oldest first."""
        if limit <= 0:
            return []
        return self.turns[-limit:]

    def outbound_messages(self, limit: int = OUTBOUND_HISTORY_LIMIT) -> list[ChatMessage]:
        """Messages for the next request: the last `limit` turns in order."""
        return [turn.to_message() for turn in self.recent(limit)]

    def to_transcript(self) -> str:
        """Render every turn as 'role: content' lines."""
        return "\n".join(f"{turn.role.value}: {turn.content}" for turn in self.turns)


class LoadedSummary(BaseModel):
    """A summary file read back from disk."""

    path: Path
    title: str
    synopsis: str
    turns: list[ConversationTurn] = Field(default_factory=list)
