from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """Represents a chat message in an outbound request."""

    model_config = ConfigDict(frozen=True)

    role: str = Field(description="Role of the message sender: 'user' or 'assistant'")
    content: str = Field(description="Content of the message")


class ChatRequest(BaseModel):
    """Body of a chat completion request."""

    model_config = ConfigDict(frozen=True)

    model: str = Field(description="Model identifier, e.g. 'deepseek-chat'")
    messages: list[ChatMessage] = Field(default_factory=list)
    temperature: float = 0.7
    max_tokens: int = Field(default=1000, gt=0)
    stream: bool = True

    def to_payload(self) -> dict[str, Any]:
        """Convert to the JSON body sent over the wire."""
        return self.model_dump()


class DecodedReply(BaseModel):
    """Fully assembled reply from one round-trip."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(default="", description="Concatenated normal content")
    reasoning: str = Field(default="", description="Concatenated reasoning content")
    completed: bool = Field(default=False, description="Whether the end-of-stream sentinel was seen")


@dataclass(frozen=True)
class StreamDelta:
    """One incremental fragment of a streamed reply."""

    text: str
    reasoning: bool = False
