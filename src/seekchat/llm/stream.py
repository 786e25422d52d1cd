"""Incremental decoder for streamed chat completion bodies.

The body is a newline-delimited event protocol:

    data: {"choices": [{"delta": {"content": "Hel"}}]}
    data: {"choices": [{"delta": {"content": "lo"}}]}
    data: [DONE]

Chunks may split lines (and multi-byte characters) anywhere, so the decoder
keeps an incremental UTF-8 decoder plus the unterminated tail of the last
chunk, and only parses complete lines.
"""

import asyncio
import codecs
import json
import logging
from collections.abc import AsyncIterable, AsyncIterator, Callable
from dataclasses import dataclass, field
from typing import Any

from ..errors import TransportError
from .models import DecodedReply, StreamDelta

logger = logging.getLogger(__name__)

EVENT_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"
REASONING_MARKER = "**思考过程**"


@dataclass
class DecoderState:
    """Per-request decoding state, discarded when the body ends or fails."""

    content: list[str] = field(default_factory=list)
    reasoning: list[str] = field(default_factory=list)
    first_chunk_received: bool = False
    completed: bool = False


class StreamDecoder:
    """Reassemble a chunked event stream into content and reasoning text.

    Example:
        decoder = StreamDecoder(
            on_delta=lambda d: print(d.text, end=""),
            on_first_chunk=spinner.stop,
        )
        reply = await decoder.decode(transport.stream_chat(request))
        print(reply.content, reply.reasoning)

    Callbacks run synchronously as chunks arrive. on_first_chunk fires once,
    on the first non-empty chunk, before any delta from that chunk.
    """

    def __init__(
        self,
        on_delta: Callable[[StreamDelta], None] | None = None,
        on_first_chunk: Callable[[], None] | None = None,
    ):
        self._on_delta = on_delta
        self._on_first_chunk = on_first_chunk
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""
        self.state = DecoderState()

    async def decode(self, chunks: AsyncIterable[bytes]) -> DecodedReply:
        """Consume the whole source and return the assembled reply.

        If the source raises, accumulated text is discarded and the error
        propagates; no partial reply is returned.
        """
        try:
            async for chunk in chunks:
                self.feed(chunk)
        except BaseException:
            self._discard()
            raise
        return self.finish()

    def feed(self, chunk: bytes) -> None:
        """Process one raw chunk, emitting deltas for every complete line."""
        if not chunk:
            return
        if not self.state.first_chunk_received:
            self.state.first_chunk_received = True
            if self._on_first_chunk is not None:
                self._on_first_chunk()

        self._pending += self._utf8.decode(chunk)
        *lines, self._pending = self._pending.split("\n")
        for line in lines:
            self._handle_line(line)

    def finish(self) -> DecodedReply:
        """Flush the unterminated tail and build the final reply."""
        self._pending += self._utf8.decode(b"", final=True)
        if self._pending:
            tail, self._pending = self._pending, ""
            self._handle_line(tail)
        return DecodedReply(
            content="".join(self.state.content),
            reasoning="".join(self.state.reasoning),
            completed=self.state.completed,
        )

    def _discard(self) -> None:
        self.state.content.clear()
        self.state.reasoning.clear()
        self._pending = ""

    def _handle_line(self, line: str) -> None:
        line = line.strip()
        if not line or not line.startswith(EVENT_PREFIX):
            return

        payload = line[len(EVENT_PREFIX):].strip()
        if payload == DONE_SENTINEL:
            self.state.completed = True
            logger.debug("End of stream sentinel received")
            return

        try:
            event = json.loads(payload)
        except json.JSONDecodeError as exc:
            logger.warning("Skipping malformed stream event (%s): %.80s", exc, payload)
            return

        for delta in _extract_deltas(event):
            if delta.reasoning:
                self.state.reasoning.append(delta.text)
            else:
                self.state.content.append(delta.text)
            if self._on_delta is not None:
                self._on_delta(delta)


def _extract_deltas(event: Any) -> list[StreamDelta]:
    """Pull the content/reasoning fragments out of one parsed event."""
    try:
        delta = event["choices"][0]["delta"]
    except (KeyError, IndexError, TypeError):
        return []
    if not isinstance(delta, dict):
        return []

    deltas: list[StreamDelta] = []

    # DeepSeek reasoning models stream their chain of thought in a separate field
    reasoning_content = delta.get("reasoning_content")
    if isinstance(reasoning_content, str) and reasoning_content:
        deltas.append(StreamDelta(reasoning_content, reasoning=True))

    content = delta.get("content")
    if isinstance(content, str) and content:
        if REASONING_MARKER in content:
            deltas.append(StreamDelta(content.replace(REASONING_MARKER, "").strip(), reasoning=True))
        else:
            deltas.append(StreamDelta(content))
    return deltas


def decode_complete(body: bytes) -> DecodedReply:
    """Parse a non-streaming completion body in one go.

    There is no reasoning channel in this mode.

    Raises:
        TransportError: If the body is not a completion object
    """
    try:
        data = json.loads(body.decode("utf-8"))
        content = data["choices"][0]["message"]["content"]
    except (UnicodeDecodeError, json.JSONDecodeError, KeyError, IndexError, TypeError) as exc:
        raise TransportError(f"Malformed completion response: {exc}") from exc
    return DecodedReply(content=content or "", reasoning="", completed=True)


async def first_chunk_within(chunks: AsyncIterable[bytes], timeout_s: float) -> AsyncIterator[bytes]:
    """Re-yield a chunk source, failing if the first chunk is late.

    The wait for the first chunk races a timer; whichever finishes first
    decides the outcome and the loser is cancelled. Later chunks are not
    timed.

    Raises:
        TransportError: If no chunk (or end of body) arrives within timeout_s
    """
    iterator = aiter(chunks)
    try:
        first = await asyncio.wait_for(anext(iterator), timeout_s)
    except StopAsyncIteration:
        return
    except TimeoutError:
        raise TransportError(f"Request timed out after {timeout_s:g}s") from None
    yield first
    async for chunk in iterator:
        yield chunk
