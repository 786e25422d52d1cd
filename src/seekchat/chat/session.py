"""Chat round-trips for the live session.

ChatSession turns user text into requests, renders replies as they stream
in and records both sides of the exchange in the session history.
"""

import asyncio
import logging
from collections.abc import Callable
from contextlib import aclosing

from rich.panel import Panel
from rich.status import Status

from ..errors import TransportError
from ..llm import (
    ChatMessage,
    ChatRequest,
    ChatTransport,
    DecodedReply,
    StreamDecoder,
    StreamDelta,
    decode_complete,
    first_chunk_within,
)
from ..memory import Role
from ..prompts import summary_prompt
from ..ui import render_markdown
from ..ui.config import INCOMPLETE_MARKER, THINKING_MESSAGE, THINKING_SPINNER
from .context import SessionContext

logger = logging.getLogger(__name__)

TransportFactory = Callable[[SessionContext], ChatTransport]


class ChatSession:
    """Owns the transport and runs one round-trip at a time.

    Example:
        session = ChatSession(context, transport_factory=get_transport)
        reply = await session.send_turn("Hello")
        summary = await session.summarize()
        await session.close()
    """

    def __init__(self, context: SessionContext, transport_factory: TransportFactory):
        self.context = context
        self._transport_factory = transport_factory
        self._transport: ChatTransport | None = None

    @property
    def transport(self) -> ChatTransport:
        if self._transport is None:
            self._transport = self._transport_factory(self.context)
        return self._transport

    async def reset_transport(self) -> None:
        """Drop the current transport so the next request picks up new settings."""
        if self._transport is not None:
            transport, self._transport = self._transport, None
            await transport.close()

    async def close(self) -> None:
        await self.reset_transport()

    async def send_turn(self, user_text: str) -> DecodedReply:
        """Send user text with the recent history and record the reply.

        The user turn is recorded before the request, and stays in the
        history if the request fails.

        Raises:
            TransportError: If the round-trip fails
        """
        history = self.context.history
        history.add(Role.USER, user_text)

        reply = await self._round_trip(history.outbound_messages(), render=True)
        history.add(Role.ASSISTANT, reply.content)

        if reply.reasoning:
            self.context.console.print(
                Panel(render_markdown(reply.reasoning), title="Reasoning", border_style="blue")
            )
        return reply

    async def summarize(self) -> str:
        """Ask the model for a labelled title and synopsis of the whole history.

        Raises:
            TransportError: If the round-trip fails
        """
        prompt = summary_prompt(self.context.history.to_transcript())
        reply = await self._round_trip([ChatMessage(role="user", content=prompt)], render=False)
        return reply.content

    def _build_request(self, messages: list[ChatMessage]) -> ChatRequest:
        config = self.context.config
        return ChatRequest(
            model=self.context.model,
            messages=messages,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            stream=config.enable_stream,
        )

    async def _round_trip(self, messages: list[ChatMessage], render: bool) -> DecodedReply:
        config = self.context.config
        request = self._build_request(messages)
        logger.debug("Sending %d messages to %s (stream=%s)", len(messages), request.model, request.stream)

        status = self.context.console.status(
            THINKING_MESSAGE.format(app_name=config.app_name), spinner=THINKING_SPINNER
        )
        status.start()
        try:
            if request.stream:
                return await self._stream(request, status, render, config.timeout_s)
            return await self._complete(request, status, render, config.timeout_s)
        finally:
            status.stop()

    async def _stream(self, request: ChatRequest, status: Status, render: bool, timeout_s: float) -> DecodedReply:
        console = self.context.console
        printed = False

        def on_delta(delta: StreamDelta) -> None:
            nonlocal printed
            if render and not delta.reasoning:
                console.print(delta.text, end="", markup=False, highlight=False, soft_wrap=True)
                printed = True

        decoder = StreamDecoder(on_delta=on_delta, on_first_chunk=status.stop)
        try:
            async with aclosing(self.transport.stream_chat(request)) as chunks:
                reply = await decoder.decode(first_chunk_within(chunks, timeout_s))
        except TransportError:
            if printed:
                console.print()
                console.print(INCOMPLETE_MARKER, style="yellow", markup=False)
            raise

        if printed:
            console.print()
        return reply

    async def _complete(self, request: ChatRequest, status: Status, render: bool, timeout_s: float) -> DecodedReply:
        try:
            body = await asyncio.wait_for(self.transport.complete_chat(request), timeout_s)
        except TimeoutError:
            raise TransportError(f"Request timed out after {timeout_s:g}s") from None
        status.stop()

        reply = decode_complete(body)
        if render:
            console = self.context.console
            console.print(f"{self.context.config.app_name}:", style="green", markup=False)
            console.print(render_markdown(reply.content))
        return reply
