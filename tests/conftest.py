"""Pytest configuration and shared fixtures."""
import io
import json
import os
from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from rich.console import Console

from seekchat.chat import ChatSession, SessionContext
from seekchat.config import ConfigStore
from seekchat.llm import ChatRequest, ChatTransport


def sse_event(content: str | None = None, reasoning_content: str | None = None) -> bytes:
    """Encode one streamed delta as an event line."""
    delta = {}
    if content is not None:
        delta["content"] = content
    if reasoning_content is not None:
        delta["reasoning_content"] = reasoning_content
    payload = {"choices": [{"index": 0, "delta": delta}]}
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n".encode()


def sse_reply(*parts: str) -> list[bytes]:
    """A full streamed reply: one event per part plus the sentinel."""
    return [sse_event(part) for part in parts] + [b"data: [DONE]\n\n"]


def completion_body(content: str) -> bytes:
    payload = {"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}
    return json.dumps(payload, ensure_ascii=False).encode()


class FakeTransport(ChatTransport):
    """Transport replaying scripted bodies instead of calling the API.

    Each entry in `streams` is the list of chunks for one streaming request;
    an exception instance in the list is raised at that point. Each entry in
    `bodies` is the body (or exception) for one non-streaming request.
    """

    def __init__(self, streams: list[list] | None = None, bodies: list | None = None):
        self.streams = list(streams or [])
        self.bodies = list(bodies or [])
        self.requests: list[ChatRequest] = []
        self.closed = 0

    async def stream_chat(self, request: ChatRequest) -> AsyncIterator[bytes]:
        self.requests.append(request)
        script = self.streams.pop(0) if self.streams else []
        for item in script:
            if isinstance(item, BaseException):
                raise item
            yield item

    async def complete_chat(self, request: ChatRequest) -> bytes:
        self.requests.append(request)
        item = self.bodies.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    async def close(self) -> None:
        self.closed += 1


class ScriptedInput:
    """Input function returning canned lines, then EOF."""

    def __init__(self, *lines: str):
        self.lines = list(lines)
        self.prompts: list[str] = []

    def __call__(self, message: str) -> str:
        self.prompts.append(message)
        if not self.lines:
            raise EOFError
        return self.lines.pop(0)


@pytest.fixture
def console():
    """Console writing plain text to an in-memory buffer."""
    return Console(file=io.StringIO(), width=250, force_terminal=False, color_system=None)


@pytest.fixture
def output(console):
    """Return a callable giving everything printed so far."""
    return lambda: console.file.getvalue()


@pytest.fixture
def summary_dir(tmp_path) -> Path:
    path = tmp_path / "summaries"
    path.mkdir()
    return path


@pytest.fixture
def config_store(tmp_path, summary_dir) -> ConfigStore:
    store = ConfigStore(tmp_path / "config.json")
    store.load()
    store.update(summary_dir=str(summary_dir))
    return store


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def context(config_store, console) -> SessionContext:
    return SessionContext(config_store=config_store, console=console)


@pytest.fixture
def session(context, transport) -> ChatSession:
    return ChatSession(context, transport_factory=lambda _: transport)


@pytest.fixture
def deepseek_api_key():
    """API key for integration tests, or None when unset."""
    return os.getenv("DEEPSEEK_API_KEY")
