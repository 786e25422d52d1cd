from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any

from .models import ChatRequest


class ChatTransport(ABC):
    """Abstract base class for chat completion transports.

    This module hides the design decision of how requests reach the remote
    service. Implementations must handle:
    - API client setup and authentication
    - Mapping network, timeout and HTTP status failures onto TransportError

    Transports hand back raw bytes; decoding the event stream is the job of
    StreamDecoder, so the same decoding runs regardless of transport.

    Supports async context manager protocol for proper resource cleanup:
        async with transport:
            body = await transport.complete_chat(request)
        # Automatically cleaned up
    """

    @abstractmethod
    def stream_chat(self, request: ChatRequest) -> AsyncIterator[bytes]:
        """Issue a streaming request.

        Args:
            request: Request with stream=True

        Returns:
            Async iterator over raw body chunks, in arrival order

        Raises:
            TransportError: On connection, status or mid-stream failure
        """

    @abstractmethod
    async def complete_chat(self, request: ChatRequest) -> bytes:
        """Issue a non-streaming request and return the complete body.

        Raises:
            TransportError: On connection or status failure
        """

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""

    async def __aenter__(self) -> "ChatTransport":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
