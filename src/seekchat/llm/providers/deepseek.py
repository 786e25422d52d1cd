from collections.abc import AsyncIterator
from typing import Any

import httpx
import openai
from openai import AsyncOpenAI

from ...errors import TransportError
from ..base import ChatTransport
from ..models import ChatRequest

DEFAULT_ENDPOINT = "https://api.deepseek.com/v1/chat/completions"
_COMPLETIONS_PATH = "/chat/completions"


def base_url_for(endpoint: str) -> str:
    """Derive the SDK base URL from a full chat completions endpoint."""
    endpoint = endpoint.strip().rstrip("/")
    if not endpoint.startswith(("http://", "https://")):
        endpoint = "https://" + endpoint
    return endpoint.removesuffix(_COMPLETIONS_PATH)


class DeepSeekTransport(ChatTransport):
    """DeepSeek transport built on the OpenAI-compatible API.

    Hidden design decisions:
    - DeepSeek API client initialization (via OpenAI SDK)
    - Raw body access through the SDK's streaming-response wrapper, so
      decoding stays in StreamDecoder
    - Translation of SDK and httpx failures into TransportError
    - Authentication mechanism

    Retries are disabled; the caller's timeout race is the only retry/abort
    policy.
    """

    def __init__(
        self,
        api_key: str | None,
        endpoint: str = DEFAULT_ENDPOINT,
        **client_kwargs: Any
    ):
        """Initialize DeepSeek transport.

        Args:
            api_key: DeepSeek API key (a missing key surfaces as a 401)
            endpoint: Full chat completions URL
            **client_kwargs: Additional kwargs for AsyncOpenAI client
        """
        self._endpoint = endpoint
        client_kwargs.setdefault("max_retries", 0)
        self._client = AsyncOpenAI(
            api_key=api_key or "",
            base_url=base_url_for(endpoint),
            **client_kwargs
        )

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def stream_chat(self, request: ChatRequest) -> AsyncIterator[bytes]:
        payload = request.model_copy(update={"stream": True}).to_payload()
        try:
            async with self._client.chat.completions.with_streaming_response.create(**payload) as response:
                async for chunk in response.iter_bytes():
                    yield chunk
        except (openai.OpenAIError, httpx.HTTPError) as exc:
            raise _transport_error(exc) from exc

    async def complete_chat(self, request: ChatRequest) -> bytes:
        payload = request.model_copy(update={"stream": False}).to_payload()
        try:
            async with self._client.chat.completions.with_streaming_response.create(**payload) as response:
                return await response.read()
        except (openai.OpenAIError, httpx.HTTPError) as exc:
            raise _transport_error(exc) from exc

    async def close(self) -> None:
        """Close the underlying HTTP client.

        Note: Uses the OpenAI SDK's async client cleanup.
        See: https://github.com/openai/openai-python#async-usage
        """
        await self._client.close()


def _transport_error(exc: Exception) -> TransportError:
    if isinstance(exc, openai.APIStatusError):
        if exc.status_code == 401:
            return TransportError("Invalid API key", status_code=401)
        return TransportError("API request failed", status_code=exc.status_code)
    if isinstance(exc, openai.APITimeoutError):
        return TransportError("Request timed out")
    if isinstance(exc, openai.APIConnectionError):
        return TransportError(f"Failed to reach server: {exc}")
    if isinstance(exc, httpx.HTTPError):
        return TransportError(f"Connection interrupted: {exc}")
    return TransportError(f"API request failed: {exc}")
