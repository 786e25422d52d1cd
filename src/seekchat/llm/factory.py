from typing import Any

from .base import ChatTransport
from .providers import DeepSeekTransport


def create_transport(provider: str = "deepseek", **config: Any) -> ChatTransport:
    """Create a chat transport instance.

    This factory function hides the instantiation logic for different providers.

    Args:
        provider: Provider type (currently only 'deepseek', which also serves
            any OpenAI-compatible endpoint)
        **config: Provider-specific configuration
            For DeepSeek:
                - api_key: str | None (required, may be None)
                - endpoint: str (default: DeepSeek chat completions URL)

    Returns:
        Initialized transport instance

    Raises:
        ValueError: If provider type is not supported
        TypeError: If required configuration is missing

    Examples:
        >>> transport = create_transport(
        ...     "deepseek",
        ...     api_key="sk-...",
        ...     endpoint="https://api.deepseek.com/v1/chat/completions"
        ... )
    """
    provider_lower = provider.lower()

    if provider_lower == "deepseek":
        if "api_key" not in config:
            raise TypeError("DeepSeek transport requires 'api_key' in config")
        return DeepSeekTransport(**config)

    raise ValueError(
        f"Unsupported transport provider: {provider}. "
        f"Supported providers: deepseek"
    )
