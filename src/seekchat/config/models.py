"""Configuration model and defaults.

Centralizes the tunables persisted in the configuration document and the
fixed lookup tables (model variants, command aliases) built around them.
"""

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEEPSEEK_CHAT = "deepseek-chat"
DEEPSEEK_REASONER = "deepseek-reasoner"

# `/m <variant>` shorthands
MODEL_VARIANTS = {
    "v3": DEEPSEEK_CHAT,
    "r1": DEEPSEEK_REASONER,
}

# Temperature outside this range is accepted but warned about
TEMPERATURE_RANGE = (0.0, 2.0)

_ENDPOINT_PATTERN = re.compile(
    r"^(https?://)?"
    r"([\da-z.-]+\.[a-z.]{2,6}|localhost|\d{1,3}(\.\d{1,3}){3})"
    r"(:\d+)?"
    r"(/[\w .-]*)*/?$",
    re.IGNORECASE,
)


def is_valid_endpoint(endpoint: str) -> bool:
    """Check that an endpoint looks like an http(s) URL."""
    return bool(_ENDPOINT_PATTERN.match(endpoint.strip()))


class AppConfig(BaseModel):
    """Persisted application settings.

    Instances are immutable; mutations go through ConfigStore, which
    validates, replaces and persists the whole document.
    """

    model_config = ConfigDict(frozen=True)

    temperature: float = Field(default=0.7, description="Sampling temperature (advisory range 0.0-2.0)")
    max_tokens: int = Field(default=1000, gt=0, description="Maximum tokens to generate")
    enable_stream: bool = Field(default=True, description="Request streamed responses")
    timeout_ms: int = Field(default=10000, gt=0, description="Time allowed for a response to begin")
    summary_dir: str = Field(default="./conversation_summaries", min_length=1)
    truncate_length: int = Field(default=300, gt=0, description="Turns longer than this are saved as a placeholder")
    current_model: Literal["deepseek-chat", "deepseek-reasoner"] = DEEPSEEK_CHAT
    app_name: str = Field(default="DeepSeek", min_length=1)
    api_endpoint: str = "https://api.deepseek.com/v1/chat/completions"

    @field_validator("api_endpoint")
    @classmethod
    def _check_endpoint(cls, value: str) -> str:
        if not is_valid_endpoint(value):
            raise ValueError(f"not a valid endpoint URL: {value!r}")
        return value.strip()

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000


# Keys accepted by `/set` and `/reset` that differ from the field names
KEY_ALIASES = {
    "stream": "enable_stream",
    "timeout": "timeout_ms",
    "name": "app_name",
    "model": "current_model",
    "endpoint": "api_endpoint",
}

# Keys written by earlier releases of the tool
LEGACY_KEYS = {
    "maxTokens": "max_tokens",
    "enableStream": "enable_stream",
    "timeout": "timeout_ms",
    "summaryDir": "summary_dir",
    "truncateLength": "truncate_length",
    "currentModel": "current_model",
    "appName": "app_name",
    "apiEndpoint": "api_endpoint",
}


def resolve_key(key: str) -> str | None:
    """Map a user-facing key or alias onto an AppConfig field name."""
    name = KEY_ALIASES.get(key, LEGACY_KEYS.get(key, key))
    if name in AppConfig.model_fields:
        return name
    return None
