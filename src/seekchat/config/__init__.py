"""Configuration module for seekchat.

Hides where settings and secrets live and how they are validated.
"""

from .models import (
    DEEPSEEK_CHAT,
    DEEPSEEK_REASONER,
    MODEL_VARIANTS,
    TEMPERATURE_RANGE,
    AppConfig,
    is_valid_endpoint,
    resolve_key,
)
from .secrets import get_api_key, is_valid_api_key, load_secrets, save_api_key
from .store import SETTABLE_KEYS, ConfigStore

__all__ = [
    "AppConfig",
    "ConfigStore",
    "DEEPSEEK_CHAT",
    "DEEPSEEK_REASONER",
    "MODEL_VARIANTS",
    "SETTABLE_KEYS",
    "TEMPERATURE_RANGE",
    "get_api_key",
    "is_valid_api_key",
    "is_valid_endpoint",
    "load_secrets",
    "resolve_key",
    "save_api_key",
]
