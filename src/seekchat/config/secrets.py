"""API key storage in a .env file.

The key is read from the process environment (populated from .env with
python-dotenv at startup) and written back with dotenv's set_key.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv, set_key

logger = logging.getLogger(__name__)

API_KEY_ENV = "DEEPSEEK_API_KEY"
MIN_API_KEY_LENGTH = 20
DEFAULT_ENV_PATH = Path(".env")


def load_secrets(env_path: Path = DEFAULT_ENV_PATH) -> None:
    """Populate the environment from a .env file, if present."""
    load_dotenv(env_path)


def get_api_key() -> str | None:
    return os.getenv(API_KEY_ENV) or None


def is_valid_api_key(api_key: str) -> bool:
    return len(api_key.strip()) >= MIN_API_KEY_LENGTH


def save_api_key(api_key: str, env_path: Path = DEFAULT_ENV_PATH) -> None:
    """Persist the key to .env and export it to the running process."""
    api_key = api_key.strip()
    env_path.touch(exist_ok=True)
    set_key(str(env_path), API_KEY_ENV, api_key, quote_mode="never")
    os.environ[API_KEY_ENV] = api_key
    logger.debug("Stored %s in %s", API_KEY_ENV, env_path)
