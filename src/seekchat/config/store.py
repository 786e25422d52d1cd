"""JSON-backed configuration store.

The store owns the single live AppConfig. Every mutating call validates the
change, swaps in a new AppConfig and rewrites the document on disk.
"""

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..errors import StorageError, ValidationError
from .models import LEGACY_KEYS, AppConfig, resolve_key

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.json")


def _parse_float(key: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        raise ValidationError(f"Invalid {key} value {raw!r}: expected a number", key=key) from None


def _parse_positive_int(key: str, raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f"Invalid {key} value {raw!r}: expected an integer", key=key) from None
    if value <= 0:
        raise ValidationError(f"Invalid {key} value {raw!r}: must be greater than 0", key=key)
    return value


def _parse_bool(key: str, raw: str) -> bool:
    lowered = raw.lower()
    if lowered not in ("true", "false"):
        raise ValidationError(f"Invalid {key} value {raw!r}: expected true or false", key=key)
    return lowered == "true"


def _parse_directory(key: str, raw: str) -> str:
    if not Path(raw).expanduser().is_dir():
        raise ValidationError(f"Directory does not exist: {raw}", key=key)
    return raw


def _parse_text(key: str, raw: str) -> str:
    value = raw.strip()
    if not value:
        raise ValidationError(f"Invalid {key} value: must not be empty", key=key)
    return value


# Fields settable with `/set`, with the parser applied to the raw text
_SETTERS: dict[str, Callable[[str, str], Any]] = {
    "temperature": _parse_float,
    "max_tokens": _parse_positive_int,
    "enable_stream": _parse_bool,
    "timeout_ms": _parse_positive_int,
    "summary_dir": _parse_directory,
    "truncate_length": _parse_positive_int,
    "app_name": _parse_text,
}

SETTABLE_KEYS = tuple(_SETTERS)


class ConfigStore:
    """Load, mutate and persist the application configuration.

    Example:
        store = ConfigStore(Path("config.json"))
        config = store.load()          # creates the file on first run
        store.set_value("stream", "false")
        store.reset("all")
    """

    def __init__(self, path: Path = DEFAULT_CONFIG_PATH):
        self._path = Path(path)
        self._config = AppConfig()
        self.created = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def config(self) -> AppConfig:
        return self._config

    def load(self) -> AppConfig:
        """Read the document, creating it with defaults when missing.

        Unknown keys are ignored and invalid values fall back to their
        default, so the returned config is always fully populated.
        """
        if not self._path.exists():
            self._config = AppConfig()
            self.save()
            self.created = True
            logger.info("Created default configuration at %s", self._path)
            return self._config

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("Could not read %s (%s); using defaults", self._path, exc)
            raw = {}
        if not isinstance(raw, dict):
            logger.warning("Configuration in %s is not an object; using defaults", self._path)
            raw = {}

        values: dict[str, Any] = {}
        for key, value in raw.items():
            name = LEGACY_KEYS.get(key, key)
            if name not in AppConfig.model_fields or (name in values and key != name):
                continue
            try:
                AppConfig.model_validate({name: value})
            except PydanticValidationError:
                logger.warning("Ignoring invalid value for %s in %s: %r", name, self._path, value)
                continue
            values[name] = value

        self._config = AppConfig.model_validate(values)
        if raw != self._config.model_dump():
            self.save()
        return self._config

    def save(self) -> None:
        """Write the current config to disk.

        Raises:
            StorageError: If the document cannot be written
        """
        encoded = json.dumps(self._config.model_dump(), ensure_ascii=False, indent=2)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(encoded + "\n", encoding="utf-8")
        except OSError as exc:
            raise StorageError("write", self._path, exc) from exc
        logger.debug("Saved configuration to %s", self._path)

    def _commit(self, config: AppConfig) -> None:
        """Persist config as the live settings; on a failed write keep the old ones."""
        previous, self._config = self._config, config
        try:
            self.save()
        except StorageError:
            self._config = previous
            raise

    def update(self, **changes: Any) -> AppConfig:
        """Apply already-typed changes, validate them and persist."""
        try:
            config = AppConfig.model_validate({**self._config.model_dump(), **changes})
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            field = str(first["loc"][0]) if first["loc"] else None
            raise ValidationError(f"Invalid {field} value: {first['msg']}", key=field) from None
        self._commit(config)
        return config

    def set_value(self, key: str, raw: str) -> tuple[str, Any]:
        """Parse and store a user-supplied value.

        Returns:
            The resolved field name and the stored value

        Raises:
            ValidationError: Unknown key or unparseable value (config unchanged)
        """
        name = resolve_key(key)
        if name not in _SETTERS:
            raise ValidationError(
                f"Unknown setting {key!r}; settable keys: {', '.join(SETTABLE_KEYS)}", key=key
            )
        value = _SETTERS[name](name, raw)
        self.update(**{name: value})
        return name, value

    def reset(self, key: str = "all") -> list[str]:
        """Restore one key, or every key, to its default.

        Returns:
            Names of the fields that were reset
        """
        if key == "all":
            self._commit(AppConfig())
            return list(AppConfig.model_fields)

        name = resolve_key(key)
        if name is None:
            raise ValidationError(f"Unknown setting {key!r}", key=key)
        default = AppConfig.model_fields[name].default
        self.update(**{name: default})
        return [name]
