from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console

from ..config import AppConfig, ConfigStore
from ..memory import ConversationHistory, SummaryStore


@dataclass
class SessionContext:
    """Everything a running session shares between components.

    The config store is the single source for persisted settings. The live
    model starts from the stored current_model and can be switched with
    `/m` without touching the stored value.
    """

    config_store: ConfigStore
    console: Console = field(default_factory=Console)
    history: ConversationHistory = field(default_factory=ConversationHistory)
    model: str = ""

    def __post_init__(self) -> None:
        if not self.model:
            self.model = self.config.current_model

    @property
    def config(self) -> AppConfig:
        return self.config_store.config

    def sync_model(self) -> None:
        """Make the live model follow the stored setting again."""
        self.model = self.config.current_model

    def summary_store(self) -> SummaryStore:
        """Summary store for the currently configured directory and threshold."""
        config = self.config
        return SummaryStore(Path(config.summary_dir).expanduser(), truncate_length=config.truncate_length)
