from typing import Any, Literal
import json
import os
import tomllib
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from loguru import logger
from .events import Signal


# --- Settings Models ---
class GeneralSettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    debug_mode: bool = False
    log_dir: str = "logs"


class DatabaseSettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    path: str = "data/history.db"
    timeout: float = Field(default=10.0, gt=0)  # sqlite busy timeout, seconds
    journal_mode: Literal["WAL", "DELETE", "TRUNCATE", "MEMORY"] = "WAL"


class HistorySettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    max_history_row_count: int = Field(default=200000, gt=0)
    prune_history_row_count: int = Field(default=5000, gt=0)
    top_sites_cache_size: int = Field(default=32, gt=0)
    maintenance_interval_minutes: int = Field(default=0, ge=0)  # 0 disables


class AppConfig(BaseModel):
    general: GeneralSettings = Field(default_factory=GeneralSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    history: HistorySettings = Field(default_factory=HistorySettings)


# --- Manager ---
class ConfigManager:
    """
    Manages application configuration with persistence and reactivity.
    """
    def __init__(self, filepath: str = "config.json"):
        self.filepath = filepath
        self._data = AppConfig()
        self.on_changed = Signal("ConfigChanged")
        self._load()

    @property
    def data(self) -> AppConfig:
        return self._data

    def update(self, section: str, key: str, value: Any):
        """Update a setting, validate via Pydantic, autosave, and emit change event."""
        if not hasattr(self._data, section):
            raise ValueError(f"Invalid section: {section}")

        section_obj = getattr(self._data, section)
        if not hasattr(section_obj, key):
            raise ValueError(f"Invalid key: {key} in section {section}")

        # Raises pydantic.ValidationError on bad values (validate_assignment)
        setattr(section_obj, key, value)
        self._save()
        self.on_changed.emit(section, key, getattr(section_obj, key))

    def get(self, section: str, key: str) -> Any:
        section_obj = getattr(self._data, section)
        return getattr(section_obj, key)

    def _load(self):
        """Load settings from JSON or TOML file if present; otherwise keep defaults."""
        if os.path.isfile(self.filepath):
            try:
                if self.filepath.endswith('.toml'):
                    with open(self.filepath, "rb") as f:
                        raw = tomllib.load(f)
                else:
                    with open(self.filepath, "r", encoding="utf-8") as f:
                        raw = json.load(f)
                self._data = AppConfig.model_validate(raw)
            except (OSError, ValueError, ValidationError) as e:
                # TOMLDecodeError and JSONDecodeError are ValueErrors
                logger.error(f"Failed to load config from {self.filepath}: {e}")
                self._save()
        else:
            self._save()

    def _save(self):
        """Persist current config to JSON file."""
        if self.filepath.endswith('.toml'):
            logger.debug(f"TOML config {self.filepath} is read-only, not saving")
            return
        try:
            dirname = os.path.dirname(self.filepath)
            if dirname:
                os.makedirs(dirname, exist_ok=True)
            with open(self.filepath, "w", encoding="utf-8") as f:
                json.dump(self._data.model_dump(), f, indent=4)
        except OSError as e:
            logger.error(f"Failed to save config to {self.filepath}: {e}")
