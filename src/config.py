"""
Configuration module for the timeline monitor.
Manages application settings with defaults and persistence.
"""

from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional
import json
import logging

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """Application configuration with sensible defaults."""

    # Time-tracker API
    api_base_url: str = "http://localhost:8080"
    request_timeout_seconds: float = 10.0

    # Live refresh
    refresh_interval_seconds: int = 30

    # UI settings
    theme: str = "darkly"  # ttkbootstrap theme: darkly, superhero, litera, flatly, etc.
    window_geometry: str = "1100x700"
    show_notifications: bool = True
    start_minimized: bool = False

    # Timeline defaults
    default_period: str = "day"  # day, week or month
    default_grouping: str = "app"  # app, category or project

    # Overview
    overview_top_n: int = 5

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        # Filter out any unknown keys
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return cls(**filtered)


def default_config_path() -> Path:
    project_root = Path(__file__).parent.parent
    return project_root / "data" / "config.json"


class ConfigManager:
    """Manages loading and saving configuration to a JSON file."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else default_config_path()
        self._config: Optional[Config] = None

    @property
    def config(self) -> Config:
        if self._config is None:
            self._config = self.load()
        return self._config

    def load(self) -> Config:
        """Load configuration from disk, falling back to defaults."""
        if not self.path.exists():
            return Config()

        try:
            stored = json.loads(self.path.read_text(encoding='utf-8'))
        except (OSError, ValueError) as e:
            logger.error(f"Could not read config {self.path}: {e}")
            return Config()

        if not isinstance(stored, dict):
            logger.warning(f"Ignoring malformed config {self.path}")
            return Config()

        return Config.from_dict(stored)

    def save(self, config: Optional[Config] = None):
        """Save configuration to disk."""
        if config is not None:
            self._config = config

        if self._config is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self._config.to_dict(), indent=2), encoding='utf-8')

    def update(self, **kwargs):
        """Update specific configuration values."""
        config = self.config
        for key, value in kwargs.items():
            if hasattr(config, key):
                setattr(config, key, value)
        self.save()

    def reset_to_defaults(self):
        """Reset configuration to defaults."""
        self._config = Config()
        self.save()
