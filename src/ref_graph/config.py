"""Configuration management for Ref Graph."""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError

logger = logging.getLogger(__name__)


class Config(BaseModel):
    """Main configuration for Ref Graph.

    Every value can be overridden from the command line.
    """

    no_notices: bool = Field(
        default=False,
        description="Exclude bare hash (\"title\") mentions from every reachability query",
    )
    fuzzy_title_match: bool = Field(
        default=True,
        description="Allow substring title matches when reading the check-mode commit list",
    )
    git_timeout: int = Field(
        default=120, description="Timeout for a single git command in seconds"
    )

    @field_validator("git_timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Reject non-positive timeouts."""
        if v <= 0:
            raise ValueError(f"git_timeout must be positive, got {v}")
        return v


class ConfigManager:
    """Manages configuration loading and discovery."""

    CONFIG_DIR_NAME = ".ref-graph"
    CONFIG_FILE_NAME = "config.json"

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path
        self._config: Optional[Config] = None

    def load(self) -> Config:
        """Load configuration from file, or defaults when there is no file."""
        if self.config_path is None or not self.config_path.exists():
            self._config = Config()
            return self._config

        try:
            with open(self.config_path, "r") as f:
                data = json.load(f)
            self._config = Config(**data)
        except (OSError, json.JSONDecodeError, ValidationError, TypeError) as e:
            raise ConfigError(
                f"Failed to load config from {self.config_path}: {e}",
                user_guidance="Fix or remove the configuration file",
            ) from e

        logger.debug(f"Loaded configuration from {self.config_path}")
        return self._config

    def get_config(self) -> Config:
        """Get current configuration, loading if necessary."""
        if self._config is None:
            return self.load()
        return self._config

    def apply_overrides(self, **overrides: Any) -> Config:
        """Return the configuration with non-None overrides applied."""
        config = self.get_config()
        updates = {k: v for k, v in overrides.items() if v is not None}
        if not updates:
            return config

        config_dict = config.model_dump()
        config_dict.update(updates)
        try:
            self._config = Config(**config_dict)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration override: {e}") from e
        return self._config

    @classmethod
    def find_config_path(cls, start_dir: Path) -> Optional[Path]:
        """Find .ref-graph/config.json by walking up the directory tree.

        Args:
            start_dir: Directory to start searching from

        Returns:
            Path to config.json if found, None otherwise
        """
        current = start_dir.resolve()
        for path in [current] + list(current.parents):
            config_path = path / cls.CONFIG_DIR_NAME / cls.CONFIG_FILE_NAME
            if config_path.exists():
                return config_path

        return None

    @classmethod
    def create_with_backtrack(cls, start_dir: Path) -> "ConfigManager":
        """Create ConfigManager by finding config through directory backtracking."""
        return cls(cls.find_config_path(start_dir))
