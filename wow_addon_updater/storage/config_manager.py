"""
Manages loading, validation, and creation of the YAML configuration file.
"""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from wow_addon_updater.exceptions import ConfigurationError
from wow_addon_updater.models.config import UpdaterConfig

log = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.yaml")


class ConfigManager:
    """Handles all operations related to the application's YAML config file."""

    def __init__(self, config_file_path: Path):
        self.config_file_path = Path(config_file_path)

    def exists(self) -> bool:
        return self.config_file_path.is_file()

    def load_config(self) -> UpdaterConfig:
        """
        Loads the configuration from the YAML file and validates it.

        Returns:
            A validated UpdaterConfig object.

        Raises:
            ConfigurationError: If the config file is missing, invalid, or validation
            fails.
        """
        if not self.exists():
            raise ConfigurationError(
                f"Configuration file not found at '{self.config_file_path}'. "
                "Please run 'wow-addon-updater init' first."
            )

        try:
            with open(self.config_file_path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigurationError(f"Error reading configuration file: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Error parsing configuration file: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                "Configuration file must contain the 'classic' and 'retail' sections."
            )

        try:
            return UpdaterConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def save_default_config(self) -> None:
        """Creates a configuration file with empty profiles."""
        self.save_config(UpdaterConfig())

    def save_config(self, config: UpdaterConfig) -> None:
        """Writes ``config`` to the configuration file."""
        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as f:
                yaml.safe_dump(config.model_dump(), f, sort_keys=False)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e
        log.debug(f"Wrote configuration to '{self.config_file_path}'.")
