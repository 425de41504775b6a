"""
Manages loading, validation, and migration of the INI configuration file.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from nzb_gateway.exceptions import ConfigurationError
from nzb_gateway.models.config import GatewayConfig

log = logging.getLogger(__name__)

MAIN_SECTION = "main"
INDEXER_SECTION_PREFIX = "indexer:"


class ConfigManager:
    """Handles all operations related to the application's INI config file."""

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser(interpolation=None)

    def load_config(self, cli_options: dict[str, Any] | None = None) -> GatewayConfig:
        """
        Loads configuration from the INI file, applies CLI overrides, and validates it.

        Args:
            cli_options: A dictionary of options provided via the command line.

        Returns:
            A validated GatewayConfig object.

        Raises:
            ConfigurationError: If the config file is missing, invalid, or validation
            fails.
        """
        if not self.config_file_path.is_file():
            raise ConfigurationError(
                f"Configuration file not found at '{self.config_file_path}'. "
                "Please run 'nzb-gateway init' first."
            )

        try:
            self._parser.read(self.config_file_path, encoding="utf-8")
        except configparser.Error as e:
            raise ConfigurationError(f"Error parsing configuration file: {e}") from e

        if self._migrate_if_needed():
            log.info(
                "[yellow]Configuration file was updated with new default values."
                "[/yellow]"
            )

        config_from_file = self._get_config_as_dict()

        if cli_options:
            config_from_file.update(cli_options)

        try:
            config_dir = self.config_file_path.parent
            return GatewayConfig(**config_from_file, config_path=str(config_dir))
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def save_new_config(self, settings: dict[str, Any]) -> None:
        """
        Creates and saves a new configuration file.

        Args:
            settings: A dictionary of settings to save. An optional 'indexers' key
            holds a list of dicts with 'name', 'host' and 'api_key'.
        """
        config = configparser.ConfigParser(interpolation=None)
        config[MAIN_SECTION] = {}

        defaults = GatewayConfig.model_construct()
        for key in sorted(GatewayConfig.get_ini_keys()):
            value = settings.get(key, getattr(defaults, key, None))
            if isinstance(value, bool):
                config[MAIN_SECTION][key] = "true" if value else "false"
            elif value is not None:
                config[MAIN_SECTION][key] = str(value)

        for indexer in settings.get("indexers", []):
            config[f"{INDEXER_SECTION_PREFIX}{indexer['name']}"] = {
                "host": indexer["host"],
                "api_key": indexer.get("api_key", ""),
            }

        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                config.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e

    def _get_config_as_dict(self) -> dict[str, Any]:
        """Reads the main section and all indexer sections into a dictionary."""
        section = self._parser[MAIN_SECTION]
        return {
            "host": section.get("host", "127.0.0.1"),
            "port": section.getint("port", 5076),
            "use_ssl": section.getboolean("use_ssl", False),
            "url_base": section.get("url_base", ""),
            "external_url": section.get("external_url", ""),
            "use_local_url_for_api_access": section.getboolean(
                "use_local_url_for_api_access", False
            ),
            "api_key": section.get("api_key", ""),
            "fetch_timeout": section.getint("fetch_timeout", 30),
            "indexers": [
                {
                    "name": name[len(INDEXER_SECTION_PREFIX) :],
                    "host": self._parser[name].get("host", ""),
                    "api_key": self._parser[name].get("api_key", ""),
                }
                for name in self._parser.sections()
                if name.startswith(INDEXER_SECTION_PREFIX)
            ],
        }

    def _migrate_if_needed(self) -> bool:
        """Adds missing default values to an existing config file."""
        defaults = GatewayConfig.model_construct()
        needs_saving = False

        if not self._parser.has_section(MAIN_SECTION):
            self._parser.add_section(MAIN_SECTION)
        config_section = self._parser[MAIN_SECTION]

        for key in sorted(GatewayConfig.get_ini_keys()):
            if key not in config_section:
                default_value = getattr(defaults, key)
                if isinstance(default_value, bool):
                    config_section[key] = "true" if default_value else "false"
                else:
                    config_section[key] = str(default_value)

                needs_saving = True
                log.debug(
                    f"Migrating config: added missing key '{key}' with "
                    f"value '{config_section[key]}'."
                )

        if needs_saving:
            try:
                with open(self.config_file_path, "w", encoding="utf-8") as f:
                    self._parser.write(f)
            except OSError as e:
                log.error(f"Could not save migrated configuration file: {e}")
                return False

        return needs_saving
