"""
Configuration loader module for gcontact-vcard.

Provides YAML-based configuration file loading with support for:
- Loading configuration from default or custom paths
- Graceful handling of missing configuration files
- Type and range validation of known options
- Merging with CLI argument overrides
"""

import logging
from pathlib import Path
from typing import Any

import yaml

from gcontact_vcard.api.people_api import VALID_SORT_ORDERS
from gcontact_vcard.errors import GContactVCardError
from gcontact_vcard.utils.paths import resolve_config_dir

# Default configuration file name
DEFAULT_CONFIG_FILE = "config.yaml"

# Known options and their expected types
VALID_KEYS: dict[str, type[Any] | tuple[type[Any], ...]] = {
    # Logging options
    "verbose": bool,
    "log_dir": str,
    "log_retention_count": int,
    # Auth options
    "auth_timeout": int,
    # API options
    "page_size": int,
    "search_page_size": int,
    "group_page_size": int,
    "sort_order": str,
    # Export options
    "export_charset": str,
    "export_photo": bool,
    "use_default_photo": bool,
    "map_groups_to_category": bool,
    "map_system_groups": bool,
    "starred_category": str,
    # Import options
    "create_import_group": bool,
    "import_group_name": str,
    "import_encoding": str,
}

# Inclusive ranges of numeric options
NUMERIC_RANGES: dict[str, tuple[int, int]] = {
    "page_size": (1, 1000),
    "search_page_size": (1, 30),
    "group_page_size": (1, 1000),
    "auth_timeout": (1, 600),
    "log_retention_count": (0, 1000),
}

logger = logging.getLogger(__name__)


class ConfigError(GContactVCardError):
    """Raised when configuration loading or validation fails."""

    pass


class ConfigLoader:
    """
    YAML configuration file loader.

    Attributes:
        config_dir: Directory containing the configuration file
        config_file: Name of the configuration file

    Usage:
        loader = ConfigLoader()
        config = loader.load_and_validate()

        # Load from specific file
        config = loader.load_from_file("/path/to/config.yaml")
    """

    def __init__(
        self, config_dir: Path | None = None, config_file: str = DEFAULT_CONFIG_FILE
    ):
        """
        Initialize the configuration loader.

        Args:
            config_dir: Directory containing the configuration file.
                       Defaults to ~/.gcontact-vcard/ or $GCONTACT_VCARD_CONFIG_DIR
            config_file: Name of the configuration file (default: config.yaml)
        """
        self.config_dir = resolve_config_dir(config_dir)
        self.config_file = config_file

    @property
    def config_path(self) -> Path:
        return self.config_dir / self.config_file

    def load(self) -> dict[str, Any]:
        """
        Load configuration from the default configuration file.

        Returns:
            Configuration values, or an empty dict if the file doesn't exist

        Raises:
            ConfigError: If the file exists but cannot be parsed
        """
        return self.load_from_file(self.config_path)

    def load_from_file(self, path: Path | str) -> dict[str, Any]:
        """
        Load configuration from a specific file.

        Returns:
            Configuration values, or an empty dict if the file doesn't exist

        Raises:
            ConfigError: If the file exists but cannot be parsed
        """
        path = Path(path)

        if not path.exists():
            logger.debug(f"Configuration file not found: {path}")
            return {}

        try:
            with open(path, encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse YAML configuration file: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read configuration file: {e}") from e

        if config is None:
            logger.debug(f"Configuration file is empty: {path}")
            return {}

        if not isinstance(config, dict):
            raise ConfigError(
                f"Configuration file must contain a YAML dictionary, "
                f"got {type(config).__name__}"
            )

        logger.debug(f"Loaded configuration from {path}")
        return config

    def validate(self, config: dict[str, Any]) -> None:
        """
        Validate configuration types and values.

        Unknown keys are logged and ignored.

        Raises:
            ConfigError: If a known option has the wrong type or value
        """
        if not isinstance(config, dict):
            raise ConfigError(
                f"Configuration must be a dictionary, got {type(config).__name__}"
            )

        for key, value in config.items():
            if key not in VALID_KEYS:
                logger.warning(f"Ignoring unknown configuration option '{key}'")
                continue
            expected_type = VALID_KEYS[key]
            # bool is an int subclass; reject it for numeric options
            if isinstance(value, bool) and expected_type is int:
                raise ConfigError(
                    f"Invalid type for '{key}': expected int, got bool"
                )
            if not isinstance(value, expected_type):
                if isinstance(expected_type, tuple):
                    type_name = " or ".join(t.__name__ for t in expected_type)
                else:
                    type_name = expected_type.__name__
                raise ConfigError(
                    f"Invalid type for '{key}': expected {type_name}, "
                    f"got {type(value).__name__}"
                )

        for key, (low, high) in NUMERIC_RANGES.items():
            if key in config and not (low <= config[key] <= high):
                raise ConfigError(
                    f"{key} must be between {low} and {high}, got {config[key]}"
                )

        if "sort_order" in config and config["sort_order"] not in VALID_SORT_ORDERS:
            raise ConfigError(
                f"Invalid sort_order '{config['sort_order']}'. "
                f"Must be one of: {', '.join(VALID_SORT_ORDERS)}"
            )

        for key in ("export_charset", "import_encoding"):
            if key in config:
                try:
                    "".encode(config[key])
                except LookupError as e:
                    raise ConfigError(f"Unknown {key} '{config[key]}'") from e

    def load_and_validate(self) -> dict[str, Any]:
        """
        Load configuration and validate it.

        Raises:
            ConfigError: If configuration cannot be loaded or is invalid
        """
        config = self.load()
        if config:
            self.validate(config)
        return config
