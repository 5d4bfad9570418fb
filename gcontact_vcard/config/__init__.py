"""
gcontact_vcard.config - Configuration management module

Contains configuration loading, validation and the default config file.
"""

from gcontact_vcard.config.generator import generate_default_config, save_config_file
from gcontact_vcard.config.loader import (
    DEFAULT_CONFIG_FILE,
    ConfigError,
    ConfigLoader,
)

__all__ = [
    "ConfigError",
    "ConfigLoader",
    "DEFAULT_CONFIG_FILE",
    "generate_default_config",
    "save_config_file",
]
