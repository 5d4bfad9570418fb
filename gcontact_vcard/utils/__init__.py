"""
gcontact_vcard.utils - Utility module

Common utilities including logging configuration and path resolution.
"""

from gcontact_vcard.utils.paths import (
    DEFAULT_CONFIG_DIR,
    ensure_private_dir,
    resolve_config_dir,
)

__all__ = ["resolve_config_dir", "ensure_private_dir", "DEFAULT_CONFIG_DIR"]
