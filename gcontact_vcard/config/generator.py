"""
Configuration file generator for gcontact-vcard.

Generates the documented default configuration file written by
'gcontact-vcard init-config'.
"""

import logging
from pathlib import Path

from gcontact_vcard.utils.paths import ensure_private_dir

logger = logging.getLogger(__name__)


def generate_default_config() -> str:
    """
    Generate default YAML configuration with all options documented.

    Every option is commented out, so the generated file behaves exactly
    like having no configuration file at all.

    Returns:
        String containing YAML configuration with comments
    """
    return """# gcontact-vcard Configuration
# ============================
#
# Default options for gcontact-vcard. CLI arguments always override
# these values.
#
# To use this configuration:
#   1. Save as ~/.gcontact-vcard/config.yaml (or custom location)
#   2. Uncomment and modify options as needed


# Logging Options
# ---------------

# Enable verbose output with detailed logging
# Default: false
# verbose: true

# Directory for log files
# Default: ~/.gcontact-vcard/logs
# log_dir: /path/to/logs

# Number of daily log files to keep (0 keeps all)
# Default: 10
# log_retention_count: 10


# Authentication
# --------------

# Timeout in seconds for requests made during authentication
# Default: 10
# auth_timeout: 10


# Listing and Search
# ------------------

# Contacts per page when listing (1-1000)
# Default: 200
# page_size: 200

# Maximum search results (1-30). The service never returns more than one
# page of search results and does not report a total.
# Default: 30
# search_page_size: 30

# Contact groups per page when listing groups (1-1000)
# Default: 50
# group_page_size: 50

# Sort order of listed contacts
# Options: LAST_MODIFIED_ASCENDING, LAST_MODIFIED_DESCENDING,
#          FIRST_NAME_ASCENDING, LAST_NAME_ASCENDING
# Default: LAST_NAME_ASCENDING
# sort_order: LAST_NAME_ASCENDING


# vCard Export
# ------------

# Encoding of exported vCard files
# Default: UTF-8
# export_charset: UTF-8

# Write group memberships as CATEGORIES
# Default: true
# map_groups_to_category: true

# Include system groups (My Contacts, Friends, ...) in CATEGORIES
# Default: false
# map_system_groups: false

# Category written for starred contacts instead of the name of the starred
# group (empty: use the group name). The same category stars contacts on
# import.
# Default: ""
# starred_category: Starred

# Embed contact photos
# Default: true
# export_photo: true

# Also export Google's generated placeholder photo
# Default: false
# use_default_photo: false


# vCard Import
# ------------

# Put all contacts of an import into a new group
# Default: false
# create_import_group: true

# Name of that group (default: "VCard Import DD.MM.YYYY HH:MM")
# import_group_name: Imported from phone

# Encoding of imported vCard files
# Default: utf-8
# import_encoding: utf-8
"""


def save_config_file(
    config_path: Path, overwrite: bool = False
) -> tuple[bool, str | None]:
    """
    Save default configuration file to specified path.

    Args:
        config_path: Path where the config file should be saved
        overwrite: If True, overwrite existing file

    Returns:
        (True, None) on success, (False, error_message) on failure
    """
    config_path = config_path.expanduser().resolve()

    if config_path.exists() and not overwrite:
        return (
            False,
            f"Configuration file already exists: {config_path}\n"
            "Use --force to overwrite.",
        )

    try:
        ensure_private_dir(config_path.parent)
        config_path.write_text(generate_default_config(), encoding="utf-8")
        config_path.chmod(0o600)
    except OSError as e:
        error_msg = f"Failed to create configuration file: {e}"
        logger.error(error_msg)
        return (False, error_msg)

    logger.info(f"Created configuration file: {config_path}")
    return (True, None)
