"""
Path utilities for the gcontact-vcard configuration directory.

The directory holds the OAuth client file, the stored token, the optional
config.yaml and the daily log files.
"""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_CONFIG_DIR = Path.home() / ".gcontact-vcard"

CONFIG_DIR_ENV_VAR = "GCONTACT_VCARD_CONFIG_DIR"

# Token and client secrets live here; keep it owner-only
PRIVATE_DIR_MODE = 0o700


def resolve_config_dir(config_dir: Path | str | None = None) -> Path:
    """
    Resolve the configuration directory path.

    An explicit config_dir wins over $GCONTACT_VCARD_CONFIG_DIR, which wins
    over ~/.gcontact-vcard. The result is absolute with ~ expanded.
    """
    if config_dir is not None:
        return Path(config_dir).expanduser().resolve()

    env_dir = os.environ.get(CONFIG_DIR_ENV_VAR)
    if env_dir:
        return Path(env_dir).expanduser().resolve()

    return DEFAULT_CONFIG_DIR.expanduser().resolve()


def ensure_private_dir(directory: Path) -> bool:
    """
    Create a directory readable only by its owner.

    Existing directories are left untouched.

    Returns:
        True if the directory was created
    """
    if directory.exists():
        return False
    directory.mkdir(parents=True, mode=PRIVATE_DIR_MODE)
    return True
