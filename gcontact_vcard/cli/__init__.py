"""CLI package for gcontact_vcard."""

from gcontact_vcard.cli.formatters import (
    show_contact_detail,
    show_contact_table,
    show_group_table,
)
from gcontact_vcard.cli.main import (
    cli,
    get_config_dir,
    get_config_file,
    parse_form_fields,
    resolve_group,
)
from gcontact_vcard.utils import DEFAULT_CONFIG_DIR

__all__ = [
    "DEFAULT_CONFIG_DIR",
    "cli",
    "get_config_dir",
    "get_config_file",
    "parse_form_fields",
    "resolve_group",
    "show_contact_detail",
    "show_contact_table",
    "show_group_table",
]
