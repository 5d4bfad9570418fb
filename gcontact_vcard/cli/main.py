"""
Command-line interface for gcontact_vcard.

Provides CLI commands for authentication, contact and contact group
management, and vCard import and export.

Usage:
    # Show help
    gcontact-vcard --help

    # Authenticate
    gcontact-vcard auth

    # Browse contacts
    gcontact-vcard list --group Family
    gcontact-vcard search "Ada"

    # vCard transfer
    gcontact-vcard import contacts.vcf --create-group
    gcontact-vcard export --group Family -o family.vcf
"""

import sys
from pathlib import Path
from typing import Any, NoReturn

import click

from gcontact_vcard import __version__
from gcontact_vcard.api.groups_api import (
    DEFAULT_GROUP_PAGE_SIZE,
    GROUP_TYPE_ALL,
    ContactGroupsAPI,
)
from gcontact_vcard.api.people_api import (
    DEFAULT_PAGE_SIZE,
    SEARCH_MAX_PAGE_SIZE,
    SORT_LAST_NAME_ASCENDING,
    VALID_SORT_ORDERS,
    PeopleAPI,
)
from gcontact_vcard.auth.google_auth import DEFAULT_AUTH_TIMEOUT, GoogleAuth
from gcontact_vcard.cli.formatters import (
    show_contact_detail,
    show_contact_table,
    show_group_table,
)
from gcontact_vcard.config.generator import save_config_file
from gcontact_vcard.config.loader import DEFAULT_CONFIG_FILE, ConfigError, ConfigLoader
from gcontact_vcard.contacts.group import (
    GROUP_TYPE_USER_CONTACT_GROUP,
    is_group_resource_name,
)
from gcontact_vcard.errors import AuthError, GContactVCardError, NotFoundError
from gcontact_vcard.mapping.form import KEY_ETAG, KEY_RESOURCE_NAME, contact_from_form
from gcontact_vcard.transfer.exporter import (
    DEFAULT_CHARSET,
    ExportOptions,
    VCardExporter,
)
from gcontact_vcard.transfer.importer import ImportOptions, VCardImporter
from gcontact_vcard.utils import resolve_config_dir
from gcontact_vcard.utils.logging import cleanup_old_logs, get_logger, setup_logging


def get_config_dir(config_dir: str | None) -> Path:
    """Get the configuration directory path."""
    return resolve_config_dir(config_dir)


def get_config_file(config_file: str | None, config_dir: Path) -> Path:
    """Get the configuration file path."""
    if config_file:
        return Path(config_file)
    return config_dir / DEFAULT_CONFIG_FILE


def parse_form_fields(
    _ctx: click.Context | None, _param: click.Parameter | None, values: tuple[str, ...]
) -> dict[str, str]:
    """Turn repeated KEY=VALUE options into a form dictionary."""
    form: dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"Expected KEY=VALUE, got '{item}'")
        form[key.strip()] = value
    return form


def get_people_api(ctx: click.Context) -> PeopleAPI:
    """Build the contacts client from stored credentials and configuration."""
    config = ctx.obj["config"]
    if "people_api" not in ctx.obj:
        ctx.obj["people_api"] = PeopleAPI(
            credentials=_require_credentials(ctx),
            page_size=config.get("page_size", DEFAULT_PAGE_SIZE),
            search_page_size=config.get("search_page_size", SEARCH_MAX_PAGE_SIZE),
        )
    api: PeopleAPI = ctx.obj["people_api"]
    return api


def get_groups_api(ctx: click.Context) -> ContactGroupsAPI:
    """Build the contact groups client from stored credentials and configuration."""
    config = ctx.obj["config"]
    if "groups_api" not in ctx.obj:
        ctx.obj["groups_api"] = ContactGroupsAPI(
            credentials=_require_credentials(ctx),
            page_size=config.get("group_page_size", DEFAULT_GROUP_PAGE_SIZE),
        )
    api: ContactGroupsAPI = ctx.obj["groups_api"]
    return api


def _require_credentials(ctx: click.Context) -> Any:
    if "credentials" not in ctx.obj:
        auth = GoogleAuth(
            config_dir=ctx.obj["config_dir"],
            auth_timeout=ctx.obj["config"].get("auth_timeout", DEFAULT_AUTH_TIMEOUT),
        )
        ctx.obj["credentials"] = auth.require_credentials()
    return ctx.obj["credentials"]


def resolve_group(groups_api: ContactGroupsAPI, group: str) -> str:
    """
    Accept a group resource name or a group name.

    Raises:
        NotFoundError: If no group has that name
    """
    if is_group_resource_name(group):
        return group
    resource_name = groups_api.resolve_name_to_id(group)
    if not resource_name:
        raise NotFoundError(f"Contact group '{group}' not found")
    return resource_name


def fail(message: str) -> NoReturn:
    """Print an error message and exit with status 1."""
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="gcontact-vcard")
@click.option(
    "--verbose", "-v", is_flag=True, help="Enable verbose output with detailed logging."
)
@click.option(
    "--config-dir",
    "-c",
    type=click.Path(exists=False, file_okay=False, dir_okay=True),
    envvar="GCONTACT_VCARD_CONFIG_DIR",
    help="Configuration directory path (default: ~/.gcontact-vcard).",
)
@click.option(
    "--config-file",
    "-f",
    type=click.Path(exists=False, file_okay=True, dir_okay=False),
    envvar="GCONTACT_VCARD_CONFIG_FILE",
    help="Configuration file path (default: <config-dir>/config.yaml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    config_dir: str | None,
    config_file: str | None,
) -> None:
    """
    Google Contacts manager with vCard import and export.

    Lists, searches and edits the contacts and contact groups of a Google
    account, and moves contacts in and out as vCard 3.0 files.
    """
    ctx.ensure_object(dict)

    resolved_config_dir = get_config_dir(config_dir)
    resolved_config_file = get_config_file(config_file, resolved_config_dir)

    ctx.obj["config_dir"] = resolved_config_dir
    ctx.obj["config_file"] = resolved_config_file

    config: dict[str, Any] = {}
    try:
        loader = ConfigLoader(config_dir=resolved_config_dir)
        config = loader.load_from_file(resolved_config_file)
        if config:
            loader.validate(config)
    except ConfigError as e:
        # The CLI keeps working on built-in defaults
        click.echo(
            click.style(f"Warning: Configuration error: {e}", fg="yellow"), err=True
        )
        config = {}

    ctx.obj["config"] = config

    effective_verbose = verbose or config.get("verbose", False)
    ctx.obj["verbose"] = effective_verbose

    log_dir = Path(config["log_dir"]) if config.get("log_dir") else None
    setup_logging(verbose=effective_verbose, log_dir=log_dir, enable_file_logging=True)

    log_retention = config.get("log_retention_count", 10)
    if log_retention > 0:
        cleanup_old_logs(log_dir=log_dir, keep_count=log_retention)


# =============================================================================
# Auth Commands
# =============================================================================


@cli.command("auth")
@click.option(
    "--force",
    "-F",
    is_flag=True,
    help="Force re-authentication even if already authenticated.",
)
@click.pass_context
def auth_command(ctx: click.Context, force: bool) -> None:
    """
    Authenticate the Google account.

    Opens a browser window to complete the OAuth flow and stores
    the credentials for future use.

    Examples:

        gcontact-vcard auth

        # Force re-authentication
        gcontact-vcard auth --force
    """
    logger = get_logger(__name__)
    config_dir = ctx.obj["config_dir"]
    config = ctx.obj["config"]

    click.echo("Authenticating...")

    auth = GoogleAuth(
        config_dir=config_dir,
        auth_timeout=config.get("auth_timeout", DEFAULT_AUTH_TIMEOUT),
    )

    if not force and auth.is_authenticated():
        click.echo(click.style("Already authenticated.", fg="green"))
        click.echo("Use --force to re-authenticate.")
        return

    if not auth.credentials_path.exists():
        click.echo(
            click.style(
                f"Error: OAuth credentials file not found: {auth.credentials_path}",
                fg="red",
            ),
            err=True,
        )
        click.echo("\nTo get started:", err=True)
        click.echo("1. Go to https://console.cloud.google.com/", err=True)
        click.echo("2. Create a project and enable the People API", err=True)
        click.echo("3. Create OAuth 2.0 credentials (Desktop application)", err=True)
        click.echo(f"4. Download and save as: {auth.credentials_path}", err=True)
        sys.exit(1)

    try:
        auth.authenticate(force_reauth=force)
    except AuthError as e:
        logger.error(f"Authentication failed: {e}")
        click.echo(click.style(f"Authentication failed: {e}", fg="red"), err=True)
        sys.exit(1)

    email = auth.get_account_email()
    if email:
        click.echo(click.style(f"Successfully authenticated ({email})!", fg="green"))
    else:
        click.echo(click.style("Successfully authenticated!", fg="green"))
    logger.info("Authentication completed")


@cli.command("status")
@click.pass_context
def status_command(ctx: click.Context) -> None:
    """
    Show authentication and configuration status.

    Examples:

        gcontact-vcard status
    """
    config_file = ctx.obj["config_file"]
    auth = GoogleAuth(config_dir=ctx.obj["config_dir"])
    status = auth.get_auth_status()

    click.echo(f"Configuration directory: {status['config_dir']}")
    config_state = "found" if Path(config_file).exists() else "not found"
    click.echo(f"Configuration file: {config_file} ({config_state})")
    click.echo()

    if status["authenticated"]:
        email = status["email"] or "unknown account"
        click.echo(click.style(f"Authenticated: {email}", fg="green"))
    else:
        click.echo(click.style("Not authenticated", fg="yellow"))
        if not status["credentials_exist"]:
            click.echo(f"  Missing OAuth client file: {status['credentials_path']}")
        click.echo("  Run: gcontact-vcard auth")


@cli.command("logout")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt.")
@click.pass_context
def logout_command(ctx: click.Context, yes: bool) -> None:
    """
    Clear stored authentication credentials.

    You will need to re-authenticate before using the account again.
    """
    logger = get_logger(__name__)

    if not yes:
        click.confirm("Clear stored credentials?", abort=True)

    auth = GoogleAuth(config_dir=ctx.obj["config_dir"])
    if auth.clear_credentials():
        click.echo(click.style("Credentials cleared.", fg="green"))
        logger.info("Cleared stored credentials")
    else:
        click.echo("No stored credentials found.")


# =============================================================================
# Init-Config Command
# =============================================================================


@cli.command("init-config")
@click.option(
    "--force", "-F", is_flag=True, help="Overwrite existing configuration file."
)
@click.pass_context
def init_config_command(ctx: click.Context, force: bool) -> None:
    """
    Generate a default configuration file.

    Creates a documented configuration file with every option commented
    out.

    Examples:

        gcontact-vcard init-config

        # Overwrite existing config file
        gcontact-vcard init-config --force
    """
    logger = get_logger(__name__)
    config_file = ctx.obj["config_file"]

    click.echo(f"Creating configuration file: {config_file}")

    success, error = save_config_file(config_file, overwrite=force)

    if success:
        click.echo(click.style("Configuration file created successfully!", fg="green"))
        click.echo(f"\nLocation: {config_file}")
        click.echo("\nNext steps:")
        click.echo("1. Edit the file to uncomment and configure desired options")
        click.echo("2. Run 'gcontact-vcard --help' to see available commands")
        logger.info(f"Created configuration file: {config_file}")
    else:
        click.echo(click.style(f"Error: {error}", fg="red"), err=True)
        logger.error(f"Failed to create configuration file: {error}")
        sys.exit(1)


# =============================================================================
# Contact Commands
# =============================================================================


@cli.command("list")
@click.option("--group", "-g", help="Only list members of this group (name or id).")
@click.option(
    "--sort",
    "-s",
    "sort_order",
    type=click.Choice(VALID_SORT_ORDERS, case_sensitive=False),
    help="Sort order (default: from config or LAST_NAME_ASCENDING).",
)
@click.pass_context
def list_command(ctx: click.Context, group: str | None, sort_order: str | None) -> None:
    """
    List contacts.

    Examples:

        gcontact-vcard list

        gcontact-vcard list --group Family --sort FIRST_NAME_ASCENDING
    """
    logger = get_logger(__name__)
    config = ctx.obj["config"]
    sort_order = sort_order or config.get("sort_order", SORT_LAST_NAME_ASCENDING)
    sort_order = sort_order.upper()

    try:
        people_api = get_people_api(ctx)
        group_resource_name = ""
        if group:
            group_resource_name = resolve_group(get_groups_api(ctx), group)
        contacts = people_api.list_contacts(
            sort_order=sort_order, group_resource_name=group_resource_name
        )
    except GContactVCardError as e:
        logger.error(f"Failed to list contacts: {e}")
        fail(str(e))

    if not contacts:
        click.echo("No contacts found.")
        return
    show_contact_table(contacts, verbose=ctx.obj["verbose"])


@cli.command("search")
@click.argument("query")
@click.pass_context
def search_command(ctx: click.Context, query: str) -> None:
    """
    Search contacts by name, email, phone or organization.

    Only the first page of results is returned (at most 30 contacts).
    """
    logger = get_logger(__name__)
    try:
        contacts = get_people_api(ctx).search_contacts(query)
    except GContactVCardError as e:
        logger.error(f"Search failed: {e}")
        fail(str(e))

    if not contacts:
        click.echo(f"No contacts match '{query}'.")
        return
    show_contact_table(contacts, verbose=ctx.obj["verbose"])


@cli.command("show")
@click.argument("resource_name")
@click.option("--json", "as_json", is_flag=True, help="Print the raw person JSON.")
@click.pass_context
def show_command(ctx: click.Context, resource_name: str, as_json: bool) -> None:
    """
    Show all fields of a contact.

    RESOURCE_NAME is the contact id, e.g. people/c123.
    """
    logger = get_logger(__name__)
    try:
        contact = get_people_api(ctx).get_contact(resource_name)
        if as_json:
            click.echo(contact.to_json())
            return
        group_names = get_groups_api(ctx).group_names(GROUP_TYPE_ALL)
    except GContactVCardError as e:
        logger.error(f"Failed to load {resource_name}: {e}")
        fail(str(e))

    show_contact_detail(contact, group_names)


@cli.command("save")
@click.option(
    "--field",
    "-d",
    "form",
    multiple=True,
    callback=parse_form_fields,
    metavar="KEY=VALUE",
    help="Form field such as names_0_givenName=Ada or emailAddresses=0.",
)
@click.pass_context
def save_command(ctx: click.Context, form: dict[str, str]) -> None:
    """
    Create or update a contact from form fields.

    Keys follow the pattern <group>_<index>_<attribute>. A bare group name
    (addresses, emailAddresses, phoneNumbers, urls) selects the primary
    entry. With resourceName=people/... the contact is updated; only the
    field groups present in the form are replaced. Without an etag the
    current one is fetched first.

    Examples:

        gcontact-vcard save -d names_0_givenName=Ada \\
            -d emailAddresses_0_value=ada@example.com -d emailAddresses=0

        gcontact-vcard save -d resourceName=people/c123 \\
            -d phoneNumbers_0_value=+44123 -d phoneNumbers_0_type=mobile
    """
    logger = get_logger(__name__)
    if not form:
        fail("No fields given. Use -d KEY=VALUE.")

    try:
        contact = contact_from_form(form)
        people_api = get_people_api(ctx)
        if contact.resource_name:
            etag = form.get(KEY_ETAG)
            if not etag:
                etag = people_api.get_contact(contact.resource_name).etag
            saved = people_api.update_contact(contact.resource_name, contact, etag=etag)
            action = "Updated"
        else:
            saved = people_api.create_contact(contact)
            action = "Created"
    except (GContactVCardError, IndexError) as e:
        logger.error(f"Failed to save {form.get(KEY_RESOURCE_NAME) or 'contact'}: {e}")
        fail(str(e))

    click.echo(
        click.style(
            f"{action} {saved.display_name} ({saved.resource_name})", fg="green"
        )
    )


@cli.command("delete")
@click.argument("resource_name")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt.")
@click.pass_context
def delete_command(ctx: click.Context, resource_name: str, yes: bool) -> None:
    """Delete a contact."""
    logger = get_logger(__name__)
    if not yes:
        click.confirm(f"Delete contact {resource_name}?", abort=True)

    try:
        get_people_api(ctx).delete_contact(resource_name)
    except GContactVCardError as e:
        logger.error(f"Failed to delete {resource_name}: {e}")
        fail(str(e))

    click.echo(click.style(f"Deleted {resource_name}", fg="green"))


@cli.command("star")
@click.argument("resource_name")
@click.option("--off", is_flag=True, help="Remove the star instead.")
@click.pass_context
def star_command(ctx: click.Context, resource_name: str, off: bool) -> None:
    """Star or unstar a contact."""
    logger = get_logger(__name__)
    try:
        get_people_api(ctx).set_starred(resource_name, not off)
    except GContactVCardError as e:
        logger.error(f"Failed to change star of {resource_name}: {e}")
        fail(str(e))

    state = "Unstarred" if off else "Starred"
    click.echo(click.style(f"{state} {resource_name}", fg="green"))


@cli.command("set-photo")
@click.argument("resource_name")
@click.argument("source")
@click.pass_context
def set_photo_command(ctx: click.Context, resource_name: str, source: str) -> None:
    """
    Upload a contact photo.

    SOURCE is a file path, an http(s) URL or a data: URI. JPEG, PNG, GIF
    and BMP images are accepted.
    """
    logger = get_logger(__name__)
    try:
        get_people_api(ctx).set_photo(resource_name, source)
    except GContactVCardError as e:
        logger.error(f"Failed to set photo of {resource_name}: {e}")
        fail(str(e))

    click.echo(click.style(f"Photo updated for {resource_name}", fg="green"))


@cli.command("delete-photo")
@click.argument("resource_name")
@click.pass_context
def delete_photo_command(ctx: click.Context, resource_name: str) -> None:
    """Remove the photo of a contact."""
    logger = get_logger(__name__)
    try:
        get_people_api(ctx).delete_photo(resource_name)
    except GContactVCardError as e:
        logger.error(f"Failed to delete photo of {resource_name}: {e}")
        fail(str(e))

    click.echo(click.style(f"Photo removed from {resource_name}", fg="green"))


# =============================================================================
# Group Commands
# =============================================================================


@cli.command("list-groups")
@click.option(
    "--all",
    "-A",
    "show_all",
    is_flag=True,
    help="Show all groups including system groups.",
)
@click.pass_context
def list_groups_command(ctx: click.Context, show_all: bool) -> None:
    """
    List contact groups.

    System groups (myContacts, starred, ...) are hidden by default.
    """
    logger = get_logger(__name__)
    group_type = GROUP_TYPE_ALL if show_all else GROUP_TYPE_USER_CONTACT_GROUP
    try:
        groups = get_groups_api(ctx).list_groups(group_type)
    except GContactVCardError as e:
        logger.error(f"Failed to list groups: {e}")
        fail(str(e))

    if not groups:
        if show_all:
            click.echo("No contact groups found.")
        else:
            click.echo("No user contact groups found.")
            click.echo("Use --all to include system groups.")
        return

    show_group_table(list(groups), verbose=ctx.obj["verbose"])


@cli.command("create-group")
@click.argument("name")
@click.pass_context
def create_group_command(ctx: click.Context, name: str) -> None:
    """Create a contact group."""
    logger = get_logger(__name__)
    try:
        group = get_groups_api(ctx).create_group(name)
    except GContactVCardError as e:
        logger.error(f"Failed to create group '{name}': {e}")
        fail(str(e))

    click.echo(click.style(f"Created: {group.resource_name}", fg="green"))


@cli.command("rename-group")
@click.argument("group")
@click.argument("new_name")
@click.pass_context
def rename_group_command(ctx: click.Context, group: str, new_name: str) -> None:
    """
    Rename a contact group.

    GROUP is the current name or resource name of the group.
    """
    logger = get_logger(__name__)
    try:
        groups_api = get_groups_api(ctx)
        resource_name = resolve_group(groups_api, group)
        renamed = groups_api.rename_group(resource_name, new_name)
    except GContactVCardError as e:
        logger.error(f"Failed to rename group '{group}': {e}")
        fail(str(e))

    message = f"Renamed {renamed.resource_name} to '{new_name}'"
    click.echo(click.style(message, fg="green"))


@cli.command("delete-group")
@click.argument("group")
@click.option(
    "--delete-contacts",
    is_flag=True,
    help="Also delete all contacts in the group (default: preserve contacts).",
)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt.")
@click.pass_context
def delete_group_command(
    ctx: click.Context, group: str, delete_contacts: bool, yes: bool
) -> None:
    """
    Delete a contact group.

    Contacts in the group are preserved by default.
    Use --delete-contacts to also delete all contacts in the group.
    """
    logger = get_logger(__name__)

    if not yes:
        warning_msg = f"Delete group '{group}'"
        if delete_contacts:
            warning_msg += " AND all contacts in it"
        click.confirm(warning_msg + "?", abort=True)

    try:
        groups_api = get_groups_api(ctx)
        resource_name = resolve_group(groups_api, group)
        groups_api.delete_group(resource_name, delete_contacts=delete_contacts)
    except GContactVCardError as e:
        logger.error(f"Failed to delete group '{group}': {e}")
        fail(str(e))

    click.echo(click.style(f"Deleted: {resource_name}", fg="green"))


# =============================================================================
# Import / Export Commands
# =============================================================================


@cli.command("import")
@click.argument("vcard_file", type=click.Path(dir_okay=False))
@click.option(
    "--create-group/--no-create-group",
    default=None,
    help="Put the imported contacts into a new group.",
)
@click.option("--group-name", help="Name of the import group.")
@click.option("--encoding", help="Encoding of the vCard file (default: utf-8).")
@click.option(
    "--starred-category",
    help="Category that stars a contact instead of naming a group.",
)
@click.pass_context
def import_command(
    ctx: click.Context,
    vcard_file: str,
    create_group: bool | None,
    group_name: str | None,
    encoding: str | None,
    starred_category: str | None,
) -> None:
    """
    Import contacts from a vCard file.

    CATEGORIES become group memberships; missing groups are created.
    The import stops at the first failing contact.

    Examples:

        gcontact-vcard import phone.vcf --create-group --group-name "From phone"
    """
    logger = get_logger(__name__)
    config = ctx.obj["config"]

    options = ImportOptions(
        create_import_group=(
            create_group
            if create_group is not None
            else config.get("create_import_group", False)
        ),
        import_group_name=group_name or config.get("import_group_name", ""),
        starred_category=(
            starred_category
            if starred_category is not None
            else config.get("starred_category", "")
        ),
        encoding=encoding or config.get("import_encoding", "utf-8"),
    )

    importer = None
    try:
        importer = VCardImporter(get_people_api(ctx), get_groups_api(ctx), options)
        count = importer.import_file(vcard_file)
    except GContactVCardError as e:
        logger.error(f"Import failed: {e}")
        if importer is not None and importer.import_count:
            click.echo(
                click.style(
                    f"{importer.import_count} contact(s) were imported before the "
                    f"failure (last: {importer.last_resource_name}).",
                    fg="yellow",
                ),
                err=True,
            )
        fail(str(e))

    click.echo(click.style(f"Imported {count} contact(s).", fg="green"))
    if importer.import_group_resource_name:
        click.echo(f"Import group: {importer.import_group_resource_name}")


@cli.command("export")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="Write to this file instead of standard output.",
)
@click.option("--group", "-g", help="Only export members of this group (name or id).")
@click.option("--contact", "contact_resource", help="Export a single contact.")
@click.option("--charset", help="Encoding of the output file (default: UTF-8).")
@click.option(
    "--photos/--no-photos", default=None, help="Embed contact photos."
)
@click.option(
    "--default-photo/--no-default-photo",
    default=None,
    help="Also export the generated placeholder photo.",
)
@click.option(
    "--categories/--no-categories",
    default=None,
    help="Write group memberships as CATEGORIES.",
)
@click.option(
    "--system-groups/--no-system-groups",
    default=None,
    help="Include system groups in CATEGORIES.",
)
@click.option("--starred-category", help="Category written for starred contacts.")
@click.pass_context
def export_command(
    ctx: click.Context,
    output: str | None,
    group: str | None,
    contact_resource: str | None,
    charset: str | None,
    photos: bool | None,
    default_photo: bool | None,
    categories: bool | None,
    system_groups: bool | None,
    starred_category: str | None,
) -> None:
    """
    Export contacts as vCard 3.0.

    Exports all contacts, the members of one group, or a single contact.

    Examples:

        gcontact-vcard export -o all.vcf

        gcontact-vcard export --group Family --no-photos -o family.vcf
    """
    logger = get_logger(__name__)
    config = ctx.obj["config"]

    if group and contact_resource:
        fail("Use either --group or --contact, not both.")

    def pick(value: Any, key: str, default: Any) -> Any:
        return value if value is not None else config.get(key, default)

    options = ExportOptions(
        map_groups_to_category=pick(categories, "map_groups_to_category", True),
        map_system_groups=pick(system_groups, "map_system_groups", False),
        export_photo=pick(photos, "export_photo", True),
        use_default_photo=pick(default_photo, "use_default_photo", False),
        starred_category=pick(starred_category, "starred_category", ""),
        charset=pick(charset, "export_charset", DEFAULT_CHARSET),
    )

    try:
        exporter = VCardExporter(get_people_api(ctx), get_groups_api(ctx), options)
        resource_name = contact_resource or ""
        if group:
            resource_name = resolve_group(exporter.groups_api, group)

        if output:
            count = exporter.export_to_file(output, resource_name)
        else:
            click.echo(exporter.export(resource_name), nl=False)
            count = exporter.export_count
    except GContactVCardError as e:
        logger.error(f"Export failed: {e}")
        fail(str(e))

    for name in exporter.skipped:
        click.echo(click.style(f"Skipped {name}: no name", fg="yellow"), err=True)
    if output:
        click.echo(click.style(f"Exported {count} contact(s) to {output}", fg="green"))
