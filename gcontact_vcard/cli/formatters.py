"""CLI output formatting functions.

This module contains functions for displaying contacts and contact groups
on the command line.
"""

from collections.abc import Iterable

import click

from gcontact_vcard.contacts.contact import Contact, DateType
from gcontact_vcard.contacts.group import ContactGroup

# Entries shown per group before truncating in list output
MAX_LISTED_VALUES = 2


def _values(contact: Contact, group: str) -> list[str]:
    values = []
    for entry in contact.get_entries(group):
        value = entry.get_attribute("value")
        if value:
            marker = "*" if entry.primary else ""
            values.append(f"{value}{marker}")
    return values


def _join(values: list[str], limit: int = MAX_LISTED_VALUES) -> str:
    text = ", ".join(values[:limit])
    if len(values) > limit:
        text += f" (+{len(values) - limit})"
    return text


def show_contact_table(contacts: Iterable[Contact], verbose: bool = False) -> int:
    """
    Print contacts as a table of name, email and phone.

    Args:
        contacts: Contacts to print
        verbose: Also print resource names

    Returns:
        Number of contacts printed
    """
    click.echo(f"{'Name':<32} {'Email':<36} {'Phone':<20}")
    click.echo("-" * 90)

    count = 0
    for contact in contacts:
        name = contact.display_name
        if contact.is_starred():
            name = f"{name} ★"
        email = _join(_values(contact, "emailAddresses"))
        phone = _join(_values(contact, "phoneNumbers"))
        click.echo(f"{name:<32} {email:<36} {phone:<20}")
        if verbose:
            click.echo(f"  {contact.resource_name}")
        count += 1

    click.echo()
    click.echo(f"Total: {count} contact(s)")
    return count


def show_contact_detail(
    contact: Contact, group_names: dict[str, str] | None = None
) -> None:
    """
    Print all populated fields of a contact.

    Args:
        contact: Contact to print
        group_names: Group resource name to display name lookup for memberships
    """
    group_names = group_names or {}

    title = contact.display_name
    if contact.is_starred():
        title += " " + click.style("★ starred", fg="yellow")
    click.echo(click.style(title, bold=True))
    click.echo(f"  Resource: {contact.resource_name or '(new)'}")
    if contact.last_modified:
        click.echo(f"  Modified: {contact.last_modified.isoformat()}")

    for entry in contact.get_entries("organizations"):
        parts = [entry.title, entry.department, entry.name]
        click.echo(f"  Organization: {', '.join(p for p in parts if p)}")

    birthday = contact.get_date_of_birth(DateType.STRING)
    if birthday:
        click.echo(f"  Birthday: {birthday}")

    for group, label in (
        ("nicknames", "Nickname"),
        ("occupations", "Occupation"),
        ("genders", "Gender"),
    ):
        for entry in contact.get_entries(group):
            if entry.value:
                click.echo(f"  {label}: {entry.value}")

    for group, label in (
        ("emailAddresses", "Email"),
        ("phoneNumbers", "Phone"),
        ("urls", "URL"),
    ):
        for entry in contact.get_entries(group):
            if not entry.value:
                continue
            line = f"  {label}: {entry.value}"
            if entry.type:
                line += f" ({entry.type})"
            if entry.primary:
                line += " [primary]"
            click.echo(line)

    for entry in contact.get_entries("addresses"):
        parts = [
            entry.street_address,
            entry.extended_address,
            entry.po_box,
            " ".join(p for p in (entry.postal_code, entry.city) if p),
            entry.region,
            entry.country or entry.country_code,
        ]
        line = f"  Address: {', '.join(p for p in parts if p)}"
        if entry.type:
            line += f" ({entry.type})"
        if entry.primary:
            line += " [primary]"
        click.echo(line)

    for entry in contact.get_entries("biographies"):
        if entry.value:
            click.echo(f"  Note: {entry.value}")

    memberships = [
        group_names.get(resource, resource)
        for resource in contact.group_resource_names()
    ]
    if memberships:
        click.echo(f"  Groups: {', '.join(sorted(memberships))}")

    for entry in contact.get_entries("photos"):
        if entry.url and not entry.default:
            click.echo(f"  Photo: {entry.url}")


def show_group_table(groups: list[ContactGroup], verbose: bool = False) -> None:
    """Print contact groups sorted by name."""
    click.echo(f"{'Name':<40} {'Type':<20} {'Members':<10}")
    click.echo("-" * 70)

    ordered = sorted(groups, key=lambda g: g.display_name.lower())
    for group in ordered:
        group_type = "User" if group.is_user_group() else "System"
        name = group.display_name
        click.echo(f"{name:<40} {group_type:<20} {group.member_count:<10}")

    click.echo()
    click.echo(f"Total: {len(groups)} group(s)")

    if verbose:
        click.echo()
        click.echo("Resource names:")
        for group in ordered:
            click.echo(f"  {group.display_name}: {group.resource_name}")
