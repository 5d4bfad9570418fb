"""
Flat form encoding of contacts.

A contact is encoded as string key/value pairs, one pair per attribute:
    <group>_<index>_<attribute>   e.g. phoneNumbers_1_value = "+49 30 1234"

Some keys are handled on their own:
    addresses / emailAddresses / phoneNumbers / urls   index of the primary entry
    birthday                                           ISO date of birth
    resourceName, etag                                 contact identity
    metadataType, metadataId, metadataEtag             source metadata

Keys that do not split into exactly three parts are ignored, as are keys
whose index is not a non-negative integer. Indexes only order the entries of
a group; gaps between them are closed, and primary selectors refer to the
submitted index.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from gcontact_vcard.contacts.contact import Contact, DateType
from gcontact_vcard.contacts.fields import (
    PRIMARY_SELECTABLE_GROUPS,
    FieldEntry,
    entry_type_for,
)

KEY_RESOURCE_NAME = "resourceName"
KEY_ETAG = "etag"
KEY_METADATA_TYPE = "metadataType"
KEY_METADATA_ID = "metadataId"
KEY_METADATA_ETAG = "metadataEtag"
KEY_BIRTHDAY = "birthday"

logger = logging.getLogger(__name__)


def contact_from_form(
    form: Mapping[str, str], field_groups: Iterable[str] = ()
) -> Contact:
    """
    Decode a contact from its form encoding.

    Args:
        form: Submitted key/value pairs
        field_groups: Groups that must exist on the result even when the
            form has no entries for them

    Returns:
        Decoded Contact

    Raises:
        ValidationError: For unknown groups or attributes
        IndexError: If a primary selector names an index the form has no
            entry for
    """
    contact = Contact()
    for group in field_groups:
        entry_type_for(group)
        contact.field_groups.setdefault(group, [])

    submitted: dict[str, dict[int, FieldEntry]] = {}
    for key, value in form.items():
        parts = key.split("_")
        if len(parts) != 3:
            continue
        group, raw_index, attribute = parts
        try:
            index = int(raw_index)
        except ValueError:
            logger.debug(f"Ignoring form key with invalid index: {key}")
            continue
        if index < 0:
            continue

        entry_type = entry_type_for(group)
        entries = submitted.setdefault(group, {})
        if index not in entries:
            entries[index] = entry_type()
        entries[index].set_attribute(attribute, value)

    positions: dict[str, dict[int, int]] = {}
    for group, entries in submitted.items():
        order = sorted(entries)
        contact.field_groups[group] = [entries[i] for i in order]
        positions[group] = {index: pos for pos, index in enumerate(order)}

    for group in PRIMARY_SELECTABLE_GROUPS:
        selected = form.get(group)
        if selected is None or selected == "":
            continue
        try:
            index = int(selected)
        except ValueError:
            logger.debug(f"Ignoring invalid primary selection for {group}: {selected}")
            continue
        slots = positions.get(group, {})
        if index in slots:
            contact.set_primary_item(group, slots[index])
        elif slots:
            raise IndexError(
                f"Primary index {index} out of range for '{group}' "
                f"(indexes {sorted(slots)})"
            )

    if form.get(KEY_BIRTHDAY):
        contact.set_date_of_birth(form[KEY_BIRTHDAY])

    contact.resource_name = form.get(KEY_RESOURCE_NAME, "")
    contact.etag = form.get(KEY_ETAG, "")
    if any(k in form for k in (KEY_METADATA_TYPE, KEY_METADATA_ID, KEY_METADATA_ETAG)):
        contact.set_metadata(
            form.get(KEY_METADATA_TYPE, "") or contact.source.type,
            form.get(KEY_METADATA_ID, ""),
            form.get(KEY_METADATA_ETAG, ""),
        )

    return contact


def contact_to_form(contact: Contact) -> dict[str, str]:
    """Encode a contact into its flat form representation."""
    form: dict[str, str] = {
        KEY_RESOURCE_NAME: contact.resource_name,
        KEY_ETAG: contact.etag,
        KEY_METADATA_TYPE: contact.source.type,
        KEY_METADATA_ID: contact.source.id,
        KEY_METADATA_ETAG: contact.source.etag,
    }

    for group, entries in contact.field_groups.items():
        for index, entry in enumerate(entries):
            for attribute in entry.api_attributes():
                value = entry.get_attribute(attribute)
                key = f"{group}_{index}_{attribute}"
                form[key] = "" if value is None else str(value)

    for group in PRIMARY_SELECTABLE_GROUPS:
        index = contact.get_primary_item_index(group)
        if index >= 0:
            form[group] = str(index)

    birthday = contact.get_date_of_birth(DateType.STRING)
    if birthday:
        form[KEY_BIRTHDAY] = str(birthday)

    return form
