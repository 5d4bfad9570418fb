"""
vCard export from Google Contacts.

The export scope is chosen by a resource name:
- "" exports every contact
- "contactGroups/..." exports the members of that group
- anything else is a single contact

Group names are loaded once per run to turn memberships into CATEGORIES.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from gcontact_vcard.api.groups_api import GROUP_TYPE_ALL, ContactGroupsAPI
from gcontact_vcard.api.people_api import PeopleAPI
from gcontact_vcard.contacts.contact import DETAIL_PERSON_FIELDS, Contact
from gcontact_vcard.contacts.group import (
    GROUP_TYPE_USER_CONTACT_GROUP,
    is_group_resource_name,
)
from gcontact_vcard.contacts.photo import download_photo
from gcontact_vcard.errors import ValidationError
from gcontact_vcard.mapping.vcard_out import contact_to_vcard, write_vcards

DEFAULT_CHARSET = "UTF-8"

logger = logging.getLogger(__name__)


@dataclass
class ExportOptions:
    """
    Options of a vCard export run.

    Attributes:
        map_groups_to_category: Write group memberships as CATEGORIES
        map_system_groups: Include system groups (myContacts, ...) in CATEGORIES
        export_photo: Embed contact photos
        use_default_photo: Export the generated placeholder photo too
        starred_category: Category written for starred contacts
        charset: Encoding of the written file
    """

    map_groups_to_category: bool = True
    map_system_groups: bool = False
    export_photo: bool = True
    use_default_photo: bool = False
    starred_category: str = ""
    charset: str = DEFAULT_CHARSET


class VCardExporter:
    """
    Exports contacts as vCard 3.0 text.

    Attributes:
        export_count: Number of contacts written by the last run
        skipped: Display names of contacts skipped in the last run

    Usage:
        exporter = VCardExporter(people_api, groups_api)
        text = exporter.export("contactGroups/family")
        exporter.export_to_file("all.vcf")
    """

    def __init__(
        self,
        people_api: PeopleAPI,
        groups_api: ContactGroupsAPI,
        options: ExportOptions | None = None,
        photo_loader: Callable[[str], bytes] = download_photo,
    ):
        self.people_api = people_api
        self.groups_api = groups_api
        self.options = options or ExportOptions()
        self.photo_loader = photo_loader
        self.export_count = 0
        self.skipped: list[str] = []

    def export(self, resource_name: str = "") -> str:
        """
        Export contacts as vCard text.

        Args:
            resource_name: "" for all contacts, a group resource name for its
                members, or a contact resource name

        Returns:
            Concatenated vCard text

        Raises:
            ValidationError: If a single requested contact cannot be converted
            RemoteApiError: If groups or contacts cannot be loaded
        """
        self.export_count = 0
        self.skipped = []

        group_names = self._load_group_names()
        single = bool(resource_name) and not is_group_resource_name(resource_name)

        if single:
            contacts = [self.people_api.get_contact(resource_name)]
        else:
            contacts = self.people_api.list_contacts(
                group_resource_name=resource_name,
                field_groups=DETAIL_PERSON_FIELDS,
            )

        cards: list[Any] = []
        for contact in contacts:
            try:
                cards.append(self._convert(contact, group_names))
            except ValidationError as e:
                if single:
                    raise
                logger.warning(f"Skipping {contact.display_name}: {e}")
                self.skipped.append(contact.display_name)

        self.export_count = len(cards)
        logger.info(
            f"Exported {self.export_count} contacts"
            + (f" ({len(self.skipped)} skipped)" if self.skipped else "")
        )
        return write_vcards(cards)

    def export_to_file(self, path: str | Path, resource_name: str = "") -> int:
        """
        Export contacts into a file using the configured charset.

        Returns:
            Number of contacts written
        """
        text = self.export(resource_name)
        file_path = Path(path).expanduser()
        file_path.write_text(text, encoding=self.options.charset, errors="replace")
        logger.info(f"Wrote {self.export_count} contacts to {file_path}")
        return self.export_count

    def _load_group_names(self) -> dict[str, str]:
        if not self.options.map_groups_to_category:
            return {}
        group_type = (
            GROUP_TYPE_ALL
            if self.options.map_system_groups
            else GROUP_TYPE_USER_CONTACT_GROUP
        )
        return self.groups_api.group_names(group_type)

    def _convert(self, contact: Contact, group_names: dict[str, str]) -> Any:
        return contact_to_vcard(
            contact,
            group_names=group_names,
            starred_category=(
                self.options.starred_category
                if self.options.map_groups_to_category
                else ""
            ),
            export_photo=self.options.export_photo,
            use_default_photo=self.options.use_default_photo,
            photo_loader=self.photo_loader,
        )
