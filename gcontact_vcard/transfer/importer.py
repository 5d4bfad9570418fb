"""
vCard import into Google Contacts.

A run reads a vCard file, resolves CATEGORIES to contact groups (creating
missing ones), optionally tags every contact with a run-specific import
group, then creates the contacts one at a time and uploads each photo right
after its contact. The first failure aborts the run; contacts created
before it are kept.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from gcontact_vcard.api.groups_api import ContactGroupsAPI
from gcontact_vcard.api.people_api import PeopleAPI
from gcontact_vcard.errors import NotFoundError, ParseError
from gcontact_vcard.mapping.vcard_in import contact_from_vcard, read_vcards

# strftime format of the default import group name
DEFAULT_IMPORT_GROUP_FORMAT = "VCard Import %d.%m.%Y %H:%M"

logger = logging.getLogger(__name__)


@dataclass
class ImportOptions:
    """
    Options of a vCard import run.

    Attributes:
        create_import_group: Add every imported contact to a new group
        import_group_name: Name of that group (default: date based name)
        starred_category: Category that stars the contact instead of
            naming a group ("" to treat it like any other category)
        encoding: Encoding of the vCard file
    """

    create_import_group: bool = False
    import_group_name: str = ""
    starred_category: str = ""
    encoding: str = "utf-8"


class VCardImporter:
    """
    Imports vCard files as new contacts.

    The counters are kept after a failed run so callers can report how far
    the import got.

    Attributes:
        import_count: Number of contacts created in the last run
        last_resource_name: Resource name of the last created contact
        created_resource_names: All contacts created in the last run
        import_group_resource_name: Import group created in the last run

    Usage:
        importer = VCardImporter(people_api, groups_api,
                                 ImportOptions(create_import_group=True))
        try:
            importer.import_file("contacts.vcf")
        finally:
            print(f"{importer.import_count} contacts imported")
    """

    def __init__(
        self,
        people_api: PeopleAPI,
        groups_api: ContactGroupsAPI,
        options: ImportOptions | None = None,
    ):
        self.people_api = people_api
        self.groups_api = groups_api
        self.options = options or ImportOptions()
        self._reset()

    def _reset(self) -> None:
        self.import_count = 0
        self.last_resource_name = ""
        self.created_resource_names: list[str] = []
        self.import_group_resource_name = ""
        self._group_ids: dict[str, str] = {}

    def import_file(self, path: str | Path) -> int:
        """
        Import all cards of a vCard file.

        Returns:
            Number of contacts created

        Raises:
            NotFoundError: If the file does not exist
            ParseError: If the file holds no readable vCard
        """
        file_path = Path(path).expanduser()
        try:
            text = file_path.read_text(encoding=self.options.encoding)
        except FileNotFoundError as e:
            raise NotFoundError(f"vCard file not found: {file_path}") from e
        except UnicodeDecodeError as e:
            raise ParseError(f"Cannot decode {file_path}: {e}") from e
        logger.info(f"Importing vCards from {file_path}")
        return self.import_text(text)

    def import_text(self, text: str) -> int:
        """
        Import all cards of a vCard text.

        Returns:
            Number of contacts created

        Raises:
            ParseError: If the text holds no readable vCard
            GContactVCardError: The first conversion, create or photo failure
        """
        self._reset()
        cards = list(read_vcards(text))
        if not cards:
            raise ParseError("No vCard found in input")

        self._load_groups()
        if self.options.create_import_group:
            self._create_import_group()

        try:
            for card in cards:
                self._import_card(card)
        except Exception:
            logger.error(
                f"Import aborted after {self.import_count} of {len(cards)} contacts "
                f"(last created: {self.last_resource_name or 'none'})"
            )
            raise

        logger.info(f"Imported {self.import_count} contacts")
        return self.import_count

    def _load_groups(self) -> None:
        names = self.groups_api.group_names()
        self._group_ids = {name: resource for resource, name in names.items()}
        logger.debug(f"Loaded {len(self._group_ids)} contact groups")

    def _create_import_group(self) -> None:
        name = self.options.import_group_name or datetime.now().strftime(
            DEFAULT_IMPORT_GROUP_FORMAT
        )
        group = self.groups_api.create_group(name)
        self.import_group_resource_name = group.resource_name
        self._group_ids[name] = group.resource_name
        logger.info(f"Created import group '{name}' ({group.resource_name})")

    def _resolve_group(self, name: str) -> str:
        resource_name = self._group_ids.get(name)
        if not resource_name:
            resource_name = self.groups_api.create_group(name).resource_name
            self._group_ids[name] = resource_name
            logger.info(f"Created contact group '{name}' for imported category")
        return resource_name

    def _import_card(self, card: Any) -> None:
        parsed = contact_from_vcard(card)
        contact = parsed.contact

        starred = False
        starred_category = self.options.starred_category
        for category in parsed.categories:
            if starred_category and category == starred_category:
                starred = True
                continue
            contact.add_membership(self._resolve_group(category))
        if self.import_group_resource_name:
            contact.add_membership(self.import_group_resource_name)

        created = self.people_api.create_contact(contact)
        self.import_count += 1
        self.last_resource_name = created.resource_name
        self.created_resource_names.append(created.resource_name)
        logger.debug(f"Imported {contact.display_name} as {created.resource_name}")

        if parsed.photo_data:
            self.people_api.set_photo_bytes(created.resource_name, parsed.photo_data)
        elif parsed.photo_url:
            self.people_api.set_photo(created.resource_name, parsed.photo_url)
        if starred:
            self.people_api.set_starred(created.resource_name, True)
