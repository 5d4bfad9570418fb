"""
Contact data model for the Google People API.

Provides the Contact record used by every other module, with support for:
- Creating empty templates and hydrating from API responses or JSON text
- Field groups holding typed entries, with at most one primary per group
- Display name resolution with organization fallback
- Group membership and the starred flag
- Birthday conversion between strings, timestamps and date objects
- Converting back to People API format for create/update operations
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any

from gcontact_vcard.contacts.fields import (
    FIELD_GROUPS,
    READ_ONLY_GROUPS,
    Birthday,
    FieldEntry,
    Membership,
    entry_type_for,
)
from gcontact_vcard.contacts.group import STARRED_GROUP
from gcontact_vcard.errors import ParseError, ValidationError

# Field groups requested when a single contact is read or edited
DETAIL_PERSON_FIELDS = (
    "names",
    "organizations",
    "nicknames",
    "birthdays",
    "photos",
    "addresses",
    "emailAddresses",
    "phoneNumbers",
    "genders",
    "memberships",
    "biographies",
    "urls",
    "occupations",
)

# Field groups requested when listing contacts
LIST_PERSON_FIELDS = (
    "names",
    "organizations",
    "nicknames",
    "birthdays",
    "addresses",
    "emailAddresses",
    "phoneNumbers",
    "memberships",
)

# Shown when neither a name nor an organization is set
UNSET_DISPLAY_NAME = "[unset]"

SOURCE_TYPE_CONTACT = "CONTACT"

# Top-level person keys that are not field groups
_IDENTITY_KEYS = frozenset({"resourceName", "etag", "metadata"})

logger = logging.getLogger(__name__)


class DateType(Enum):
    """Representation returned by Contact.get_date_of_birth()."""

    STRING = "string"
    TIMESTAMP = "timestamp"
    OBJECT = "object"


@dataclass
class SourceMetadata:
    """
    Metadata of the contact's own source entry.

    Attributes:
        type: Source type (CONTACT for entries in the user's contacts)
        id: Source id assigned by Google
        etag: Source etag
        update_time: Last modification time reported by the API
    """

    type: str = SOURCE_TYPE_CONTACT
    id: str = ""
    etag: str = ""
    update_time: datetime | None = None

    @classmethod
    def from_api_response(cls, metadata: dict[str, Any]) -> SourceMetadata:
        sources = metadata.get("sources") or []
        if not sources:
            return cls()
        source = next(
            (s for s in sources if s.get("type") == SOURCE_TYPE_CONTACT), sources[0]
        )

        update_time = None
        raw_time = source.get("updateTime")
        if raw_time:
            try:
                update_time = datetime.fromisoformat(raw_time.replace("Z", "+00:00"))
            except (ValueError, TypeError):
                logger.debug(f"Ignoring unparseable updateTime: {raw_time}")

        return cls(
            type=source.get("type", SOURCE_TYPE_CONTACT),
            id=source.get("id", ""),
            etag=source.get("etag", ""),
            update_time=update_time,
        )

    def to_api_format(self) -> dict[str, Any]:
        source: dict[str, Any] = {"type": self.type}
        if self.id:
            source["id"] = self.id
        if self.etag:
            source["etag"] = self.etag
        return {"sources": [source]}


@dataclass
class Contact:
    """
    A Google contact made of field groups holding typed entries.

    Attributes:
        resource_name: Google's unique ID (e.g., "people/c12345"), empty
            until the contact has been created
        etag: Person etag, used as optimistic concurrency token on update
        source: Metadata of the contact's source entry
        field_groups: Ordered mapping of group name to its entries

    Usage:
        # New contact with one blank entry per group
        contact = Contact.create_empty()

        # Hydrate from the API
        contact = Contact.from_api_response(person)

        # Edit and mark the second phone number as primary
        contact.field_groups["phoneNumbers"][1].value = "+49 30 1234"
        contact.set_primary_item("phoneNumbers", 1)

        # Back to API format
        body = contact.to_api_format()
    """

    resource_name: str = ""
    etag: str = ""
    source: SourceMetadata = field(default_factory=SourceMetadata)
    field_groups: dict[str, list[FieldEntry]] = field(default_factory=dict)

    @classmethod
    def create_empty(
        cls, field_groups: Iterable[str] = DETAIL_PERSON_FIELDS
    ) -> Contact:
        """
        Create a template contact with one empty entry per field group.

        Args:
            field_groups: Groups to include (defaults to DETAIL_PERSON_FIELDS)

        Returns:
            New Contact without resource name or etag
        """
        builder = ContactBuilder()
        for group in field_groups:
            builder.add_empty_entry(group)
        return builder.build()

    @classmethod
    def from_api_response(
        cls, person: dict[str, Any], field_groups: Iterable[str] | None = None
    ) -> Contact:
        """
        Create a Contact from a Google People API person.

        Args:
            person: Person dictionary as returned by the API
            field_groups: Groups that must exist on the result; any group
                missing from the response becomes an empty list

        Returns:
            Contact populated from the response

        Example API response structure::

            {
                'resourceName': 'people/c12345',
                'etag': '%EgUBAi43PRoEAQIFByIMR0xyN...',
                'names': [{'displayName': 'John Doe', 'givenName': 'John'}],
                'phoneNumbers': [
                    {'value': '+1234567890', 'type': 'mobile',
                     'metadata': {'primary': True}}
                ],
                'memberships': [
                    {'contactGroupMembership':
                        {'contactGroupResourceName': 'contactGroups/myContacts'}}
                ],
                'metadata': {'sources': [{'type': 'CONTACT', 'id': '3f0a'}]}
            }
        """
        builder = ContactBuilder().with_identity(
            person.get("resourceName", ""), person.get("etag", "")
        )
        metadata = person.get("metadata") or {}
        builder.with_source(SourceMetadata.from_api_response(metadata))

        for key, values in person.items():
            if key in _IDENTITY_KEYS:
                continue
            if key not in FIELD_GROUPS:
                logger.warning(f"Dropping unsupported field group '{key}'")
                continue
            builder.add_group(key)
            entry_type = FIELD_GROUPS[key]
            for value in values or []:
                builder.add_entry(key, entry_type.from_api(value))

        for group in field_groups or ():
            builder.add_group(group)

        return builder.build()

    @classmethod
    def from_json(cls, text: str, field_groups: Iterable[str] | None = None) -> Contact:
        """
        Create a Contact from JSON text in People API format.

        Raises:
            ParseError: If the text is not valid JSON or not a JSON object
        """
        try:
            person = json.loads(text)
        except (json.JSONDecodeError, TypeError) as e:
            raise ParseError(f"Invalid contact JSON: {e}") from e
        if not isinstance(person, dict):
            raise ParseError("Contact JSON must be an object")
        return cls.from_api_response(person, field_groups)

    # ========== Field groups ==========

    def get_entries(self, group: str) -> list[FieldEntry]:
        """Return the entries of a group (an empty list if not present)."""
        entry_type_for(group)
        return self.field_groups.get(group, [])

    def add_entry(self, group: str, entry: FieldEntry | None = None) -> FieldEntry:
        """
        Append an entry to a group, creating an empty one if none is given.

        Raises:
            ValidationError: If the group is unknown or the entry type
                does not match the group
        """
        entry_type = entry_type_for(group)
        if entry is None:
            entry = entry_type()
        elif not isinstance(entry, entry_type):
            raise ValidationError(
                f"Entry of type {type(entry).__name__} cannot be added to '{group}'"
            )
        self.field_groups.setdefault(group, []).append(entry)
        return entry

    # ========== Display ==========

    @property
    def display_name(self) -> str:
        names = self.field_groups.get("names") or []
        if names and names[0].display_name:
            return str(names[0].display_name)
        organizations = self.field_groups.get("organizations") or []
        if organizations and organizations[0].name:
            return str(organizations[0].name)
        return UNSET_DISPLAY_NAME

    def get_display_name(self) -> str:
        """
        Resolve the name to show for this contact.

        Returns:
            names[0].displayName, else organizations[0].name, else "[unset]"
        """
        return self.display_name

    @property
    def last_modified(self) -> datetime | None:
        return self.source.update_time

    # ========== Memberships ==========

    def belongs_to_group(self, group_resource_name: str) -> bool:
        return any(
            m.contact_group_resource_name == group_resource_name
            for m in self.field_groups.get("memberships", [])
        )

    def is_starred(self) -> bool:
        """Check whether the contact is a member of the starred system group."""
        return self.belongs_to_group(STARRED_GROUP)

    def add_membership(self, group_resource_name: str) -> None:
        if not self.belongs_to_group(group_resource_name):
            self.add_entry(
                "memberships",
                Membership(contact_group_resource_name=group_resource_name),
            )

    def remove_membership(self, group_resource_name: str) -> None:
        memberships = self.field_groups.get("memberships", [])
        self.field_groups["memberships"] = [
            m
            for m in memberships
            if m.contact_group_resource_name != group_resource_name
        ]

    def group_resource_names(self) -> list[str]:
        return [
            m.contact_group_resource_name
            for m in self.field_groups.get("memberships", [])
            if m.contact_group_resource_name
        ]

    # ========== Primary items ==========

    def set_primary_item(self, group: str, index: int) -> None:
        """
        Mark one entry of a group as primary and clear all of its siblings.

        Args:
            group: Field group name (e.g., "phoneNumbers")
            index: Position of the entry to mark

        Raises:
            ValidationError: If the group is unknown
            IndexError: If the index is out of range for a non-empty group

        Note:
            Calling this on a group without entries is a no-op.
        """
        entries = self.get_entries(group)
        if not entries:
            return
        if index < 0 or index >= len(entries):
            raise IndexError(
                f"Primary index {index} out of range for '{group}' "
                f"({len(entries)} entries)"
            )
        for i, entry in enumerate(entries):
            entry.primary = i == index

    def get_primary_item_index(self, group: str) -> int:
        """Return the index of the primary entry of a group, or -1."""
        for i, entry in enumerate(self.get_entries(group)):
            if entry.primary:
                return i
        return -1

    def is_primary_item(self, entry: FieldEntry) -> bool:
        return entry.primary

    # ========== Birthday ==========

    def set_date_of_birth(self, value: str | int | date | None) -> None:
        """
        Set the birthday from a string, unix timestamp or date.

        Strings may be ISO dates ("1980-05-17"), compact dates ("19800517"),
        ISO datetimes or "--MM-DD" for a birthday without year. Timestamps
        are converted in local time; non-positive timestamps are ignored.
        An empty value clears the birthday.

        Raises:
            ValidationError: If a string cannot be parsed as a date
        """
        if value is None or value == "":
            self.field_groups["birthdays"] = []
            return

        year: int | None
        if isinstance(value, datetime):
            year, month, day = value.year, value.month, value.day
        elif isinstance(value, date):
            year, month, day = value.year, value.month, value.day
        elif isinstance(value, int):
            if value <= 0:
                logger.debug(f"Ignoring non-positive birthday timestamp: {value}")
                return
            parsed = datetime.fromtimestamp(value)
            year, month, day = parsed.year, parsed.month, parsed.day
        else:
            year, month, day = _parse_date_string(str(value))

        birthdays = self.field_groups.setdefault("birthdays", [])
        if not birthdays:
            birthdays.append(Birthday())
        birthday = birthdays[0]
        birthday.year, birthday.month, birthday.day = year, month, day

    def get_date_of_birth(
        self, mode: DateType = DateType.STRING, fmt: str = "%Y-%m-%d"
    ) -> str | int | date | None:
        """
        Get the birthday in the requested representation.

        Args:
            mode: DateType.STRING, DateType.TIMESTAMP or DateType.OBJECT
            fmt: strftime format used in STRING mode

        Returns:
            Formatted string, unix timestamp of local midnight, or a date.
            Without a birthday: "", 0 or None. A birthday without year
            yields "--MM-DD", 0 or None.
        """
        birthday = next(
            (b for b in self.field_groups.get("birthdays", []) if b.month and b.day),
            None,
        )
        if birthday is None or not birthday.year:
            if mode is DateType.STRING:
                if birthday is None:
                    return ""
                return f"--{birthday.month:02d}-{birthday.day:02d}"
            return 0 if mode is DateType.TIMESTAMP else None

        value = date(birthday.year, birthday.month, birthday.day)
        if mode is DateType.OBJECT:
            return value
        if mode is DateType.TIMESTAMP:
            return int(datetime(value.year, value.month, value.day).timestamp())
        return value.strftime(fmt)

    # ========== Metadata ==========

    def set_metadata(self, source_type: str, source_id: str, etag: str) -> None:
        """Overwrite the contact's source metadata."""
        self.source = SourceMetadata(type=source_type, id=source_id, etag=etag)

    # ========== Serialization ==========

    def to_api_format(
        self, field_groups: Iterable[str] | None = None
    ) -> dict[str, Any]:
        """
        Convert the Contact to People API format for create/update operations.

        Args:
            field_groups: Restrict output to these groups (default: all)

        Returns:
            Person dictionary

        Note:
            - Does not include resourceName or etag
            - Empty entries and read-only groups (photos, ...) are omitted
        """
        wanted = set(field_groups) if field_groups is not None else None
        person: dict[str, Any] = {}
        for group, entries in self.field_groups.items():
            if group in READ_ONLY_GROUPS:
                continue
            if wanted is not None and group not in wanted:
                continue
            values = [entry.to_api() for entry in entries if not entry.is_empty()]
            if values:
                person[group] = values
        return person

    def to_dict(self) -> dict[str, Any]:
        """Full person dictionary including identity and read-only groups."""
        person: dict[str, Any] = {}
        if self.resource_name:
            person["resourceName"] = self.resource_name
        if self.etag:
            person["etag"] = self.etag
        for group, entries in self.field_groups.items():
            person[group] = [e.to_api() for e in entries if not e.is_empty()]
        person["metadata"] = self.source.to_api_format()
        return person

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def __repr__(self) -> str:
        """Return a readable string representation."""
        return (
            f"Contact(resource_name={self.resource_name!r}, "
            f"display_name={self.display_name!r}, "
            f"groups={list(self.field_groups)!r})"
        )


class ContactBuilder:
    """
    Builds Contact records group by group.

    Used by Contact.create_empty() and Contact.from_api_response(); callers
    that assemble contacts from other encodings (vCard, forms) use it too.
    Unknown group names are rejected with ValidationError.
    """

    def __init__(self) -> None:
        self._resource_name = ""
        self._etag = ""
        self._source = SourceMetadata()
        self._groups: dict[str, list[FieldEntry]] = {}

    def with_identity(self, resource_name: str, etag: str = "") -> ContactBuilder:
        self._resource_name = resource_name
        self._etag = etag
        return self

    def with_source(self, source: SourceMetadata) -> ContactBuilder:
        self._source = source
        return self

    def add_group(self, group: str) -> ContactBuilder:
        entry_type_for(group)
        self._groups.setdefault(group, [])
        return self

    def add_entry(self, group: str, entry: FieldEntry) -> ContactBuilder:
        entry_type = entry_type_for(group)
        if not isinstance(entry, entry_type):
            raise ValidationError(
                f"Entry of type {type(entry).__name__} cannot be added to '{group}'"
            )
        self._groups.setdefault(group, []).append(entry)
        return self

    def add_empty_entry(self, group: str) -> ContactBuilder:
        return self.add_entry(group, entry_type_for(group)())

    def build(self) -> Contact:
        """
        Create the Contact.

        If several entries of one group are flagged primary, only the first
        keeps the flag.
        """
        for entries in self._groups.values():
            seen_primary = False
            for entry in entries:
                if entry.primary:
                    if seen_primary:
                        entry.primary = False
                    seen_primary = True

        return Contact(
            resource_name=self._resource_name,
            etag=self._etag,
            source=self._source,
            field_groups=self._groups,
        )


def _parse_date_string(value: str) -> tuple[int | None, int, int]:
    text = value.strip()
    if text.startswith("--"):
        try:
            # leap year so that --02-29 parses
            parsed = datetime.strptime("2000" + text[2:].replace("-", ""), "%Y%m%d")
        except ValueError as e:
            raise ValidationError(f"Invalid birthday: {value}") from e
        return None, parsed.month, parsed.day

    for parser in (
        date.fromisoformat,
        lambda s: datetime.fromisoformat(s.replace("Z", "+00:00")).date(),
        lambda s: datetime.strptime(s, "%Y%m%d").date(),
    ):
        try:
            parsed_date = parser(text)
        except ValueError:
            continue
        return parsed_date.year, parsed_date.month, parsed_date.day

    raise ValidationError(f"Invalid birthday: {value}")
