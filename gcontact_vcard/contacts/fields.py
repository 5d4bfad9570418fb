"""
Typed entries for the field groups of a Google People API person.

Each field group of a person (names, phoneNumbers, addresses, ...) holds a
list of entries. This module provides one dataclass per group with:
- A mapping between Python attribute names and People API attribute names
- Conversion to and from the People API dictionary format
- Generic attribute access by API name (used by the form encoding)
- A primary flag kept in sync with the entry's field metadata

The FIELD_GROUPS registry maps each People API group name to its entry
type; group names outside the registry are rejected at the boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, ClassVar

from gcontact_vcard.errors import ValidationError

# Groups that cannot be written through updateContact
READ_ONLY_GROUPS = frozenset({"photos", "coverPhotos", "ageRanges", "metadata"})

# Address / phone / email / url type values used by the People API
TYPE_HOME = "home"
TYPE_WORK = "work"
TYPE_MOBILE = "mobile"
TYPE_OTHER = "other"

GENDER_MALE = "male"
GENDER_FEMALE = "female"
GENDER_UNSPECIFIED = "unspecified"


def api_field(api_name: str, default: Any = "") -> Any:
    """Declare a dataclass field backed by a People API attribute."""
    return field(default=default, metadata={"api": api_name})


@dataclass
class FieldEntry:
    """
    Base class for a single entry of a person field group.

    Subclasses declare their attributes with api_field(); the primary flag
    is shared by all entries and stored in the entry's field metadata on
    the wire.
    """

    group: ClassVar[str] = ""

    primary: bool = field(default=False, kw_only=True)

    @classmethod
    def api_attributes(cls) -> dict[str, str]:
        """Return the mapping of API attribute name to Python attribute name."""
        return {f.metadata["api"]: f.name for f in fields(cls) if "api" in f.metadata}

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> FieldEntry:
        """
        Create an entry from its People API dictionary.

        Missing attributes keep their defaults. The primary flag is read from
        either metadata.primary or metadata.sourcePrimary.
        """
        values = {}
        for api_name, attr in cls.api_attributes().items():
            if api_name in data and data[api_name] is not None:
                values[attr] = data[api_name]
        return cls(**values, primary=_read_primary(data))

    def to_api(self) -> dict[str, Any]:
        """
        Convert the entry to People API format.

        Empty attributes are omitted. A primary entry carries
        metadata.sourcePrimary.
        """
        data: dict[str, Any] = {}
        for api_name, attr in self.api_attributes().items():
            value = getattr(self, attr)
            if value not in ("", None, False):
                data[api_name] = value
        if self.primary:
            data["metadata"] = {"sourcePrimary": True}
        return data

    def get_attribute(self, api_name: str) -> Any:
        """Get an attribute by its People API name."""
        attrs = self.api_attributes()
        if api_name not in attrs:
            raise ValidationError(
                f"Unknown attribute '{api_name}' for field group '{self.group}'"
            )
        return getattr(self, attrs[api_name])

    def set_attribute(self, api_name: str, value: Any) -> None:
        """
        Set an attribute by its People API name.

        Raises:
            ValidationError: If the attribute does not belong to this group
        """
        attrs = self.api_attributes()
        if api_name not in attrs:
            raise ValidationError(
                f"Unknown attribute '{api_name}' for field group '{self.group}'"
            )
        if isinstance(getattr(self, attrs[api_name]), bool) and isinstance(value, str):
            value = value.strip().lower() in ("1", "true", "yes", "on")
        setattr(self, attrs[api_name], value)

    def is_empty(self) -> bool:
        """Check whether every attribute of the entry is unset."""
        return all(
            getattr(self, attr) in ("", None, False)
            for attr in self.api_attributes().values()
        )


def _read_primary(data: dict[str, Any]) -> bool:
    metadata = data.get("metadata") or {}
    return bool(metadata.get("primary") or metadata.get("sourcePrimary"))


@dataclass
class Name(FieldEntry):
    group: ClassVar[str] = "names"

    display_name: str = api_field("displayName")
    family_name: str = api_field("familyName")
    given_name: str = api_field("givenName")
    middle_name: str = api_field("middleName")
    honorific_prefix: str = api_field("honorificPrefix")
    honorific_suffix: str = api_field("honorificSuffix")
    unstructured_name: str = api_field("unstructuredName")


@dataclass
class Nickname(FieldEntry):
    group: ClassVar[str] = "nicknames"

    value: str = api_field("value")


@dataclass
class Organization(FieldEntry):
    group: ClassVar[str] = "organizations"

    name: str = api_field("name")
    title: str = api_field("title")
    department: str = api_field("department")


@dataclass
class Occupation(FieldEntry):
    group: ClassVar[str] = "occupations"

    value: str = api_field("value")


@dataclass
class Biography(FieldEntry):
    group: ClassVar[str] = "biographies"

    value: str = api_field("value")


@dataclass
class Gender(FieldEntry):
    group: ClassVar[str] = "genders"

    value: str = api_field("value")


@dataclass
class Address(FieldEntry):
    group: ClassVar[str] = "addresses"

    type: str = api_field("type")
    street_address: str = api_field("streetAddress")
    extended_address: str = api_field("extendedAddress")
    po_box: str = api_field("poBox")
    postal_code: str = api_field("postalCode")
    city: str = api_field("city")
    region: str = api_field("region")
    country: str = api_field("country")
    country_code: str = api_field("countryCode")


@dataclass
class EmailAddress(FieldEntry):
    group: ClassVar[str] = "emailAddresses"

    value: str = api_field("value")
    type: str = api_field("type")


@dataclass
class PhoneNumber(FieldEntry):
    group: ClassVar[str] = "phoneNumbers"

    value: str = api_field("value")
    type: str = api_field("type")


@dataclass
class Url(FieldEntry):
    group: ClassVar[str] = "urls"

    value: str = api_field("value")
    type: str = api_field("type")


@dataclass
class Photo(FieldEntry):
    """A contact photo; default is True for the generated placeholder."""

    group: ClassVar[str] = "photos"

    url: str = api_field("url")
    default: bool = api_field("default", False)


@dataclass
class Birthday(FieldEntry):
    """
    A birthday, stored as structured date parts.

    The People API nests the parts under "date"; year may be missing for
    birthdays recorded without a year. The free text form is kept as-is.
    """

    group: ClassVar[str] = "birthdays"

    year: int | None = None
    month: int | None = None
    day: int | None = None
    text: str = api_field("text")

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Birthday:
        date = data.get("date") or {}
        return cls(
            year=date.get("year") or None,
            month=date.get("month") or None,
            day=date.get("day") or None,
            text=data.get("text", ""),
            primary=_read_primary(data),
        )

    def to_api(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.month and self.day:
            date = {"month": self.month, "day": self.day}
            if self.year:
                date["year"] = self.year
            data["date"] = date
        if self.text:
            data["text"] = self.text
        if self.primary:
            data["metadata"] = {"sourcePrimary": True}
        return data

    @classmethod
    def api_attributes(cls) -> dict[str, str]:
        return {"text": "text"}

    def is_empty(self) -> bool:
        return not (self.month and self.day) and not self.text


@dataclass
class Membership(FieldEntry):
    """Membership of the contact in a contact group."""

    group: ClassVar[str] = "memberships"

    contact_group_resource_name: str = api_field("contactGroupResourceName")

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Membership:
        membership = data.get("contactGroupMembership") or {}
        resource_name = membership.get("contactGroupResourceName", "")
        if not resource_name and membership.get("contactGroupId"):
            resource_name = f"contactGroups/{membership['contactGroupId']}"
        return cls(
            contact_group_resource_name=resource_name, primary=_read_primary(data)
        )

    def to_api(self) -> dict[str, Any]:
        if not self.contact_group_resource_name:
            return {}
        return {
            "contactGroupMembership": {
                "contactGroupResourceName": self.contact_group_resource_name
            }
        }


# Registry of all supported field groups, in People API naming
FIELD_GROUPS: dict[str, type[FieldEntry]] = {
    entry_type.group: entry_type
    for entry_type in (
        Name,
        Nickname,
        Organization,
        Occupation,
        Biography,
        Birthday,
        Gender,
        Address,
        EmailAddress,
        PhoneNumber,
        Url,
        Photo,
        Membership,
    )
}

# Groups that can carry a primary selection in the form encoding
PRIMARY_SELECTABLE_GROUPS = ("addresses", "emailAddresses", "phoneNumbers", "urls")


def entry_type_for(group: str) -> type[FieldEntry]:
    """
    Look up the entry type of a field group.

    Raises:
        ValidationError: If the group is not a supported field group
    """
    try:
        return FIELD_GROUPS[group]
    except KeyError:
        raise ValidationError(f"Unknown field group: {group}") from None


def is_known_group(group: str) -> bool:
    return group in FIELD_GROUPS
