"""
gcontact_vcard.contacts - Contact and group data models

Contains the Contact record, its typed field entries, contact groups and
photo helpers.
"""

from gcontact_vcard.contacts.contact import (
    DETAIL_PERSON_FIELDS,
    LIST_PERSON_FIELDS,
    Contact,
    ContactBuilder,
    DateType,
    SourceMetadata,
)
from gcontact_vcard.contacts.fields import FIELD_GROUPS, FieldEntry
from gcontact_vcard.contacts.group import STARRED_GROUP, ContactGroup

__all__ = [
    "Contact",
    "ContactBuilder",
    "ContactGroup",
    "DateType",
    "DETAIL_PERSON_FIELDS",
    "FIELD_GROUPS",
    "FieldEntry",
    "LIST_PERSON_FIELDS",
    "SourceMetadata",
    "STARRED_GROUP",
]
