"""
gcontact_vcard.mapping - Contact encodings

Converts contacts to and from vCard text and the flat form encoding.
"""

from gcontact_vcard.mapping.form import contact_from_form, contact_to_form
from gcontact_vcard.mapping.vcard_in import (
    ParsedCard,
    contact_from_vcard,
    parse_vcards,
    read_vcards,
)
from gcontact_vcard.mapping.vcard_out import contact_to_vcard, write_vcards

__all__ = [
    "ParsedCard",
    "contact_from_form",
    "contact_from_vcard",
    "contact_to_form",
    "contact_to_vcard",
    "parse_vcards",
    "read_vcards",
    "write_vcards",
]
