"""
vCard -> Contact mapping.

Reads vCard text with vobject and converts each card into a Contact:
- N/FN to names, ORG/TITLE to organizations, ROLE to occupations
- TEL/ADR/EMAIL/URL with type mapping and PREF -> primary entry
- NICKNAME, NOTE, BDAY and GENDER

Categories and photos cannot be stored on the contact before its groups
are resolved and it has been created, so they are returned alongside the
contact in a ParsedCard.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

import vobject
from vobject.base import ParseError as VObjectParseError

from gcontact_vcard.contacts.contact import Contact
from gcontact_vcard.contacts.fields import (
    GENDER_FEMALE,
    GENDER_MALE,
    GENDER_UNSPECIFIED,
    TYPE_HOME,
    TYPE_MOBILE,
    TYPE_OTHER,
    TYPE_WORK,
    Address,
    Biography,
    Birthday,
    EmailAddress,
    Gender,
    Name,
    Nickname,
    Occupation,
    Organization,
    PhoneNumber,
    Url,
)
from gcontact_vcard.contacts.photo import decode_data_uri
from gcontact_vcard.errors import ParseError, UnsupportedMediaTypeError, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class ParsedCard:
    """
    A contact read from a vCard plus the parts applied after creation.

    Attributes:
        contact: Contact built from the card
        categories: Group names from CATEGORIES, in card order
        photo_data: Inline photo data, if the card embeds one
        photo_url: Photo URL, if the card references one
    """

    contact: Contact
    categories: list[str] = field(default_factory=list)
    photo_data: bytes | None = None
    photo_url: str = ""


def read_vcards(text: str) -> Iterator[Any]:
    """
    Iterate over the vCard components of a text.

    Raises:
        ParseError: If the text is not valid vCard data
    """
    try:
        for component in vobject.readComponents(text, ignoreUnreadable=True):
            if component.name.upper() != "VCARD":
                logger.debug(f"Skipping {component.name} component")
                continue
            yield component
    except (VObjectParseError, UnicodeDecodeError) as e:
        raise ParseError(f"Invalid vCard data: {e}") from e


def parse_vcards(text: str) -> list[ParsedCard]:
    """Parse every card of a vCard text."""
    return [contact_from_vcard(card) for card in read_vcards(text)]


def contact_from_vcard(card: Any) -> ParsedCard:
    """
    Convert a vobject vCard component to a Contact.

    Args:
        card: vobject VCARD component

    Returns:
        ParsedCard with the contact, categories and photo

    Raises:
        ValidationError: If the card has neither N nor FN
    """
    contact = Contact()

    _read_name(card, contact)
    _read_organization(card, contact)
    _read_simple(card, "nickname", contact, "nicknames", Nickname)
    _read_simple(card, "note", contact, "biographies", Biography)
    _read_simple(card, "role", contact, "occupations", Occupation)
    _read_birthday(card, contact)
    _read_gender(card, contact)
    _read_addresses(card, contact)
    _read_phones(card, contact)
    _read_emails(card, contact)
    _read_urls(card, contact)

    parsed = ParsedCard(contact=contact, categories=_read_categories(card))
    _read_photo(card, parsed)

    logger.debug(f"Parsed vCard for {contact.display_name}")
    return parsed


def _lines(card: Any, name: str) -> list[Any]:
    return list(card.contents.get(name, []))


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(str(v) for v in value if v).strip()
    return str(value).strip()


def _type_tokens(line: Any) -> set[str]:
    """Collect TYPE parameter values, including vCard 2.1 bare parameters."""
    tokens: set[str] = set()
    for value in line.params.get("TYPE", []):
        tokens.update(t.strip().upper() for t in str(value).split(",") if t.strip())
    tokens.update(str(p).upper() for p in line.singletonparams)
    return tokens


def _has_token(tokens: set[str], marker: str) -> bool:
    # Vendor tokens such as X-HOME or HOME-FAX still carry the marker
    return any(marker in token for token in tokens)


def _is_preferred(line: Any) -> bool:
    return "PREF" in _type_tokens(line) or "PREF" in line.params


def _read_name(card: Any, contact: Contact) -> None:
    n_lines = _lines(card, "n")
    fn_lines = _lines(card, "fn")

    if n_lines:
        value = n_lines[0].value
        name = Name(
            family_name=_text(getattr(value, "family", "")),
            given_name=_text(getattr(value, "given", "")),
            middle_name=_text(getattr(value, "additional", "")),
            honorific_prefix=_text(getattr(value, "prefix", "")),
            honorific_suffix=_text(getattr(value, "suffix", "")),
        )
        if not name.is_empty():
            contact.add_entry("names", name)
            return

    if fn_lines and _text(fn_lines[0].value):
        contact.add_entry("names", Name(unstructured_name=_text(fn_lines[0].value)))
        return

    raise ValidationError("vCard has neither N nor FN")


def _read_organization(card: Any, contact: Contact) -> None:
    org_lines = _lines(card, "org")
    title_lines = _lines(card, "title")
    if not org_lines and not title_lines:
        return

    organization = Organization()
    if org_lines:
        value = org_lines[0].value
        parts = list(value) if isinstance(value, (list, tuple)) else [value]
        organization.name = _text(parts[0]) if parts else ""
        if len(parts) > 1:
            organization.department = _text(parts[1:])
    if title_lines:
        organization.title = _text(title_lines[0].value)
    contact.add_entry("organizations", organization)


def _read_simple(
    card: Any, prop: str, contact: Contact, group: str, entry_type: type
) -> None:
    for line in _lines(card, prop):
        value = _text(line.value)
        if value:
            contact.add_entry(group, entry_type(value=value))


def _read_birthday(card: Any, contact: Contact) -> None:
    bday_lines = _lines(card, "bday")
    if not bday_lines:
        return
    value = _text(bday_lines[0].value)
    if not value:
        return
    try:
        contact.set_date_of_birth(value)
    except ValidationError:
        logger.warning(f"Keeping unparseable birthday as text: {value}")
        contact.add_entry("birthdays", Birthday(text=value))


def _read_gender(card: Any, contact: Contact) -> None:
    gender_lines = _lines(card, "gender")
    if not gender_lines:
        return
    sex = _text(gender_lines[0].value).split(";", 1)[0].strip().upper()
    value = {"M": GENDER_MALE, "F": GENDER_FEMALE}.get(sex, GENDER_UNSPECIFIED)
    contact.add_entry("genders", Gender(value=value))


def _read_addresses(card: Any, contact: Contact) -> None:
    preferred = -1
    for line in _lines(card, "adr"):
        value = line.value
        tokens = _type_tokens(line)
        if _has_token(tokens, "HOME"):
            address_type = TYPE_HOME
        elif _has_token(tokens, "WORK"):
            address_type = TYPE_WORK
        else:
            address_type = TYPE_OTHER

        address = Address(
            type=address_type,
            street_address=_text(getattr(value, "street", "")),
            extended_address=_text(getattr(value, "extended", "")),
            po_box=_text(getattr(value, "box", "")),
            postal_code=_text(getattr(value, "code", "")),
            city=_text(getattr(value, "city", "")),
            region=_text(getattr(value, "region", "")),
        )
        country = _text(getattr(value, "country", ""))
        if len(country) == 2:
            address.country_code = country.upper()
        else:
            address.country = country

        contact.add_entry("addresses", address)
        if preferred < 0 and _is_preferred(line):
            preferred = len(contact.field_groups["addresses"]) - 1

    if preferred >= 0:
        contact.set_primary_item("addresses", preferred)


def _read_phones(card: Any, contact: Contact) -> None:
    preferred = -1
    for line in _lines(card, "tel"):
        number = _text(line.value)
        if not number:
            continue
        tokens = _type_tokens(line)
        if _has_token(tokens, "HOME"):
            phone_type = TYPE_HOME
        elif _has_token(tokens, "CELL"):
            phone_type = TYPE_MOBILE
        elif _has_token(tokens, "WORK"):
            phone_type = TYPE_WORK
        else:
            phone_type = TYPE_OTHER

        contact.add_entry("phoneNumbers", PhoneNumber(value=number, type=phone_type))
        if preferred < 0 and _is_preferred(line):
            preferred = len(contact.field_groups["phoneNumbers"]) - 1

    if preferred >= 0:
        contact.set_primary_item("phoneNumbers", preferred)


def _read_emails(card: Any, contact: Contact) -> None:
    preferred = -1
    for line in _lines(card, "email"):
        address = _text(line.value)
        if not address:
            continue
        contact.add_entry(
            "emailAddresses", EmailAddress(value=address, type=TYPE_OTHER)
        )
        if preferred < 0 and _is_preferred(line):
            preferred = len(contact.field_groups["emailAddresses"]) - 1

    if preferred >= 0:
        contact.set_primary_item("emailAddresses", preferred)


def _read_urls(card: Any, contact: Contact) -> None:
    for line in _lines(card, "url"):
        url = _text(line.value)
        if url:
            contact.add_entry("urls", Url(value=url, type=TYPE_OTHER))


def _read_categories(card: Any) -> list[str]:
    categories: list[str] = []
    for line in _lines(card, "categories"):
        values = line.value if isinstance(line.value, (list, tuple)) else [line.value]
        for value in values:
            for name in str(value).split(","):
                name = name.strip()
                if name and name not in categories:
                    categories.append(name)
    return categories


def _read_photo(card: Any, parsed: ParsedCard) -> None:
    photo_lines = _lines(card, "photo")
    if not photo_lines:
        return
    line = photo_lines[0]
    value = line.value

    if isinstance(value, bytes):
        parsed.photo_data = value
        return

    text = str(value).strip()
    if text.startswith(("http://", "https://")):
        parsed.photo_url = text
    elif text.startswith("data:"):
        try:
            parsed.photo_data = decode_data_uri(text)
        except UnsupportedMediaTypeError as e:
            logger.warning(f"Ignoring photo of {parsed.contact.display_name}: {e}")
    elif text:
        logger.warning(
            f"Ignoring unsupported photo reference of {parsed.contact.display_name}"
        )
